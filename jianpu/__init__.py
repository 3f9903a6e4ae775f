"""Jianpu: numbered musical notation typesetter."""

__version__ = "0.1.0"
