"""Structured error and warning log collected during a layout pass."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class LogEntry:
    """One diagnostic, keyed by the index of the notation that caused it."""

    notation: int
    severity: Severity
    message: str

    def __str__(self) -> str:
        return f"[{self.severity.value}] notation {self.notation}: {self.message}"


@dataclass
class Diagnostics:
    """
    Ordered sink for placement problems found while laying out a sheet.

    Nothing here aborts a pass; callers inspect ``has_errors`` afterwards and
    decide whether to treat errors as fatal. Each entry is also forwarded to
    the ``logging`` module.
    """

    entries: list[LogEntry] = field(default_factory=list)

    def error(self, notation: int, message: str) -> None:
        self.entries.append(LogEntry(notation, Severity.ERROR, message))
        logging.error(f"notation {notation}: {message}")

    def warning(self, notation: int, message: str) -> None:
        self.entries.append(LogEntry(notation, Severity.WARNING, message))
        logging.warning(f"notation {notation}: {message}")

    @property
    def errors(self) -> list[LogEntry]:
        return [e for e in self.entries if e.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[LogEntry]:
        return [e for e in self.entries if e.severity is Severity.WARNING]

    @property
    def has_errors(self) -> bool:
        return any(e.severity is Severity.ERROR for e in self.entries)
