"""Tick arithmetic for notations and time signatures.

One whole note lasts ``TICKS_PER_WHOLE`` ticks. Tick values are Fractions so
that very short and dotted durations stay exact.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Final

from jianpu.sheet_models import Beat, Notation, Note, Rest, Tuplet

TICKS_PER_WHOLE: Final[int] = 1024

#: Shortest denominator that still renders without underlines.
QUARTER: Final[int] = 4


def base_ticks(denominator: int) -> Fraction:
    """Length of an undotted value of ``denominator``."""
    return Fraction(TICKS_PER_WHOLE, denominator)


def ignores_dot(notation: Notation) -> bool:
    """True when the notation is dotted but the dot has no effect on its length."""
    if isinstance(notation, Note):
        return notation.dotted and notation.denominator < QUARTER
    if isinstance(notation, Rest):
        return notation.dotted
    return False


def notation_ticks(notation: Notation) -> Fraction:
    """
    Duration of a notation in ticks.

    A dot multiplies a note's length by 1.5, except on whole and half notes
    where it is ignored. Rests ignore their dot. A tuplet occupies exactly one
    value of its denominator regardless of how many pitches it holds.
    """
    ticks = base_ticks(notation.denominator)
    if isinstance(notation, Note) and notation.dotted and notation.denominator >= QUARTER:
        return ticks * Fraction(3, 2)
    if isinstance(notation, (Note, Rest, Tuplet)):
        return ticks
    raise TypeError(f"Not a notation: {notation!r}")


def underline_count(denominator: int) -> int:
    """
    Number of underlines (beams) drawn beneath a value of ``denominator``.

    8 -> 1, 16 -> 2, 32 -> 3, one more per halving; quarter and longer -> 0.
    """
    if denominator <= QUARTER:
        return 0
    return denominator.bit_length() - 3


@dataclass(frozen=True)
class Meter:
    """Measure and beat lengths derived from the active time signature."""

    measure_ticks: Fraction
    beat_ticks: Fraction

    @classmethod
    def from_beat(cls, beat: Beat) -> Meter:
        beat_ticks = base_ticks(beat.denominator)
        return cls(measure_ticks=beat_ticks * beat.numerator, beat_ticks=beat_ticks)
