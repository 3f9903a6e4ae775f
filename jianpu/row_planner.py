"""Greedy, measure-aligned line breaking and horizontal justification."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from fractions import Fraction

from jianpu.render_models import RenderContext, RenderSheet
from jianpu.sheet_models import Note, Notation, Rest, Tuplet
from jianpu.timeline import Meter, notation_ticks


# ── Width estimates ─────────────────────────────────────────────────────────

def note_width(ctx: RenderContext, denominator: int) -> float:
    """Width of one note head; shorter values are packed tighter."""
    if denominator > 16:
        scale = 0.6
    elif denominator > 8:
        scale = 0.667
    elif denominator > 4:
        scale = 0.75
    else:
        scale = 1.0
    return ctx.font_size * 1.33 * scale


def bar_line_width(ctx: RenderContext) -> float:
    return ctx.line_width + ctx.font_size


def dot_width(ctx: RenderContext) -> float:
    return ctx.font_size * 0.666


def accidental_width(ctx: RenderContext) -> float:
    return ctx.font_size * 0.25


def ornaments_width(ctx: RenderContext, count: int) -> float:
    return ctx.font_size * 0.25 * (count + 1)


def tie_count(denominator: int) -> int:
    """Extension ties drawn after a whole (3) or half (1) value."""
    if denominator == 1:
        return 3
    if denominator == 2:
        return 1
    return 0


def measure_notation(ctx: RenderContext, notation: Notation) -> tuple[float, int]:
    """
    Estimate the width of a notation and how many stretchable items it holds.

    Stretchable items are note heads, extension ties and duration dots; each
    receives one justification margin when the row is laid out.
    """
    if isinstance(notation, Note):
        ties = tie_count(notation.denominator)
        width = note_width(ctx, notation.denominator) * (ties + 1)
        items = ties + 1
        if notation.dotted and not ties:
            width += dot_width(ctx)
            items += 1
        if notation.pitch.accidental != 0:
            width += accidental_width(ctx)
        if notation.ornaments:
            width += ornaments_width(ctx, len(notation.ornaments))
        return width, items
    if isinstance(notation, Rest):
        ties = tie_count(notation.denominator)
        return note_width(ctx, notation.denominator) * (ties + 1), ties + 1
    if isinstance(notation, Tuplet):
        count = len(notation.pitches)
        return note_width(ctx, notation.denominator * 2) * count, count
    raise TypeError(f"Not a notation: {notation!r}")


# ── Row planning ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RowContext:
    """
    The notations that make up one output row.

    Attributes:
        start_index:    First notation on the row.
        end_index:      Last notation on the row (inclusive).
        measure_count:  Measures closed within the row.
        used_width:     Estimated natural width of the row's content.
        margin:         Extra space handed to every stretchable item; 0 for an
                        unjustified (last or overfull) row.
        has_signature:  A mode or beat annotation falls within the row.
        has_tempo:      A tempo annotation falls within the row.
    """

    start_index: int
    end_index: int
    measure_count: int
    used_width: float
    margin: float
    has_signature: bool = False
    has_tempo: bool = False

    @property
    def vertical_margin(self) -> int:
        """Header lines reserved above the row."""
        return int(self.has_signature) + int(self.has_tempo)


def _finish_row(
    sheet: RenderSheet,
    start: int,
    end: int,
    measure_count: int,
    used_width: float,
    margin: float,
) -> RowContext:
    indices = range(start, end + 1)
    return RowContext(
        start_index=start,
        end_index=end,
        measure_count=measure_count,
        used_width=used_width,
        margin=margin,
        has_signature=any(i in sheet.modes or i in sheet.beats for i in indices),
        has_tempo=any(i in sheet.bpms for i in indices),
    )


def plan_row(sheet: RenderSheet, ctx: RenderContext, start: int, meter: Meter) -> RowContext:
    """
    Decide how many notations starting at ``start`` fit on one row.

    Rows only break after a notation that closes a measure. When a measure
    would overflow the usable width, the row ends at the last measure that
    fit. A first measure that is wider than the page on its own still gets
    the whole row, so every call makes progress.

    Args:
        sheet: The sheet being laid out.
        ctx:   Page constants.
        start: Index of the first notation not placed yet.
        meter: Time signature in force just before ``start``.
    """
    used_width = 0.0
    items = 0
    measure_count = 0
    timer = Fraction(0)
    committed: RowContext | None = None

    for i in range(start, len(sheet.notations)):
        if i in sheet.beats:
            meter = Meter.from_beat(sheet.beats[i])

        notation = sheet.notations[i].notation
        width, count = measure_notation(ctx, notation)
        used_width += width
        items += count

        if used_width > ctx.usable_width and committed is not None:
            logging.debug(f"row break after notation {committed.end_index}")
            return committed

        timer += notation_ticks(notation)
        if timer >= meter.measure_ticks:
            timer = Fraction(0)
            measure_count += 1
            items += 1
            # the closing bar line has to fit as well
            remaining = ctx.usable_width - used_width - bar_line_width(ctx)
            margin = remaining / (items + 0.5) if remaining > 0 else 0.0
            committed = _finish_row(sheet, start, i, measure_count, used_width, margin)
            used_width += bar_line_width(ctx)

    return _finish_row(sheet, start, len(sheet.notations) - 1, measure_count, used_width, 0.0)
