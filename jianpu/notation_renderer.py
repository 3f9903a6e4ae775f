"""Primitive generation for notes, rests and tuplets."""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Final

from jianpu.beam_merger import BeamMerger
from jianpu.render_items import ArcItem, BoundingBox, ClearItem, CurveItem, DotItem, LineItem, RenderItem, TextItem
from jianpu.render_models import RenderContext, RenderNotation, RenderState
from jianpu.row_planner import (
    RowContext,
    accidental_width,
    dot_width,
    note_width,
    ornaments_width,
    tie_count,
)
from jianpu.sheet_models import Note, Pitch, Rest, Slur, Tuplet
from jianpu.timeline import QUARTER, ignores_dot, notation_ticks, underline_count

ACCIDENTAL_GLYPHS: Final[dict[int, str]] = {-2: "𝄫", -1: "♭", 0: "", 1: "♯", 2: "𝄪"}
NATURAL_GLYPH: Final[str] = "♮"
REST_GLYPH: Final[str] = "0"


class PitchHistory:
    """Pitches placed in the current measure, most recent first."""

    def __init__(self) -> None:
        self._pitches: list[Pitch] = []

    def __len__(self) -> int:
        return len(self._pitches)

    def find(self, pitch: Pitch) -> Pitch | None:
        """Most recent pitch with the same scale degree and octave."""
        for previous in self._pitches:
            if previous.base == pitch.base and previous.octave == pitch.octave:
                return previous
        return None

    def remember(self, pitch: Pitch) -> None:
        self._pitches.insert(0, pitch)

    def reset(self) -> None:
        self._pitches = []


class MeasureState:
    """State that lives for one measure: accidental memory and pending beams."""

    def __init__(self) -> None:
        self.pitches = PitchHistory()
        self.beams = BeamMerger()

    def reset(self) -> None:
        self.pitches.reset()
        self.beams.reset()


def accidental_glyph(pitch: Pitch, previous: Pitch | None) -> str:
    """
    The accidental to print in front of ``pitch``.

    An accidental carries through the measure: repeating the same pitch with
    the same accidental prints nothing, and returning to the unaltered pitch
    after an altered one prints a natural.
    """
    if previous is None:
        return ACCIDENTAL_GLYPHS[pitch.accidental]
    if previous.accidental == pitch.accidental:
        return ""
    if previous.accidental != 0 and pitch.accidental == 0:
        return NATURAL_GLYPH
    return ACCIDENTAL_GLYPHS[pitch.accidental]


def build_pitch(
    pitch: Pitch,
    scale: float,
    x: float,
    y: float,
    history: PitchHistory,
    ctx: RenderContext,
    bottom_padding: float,
) -> list[RenderItem]:
    """
    Draw a scale degree with its accidental and octave dots.

    Args:
        pitch:          The pitch to draw.
        scale:          Glyph scale relative to the font size (ornaments use 0.5).
        x:              Horizontal center of the digit.
        y:              Top of the digit.
        history:        Accidental memory consulted for this pitch (not updated).
        ctx:            Page constants.
        bottom_padding: Room left for underlines before low-octave dots start.
    """
    size = ctx.font_size * scale
    items: list[RenderItem] = [TextItem(x=x, y=y, text=str(pitch.base), size=size, align="center")]

    glyph = accidental_glyph(pitch, history.find(pitch))
    if glyph:
        items.append(TextItem(x=x - size * 0.25, y=y - size * 0.25, text=glyph, size=size * 0.75, align="right"))

    direction = -1 if pitch.octave > 0 else 1
    if direction == 1:
        y = y + (size + bottom_padding) * scale
    for i in range(abs(pitch.octave)):
        items.append(DotItem(x=x, y=y + (0.2 + i * 0.25) * direction * size, size=ctx.dot_size * scale))

    return items


def underline_y(ctx: RenderContext, y: float, level: int) -> float:
    return math.ceil(y + ctx.notation_margin + ctx.font_size + level * ctx.line_width * 2 + ctx.line_width)


def _add_underlines(ctx: RenderContext, state: RenderState, measure: MeasureState, denominator: int) -> int:
    """Queue the underlines of a note or rest with the beam merger; return how many."""
    count = underline_count(denominator)
    reach = note_width(ctx, denominator) / 4
    for level in range(count):
        y = underline_y(ctx, state.y, level)
        line = LineItem(x=state.x - reach, y=y, to_x=state.x + reach, to_y=y, width=ctx.line_width)
        measure.beams.add(line, state.notation_index)
    return count


def _add_ties(ctx: RenderContext, state: RenderState, row: RowContext, denominator: int) -> list[RenderItem]:
    """Dashes that extend whole and half values to their full length."""
    ties: list[RenderItem] = []
    for _ in range(tie_count(denominator)):
        state.x += row.margin / 2
        y = state.y + ctx.font_size * 0.7
        ties.append(
            LineItem(
                x=state.x + ctx.font_size * 0.25,
                y=y,
                to_x=state.x + ctx.font_size * 0.75,
                to_y=y,
                width=ctx.line_width * 2,
            )
        )
        state.x += note_width(ctx, denominator) + row.margin / 2
    return ties


def _slur_top(ctx: RenderContext, state: RenderState, octave: int) -> float:
    """Height of a slur end, clear of any high-octave dots."""
    return state.y - 0.25 * ctx.font_size * max(octave, 0)


def render_note(
    ctx: RenderContext,
    state: RenderState,
    row: RowContext,
    measure: MeasureState,
    item: RenderNotation,
    note: Note,
) -> None:
    half = note_width(ctx, note.denominator) / 2
    owned: list[RenderItem] = []

    state.x += half + row.margin / 2

    if note.ornaments:
        step = ctx.font_size * 0.25
        scratch = PitchHistory()
        for i, ornament in enumerate(note.ornaments):
            owned.extend(build_pitch(ornament, 0.5, state.x + i * step, state.y, scratch, ctx, 0))

        bracket_y = state.y + ctx.font_size * 0.55
        owned.append(
            LineItem(
                x=state.x - step / 2,
                y=bracket_y,
                to_x=state.x + step * (len(note.ornaments) - 1) + step / 2,
                to_y=bracket_y,
                width=ctx.line_width / 2,
            )
        )
        owned.append(
            ArcItem(
                x=state.x + ctx.font_size * (0.25 * (len(note.ornaments) - 1) + 0.5),
                y=state.y + ctx.font_size * 0.5,
                r=ctx.font_size / 3,
                angle=(math.pi * 0.5, math.pi),
                width=ctx.line_width,
            )
        )
        state.x += ornaments_width(ctx, len(note.ornaments))

    if note.pitch.accidental != 0:
        state.x += accidental_width(ctx)

    lines = _add_underlines(ctx, state, measure, note.denominator)

    top = state.y + ctx.notation_margin
    owned.extend(build_pitch(note.pitch, 1, state.x, top, measure.pitches, ctx, lines * (ctx.line_width + 1)))
    measure.pitches.remember(note.pitch)
    item.box = BoundingBox(x1=state.x - half, y1=top, x2=state.x + half, y2=top + ctx.font_size)

    if note.slur is Slur.START:
        state.slurs.start(
            state.x, _slur_top(ctx, state, note.pitch.octave), state.row_index, state.notation_index, state.diagnostics
        )
    elif note.slur is Slur.END:
        curves = state.slurs.end(
            state.x, _slur_top(ctx, state, note.pitch.octave), state.row_index, state.notation_index, state.diagnostics
        )
        state.items.extend(curves)

    state.x += half + row.margin / 2

    if note.dotted and note.denominator >= QUARTER:
        state.x += row.margin / 2
        owned.append(
            DotItem(
                x=state.x + ctx.font_size * 0.25 - ctx.dot_size / 2,
                y=state.y + ctx.font_size * 0.75,
                size=ctx.dot_size,
            )
        )
        state.x += dot_width(ctx) + row.margin / 2

    owned.extend(_add_ties(ctx, state, row, note.denominator))

    item.render_items = owned
    state.items.extend(owned)


def render_rest(
    ctx: RenderContext,
    state: RenderState,
    row: RowContext,
    measure: MeasureState,
    item: RenderNotation,
    rest: Rest,
) -> None:
    half = note_width(ctx, rest.denominator) / 2

    state.x += half + row.margin / 2
    top = state.y + ctx.notation_margin
    owned: list[RenderItem] = [TextItem(x=state.x, y=top, text=REST_GLYPH, size=ctx.font_size, align="center")]
    item.box = BoundingBox(x1=state.x - half, y1=top, x2=state.x + half, y2=top + ctx.font_size)

    _add_underlines(ctx, state, measure, rest.denominator)
    state.x += half + row.margin / 2

    owned.extend(_add_ties(ctx, state, row, rest.denominator))

    item.render_items = owned
    state.items.extend(owned)


def render_tuplet(
    ctx: RenderContext,
    state: RenderState,
    row: RowContext,
    measure: MeasureState,
    item: RenderNotation,
    tuplet: Tuplet,
) -> None:
    """
    Draw a tuplet group: its digits, its own underlines, a bracket curve and
    the pitch count in a gap at the top of the bracket.
    """
    half = note_width(ctx, tuplet.denominator * 2) / 2
    lines = underline_count(tuplet.denominator * 2)
    top = state.y + ctx.notation_margin
    owned: list[RenderItem] = []

    local_x = state.x + half + row.margin / 2
    line_start = local_x - half / 2
    box_x1 = local_x - half

    for i, pitch in enumerate(tuplet.pitches):
        owned.extend(build_pitch(pitch, 1, local_x, top, measure.pitches, ctx, lines * (ctx.line_width + 1)))
        measure.pitches.remember(pitch)
        if i < len(tuplet.pitches) - 1:
            local_x += half * 2 + row.margin

    line_end = local_x + half / 2
    local_x += half + row.margin / 2
    item.box = BoundingBox(x1=box_x1, y1=top, x2=local_x, y2=top + ctx.font_size)

    for level in range(lines):
        y = underline_y(ctx, state.y, level)
        owned.append(LineItem(x=line_start, y=y, to_x=line_end, to_y=y, width=ctx.line_width))

    bracket_y = _slur_top(ctx, state, max((p.octave for p in tuplet.pitches), default=0))
    owned.append(
        CurveItem(
            x=state.x,
            y=bracket_y,
            to_x=local_x,
            to_y=bracket_y,
            line_width=ctx.line_width,
            height=0.5 * ctx.line_height,
        )
    )
    owned.append(
        ClearItem(
            x=(state.x + local_x - ctx.font_size * 0.5) / 2,
            y=bracket_y - 0.75 * ctx.font_size,
            width=0.5 * ctx.font_size,
            height=0.5 * ctx.font_size,
        )
    )
    owned.append(
        TextItem(
            x=(state.x + local_x) / 2,
            y=bracket_y - 0.66 * ctx.font_size,
            text=str(len(tuplet.pitches)),
            size=0.5 * ctx.font_size,
            align="center",
        )
    )

    state.x = local_x
    item.render_items = owned
    state.items.extend(owned)


def render_notation(
    ctx: RenderContext,
    state: RenderState,
    row: RowContext,
    measure: MeasureState,
    item: RenderNotation,
) -> Fraction:
    """
    Lay out the notation at ``state.notation_index`` and return its length in ticks.

    Raises:
        TypeError: If ``item`` does not wrap a Note, Rest or Tuplet.
    """
    notation = item.notation
    if isinstance(notation, Note):
        if ignores_dot(notation):
            state.diagnostics.warning(state.notation_index, "a dot on a whole or half note is ignored")
        render_note(ctx, state, row, measure, item, notation)
    elif isinstance(notation, Rest):
        if ignores_dot(notation):
            state.diagnostics.warning(state.notation_index, "a dot on a rest is ignored")
        render_rest(ctx, state, row, measure, item, notation)
    elif isinstance(notation, Tuplet):
        render_tuplet(ctx, state, row, measure, item, notation)
    else:
        raise TypeError(f"Not a notation: {notation!r}")

    return notation_ticks(notation)
