"""Layout pass: turns a RenderSheet into positioned drawing primitives."""

from __future__ import annotations

import logging
import math
from fractions import Fraction

from jianpu.notation_renderer import MeasureState, render_notation
from jianpu.render_items import BeatItem, LineItem, TextItem
from jianpu.render_models import RenderContext, RenderResult, RenderSheet, RenderState
from jianpu.row_planner import RowContext, bar_line_width, plan_row
from jianpu.sheet_models import Info, Options
from jianpu.slur_tracker import SlurTracker
from jianpu.timeline import Meter

TEMPO_GLYPH = "♩"


class SheetValidationError(ValueError):
    """The sheet is missing something every layout pass needs."""

    def __init__(self, messages: list[str]) -> None:
        super().__init__("; ".join(messages))
        self.messages = messages


def check_sheet(sheet: RenderSheet) -> list[str]:
    """Return the structural problems that prevent a layout pass."""
    messages = []
    if 0 not in sheet.modes:
        messages.append("the sheet has no key signature at its first notation")
    if 0 not in sheet.beats:
        messages.append("the sheet has no time signature at its first notation")
    return messages


def render(sheet: RenderSheet, options: Options) -> RenderResult:
    """
    Lay out a whole sheet.

    Per-notation ``render_items`` and ``box`` fields of ``sheet`` are rewritten
    in place, so two passes over the same sheet must not run at once.

    Raises:
        SheetValidationError: If the key or time signature at index 0 is missing.
    """
    messages = check_sheet(sheet)
    if messages:
        raise SheetValidationError(messages)

    ctx = RenderContext.from_options(options)
    state = RenderState(
        x=ctx.padding_x,
        y=ctx.padding_y,
        meter=Meter.from_beat(sheet.beats[0]),
        slurs=SlurTracker(
            left_edge=ctx.left_edge,
            right_edge=ctx.right_edge,
            line_width=ctx.line_width,
            height=0.5 * ctx.line_height,
        ),
    )
    for item in sheet.notations:
        item.reset()

    logging.debug(f"laying out {len(sheet.notations)} notations at width {ctx.width}")
    render_info(sheet.info, ctx, state)
    render_rows(sheet, ctx, state)
    state.slurs.finish(state.diagnostics)

    return RenderResult(
        width=ctx.width,
        height=state.y + ctx.padding_y,
        items=state.items,
        logs=list(state.diagnostics.entries),
        notations=[item.box for item in sheet.notations],
    )


def render_info(info: Info, ctx: RenderContext, state: RenderState) -> None:
    """Title block: centered title and subtitle, right-aligned artist and copyright."""
    center = ctx.padding_x + ctx.usable_width / 2
    if info.title:
        state.items.append(TextItem(x=center, y=state.y, text=info.title, size=ctx.font_size * 2, align="center"))
    state.y += ctx.font_size * 2

    if info.sub_title:
        state.y += ctx.line_padding / 2
        state.items.append(TextItem(x=center, y=state.y, text=info.sub_title, size=ctx.font_size, align="center"))
        state.y += ctx.font_size
    state.y += ctx.line_padding * 2

    right = ctx.padding_x + ctx.usable_width
    if info.artist:
        state.items.append(
            TextItem(x=right, y=state.y, text=info.artist, size=ctx.font_size * 0.75, align="right")
        )
    if info.copyright:
        state.items.append(
            TextItem(
                x=right,
                y=state.y + ctx.line_height,
                text=info.copyright,
                size=ctx.font_size * 0.75,
                align="right",
            )
        )


def render_annotations(
    sheet: RenderSheet,
    ctx: RenderContext,
    state: RenderState,
    row: RowContext,
    header_top: float,
    measure_start: bool,
) -> None:
    """
    Draw the key, time and tempo marks attached to the current notation in the
    header lines reserved above its row, and switch the meter on a time change.
    """
    index = state.notation_index
    signature_y = header_top
    tempo_y = header_top + (ctx.line_height if row.has_signature else 0)

    mode = sheet.modes.get(index)
    if mode is not None:
        state.items.append(
            TextItem(x=state.x, y=signature_y, text=f"1 = {mode.text}", size=ctx.font_size * 0.75, align="left")
        )

    beat = sheet.beats.get(index)
    if beat is not None:
        if not measure_start:
            state.diagnostics.error(index, "a time signature change must start a measure")
        state.meter = Meter.from_beat(beat)
        # next to the key signature when both change here
        x = state.x + ctx.font_size * 3 if mode is not None else state.x
        state.items.append(
            BeatItem(
                x=x,
                y=signature_y,
                numerator=str(beat.numerator),
                denominator=str(beat.denominator),
                font_size=ctx.font_size * 0.75,
                line_width=ctx.line_width,
            )
        )

    bpm = sheet.bpms.get(index)
    if bpm is not None:
        state.items.append(
            TextItem(x=state.x, y=tempo_y, text=f"{TEMPO_GLYPH} = {bpm.bpm}", size=ctx.font_size * 0.75, align="left")
        )


def render_bar_line(ctx: RenderContext, state: RenderState, row: RowContext) -> None:
    """Close the current measure with a bar line numbered after the next measure."""
    half = bar_line_width(ctx) / 2
    state.x += half + row.margin / 2
    state.items.append(
        LineItem(x=state.x, y=state.y, to_x=state.x, to_y=state.y + ctx.line_height, width=ctx.line_width)
    )
    state.items.append(
        TextItem(
            x=state.x,
            y=state.y - ctx.font_size * 0.666,
            text=str(state.measure_index + 2),
            size=ctx.font_size * 0.4,
            align="center",
        )
    )
    state.x += half + row.margin / 2


def render_rows(sheet: RenderSheet, ctx: RenderContext, state: RenderState) -> None:
    measure = MeasureState()
    timer = Fraction(0)
    beat_count = 0
    measure_start = True

    while state.notation_index < len(sheet.notations):
        row = plan_row(sheet, ctx, state.notation_index, state.meter)
        header_top = state.y
        state.y += row.vertical_margin * ctx.line_height

        for index in range(row.start_index, row.end_index + 1):
            state.notation_index = index
            if index in sheet.beats and timer > 0:
                state.diagnostics.error(
                    index,
                    f"measure duration underrun in measure {state.measure_index + 1}: "
                    f"{timer} ticks before the time signature change, expected {state.meter.measure_ticks}",
                )
            render_annotations(sheet, ctx, state, row, header_top, measure_start)
            timer += render_notation(ctx, state, row, measure, sheet.notations[index])

            current_beat = math.floor(timer / state.meter.beat_ticks)
            if current_beat > beat_count:
                beat_count = current_beat
                state.items.extend(measure.beams.flush())

            if timer >= state.meter.measure_ticks:
                if timer > state.meter.measure_ticks:
                    state.diagnostics.error(
                        index,
                        f"measure duration overrun in measure {state.measure_index + 1}: "
                        f"{timer} ticks, expected {state.meter.measure_ticks}",
                    )
                state.items.extend(measure.beams.flush())
                render_bar_line(ctx, state, row)
                state.measure_index += 1
                measure.reset()
                timer = Fraction(0)
                beat_count = 0
                measure_start = True
            else:
                measure_start = False

        # a trailing partial beat still gets its underlines
        state.items.extend(measure.beams.flush())

        state.notation_index = row.end_index + 1
        state.row_index += 1
        state.y += ctx.line_padding + ctx.line_height
        state.x = ctx.padding_x

    if timer > 0:
        state.diagnostics.error(
            len(sheet.notations) - 1,
            f"measure duration underrun in final measure {state.measure_index + 1}: "
            f"{timer} ticks, expected {state.meter.measure_ticks}",
        )


def hit_test(sheet: RenderSheet, x: float, y: float) -> int:
    """Index of the notation drawn under (x, y), or -1."""
    for index, item in enumerate(sheet.notations):
        if item.box.contains(x, y):
            return index
    return -1
