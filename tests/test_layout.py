"""Tests for a full layout pass."""

import pytest

from jianpu.layout import SheetValidationError, hit_test, render
from jianpu.render_items import ArcItem, BeatItem, ClearItem, CurveItem, DotItem, LineItem, TextItem
from jianpu.render_models import RenderContext, RenderNotation, RenderSheet, pre_render_sheet
from jianpu.row_planner import note_width
from jianpu.sheet_models import Beat, Bpm, Info, Mode, Note, Notation, Options, Pitch, Rest, Slur, Sheet, Tuplet


def _sheet(notations: list[Notation], numerator: int = 4, denominator: int = 4) -> RenderSheet:
    return pre_render_sheet(
        Sheet(
            info=Info(title="Test"),
            modes=[Mode(notation=0, value=3)],
            beats=[Beat(notation=0, numerator=numerator, denominator=denominator)],
            notations=notations,
        )
    )


def _texts(item: RenderNotation) -> list[str]:
    return [i.text for i in item.render_items if isinstance(i, TextItem)]


def _center(sheet: RenderSheet, index: int) -> float:
    box = sheet.notations[index].box
    return (box.x1 + box.x2) / 2


def _curves(items: list) -> list[CurveItem]:
    return [i for i in items if isinstance(i, CurveItem)]


# ── Rows, bars and bounding boxes ──────────────────────────────────────────────

def test_one_measure_of_quarters_is_one_row_with_one_bar_line() -> None:
    sheet = _sheet([Note(pitch=Pitch(base)) for base in (1, 2, 3, 4)])
    result = render(sheet, Options())

    bar_lines = [i for i in result.items if isinstance(i, LineItem) and i.x == i.to_x]
    assert len(bar_lines) == 1
    assert result.logs == []

    boxes = result.notations
    assert len({box.y1 for box in boxes}) == 1
    assert all(a.x1 < b.x1 for a, b in zip(boxes, boxes[1:]))
    assert all(box.width == pytest.approx(boxes[0].width) for box in boxes)


def test_bar_line_follows_the_last_note_of_the_measure() -> None:
    sheet = _sheet([Note(pitch=Pitch(base)) for base in (1, 2, 3, 4)])
    result = render(sheet, Options())

    bar = next(i for i in result.items if isinstance(i, LineItem) and i.x == i.to_x)
    assert bar.x > result.notations[3].x2


def test_long_score_wraps_into_rows_inside_the_page() -> None:
    sheet = _sheet([Note(pitch=Pitch(i % 7 + 1)) for i in range(80)])
    options = Options()
    result = render(sheet, options)
    ctx = RenderContext.from_options(options)

    rows = sorted({box.y1 for box in result.notations})
    assert len(rows) > 1
    assert all(box.x2 <= ctx.right_edge + 1e-6 for box in result.notations)
    assert result.height > result.notations[-1].y2


@pytest.mark.parametrize("font_size", [20, 32])
def test_justified_rows_keep_bar_lines_inside_the_page(font_size: float) -> None:
    sheet = _sheet([Note(pitch=Pitch(i % 7 + 1)) for i in range(120)])
    options = Options(font_size=font_size)
    result = render(sheet, options)
    ctx = RenderContext.from_options(options)

    bar_lines = [i for i in result.items if isinstance(i, LineItem) and i.x == i.to_x]
    assert len(bar_lines) == 30
    assert all(bar.x + bar.width / 2 <= ctx.right_edge for bar in bar_lines)


def test_mode_change_inside_a_row_does_not_shift_the_row() -> None:
    sheet = _sheet([Note(pitch=Pitch(base)) for base in (1, 2, 3, 4)])
    sheet.modes[2] = Mode(notation=2, value=5)
    result = render(sheet, Options())
    assert len({box.y1 for box in result.notations}) == 1


def test_rendering_twice_rebuilds_each_notation() -> None:
    sheet = _sheet([Note(pitch=Pitch(base)) for base in (1, 2, 3, 4)])
    render(sheet, Options())
    first = list(sheet.notations[0].render_items)
    render(sheet, Options())
    assert sheet.notations[0].render_items == first


def test_hit_test_finds_the_notation_under_the_point() -> None:
    sheet = _sheet([Note(pitch=Pitch(base)) for base in (1, 2, 3, 4)])
    render(sheet, Options())
    box = sheet.notations[2].box

    assert hit_test(sheet, _center(sheet, 2), (box.y1 + box.y2) / 2) == 2
    assert hit_test(sheet, 0, 0) == -1


# ── Headers ────────────────────────────────────────────────────────────────────

def test_title_block_uses_each_info_field() -> None:
    sheet = pre_render_sheet(
        Sheet(
            info=Info(title="  Song  ", sub_title="Sub", artist="Artist", copyright="(c)"),
            modes=[Mode(notation=0, value=0)],
            beats=[Beat(notation=0, numerator=1, denominator=4)],
            notations=[Note(pitch=Pitch(1))],
        )
    )
    result = render(sheet, Options())
    texts = [i.text for i in result.items if isinstance(i, TextItem)]
    assert "Song" in texts
    assert "Sub" in texts
    assert "Artist" in texts
    assert "(c)" in texts


def test_key_time_and_tempo_marks_sit_above_the_row() -> None:
    sheet = pre_render_sheet(
        Sheet(
            modes=[Mode(notation=0, value=3)],
            beats=[Beat(notation=0, numerator=4, denominator=4)],
            bpms=[Bpm(notation=0, bpm=90)],
            notations=[Note(pitch=Pitch(base)) for base in (1, 2, 3, 4)],
        )
    )
    result = render(sheet, Options())
    texts = {i.text: i for i in result.items if isinstance(i, TextItem)}
    beat = next(i for i in result.items if isinstance(i, BeatItem))

    assert texts["1 = C"].y < texts["♩ = 90"].y < result.notations[0].y1
    assert (beat.numerator, beat.denominator) == ("4", "4")
    assert beat.x > texts["1 = C"].x


# ── Durations and diagnostics ──────────────────────────────────────────────────

def test_dotted_whole_note_logs_one_warning() -> None:
    sheet = _sheet([Note(pitch=Pitch(1), denominator=1, dotted=True)])
    result = render(sheet, Options())

    assert [(e.notation, e.severity.value) for e in result.logs] == [(0, "warning")]


def test_measure_overrun_is_an_error_but_layout_continues() -> None:
    sheet = _sheet(
        [
            Note(pitch=Pitch(1)),
            Note(pitch=Pitch(2)),
            Note(pitch=Pitch(3)),
            Note(pitch=Pitch(4), denominator=2),
            Note(pitch=Pitch(5), denominator=1),
        ]
    )
    result = render(sheet, Options())

    errors = [e for e in result.logs if e.severity.value == "error"]
    assert [e.notation for e in errors] == [3]
    assert "measure duration" in errors[0].message
    assert result.notations[4].x2 > result.notations[3].x2


def test_incomplete_final_measure_is_an_error() -> None:
    sheet = _sheet([Note(pitch=Pitch(1)), Note(pitch=Pitch(2))])
    result = render(sheet, Options())

    assert [(e.notation, e.severity.value) for e in result.logs] == [(1, "error")]
    assert "measure duration underrun" in result.logs[0].message
    assert "512 ticks" in result.logs[0].message


def test_time_signature_change_mid_measure_is_logged_and_applied() -> None:
    sheet = _sheet([Note(pitch=Pitch(i % 7 + 1)) for i in range(8)])
    sheet.beats[1] = Beat(notation=1, numerator=2, denominator=4)
    result = render(sheet, Options())

    assert [(e.notation, e.severity.value) for e in result.logs] == [(1, "error"), (1, "error")]
    assert "measure duration underrun" in result.logs[0].message
    assert "time signature change must start a measure" in result.logs[1].message
    bar_lines = [i for i in result.items if isinstance(i, LineItem) and i.x == i.to_x]
    assert len(bar_lines) == 4


def test_missing_opening_signatures_stop_the_pass() -> None:
    sheet = pre_render_sheet(Sheet(notations=[Note(pitch=Pitch(1))]))
    with pytest.raises(SheetValidationError) as excinfo:
        render(sheet, Options())
    assert len(excinfo.value.messages) == 2


# ── Beams ──────────────────────────────────────────────────────────────────────

def test_sixteenth_and_eighth_share_the_first_beam_only() -> None:
    sheet = _sheet([Note(pitch=Pitch(1), denominator=16), Note(pitch=Pitch(2), denominator=8)])
    options = Options()
    result = render(sheet, options)
    ctx = RenderContext.from_options(options)

    beams = [i for i in result.items if isinstance(i, LineItem) and i.notation is not None]
    levels = sorted({line.y for line in beams})
    assert len(levels) == 2

    upper = [line for line in beams if line.y == levels[0]]
    lower = [line for line in beams if line.y == levels[1]]
    assert len(upper) == 1
    assert upper[0].x == pytest.approx(_center(sheet, 0) - note_width(ctx, 16) / 4)
    assert upper[0].to_x == pytest.approx(_center(sheet, 1) + note_width(ctx, 8) / 4)
    assert len(lower) == 1
    assert lower[0].to_x == pytest.approx(_center(sheet, 0) + note_width(ctx, 16) / 4)


def test_beams_do_not_cross_a_beat() -> None:
    sheet = _sheet([Note(pitch=Pitch(base), denominator=8) for base in (1, 2, 3, 4, 5, 6, 7, 1)])
    result = render(sheet, Options())

    beams = [i for i in result.items if isinstance(i, LineItem) and i.notation is not None]
    assert sorted(line.notation for line in beams) == [0, 2, 4, 6]


def test_rests_are_underlined_like_notes() -> None:
    sheet = _sheet([Rest(denominator=8), Note(pitch=Pitch(1), denominator=8)])
    result = render(sheet, Options())

    beams = [i for i in result.items if isinstance(i, LineItem) and i.notation is not None]
    assert len(beams) == 1
    assert beams[0].notation == 0


# ── Note, rest and tuplet glyphs ───────────────────────────────────────────────

def test_whole_and_half_values_draw_extension_ties() -> None:
    sheet = _sheet([Note(pitch=Pitch(1), denominator=1), Note(pitch=Pitch(2), denominator=2), Rest(denominator=2)])
    render(sheet, Options())

    def ties(item: RenderNotation) -> int:
        return sum(1 for i in item.render_items if isinstance(i, LineItem) and i.y == i.to_y)

    assert [ties(item) for item in sheet.notations] == [3, 1, 1]


def test_dotted_quarter_draws_a_duration_dot() -> None:
    sheet = _sheet([Note(pitch=Pitch(1), dotted=True)])
    render(sheet, Options())
    item = sheet.notations[0]

    dots = [i for i in item.render_items if isinstance(i, DotItem)]
    assert len(dots) == 1
    assert dots[0].x > item.box.x2


def test_octave_dots_above_and_below() -> None:
    sheet = _sheet([Note(pitch=Pitch(3, octave=2)), Note(pitch=Pitch(3, octave=-1))])
    render(sheet, Options())
    high, low = sheet.notations

    high_dots = [i for i in high.render_items if isinstance(i, DotItem)]
    low_dots = [i for i in low.render_items if isinstance(i, DotItem)]
    assert len(high_dots) == 2
    assert all(dot.y < high.box.y1 for dot in high_dots)
    assert len(low_dots) == 1
    assert low_dots[0].y > low.box.y2


def test_rest_glyph_is_zero() -> None:
    sheet = _sheet([Rest()])
    render(sheet, Options())
    assert _texts(sheet.notations[0]) == ["0"]


def test_ornaments_are_drawn_small_with_an_arc() -> None:
    sheet = _sheet([Note(pitch=Pitch(1), ornaments=(Pitch(2), Pitch(3)))])
    render(sheet, Options())
    item = sheet.notations[0]

    small = [i for i in item.render_items if isinstance(i, TextItem) and i.size == 16]
    assert [i.text for i in small] == ["2", "3"]
    assert sum(1 for i in item.render_items if isinstance(i, ArcItem)) == 1
    assert all(i.x < _center(sheet, 0) for i in small)


def test_tuplet_draws_bracket_gap_and_count() -> None:
    sheet = _sheet([Tuplet(denominator=4, pitches=(Pitch(1), Pitch(2), Pitch(3)))] + [Note(pitch=Pitch(4))] * 3)
    result = render(sheet, Options())
    item = sheet.notations[0]

    assert _texts(item) == ["1", "2", "3", "3"]
    assert len(_curves(item.render_items)) == 1
    assert sum(1 for i in item.render_items if isinstance(i, ClearItem)) == 1
    assert sum(1 for i in item.render_items if isinstance(i, LineItem)) == 1
    assert not any(isinstance(i, LineItem) and i.notation is not None for i in result.items)
    assert result.logs == []


# ── Accidental memory ──────────────────────────────────────────────────────────

def test_repeated_accidental_in_one_measure_is_printed_once() -> None:
    sheet = _sheet([Note(pitch=Pitch(1, accidental=1)), Note(pitch=Pitch(1, accidental=1))], numerator=2)
    render(sheet, Options())
    assert "♯" in _texts(sheet.notations[0])
    assert "♯" not in _texts(sheet.notations[1])


def test_accidental_memory_resets_each_measure() -> None:
    sheet = _sheet([Note(pitch=Pitch(1, accidental=1)), Note(pitch=Pitch(1, accidental=1))], numerator=1)
    render(sheet, Options())
    assert "♯" in _texts(sheet.notations[0])
    assert "♯" in _texts(sheet.notations[1])


def test_return_to_unaltered_pitch_prints_a_natural() -> None:
    sheet = _sheet([Note(pitch=Pitch(1, accidental=-1)), Note(pitch=Pitch(1))], numerator=2)
    render(sheet, Options())
    assert "♭" in _texts(sheet.notations[0])
    assert "♮" in _texts(sheet.notations[1])


def test_accidental_memory_is_per_octave() -> None:
    sheet = _sheet([Note(pitch=Pitch(1, accidental=1)), Note(pitch=Pitch(1, accidental=1, octave=1))], numerator=2)
    render(sheet, Options())
    assert "♯" in _texts(sheet.notations[1])


# ── Slurs ──────────────────────────────────────────────────────────────────────

def test_slur_on_one_row_is_one_curve() -> None:
    sheet = _sheet(
        [
            Note(pitch=Pitch(1), slur=Slur.START),
            Note(pitch=Pitch(2)),
            Note(pitch=Pitch(3), slur=Slur.END),
            Note(pitch=Pitch(4)),
        ]
    )
    result = render(sheet, Options())

    curves = _curves(result.items)
    assert len(curves) == 1
    assert curves[0].x == pytest.approx(_center(sheet, 0))
    assert curves[0].to_x == pytest.approx(_center(sheet, 2))
    assert result.logs == []


def test_slur_across_rows_is_two_curves() -> None:
    sheet = _sheet(
        [
            Note(pitch=Pitch(1)),
            Note(pitch=Pitch(2), slur=Slur.START),
            Note(pitch=Pitch(3), slur=Slur.END),
            Note(pitch=Pitch(4)),
        ],
        numerator=2,
    )
    options = Options(width=300, padding_x=80)
    result = render(sheet, options)
    ctx = RenderContext.from_options(options)

    assert sheet.notations[2].box.y1 > sheet.notations[1].box.y1
    first, second = _curves(result.items)
    assert first.x == pytest.approx(_center(sheet, 1))
    assert first.to_x == pytest.approx(ctx.right_edge)
    assert second.x == pytest.approx(ctx.left_edge)
    assert second.to_x == pytest.approx(_center(sheet, 2))


def test_unclosed_slur_logs_an_error_and_draws_nothing() -> None:
    sheet = _sheet([Note(pitch=Pitch(1), slur=Slur.START)] + [Note(pitch=Pitch(2))] * 3)
    result = render(sheet, Options())

    assert _curves(result.items) == []
    assert [(e.notation, e.severity.value) for e in result.logs] == [(0, "error")]
