"""Unit tests for the SVG painter and page renderers."""

import pytest

from jianpu.render_items import ArcItem, BeatItem, BoundingBox, ClearItem, CurveItem, DotItem, LineItem, TextItem
from jianpu.render_models import RenderNotation, RenderResult
from jianpu.sheet_models import Note, Pitch, SheetStyle
from jianpu.sheet_renderers import HtmlRenderer, SvgPainter, SvgRenderer

STYLE = SheetStyle(font="serif", fill_color="#333", background_color="#fffff0")


def _sample_result() -> RenderResult:
    return RenderResult(
        width=400,
        height=300,
        items=[
            TextItem(x=200, y=100, text="Demo", size=64, align="center"),
            LineItem(x=10, y=20, to_x=30, to_y=20, width=2),
        ],
        logs=[],
        notations=[],
    )


def test_text_alignment_maps_to_text_anchor() -> None:
    painter = SvgPainter()
    assert 'text-anchor="start"' in painter.paint(TextItem(x=0, y=0, text="1", size=10, align="left"), STYLE)
    assert 'text-anchor="middle"' in painter.paint(TextItem(x=0, y=0, text="1", size=10), STYLE)
    assert 'text-anchor="end"' in painter.paint(TextItem(x=0, y=0, text="♯", size=10, align="right"), STYLE)


def test_text_is_escaped() -> None:
    svg = SvgPainter().paint(TextItem(x=0, y=0, text="<a & b>", size=10), STYLE)
    assert "&lt;a &amp; b&gt;" in svg


def test_line_dot_and_clear() -> None:
    painter = SvgPainter()
    assert painter.paint(LineItem(x=1, y=2, to_x=3, to_y=4, width=2), STYLE) == (
        '<line x1="1" y1="2" x2="3" y2="4" stroke="#333" stroke-width="2" />'
    )
    assert painter.paint(DotItem(x=5, y=6, size=3), STYLE) == '<circle cx="5" cy="6" r="3" fill="#333" />'
    assert 'fill="#fffff0"' in painter.paint(ClearItem(x=0, y=0, width=10, height=10), STYLE)


def test_curve_bulges_upwards() -> None:
    svg = SvgPainter().paint(CurveItem(x=0, y=100, to_x=90, to_y=100, line_width=2, height=40), STYLE)
    assert 'd="M 0 100 C 30 70 60 70 90 100"' in svg


def test_arc_path_runs_clockwise_from_start_angle() -> None:
    svg = SvgPainter().paint(ArcItem(x=0, y=0, r=10, angle=(0, 3.141592653589793 / 2), width=1), STYLE)
    assert 'd="M 10 0 A 10 10 0 0 1 0 10"' in svg


def test_beat_glyph_draws_both_numbers_and_a_rule() -> None:
    svg = SvgPainter().paint(
        BeatItem(x=10, y=10, numerator="3", denominator="4", font_size=20, line_width=2), STYLE
    )
    assert svg.count("<text") == 2
    assert svg.count("<line") == 1
    assert ">3</text>" in svg
    assert ">4</text>" in svg


def test_highlight_color_overrides_fill() -> None:
    svg = SvgPainter().paint(DotItem(x=0, y=0, size=1), STYLE, color="#3471ff")
    assert 'fill="#3471ff"' in svg


def test_unknown_item_is_rejected() -> None:
    with pytest.raises(TypeError):
        SvgPainter().paint("not an item", STYLE)  # type: ignore[arg-type]


def test_paint_notation_erases_its_box_first() -> None:
    notation = RenderNotation(
        notation=Note(pitch=Pitch(1)),
        render_items=[TextItem(x=10, y=10, text="1", size=32)],
        box=BoundingBox(x1=0, y1=5, x2=20, y2=37),
    )
    svg = SvgPainter().paint_notation(notation, STYLE, color="#3471ff")
    assert svg.startswith('<rect x="0" y="5" width="20" height="32" fill="#fffff0" />')
    assert 'fill="#3471ff"' in svg


def test_svg_renderer_produces_a_sized_document() -> None:
    svg = SvgRenderer().render(title="Demo", result=_sample_result(), style=STYLE)
    assert svg.startswith("<svg")
    assert 'viewBox="0 0 400 300"' in svg
    assert "<title>Demo</title>" in svg
    assert svg.rstrip().endswith("</svg>")


def test_svg_renderer_requires_a_result() -> None:
    with pytest.raises(ValueError):
        SvgRenderer().render(title="Demo")


def test_html_renderer_inlines_the_svg_page() -> None:
    html = HtmlRenderer().render(title="Song", result=_sample_result(), style=STYLE)
    assert html.startswith("<!DOCTYPE html>")
    assert "<title>Song</title>" in html
    assert html.count('<div class="page"><svg') == 1


def test_build_html_escapes_title() -> None:
    html = HtmlRenderer().build_html("Fur & <Feathers>", ["<svg></svg>"])
    assert "<title>Fur &amp; &lt;Feathers&gt;</title>" in html


def test_build_html_multiple_page_divs() -> None:
    html = HtmlRenderer().build_html("Test", ["<svg>p1</svg>", "<svg>p2</svg>", "<svg>p3</svg>"])
    assert html.count('<div class="page">') == 3


def test_build_html_print_media_query_present() -> None:
    html = HtmlRenderer().build_html("", ["<svg></svg>"])
    assert "@media print" in html
    assert "page-break-after: always" in html
