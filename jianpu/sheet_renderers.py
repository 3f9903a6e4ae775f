"""Painter and renderer implementations for sheet output formats."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod

from jianpu.render_items import (
    ArcItem,
    BeatItem,
    BoundingBox,
    ClearItem,
    CurveItem,
    DotItem,
    LineItem,
    RenderItem,
    TextItem,
)
from jianpu.render_models import RenderNotation, RenderResult
from jianpu.sheet_models import SheetStyle

_TEXT_ANCHOR = {"left": "start", "center": "middle", "right": "end"}


def _escape_html(text: str) -> str:
    """Escape the characters that are unsafe in HTML/SVG text and attributes."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _fmt(value: float) -> str:
    return f"{round(value, 2):g}"


class SvgPainter:
    """
    Turns drawing primitives into SVG elements.

    ``paint`` draws one primitive, ``erase`` blanks a notation's bounding box
    with the background color so that single notation can be repainted (for
    example in a highlight color) without a new layout pass.
    """

    def _text(self, x: float, y: float, text: str, size: float, anchor: str, style: SheetStyle, fill: str) -> str:
        return (
            f'<text x="{_fmt(x)}" y="{_fmt(y)}" font-size="{_fmt(size)}" '
            f'font-family="{_escape_html(style.font)}" fill="{fill}" '
            f'text-anchor="{anchor}" dominant-baseline="hanging">{_escape_html(text)}</text>'
        )

    def _line(self, x1: float, y1: float, x2: float, y2: float, width: float, stroke: str) -> str:
        return (
            f'<line x1="{_fmt(x1)}" y1="{_fmt(y1)}" x2="{_fmt(x2)}" y2="{_fmt(y2)}" '
            f'stroke="{stroke}" stroke-width="{_fmt(width)}" />'
        )

    def paint(self, item: RenderItem, style: SheetStyle, color: str | None = None) -> str:
        """
        Render one primitive as an SVG element.

        Args:
            item:  The primitive.
            style: Font and colors of the sheet.
            color: Overrides the fill color (e.g. for a selected notation).

        Raises:
            TypeError: If ``item`` is not a known primitive.
        """
        ink = color or style.fill_color

        if isinstance(item, TextItem):
            return self._text(item.x, item.y, item.text, item.size, _TEXT_ANCHOR[item.align], style, ink)

        if isinstance(item, BeatItem):
            size = item.font_size
            return "".join(
                [
                    self._text(item.x, item.y - size * 0.6, item.numerator, size, "start", style, ink),
                    self._line(
                        item.x - size * 0.25,
                        item.y + size * 0.5,
                        item.x + size * 0.75,
                        item.y + size * 0.5,
                        item.line_width,
                        ink,
                    ),
                    self._text(item.x, item.y + size * 0.6, item.denominator, size, "start", style, ink),
                ]
            )

        if isinstance(item, LineItem):
            return self._line(item.x, item.y, item.to_x, item.to_y, item.width, ink)

        if isinstance(item, DotItem):
            return f'<circle cx="{_fmt(item.x)}" cy="{_fmt(item.y)}" r="{_fmt(item.size)}" fill="{ink}" />'

        if isinstance(item, CurveItem):
            w = (item.to_x - item.x) / 3
            h = item.height * 0.75
            path = (
                f"M {_fmt(item.x)} {_fmt(item.y)} "
                f"C {_fmt(item.x + w)} {_fmt(item.y - h)} {_fmt(item.x + w * 2)} {_fmt(item.y - h)} "
                f"{_fmt(item.to_x)} {_fmt(item.to_y)}"
            )
            return f'<path d="{path}" fill="none" stroke="{ink}" stroke-width="{_fmt(item.line_width)}" />'

        if isinstance(item, ArcItem):
            start, end = item.angle
            sx = item.x + item.r * math.cos(start)
            sy = item.y + item.r * math.sin(start)
            ex = item.x + item.r * math.cos(end)
            ey = item.y + item.r * math.sin(end)
            large = 1 if (end - start) % (2 * math.pi) > math.pi else 0
            path = f"M {_fmt(sx)} {_fmt(sy)} A {_fmt(item.r)} {_fmt(item.r)} 0 {large} 1 {_fmt(ex)} {_fmt(ey)}"
            return f'<path d="{path}" fill="none" stroke="{ink}" stroke-width="{_fmt(item.width)}" />'

        if isinstance(item, ClearItem):
            return (
                f'<rect x="{_fmt(item.x)}" y="{_fmt(item.y)}" width="{_fmt(item.width)}" '
                f'height="{_fmt(item.height)}" fill="{style.background_color}" />'
            )

        raise TypeError(f"Unknown render item: {item!r}")

    def erase(self, box: BoundingBox, style: SheetStyle) -> str:
        return (
            f'<rect x="{_fmt(box.x1)}" y="{_fmt(box.y1)}" width="{_fmt(box.width)}" '
            f'height="{_fmt(box.height)}" fill="{style.background_color}" />'
        )

    def paint_notation(self, notation: RenderNotation, style: SheetStyle, color: str | None = None) -> str:
        """Erase one notation and draw it again, optionally in another color."""
        parts = [self.erase(notation.box, style)]
        parts.extend(self.paint(item, style, color) for item in notation.render_items)
        return "".join(parts)


class SheetRenderer(ABC):
    """Abstract sheet renderer."""

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Default filename extension for this renderer."""

    @abstractmethod
    def render(
        self,
        *,
        title: str,
        result: RenderResult | None = None,
        style: SheetStyle | None = None,
    ) -> str:
        """Render output into a file content string."""


class SvgRenderer(SheetRenderer):
    """Render a layout result into a standalone SVG document."""

    def __init__(self, painter: SvgPainter | None = None) -> None:
        self.painter = painter or SvgPainter()

    @property
    def default_extension(self) -> str:
        return ".svg"

    def render(
        self,
        *,
        title: str,
        result: RenderResult | None = None,
        style: SheetStyle | None = None,
    ) -> str:
        if result is None:
            raise ValueError("result is required for SVG rendering.")
        style = style or SheetStyle()

        width = _fmt(result.width)
        height = _fmt(result.height)
        body = "\n".join(f"  {self.painter.paint(item, style)}" for item in result.items)
        title_tag = f"  <title>{_escape_html(title)}</title>\n" if title else ""
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
            f'viewBox="0 0 {width} {height}">\n'
            f"{title_tag}"
            f'  <rect x="0" y="0" width="{width}" height="{height}" fill="{style.background_color}" />\n'
            f"{body}\n"
            f"</svg>"
        )


class HtmlRenderer(SheetRenderer):
    """Render a layout result into a self-contained HTML document with inline SVG."""

    def __init__(self, svg_renderer: SvgRenderer | None = None) -> None:
        self.svg_renderer = svg_renderer or SvgRenderer()

    @property
    def default_extension(self) -> str:
        return ".html"

    def render(
        self,
        *,
        title: str,
        result: RenderResult | None = None,
        style: SheetStyle | None = None,
    ) -> str:
        if result is None:
            raise ValueError("result is required for HTML rendering.")

        svg = self.svg_renderer.render(title="", result=result, style=style)
        return self.build_html(title, [svg])

    def build_html(self, title: str, svgs: list[str]) -> str:
        """
        Wrap a list of SVG strings in a self-contained HTML document.

        Each SVG is placed in its own ``.page`` div. The title only goes into
        the ``<title>`` tag because the sheet draws its own title block. The
        stylesheet includes both screen styles (white cards on a grey
        background) and print styles (``page-break-after: always`` per page,
        no drop shadows).
        """
        title_safe = _escape_html(title)
        pages = "\n".join(f'  <div class="page">{svg}</div>' for svg in svgs)

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title_safe}</title>
  <style>
    *, *::before, *::after {{ box-sizing: border-box; }}
    body {{
      background: #f0f0f0;
      margin: 0;
      padding: 2rem;
    }}
    .page {{
      background: #fff;
      box-shadow: 0 2px 8px rgba(0, 0, 0, 0.15);
      margin: 0 auto 3rem;
      max-width: 1320px;
      padding: 1rem;
    }}
    .page svg {{
      display: block;
      width: 100%;
      height: auto;
    }}
    @media print {{
      body {{
        background: #fff;
        padding: 0;
        margin: 0;
      }}
      .page {{
        box-shadow: none;
        page-break-after: always;
        max-width: 100%;
        padding: 0;
        margin: 0;
      }}
      .page:last-child {{
        page-break-after: avoid;
      }}
    }}
  </style>
</head>
<body>
{pages}
</body>
</html>"""
