"""Slur span tracking across notes and row breaks."""

from __future__ import annotations

from dataclasses import dataclass

from jianpu.diagnostics import Diagnostics
from jianpu.render_items import CurveItem


@dataclass(frozen=True)
class SlurAnchor:
    """Where a pending slur started."""

    x: float
    y: float
    row: int
    notation: int


class SlurTracker:
    """
    Pairs slur start markers with the next end marker.

    A slur whose ends sit on different rows is drawn as two curves: one from
    the start to the right edge of its row, and one from the left edge of the
    end's row to the end point.
    """

    def __init__(self, left_edge: float, right_edge: float, line_width: float, height: float) -> None:
        """
        Args:
            left_edge:  x where rows begin.
            right_edge: x where rows end.
            line_width: Stroke width of the curves.
            height:     Bulge height of the curves.
        """
        self.left_edge = left_edge
        self.right_edge = right_edge
        self.line_width = line_width
        self.height = height
        self.anchor: SlurAnchor | None = None

    def _curve(self, x: float, y: float, to_x: float, to_y: float) -> CurveItem:
        return CurveItem(x=x, y=y, to_x=to_x, to_y=to_y, line_width=self.line_width, height=self.height)

    def start(self, x: float, y: float, row: int, notation: int, diagnostics: Diagnostics) -> None:
        if self.anchor is not None:
            diagnostics.error(
                notation,
                f"slur started at notation {self.anchor.notation} was never closed before a new slur start",
            )
        self.anchor = SlurAnchor(x=x, y=y, row=row, notation=notation)

    def end(self, x: float, y: float, row: int, notation: int, diagnostics: Diagnostics) -> list[CurveItem]:
        """Close the pending slur and return the curves that draw it."""
        anchor = self.anchor
        if anchor is None:
            diagnostics.error(notation, "slur end without a slur start")
            return []

        self.anchor = None
        if anchor.row == row:
            top = min(anchor.y, y)
            return [self._curve(anchor.x, top, x, top)]
        return [
            self._curve(anchor.x, anchor.y, self.right_edge, anchor.y),
            self._curve(self.left_edge, y, x, y),
        ]

    def finish(self, diagnostics: Diagnostics) -> None:
        """Report a slur still open when the score ends."""
        if self.anchor is not None:
            diagnostics.error(self.anchor.notation, "slur is never closed")
            self.anchor = None
