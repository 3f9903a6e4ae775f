"""Drawing primitives produced by a layout pass.

All coordinates are absolute page pixels with the origin at the top-left
corner. Text is positioned by its top edge.
"""

from dataclasses import dataclass
from typing import Literal, Union

Align = Literal["left", "center", "right"]


@dataclass(frozen=True)
class TextItem:
    x: float
    y: float
    text: str
    size: float
    align: Align = "center"


@dataclass(frozen=True)
class BeatItem:
    """A stacked time signature: numerator over a rule over denominator."""

    x: float
    y: float
    numerator: str
    denominator: str
    font_size: float
    line_width: float


@dataclass(frozen=True)
class LineItem:
    """
    A straight segment.

    ``notation`` is set on underline segments so the beam merger can tell
    which notation owns them.
    """

    x: float
    y: float
    to_x: float
    to_y: float
    width: float
    notation: int | None = None


@dataclass(frozen=True)
class DotItem:
    x: float
    y: float
    size: float


@dataclass(frozen=True)
class CurveItem:
    """A slur or tuplet bracket from (x, y) to (to_x, to_y), bulging upwards by ``height``."""

    x: float
    y: float
    to_x: float
    to_y: float
    line_width: float
    height: float


@dataclass(frozen=True)
class ArcItem:
    """Circle arc; ``angle`` is (start, end) in radians, clockwise on screen."""

    x: float
    y: float
    r: float
    angle: tuple[float, float]
    width: float


@dataclass(frozen=True)
class ClearItem:
    """A rectangle painted with the background color."""

    x: float
    y: float
    width: float
    height: float


RenderItem = Union[TextItem, BeatItem, LineItem, DotItem, CurveItem, ArcItem, ClearItem]


@dataclass
class BoundingBox:
    """Hit-test rectangle of one rendered notation."""

    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    def contains(self, x: float, y: float) -> bool:
        return self.x1 < x < self.x2 and self.y1 < y < self.y2
