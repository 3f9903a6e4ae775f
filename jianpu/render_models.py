"""Render-time wrappers around a Sheet: derived page constants, cursor and result."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from jianpu.diagnostics import Diagnostics, LogEntry
from jianpu.render_items import BoundingBox, RenderItem
from jianpu.sheet_models import Beat, Bpm, Info, Mode, Notation, Options, Repeat, Sheet
from jianpu.slur_tracker import SlurTracker
from jianpu.timeline import Meter


@dataclass
class RenderNotation:
    """
    A notation plus what the last pass drew for it.

    ``render_items`` and ``box`` belong to this notation alone and are
    overwritten every time it is laid out again.
    """

    notation: Notation
    render_items: list[RenderItem] = field(default_factory=list)
    box: BoundingBox = field(default_factory=BoundingBox)

    def reset(self) -> None:
        self.render_items = []
        self.box = BoundingBox()


@dataclass
class RenderSheet:
    """A Sheet with annotation lists turned into index-keyed maps."""

    info: Info
    notations: list[RenderNotation]
    repeats: list[Repeat]
    modes: dict[int, Mode]
    beats: dict[int, Beat]
    bpms: dict[int, Bpm]

    def to_sheet(self) -> Sheet:
        """Rebuild a plain Sheet document, annotations in notation order."""
        return Sheet(
            info=self.info,
            notations=[n.notation for n in self.notations],
            repeats=list(self.repeats),
            bpms=[self.bpms[i] for i in sorted(self.bpms)],
            beats=[self.beats[i] for i in sorted(self.beats)],
            modes=[self.modes[i] for i in sorted(self.modes)],
        )


def pre_render_notation(notation: Notation) -> RenderNotation:
    return RenderNotation(notation=notation)


def pre_render_sheet(sheet: Sheet) -> RenderSheet:
    """Prepare a Sheet for layout: trim the info strings and index the annotations."""
    return RenderSheet(
        info=Info(
            title=sheet.info.title.strip(),
            sub_title=sheet.info.sub_title.strip(),
            artist=sheet.info.artist.strip(),
            copyright=sheet.info.copyright.strip(),
        ),
        notations=[pre_render_notation(n) for n in sheet.notations],
        repeats=list(sheet.repeats),
        modes={m.notation: m for m in sorted(sheet.modes, key=lambda m: m.notation)},
        beats={b.notation: b for b in sorted(sheet.beats, key=lambda b: b.notation)},
        bpms={b.notation: b for b in sorted(sheet.bpms, key=lambda b: b.notation)},
    )


@dataclass(frozen=True)
class RenderContext:
    """Page constants derived once per pass from the layout Options."""

    width: float
    usable_width: float
    padding_x: float
    padding_y: float
    font_size: float
    line_height: float
    notation_margin: float
    line_padding: float
    line_width: float
    dot_size: float

    @classmethod
    def from_options(cls, options: Options) -> RenderContext:
        font_size = options.font_size
        return cls(
            width=options.width,
            usable_width=options.width - options.padding_x * 2,
            padding_x=options.padding_x,
            padding_y=options.padding_y,
            font_size=font_size,
            line_height=font_size * 1.5,
            notation_margin=font_size * 0.25,
            line_padding=options.line_padding,
            line_width=math.ceil(font_size * 0.05),
            dot_size=math.ceil(font_size * 0.08),
        )

    @property
    def left_edge(self) -> float:
        return self.padding_x

    @property
    def right_edge(self) -> float:
        return self.padding_x + self.usable_width


@dataclass
class RenderState:
    """The single mutable cursor of a layout pass."""

    x: float
    y: float
    meter: Meter
    slurs: SlurTracker
    row_index: int = 0
    measure_index: int = 0
    notation_index: int = 0
    items: list[RenderItem] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


@dataclass
class RenderResult:
    """Everything a painter needs to draw one page."""

    width: float
    height: float
    items: list[RenderItem]
    logs: list[LogEntry]
    notations: list[BoundingBox]
