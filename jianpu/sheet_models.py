"""Data models for jianpu sheet documents and layout options."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Final, Union

#: Key signature spellings indexed by ``Mode.value``.
MODE_TEXT: Final[list[str]] = ["A", "♭B", "B", "C", "♯C", "D", "♯D", "E", "F", "♯F", "G", "♯G"]

#: Every denominator the engine can lay out (1 = whole note ... 4096).
VALID_DENOMINATORS: Final[tuple[int, ...]] = tuple(2**i for i in range(13))


class NotationType(IntEnum):
    """Type tag stored in the ``type`` field of a persisted notation."""

    NOTE = 1
    REST = 2
    TUPLET = 3


class Slur(IntEnum):
    """Slur marker carried by a note."""

    NONE = 0
    START = 1
    END = 2


@dataclass(frozen=True)
class Pitch:
    """
    A scale degree relative to the current key.

    Attributes:
        base:       Scale degree 1-7.
        accidental: -2 (double flat) .. 2 (double sharp), 0 = as written.
        octave:     Octave offset; positive draws dots above, negative below.
    """

    base: int
    accidental: int = 0
    octave: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Pitch:
        base = int(data["base"])
        accidental = int(data.get("accidental", 0))
        if base < 1 or base > 7:
            raise ValueError(f"Pitch base must be 1-7, got {base}.")
        if accidental < -2 or accidental > 2:
            raise ValueError(f"Pitch accidental must be -2..2, got {accidental}.")
        return cls(base=base, accidental=accidental, octave=int(data.get("octave", 0)))

    def to_dict(self) -> dict[str, int]:
        return {"base": self.base, "accidental": self.accidental, "octave": self.octave}


@dataclass(frozen=True)
class Note:
    """A single pitched note, optionally dotted, slurred and ornamented."""

    pitch: Pitch
    denominator: int = 4
    dotted: bool = False
    slur: Slur = Slur.NONE
    ornaments: tuple[Pitch, ...] = ()


@dataclass(frozen=True)
class Rest:
    """A rest. ``dotted`` is accepted but has no effect on layout or duration."""

    denominator: int = 4
    dotted: bool = False


@dataclass(frozen=True)
class Tuplet:
    """A group of pitches sharing one ``denominator`` worth of time."""

    denominator: int
    pitches: tuple[Pitch, ...]


Notation = Union[Note, Rest, Tuplet]


def _check_denominator(value: Any) -> int:
    denominator = int(value)
    if denominator not in VALID_DENOMINATORS:
        raise ValueError(
            f"Duration denominator must be a power of two between 1 and 4096, got {denominator}."
        )
    return denominator


def _check_flag(data: dict[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise ValueError(f"'{key}' must be true or false, got {value!r}.")
    return value


def notation_from_dict(data: dict[str, Any]) -> Notation:
    """
    Build a Notation from its persisted form.

    Raises:
        ValueError: If the type tag is unknown, a field is missing or a field is out of range.
    """
    if not isinstance(data, dict):
        raise ValueError(f"A notation must be an object, got {data!r}.")
    try:
        kind = NotationType(int(data["type"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Unknown notation type: {data.get('type')!r}.") from exc

    try:
        return _build_notation(kind, data)
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"Malformed {kind.name.lower()} notation {data!r}: {exc!r}.") from exc


def _build_notation(kind: NotationType, data: dict[str, Any]) -> Notation:
    denominator = _check_denominator(data.get("time", 4))
    if kind is NotationType.NOTE:
        return Note(
            pitch=Pitch.from_dict(data["pitch"]),
            denominator=denominator,
            dotted=_check_flag(data, "dot"),
            slur=Slur(int(data.get("slur", 0))),
            ornaments=tuple(Pitch.from_dict(p) for p in data.get("ornaments", [])),
        )
    if kind is NotationType.REST:
        return Rest(denominator=denominator, dotted=_check_flag(data, "dot"))

    pitches = tuple(Pitch.from_dict(p) for p in data.get("pitches", []))
    if not pitches:
        raise ValueError("A tuplet needs at least one pitch.")
    return Tuplet(denominator=denominator, pitches=pitches)


def notation_to_dict(notation: Notation) -> dict[str, Any]:
    """Convert a Notation back into its persisted form."""
    if isinstance(notation, Note):
        return {
            "type": int(NotationType.NOTE),
            "pitch": notation.pitch.to_dict(),
            "time": notation.denominator,
            "dot": notation.dotted,
            "slur": int(notation.slur),
            "ornaments": [p.to_dict() for p in notation.ornaments],
        }
    if isinstance(notation, Rest):
        data: dict[str, Any] = {"type": int(NotationType.REST), "time": notation.denominator}
        if notation.dotted:
            data["dot"] = True
        return data
    if isinstance(notation, Tuplet):
        return {
            "type": int(NotationType.TUPLET),
            "time": notation.denominator,
            "pitches": [p.to_dict() for p in notation.pitches],
        }
    raise TypeError(f"Not a notation: {notation!r}")


@dataclass(frozen=True)
class Info:
    """Title block printed above the first row."""

    title: str = ""
    sub_title: str = ""
    artist: str = ""
    copyright: str = ""


@dataclass(frozen=True)
class Repeat:
    """Repeat span over measures. Stored and saved, not rendered."""

    start: int
    end: int
    count: int


@dataclass(frozen=True)
class Beat:
    """Time signature taking effect at ``notation``."""

    notation: int
    numerator: int
    denominator: int


@dataclass(frozen=True)
class Bpm:
    """Tempo taking effect at ``notation``."""

    notation: int
    bpm: int


@dataclass(frozen=True)
class Mode:
    """Key signature taking effect at ``notation``; ``value`` indexes MODE_TEXT."""

    notation: int
    value: int

    @property
    def text(self) -> str:
        return MODE_TEXT[self.value]


@dataclass
class Sheet:
    """A complete jianpu document as saved by the editor."""

    info: Info = field(default_factory=Info)
    notations: list[Notation] = field(default_factory=list)
    repeats: list[Repeat] = field(default_factory=list)
    bpms: list[Bpm] = field(default_factory=list)
    beats: list[Beat] = field(default_factory=list)
    modes: list[Mode] = field(default_factory=list)

    @classmethod
    def default(cls) -> Sheet:
        """The starting document of a new score: one bar of quarter rests in 4/4."""
        return cls(
            info=Info(title="Unknown"),
            modes=[Mode(notation=0, value=0)],
            beats=[Beat(notation=0, numerator=4, denominator=4)],
            bpms=[Bpm(notation=0, bpm=72)],
            notations=[Rest(denominator=4) for _ in range(4)],
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Sheet:
        """
        Parse a sheet document.

        Raises:
            ValueError: If any notation or annotation is missing a field or is malformed.
        """
        try:
            return cls._parse(data)
        except (KeyError, TypeError, AttributeError) as exc:
            raise ValueError(f"Malformed sheet document: {exc!r}.") from exc

    @classmethod
    def _parse(cls, data: dict[str, Any]) -> Sheet:
        info = data.get("info", {}) or {}
        modes = []
        for entry in data.get("modes", []):
            value = int(entry["value"])
            if value < 0 or value >= len(MODE_TEXT):
                raise ValueError(f"Mode value must be 0-{len(MODE_TEXT) - 1}, got {value}.")
            modes.append(Mode(notation=int(entry["notation"]), value=value))

        beats = []
        for entry in data.get("beats", []):
            numerator = int(entry["numerator"])
            denominator = int(entry["denominator"])
            if numerator <= 0 or denominator <= 0:
                raise ValueError(f"Invalid time signature {numerator}/{denominator}.")
            beats.append(Beat(notation=int(entry["notation"]), numerator=numerator, denominator=denominator))

        return cls(
            info=Info(
                title=str(info.get("title", "")),
                sub_title=str(info.get("subTitle", "")),
                artist=str(info.get("artist", "")),
                copyright=str(info.get("copyright", "")),
            ),
            notations=[notation_from_dict(n) for n in data.get("notations", [])],
            repeats=[
                Repeat(start=int(r["from"]), end=int(r["to"]), count=int(r["count"]))
                for r in data.get("repeats", [])
            ],
            bpms=[Bpm(notation=int(b["notation"]), bpm=int(b["bpm"])) for b in data.get("bpms", [])],
            beats=beats,
            modes=modes,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "info": {
                "title": self.info.title,
                "subTitle": self.info.sub_title,
                "artist": self.info.artist,
                "copyright": self.info.copyright,
            },
            "notations": [notation_to_dict(n) for n in self.notations],
            "repeats": [{"from": r.start, "to": r.end, "count": r.count} for r in self.repeats],
            "bpms": [{"notation": b.notation, "bpm": b.bpm} for b in self.bpms],
            "beats": [
                {"notation": b.notation, "numerator": b.numerator, "denominator": b.denominator}
                for b in self.beats
            ],
            "modes": [{"notation": m.notation, "value": m.value} for m in self.modes],
        }


@dataclass(frozen=True)
class SheetStyle:
    """Colors and font family used by painters."""

    font: str = "arial"
    fill_color: str = "#333"
    background_color: str = "#fff"


@dataclass(frozen=True)
class Options:
    """Page geometry for a layout pass (pixels)."""

    width: float = 1280
    padding_x: float = 80
    padding_y: float = 100
    font_size: float = 32
    line_padding: float = 40
    style: SheetStyle = field(default_factory=SheetStyle)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Options:
        """Read options in the editor's camelCase shape; missing keys keep defaults."""
        default = cls()
        style = data.get("style", {}) or {}
        font_size = data.get("fontSize", data.get("fontsize", default.font_size))
        return cls(
            width=float(data.get("width", default.width)),
            padding_x=float(data.get("paddingX", default.padding_x)),
            padding_y=float(data.get("paddingY", default.padding_y)),
            font_size=float(font_size),
            line_padding=float(data.get("linePadding", default.line_padding)),
            style=SheetStyle(
                font=str(style.get("font", default.style.font)),
                fill_color=str(style.get("fillColor", default.style.fill_color)),
                background_color=str(style.get("backgroundColor", default.style.background_color)),
            ),
        )
