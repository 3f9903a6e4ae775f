"""Coalesces per-note underline segments into continuous beams within a beat."""

from __future__ import annotations

from jianpu.render_items import LineItem


def merge_underlines(underlines: list[LineItem]) -> list[LineItem]:
    """
    Merge underline segments level by level.

    Segments are grouped by their y coordinate (one group per beam level) and
    ordered by owning notation. Runs of consecutive notation indices become a
    single segment from the first start x to the last end x, tagged with the
    first notation of the run. A gap in indices starts a new segment.
    """
    groups: dict[float, list[LineItem]] = {}
    for line in underlines:
        groups.setdefault(line.y, []).append(line)

    merged: list[LineItem] = []
    for y, lines in groups.items():
        ordered = sorted(lines, key=lambda line: line.notation if line.notation is not None else -1)
        first = ordered[0]
        end_x = first.to_x
        last_index = first.notation
        for line in ordered[1:]:
            if last_index is not None and line.notation == last_index + 1:
                end_x = line.to_x
                last_index = line.notation
                continue
            merged.append(LineItem(x=first.x, y=y, to_x=end_x, to_y=y, width=first.width, notation=first.notation))
            first = line
            end_x = line.to_x
            last_index = line.notation
        merged.append(LineItem(x=first.x, y=y, to_x=end_x, to_y=y, width=first.width, notation=first.notation))

    return merged


class BeamMerger:
    """Buffers underline segments until the next beat or measure boundary."""

    def __init__(self) -> None:
        self._pending: list[LineItem] = []

    def __len__(self) -> int:
        return len(self._pending)

    def add(self, line: LineItem, notation: int) -> None:
        self._pending.append(
            LineItem(x=line.x, y=line.y, to_x=line.to_x, to_y=line.to_y, width=line.width, notation=notation)
        )

    def flush(self) -> list[LineItem]:
        """Return the merged segments collected so far and empty the buffer."""
        if not self._pending:
            return []
        merged = merge_underlines(self._pending)
        self.reset()
        return merged

    def reset(self) -> None:
        self._pending = []
