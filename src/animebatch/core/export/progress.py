"""
Progress events emitted by the exporter on its diagnostic stream.

The exporter may tag a line explicitly::

    @progress written S01E03 -> saved

Untagged lines are matched against the markers the current importer
prints, so both forms produce the same events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


PROGRESS_TAG = "@progress"


class ProgressKind(str, Enum):
    """Kinds of exporter progress the operator cares about."""

    EXPORTING = "exporting"
    WRITTEN = "written"
    COMPLETE = "complete"
    FOUND = "found"


# Marker substrings printed by the importer, checked in order
LEGACY_MARKERS: list[tuple[str, ProgressKind]] = [
    ("Exporting:", ProgressKind.EXPORTING),
    ("-> S", ProgressKind.WRITTEN),
    ("COMPLETE", ProgressKind.COMPLETE),
    ("Found", ProgressKind.FOUND),
]


@dataclass(frozen=True)
class ProgressEvent:
    """A single progress line from the exporter."""

    kind: ProgressKind
    message: str


@dataclass
class ProgressSummary:
    """Counts of progress events seen during one export."""

    counts: dict[ProgressKind, int] = field(default_factory=dict)

    def record(self, event: ProgressEvent) -> None:
        self.counts[event.kind] = self.counts.get(event.kind, 0) + 1

    def get(self, kind: ProgressKind) -> int:
        return self.counts.get(kind, 0)

    @property
    def items_written(self) -> int:
        return self.get(ProgressKind.WRITTEN)

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary keyed by kind value."""
        return {kind.value: self.get(kind) for kind in ProgressKind}


def parse_progress_line(line: str) -> ProgressEvent | None:
    """Classify a diagnostic line.

    Args:
        line: One line of exporter stderr, with or without newline

    Returns:
        ProgressEvent, or None if the line carries no progress
    """
    text = line.strip()
    if not text:
        return None

    if text.startswith(PROGRESS_TAG):
        parts = text[len(PROGRESS_TAG):].strip().split(maxsplit=1)
        if not parts:
            return None
        try:
            kind = ProgressKind(parts[0].lower())
        except ValueError:
            return None
        message = parts[1] if len(parts) > 1 else kind.value
        return ProgressEvent(kind=kind, message=message)

    for marker, kind in LEGACY_MARKERS:
        if marker in text:
            return ProgressEvent(kind=kind, message=text)

    return None
