from __future__ import annotations

import sys
import textwrap
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from animebatch.core.config.models import ExportConfig


def exporter_command(script: str) -> list[str]:
    """A fake exporter: the current interpreter running ``script``.

    ``sys.argv[1:]`` inside the script is ``[subcommand, limit]``.
    """
    return [sys.executable, "-c", textwrap.dedent(script)]


class StepClock:
    """Returns a fixed start time, advancing one second per call."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 10, 19, 8, 30, 5, 123000, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def export_config(tmp_path: Path):
    def _make(script: str, **overrides) -> ExportConfig:
        values = {
            "output_dir": tmp_path / "output",
            "command": exporter_command(script),
            **overrides,
        }
        return ExportConfig(**values)

    return _make
