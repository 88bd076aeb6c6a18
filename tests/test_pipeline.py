from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from animebatch.core.config.models import AppConfig
from animebatch.core.errors import ExportProcessError, UploadError
from animebatch.core.export.progress import ProgressSummary
from animebatch.core.export.runner import ExportResult
from animebatch.core.orchestrator import Pipeline, resolve_limit


class StubRunner:
    def __init__(self, path: Path, error: Exception | None = None):
        self.path = path
        self.error = error
        self.limits: list[int] = []

    async def run(self, limit: int) -> ExportResult:
        self.limits.append(limit)
        if self.error:
            raise self.error
        self.path.write_bytes(b"-- sql\n")
        now = datetime.now(timezone.utc)
        return ExportResult(
            success=True,
            file=self.path,
            stats="",
            bytes_written=7,
            progress=ProgressSummary(),
            started_at=now,
            finished_at=now,
        )


class StubUploader:
    def __init__(self, remote: str | None = "/remote/batch.sql", error: Exception | None = None):
        self.remote = remote
        self.error = error
        self.uploaded: list[Path] = []

    async def upload(self, local_file):
        self.uploaded.append(local_file)
        if self.error:
            raise self.error
        return self.remote


class StubNotifier:
    def __init__(self, sent: bool = True):
        self.sent = sent
        self.results: list[ExportResult] = []

    async def notify(self, result):
        self.results.append(result)
        return self.sent


@pytest.mark.parametrize(
    "cli, default, expected",
    [(None, 0, 0), (None, 50, 50), (100, 50, 100), (0, 50, 0)],
)
def test_resolve_limit(cli, default, expected):
    assert resolve_limit(cli, default) == expected


def test_resolve_limit_rejects_negative():
    with pytest.raises(ValueError):
        resolve_limit(-3)


def test_success_runs_all_stages(tmp_path):
    runner = StubRunner(tmp_path / "batch.sql")
    uploader = StubUploader()
    notifier = StubNotifier()

    result = asyncio.run(Pipeline(runner, uploader, notifier).run(100))

    assert runner.limits == [100]
    assert uploader.uploaded == [tmp_path / "batch.sql"]
    assert len(notifier.results) == 1
    assert result.success and result.exit_code == 0
    assert result.remote_path == "/remote/batch.sql"
    assert result.notified


def test_export_failure_skips_upload_and_notification(tmp_path):
    runner = StubRunner(tmp_path / "batch.sql", error=ExportProcessError(3))
    uploader = StubUploader()
    notifier = StubNotifier()

    result = asyncio.run(Pipeline(runner, uploader, notifier).run(5))

    assert result.exit_code == 1
    assert result.error == "Export process exited with code 3"
    assert uploader.uploaded == []
    assert notifier.results == []


def test_upload_failure_is_not_fatal(tmp_path, caplog):
    runner = StubRunner(tmp_path / "batch.sql")
    uploader = StubUploader(error=UploadError("530 Login incorrect."))
    notifier = StubNotifier()

    result = asyncio.run(Pipeline(runner, uploader, notifier).run(0))

    assert result.exit_code == 0
    assert result.upload_error == "530 Login incorrect."
    assert not result.uploaded
    assert len(notifier.results) == 1
    assert "Upload failed: 530 Login incorrect." in caplog.text


def test_skipped_upload_and_notification(tmp_path):
    runner = StubRunner(tmp_path / "batch.sql")

    result = asyncio.run(
        Pipeline(runner, StubUploader(remote=None), StubNotifier(sent=False)).run(0)
    )

    assert result.exit_code == 0
    assert result.remote_path is None
    assert result.upload_error is None
    assert not result.notified
    assert result.to_dict()["file"] == str(tmp_path / "batch.sql")


def test_negative_limit_fails_without_starting_export(tmp_path):
    runner = StubRunner(tmp_path / "batch.sql")
    uploader = StubUploader()
    notifier = StubNotifier()

    result = asyncio.run(Pipeline(runner, uploader, notifier).run(-1))

    assert result.exit_code == 1
    assert result.error == "limit must be >= 0, got -1"
    assert runner.limits == []
    assert uploader.uploaded == []
    assert notifier.results == []


def test_negative_limit_with_configured_runner(tmp_path, export_config):
    config = AppConfig(export=export_config("print('never runs')"))

    result = asyncio.run(Pipeline.from_config(config).run(-5))

    assert result.exit_code == 1
    assert "got -5" in result.error
    assert not (tmp_path / "output").exists()


def test_finish_record_carries_limit_and_duration(tmp_path, caplog):
    caplog.set_level(logging.INFO, logger="animebatch")
    runner = StubRunner(tmp_path / "batch.sql")

    asyncio.run(Pipeline(runner, StubUploader(), StubNotifier()).run(100))

    finished = [r for r in caplog.records if "Batch finished in" in r.getMessage()]
    assert len(finished) == 1
    assert finished[0].limit == 100
    assert finished[0].batch_file == "batch.sql"
    assert "0.0s: 7 bytes, 0 items written" in finished[0].getMessage()
