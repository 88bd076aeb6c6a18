"""
Batch pipeline orchestrator.

Coordinates one run: export → upload → notify.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from animebatch.core.config.models import AppConfig
from animebatch.core.errors import ExportError, UploadError
from animebatch.core.export.runner import ExportResult, ExportRunner
from animebatch.core.logging import RunLogger
from animebatch.core.notify.webhook import WebhookNotifier
from animebatch.core.transfer.ftp import FtpUploader


logger = logging.getLogger(__name__)


def resolve_limit(cli_limit: int | None, default: int = 0) -> int:
    """Pick the export limit for a run.

    An explicit command-line value wins over the configured default.

    Raises:
        ValueError: If the chosen limit is negative
    """
    limit = default if cli_limit is None else cli_limit
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    return limit


@dataclass
class PipelineResult:
    """Outcome of one pipeline run."""

    limit: int
    success: bool = False
    export: ExportResult | None = None
    remote_path: str | None = None
    upload_error: str | None = None
    notified: bool = False
    error: str | None = None

    @property
    def exit_code(self) -> int:
        """Process exit status: only the export decides it."""
        return 0 if self.success else 1

    @property
    def uploaded(self) -> bool:
        return self.remote_path is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "limit": self.limit,
            "success": self.success,
            "file": str(self.export.file) if self.export else None,
            "bytes_written": self.export.bytes_written if self.export else None,
            "remote_path": self.remote_path,
            "upload_error": self.upload_error,
            "notified": self.notified,
            "error": self.error,
        }


class Pipeline:
    """Runs the export and the optional upload and notification stages.

    The export must succeed for the later stages to run. Upload and
    notification failures are logged and never change the outcome.
    """

    def __init__(
        self,
        runner: ExportRunner,
        uploader: FtpUploader,
        notifier: WebhookNotifier,
    ) -> None:
        self.runner = runner
        self.uploader = uploader
        self.notifier = notifier

    @classmethod
    def from_config(cls, config: AppConfig, **runner_kwargs: Any) -> "Pipeline":
        """Build a pipeline with the stages described by ``config``."""
        return cls(
            runner=ExportRunner(config.export, **runner_kwargs),
            uploader=FtpUploader(config.transfer),
            notifier=WebhookNotifier(config.notify),
        )

    async def run(self, limit: int) -> PipelineResult:
        """Execute a complete run.

        Args:
            limit: Maximum items to export (0 = all)

        Returns:
            PipelineResult describing every stage
        """
        result = PipelineResult(limit=limit)

        try:
            resolve_limit(limit)
        except ValueError as e:
            logger.error(f"Export not started: {e}")
            result.error = str(e)
            return result

        try:
            export = await self.runner.run(limit)
        except ExportError as e:
            logger.error(f"Export failed: {e}")
            result.error = str(e)
            return result

        result.export = export
        result.success = True
        run_log = RunLogger(logger, batch_file=export.file.name)

        try:
            result.remote_path = await self.uploader.upload(export.file)
        except UploadError as e:
            run_log.error(f"Upload failed: {e}")
            result.upload_error = str(e)
        else:
            if result.remote_path:
                run_log.info(f"Uploaded to: {result.remote_path}")

        result.notified = await self.notifier.notify(export)

        run_log.info(
            f"Batch finished in {export.duration_seconds:.1f}s: "
            f"{export.bytes_written} bytes, "
            f"{export.progress.items_written} items written",
            extra={"limit": limit},
        )
        return result

