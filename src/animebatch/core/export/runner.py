"""
Export runner.

Launches the bulk exporter, streams its stdout into a timestamped SQL
file and watches its stderr for progress.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Callable

from animebatch.core.config.models import ExportConfig
from animebatch.core.errors import (
    ExportProcessError,
    ExportSpawnError,
    ExportWriteError,
)

from .progress import ProgressEvent, ProgressSummary, parse_progress_line


logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

FILENAME_PREFIX = "anime_batch_"
FILENAME_SUFFIX = ".sql"


def generate_filename(now: datetime | None = None) -> str:
    """Build the batch file name for a run started at ``now`` (UTC).

    The timestamp has second precision, e.g.
    ``anime_batch_2026-10-19T08-30-05.sql``.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)

    stamp = now.strftime("%Y-%m-%dT%H:%M:%S").replace(":", "-").replace(".", "-")
    return f"{FILENAME_PREFIX}{stamp[:19]}{FILENAME_SUFFIX}"


@dataclass
class ExportJob:
    """State of one export while it runs."""

    limit: int
    output_path: Path
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    diagnostic_log: list[str] = field(default_factory=list)
    progress: ProgressSummary = field(default_factory=ProgressSummary)

    @property
    def diagnostics(self) -> str:
        return "".join(self.diagnostic_log)


@dataclass(frozen=True)
class ExportResult:
    """Outcome of a successful export."""

    success: bool
    file: Path
    stats: str
    bytes_written: int
    progress: ProgressSummary
    started_at: datetime
    finished_at: datetime

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


class ExportRunner:
    """Runs the external exporter for a single batch.

    The exporter is invoked as ``<command...> <subcommand> <limit>``. Its
    stdout is the SQL payload and is written verbatim; its stderr is
    diagnostics.
    """

    def __init__(
        self,
        config: ExportConfig,
        *,
        on_progress: Callable[[ProgressEvent], None] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the export runner.

        Args:
            config: Exporter and output settings
            on_progress: Called for every progress event (default: log it)
            clock: Returns the current UTC time (used for file naming)
        """
        self.config = config
        self.on_progress = on_progress or self._log_progress
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def build_command(self, limit: int) -> list[str]:
        """Command line for the exporter, limit rendered in decimal."""
        return [*self.config.command, self.config.subcommand, str(limit)]

    def new_job(self, limit: int) -> ExportJob:
        now = self.clock()
        return ExportJob(
            limit=limit,
            output_path=self.config.output_dir / generate_filename(now),
            started_at=now,
        )

    async def run(self, limit: int) -> ExportResult:
        """Run one export.

        Args:
            limit: Maximum items to export (0 = all)

        Returns:
            ExportResult for the written file

        Raises:
            ValueError: If limit is negative
            ExportSpawnError: If the exporter cannot be started
            ExportProcessError: If the exporter exits non-zero
            ExportWriteError: If the output file cannot be written
        """
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")

        try:
            self.config.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportWriteError(
                f"Cannot create output directory {self.config.output_dir}: {e}",
                cause=e,
            ) from e

        job = self.new_job(limit)

        logger.info(f"Starting bulk export (limit: {limit if limit else 'all'})...")
        logger.info(f"Output file: {job.output_path}")

        try:
            with open(job.output_path, "wb") as out:
                exit_code, bytes_written = await self._execute(job, out)
        except OSError as e:
            raise ExportWriteError(
                f"Cannot write {job.output_path}: {e}",
                output_path=job.output_path,
                cause=e,
            ) from e

        if exit_code != 0:
            logger.error(
                f"Export failed with code {exit_code}",
                extra={"exit_code": exit_code},
            )
            raise ExportProcessError(exit_code, output_path=job.output_path)

        logger.info(f"Export completed: {job.output_path}")

        return ExportResult(
            success=True,
            file=job.output_path,
            stats=job.diagnostics,
            bytes_written=bytes_written,
            progress=job.progress,
            started_at=job.started_at,
            finished_at=datetime.now(timezone.utc),
        )

    async def _execute(self, job: ExportJob, out: IO[bytes]) -> tuple[int, int]:
        """Spawn the exporter and drain both pipes until it exits."""
        command = self.build_command(job.limit)
        logger.debug(f"Spawning exporter: {command}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=self.config.working_dir,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ExportSpawnError(
                f"Cannot start exporter {command[0]!r} "
                f"(cwd: {self.config.working_dir or '.'}): {e}",
                output_path=job.output_path,
                cause=e,
            ) from e

        try:
            bytes_written, _ = await asyncio.gather(
                self._copy_stdout(process.stdout, out),
                self._scan_stderr(process.stderr, job),
            )
            exit_code = await process.wait()
        except BaseException:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        return exit_code, bytes_written

    async def _copy_stdout(self, stream: asyncio.StreamReader, out: IO[bytes]) -> int:
        """Write the SQL payload to the output file as it arrives."""
        total = 0
        while True:
            chunk = await stream.read(CHUNK_SIZE)
            if not chunk:
                break
            out.write(chunk)
            total += len(chunk)
        return total

    async def _scan_stderr(self, stream: asyncio.StreamReader, job: ExportJob) -> None:
        """Accumulate diagnostics and emit progress line by line."""
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        pending = ""

        while True:
            chunk = await stream.read(CHUNK_SIZE)
            if not chunk:
                break
            text = decoder.decode(chunk)
            job.diagnostic_log.append(text)

            pending += text
            *lines, pending = pending.split("\n")
            for line in lines:
                self._handle_line(line, job)

        tail = decoder.decode(b"", final=True)
        if tail:
            job.diagnostic_log.append(tail)
            pending += tail
        if pending:
            self._handle_line(pending, job)

    def _handle_line(self, line: str, job: ExportJob) -> None:
        event = parse_progress_line(line)
        if event is None:
            if line.strip():
                logger.debug(line.rstrip())
            return

        job.progress.record(event)
        self.on_progress(event)

    @staticmethod
    def _log_progress(event: ProgressEvent) -> None:
        logger.info(event.message)
