"""
Exception hierarchy for AnimeBatch.

Fatal errors derive from ExportError and abort the run. UploadError is
recoverable and only logged by the pipeline.
"""

from __future__ import annotations

from pathlib import Path


class AnimeBatchError(Exception):
    """Base exception for all AnimeBatch errors."""


class ConfigError(AnimeBatchError):
    """Configuration loading or validation error."""

    def __init__(self, message: str, details: str | None = None):
        self.details = details
        super().__init__(message)


class ExportError(AnimeBatchError):
    """Base exception for export failures."""

    def __init__(
        self,
        message: str,
        output_path: Path | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.output_path = output_path
        self.cause = cause


class ExportSpawnError(ExportError):
    """The exporter process could not be started."""
    pass


class ExportProcessError(ExportError):
    """The exporter process exited with a non-zero status."""

    def __init__(self, exit_code: int, output_path: Path | None = None):
        super().__init__(
            f"Export process exited with code {exit_code}",
            output_path=output_path,
        )
        self.exit_code = exit_code


class ExportWriteError(ExportError):
    """The output file could not be written or closed."""
    pass


class UploadError(AnimeBatchError):
    """FTP connection or transfer failure."""

    def __init__(
        self,
        message: str,
        remote_path: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.remote_path = remote_path
        self.cause = cause
