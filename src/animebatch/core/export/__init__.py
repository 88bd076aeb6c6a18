"""Export - exporter process execution and progress tracking."""

from .progress import ProgressEvent, ProgressKind, ProgressSummary, parse_progress_line
from .runner import ExportJob, ExportResult, ExportRunner, generate_filename

__all__ = [
    "ExportJob",
    "ExportResult",
    "ExportRunner",
    "ProgressEvent",
    "ProgressKind",
    "ProgressSummary",
    "generate_filename",
    "parse_progress_line",
]
