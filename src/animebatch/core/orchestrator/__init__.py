"""Orchestrator - sequencing of export, upload and notification."""

from .pipeline import Pipeline, PipelineResult, resolve_limit

__all__ = [
    "Pipeline",
    "PipelineResult",
    "resolve_limit",
]
