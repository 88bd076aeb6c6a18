"""Configuration loading and validation."""

from .models import (
    AppConfig,
    ExportConfig,
    LoggingConfig,
    NotifyConfig,
    TransferConfig,
)
from .loader import load_app_config

__all__ = [
    # Config models
    "AppConfig",
    "ExportConfig",
    "LoggingConfig",
    "NotifyConfig",
    "TransferConfig",
    # Loaders
    "load_app_config",
]
