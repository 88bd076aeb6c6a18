"""
Webhook notification for completed batches.

Posts a Slack-style message once per successful run. Delivery is best
effort: failures are logged as warnings and never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from animebatch.core.config.models import NotifyConfig
from animebatch.core.export.runner import ExportResult


logger = logging.getLogger(__name__)

BYTES_PER_MIB = 1024 * 1024


@dataclass(frozen=True)
class NotificationPayload:
    """Summary of a finished batch."""

    file_name: str
    size_mib: float
    status: str = "Success"

    @classmethod
    def from_file(cls, path: Path | str) -> "NotificationPayload":
        path = Path(path)
        size = path.stat().st_size
        return cls(file_name=path.name, size_mib=round(size / BYTES_PER_MIB, 2))

    @property
    def summary(self) -> str:
        return (
            "*AnimeDekho Bulk Export Complete*\n\n"
            f"File: {self.file_name}\n"
            f"Size: {self.size_mib:.2f} MB\n"
            f"Status: {self.status}"
        )

    def to_message(self) -> dict[str, Any]:
        """Slack message body."""
        return {
            "text": "Anime Scraper Completed",
            "blocks": [
                {
                    "type": "section",
                    "text": {
                        "type": "mrkdwn",
                        "text": self.summary,
                    },
                }
            ],
        }


class WebhookNotifier:
    """Sends the completion message to the configured webhook."""

    def __init__(
        self,
        config: NotifyConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    async def notify(self, result: ExportResult) -> bool:
        """Post the completion message for ``result``.

        Returns:
            True if the request was sent, False if skipped or failed
        """
        if not self.is_configured:
            return False

        try:
            payload = NotificationPayload.from_file(result.file)
        except OSError as e:
            logger.warning(f"Slack notification failed: {e}")
            return False

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout_seconds),
                transport=self.transport,
            ) as client:
                response = await client.post(
                    self.config.webhook_url,
                    json=payload.to_message(),
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Slack notification failed: {e}")
            return False

        logger.info(f"Slack notification sent (HTTP {response.status_code})")
        return True
