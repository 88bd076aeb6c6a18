"""
FTP upload of finished batch files.

One session per upload; the file is stored whole under the configured
remote directory with its local name.
"""

from __future__ import annotations

import asyncio
import ftplib
import logging
from pathlib import Path
from typing import Callable

from animebatch.core.config.models import TransferConfig
from animebatch.core.errors import UploadError


logger = logging.getLogger(__name__)


def remote_path_for(remote_dir: str, filename: str) -> str:
    """Join a remote directory and a file name with exactly one '/'."""
    if remote_dir.endswith("/"):
        return remote_dir + filename
    return f"{remote_dir}/{filename}"


class FtpUploader:
    """Uploads a local file to the configured FTP server."""

    def __init__(
        self,
        config: TransferConfig,
        *,
        ftp_factory: Callable[[], ftplib.FTP] | None = None,
    ) -> None:
        """Initialize the uploader.

        Args:
            config: FTP connection settings
            ftp_factory: Creates an unconnected FTP client (default: ftplib.FTP)
        """
        self.config = config
        self.ftp_factory = ftp_factory or ftplib.FTP

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    def upload_sync(self, local_file: Path | str) -> str | None:
        """Upload ``local_file`` in the calling thread.

        Returns:
            Full remote path, or None if FTP is not configured

        Raises:
            UploadError: On connection, login or transfer failure
        """
        if not self.is_configured:
            logger.warning("FTP not configured, skipping upload")
            return None

        local_path = Path(local_file)
        remote_path = remote_path_for(self.config.remote_dir, local_path.name)

        ftp = self.ftp_factory()
        try:
            ftp.connect(self.config.host, self.config.port)
            ftp.login(self.config.user, self.config.password)
            logger.info(f"Connected to FTP server {self.config.host}:{self.config.port}")

            logger.info(f"Uploading to: {remote_path}", extra={"remote_path": remote_path})
            with open(local_path, "rb") as fh:
                ftp.storbinary(f"STOR {remote_path}", fh)
        except ftplib.all_errors as e:
            raise UploadError(
                f"Upload of {local_path.name} failed: {e}",
                remote_path=remote_path,
                cause=e,
            ) from e
        finally:
            self._close(ftp)

        logger.info("Upload complete")
        return remote_path

    async def upload(self, local_file: Path | str) -> str | None:
        """Upload without blocking the event loop. See upload_sync."""
        return await asyncio.to_thread(self.upload_sync, local_file)

    @staticmethod
    def _close(ftp: ftplib.FTP) -> None:
        try:
            ftp.quit()
        except (*ftplib.all_errors, AttributeError):
            ftp.close()
