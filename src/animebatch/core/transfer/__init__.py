"""Transfer - upload of batch files to the remote server."""

from .ftp import FtpUploader, remote_path_for

__all__ = [
    "FtpUploader",
    "remote_path_for",
]
