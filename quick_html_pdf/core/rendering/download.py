"""
Download Sink
=============

Hands finished PDF bytes to the user. Files land under the configured output
directory; only the final path component of the requested name is used.
"""

from pathlib import Path
from typing import Any, Optional, Union

from quick_html_pdf.config.logging import get_logger
from quick_html_pdf.config.settings import get_settings

logger = get_logger(__name__)


class FileDownloadSink:
    """Writes downloads into a directory."""

    def __init__(self, output_path: Optional[Union[str, Path]] = None):
        self.output_path = Path(output_path or get_settings().output_path)
        self.logger: Any = logger.bind(component="download_sink")  # structlog.BoundLoggerBase

    def save(self, data: bytes, filename: str) -> Path:
        """
        Write ``data`` under ``filename``.

        Raises:
            ValueError: If the filename has no usable name component
        """
        name = Path(filename).name
        if not name or name in (".", ".."):
            raise ValueError(f"Invalid download filename: {filename!r}")

        self.output_path.mkdir(parents=True, exist_ok=True)
        target = self.output_path / name
        target.write_bytes(data)

        self.logger.info("Download written", path=str(target), size=len(data))
        return target

    download = save
