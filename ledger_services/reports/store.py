"""
Report storage (``ledger_services.reports.store``).

``ReportStore`` is the narrow contract the report service writes through:
put bytes under a key, hand back a URL for that key.  ``LocalReportStore``
writes to a directory and builds URLs from a configured base.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from ledger_kernel.logging_config import get_logger

logger = get_logger("reports.store")


class ReportStore(ABC):
    """Where rendered reports go."""

    @abstractmethod
    def save(self, key: str, content: bytes, content_type: str) -> None:
        ...

    @abstractmethod
    def url_for(self, key: str) -> str:
        ...


class LocalReportStore(ReportStore):
    """
    Files under ``root_dir``; URLs are ``<base_url>/<key>``.

    Keys are relative POSIX paths (``<user_id>/<file name>``).
    """

    def __init__(self, root_dir: str | Path, base_url: str = "/reports"):
        self.root_dir = Path(root_dir)
        self.base_url = base_url.rstrip("/")

    def path_for(self, key: str) -> Path:
        path = (self.root_dir / key).resolve()
        if not path.is_relative_to(self.root_dir.resolve()):
            raise ValueError(f"Report key escapes the report directory: {key!r}")
        return path

    def save(self, key: str, content: bytes, content_type: str) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        logger.info(
            "report_stored",
            extra={"key": key, "bytes": len(content), "content_type": content_type},
        )

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key}"
