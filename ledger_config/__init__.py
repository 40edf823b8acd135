"""
ledger_config -- single public entrypoint for runtime configuration.

Responsibility:
    Provides the ONLY way to obtain settings at runtime, through
    ``get_settings()``.  No other component reads configuration files or
    ``LEDGER_*`` environment variables directly.

Architecture position:
    Configuration.  Sits above ``ledger_kernel`` and below
    ``ledger_services`` / ``ledger_api``.  The kernel MUST NEVER import
    from ``ledger_config``; the API passes plain values (a database URL, a
    time zone name) down to kernel constructors.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_settings()``.
    - Settings are frozen and cached until ``reset_settings()``.

Failure modes:
    - ``FileNotFoundError`` -- ``LEDGER_CONFIG`` names a missing file.
    - ``ValueError`` -- unknown keys or badly typed values.

Audit relevance:
    Every load emits a ``LEDGER_CONFIG_TRACE`` log entry with the source
    path and checksum, tying a running process to the exact settings it
    was started with.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path

from ledger_config.loader import load_settings
from ledger_config.schema import LedgerSettings
from ledger_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

_settings: LedgerSettings | None = None
_lock = threading.Lock()


def get_settings() -> LedgerSettings:
    """The ONLY public configuration entrypoint.

    Reads ``LEDGER_CONFIG`` (falling back to the packaged defaults.yaml),
    applies ``LEDGER_*`` overrides and caches the result.

    Raises:
        FileNotFoundError: If the configured file does not exist.
        ValueError: If validation fails.
    """
    global _settings
    with _lock:
        if _settings is None:
            path = Path(os.environ.get("LEDGER_CONFIG") or DEFAULT_CONFIG_PATH)
            _settings = load_settings(path)
            _logger.info(
                "LEDGER_CONFIG_TRACE",
                extra={
                    "trace_type": "LEDGER_CONFIG_TRACE",
                    "config_path": str(path),
                    "checksum": _settings.checksum,
                    "reporting_timezone": _settings.reporting_timezone,
                },
            )
        return _settings


def reset_settings() -> None:
    """Drop the cached settings (tests, reload)."""
    global _settings
    with _lock:
        _settings = None


__all__ = ["LedgerSettings", "get_settings", "reset_settings", "DEFAULT_CONFIG_PATH"]
