"""
LedgerSettings schema.

The typed, frozen form of the runtime configuration.  YAML is parsed into
this by the loader; nothing else in the system reads YAML or environment
variables.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LedgerSettings:
    """Runtime settings for the ledger backend."""

    database_url: str = "sqlite:///ledger.db"
    echo_sql: bool = False
    pool_size: int = 10
    # IANA zone used for monthly windows and report labels
    reporting_timezone: str = "UTC"
    report_dir: str = "reports"
    report_base_url: str = "/reports"
    log_level: str = "INFO"
    # CategoryType name -> names, seeded as global categories at startup
    global_categories: dict[str, tuple[str, ...]] = field(default_factory=dict)
    # SHA-256 of the canonical source data; identifies the config in logs
    checksum: str = ""
