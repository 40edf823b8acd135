"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Loads the YAML settings file, applies ``LEDGER_*`` environment overrides
and parses the result into a frozen ``LedgerSettings``.  The single public
entry point for runtime config is ``ledger_config.get_settings()``.

Invariants enforced
-------------------
* Unknown keys raise ``ValueError``; a typo never silently falls back to a
  default.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the merged
  source data.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong value type  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
import os
from collections.abc import Mapping
from dataclasses import fields
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfoNotFoundError

import yaml

from ledger_config.schema import LedgerSettings
from ledger_kernel.domain.periods import resolve_zone

# Environment variable -> settings key
ENV_OVERRIDES: dict[str, str] = {
    "LEDGER_DATABASE_URL": "database_url",
    "LEDGER_REPORTING_TIMEZONE": "reporting_timezone",
    "LEDGER_REPORT_DIR": "report_dir",
    "LEDGER_LOG_LEVEL": "log_level",
}

_KNOWN_KEYS = frozenset(f.name for f in fields(LedgerSettings)) - {"checksum"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def apply_env_overrides(
    data: dict[str, Any], environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Return a copy of ``data`` with any set ``LEDGER_*`` variables applied."""
    env = os.environ if environ is None else environ
    merged = dict(data)
    for var, key in ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            merged[key] = value
    return merged


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "1", "yes", "on"):
        return True
    if isinstance(value, str) and value.lower() in ("false", "0", "no", "off"):
        return False
    raise ValueError(f"{key}: expected a boolean, got {value!r}")


def _as_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{key}: expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{key}: expected an integer, got {value!r}") from exc


def _as_zone(value: Any) -> str:
    name = str(value)
    try:
        resolve_zone(name)
    except (ValueError, ZoneInfoNotFoundError) as exc:
        raise ValueError(f"reporting_timezone: unknown time zone {name!r}") from exc
    return name


def _as_categories(value: Any) -> dict[str, tuple[str, ...]]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError("global_categories: expected a mapping of type -> names")
    parsed: dict[str, tuple[str, ...]] = {}
    for category_type, names in value.items():
        kind = str(category_type).upper()
        if kind not in ("INCOME", "EXPENSE"):
            raise ValueError(f"global_categories: unknown category type {category_type!r}")
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise ValueError(f"global_categories.{category_type}: expected a list of names")
        parsed[kind] = tuple(names)
    return parsed


def parse_settings(data: dict[str, Any]) -> LedgerSettings:
    """
    Parse a merged settings dict into ``LedgerSettings``.

    Raises:
        ValueError: on unknown keys or badly typed values.
    """
    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

    defaults = LedgerSettings()
    return LedgerSettings(
        database_url=str(data.get("database_url", defaults.database_url)),
        echo_sql=_as_bool("echo_sql", data.get("echo_sql", defaults.echo_sql)),
        pool_size=_as_int("pool_size", data.get("pool_size", defaults.pool_size)),
        reporting_timezone=_as_zone(
            data.get("reporting_timezone", defaults.reporting_timezone)
        ),
        report_dir=str(data.get("report_dir", defaults.report_dir)),
        report_base_url=str(data.get("report_base_url", defaults.report_base_url)).rstrip("/"),
        log_level=str(data.get("log_level", defaults.log_level)).upper(),
        global_categories=_as_categories(data.get("global_categories")),
        checksum=compute_checksum(data),
    )


def load_settings(
    path: Path, environ: Mapping[str, str] | None = None
) -> LedgerSettings:
    """Load, override and parse in one step."""
    return parse_settings(apply_env_overrides(load_yaml_file(path), environ))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
