"""Tests for ledger_config: YAML loading, env overrides, validation."""

import pytest
import yaml

from ledger_config import DEFAULT_CONFIG_PATH, get_settings, reset_settings
from ledger_config.loader import (
    apply_env_overrides,
    compute_checksum,
    load_settings,
    load_yaml_file,
    parse_settings,
)


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    monkeypatch.delenv("LEDGER_CONFIG", raising=False)
    for var in (
        "LEDGER_DATABASE_URL",
        "LEDGER_REPORTING_TIMEZONE",
        "LEDGER_REPORT_DIR",
        "LEDGER_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield
    reset_settings()


def _write(tmp_path, data) -> str:
    path = tmp_path / "ledger.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestDefaults:
    def test_packaged_defaults_load(self):
        settings = load_settings(DEFAULT_CONFIG_PATH, environ={})
        assert settings.database_url == "sqlite:///ledger.db"
        assert settings.reporting_timezone == "UTC"
        assert "Salary" in settings.global_categories["INCOME"]
        assert "Groceries" in settings.global_categories["EXPENSE"]

    def test_get_settings_is_cached_and_traced(self, captured_logs):
        first = get_settings()
        second = get_settings()

        assert first is second
        traces = [r for r in captured_logs() if r["message"] == "LEDGER_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["checksum"] == first.checksum

    def test_ledger_config_env_points_elsewhere(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LEDGER_CONFIG", str(_write(tmp_path, {"log_level": "debug"})))
        assert get_settings().log_level == "DEBUG"


class TestParsing:
    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="Unknown configuration keys: databse_url"):
            parse_settings({"databse_url": "sqlite://"})

    def test_bool_and_int_coercion(self):
        settings = parse_settings({"echo_sql": "yes", "pool_size": "4"})
        assert settings.echo_sql is True
        assert settings.pool_size == 4

    @pytest.mark.parametrize("data", [{"echo_sql": "maybe"}, {"pool_size": "many"}])
    def test_bad_values(self, data):
        with pytest.raises(ValueError):
            parse_settings(data)

    def test_unknown_time_zone(self):
        with pytest.raises(ValueError, match="reporting_timezone"):
            parse_settings({"reporting_timezone": "Mars/Olympus_Mons"})

    def test_category_types_upper_cased(self):
        settings = parse_settings({"global_categories": {"income": ["Bonus"]}})
        assert settings.global_categories == {"INCOME": ("Bonus",)}

    def test_unknown_category_type(self):
        with pytest.raises(ValueError):
            parse_settings({"global_categories": {"TRANSFER": ["Moves"]}})

    def test_base_url_trailing_slash_trimmed(self):
        assert parse_settings({"report_base_url": "/files/"}).report_base_url == "/files"

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_yaml_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "absent.yaml", environ={})


class TestOverrides:
    def test_env_wins_over_file(self, tmp_path):
        path = _write(tmp_path, {"database_url": "sqlite:///file.db"})
        settings = load_settings(
            path,
            environ={
                "LEDGER_DATABASE_URL": "postgresql://ledger@db/ledger",
                "LEDGER_REPORTING_TIMEZONE": "Asia/Kolkata",
            },
        )
        assert settings.database_url == "postgresql://ledger@db/ledger"
        assert settings.reporting_timezone == "Asia/Kolkata"

    def test_empty_env_value_ignored(self):
        merged = apply_env_overrides({"report_dir": "out"}, {"LEDGER_REPORT_DIR": ""})
        assert merged["report_dir"] == "out"

    def test_checksum_tracks_overrides(self, tmp_path):
        path = _write(tmp_path, {"log_level": "INFO"})
        plain = load_settings(path, environ={})
        overridden = load_settings(path, environ={"LEDGER_LOG_LEVEL": "ERROR"})
        assert plain.checksum != overridden.checksum


def test_checksum_is_order_independent():
    assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})
