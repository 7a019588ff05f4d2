"""
Configuration Unit Tests.

Tests LedgerConfig validation and YAML loading.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.config import (
    ConfigFileNotFoundError,
    ConfigLoader,
    ConfigParseError,
    ConfigValidationError,
    LedgerConfig,
    RateMode,
    load_config,
)
from src.config.loader import deep_merge
from src.core.exceptions import ErrorCode, LedgerError


class TestLedgerConfig:
    """Test LedgerConfig model."""

    def test_defaults(self):
        config = LedgerConfig(administrator="0xadmin")

        assert config.primary_base_shares == 10
        assert config.share_counter_bits == 256
        assert config.rate_mode == RateMode.RECOMPUTE
        assert config.db_path is None
        assert config.log_level == "INFO"
        assert config.max_total_shares == 2 ** 256 - 1

    def test_administrator_required(self):
        with pytest.raises(PydanticValidationError):
            LedgerConfig()

        with pytest.raises(PydanticValidationError):
            LedgerConfig(administrator="   ")

    def test_counter_bits_bounds(self):
        assert LedgerConfig(administrator="a", share_counter_bits=8).max_total_shares == 255

        with pytest.raises(PydanticValidationError):
            LedgerConfig(administrator="a", share_counter_bits=512)

    def test_log_level_normalized(self):
        assert LedgerConfig(administrator="a", log_level="debug").log_level == "DEBUG"

        with pytest.raises(PydanticValidationError):
            LedgerConfig(administrator="a", log_level="verbose")

    def test_env_substitution(self, monkeypatch):
        """Test ${VAR} and ${VAR:default} resolve during validation."""
        monkeypatch.setenv("LEDGER_ADMIN", "0xfromenv")
        monkeypatch.delenv("LEDGER_DB", raising=False)
        monkeypatch.delenv("LEDGER_RATE_MODE", raising=False)

        config = LedgerConfig(
            administrator="${LEDGER_ADMIN}",
            db_path="${LEDGER_DB:}",
            rate_mode="${LEDGER_RATE_MODE:accumulate}",
        )

        assert config.administrator == "0xfromenv"
        assert config.db_path is None
        assert config.rate_mode == RateMode.ACCUMULATE

    def test_frozen(self):
        config = LedgerConfig(administrator="0xadmin")

        with pytest.raises(PydanticValidationError):
            config.administrator = "0xother"


class TestConfigLoader:
    """Test YAML loading."""

    def test_load_ledger_section(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text(
            "ledger:\n"
            "  administrator: '0xadmin'\n"
            "  primary_base_shares: 25\n"
            "  rate_mode: accumulate\n"
        )

        config = load_config(path)

        assert config.administrator == "0xadmin"
        assert config.primary_base_shares == 25
        assert config.rate_mode == RateMode.ACCUMULATE

    def test_load_top_level(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text("administrator: '0xadmin'\n")

        assert load_config(path).administrator == "0xadmin"

    def test_environment_overlay(self, tmp_path):
        """Test <stem>.<env>.yaml is merged over the base file."""
        (tmp_path / "ledger.yaml").write_text(
            "ledger:\n  administrator: '0xadmin'\n  primary_base_shares: 10\n"
        )
        (tmp_path / "ledger.production.yaml").write_text(
            "ledger:\n  primary_base_shares: 40\n"
        )

        config = load_config(tmp_path / "ledger.yaml", env="production")

        assert config.administrator == "0xadmin"
        assert config.primary_base_shares == 40

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigFileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text("ledger: [unclosed\n")

        with pytest.raises(ConfigParseError):
            load_config(path)

    def test_validation_errors_listed(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text("ledger:\n  administrator: '0xadmin'\n  primary_base_shares: -1\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(path)

        assert any("primary_base_shares" in e for e in exc_info.value.errors)

    def test_empty_file_fails_validation(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text("")

        with pytest.raises(ConfigValidationError):
            load_config(path)

    def test_missing_file_code(self, tmp_path):
        with pytest.raises(ConfigFileNotFoundError) as exc_info:
            ConfigLoader().load_yaml(tmp_path / "missing.yaml")

        assert exc_info.value.code == ErrorCode.CONFIG_NOT_FOUND
        assert isinstance(exc_info.value, LedgerError)

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigParseError) as exc_info:
            load_config(path)

        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR


class TestHelpers:
    """Test config helpers."""

    def test_deep_merge(self):
        base = {"a": {"b": 1, "c": 2}}

        merged = deep_merge(base, {"a": {"b": 10}})

        assert merged == {"a": {"b": 10, "c": 2}}
        assert base == {"a": {"b": 1, "c": 2}}

    def test_from_mapping_collects_errors(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            LedgerConfig.from_mapping({"primary_base_shares": -1})

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID
        fields = {e.split(":")[0] for e in exc_info.value.errors}
        assert fields == {"administrator", "primary_base_shares"}
