"""Unit tests for Settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from immuse.config.loader import DEFAULT_GENERATION, generation_params, load_config
from immuse.cli.wizard import EXIT_API_ERROR, main
from immuse.config.settings import Settings
from immuse.utils.errors import ConfigurationError


def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "database_path": "data/test.db",
        "max_upload_mb": 2,
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


class TestSettings:
    def test_max_upload_bytes(self) -> None:
        assert _settings().max_upload_bytes == 2 * 1024 * 1024

    def test_cors_origins_split(self) -> None:
        settings = _settings(cors_origins="https://a.example, ,https://b.example")
        assert settings.get_cors_origins() == ["https://a.example", "https://b.example"]

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESPONSE_LANGUAGE", "English")
        assert Settings(_env_file=None).response_language == "English"


class TestLoadConfig:
    def test_yaml_merged_with_settings(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "generation:\n"
            "  tour:\n"
            "    temperature: 0.2\n"
            "storage:\n"
            "  keep_me: true\n",
            encoding="utf-8",
        )

        config = load_config(str(config_file), settings=_settings())

        assert config["generation"]["tour"]["temperature"] == 0.2
        assert config["storage"]["keep_me"] is True
        assert config["storage"]["database_path"] == "data/test.db"
        assert config["openai"]["configured"] is True

    def test_missing_file_uses_settings_only(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "nope.yaml"), settings=_settings(openai_api_key=""))
        assert config["openai"]["configured"] is False
        assert "generation" not in config

    def test_repository_config_parses(self) -> None:
        root = Path(__file__).resolve().parents[2]
        config = load_config(str(root / "config" / "config.yaml"), settings=_settings())
        assert config["polling"]["max_attempts"] >= 1
        assert set(DEFAULT_GENERATION) <= set(config["generation"])


class TestGenerationParams:
    def test_defaults_when_config_silent(self) -> None:
        assert generation_params({}, "tour") == DEFAULT_GENERATION["tour"]

    def test_config_overrides_per_key(self) -> None:
        params = generation_params({"generation": {"preview": {"temperature": 0.1}}}, "preview")
        assert params == {"temperature": 0.1, "max_tokens": DEFAULT_GENERATION["preview"]["max_tokens"]}

    def test_unknown_operation_gets_generic_defaults(self) -> None:
        assert generation_params({}, "something_else") == {"temperature": 0.7, "max_tokens": 1000}


class TestMalformedConfig:
    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("generation: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Malformed config file"):
            load_config(str(config_file), settings=_settings())

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_config(str(config_file), settings=_settings())

    def test_cli_reports_bad_config(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- nope\n", encoding="utf-8")

        assert main(["--config", str(config_file), "status", "m1"]) == EXIT_API_ERROR
        assert "must contain a mapping" in capsys.readouterr().err
