from __future__ import annotations

from pathlib import Path

import pytest

from portal.config import DEFAULT_PREDICTION_URL, Settings, load_settings


def test_defaults_without_file_or_environment(tmp_path: Path) -> None:
    settings = load_settings({}, config_path=tmp_path / "missing.yaml")

    assert settings == Settings()
    assert settings.mongodb_uri is None
    assert settings.port == 4000
    assert settings.prediction_url == DEFAULT_PREDICTION_URL
    assert settings.bcrypt_rounds == 10
    assert settings.cors_allow_origins == ("*",)


def test_environment_overrides_yaml_file(tmp_path: Path) -> None:
    config_path = tmp_path / "portal.yaml"
    config_path.write_text(
        "port: 5000\n"
        "database_name: from_file\n"
        "prediction_url: http://predictor.internal/predict\n",
        encoding="utf-8",
    )

    settings = load_settings(
        {
            "PORT": "6000",
            "MONGODB_URI": "mongodb://db.internal:27017",
            "PREDICTION_TIMEOUT": "2.5",
            "CORS_ALLOW_ORIGINS": "https://a.example, https://b.example",
        },
        config_path=config_path,
    )

    assert settings.port == 6000
    assert settings.database_name == "from_file"
    assert settings.mongodb_uri == "mongodb://db.internal:27017"
    assert settings.prediction_url == "http://predictor.internal/predict"
    assert settings.prediction_timeout == 2.5
    assert settings.cors_allow_origins == ("https://a.example", "https://b.example")


def test_config_path_taken_from_environment(tmp_path: Path) -> None:
    config_path = tmp_path / "custom.yaml"
    config_path.write_text("bcrypt_rounds: 12\n", encoding="utf-8")

    settings = load_settings({"PORTAL_CONFIG": str(config_path)})

    assert settings.bcrypt_rounds == 12


def test_blank_connection_string_means_in_memory(tmp_path: Path) -> None:
    settings = load_settings({"MONGODB_URI": "  "}, config_path=tmp_path / "none.yaml")
    assert settings.mongodb_uri is None


def test_invalid_port_names_the_variable(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="PORT"):
        load_settings({"PORT": "not-a-port"}, config_path=tmp_path / "none.yaml")


def test_unknown_file_keys_are_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "portal.yaml"
    config_path.write_text("listen_port: 80\n", encoding="utf-8")

    with pytest.raises(ValueError, match="listen_port"):
        load_settings({}, config_path=config_path)


def test_null_file_values_rejected_for_required_fields(tmp_path: Path) -> None:
    config_path = tmp_path / "portal.yaml"
    config_path.write_text("bcrypt_rounds:\nport:\n", encoding="utf-8")

    with pytest.raises(ValueError, match="None"):
        load_settings({}, config_path=config_path)


def test_null_connection_string_in_file_is_allowed(tmp_path: Path) -> None:
    config_path = tmp_path / "portal.yaml"
    config_path.write_text("mongodb_uri:\n", encoding="utf-8")

    assert load_settings({}, config_path=config_path).mongodb_uri is None
