"""Configuration management for the insurance portal backend."""
from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import yaml

DEFAULT_DATABASE_NAME = "insurance_portal"
DEFAULT_PREDICTION_URL = "http://localhost:8000/predict"
DEFAULT_PORT = 4000
BCRYPT_ROUNDS = 10

# Environment variable -> settings field
_ENV_FIELDS: Dict[str, str] = {
    "MONGODB_URI": "mongodb_uri",
    "MONGODB_DATABASE": "database_name",
    "MONGODB_TIMEOUT_MS": "database_timeout_ms",
    "HOST": "host",
    "PORT": "port",
    "PREDICTION_SERVICE_URL": "prediction_url",
    "PREDICTION_TIMEOUT": "prediction_timeout",
    "BCRYPT_ROUNDS": "bcrypt_rounds",
    "CORS_ALLOW_ORIGINS": "cors_allow_origins",
}

_OPTIONAL_FIELDS = frozenset({"mongodb_uri"})


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the HTTP service."""

    mongodb_uri: Optional[str] = None
    database_name: str = DEFAULT_DATABASE_NAME
    database_timeout_ms: int = 5000
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    prediction_url: str = DEFAULT_PREDICTION_URL
    prediction_timeout: float = 10.0
    bcrypt_rounds: int = BCRYPT_ROUNDS
    cors_allow_origins: Tuple[str, ...] = ("*",)

    @staticmethod
    def from_dict(data: Mapping[str, object], base: "Settings | None" = None) -> "Settings":
        """Create :class:`Settings` from raw values, converting types as needed."""
        known = {field.name for field in fields(Settings)}
        unknown = set(data.keys()) - known
        if unknown:
            raise ValueError(f"Unknown configuration fields: {', '.join(sorted(unknown))}")

        values: Dict[str, object] = {}
        for name, raw in data.items():
            if raw is None:
                if name not in _OPTIONAL_FIELDS:
                    raise ValueError(f"Invalid value for {name}: None")
                values[name] = None
                continue
            values[name] = _coerce(name, raw)

        return replace(base or Settings(), **values)


def _coerce(name: str, raw: object) -> object:
    try:
        if name in {"port", "database_timeout_ms", "bcrypt_rounds"}:
            return int(raw)  # type: ignore[arg-type]
        if name == "prediction_timeout":
            return float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from exc

    if name == "cors_allow_origins":
        if isinstance(raw, str):
            items = raw.split(",")
        else:
            items = [str(item) for item in raw]  # type: ignore[union-attr]
        return tuple(item.strip() for item in items if item.strip())

    text = str(raw).strip()
    if name == "mongodb_uri":
        return text or None
    return text


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the optional YAML configuration file."""
    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    return (Path(__file__).resolve().parent.parent / "config" / "portal.yaml").resolve(strict=False)


def load_config_file(config_path: Path) -> Dict[str, object]:
    """Load settings overrides from a YAML file; a missing file yields no overrides."""
    if not config_path.is_file():
        return {}
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")
    return raw


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    *,
    config_path: Optional[Path] = None,
) -> Settings:
    """Build settings from defaults, the YAML file, then environment variables."""

    env = os.environ if environ is None else environ
    path = config_path or resolve_config_path(env.get("PORTAL_CONFIG"))
    settings = Settings.from_dict(load_config_file(path))

    for variable, field_name in _ENV_FIELDS.items():
        if variable not in env:
            continue
        try:
            settings = Settings.from_dict({field_name: env[variable]}, base=settings)
        except ValueError as exc:
            raise ValueError(f"Invalid value for environment variable {variable}") from exc
    return settings


__all__ = [
    "BCRYPT_ROUNDS",
    "DEFAULT_PREDICTION_URL",
    "Settings",
    "load_config_file",
    "load_settings",
    "resolve_config_path",
]
