"""Studio settings.

Sources, later ones winning: built-in defaults, .wallstudio.toml,
WALLSTUDIO_* environment variables, command-line flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from wallstudio.content.slots import DEFAULT_BASE_LIMIT_MB

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".wallstudio.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
    Path.home() / ".config" / "wallstudio",
]

# Setting -> (section, field); shared by env vars and CLI flags.
_OVERRIDES: dict[str, tuple[str, str]] = {
    "api_url": ("api", "base_url"),
    "api_token": ("api", "token"),
    "api_timeout": ("api", "timeout"),
    "store_path": ("store", "path"),
    "upload_limit_mb": ("uploads", "base_limit_mb"),
    "concurrent": ("reconcile", "concurrent"),
}

_ENV_PREFIX = "WALLSTUDIO_"
_ENV_NAMES = {
    "api_url": "API_URL",
    "api_token": "API_TOKEN",
    "api_timeout": "API_TIMEOUT",
    "store_path": "STORE_PATH",
    "upload_limit_mb": "UPLOAD_LIMIT_MB",
    "concurrent": "RECONCILE_CONCURRENT",
}
_TRUTHY = frozenset({"true", "1", "yes"})


class ApiConfig(BaseModel):
    """Admin API connection. Left blank, the local store is used instead."""

    base_url: str = ""
    token: str = ""
    timeout: float = 30.0

    @property
    def is_configured(self) -> bool:
        return self.base_url != ""


class StoreConfig(BaseModel):
    path: str = "./.wallstudio-store.json"

    @property
    def resolved_path(self) -> Path:
        return Path(self.path).expanduser()


class UploadsConfig(BaseModel):
    base_limit_mb: int = DEFAULT_BASE_LIMIT_MB


class ReconcileConfig(BaseModel):
    concurrent: bool = False


class StudioConfig(BaseModel):
    api: ApiConfig = Field(default_factory=ApiConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    uploads: UploadsConfig = Field(default_factory=UploadsConfig)
    reconcile: ReconcileConfig = Field(default_factory=ReconcileConfig)


def load_config(path: str | Path | None = None) -> StudioConfig:
    """Build the effective configuration.

    With no ``path``, the first of these that exists is read:
    ``./.wallstudio.toml``, ``~/.config/wallstudio/.wallstudio.toml``,
    ``~/.config/wallstudio/config.toml``. Environment variables are applied
    on top either way.
    """
    source = Path(path) if path is not None else _find_config_file()
    data: dict[str, Any] = {}
    if source is not None:
        if source.exists():
            data = _load_toml(source)
            logger.info("Loaded config from %s", source)
        else:
            logger.warning("Config file not found: %s", source)
    return _apply_env_vars(StudioConfig.model_validate(data))


def merge_cli_overrides(config: StudioConfig, **cli_kwargs: object) -> StudioConfig:
    """Return a copy of ``config`` with every non-None flag applied.

    Unknown keyword names are ignored.
    """
    overrides = {k: v for k, v in cli_kwargs.items() if v is not None and k in _OVERRIDES}
    return _with_overrides(config, overrides)


def _find_config_file() -> Path | None:
    candidates = [d / CONFIG_FILENAME for d in CONFIG_SEARCH_PATHS]
    candidates.append(Path.home() / ".config" / "wallstudio" / "config.toml")
    return next((c for c in candidates if c.is_file()), None)


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}


def _apply_env_vars(config: StudioConfig) -> StudioConfig:
    overrides: dict[str, object] = {}
    for key, suffix in _ENV_NAMES.items():
        raw = os.environ.get(_ENV_PREFIX + suffix)
        if raw is None:
            continue
        overrides[key] = raw.strip().lower() in _TRUTHY if key == "concurrent" else raw
    return _with_overrides(config, overrides)


def _with_overrides(config: StudioConfig, overrides: dict[str, object]) -> StudioConfig:
    if not overrides:
        return config
    data = config.model_dump()
    for key, value in overrides.items():
        section, field = _OVERRIDES[key]
        data[section][field] = value
    return StudioConfig.model_validate(data)
