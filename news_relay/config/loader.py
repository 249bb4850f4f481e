"""Configuration loading helpers for news-relay."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import yaml
from dotenv import load_dotenv

from .models import RelayConfig

CONFIG_FILENAME = "relay_config.yaml"

# environment variable -> (section, field)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "BALE_BOT_TOKEN": ("primary_bot", "token"),
    "TELEGRAM_BOT_TOKEN": ("broadcast_bot", "token"),
    "TELEGRAM_CHANNEL_ID": ("broadcast_bot", "channel_id"),
    "OPENAI_API_KEY": ("translator", "api_key"),
    "OPENAI_BASE_URL": ("translator", "base_url"),
}


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


def apply_env_overrides(payload: dict, environ: Mapping[str, str]) -> dict:
    """Overlay secrets from the environment onto a raw config mapping."""

    merged = {key: (dict(value) if isinstance(value, dict) else value) for key, value in payload.items()}
    for env_name, (section, field) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if not value:
            continue
        block = merged.setdefault(section, {})
        block[field] = value
    return merged


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("NEWS_RELAY_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def config_path(self) -> Path:
        return self.data_dir / CONFIG_FILENAME

    def dotenv_path(self) -> Path:
        return self.project_root / ".env"


class ConfigRepository:
    """Repository encapsulating config IO, env overlay and schema validation."""

    def __init__(
        self,
        locator: ConfigLocator | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.locator = locator or ConfigLocator()
        self._environ = environ
        self._cache: RelayConfig | None = None

    def load(self) -> RelayConfig:
        if self._cache is not None:
            return self._cache
        path = self.locator.config_path()
        if path.exists():
            payload = _read_file(path)
        else:
            payload = RelayConfig().model_dump(mode="json")
            _write_file(path, payload)
        config = RelayConfig.model_validate(apply_env_overrides(payload, self._env()))
        self._cache = config
        return config

    def save(self, config: RelayConfig) -> Path:
        path = self.locator.config_path()
        _write_file(path, config.model_dump(mode="json"))
        self._cache = None
        return path

    def store_path(self, config: RelayConfig | None = None) -> Path:
        config = config or self.load()
        return config.retention.resolved_store_path(self.locator.project_root)

    def _env(self) -> Mapping[str, str]:
        if self._environ is not None:
            return self._environ
        dotenv_path = self.locator.dotenv_path()
        if dotenv_path.exists():
            load_dotenv(dotenv_path, override=False)
        return os.environ


__all__ = ["ConfigLocator", "ConfigRepository", "ENV_OVERRIDES", "apply_env_overrides"]
