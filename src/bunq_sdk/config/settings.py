"""Runtime settings for the bunq SDK.

Values are layered: dataclass defaults, then an optional YAML file, then
``BUNQ_*`` environment variables.  Secrets (API key, key passphrase) are
expected to come from the environment or from files in the state directory so
that they never need to be committed.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping
import os

import yaml

from . import const

if TYPE_CHECKING:  # pragma: no cover
    from bunq_sdk.services.api.client import BunqApiClient

__all__ = ["BunqSettings", "SettingsError", "load_settings", "ENV_PREFIX"]

ENV_PREFIX = "BUNQ_"
API_KEY_FILENAME = "api_key"


class SettingsError(RuntimeError):
    """Raised when a configuration source cannot be parsed."""


@dataclass(frozen=True, slots=True)
class BunqSettings:
    api_key: str = field(default="", repr=False)
    base_url: str = const.SANDBOX_URL
    api_version: str = const.API_VERSION
    state_dir: Path = field(default_factory=Path.cwd)
    key_passphrase: str | None = field(default=None, repr=False)
    timeout: float = const.DEFAULT_TIMEOUT
    user_agent: str = const.DEFAULT_USER_AGENT
    language: str = const.DEFAULT_LANGUAGE
    region: str = const.DEFAULT_REGION
    geolocation: str = const.DEFAULT_GEOLOCATION

    @property
    def passphrase_bytes(self) -> bytes | None:
        return self.key_passphrase.encode("utf-8") if self.key_passphrase else None

    def client(self, **overrides: Any) -> "BunqApiClient":
        from bunq_sdk.services.api.client import BunqApiClient

        options: dict[str, Any] = {
            "base_url": self.base_url,
            "api_version": self.api_version,
            "timeout": self.timeout,
            "user_agent": self.user_agent,
            "language": self.language,
            "region": self.region,
            "geolocation": self.geolocation,
        }
        options.update(overrides)
        return BunqApiClient(**options)


def _coerce(name: str, value: Any) -> Any:
    if name == "state_dir":
        return Path(str(value)).expanduser()
    if name == "timeout":
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise SettingsError(f"timeout must be a number, got {value!r}") from exc
    if name == "base_url":
        return str(value).rstrip("/")
    if value is None:
        return None
    return str(value)


def _from_mapping(base: BunqSettings, data: Mapping[str, Any]) -> BunqSettings:
    known = {f.name for f in fields(BunqSettings)}
    changes: dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            raise SettingsError(f"unknown setting: {key}")
        if value is None and key != "key_passphrase":
            continue
        changes[key] = _coerce(key, value)
    return replace(base, **changes) if changes else base


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise SettingsError(f"Failed to parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsError(f"{path} must contain a mapping at top level")
    section = data.get("bunq", data)
    if not isinstance(section, dict):
        raise SettingsError(f"{path}: 'bunq' section must be a mapping")
    return section


def _from_env(environ: Mapping[str, str]) -> dict[str, str]:
    values: dict[str, str] = {}
    for f in fields(BunqSettings):
        raw = environ.get(ENV_PREFIX + f.name.upper())
        if raw:
            values[f.name] = raw
    return values


def load_settings(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> BunqSettings:
    """Resolve settings from defaults, an optional YAML file and the environment."""

    env = os.environ if environ is None else environ
    settings = BunqSettings()
    if config_path is not None:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise SettingsError(f"config file not found: {path}")
        settings = _from_mapping(settings, _read_yaml(path))
    settings = _from_mapping(settings, _from_env(env))

    if not settings.api_key:
        key_file = settings.state_dir / API_KEY_FILENAME
        if key_file.exists():
            settings = replace(settings, api_key=key_file.read_text(encoding="utf-8").strip())
    return settings
