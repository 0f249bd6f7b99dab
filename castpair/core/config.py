"""Settings passed explicitly into every component.

Values come from, in increasing priority: built-in defaults, an optional YAML
settings file, and environment variables.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, TypeVar

from castpair.core.documents import read_yaml, validate_document
from castpair.core.errors import ConfigError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T", float, int)

CONFIG_PATH_ENV = "CASTPAIR_CONFIG"


@dataclass(frozen=True)
class Settings:
    control_plane_url: str = "http://localhost:3000"
    api_prefix: str = "/api"
    host: str = "0.0.0.0"
    port: int = 8080
    rooms_file: Path | None = None
    public_origin: str | None = None
    pairing_secret: str | None = None
    trusted_proxies: int = 0
    http_timeout_s: float = 5.0
    resolver_timeout_s: float = 3.0

    @property
    def api_base(self) -> str:
        prefix = self.api_prefix.strip("/")
        base = self.control_plane_url.rstrip("/")
        return f"{base}/{prefix}" if prefix else base


def _get_env(env: Mapping[str, str], name: str, default: T, caster: Callable[[str], T]) -> T:
    value = env.get(name)
    if value is None or value == "":
        return default
    try:
        return caster(value)
    except (TypeError, ValueError):
        LOGGER.warning("Invalid value for %s: %r (using %r)", name, value, default)
        return default


def _first_env(env: Mapping[str, str], *names: str) -> str | None:
    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


def _from_file(path: Path) -> dict[str, Any]:
    doc = read_yaml(path, error_cls=ConfigError)
    validate_document(doc, "config.schema.json", path, error_cls=ConfigError)
    values = dict(doc)
    if values.get("rooms_file"):
        rooms = Path(values["rooms_file"]).expanduser()
        if not rooms.is_absolute():
            rooms = path.parent / rooms
        values["rooms_file"] = rooms
    return values


def _apply_env(settings: Settings, env: Mapping[str, str]) -> Settings:
    overrides: dict[str, Any] = {}

    url = _first_env(env, "CASTPAIR_CONTROL_PLANE_URL", "RUST_SERVER_BASE")
    if url:
        overrides["control_plane_url"] = url
    if "CASTPAIR_API_PREFIX" in env:
        overrides["api_prefix"] = env["CASTPAIR_API_PREFIX"]
    if env.get("CASTPAIR_HOST"):
        overrides["host"] = env["CASTPAIR_HOST"]
    # An empty value clears these.
    for field_name, env_name in (
        ("public_origin", "CASTPAIR_PUBLIC_ORIGIN"),
        ("pairing_secret", "CASTPAIR_PAIRING_SECRET"),
    ):
        if env_name in env:
            overrides[field_name] = env[env_name] or None
    if env.get("CASTPAIR_ROOMS_FILE"):
        overrides["rooms_file"] = Path(env["CASTPAIR_ROOMS_FILE"]).expanduser()

    overrides["port"] = _get_env(env, "PORT", settings.port, int)
    overrides["trusted_proxies"] = _get_env(env, "CASTPAIR_TRUSTED_PROXIES", settings.trusted_proxies, int)
    overrides["http_timeout_s"] = _get_env(env, "CASTPAIR_HTTP_TIMEOUT_S", settings.http_timeout_s, float)
    overrides["resolver_timeout_s"] = _get_env(
        env, "CASTPAIR_RESOLVER_TIMEOUT_S", settings.resolver_timeout_s, float
    )
    return replace(settings, **overrides)


def _check(settings: Settings) -> Settings:
    if not settings.control_plane_url.startswith(("http://", "https://")):
        raise ConfigError(f"control_plane_url must be an http(s) URL, got '{settings.control_plane_url}'")
    if settings.public_origin and not settings.public_origin.startswith(("http://", "https://")):
        raise ConfigError(f"public_origin must be an http(s) URL, got '{settings.public_origin}'")
    if not 0 < settings.port < 65536:
        raise ConfigError(f"port must be between 1 and 65535, got {settings.port}")
    if settings.trusted_proxies < 0:
        raise ConfigError("trusted_proxies must not be negative")
    if settings.http_timeout_s <= 0 or settings.resolver_timeout_s <= 0:
        raise ConfigError("timeouts must be positive")
    return settings


def load_settings(path: Path | None = None, env: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if env is None else env
    settings = Settings()

    if path is None and env.get(CONFIG_PATH_ENV):
        path = Path(env[CONFIG_PATH_ENV]).expanduser()
    if path is not None:
        known = {f.name for f in fields(Settings)}
        values = {k: v for k, v in _from_file(path).items() if k in known}
        settings = replace(settings, **values)
        LOGGER.debug("Loaded settings file %s", path)

    return _check(_apply_env(settings, env))
