"""
Process configuration for the ENBUILD MCP server.

Settings are resolved once at startup, from CLI flags first and environment
variables second, and then passed by value to the server. Nothing below the
CLI reads the environment on its own.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

from .errors import ConfigurationError

TRANSPORTS = ("stdio", "sse", "http")
LOG_LEVELS = ("debug", "info", "warning", "error")

DEFAULT_TIMEOUT = 30.0
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080

# Environment variable consulted for each Settings field
ENV_VARS = {
    "token": "ENBUILD_API_TOKEN",
    "username": "ENBUILD_USERNAME",
    "password": "ENBUILD_PASSWORD",
    "base_url": "ENBUILD_BASE_URL",
    "debug": "ENBUILD_DEBUG",
    "timeout": "ENBUILD_TIMEOUT",
    "transport": "ENBUILD_MCP_TRANSPORT",
    "host": "ENBUILD_MCP_HOST",
    "port": "ENBUILD_MCP_PORT",
    "log_level": "ENBUILD_LOG_LEVEL",
}

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Credentials:
    """Credentials for one backend call: a token, or a username/password pair."""
    base_url: str
    token: str = field(default="", repr=False)
    username: str = ""
    password: str = field(default="", repr=False)

    @property
    def profile(self) -> str:
        """Either 'token' or 'basic'."""
        return "token" if self.token else "basic"


@dataclass(frozen=True)
class Settings:
    """Immutable server settings."""
    base_url: str = ""
    token: str = field(default="", repr=False)
    username: str = ""
    password: str = field(default="", repr=False)
    debug: bool = False
    timeout: float = DEFAULT_TIMEOUT
    transport: str = "stdio"
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "info"

    @property
    def has_basic_auth(self) -> bool:
        return bool(self.username and self.password)

    def validate(self) -> "Settings":
        """
        Check that the server can start with these settings.

        Returns:
            The settings themselves, for chaining

        Raises:
            ConfigurationError: If credentials, base URL or transport are unusable
        """
        if not self.token and not self.has_basic_auth:
            raise ConfigurationError(
                "ENBUILD API token is required. Provide it via --token flag or "
                "ENBUILD_API_TOKEN environment variable (or set both "
                "ENBUILD_USERNAME and ENBUILD_PASSWORD)"
            )
        if not self.base_url:
            raise ConfigurationError(
                "ENBUILD base URL is required. Provide it via --base-url flag or "
                "ENBUILD_BASE_URL environment variable"
            )
        if self.transport not in TRANSPORTS:
            raise ConfigurationError(
                f"invalid transport type: {self.transport}. "
                f"Must be one of: {', '.join(TRANSPORTS)}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"invalid log level: {self.log_level}. "
                f"Must be one of: {', '.join(LOG_LEVELS)}"
            )
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"invalid port: {self.port}")
        return self

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> "Settings":
        """
        Build settings from environment variables, then apply overrides.

        Overrides left as None (e.g. CLI flags the user did not pass) fall
        back to the environment.

        Args:
            environ: Mapping to read from (default: os.environ)
            **overrides: Explicit values, usually parsed CLI flags

        Returns:
            Settings instance (not yet validated)
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> Optional[str]:
            value = env.get(ENV_VARS[name])
            if value is None or not value.strip():
                return None
            return value.strip()

        values: dict = {}
        for name in ("token", "username", "password", "transport", "host"):
            value = get(name)
            if value is not None:
                values[name] = value

        base_url = get("base_url")
        if base_url is not None:
            values["base_url"] = base_url

        log_level = get("log_level")
        if log_level is not None:
            values["log_level"] = log_level.lower()

        debug = get("debug")
        if debug is not None:
            values["debug"] = debug.lower() in _TRUTHY

        timeout = get("timeout")
        if timeout is not None:
            try:
                values["timeout"] = float(timeout)
            except ValueError:
                raise ConfigurationError(
                    f"{ENV_VARS['timeout']} must be a number, got {timeout!r}"
                ) from None

        port = get("port")
        if port is not None:
            try:
                values["port"] = int(port)
            except ValueError:
                raise ConfigurationError(
                    f"{ENV_VARS['port']} must be an integer, got {port!r}"
                ) from None

        settings = cls(**values).with_overrides(**overrides)
        return replace(settings, base_url=settings.base_url.rstrip("/"))
