"""Configuration management for gir.

Supports TOML configuration format with auto-discovery.
"""

import socket
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Self

CONFIG_FILENAME = "gir.toml"

# Resolved without the system services database.
_WELL_KNOWN_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True)
class ServerConfig:
    """Server configuration."""

    host: str = ""
    port: int = 80
    timeout: float = 1.0


@dataclass(frozen=True)
class RedirectConfig:
    """Redirect configuration, as raw strings."""

    source_prefix: str = "https://github.com"
    vcs: str = "git"
    docs_prefix: str = "https://pkg.go.dev"
    dir_suffix: str = "/tree/master{/dir}"
    file_suffix: str = "/blob/master{/dir}/{file}#L{line}"
    forwarded_header: str = "X-Forwarded-Host"


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    server: ServerConfig
    redirect: RedirectConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for gir.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls.default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def default(cls) -> Self:
        """Create config with all defaults."""
        return cls(server=ServerConfig(), redirect=RedirectConfig())

    @classmethod
    def _discover_config(cls) -> Path | None:
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _load_from_file(cls, path: Path) -> Self:
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        return cls(
            server=cls._parse_server(data.get("server")),
            redirect=cls._parse_redirect(data.get("redirect")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 80)
        if isinstance(port, bool) or not isinstance(port, int):
            raise ValueError("server.port must be an integer")

        timeout = data.get("timeout", 1.0)
        if isinstance(timeout, bool) or not isinstance(timeout, int | float):
            raise ValueError("server.timeout must be a number")
        if timeout <= 0:
            raise ValueError("server.timeout must be positive")

        return ServerConfig(host=host, port=port, timeout=float(timeout))

    @classmethod
    def _parse_redirect(cls, data: object) -> RedirectConfig:
        """Parse redirect configuration section.

        All keys are optional strings. Empty strings are allowed and disable
        the corresponding feature (deep links, forwarded-host handling).

        Args:
            data: Raw redirect section data

        Returns:
            RedirectConfig instance
        """
        if data is None:
            return RedirectConfig()

        if not isinstance(data, dict):
            raise ValueError("redirect section must be a dictionary")

        defaults = RedirectConfig()
        values: dict[str, str] = {}
        for key in (
            "source_prefix",
            "vcs",
            "docs_prefix",
            "dir_suffix",
            "file_suffix",
            "forwarded_header",
        ):
            value = data.get(key, getattr(defaults, key))
            if not isinstance(value, str):
                raise ValueError(f"redirect.{key} must be a string")
            values[key] = value

        return RedirectConfig(**values)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        timeout: float | None = None,
        source_prefix: str | None = None,
        vcs: str | None = None,
        docs_prefix: str | None = None,
        dir_suffix: str | None = None,
        file_suffix: str | None = None,
        forwarded_header: str | None = None,
    ) -> Self:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Returns:
            New Config instance with overrides applied
        """
        server_overrides = {
            key: value
            for key, value in (("host", host), ("port", port), ("timeout", timeout))
            if value is not None
        }
        redirect_overrides = {
            key: value
            for key, value in (
                ("source_prefix", source_prefix),
                ("vcs", vcs),
                ("docs_prefix", docs_prefix),
                ("dir_suffix", dir_suffix),
                ("file_suffix", file_suffix),
                ("forwarded_header", forwarded_header),
            )
            if value is not None
        }

        return replace(
            self,
            server=replace(self.server, **server_overrides),
            redirect=replace(self.redirect, **redirect_overrides),
        )


def parse_listen_address(address: str) -> tuple[str, int]:
    """Split a ``host:port`` listen address.

    The host may be empty (all interfaces) and the port may be a service
    name, so ``:http`` means port 80 on every interface.

    Args:
        address: Listen address

    Returns:
        (host, port) tuple

    Raises:
        ValueError: If the address has no port or the port is unknown
    """
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    if port in _WELL_KNOWN_PORTS:
        number = _WELL_KNOWN_PORTS[port]
    elif port.isdigit():
        number = int(port)
    else:
        try:
            number = socket.getservbyname(port, "tcp")
        except OSError as e:
            raise ValueError(f"unknown port {port!r}") from e

    if not 0 <= number <= 65535:
        raise ValueError(f"invalid port {port!r}")
    return host, number
