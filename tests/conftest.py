"""Shared test fixtures."""

import pytest
from gir.config import Config, RedirectConfig, ServerConfig
from gir.core.resolver import RedirectResolver, RedirectSettings


@pytest.fixture
def settings() -> RedirectSettings:
    """Settings matching the default command-line configuration."""
    return RedirectSettings.create(
        "https://github.com",
        "git",
        "https://pkg.go.dev",
        "/tree/master{/dir}",
        "/blob/master{/dir}/{file}#L{line}",
        "X-Forwarded-Host",
    )


@pytest.fixture
def resolver(settings: RedirectSettings) -> RedirectResolver:
    return RedirectResolver(settings)


@pytest.fixture
def test_config() -> Config:
    """Create a test configuration without deep-link suffixes."""
    return Config(
        server=ServerConfig(host="127.0.0.1", port=8080),
        redirect=RedirectConfig(dir_suffix="", file_suffix=""),
    )
