"""aiohttp server for gir.

Application factory and route registration.
"""

import logging

from aiohttp import web

from gir.api.vanity import create_vanity_routes
from gir.app_keys import resolver_key, settings_key
from gir.config import Config
from gir.core.resolver import RedirectResolver, RedirectSettings

logger = logging.getLogger(__name__)


def create_settings(config: Config) -> RedirectSettings:
    """Build redirect settings from the redirect configuration section.

    Raises:
        ConfigurationError: If a configured prefix is not a valid URL
    """
    redirect = config.redirect
    return RedirectSettings.create(
        redirect.source_prefix,
        redirect.vcs,
        redirect.docs_prefix,
        redirect.dir_suffix,
        redirect.file_suffix,
        redirect.forwarded_header,
    )


def create_app(config: Config) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration

    Returns:
        Configured aiohttp application

    Raises:
        ConfigurationError: If a configured prefix is not a valid URL
    """
    settings = create_settings(config)

    app = web.Application()
    app[settings_key] = settings
    app[resolver_key] = RedirectResolver(settings)

    app.router.add_routes(create_vanity_routes())

    return app


def run_server(config: Config) -> None:
    """Run the server until interrupted.

    aiohttp stops the listener gracefully on SIGINT and SIGTERM.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    server = config.server
    logger.info(f"Listening on {server.host or '*'}:{server.port}")
    web.run_app(
        app,
        host=server.host or None,
        port=server.port,
        keepalive_timeout=server.timeout,
        shutdown_timeout=server.timeout,
        print=None,
    )
