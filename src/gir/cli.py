"""CLI interface for gir.

Command-line tool for serving and inspecting vanity import redirects.
"""

import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import NoReturn

import click

from gir.config import Config, parse_listen_address
from gir.core.errors import GirError
from gir.core.resolver import RedirectResolver, is_vanity_request
from gir.core.template import render_page
from gir.server import create_settings, run_server

LOG_FORMAT = "gir: %(asctime)s %(levelname)s %(name)s: %(message)s"


def _redirect_options(func: Callable[..., None]) -> Callable[..., None]:
    """Add the options that override the redirect configuration section."""
    options = [
        click.option(
            "--config",
            "-c",
            "config_path",
            type=click.Path(exists=True, path_type=Path),
            default=None,
            help="Path to configuration file (default: auto-discover gir.toml)",
        ),
        click.option(
            "--source-prefix",
            "-p",
            default=None,
            help="VCS prefix URL (default: https://github.com)",
        ),
        click.option(
            "--vcs",
            "-t",
            default=None,
            help="Version control system (default: git)",
        ),
        click.option(
            "--docs-prefix",
            "-r",
            default=None,
            help="Documentation redirect prefix URL (default: https://pkg.go.dev)",
        ),
        click.option(
            "--dir-suffix",
            default=None,
            help="Directory deep-link suffix, empty to disable",
        ),
        click.option(
            "--file-suffix",
            default=None,
            help="File deep-link suffix, empty to disable",
        ),
        click.option(
            "--forwarded-header",
            "-x",
            default=None,
            help="Header carrying the real host, empty to disable",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
def cli(verbose: bool) -> None:
    """gir - Go import redirector."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


@cli.command()
@_redirect_options
@click.option(
    "--listen",
    "-l",
    default=None,
    help="Listen address as host:port (e.g. :http, 127.0.0.1:8080)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Keep-alive and shutdown timeout in seconds (overrides config)",
)
def serve(
    config_path: Path | None,
    source_prefix: str | None,
    vcs: str | None,
    docs_prefix: str | None,
    dir_suffix: str | None,
    file_suffix: str | None,
    forwarded_header: str | None,
    listen: str | None,
    host: str | None,
    port: int | None,
    timeout: float | None,
) -> None:
    """Start the redirect server."""
    try:
        if listen is not None:
            host, port = parse_listen_address(listen)
        config = Config.load(config_path).with_overrides(
            host=host,
            port=port,
            timeout=timeout,
            source_prefix=source_prefix,
            vcs=vcs,
            docs_prefix=docs_prefix,
            dir_suffix=dir_suffix,
            file_suffix=file_suffix,
            forwarded_header=forwarded_header,
        )
        settings = create_settings(config)
    except (GirError, ValueError) as e:
        _fail(e)

    click.echo(f"Starting server on {config.server.host or '*'}:{config.server.port}")
    click.echo(f"Sources: {settings.source_prefix} ({settings.vcs})")
    click.echo(f"Docs: {settings.docs_prefix}")
    if settings.forwarded_header:
        click.echo(f"Forwarded host header: {settings.forwarded_header}")
    else:
        click.echo("Forwarded host header: disabled")

    run_server(config)


@cli.command()
@_redirect_options
@click.argument("path")
@click.option(
    "--host",
    default="localhost",
    help="Host the request is addressed to (default: localhost)",
)
@click.option(
    "--html",
    is_flag=True,
    help="Print the rendered redirect page instead of a summary",
)
def resolve(
    config_path: Path | None,
    source_prefix: str | None,
    vcs: str | None,
    docs_prefix: str | None,
    dir_suffix: str | None,
    file_suffix: str | None,
    forwarded_header: str | None,
    path: str,
    host: str,
    html: bool,
) -> None:
    """Show the redirect a go-get request for PATH would receive."""
    if not path.startswith("/"):
        path = f"/{path}"

    try:
        config = Config.load(config_path).with_overrides(
            source_prefix=source_prefix,
            vcs=vcs,
            docs_prefix=docs_prefix,
            dir_suffix=dir_suffix,
            file_suffix=file_suffix,
            forwarded_header=forwarded_header,
        )
        resolver = RedirectResolver(create_settings(config))
        if not is_vanity_request(["1"], path):
            raise ValueError("path must not be empty")
        target = resolver.resolve(path, request_host=host)
    except (GirError, ValueError) as e:
        _fail(e)

    if html:
        click.echo(render_page(target), nl=False)
        return

    click.echo(f"Import: {target.import_path}")
    click.echo(f"go-import: {target.go_import}")
    click.echo(f"go-source: {target.go_source}")
    click.echo(f"Docs: {target.docs_url}")


def _fail(error: Exception) -> NoReturn:
    click.echo(click.style(f"Error: {error}", fg="red"), err=True)
    sys.exit(1)
