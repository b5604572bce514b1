"""Vanity import endpoint.

Every path is routed here. Requests carrying ``go-get=1`` get the redirect
page, everything else gets 404.
"""

import logging

from aiohttp import web
from yarl import URL

from gir.app_keys import resolver_key
from gir.core.errors import RequestResolutionError
from gir.core.resolver import GO_GET_PARAM, is_vanity_request
from gir.core.template import render_page

logger = logging.getLogger(__name__)


def create_vanity_routes() -> list[web.RouteDef]:
    return [web.route("*", "/{path:.*}", get_vanity)]


async def get_vanity(request: web.Request) -> web.Response:
    path = request.rel_url.raw_path
    if not is_vanity_request(request.query.getall(GO_GET_PARAM, []), path):
        raise web.HTTPNotFound()

    resolver = request.app[resolver_key]
    try:
        target = resolver.resolve(
            path,
            request_host=request.host,
            url_host=_explicit_host(request),
            headers=request.headers,
        )
    except RequestResolutionError as e:
        logger.warning(f"Cannot resolve {path}: {e}")
        return web.Response(status=400, text=str(e))

    body = render_page(target)
    logger.debug(f"{request.method} {path} -> {target.import_path}")
    return web.Response(text=body, content_type="text/html")


def _explicit_host(request: web.Request) -> str | None:
    # Only absolute-form request targets (GET http://host/path) carry a host.
    target = request.raw_path
    if target.startswith("/"):
        return None
    url = URL(target)
    if not url.absolute:
        return None
    return url.raw_authority.rpartition("@")[2]
