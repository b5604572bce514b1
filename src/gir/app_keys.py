"""Application keys for type-safe app configuration access."""

from aiohttp import web

from gir.core.resolver import RedirectResolver, RedirectSettings

settings_key = web.AppKey("settings", RedirectSettings)
resolver_key = web.AppKey("resolver", RedirectResolver)
