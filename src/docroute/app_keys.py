"""Application keys for type-safe app configuration access."""

from aiohttp import web

from docroute.core.build import SiteState

state_key = web.AppKey("state", SiteState)
live_reload_enabled_key = web.AppKey("live_reload_enabled", bool)
