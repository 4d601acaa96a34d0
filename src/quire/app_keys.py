"""Application keys for type-safe app configuration access."""

from pathlib import Path

from aiohttp import web

from quire.live import LiveReloadManager

output_dir_key = web.AppKey("output_dir", Path)
live_reload_key = web.AppKey("live_reload", LiveReloadManager)
