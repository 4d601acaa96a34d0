"""aiohttp preview server for Quire.

Serves the built output directory with pretty URLs and, when live reload is
enabled, rebuilds the site on source changes and reloads open pages.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from aiohttp import web

from quire.app_keys import live_reload_key, output_dir_key
from quire.config import Config
from quire.live import LiveReloadManager, create_live_reload_routes
from quire.live.reload import LIVE_RELOAD_PATH

logger = logging.getLogger(__name__)

LIVE_RELOAD_SCRIPT = f"""<script>
(function () {{
  var proto = location.protocol === "https:" ? "wss://" : "ws://";
  var ws = new WebSocket(proto + location.host + "{LIVE_RELOAD_PATH}");
  ws.onmessage = function (event) {{
    var data = JSON.parse(event.data);
    if (data.type === "reload") {{ location.reload(); }}
  }};
}})();
</script>
"""


def inject_live_reload(html: str) -> str:
    """Insert the live reload client before ``</body>``."""
    marker = html.lower().rfind("</body>")
    if marker == -1:
        return html + LIVE_RELOAD_SCRIPT
    return html[:marker] + LIVE_RELOAD_SCRIPT + html[marker:]


def resolve_output_file(output_dir: Path, request_path: str) -> Path | None:
    """Map a request path to a file in the output directory.

    Directories resolve to their ``index.html``. Paths escaping the output
    directory resolve to None.
    """
    root = output_dir.resolve()
    candidate = (root / request_path.lstrip("/")).resolve()
    if not candidate.is_relative_to(root):
        return None
    if candidate.is_dir():
        candidate = candidate / "index.html"
    if not candidate.is_file():
        return None
    return candidate


async def serve_output(request: web.Request) -> web.StreamResponse:
    """Serve a file from the built site."""
    output_dir = request.app[output_dir_key]
    path = request.match_info["path"]

    if path and not path.endswith("/") and (output_dir / path).is_dir():
        raise web.HTTPMovedPermanently(f"/{path}/")

    target = resolve_output_file(output_dir, path)
    status = 200
    if target is None:
        target = resolve_output_file(output_dir, "404.html")
        status = 404
        if target is None:
            raise web.HTTPNotFound()

    manager = request.app.get(live_reload_key)
    if manager is not None and target.suffix == ".html":
        html = inject_live_reload(target.read_text(encoding="utf-8"))
        return web.Response(text=html, status=status, content_type="text/html")

    return web.FileResponse(target, status=status)


def create_app(
    config: Config,
    *,
    rebuild: Callable[[], object] | None = None,
) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        rebuild: Callable that rebuilds the site; run on source changes when
            live reload is enabled

    Returns:
        Configured aiohttp application
    """
    app = web.Application()
    app[output_dir_key] = config.build.output_dir

    # Live reload WebSocket endpoint
    if config.live_reload.enabled:
        watch_dirs = [config.build.source_dir]
        for extra in (config.build.layouts_dir, config.build.static_dir):
            if extra is not None:
                watch_dirs.append(extra)

        manager = LiveReloadManager(
            watch_dirs,
            watch_patterns=config.live_reload.watch_patterns,
            rebuild=rebuild,
        )
        app[live_reload_key] = manager
        app.router.add_routes(create_live_reload_routes(manager))
        app.on_startup.append(_start_live_reload)
        app.on_cleanup.append(_stop_live_reload)

    # Catch-all must be last
    app.router.add_get("/{path:.*}", serve_output)

    return app


async def _start_live_reload(app: web.Application) -> None:
    """Start live reload on application startup."""
    await app[live_reload_key].start()


async def _stop_live_reload(app: web.Application) -> None:
    """Stop live reload on application cleanup."""
    await app[live_reload_key].stop()


def run_server(config: Config, *, rebuild: Callable[[], object] | None = None) -> None:
    """Run the server.

    Args:
        config: Application configuration
        rebuild: Callable that rebuilds the site on source changes
    """
    app = create_app(config, rebuild=rebuild)
    logger.info(f"Serving {config.build.output_dir} on {config.server.host}:{config.server.port}")
    web.run_app(app, host=config.server.host, port=config.server.port, print=None)
