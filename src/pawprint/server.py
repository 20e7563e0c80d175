"""Dev server — serves the bundle output as a single-page application.

Every GET resolves to a file under the output directory. Anything that is
not a file there (client-side routes, ``/``, ``index.html``) gets the entry
document, with the live-reload client injected in development mode.

Routes registered on the chirp ``App``:

    /__pawprint/reload   SSE stream of ``reload`` messages (dev only)
    /__pawprint/stats    event log summary as JSON (dev only)
    /                    entry document
    /{filepath:path}     output file, or the entry document

"""

from __future__ import annotations

import json
import logging
import mimetypes
from pathlib import Path
from typing import TYPE_CHECKING, Any

from chirp import App, AppConfig, EventStream, Response

from pawprint.reload.client import RELOAD_ENDPOINT, inject_reload_script

if TYPE_CHECKING:
    from pawprint.config import ToolchainConfig
    from pawprint.observability.collector import StackCollector
    from pawprint.reload.broadcaster import LiveReloadBroadcaster

logger = logging.getLogger("pawprint.server")

STATS_ENDPOINT = "/__pawprint/stats"
INDEX_DOCUMENT = "index.html"

CONTENT_TYPES: dict[str, str] = {
    "html": "text/html",
    "css": "text/css",
    "js": "text/javascript",
    "json": "application/json",
    "ico": "image/ico",
    "png": "image/png",
    "jpg": "image/jpg",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "ogv": "video/ogg",
    "pdf": "application/pdf",
}

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def content_type_for(path: str | Path) -> str:
    """Content type for *path*, from its extension.

    The fixed table covers what a front-end bundle serves; other extensions
    go through ``mimetypes`` and finally fall back to
    ``application/octet-stream``.
    """
    suffix = Path(path).suffix.lower()
    if not suffix:
        return DEFAULT_CONTENT_TYPE
    known = CONTENT_TYPES.get(suffix[1:])
    if known is not None:
        return known
    guessed, _ = mimetypes.guess_type(f"file{suffix}")
    return guessed or DEFAULT_CONTENT_TYPE


def resolve_output_path(output_dir: Path, filepath: str) -> Path | None:
    """Map a request path onto *output_dir*.

    Returns None when the path escapes the output directory.
    """
    root = output_dir.resolve()
    candidate = (root / filepath.lstrip("/")).resolve()
    if not candidate.is_relative_to(root):
        return None
    return candidate


class _EntryDocument:
    """Reads the entry HTML document on every request."""

    __slots__ = ("_dev", "_path")

    def __init__(self, path: Path, *, dev: bool) -> None:
        self._path = path
        self._dev = dev

    def response(self) -> Response:
        try:
            html = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("Cannot read entry document %s: %s", self._path, exc)
            return Response(
                body="Internal Server Error", status=500, content_type="text/plain"
            )
        if self._dev:
            html = inject_reload_script(html)
        return Response(body=html, content_type="text/html")


def create_app(
    config: ToolchainConfig,
    *,
    dev: bool = False,
    broadcaster: LiveReloadBroadcaster | None = None,
    collector: StackCollector | None = None,
) -> App:
    """Build the chirp application serving ``config.output_path``.

    Args:
        config: Project configuration.
        dev: Inject the reload client and expose the dev endpoints.
        broadcaster: Live-reload broadcaster backing the SSE endpoint.
        collector: Collector whose log the stats endpoint reports.

    """
    app = App(
        config=AppConfig(
            host=config.host,
            port=config.port,
            safe_target=False,
            sse_lifecycle=False,
        )
    )
    output_dir = config.output_path
    entry = _EntryDocument(output_dir / INDEX_DOCUMENT, dev=dev)

    if dev and broadcaster is not None:
        _register_reload_endpoint(app, broadcaster)
    if dev and collector is not None:
        _register_stats_endpoint(app, collector)

    async def serve_index() -> Response:
        return entry.response()

    async def serve_file(filepath: str) -> Response:
        target = resolve_output_path(output_dir, filepath)
        if target is None:
            logger.warning("Refusing path outside %s: %s", output_dir, filepath)
            return Response(body="Forbidden", status=403, content_type="text/plain")
        if target.name == INDEX_DOCUMENT or not target.is_file():
            return entry.response()
        try:
            data = target.read_bytes()
        except OSError:
            return entry.response()
        if dev:
            logger.debug("served %s", target.name)
        return Response(body=data, content_type=content_type_for(target))

    app.route("/", name="pawprint:index")(serve_index)
    app.route("/{filepath:path}", name="pawprint:file")(serve_file)
    return app


def _register_reload_endpoint(app: App, broadcaster: LiveReloadBroadcaster) -> None:
    async def reload_stream() -> Any:
        conn = broadcaster.subscribe()
        return EventStream(broadcaster.client_generator(conn))

    app.route(RELOAD_ENDPOINT, name="pawprint:reload")(reload_stream)


def _register_stats_endpoint(app: App, collector: StackCollector) -> None:
    async def stats() -> Response:
        payload = json.dumps({"event_log": collector.log.stats()}, indent=2)
        return Response(body=payload, content_type="application/json")

    app.route(STATS_ENDPOINT, name="pawprint:stats")(stats)
