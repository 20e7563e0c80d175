"""Live reload — server push that refreshes open tabs after a rebuild.

The dev server exposes one SSE stream per tab; the output watcher turns
changes to the bundle output into ``reload`` messages.
"""

from pawprint.reload.broadcaster import LiveReloadBroadcaster, ReloadConnection
from pawprint.reload.client import RELOAD_ENDPOINT, RELOAD_SCRIPT, inject_reload_script
from pawprint.reload.watcher import OutputWatcher, ReloadFilter

__all__ = [
    "RELOAD_ENDPOINT",
    "RELOAD_SCRIPT",
    "LiveReloadBroadcaster",
    "OutputWatcher",
    "ReloadConnection",
    "ReloadFilter",
    "inject_reload_script",
]
