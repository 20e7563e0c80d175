"""Output watcher — triggers live reload when the bundle output changes.

Watches the output directory (and whatever the ``watch`` option names)
with ``watchfiles.awatch``. One debounced batch of changes becomes one
``reload`` broadcast, so an esbuild rebuild that rewrites several files
reloads each tab once.
"""

from __future__ import annotations

import asyncio
import fnmatch
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import Change, DefaultFilter, awatch

if TYPE_CHECKING:
    from pawprint.config import ToolchainConfig
    from pawprint.reload.broadcaster import LiveReloadBroadcaster

logger = logging.getLogger("pawprint.reload")


class ReloadFilter(DefaultFilter):
    """Accepts changes inside the output directory or matching a watch pattern.

    Patterns are shell globs relative to the project root (``*`` also
    matches ``/``). The staging tree is never a reload trigger.
    """

    def __init__(self, config: ToolchainConfig) -> None:
        super().__init__()
        self._root = config.root
        self._output = config.output_path
        self._staging = config.root / config.cache_dir
        self._patterns = config.watch

    def __call__(self, change: Change, path: str) -> bool:
        if not super().__call__(change, path):
            return False
        return self.matches(Path(path))

    def matches(self, path: Path) -> bool:
        if path.is_relative_to(self._staging):
            return False
        if path.is_relative_to(self._output):
            return True
        try:
            rel = path.relative_to(self._root).as_posix()
        except ValueError:
            return False
        return any(fnmatch.fnmatchcase(rel, pattern) for pattern in self._patterns)


class OutputWatcher:
    """Pushes ``reload`` to connected tabs whenever the output changes.

    Args:
        config: Project configuration.
        broadcaster: Receives one ``push_reload`` per batch of changes.

    """

    def __init__(self, config: ToolchainConfig, broadcaster: LiveReloadBroadcaster) -> None:
        self._config = config
        self._broadcaster = broadcaster
        self._filter = ReloadFilter(config)
        self._stop_event = asyncio.Event()

    def stop(self) -> None:
        self._stop_event.set()

    def watch_paths(self) -> tuple[Path, ...]:
        """Directories handed to watchfiles.

        The output directory is always watched; the project root is added
        when ``watch`` patterns are configured.
        """
        paths = [self._config.output_path]
        if self._config.watch:
            paths.append(self._config.root)
        return tuple(paths)

    def notify(self, changed: set[tuple[Change, str]]) -> int:
        """Broadcast one reload for a batch of changes. Returns clients notified."""
        if not changed:
            return 0
        trigger = min(path for _, path in changed)
        return self._broadcaster.push_reload(trigger)

    async def run(self) -> None:
        """Watch until ``stop()`` is called."""
        self._config.output_path.mkdir(parents=True, exist_ok=True)
        async for changed in awatch(
            *self.watch_paths(),
            watch_filter=self._filter,
            stop_event=self._stop_event,
            debounce=self._config.debounce_ms,
            step=min(50, self._config.debounce_ms),
        ):
            self.notify(changed)
