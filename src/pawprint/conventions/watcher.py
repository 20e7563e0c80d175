"""Watch dispatcher — keeps generated modules in step with the source tree.

The dispatcher is a two-state machine::

    SCANNING --initial_scan()--> READY

While scanning, incoming events are dropped: the initial full regeneration
already reflects them. The initial scan runs once ``SourceWatcher`` is
live, so a change either lands before the scan or produces an event. Once ready, each batch of filesystem events is
turned into a single ``DispatchPlan`` (so an editor save that fires several
events regenerates each affected module once) and executed.

``SourceWatcher`` produces those batches from ``watchfiles.awatch``, whose
debounce window provides the coalescing.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import Change, DefaultFilter, awatch

from pawprint.conventions.parser import area_of, classify, is_generated

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from pawprint._types import WatchKind
    from pawprint.config import ToolchainConfig
    from pawprint.conventions.generator import ConventionGenerator, GenerationReport

logger = logging.getLogger("pawprint.watcher")


@dataclass(frozen=True, slots=True)
class WatchEvent:
    """A single filesystem change.

    Attributes:
        kind: ``add``, ``change``, ``unlink``, ``addDir`` or ``unlinkDir``.
        path: Absolute path of the changed file or directory.

    """

    kind: WatchKind
    path: Path

    @property
    def is_directory_event(self) -> bool:
        return self.kind in ("addDir", "unlinkDir")


def event_from_change(change: Change, path: Path) -> WatchEvent:
    """Translate a watchfiles change into a WatchEvent.

    watchfiles does not say whether a deleted path was a directory; a
    deleted path without a suffix is treated as a directory. Dotted
    directory names still come out as ``unlink``, which ``plan()`` covers.
    """
    if change == Change.added:
        return WatchEvent("addDir" if path.is_dir() else "add", path)
    if change == Change.deleted:
        return WatchEvent("unlinkDir" if not path.suffix else "unlink", path)
    return WatchEvent("change", path)


class WatchState(enum.Enum):
    SCANNING = "scanning"
    READY = "ready"


@dataclass(slots=True)
class DispatchPlan:
    """Regeneration work collected from one batch of events.

    Attributes:
        routes: Rebuild the route table.
        barrels: Directories whose barrel must be rebuilt.
        scaffold: New directories that need their default files.

    """

    routes: bool = False
    barrels: set[Path] = field(default_factory=set)
    scaffold: set[Path] = field(default_factory=set)

    def __bool__(self) -> bool:
        return self.routes or bool(self.barrels) or bool(self.scaffold)

    def merge(self, other: DispatchPlan) -> None:
        self.routes = self.routes or other.routes
        self.barrels |= other.barrels
        self.scaffold |= other.scaffold


class WatchDispatcher:
    """Routes filesystem events to regeneration actions.

    Handlers run one batch at a time; each action rescans the filesystem, so
    the output always reflects the tree as it was when the action ran.

    Args:
        generator: The generator that owns the project's generated modules.

    """

    def __init__(self, generator: ConventionGenerator) -> None:
        self._generator = generator
        self._config = generator.config
        self._state = WatchState.SCANNING

    @property
    def state(self) -> WatchState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state is WatchState.READY

    def mark_ready(self) -> bool:
        """Leave the scanning state. Returns False if already ready."""
        if self._state is WatchState.READY:
            return False
        self._state = WatchState.READY
        return True

    def initial_scan(self) -> GenerationReport:
        """Regenerate everything once, then start handling events."""
        report = self._generator.regenerate_all()
        self.mark_ready()
        return report

    def plan(self, event: WatchEvent) -> DispatchPlan:
        """Decide what a single event requires. Pure apart from ``is_dir``."""
        config = self._config
        plan = DispatchPlan()
        area = area_of(event.path, config)
        if area is None or is_generated(event.path, config):
            return plan
        if event.path == config.area_path(area):
            # The convention directory itself came or went.
            if event.kind == "addDir":
                plan.barrels.add(event.path)
            plan.routes = area == "pages" and config.autoroute
            return plan

        if event.kind == "addDir":
            plan.scaffold.add(event.path)
            plan.routes = area == "pages" and config.autoroute
            return plan

        if event.kind == "unlinkDir" or (
            event.kind == "unlink" and event.path.suffix != config.template_ext
        ):
            # A removed ``pages/v1.0`` arrives as an unlink; anything that
            # was not a template may have held pages.
            plan.routes = area == "pages" and config.autoroute
            return plan

        relative = event.path.relative_to(config.area_path(area))
        convention = classify(relative.as_posix(), area=area, template_ext=config.template_ext)
        if not convention.kind.exported:
            return plan

        plan.barrels.add(event.path.parent)
        if area == "pages" and config.autoroute:
            plan.routes = True
        return plan

    def dispatch(self, events: Iterable[WatchEvent]) -> DispatchPlan | None:
        """Handle a batch of events as one regeneration pass.

        Returns the executed plan, or None if the dispatcher is still
        scanning. Filesystem errors are logged per action; they never
        escape into the watch loop.
        """
        if not self.ready:
            return None

        plan = DispatchPlan()
        for event in events:
            plan.merge(self.plan(event))
        if plan:
            self._execute(plan)
        return plan

    def _execute(self, plan: DispatchPlan) -> None:
        for directory in sorted(plan.scaffold):
            self._attempt(self._generator.scaffold_directory, directory)
        for directory in sorted(plan.barrels - plan.scaffold):
            self._attempt(self._generator.rebuild_barrel, directory)
        if plan.routes:
            self._attempt(lambda _path: self._generator.rebuild_routes(), self._config.routes_path)

    def _attempt(self, action: Callable[[Path], object], path: Path) -> None:
        try:
            action(path)
        except OSError as exc:
            logger.error("Failed to regenerate %s: %s", path, exc)


class SourceWatcher:
    """Watches the source directory and yields batches of WatchEvents.

    Uses ``watchfiles.awatch`` inside the running event loop. Each yielded
    batch contains the events collected during one debounce window.

    Args:
        config: Project configuration (source path and debounce window).

    """

    def __init__(self, config: ToolchainConfig) -> None:
        self._config = config
        self._stop_event = asyncio.Event()
        self._started = asyncio.Event()

    def stop(self) -> None:
        """Ask the running ``batches()`` iterator to finish."""
        self._stop_event.set()

    async def wait_started(self) -> None:
        """Wait until the task iterating ``batches()`` is watching.

        The flag is set as the iterator enters ``awatch``, which registers
        the OS watch before its first await. A waiter therefore resumes
        only once changes are being recorded.
        """
        await self._started.wait()

    async def batches(self) -> AsyncIterator[list[WatchEvent]]:
        """Yield lists of WatchEvents until ``stop()`` is called."""
        self._started.set()
        src = self._config.src_path
        src.mkdir(parents=True, exist_ok=True)
        async for raw_changes in awatch(
            src,
            watch_filter=DefaultFilter(),
            stop_event=self._stop_event,
            debounce=self._config.debounce_ms,
            step=min(50, self._config.debounce_ms),
        ):
            events = [
                event_from_change(change, Path(path_str))
                for change, path_str in sorted(raw_changes, key=lambda c: c[1])
            ]
            if events:
                yield events
