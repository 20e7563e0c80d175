"""Stack collector — single entry point for recording toolchain events.

Duck-types Pounce's ``LifecycleCollector`` protocol so the dev server's
connection events land in the same ``EventLog`` as generation, bundle and
reload events.

"""

from __future__ import annotations

from typing import Any

from pawprint.observability.events import (
    BundleEvent,
    ModulesGenerated,
    ReloadBroadcast,
    now_ns,
)
from pawprint.observability.log import EventLog


class StackCollector:
    """Records toolchain events into an ``EventLog``.

    Args:
        log: The EventLog to store events in. A fresh one is created if omitted.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    def record(self, event: Any) -> None:
        """Record a Pounce lifecycle event (``LifecycleCollector`` protocol)."""
        self._log.append(event)

    def record_generation(
        self,
        kind: str,
        path: str,
        *,
        written: bool = True,
        entries: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        self._log.append(
            ModulesGenerated(
                kind=kind,  # type: ignore[arg-type]
                path=path,
                written=written,
                entries=entries,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_bundle(self, kind: str, source: str, *, duration_ms: float = 0.0) -> None:
        self._log.append(
            BundleEvent(
                kind=kind,  # type: ignore[arg-type]
                source=source,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_reload(self, trigger_path: str, *, clients_notified: int = 0) -> None:
        self._log.append(
            ReloadBroadcast(
                trigger_path=trigger_path,
                clients_notified=clients_notified,
                timestamp_ns=now_ns(),
            )
        )
