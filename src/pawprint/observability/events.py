"""Event model for toolchain observability.

Pounce lifecycle events are stored as-is; the types below cover the
toolchain's own work.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

"""

import time
from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class ModulesGenerated:
    """A generated module was recomputed.

    Attributes:
        kind: ``routes`` for the route table, ``barrel`` for an ``index.js``,
            ``scaffold`` for a home page stub.
        path: Absolute path of the generated file.
        written: False when the content on disk was already up to date.
        entries: Routes or exports in the module.
        duration_ms: Time spent scanning, rendering and writing.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    kind: Literal["routes", "barrel", "scaffold"]
    path: str
    written: bool
    entries: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class BundleEvent:
    """The bundler pipeline did something.

    Attributes:
        kind: ``stage`` (a source file mirrored into the staging tree),
            ``build`` (one-shot bundle) or ``watch`` (watch process started).
        source: Source file path, or the entry point for bundle runs.
        duration_ms: Time taken in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    kind: Literal["stage", "build", "watch"]
    source: str
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ReloadBroadcast:
    """A ``reload`` message was pushed to connected browsers.

    Attributes:
        trigger_path: Output file whose change caused the reload.
        clients_notified: Number of SSE clients that received it.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    trigger_path: str
    clients_notified: int
    timestamp_ns: int


type StackEvent = ModulesGenerated | BundleEvent | ReloadBroadcast


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
