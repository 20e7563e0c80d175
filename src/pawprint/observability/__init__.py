"""Toolchain observability — one event model for generation, bundling and reload.

Aggregates events from:
- **Generator**: barrels, route table and scaffolded stubs written to disk
- **Bundler**: staging, one-shot builds and watch rebuilds
- **Reload**: ``reload`` messages pushed to connected browsers
- **Pounce**: connection lifecycle, via the ``LifecycleCollector`` protocol

All events are frozen dataclasses with nanosecond timestamps.

Quick Start:
    >>> from pawprint.observability import StackCollector, EventLog
    >>> log = EventLog()
    >>> collector = StackCollector(log)
    >>> # Pass collector to Pounce as lifecycle_collector
    >>> # and to ConventionGenerator / BuildOrchestrator

"""

from pawprint.observability.collector import StackCollector
from pawprint.observability.events import (
    BundleEvent,
    ModulesGenerated,
    ReloadBroadcast,
    StackEvent,
    now_ns,
)
from pawprint.observability.log import EventLog

__all__ = [
    "BundleEvent",
    "EventLog",
    "ModulesGenerated",
    "ReloadBroadcast",
    "StackCollector",
    "StackEvent",
    "now_ns",
]
