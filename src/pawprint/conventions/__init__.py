"""Convention layer — directory layout as generated modules.

Scans the ``pages``, ``components`` and ``modules`` directories and keeps
``routes.js`` and the per-directory barrels in step with them.
"""

from pawprint.conventions.barrels import Barrel, build_barrel, render_barrel
from pawprint.conventions.generator import ConventionGenerator, GenerationReport
from pawprint.conventions.parser import Convention, ConventionKind, classify, to_symbol
from pawprint.conventions.routes import RouteEntry, RouteTable, build_route_table
from pawprint.conventions.scanner import FileEntry, scan
from pawprint.conventions.watcher import SourceWatcher, WatchDispatcher, WatchEvent

__all__ = [
    "Barrel",
    "Convention",
    "ConventionGenerator",
    "ConventionKind",
    "FileEntry",
    "GenerationReport",
    "RouteEntry",
    "RouteTable",
    "SourceWatcher",
    "WatchDispatcher",
    "WatchEvent",
    "build_barrel",
    "build_route_table",
    "classify",
    "render_barrel",
    "scan",
    "to_symbol",
]
