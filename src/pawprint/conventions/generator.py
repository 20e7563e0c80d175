"""Convention generator — owns every generated module of a project.

Ties the scanner, parser and builders to the project layout described by
``ToolchainConfig``. Each public method performs a full recomputation of
what it writes; there is no in-memory state to go stale between calls.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pawprint.config import CONVENTION_AREAS
from pawprint.conventions.barrels import build_barrel, render_barrel
from pawprint.conventions.parser import HOME_MARKER, area_of
from pawprint.conventions.routes import RouteTable, build_route_table, render_route_table
from pawprint.conventions.scanner import subdirectories
from pawprint.conventions.writer import write_module

if TYPE_CHECKING:
    from pawprint.config import ToolchainConfig
    from pawprint.observability.collector import StackCollector

logger = logging.getLogger("pawprint.generator")


@dataclass(frozen=True, slots=True)
class GenerationReport:
    """Outcome of a full regeneration pass.

    Attributes:
        written: Generated files whose content changed.
        unchanged: Generated files that were already up to date.
        route_count: Number of rows in the route table (0 if disabled).
        duration_ms: Wall time of the pass.
        warnings: Route conflicts found while building the route table.

    """

    written: tuple[Path, ...]
    unchanged: tuple[Path, ...]
    route_count: int
    duration_ms: float
    warnings: tuple[str, ...] = ()


class ConventionGenerator:
    """Regenerates barrels and the route table for one project.

    Args:
        config: Project configuration.
        collector: Optional observability collector.

    """

    def __init__(
        self, config: ToolchainConfig, collector: StackCollector | None = None
    ) -> None:
        self._config = config
        self._collector = collector

    @property
    def config(self) -> ToolchainConfig:
        return self._config

    def route_table(self) -> RouteTable:
        """Compute (without writing) the current route table."""
        return build_route_table(
            self._config.pages_path,
            routes_file=self._config.routes_path,
            template_ext=self._config.template_ext,
        )

    def rebuild_routes(self) -> bool:
        """Rewrite ``routes.js`` from the ``pages`` tree.

        Does nothing when ``autoroute`` is disabled or the source directory
        is missing. Returns True if the file content changed.
        """
        return self._write_routes()[0]

    def _write_routes(self) -> tuple[bool, RouteTable]:
        if not self._config.autoroute or not self._config.src_path.is_dir():
            return False, RouteTable()
        t0 = time.perf_counter()
        table = self.route_table()
        written = write_module(self._config.routes_path, render_route_table(table))
        self._record("routes", self._config.routes_path, written, len(table), t0)
        if written:
            logger.info("routes.js: %d route%s", len(table), "" if len(table) == 1 else "s")
        return written, table

    def rebuild_barrel(self, directory: Path) -> bool:
        """Rewrite the barrel of *directory*. Missing directories are skipped."""
        if not directory.is_dir():
            return False
        t0 = time.perf_counter()
        barrel = build_barrel(directory, self._config)
        written = write_module(barrel.path, render_barrel(barrel))
        self._record("barrel", barrel.path, written, len(barrel.exports), t0)
        if written:
            logger.debug("barrel %s: %s", barrel.path, ", ".join(barrel.symbols) or "empty")
        return written

    def scaffold_directory(self, directory: Path) -> tuple[Path, ...]:
        """Give a new convention directory its default files.

        A tree moved into place is reported as its top directory only, so
        every directory below *directory* is scaffolded as well. Page
        directories get a home page stub (``+Name.xht``) unless they already
        hold one. Every directory gets its barrel. Returns the paths that
        were created or changed.
        """
        pages = area_of(directory, self._config) == "pages"
        created: list[Path] = []
        for current in subdirectories(directory):
            if pages and not self._has_home(current):
                stub = current / f"{HOME_MARKER}{_title(current.name)}{self._config.template_ext}"
                t0 = time.perf_counter()
                write_module(stub, f"<h1>{_title(current.name)}</h1>\n")
                self._record("scaffold", stub, True, 1, t0)
                created.append(stub)
            if self.rebuild_barrel(current):
                created.append(current / self._config.barrel_name)
        return tuple(created)

    def regenerate_all(self) -> GenerationReport:
        """Rewrite every barrel and the route table.

        Raises:
            OSError: If a generated file cannot be written.

        """
        t0 = time.perf_counter()
        written: list[Path] = []
        unchanged: list[Path] = []

        for area in CONVENTION_AREAS:
            for directory in subdirectories(self._config.area_path(area)):
                target = directory / self._config.barrel_name
                (written if self.rebuild_barrel(directory) else unchanged).append(target)

        table = RouteTable()
        if self._config.autoroute and self._config.src_path.is_dir():
            changed, table = self._write_routes()
            (written if changed else unchanged).append(self._config.routes_path)

        return GenerationReport(
            written=tuple(written),
            unchanged=tuple(unchanged),
            route_count=len(table),
            duration_ms=(time.perf_counter() - t0) * 1000,
            warnings=table.warnings,
        )

    def _has_home(self, directory: Path) -> bool:
        ext = self._config.template_ext
        return any(
            p.name.startswith(HOME_MARKER) and p.name.endswith(ext)
            for p in directory.iterdir()
            if p.is_file()
        )

    def _record(self, kind: str, path: Path, written: bool, entries: int, t0: float) -> None:
        if self._collector is None:
            return
        self._collector.record_generation(
            kind,  # type: ignore[arg-type]
            str(path),
            written=written,
            entries=entries,
            duration_ms=(time.perf_counter() - t0) * 1000,
        )


def _title(name: str) -> str:
    """``blog-posts`` -> ``BlogPosts``; falls back to ``Home``."""
    words = [w for w in re.split(r"[^0-9A-Za-z]+", name) if w]
    title = "".join(w[:1].upper() + w[1:] for w in words)
    if not title or title[0].isdigit():
        return "Home"
    return title
