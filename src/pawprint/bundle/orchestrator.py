"""Build orchestrator — owns the bundler lifecycle.

The bundler never reads ``src/`` directly. The orchestrator mirrors it
into a staging tree (``.pawprint/src``) where every template has already
been compiled through the compiler bridge and every stylesheet module
sits next to its template. Other files are copied unchanged, so relative
imports resolve exactly as they do in ``src/``.

Production builds restage everything, bundle once and dispose the
context. Development builds keep an ``esbuild --watch`` process on the
staging tree and restage individual files as source events arrive.
"""

from __future__ import annotations

import json
import logging
import shutil
import time
from pathlib import Path
from typing import TYPE_CHECKING

from pawprint._errors import CompileError
from pawprint.bundle.bridge import ALIASES, CSS_SUFFIX, CompilerBridge, css_module_path
from pawprint.bundle.bundler import BuildOptions, EsbuildContext, find_esbuild
from pawprint.bundle.compiler import NodeCompiler
from pawprint.config import TEMPLATE_SUFFIXES
from pawprint.conventions.scanner import scan
from pawprint.conventions.writer import write_module

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from pawprint.bundle.compiler import TemplateCompiler
    from pawprint.config import ToolchainConfig
    from pawprint.conventions.watcher import WatchEvent
    from pawprint.observability.collector import StackCollector

    type ContextFactory = Callable[[BuildOptions], EsbuildContext]

logger = logging.getLogger("pawprint.build")


class BuildOrchestrator:
    """Stages the source tree and drives the bundler.

    Args:
        config: Project configuration.
        dev: Development mode (no minification, compile errors are
            logged instead of raised).
        compiler: Template compiler; defaults to ``NodeCompiler``.
        context_factory: Creates the bundler context from build options.
        collector: Optional observability collector.

    """

    def __init__(
        self,
        config: ToolchainConfig,
        *,
        dev: bool = False,
        compiler: TemplateCompiler | None = None,
        context_factory: ContextFactory | None = None,
        collector: StackCollector | None = None,
    ) -> None:
        self._config = config
        self._dev = dev
        self._bridge = CompilerBridge(
            compiler or NodeCompiler(config.root, node=config.node)
        )
        self._context_factory = context_factory or self._esbuild_context
        self._collector = collector
        self._context: EsbuildContext | None = None

    @property
    def bridge(self) -> CompilerBridge:
        return self._bridge

    @property
    def watching(self) -> bool:
        return self._context is not None

    def compiler_version(self) -> str | None:
        """Version reported by the template compiler, if it reports one."""
        version = getattr(self._bridge.compiler, "version", None)
        return version() if callable(version) else None

    def build_options(self) -> BuildOptions:
        """Bundler options for this project and mode."""
        config = self._config
        env = {"production": not self._dev, **config.env}
        outfile = config.output_path / Path(config.entry).with_suffix(".js").name
        return BuildOptions(
            entry_points=(str(config.staging_path / config.entry),),
            outfile=str(outfile),
            minify=not self._dev,
            define={"process": json.dumps({"env": env})},
            loader=dict.fromkeys(TEMPLATE_SUFFIXES, "js"),
            alias=dict(ALIASES),
            overrides=dict(config.esbuild),
        )

    # ----- staging -----

    def staged_path(self, source: Path) -> Path:
        return self._config.staging_path / source.relative_to(self._config.src_path)

    def stage_all(self) -> int:
        """Rebuild the staging tree from scratch. Returns the files staged.

        Raises:
            CompileError: In production mode, on the first template that
                fails to compile.

        """
        staging = self._config.staging_path
        if staging.exists():
            shutil.rmtree(staging)
        staging.mkdir(parents=True)

        try:
            entries = scan(self._config.src_path, recursive=True)
        except FileNotFoundError:
            logger.warning("Source directory %s does not exist", self._config.src_path)
            return 0
        return sum(
            1 for entry in entries
            if not entry.is_directory and self.stage(entry.absolute_path) is not None
        )

    def stage(self, source: Path) -> Path | None:
        """Mirror one source file into the staging tree.

        Returns the staged path, or None when nothing was staged (the file
        vanished, or it failed to compile in development mode and the
        previous module was kept).

        Raises:
            CompileError: In production mode, if the template fails to compile.

        """
        t0 = time.perf_counter()
        dest = self.staged_path(source)
        if self._bridge.handles(source):
            try:
                result = self._bridge.load(source)
            except FileNotFoundError:
                return None
            except CompileError as exc:
                if not self._dev:
                    raise
                logger.error("Compile error: %s", exc)
                return None
            write_module(dest, result.contents)
            css_dest = css_module_path(dest)
            if result.css_path is not None:
                write_module(css_dest, self._bridge.load_css(result.css_path) or "")
            else:
                css_dest.unlink(missing_ok=True)
        else:
            try:
                if dest.is_file() and dest.read_bytes() == source.read_bytes():
                    return dest
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, dest)
            except FileNotFoundError:
                return None

        if self._collector is not None:
            self._collector.record_bundle(
                "stage", str(source), duration_ms=(time.perf_counter() - t0) * 1000
            )
        return dest

    def unstage(self, source: Path) -> None:
        """Remove a deleted file (or directory) from the staging tree."""
        dest = self.staged_path(source)
        if dest.is_dir():
            shutil.rmtree(dest)
            return
        dest.unlink(missing_ok=True)
        if self._bridge.handles(source):
            self._bridge.forget(source)
            css_module_path(dest).unlink(missing_ok=True)

    def handle_events(self, events: Iterable[WatchEvent]) -> int:
        """Restage the files touched by a batch of source events.

        Returns the number of files staged.
        """
        src = self._config.src_path
        staged = 0
        for event in events:
            if not event.path.is_relative_to(src) or event.path == src:
                continue
            if event.kind in ("unlink", "unlinkDir"):
                self.unstage(event.path)
            elif event.kind == "addDir":
                staged += self._stage_tree(event.path)
            elif event.path.is_file() and self.stage(event.path) is not None:
                staged += 1
        return staged

    def sync(self) -> int:
        """Bring the staging tree up to date without restaging everything.

        Restages source files that are newer than their staged copy and
        removes staged files whose source is gone. Stylesheet modules are
        kept while their template exists. Returns the number of files staged.
        """
        src = self._config.src_path
        try:
            entries = scan(src, recursive=True)
        except FileNotFoundError:
            return 0

        staged = 0
        for entry in entries:
            if entry.is_directory:
                continue
            source = entry.absolute_path
            dest = self.staged_path(source)
            try:
                if dest.is_file() and dest.stat().st_mtime_ns >= source.stat().st_mtime_ns:
                    continue
            except FileNotFoundError:
                continue
            if self.stage(source) is not None:
                staged += 1

        try:
            leftovers = scan(self._config.staging_path, recursive=True)
        except FileNotFoundError:
            return staged
        for entry in leftovers:
            if not entry.absolute_path.exists():
                continue
            if self._orphaned(src / entry.relative_path):
                if entry.is_directory:
                    shutil.rmtree(entry.absolute_path)
                else:
                    entry.absolute_path.unlink()
        return staged

    def _orphaned(self, source: Path) -> bool:
        if source.exists():
            return False
        if source.name.endswith(CSS_SUFFIX):
            stem = source.name.removesuffix(CSS_SUFFIX)
            return not any(source.with_name(stem + s).is_file() for s in TEMPLATE_SUFFIXES)
        return True

    def _stage_tree(self, directory: Path) -> int:
        try:
            entries = scan(directory, recursive=True)
        except FileNotFoundError:
            return 0
        return sum(
            1 for entry in entries
            if not entry.is_directory and self.stage(entry.absolute_path) is not None
        )

    # ----- bundling -----

    def build(self) -> float:
        """Stage, bundle once and dispose. Returns the bundle time in ms.

        Raises:
            CompileError: If a template fails to compile.
            BuildError: If the bundler fails.

        """
        self.stage_all()
        context = self._context_factory(self.build_options())
        try:
            duration_ms = context.rebuild()
        finally:
            context.dispose()
        if self._collector is not None:
            self._collector.record_bundle(
                "build", str(self._config.entry_path), duration_ms=duration_ms
            )
        logger.info("Bundled %s in %.0fms", self._config.entry, duration_ms)
        return duration_ms

    def watch(self) -> None:
        """Stage and start the persistent watch build.

        Raises:
            BuildError: If the bundler cannot be started.

        """
        if self._context is not None:
            return
        t0 = time.perf_counter()
        self.stage_all()
        context = self._context_factory(self.build_options())
        context.watch()
        self._context = context
        if self._collector is not None:
            self._collector.record_bundle(
                "watch",
                str(self._config.entry_path),
                duration_ms=(time.perf_counter() - t0) * 1000,
            )

    def dispose(self) -> None:
        """Stop the watch build, if running."""
        context, self._context = self._context, None
        if context is not None:
            context.dispose()

    def _esbuild_context(self, options: BuildOptions) -> EsbuildContext:
        return EsbuildContext(find_esbuild(self._config), options, cwd=self._config.root)
