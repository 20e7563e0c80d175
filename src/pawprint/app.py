"""Pawprint application — generation, bundling and serving wired together.

The three public functions (dev, build, serve) are the primary entry points.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

from pawprint._errors import GenerationError, PawprintError
from pawprint.config_loader import load_config

if TYPE_CHECKING:
    from chirp import App

    from pawprint.bundle.orchestrator import BuildOrchestrator
    from pawprint.config import ToolchainConfig
    from pawprint.conventions.generator import ConventionGenerator, GenerationReport
    from pawprint.conventions.watcher import WatchDispatcher, WatchEvent
    from pawprint.observability.collector import StackCollector
    from pawprint.reload.broadcaster import LiveReloadBroadcaster

logger = logging.getLogger("pawprint.app")


def _regenerate(generator: ConventionGenerator) -> GenerationReport:
    """Run the startup regeneration.

    Raises:
        GenerationError: If a generated module cannot be written.

    """
    try:
        return generator.regenerate_all()
    except OSError as exc:
        msg = f"Failed to write generated modules: {exc}"
        raise GenerationError(msg) from exc


async def _handle_batch(
    dispatcher: WatchDispatcher,
    orchestrator: BuildOrchestrator,
    batch: list[WatchEvent],
) -> None:
    try:
        dispatcher.dispatch(batch)
        # Template compiles run node subprocesses; keep them off the loop.
        await asyncio.to_thread(orchestrator.handle_events, batch)
    except (OSError, PawprintError) as exc:
        logger.error("Watch pipeline error: %s", exc)


async def _catch_up(dispatcher: WatchDispatcher, orchestrator: BuildOrchestrator) -> None:
    """Pick up changes made between startup and the watcher going live."""
    try:
        dispatcher.initial_scan()
    except OSError as exc:
        logger.error("Failed to regenerate modules: %s", exc)
        dispatcher.mark_ready()
    try:
        restaged = await asyncio.to_thread(orchestrator.sync)
    except (OSError, PawprintError) as exc:
        logger.error("Failed to update the staging tree: %s", exc)
        return
    if restaged:
        logger.info(
            "Restaged %d file%s changed during startup", restaged, "" if restaged == 1 else "s"
        )


def _start_watchers(
    app: App,
    config: ToolchainConfig,
    dispatcher: WatchDispatcher,
    orchestrator: BuildOrchestrator,
    broadcaster: LiveReloadBroadcaster,
) -> None:
    """Run the source and output watchers inside the server's event loop.

    Flow:
        on_startup   -> spawn the source consumer and the output watcher,
                        then run the initial scan once the source watch is live
        src change   -> dispatcher.dispatch() + orchestrator.handle_events()
        out change   -> broadcaster.push_reload()
        on_shutdown  -> stop both watchers, stop the esbuild watch process

    The dispatcher stays in SCANNING until the source watch is registered,
    so nothing changed during startup goes unnoticed. One lock serialises
    the initial scan and every batch.
    """
    from pawprint.conventions.watcher import SourceWatcher
    from pawprint.reload.watcher import OutputWatcher

    tasks: list[asyncio.Task[None]] = []
    watchers: list[SourceWatcher | OutputWatcher] = []
    pipeline = asyncio.Lock()

    @app.on_startup
    async def _start_event_consumers() -> None:
        source_watcher = SourceWatcher(config)
        output_watcher = OutputWatcher(config, broadcaster)
        watchers.extend((source_watcher, output_watcher))

        async def _consume_source_events() -> None:
            async for batch in source_watcher.batches():
                async with pipeline:
                    await _handle_batch(dispatcher, orchestrator, batch)

        tasks.append(asyncio.create_task(_consume_source_events()))
        tasks.append(asyncio.create_task(output_watcher.run()))

        await source_watcher.wait_started()
        async with pipeline:
            await _catch_up(dispatcher, orchestrator)

    @app.on_shutdown
    async def _stop_event_consumers() -> None:
        for watcher in watchers:
            watcher.stop()
        for task in tasks:
            if not task.done():
                task.cancel()
        orchestrator.dispose()


def _run_server(app: App, config: ToolchainConfig, collector: StackCollector | None) -> None:
    """Serve *app* with Pounce in a single worker.

    Live-reload connections and the watchers live in one event loop, so
    the server never forks workers.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    server_config = ServerConfig(host=config.host, port=config.port, workers=1)
    server = Server(server_config, app, lifecycle_collector=collector)
    server.run()


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def dev(root: str | Path = ".", **kwargs: object) -> None:
    """Start the development loop.

    Regenerates every barrel and the route table, starts the esbuild watch
    build and serves the output with live reload. A second, incremental
    pass runs once the source watcher is live. Source changes keep the
    generated modules and the staging tree current; output changes reload
    every open tab.

    Args:
        root: Path to the project root directory.
        **kwargs: Override ToolchainConfig fields.

    """
    from pawprint.banner import print_banner
    from pawprint.bundle.orchestrator import BuildOrchestrator
    from pawprint.conventions.generator import ConventionGenerator
    from pawprint.conventions.watcher import WatchDispatcher
    from pawprint.observability import EventLog, StackCollector
    from pawprint.reload.broadcaster import LiveReloadBroadcaster
    from pawprint.server import create_app

    config = load_config(Path(root), **kwargs)

    collector = StackCollector(EventLog())
    generator = ConventionGenerator(config, collector)
    report = _regenerate(generator)

    orchestrator = BuildOrchestrator(config, dev=True, collector=collector)
    orchestrator.watch()

    try:
        broadcaster = LiveReloadBroadcaster(collector)
        app = create_app(config, dev=True, broadcaster=broadcaster, collector=collector)
        _start_watchers(app, config, WatchDispatcher(generator), orchestrator, broadcaster)

        print_banner(
            config, "dev",
            route_count=report.route_count,
            module_count=len(report.written) + len(report.unchanged),
            load_ms=report.duration_ms,
            compiler_version=orchestrator.compiler_version(),
            warnings=list(report.warnings),
        )

        _run_server(app, config, collector)
    finally:
        orchestrator.dispose()


def build(root: str | Path = ".", **kwargs: object) -> None:
    """Regenerate the convention modules and produce a production bundle.

    Args:
        root: Path to the project root directory.
        **kwargs: Override ToolchainConfig fields.

    Raises:
        GenerationError: If generated modules cannot be written.
        CompileError: If a template fails to compile.
        BuildError: If the bundler fails.

    """
    from pawprint.banner import print_banner, print_build_summary
    from pawprint.bundle.orchestrator import BuildOrchestrator
    from pawprint.conventions.generator import ConventionGenerator

    config = load_config(Path(root), **kwargs)
    t0 = time.perf_counter()

    report = _regenerate(ConventionGenerator(config))
    orchestrator = BuildOrchestrator(config, dev=False)

    print_banner(
        config, "build",
        route_count=report.route_count,
        module_count=len(report.written) + len(report.unchanged),
        load_ms=report.duration_ms,
        compiler_version=orchestrator.compiler_version(),
        warnings=list(report.warnings),
    )

    bundle_ms = orchestrator.build()

    print_build_summary(
        outfile=orchestrator.build_options().outfile,
        bundle_ms=bundle_ms,
        total_ms=(time.perf_counter() - t0) * 1000,
    )


def serve(root: str | Path = ".", **kwargs: object) -> None:
    """Serve the existing output directory without building.

    Args:
        root: Path to the project root directory.
        **kwargs: Override ToolchainConfig fields.

    """
    from pawprint.banner import print_banner
    from pawprint.server import create_app

    config = load_config(Path(root), **kwargs)
    app = create_app(config, dev=False)

    print_banner(config, "serve")
    _run_server(app, config, None)
