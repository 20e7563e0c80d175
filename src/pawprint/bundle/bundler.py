"""esbuild adapter — runs the esbuild executable as a build context.

Options are held in esbuild's JavaScript API shape (``entryPoints``,
``outfile``, ``define``...) so the ``esbuild`` table of the config file
reads exactly like the options of ``esbuild.context()``. They are
translated to command-line flags when the process is started.

``EsbuildContext`` mirrors the API context: ``rebuild()`` builds once,
``watch()`` starts a persistent ``esbuild --watch`` process and
``dispose()`` stops it. esbuild leaves watch mode when its stdin closes,
so the process is started with a pipe that stays open until disposal.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pawprint._errors import BuildError

if TYPE_CHECKING:
    from pawprint.config import ToolchainConfig

logger = logging.getLogger("pawprint.build")

# Options whose mapping values become one ``--name:key=value`` flag per entry.
_KEYED_OPTIONS: frozenset[str] = frozenset(
    {"define", "loader", "alias", "banner", "footer", "supported", "outExtension"}
)

# List options that take one ``--name:value`` flag per item.
_REPEATED_OPTIONS: frozenset[str] = frozenset({"external", "inject", "pure", "dropLabels"})

# Options the command line cannot express.
_API_ONLY_OPTIONS: frozenset[str] = frozenset({"plugins", "stdin", "write", "absWorkingDir"})

_STOP_TIMEOUT = 5.0


def kebab_case(name: str) -> str:
    """``entryNames`` -> ``entry-names``."""
    return re.sub(r"[A-Z]", lambda m: "-" + m.group().lower(), name)


def api_to_cli(options: Mapping[str, Any]) -> list[str]:
    """Translate API-style options into esbuild command-line arguments.

    Unsupported options (plugins, in-memory input) are skipped with a
    warning.
    """
    entry_points: list[str] = []
    args: list[str] = []
    for name, value in options.items():
        if value is None:
            continue
        if name == "entryPoints":
            entry_points.extend(str(v) for v in value)
            continue
        if name in _API_ONLY_OPTIONS:
            logger.warning("esbuild option %r is not supported by pawprint; ignored", name)
            continue

        flag = "--" + kebab_case(name)
        if name in _KEYED_OPTIONS:
            args.extend(f"{flag}:{key}={_flag_value(item)}" for key, item in value.items())
        elif name in _REPEATED_OPTIONS:
            args.extend(f"{flag}:{item}" for item in value)
        elif value is True:
            args.append(flag)
        elif isinstance(value, list | tuple):
            args.append(f"{flag}={','.join(str(v) for v in value)}")
        else:
            args.append(f"{flag}={_flag_value(value)}")
    return [*entry_points, *args]


def _flag_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True, slots=True)
class BuildOptions:
    """Options for one esbuild context.

    Attributes:
        entry_points: Entry modules.
        outfile: Bundle output file.
        minify: Minify the output (production builds).
        define: Global identifiers replaced with JavaScript expressions.
        loader: Loader per file extension.
        alias: Import specifier substitutions.
        overrides: User options in API shape, applied last.

    """

    entry_points: tuple[str, ...]
    outfile: str
    minify: bool = False
    define: Mapping[str, str] = field(default_factory=dict)
    loader: Mapping[str, str] = field(default_factory=dict)
    alias: Mapping[str, str] = field(default_factory=dict)
    overrides: Mapping[str, Any] = field(default_factory=dict)

    def as_api(self) -> dict[str, Any]:
        """The options as an ``esbuild.context()`` argument."""
        options: dict[str, Any] = {
            "entryPoints": list(self.entry_points),
            "outfile": self.outfile,
            "bundle": True,
            "minify": self.minify,
            "define": dict(self.define),
            "loader": dict(self.loader),
            "alias": dict(self.alias),
        }
        options.update(self.overrides)
        if options.get("outdir"):
            options.pop("outfile", None)
        return options

    def to_cli_args(self) -> list[str]:
        return api_to_cli(self.as_api())


def find_esbuild(config: ToolchainConfig) -> str:
    """Locate the esbuild executable.

    Order: the ``esbuild_binary`` option, the project's
    ``node_modules/.bin/esbuild``, then ``PATH``.

    Raises:
        BuildError: If no executable is found.

    """
    if config.esbuild_binary:
        return config.esbuild_binary
    local = config.root / "node_modules" / ".bin" / "esbuild"
    if local.is_file():
        return str(local)
    found = shutil.which("esbuild")
    if found:
        return found
    msg = "esbuild not found. Install it in the project with: npm install --save-dev esbuild"
    raise BuildError(msg)


class EsbuildContext:
    """One esbuild configuration that can be built once or watched.

    Args:
        binary: esbuild executable.
        options: Build options.
        cwd: Working directory for the esbuild process.

    """

    def __init__(self, binary: str, options: BuildOptions, *, cwd: Path) -> None:
        self._binary = binary
        self._options = options
        self._cwd = cwd
        self._process: subprocess.Popen[bytes] | None = None

    @property
    def options(self) -> BuildOptions:
        return self._options

    @property
    def watching(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def command(self, *extra: str) -> list[str]:
        return [self._binary, *self._options.to_cli_args(), *extra]

    def rebuild(self) -> float:
        """Build once. Returns the duration in milliseconds.

        Raises:
            BuildError: If esbuild cannot be started or reports errors.

        """
        t0 = time.perf_counter()
        try:
            proc = subprocess.run(
                self.command(),
                capture_output=True,
                text=True,
                cwd=self._cwd,
                check=False,
            )
        except OSError as exc:
            msg = f"Cannot run esbuild ({self._binary}): {exc}"
            raise BuildError(msg) from exc
        if proc.returncode != 0:
            msg = f"esbuild failed:\n{proc.stderr.strip()}"
            raise BuildError(msg)
        if proc.stderr.strip():
            logger.info("%s", proc.stderr.strip())
        return (time.perf_counter() - t0) * 1000

    def watch(self) -> None:
        """Start ``esbuild --watch`` in the background.

        Build output and errors go straight to the terminal.

        Raises:
            BuildError: If esbuild cannot be started.

        """
        if self.watching:
            return
        try:
            self._process = subprocess.Popen(
                self.command("--watch"),
                stdin=subprocess.PIPE,
                cwd=self._cwd,
            )
        except OSError as exc:
            msg = f"Cannot run esbuild ({self._binary}): {exc}"
            raise BuildError(msg) from exc
        logger.debug("esbuild --watch started (pid %d)", self._process.pid)

    def dispose(self) -> None:
        """Stop the watch process, if any."""
        process, self._process = self._process, None
        if process is None:
            return
        if process.stdin is not None:
            process.stdin.close()
        try:
            process.wait(timeout=_STOP_TIMEOUT)
        except subprocess.TimeoutExpired:
            process.terminate()
            try:
                process.wait(timeout=_STOP_TIMEOUT)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()
