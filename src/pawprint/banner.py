"""Startup banner — mode-aware status output on stderr.

Detects ``NO_COLOR`` / ``TERM`` for a plain-text fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pawprint._types import PawprintMode
    from pawprint.config import ToolchainConfig


# ---------------------------------------------------------------------------
# ANSI helpers, NO_COLOR aware (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""
_RED = "\033[31m" if _COLOR else ""

_MODE_STYLES: dict[str, tuple[str, str]] = {
    "dev": (_GREEN, "dev"),
    "build": (_YELLOW, "build"),
    "serve": (_CYAN, "serve"),
}

_RULE = "─" * 43


def _mode_badge(mode: str) -> str:
    """Return a styled [mode] badge."""
    color, label = _MODE_STYLES.get(mode, (_DIM, mode))
    return f"{color}[{label}]{_RESET}"


def _clickable_url(url: str) -> str:
    """Wrap *url* in an OSC 8 hyperlink escape if the terminal supports it."""
    if not _COLOR:
        return url
    return f"\033]8;;{url}\033\\{_BOLD}{_CYAN}{url}{_RESET}\033]8;;\033\\"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" + ("" if count == 1 else "s")


def print_banner(
    config: ToolchainConfig,
    mode: PawprintMode,
    *,
    route_count: int = 0,
    module_count: int = 0,
    load_ms: float = 0.0,
    compiler_version: str | None = None,
    warnings: list[str] | None = None,
) -> None:
    """Print the pawprint startup banner to stderr.

    Args:
        config: Resolved ToolchainConfig.
        mode: One of ``"dev"``, ``"build"``, ``"serve"``.
        route_count: Rows in the generated route table.
        module_count: Generated modules (barrels and route table) checked.
        load_ms: Time spent generating modules in milliseconds.
        compiler_version: Installed malinajs version, shown when known.
        warnings: Optional list of warning messages to display.

    """
    from pawprint import __version__
    from pawprint.reload.client import RELOAD_ENDPOINT

    lines: list[str] = [
        "",
        f"  {_BOLD}pawprint{_RESET} {_DIM}v{__version__}{_RESET}  {_mode_badge(mode)}",
        f"  {_DIM}{_RULE}{_RESET}",
    ]

    if mode != "serve":
        timing = f" {_DIM}in {load_ms:.0f}ms{_RESET}" if load_ms > 0 else ""
        routes = _plural(route_count, "route") if config.autoroute else "autoroute off"
        lines.append(
            f"  {_DIM}├─{_RESET} {routes}, {_plural(module_count, 'module')} generated{timing}"
        )
        lines.append(f"  {_DIM}├─{_RESET} src: {_DIM}{config.src_path}{_RESET}")
        if compiler_version:
            lines.append(f"  {_DIM}├─{_RESET} Malina.js {compiler_version}")

    if mode == "dev":
        lines.append(
            f"  {_DIM}├─{_RESET} {_GREEN}live reload{_RESET} "
            f"on {_DIM}{RELOAD_ENDPOINT}{_RESET}"
        )

    lines.append(f"  {_DIM}└─{_RESET} output: {_DIM}{config.output_path}{_RESET}")

    if mode in ("dev", "serve"):
        url = f"http://{config.host}:{config.port}"
        lines.append("")
        lines.append(f"  {_clickable_url(url)}")

    if mode == "dev":
        lines.append("")
        lines.append(f"  {_DIM}Watching for changes...{_RESET}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")

    print("\n".join(lines), file=sys.stderr)


def print_build_summary(
    *,
    outfile: str,
    bundle_ms: float,
    total_ms: float,
) -> None:
    """Print the one-shot build summary to stderr."""
    lines = [
        f"  {_DIM}{_RULE}{_RESET}",
        f"  Bundled {outfile} {_DIM}in {bundle_ms:.0f}ms{_RESET}",
        f"  Done in {total_ms:.0f}ms",
        "",
    ]
    print("\n".join(lines), file=sys.stderr)


def print_error(message: str) -> None:
    """Print a fatal error to stderr."""
    print(f"\n  {_RED}{_BOLD}error{_RESET} {message}\n", file=sys.stderr)
