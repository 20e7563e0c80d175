"""Barrel builder — one aggregated ``index.js`` per convention directory.

Lets application code import a directory as a single module::

    import { Button, Card } from "./components";

Only files directly inside the directory are exported; every sub-directory
gets a barrel of its own. Barrels under ``pages`` additionally re-export the
``components`` and ``modules`` barrels so a page directory is a one-stop
import.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pawprint.conventions.parser import ConventionKind, area_of, classify
from pawprint.conventions.scanner import scan
from pawprint.conventions.writer import GENERATED_HEADER, js_string, relative_import

if TYPE_CHECKING:
    from pawprint.config import ToolchainConfig

_PASSTHROUGH_AREAS: tuple[str, ...] = ("components", "modules")


@dataclass(frozen=True, slots=True)
class BarrelExport:
    """A re-exported default export."""

    symbol: str
    specifier: str
    kind: ConventionKind


@dataclass(frozen=True, slots=True)
class Barrel:
    """The computed contents of one barrel module.

    Attributes:
        path: Where the barrel is written.
        exports: Default exports of files directly inside the directory.
        passthrough: Specifiers of other barrels re-exported with ``export *``.

    """

    path: Path
    exports: tuple[BarrelExport, ...] = ()
    passthrough: tuple[str, ...] = ()

    @property
    def symbols(self) -> tuple[str, ...]:
        return tuple(e.symbol for e in self.exports)


def build_barrel(directory: Path, config: ToolchainConfig) -> Barrel:
    """Compute the barrel for *directory*.

    A directory that does not exist produces an empty barrel.

    Raises:
        ValueError: If *directory* is outside the convention directories.

    """
    area = area_of(directory, config)
    if area is None:
        msg = f"{directory} is not inside a convention directory"
        raise ValueError(msg)
    area_root = config.area_path(area)
    barrel_path = directory / config.barrel_name

    try:
        entries = scan(directory)
    except FileNotFoundError:
        entries = ()

    relative_dir = directory.relative_to(area_root)
    taken: set[str] = set()
    exports: list[BarrelExport] = []
    for entry in entries:
        if entry.is_directory:
            continue
        convention = classify(
            (relative_dir / entry.name).as_posix(),
            area=area,
            template_ext=config.template_ext,
        )
        if not convention.kind.exported:
            continue
        exports.append(BarrelExport(
            symbol=_unique(convention.symbol, taken),
            specifier="./" + entry.name,
            kind=convention.kind,
        ))

    passthrough: list[str] = []
    if area == "pages":
        for other in _PASSTHROUGH_AREAS:
            other_root = config.area_path(other)
            if other_root.is_dir():
                passthrough.append(
                    relative_import(directory, other_root / config.barrel_name)
                )

    return Barrel(path=barrel_path, exports=tuple(exports), passthrough=tuple(passthrough))


def _unique(symbol: str, taken: set[str]) -> str:
    candidate = symbol
    n = 2
    while candidate in taken:
        candidate = f"{symbol}_{n}"
        n += 1
    taken.add(candidate)
    return candidate


def render_barrel(barrel: Barrel) -> str:
    """Render the barrel module source."""
    lines = [GENERATED_HEADER.rstrip("\n")]
    lines.extend(
        f"export {{ default as {e.symbol} }} from {js_string(e.specifier)};"
        for e in barrel.exports
    )
    lines.extend(f"export * from {js_string(spec)};" for spec in barrel.passthrough)
    if not barrel.exports and not barrel.passthrough:
        lines.append("export {};")
    return "\n".join(lines) + "\n"
