"""Module writer — persists generated JavaScript modules."""

from __future__ import annotations

import os
from pathlib import Path

GENERATED_HEADER = "// Generated by pawprint. Do not edit.\n"


def write_module(path: Path, content: str, *, force: bool = False) -> bool:
    """Write *content* to *path*, replacing the whole file.

    Content identical to what is already on disk is not rewritten unless
    *force* is set, so regenerating an unchanged tree touches nothing.
    Parent directories are created as needed. There is no partial-write
    recovery: a truncated file is replaced on the next regeneration.

    Returns:
        True if the file was written.

    Raises:
        OSError: If the file cannot be read back or written.

    """
    if not force:
        try:
            if path.read_text(encoding="utf-8") == content:
                return False
        except FileNotFoundError:
            pass

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="\n") as fh:
        fh.write(content)
    return True


def js_string(value: str) -> str:
    """Quote *value* as a double-quoted JavaScript string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


def relative_import(from_dir: Path, target: Path) -> str:
    """Import specifier for *target* as seen from a module in *from_dir*.

    Always POSIX separators and always starting with ``./`` or ``../``.
    """
    rel = os.path.relpath(target, from_dir).replace(os.sep, "/")
    if not rel.startswith(("./", "../")):
        rel = "./" + rel
    return rel
