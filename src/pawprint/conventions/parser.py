"""Convention parser — classifies files by name and location.

One function, ``classify()``, decides what a file contributes to the
generated modules. The rules, for a file with the configured template
extension (``.xht`` by default):

Under ``pages``:
    ``+Name.xht``   DYNAMIC_PAGE  home page of its directory
                    (``pages/+Home.xht`` -> ``/``, ``pages/blog/+Blog.xht`` -> ``/blog``)
    ``index.xht``   LAYOUT_INDEX  route group entry receiving ``:page``
                    (``pages/blog/index.xht`` -> ``/blog/:page``)
    ``Name.xht``    PAGE          capitalised name, routable
                    (``pages/blog/Post.xht`` -> ``/blog/post``)
    ``name.xht``    COMPONENT     private helper, barrel only

Under ``components`` and ``modules`` every template file is a COMPONENT.
Anything else is OTHER and takes no part in generation.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from pawprint.config import CONVENTION_AREAS

if TYPE_CHECKING:
    from pawprint._types import UrlPattern
    from pawprint.config import ToolchainConfig

HOME_MARKER = "+"
INDEX_STEM = "index"
PAGE_PARAM = ":page"

_INVALID_SYMBOL_CHARS = re.compile(r"[^0-9A-Za-z_$]")

# Words that cannot be bound by ``import X from``.
_RESERVED = frozenset({
    "await", "break", "case", "catch", "class", "const", "continue",
    "debugger", "default", "delete", "do", "else", "enum", "export",
    "extends", "false", "finally", "for", "function", "if", "import", "in",
    "instanceof", "new", "null", "return", "super", "switch", "this",
    "throw", "true", "try", "typeof", "var", "void", "while", "with", "yield",
    "let", "static", "implements", "interface", "package", "private",
    "protected", "public",
})


class ConventionKind(enum.Enum):
    """What a file contributes to the generated modules."""

    PAGE = "page"
    DYNAMIC_PAGE = "dynamic_page"
    COMPONENT = "component"
    LAYOUT_INDEX = "layout_index"
    OTHER = "other"

    @property
    def routable(self) -> bool:
        return self in _ROUTABLE

    @property
    def exported(self) -> bool:
        return self is not ConventionKind.OTHER


_ROUTABLE = frozenset({
    ConventionKind.PAGE,
    ConventionKind.DYNAMIC_PAGE,
    ConventionKind.LAYOUT_INDEX,
})


@dataclass(frozen=True, slots=True)
class Convention:
    """Classification result for a single file.

    Attributes:
        kind: The convention the file matches.
        symbol: Identifier the file's default export is bound to
            (empty for OTHER).
        url_pattern: Route pattern for routable kinds, else None.

    """

    kind: ConventionKind
    symbol: str = ""
    url_pattern: UrlPattern | None = None


OTHER = Convention(ConventionKind.OTHER)


def to_symbol(name: str) -> str:
    """Turn a file stem into a valid JavaScript identifier.

    ``-``, ``+``, ``:`` and any other character that cannot appear in an
    identifier become ``_``; a leading digit or a reserved word gets an
    extra underscore. Returns an empty string if nothing usable remains.
    """
    symbol = _INVALID_SYMBOL_CHARS.sub("_", name)
    if not symbol.strip("_"):
        return ""
    if symbol[0].isdigit():
        symbol = "_" + symbol
    if symbol in _RESERVED:
        symbol += "_"
    return symbol


def classify(
    relative_path: PurePosixPath | str,
    *,
    area: str,
    template_ext: str = ".xht",
) -> Convention:
    """Classify a file by its path relative to its convention directory.

    Args:
        relative_path: Path relative to the ``pages``/``components``/``modules``
            root (e.g. ``blog/Post.xht``).
        area: Which convention directory the path lives in.
        template_ext: The template extension, including the dot.

    """
    path = PurePosixPath(relative_path)
    name = path.name
    if not name.endswith(template_ext) or len(name) == len(template_ext):
        return OTHER
    stem = name[: -len(template_ext)]

    if area in ("components", "modules"):
        symbol = to_symbol(stem)
        return Convention(ConventionKind.COMPONENT, symbol) if symbol else OTHER
    if area != "pages":
        return OTHER

    segments = [s.lower() for s in path.parent.parts]

    if stem.startswith(HOME_MARKER):
        symbol = to_symbol(stem[len(HOME_MARKER):])
        if not symbol:
            return OTHER
        return Convention(ConventionKind.DYNAMIC_PAGE, symbol, _url(segments))

    if stem == INDEX_STEM:
        return Convention(
            ConventionKind.LAYOUT_INDEX, "Index", _url([*segments, INDEX_STEM])
        )

    symbol = to_symbol(stem)
    if not symbol:
        return OTHER
    if "A" <= stem[0] <= "Z":
        return Convention(ConventionKind.PAGE, symbol, _url([*segments, stem.lower()]))
    return Convention(ConventionKind.COMPONENT, symbol)


def _url(segments: list[str]) -> str:
    parts = [PAGE_PARAM if s == INDEX_STEM else s for s in segments]
    return "/" + "/".join(parts)


def area_of(path: Path, config: ToolchainConfig) -> str | None:
    """Return the convention directory *path* belongs to, or None."""
    try:
        rel = path.relative_to(config.src_path)
    except ValueError:
        return None
    if not rel.parts or rel.parts[0] not in CONVENTION_AREAS:
        return None
    return rel.parts[0]


def is_generated(path: Path, config: ToolchainConfig) -> bool:
    """True for files pawprint writes itself (barrels and the route table)."""
    if path == config.routes_path:
        return True
    return path.name == config.barrel_name and area_of(path, config) is not None
