"""Route table builder — maps the ``pages`` tree to ``src/routes.js``.

The route table is a plain ES module::

    // Generated by pawprint. Do not edit.
    import Post from "./pages/blog/Post.xht";
    import Home from "./pages/+Home.xht";

    export default [
      { path: "/blog/post", page: Post },
      { path: "/", page: Home },
    ];

Rows are emitted in the reverse of scan order, so pages in deeper
directories are declared before shallower ones. The order only serves
readability; the router does not depend on it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from pawprint._types import Symbol, UrlPattern
from pawprint.conventions.parser import Convention, classify, to_symbol
from pawprint.conventions.scanner import FileEntry, scan
from pawprint.conventions.writer import GENERATED_HEADER, js_string, relative_import

logger = logging.getLogger("pawprint.generator")


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """A single row of the generated route table.

    Attributes:
        url_pattern: Router pattern (``/``, ``/blog/post``, ``/blog/:page``).
        page_symbol: Identifier the page module is imported as.
        import_path: Import specifier relative to the route table file.
        source: Absolute path of the page template.

    """

    url_pattern: UrlPattern
    page_symbol: Symbol
    import_path: str
    source: Path

    @property
    def import_statement(self) -> str:
        return f"import {self.page_symbol} from {js_string(self.import_path)};"


@dataclass(frozen=True, slots=True)
class RouteTable:
    """Ordered route entries plus the pages that lost a URL conflict."""

    entries: tuple[RouteEntry, ...] = ()
    overridden: tuple[Path, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def imports(self) -> tuple[str, ...]:
        return tuple(entry.import_statement for entry in self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def build_route_table(
    pages_root: Path,
    *,
    routes_file: Path,
    template_ext: str = ".xht",
) -> RouteTable:
    """Scan *pages_root* and compute the route table.

    A missing *pages_root* yields an empty table. When two pages produce
    the same URL pattern the one discovered later wins and a warning is
    logged for the other.
    """
    try:
        entries = scan(pages_root, recursive=True)
    except FileNotFoundError:
        return RouteTable()

    discovered: list[tuple[FileEntry, Convention]] = []
    for entry in entries:
        if entry.is_directory:
            continue
        convention = classify(entry.relative_path, area="pages", template_ext=template_ext)
        if convention.kind.routable:
            discovered.append((entry, convention))
        elif convention.symbol and len(entry.relative_path.parts) == 1:
            logger.debug(
                "%s is not routable (page names start with an uppercase letter)",
                entry.relative_path,
            )

    winners, warnings = _resolve_conflicts(discovered)
    kept = {entry.absolute_path for entry, _ in winners}
    overridden = tuple(
        entry.absolute_path for entry, _ in discovered if entry.absolute_path not in kept
    )

    routes_dir = routes_file.parent
    taken: set[str] = set()
    rows: list[RouteEntry] = []
    for entry, convention in reversed(winners):
        rows.append(RouteEntry(
            url_pattern=convention.url_pattern or "/",
            page_symbol=_binding(entry, convention.symbol, taken),
            import_path=relative_import(routes_dir, entry.absolute_path),
            source=entry.absolute_path,
        ))

    return RouteTable(entries=tuple(rows), overridden=overridden, warnings=warnings)


def _resolve_conflicts(
    discovered: list[tuple[FileEntry, Convention]],
) -> tuple[list[tuple[FileEntry, Convention]], tuple[str, ...]]:
    """Keep only the last-discovered page for each URL pattern.

    Returns the winners and one warning per overridden page.
    """
    last_seen: dict[str, int] = {}
    for index, (_, convention) in enumerate(discovered):
        last_seen[convention.url_pattern or "/"] = index

    winners: list[tuple[FileEntry, Convention]] = []
    warnings: list[str] = []
    for index, (entry, convention) in enumerate(discovered):
        pattern = convention.url_pattern or "/"
        winner_index = last_seen[pattern]
        if index == winner_index:
            winners.append((entry, convention))
        else:
            message = (
                f"Route {pattern}: {entry.relative_path} is overridden by "
                f"{discovered[winner_index][0].relative_path}"
            )
            logger.warning("%s", message)
            warnings.append(message)
    return winners, tuple(warnings)


def _binding(entry: FileEntry, symbol: str, taken: set[str]) -> str:
    """Pick a unique import binding for a page within one route table."""
    candidates = [symbol]
    parents = entry.relative_path.parent.parts
    if parents:
        candidates.append(to_symbol("_".join((*parents, symbol))))
    for candidate in candidates:
        if candidate and candidate not in taken:
            taken.add(candidate)
            return candidate

    base = candidates[-1]
    n = 2
    while f"{base}_{n}" in taken:
        n += 1
    taken.add(f"{base}_{n}")
    return f"{base}_{n}"


def render_route_table(table: RouteTable) -> str:
    """Render the route table module source."""
    lines = [GENERATED_HEADER.rstrip("\n")]
    lines.extend(table.imports)
    lines.append("")
    if not table.entries:
        lines.append("export default [];")
    else:
        lines.append("export default [")
        lines.extend(
            f"  {{ path: {js_string(e.url_pattern)}, page: {e.page_symbol} }},"
            for e in table.entries
        )
        lines.append("];")
    return "\n".join(lines) + "\n"
