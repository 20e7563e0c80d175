"""Compiler bridge — makes templates loadable by the bundler.

For each template the bridge returns a JavaScript module. When the
compiler emits a stylesheet, the module gains an import of a sibling
``<name>.generated.css`` module whose contents the bridge keeps in its
own map, per instance::

    // Button.xht, compiled
    ...
    import "./Button.generated.css";

The bare ``malinajs`` import resolves to the runtime entry point.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING

from pawprint.config import TEMPLATE_SUFFIXES

if TYPE_CHECKING:
    from collections.abc import Mapping

    from pawprint.bundle.compiler import TemplateCompiler

CSS_SUFFIX = ".generated.css"

ALIASES: dict[str, str] = {"malinajs": "malinajs/runtime.js"}


@dataclass(frozen=True, slots=True)
class LoadResult:
    """A loaded template module.

    Attributes:
        contents: JavaScript source handed to the bundler.
        loader: Bundler loader for the contents.
        css_path: The stylesheet module imported by ``contents``, if any.

    """

    contents: str
    loader: str = "js"
    css_path: Path | None = None


def css_module_path(template: Path) -> Path:
    """Where the stylesheet module of *template* lives."""
    return template.with_name(template.stem + CSS_SUFFIX)


class CompilerBridge:
    """Compiles templates and tracks the stylesheets they produce.

    Args:
        compiler: The template compiler.
        suffixes: Template extensions handled by the bridge.

    """

    def __init__(
        self,
        compiler: TemplateCompiler,
        *,
        suffixes: tuple[str, ...] = TEMPLATE_SUFFIXES,
    ) -> None:
        self._compiler = compiler
        self._suffixes = suffixes
        self._css: dict[Path, str] = {}

    @property
    def compiler(self) -> TemplateCompiler:
        return self._compiler

    @property
    def css_modules(self) -> Mapping[Path, str]:
        """Stylesheet modules currently known, keyed by module path."""
        return MappingProxyType(self._css)

    def handles(self, path: Path) -> bool:
        return path.suffix in self._suffixes

    def resolve(self, specifier: str) -> str:
        """Apply import aliases to a bare specifier."""
        return ALIASES.get(specifier, specifier)

    def load(self, path: Path, source: str | None = None) -> LoadResult:
        """Compile the template at *path*.

        Args:
            path: Template file. Also the location the stylesheet module is
                derived from.
            source: Template source; read from *path* when omitted.

        Raises:
            CompileError: If the compiler rejects the template.
            OSError: If the template cannot be read.

        """
        if source is None:
            source = path.read_text(encoding="utf-8")
        compiled = self._compiler.compile(source, path=path, name=path.stem)

        css_path = css_module_path(path)
        if not compiled.css:
            self._css.pop(css_path, None)
            return LoadResult(contents=compiled.code)

        self._css[css_path] = compiled.css
        code = f'{compiled.code}\nimport "./{css_path.name}";\n'
        return LoadResult(contents=code, css_path=css_path)

    def load_css(self, css_path: Path) -> str | None:
        """Contents of a stylesheet module, or None if unknown."""
        return self._css.get(css_path)

    def forget(self, path: Path) -> None:
        """Drop the stylesheet of a template that no longer exists."""
        self._css.pop(css_module_path(path), None)
