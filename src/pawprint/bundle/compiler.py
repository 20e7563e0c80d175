"""Template compiler — turns a component template into a JavaScript module.

``TemplateCompiler`` is the seam the compiler bridge depends on. The
default implementation, ``NodeCompiler``, runs ``malinajs.compile`` in a
``node`` subprocess: the template source goes in as JSON on stdin, the
compiled module and its stylesheet come back as JSON on stdout.
"""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from pawprint._errors import CompileError

logger = logging.getLogger("pawprint.build")

_COMPILE_DRIVER = """\
const malina = require("malinajs");
let input = "";
process.stdin.setEncoding("utf8");
process.stdin.on("data", (chunk) => (input += chunk));
process.stdin.on("end", async () => {
  try {
    const req = JSON.parse(input);
    const ctx = await malina.compile(req.source, { path: req.path, name: req.name, ...req.options });
    const css = ctx.css && ctx.css.result ? ctx.css.result : null;
    process.stdout.write(JSON.stringify({ code: ctx.result, css }));
  } catch (err) {
    process.stderr.write(String(err && err.message ? err.message : err));
    process.exit(1);
  }
});
"""

_VERSION_DRIVER = 'process.stdout.write(String(require("malinajs").version || ""));'


@dataclass(frozen=True, slots=True)
class CompiledTemplate:
    """Compiler output for one template.

    Attributes:
        code: JavaScript module source.
        css: Component stylesheet, or None when the template has no styles.

    """

    code: str
    css: str | None = None


class TemplateCompiler(Protocol):
    """Anything that can compile a template source into a module."""

    def compile(self, source: str, *, path: Path, name: str) -> CompiledTemplate: ...


class NodeCompiler:
    """Compiles templates with the project's own ``malinajs`` package.

    Args:
        cwd: Directory ``malinajs`` is resolved from (the project root).
        node: Node.js executable.
        options: Extra compiler options, passed through unchanged.

    """

    def __init__(
        self,
        cwd: Path,
        *,
        node: str = "node",
        options: Mapping[str, object] | None = None,
    ) -> None:
        self._cwd = cwd
        self._node = node
        self._options = dict(options or {})

    def compile(self, source: str, *, path: Path, name: str) -> CompiledTemplate:
        """Compile *source*.

        Raises:
            CompileError: If node is missing or the compiler rejects the
                template. The message carries the compiler's stderr.

        """
        request = json.dumps(
            {"source": source, "path": str(path), "name": name, "options": self._options}
        )
        try:
            proc = subprocess.run(
                [self._node, "-e", _COMPILE_DRIVER],
                input=request,
                capture_output=True,
                text=True,
                cwd=self._cwd,
                check=False,
            )
        except FileNotFoundError as exc:
            msg = f"Node.js executable {self._node!r} not found"
            raise CompileError(msg, path) from exc

        if proc.returncode != 0:
            detail = proc.stderr.strip() or f"compiler exited with status {proc.returncode}"
            raise CompileError(f"{path.name}: {detail}", path)

        try:
            result = json.loads(proc.stdout)
        except json.JSONDecodeError as exc:
            msg = f"{path.name}: unreadable compiler output"
            raise CompileError(msg, path) from exc
        return CompiledTemplate(code=result["code"], css=result.get("css") or None)

    def version(self) -> str | None:
        """Installed ``malinajs`` version, or None if it cannot be determined."""
        try:
            proc = subprocess.run(
                [self._node, "-e", _VERSION_DRIVER],
                capture_output=True,
                text=True,
                cwd=self._cwd,
                check=False,
            )
        except FileNotFoundError:
            return None
        if proc.returncode != 0:
            logger.debug("malinajs version lookup failed: %s", proc.stderr.strip())
            return None
        return proc.stdout.strip() or None
