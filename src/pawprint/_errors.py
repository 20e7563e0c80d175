"""Pawprint error hierarchy.

All pawprint-specific errors inherit from PawprintError for easy catching.
Filesystem failures are left as the builtin ``OSError`` where they occur.
"""

from pathlib import Path


class PawprintError(Exception):
    """Base error for all pawprint operations."""


class ConfigError(PawprintError):
    """Invalid or missing configuration."""


class GenerationError(PawprintError):
    """Generated barrels or the route table could not be written."""


class CompileError(PawprintError):
    """The template compiler rejected a source file.

    Attributes:
        path: The template file that failed to compile.

    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class BuildError(PawprintError):
    """The bundler failed or could not be started."""
