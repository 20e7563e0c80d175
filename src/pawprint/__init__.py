"""Pawprint — a convention-based dev server and bundler for component front ends.

Keeps generated barrel modules and a URL route table in step with a
``pages`` / ``components`` / ``modules`` directory tree, bundles the
project with esbuild and serves it with live reload.

Quick start::

    import pawprint

    pawprint.dev("my-app/")

Three modes::

    pawprint.dev("my-app/")       # Generate, watch, serve with live reload
    pawprint.build("my-app/")     # Generate and bundle once for production
    pawprint.serve("my-app/")     # Serve the output directory as-is

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0-dev"
__all__ = [
    "ToolchainConfig",
    "__version__",
    "build",
    "dev",
    "serve",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import pawprint`` fast while providing a clean top-level API.
    """
    if name == "ToolchainConfig":
        from pawprint.config import ToolchainConfig

        return ToolchainConfig

    if name == "dev":
        from pawprint.app import dev

        return dev

    if name == "build":
        from pawprint.app import build

        return build

    if name == "serve":
        from pawprint.app import serve

        return serve

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
