"""Pawprint configuration.

ToolchainConfig is the central configuration object, frozen after creation.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

# Template extensions the compiler bridge hands to the template compiler.
TEMPLATE_SUFFIXES: tuple[str, ...] = (".xht", ".ma", ".html")

# Convention directory names, in the order they are regenerated.
CONVENTION_AREAS: tuple[str, ...] = ("pages", "components", "modules")


@dataclass(frozen=True, slots=True)
class ToolchainConfig:
    """Configuration for a pawprint project.

    Attributes:
        root: Project root (contains ``src/``, the output directory and the
              optional ``pawprint.toml``). Always resolved to an absolute path.
        host: Bind address for the dev server.
        port: Bind port for the dev server.
        outdir: Output directory the bundle is written to and served from.
        src_dir: Source directory holding the entry module and the
            convention directories.
        entry: Entry module, relative to ``src_dir``.
        template_ext: Extension of routable/aggregated template files.
        autoroute: Generate ``routes.js`` from the ``pages`` tree.
        watch: Extra glob patterns (relative to root) whose changes trigger
            a browser reload in dev mode.
        esbuild: Opaque bundler option overrides, merged last.
        env: Values exposed to the bundle as ``process.env``.
        debounce_ms: Window in which filesystem events are coalesced.
        routes_file: Generated route table, relative to ``src_dir``.
        barrel_name: File name of generated barrel modules.
        cache_dir: Working directory for the staged source tree.
        node: Node.js executable used by the template compiler.
        esbuild_binary: Explicit esbuild executable (auto-detected if None).

    """

    root: Path = field(default_factory=Path.cwd)
    host: str = "127.0.0.1"
    port: int = 3000
    outdir: str = "public"
    src_dir: str = "src"
    entry: str = "main.js"
    template_ext: str = ".xht"
    autoroute: bool = True
    watch: tuple[str, ...] = ()
    esbuild: Mapping[str, object] = field(default_factory=dict)
    env: Mapping[str, object] = field(default_factory=dict)
    debounce_ms: int = 50
    routes_file: str = "routes.js"
    barrel_name: str = "index.js"
    cache_dir: str = ".pawprint"
    node: str = "node"
    esbuild_binary: str | None = None

    def __post_init__(self) -> None:
        # Resolve root to absolute so that watchfiles (which returns
        # absolute paths) can be compared via Path.relative_to().
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())

    @property
    def src_path(self) -> Path:
        """Absolute path to the source directory."""
        return self.root / self.src_dir

    @property
    def output_path(self) -> Path:
        """Absolute path to the output directory."""
        out = Path(self.outdir)
        if out.is_absolute():
            return out
        return self.root / out

    @property
    def entry_path(self) -> Path:
        """Absolute path to the entry module."""
        return self.src_path / self.entry

    @property
    def routes_path(self) -> Path:
        """Absolute path to the generated route table."""
        return self.src_path / self.routes_file

    @property
    def pages_path(self) -> Path:
        """Absolute path to the ``pages`` convention directory."""
        return self.src_path / "pages"

    @property
    def components_path(self) -> Path:
        """Absolute path to the ``components`` convention directory."""
        return self.src_path / "components"

    @property
    def modules_path(self) -> Path:
        """Absolute path to the ``modules`` convention directory."""
        return self.src_path / "modules"

    @property
    def staging_path(self) -> Path:
        """Absolute path to the staged source tree the bundler reads."""
        return self.root / self.cache_dir / self.src_dir

    def area_path(self, area: str) -> Path:
        """Absolute path of a convention directory by name."""
        return self.src_path / area
