"""Shared test fixtures for pawprint."""

from __future__ import annotations

from pathlib import Path

import pytest

from pawprint.config import ToolchainConfig

INDEX_HTML = (
    "<!DOCTYPE html>\n<html>\n<head><title>App</title></head>\n"
    '<body><script src="/main.js"></script></body>\n</html>\n'
)


def touch(path: Path, content: str = "") -> Path:
    """Create *path* (and its parents) with *content*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Create a small project tree.

    ::

        src/main.js
        src/pages/+Home.xht  About.xht  helper.xht
        src/pages/blog/+Blog.xht  Post.xht  index.xht
        src/components/Button.xht
        src/components/forms/Input.xht
        src/modules/store.xht
        public/index.html

    """
    src = tmp_path / "src"
    touch(src / "main.js", 'import routes from "./routes.js";\nexport default routes;\n')
    touch(src / "pages" / "+Home.xht", "<h1>Home</h1>\n")
    touch(src / "pages" / "About.xht", "<h1>About</h1>\n")
    touch(src / "pages" / "helper.xht", "<p>helper</p>\n")
    touch(src / "pages" / "blog" / "+Blog.xht", "<h1>Blog</h1>\n")
    touch(src / "pages" / "blog" / "Post.xht", "<h1>Post</h1>\n")
    touch(src / "pages" / "blog" / "index.xht", "<h1>Index</h1>\n")
    touch(src / "components" / "Button.xht", "<button>ok</button>\n")
    touch(src / "components" / "forms" / "Input.xht", "<input>\n")
    touch(src / "modules" / "store.xht", "<script>export let x = 1;</script>\n")
    touch(tmp_path / "public" / "index.html", INDEX_HTML)
    return tmp_path


@pytest.fixture
def config(tmp_project: Path) -> ToolchainConfig:
    return ToolchainConfig(root=tmp_project)
