"""Tests for pawprint.bundle.bundler — the esbuild adapter."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from pawprint._errors import BuildError
from pawprint.bundle.bundler import (
    BuildOptions,
    EsbuildContext,
    api_to_cli,
    find_esbuild,
    kebab_case,
)
from pawprint.config import ToolchainConfig

# ---------------------------------------------------------------------------
# Option translation
# ---------------------------------------------------------------------------


class TestApiToCli:
    """api_to_cli — API-shaped options to command-line flags."""

    def test_kebab_case(self) -> None:
        assert kebab_case("entryNames") == "entry-names"
        assert kebab_case("outExtension") == "out-extension"
        assert kebab_case("bundle") == "bundle"

    def test_entry_points_first(self) -> None:
        args = api_to_cli({"bundle": True, "entryPoints": ["src/a.js", "src/b.js"]})
        assert args == ["src/a.js", "src/b.js", "--bundle"]

    def test_scalars(self) -> None:
        assert api_to_cli({"minify": False, "outfile": "out/main.js", "sourcemap": True}) == [
            "--minify=false",
            "--outfile=out/main.js",
            "--sourcemap",
        ]

    def test_keyed_options(self) -> None:
        args = api_to_cli({"define": {"DEBUG": "true"}, "loader": {".xht": "js", ".png": "file"}})
        assert args == ["--define:DEBUG=true", "--loader:.xht=js", "--loader:.png=file"]

    def test_repeated_options(self) -> None:
        assert api_to_cli({"external": ["react", "vue"]}) == ["--external:react", "--external:vue"]

    def test_list_value(self) -> None:
        assert api_to_cli({"target": ["es2020", "chrome90"]}) == ["--target=es2020,chrome90"]

    def test_none_skipped(self) -> None:
        assert api_to_cli({"sourcemap": None}) == []

    def test_api_only_option_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="pawprint.build"):
            assert api_to_cli({"plugins": [object()]}) == []
        assert "plugins" in caplog.text


class TestBuildOptions:
    """BuildOptions.as_api / to_cli_args."""

    def test_as_api(self) -> None:
        options = BuildOptions(entry_points=("src/main.js",), outfile="public/main.js")
        assert options.as_api() == {
            "entryPoints": ["src/main.js"],
            "outfile": "public/main.js",
            "bundle": True,
            "minify": False,
            "define": {},
            "loader": {},
            "alias": {},
        }

    def test_overrides_win(self) -> None:
        options = BuildOptions(
            entry_points=("a.js",),
            outfile="out.js",
            minify=True,
            overrides={"minify": False, "sourcemap": "inline"},
        )
        api = options.as_api()
        assert api["minify"] is False
        assert api["sourcemap"] == "inline"

    def test_outdir_replaces_outfile(self) -> None:
        options = BuildOptions(entry_points=("a.js",), outfile="out.js", overrides={"outdir": "dist"})
        api = options.as_api()
        assert "outfile" not in api
        assert api["outdir"] == "dist"

    def test_cli_args(self) -> None:
        options = BuildOptions(
            entry_points=("a.js",),
            outfile="out.js",
            minify=True,
            alias={"malinajs": "malinajs/runtime.js"},
        )
        assert options.to_cli_args() == [
            "a.js",
            "--outfile=out.js",
            "--bundle",
            "--minify",
            "--alias:malinajs=malinajs/runtime.js",
        ]


# ---------------------------------------------------------------------------
# Executable discovery
# ---------------------------------------------------------------------------


class TestFindEsbuild:
    """find_esbuild lookup order."""

    def test_explicit_binary(self, tmp_path: Path) -> None:
        config = ToolchainConfig(root=tmp_path, esbuild_binary="/opt/esbuild")
        assert find_esbuild(config) == "/opt/esbuild"

    def test_project_local(self, tmp_path: Path) -> None:
        local = tmp_path / "node_modules" / ".bin" / "esbuild"
        local.parent.mkdir(parents=True)
        local.write_text("")
        with patch("pawprint.bundle.bundler.shutil.which", return_value="/usr/bin/esbuild"):
            assert find_esbuild(ToolchainConfig(root=tmp_path)) == str(local)

    def test_path(self, tmp_path: Path) -> None:
        with patch("pawprint.bundle.bundler.shutil.which", return_value="/usr/bin/esbuild"):
            assert find_esbuild(ToolchainConfig(root=tmp_path)) == "/usr/bin/esbuild"

    def test_not_found(self, tmp_path: Path) -> None:
        with patch("pawprint.bundle.bundler.shutil.which", return_value=None):
            with pytest.raises(BuildError, match="esbuild not found"):
                find_esbuild(ToolchainConfig(root=tmp_path))


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


def _context(tmp_path: Path) -> EsbuildContext:
    options = BuildOptions(entry_points=("src/main.js",), outfile="public/main.js")
    return EsbuildContext("esbuild", options, cwd=tmp_path)


class TestEsbuildContextRebuild:
    """EsbuildContext.rebuild."""

    def test_command(self, tmp_path: Path) -> None:
        assert _context(tmp_path).command("--watch") == [
            "esbuild",
            "src/main.js",
            "--outfile=public/main.js",
            "--bundle",
            "--minify=false",
            "--watch",
        ]

    def test_success(self, tmp_path: Path) -> None:
        done = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")
        with patch("pawprint.bundle.bundler.subprocess.run", return_value=done) as run:
            duration = _context(tmp_path).rebuild()
        assert duration >= 0
        assert run.call_args.kwargs["cwd"] == tmp_path

    def test_failure(self, tmp_path: Path) -> None:
        failed = subprocess.CompletedProcess(
            args=[], returncode=1, stdout="", stderr='✘ [ERROR] Could not resolve "./Nope.xht"\n'
        )
        with patch("pawprint.bundle.bundler.subprocess.run", return_value=failed):
            with pytest.raises(BuildError, match="Could not resolve"):
                _context(tmp_path).rebuild()

    def test_cannot_start(self, tmp_path: Path) -> None:
        with patch("pawprint.bundle.bundler.subprocess.run", side_effect=PermissionError("denied")):
            with pytest.raises(BuildError, match="Cannot run esbuild"):
                _context(tmp_path).rebuild()


class TestEsbuildContextWatch:
    """EsbuildContext.watch / dispose."""

    def test_watch_starts_process(self, tmp_path: Path) -> None:
        process = MagicMock()
        process.poll.return_value = None
        with patch("pawprint.bundle.bundler.subprocess.Popen", return_value=process) as popen:
            context = _context(tmp_path)
            context.watch()
            context.watch()
        assert popen.call_count == 1
        args, kwargs = popen.call_args
        assert args[0][-1] == "--watch"
        assert kwargs["stdin"] == subprocess.PIPE
        assert context.watching

    def test_dispose_closes_stdin(self, tmp_path: Path) -> None:
        process = MagicMock()
        process.poll.return_value = None
        with patch("pawprint.bundle.bundler.subprocess.Popen", return_value=process):
            context = _context(tmp_path)
            context.watch()
        context.dispose()
        process.stdin.close.assert_called_once()
        process.wait.assert_called_once()
        process.terminate.assert_not_called()
        assert not context.watching

    def test_dispose_terminates_stuck_process(self, tmp_path: Path) -> None:
        process = MagicMock()
        process.wait.side_effect = [subprocess.TimeoutExpired("esbuild", 5.0), 0]
        with patch("pawprint.bundle.bundler.subprocess.Popen", return_value=process):
            context = _context(tmp_path)
            context.watch()
        context.dispose()
        process.terminate.assert_called_once()
        process.kill.assert_not_called()

    def test_dispose_without_watch(self, tmp_path: Path) -> None:
        _context(tmp_path).dispose()

    def test_watch_cannot_start(self, tmp_path: Path) -> None:
        with patch("pawprint.bundle.bundler.subprocess.Popen", side_effect=FileNotFoundError):
            with pytest.raises(BuildError):
                _context(tmp_path).watch()
