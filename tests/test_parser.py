"""Tests for pawprint.conventions.parser — file classification."""

from __future__ import annotations

from pathlib import Path

import pytest

from pawprint.config import ToolchainConfig
from pawprint.conventions.parser import (
    Convention,
    ConventionKind,
    area_of,
    classify,
    is_generated,
    to_symbol,
)


class TestToSymbol:
    """to_symbol — file stems to JavaScript identifiers."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("Button", "Button"),
            ("blog-post", "blog_post"),
            ("my.card", "my_card"),
            ("$store", "$store"),
            ("2col", "_2col"),
            ("default", "default_"),
            ("class", "class_"),
        ],
    )
    def test_conversions(self, name: str, expected: str) -> None:
        assert to_symbol(name) == expected

    def test_nothing_usable(self) -> None:
        assert to_symbol("---") == ""
        assert to_symbol("") == ""


class TestClassifyPages:
    """Files under pages/."""

    def test_capitalised_page(self) -> None:
        assert classify("About.xht", area="pages") == Convention(
            ConventionKind.PAGE, "About", "/about"
        )

    def test_nested_page_lowercases_url(self) -> None:
        conv = classify("Blog/Post.xht", area="pages")
        assert conv.kind is ConventionKind.PAGE
        assert conv.url_pattern == "/blog/post"

    def test_home_marker_at_root(self) -> None:
        assert classify("+Home.xht", area="pages") == Convention(
            ConventionKind.DYNAMIC_PAGE, "Home", "/"
        )

    def test_home_marker_in_directory(self) -> None:
        conv = classify("foo/+home.xht", area="pages")
        assert conv.kind is ConventionKind.DYNAMIC_PAGE
        assert conv.symbol == "home"
        assert conv.url_pattern == "/foo"

    def test_layout_index(self) -> None:
        assert classify("blog/index.xht", area="pages") == Convention(
            ConventionKind.LAYOUT_INDEX, "Index", "/blog/:page"
        )

    def test_index_directory_becomes_param(self) -> None:
        conv = classify("index/Item.xht", area="pages")
        assert conv.url_pattern == "/:page/item"

    def test_lowercase_file_is_component(self) -> None:
        conv = classify("helper.xht", area="pages")
        assert conv.kind is ConventionKind.COMPONENT
        assert conv.symbol == "helper"
        assert conv.url_pattern is None
        assert not conv.kind.routable
        assert conv.kind.exported

    def test_other_extension(self) -> None:
        assert classify("About.js", area="pages").kind is ConventionKind.OTHER
        assert classify("styles.css", area="pages").kind is ConventionKind.OTHER

    def test_bare_extension(self) -> None:
        assert classify(".xht", area="pages").kind is ConventionKind.OTHER

    def test_home_marker_without_name(self) -> None:
        assert classify("+.xht", area="pages").kind is ConventionKind.OTHER

    def test_custom_template_ext(self) -> None:
        conv = classify("About.ma", area="pages", template_ext=".ma")
        assert conv.kind is ConventionKind.PAGE
        assert classify("About.xht", area="pages", template_ext=".ma").kind is (
            ConventionKind.OTHER
        )


class TestClassifyOtherAreas:
    """Files under components/ and modules/."""

    @pytest.mark.parametrize("area", ["components", "modules"])
    def test_every_template_is_component(self, area: str) -> None:
        for name in ("Button.xht", "button.xht", "+Odd.xht", "index.xht"):
            conv = classify(name, area=area)
            assert conv.kind is ConventionKind.COMPONENT
            assert conv.url_pattern is None

    def test_unknown_area(self) -> None:
        assert classify("Button.xht", area="assets").kind is ConventionKind.OTHER


class TestKindFlags:
    """routable / exported flags."""

    def test_routable(self) -> None:
        assert ConventionKind.PAGE.routable
        assert ConventionKind.DYNAMIC_PAGE.routable
        assert ConventionKind.LAYOUT_INDEX.routable
        assert not ConventionKind.COMPONENT.routable
        assert not ConventionKind.OTHER.routable

    def test_exported(self) -> None:
        assert not ConventionKind.OTHER.exported
        assert all(k.exported for k in ConventionKind if k is not ConventionKind.OTHER)


class TestAreaOf:
    """area_of / is_generated."""

    def test_area_of(self, tmp_path: Path) -> None:
        config = ToolchainConfig(root=tmp_path)
        assert area_of(config.src_path / "pages" / "About.xht", config) == "pages"
        assert area_of(config.src_path / "components", config) == "components"
        assert area_of(config.src_path / "main.js", config) is None
        assert area_of(config.src_path, config) is None
        assert area_of(tmp_path / "public" / "main.js", config) is None

    def test_is_generated(self, tmp_path: Path) -> None:
        config = ToolchainConfig(root=tmp_path)
        assert is_generated(config.routes_path, config)
        assert is_generated(config.pages_path / "blog" / "index.js", config)
        assert not is_generated(config.src_path / "index.js", config)
        assert not is_generated(config.pages_path / "About.xht", config)
