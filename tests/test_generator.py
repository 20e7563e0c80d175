"""Tests for pawprint.conventions.generator."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from pawprint.config import ToolchainConfig
from pawprint.conventions.generator import ConventionGenerator
from pawprint.observability import EventLog, ModulesGenerated, StackCollector


class TestRegenerateAll:
    """regenerate_all — every barrel plus the route table."""

    def test_writes_every_module(self, config: ToolchainConfig) -> None:
        report = ConventionGenerator(config).regenerate_all()
        src = config.src_path
        assert set(report.written) == {
            src / "pages" / "index.js",
            src / "pages" / "blog" / "index.js",
            src / "components" / "index.js",
            src / "components" / "forms" / "index.js",
            src / "modules" / "index.js",
            src / "routes.js",
        }
        assert report.unchanged == ()
        assert report.route_count == 5
        assert all(p.is_file() for p in report.written)

    def test_second_pass_is_idempotent(self, config: ToolchainConfig) -> None:
        generator = ConventionGenerator(config)
        generator.regenerate_all()
        before = {p: p.read_text() for p in config.src_path.rglob("*.js")}
        report = generator.regenerate_all()
        assert report.written == ()
        assert len(report.unchanged) == 6
        assert {p: p.read_text() for p in config.src_path.rglob("*.js")} == before

    def test_autoroute_disabled(self, config: ToolchainConfig) -> None:
        report = ConventionGenerator(replace(config, autoroute=False)).regenerate_all()
        assert report.route_count == 0
        assert not config.routes_path.exists()
        assert (config.pages_path / "index.js").is_file()

    def test_missing_source_directory(self, tmp_path: Path) -> None:
        report = ConventionGenerator(ToolchainConfig(root=tmp_path)).regenerate_all()
        assert report.written == ()
        assert report.route_count == 0
        assert not (tmp_path / "src").exists()

    def test_empty_source_directory(self, tmp_path: Path) -> None:
        config = ToolchainConfig(root=tmp_path)
        config.src_path.mkdir()
        report = ConventionGenerator(config).regenerate_all()
        assert report.written == (config.routes_path,)
        assert config.routes_path.read_text().endswith("export default [];\n")

    def test_records_events(self, config: ToolchainConfig) -> None:
        collector = StackCollector(EventLog())
        ConventionGenerator(config, collector).regenerate_all()
        events = collector.log.query(event_type=ModulesGenerated)
        assert len(events) == 6
        assert {e.kind for e in events} == {"barrel", "routes"}
        routes = collector.log.query(event_type=ModulesGenerated, path="routes.js")
        assert routes[0].entries == 5

    def test_route_conflicts_reported(self, config: ToolchainConfig) -> None:
        (config.pages_path / "about").mkdir()
        (config.pages_path / "about" / "+About.xht").write_text("")
        report = ConventionGenerator(config).regenerate_all()
        assert report.warnings == (
            "Route /about: About.xht is overridden by about/+About.xht",
        )

    def test_no_conflicts(self, config: ToolchainConfig) -> None:
        assert ConventionGenerator(config).regenerate_all().warnings == ()


class TestRebuild:
    """rebuild_routes / rebuild_barrel."""

    def test_rebuild_routes_reports_change(self, config: ToolchainConfig) -> None:
        generator = ConventionGenerator(config)
        assert generator.rebuild_routes()
        assert not generator.rebuild_routes()
        (config.pages_path / "Contact.xht").write_text("<h1>Contact</h1>\n")
        assert generator.rebuild_routes()
        assert '"/contact"' in config.routes_path.read_text()

    def test_rebuild_routes_disabled(self, config: ToolchainConfig) -> None:
        generator = ConventionGenerator(replace(config, autoroute=False))
        assert not generator.rebuild_routes()
        assert not config.routes_path.exists()

    def test_rebuild_barrel_missing_directory(self, config: ToolchainConfig) -> None:
        assert not ConventionGenerator(config).rebuild_barrel(config.pages_path / "gone")

    def test_route_table_does_not_write(self, config: ToolchainConfig) -> None:
        table = ConventionGenerator(config).route_table()
        assert len(table) == 5
        assert not config.routes_path.exists()


class TestScaffoldDirectory:
    """scaffold_directory — default files for new directories."""

    def test_new_pages_directory(self, config: ToolchainConfig) -> None:
        directory = config.pages_path / "blog-posts"
        directory.mkdir()
        created = ConventionGenerator(config).scaffold_directory(directory)
        stub = directory / "+BlogPosts.xht"
        assert created == (stub, directory / "index.js")
        assert stub.read_text() == "<h1>BlogPosts</h1>\n"
        assert 'default as BlogPosts } from "./+BlogPosts.xht"' in (
            directory / "index.js"
        ).read_text()

    def test_existing_home_page_kept(self, config: ToolchainConfig) -> None:
        directory = config.pages_path / "blog"
        created = ConventionGenerator(config).scaffold_directory(directory)
        assert created == (directory / "index.js",)
        assert sorted(p.name for p in directory.glob("+*")) == ["+Blog.xht"]

    def test_unusable_name_falls_back_to_home(self, config: ToolchainConfig) -> None:
        directory = config.pages_path / "2024"
        directory.mkdir()
        ConventionGenerator(config).scaffold_directory(directory)
        assert (directory / "+Home.xht").is_file()

    def test_components_directory_gets_barrel_only(self, config: ToolchainConfig) -> None:
        directory = config.components_path / "cards"
        directory.mkdir()
        created = ConventionGenerator(config).scaffold_directory(directory)
        assert created == (directory / "index.js",)
        assert (directory / "index.js").read_text().endswith("export {};\n")

    def test_moved_in_tree_scaffolded_throughout(self, config: ToolchainConfig) -> None:
        shop = config.pages_path / "shop"
        (shop / "items").mkdir(parents=True)
        (shop / "items" / "Item.xht").write_text("<h1>Item</h1>\n")
        created = ConventionGenerator(config).scaffold_directory(shop)
        assert shop / "items" / "index.js" in created
        assert '"./Item.xht"' in (shop / "items" / "index.js").read_text()
        assert (shop / "+Shop.xht").is_file()
        assert (shop / "items" / "+Items.xht").is_file()

    def test_nested_components_get_barrels(self, config: ToolchainConfig) -> None:
        cards = config.components_path / "cards"
        (cards / "small").mkdir(parents=True)
        (cards / "small" / "Badge.xht").write_text("")
        created = ConventionGenerator(config).scaffold_directory(cards)
        assert created == (cards / "index.js", cards / "small" / "index.js")
        assert not list(cards.rglob("+*"))

    def test_vanished_directory(self, config: ToolchainConfig) -> None:
        assert ConventionGenerator(config).scaffold_directory(config.pages_path / "x") == ()
