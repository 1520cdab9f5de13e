"""Unit tests for the init-config command."""

from __future__ import annotations

import tomllib
from pathlib import Path
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from facet_search.commands.init_config import _load_example_config, cli
from facet_search.config import Config, _parse_config_dict


class TestLoadExampleConfig:
    def test_loads_non_empty_content(self) -> None:
        content = _load_example_config()
        assert len(content) > 0

    def test_contains_all_sections(self) -> None:
        content = _load_example_config()
        for section in ("[elasticsearch]", "[search]", "[recency_boost]", "[display]"):
            assert section in content, f"Missing section {section}"

    def test_example_matches_defaults(self) -> None:
        data = tomllib.loads(_load_example_config())
        parsed = _parse_config_dict(data, Path("config.toml"))
        defaults = Config()

        assert parsed.elasticsearch_url == defaults.elasticsearch_url
        assert parsed.full_text_fields == defaults.full_text_fields
        assert parsed.phrase_field == defaults.phrase_field
        assert parsed.recency_boost_tiers == defaults.recency_boost_tiers
        assert parsed.recency_boost_enabled is False


class TestInitConfigCommand:
    def test_creates_config_file(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["--output", "test-config.toml"], standalone_mode=False)
            assert result.exception is None
            assert Path("test-config.toml").exists()
            assert "[elasticsearch]" in Path("test-config.toml").read_text()

    def test_created_file_matches_example(self) -> None:
        example = _load_example_config()
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["--output", "test-config.toml"], standalone_mode=False)
            assert Path("test-config.toml").read_text() == example

    def test_fails_if_exists_without_force(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("test-config.toml").write_text("existing")
            result = runner.invoke(cli, ["--output", "test-config.toml"], standalone_mode=False)
            assert isinstance(result.exception, SystemExit)
            assert result.exception.code == 1
            assert Path("test-config.toml").read_text() == "existing"

    def test_force_overwrites_existing(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("test-config.toml").write_text("old content")
            result = runner.invoke(
                cli, ["--output", "test-config.toml", "--force"], standalone_mode=False
            )
            assert result.exception is None
            content = Path("test-config.toml").read_text()
            assert "[elasticsearch]" in content
            assert "old content" not in content

    def test_creates_parent_directories(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(
                cli, ["--output", "deep/nested/dir/config.toml"], standalone_mode=False
            )
            assert result.exception is None
            assert Path("deep/nested/dir/config.toml").exists()

    def test_default_path_used_when_no_output(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            mock_path = MagicMock(return_value=Path("default-config.toml"))
            with patch("facet_search.commands.init_config.get_default_config_path", mock_path):
                result = runner.invoke(cli, [], standalone_mode=False)
                assert result.exception is None
                assert Path("default-config.toml").exists()
