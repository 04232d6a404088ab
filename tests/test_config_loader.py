"""Tests for the config_loader module."""

from pathlib import Path

from repo_dump.config_loader import (
    ProjectConfig,
    find_config_file,
    load_config,
    merge_cli_with_config,
    normalize_patterns,
)


class TestFindConfigFile:
    """Tests for config file discovery."""

    def test_no_config(self, tmp_path):
        """Test a root without config files."""
        assert find_config_file(tmp_path) is None

    def test_toml_preferred_over_yaml(self, tmp_path):
        """Test the search order."""
        (tmp_path / "repo-dump.yml").write_text("description: yaml\n")
        (tmp_path / ".repo-dump.toml").write_text('description = "toml"\n')

        assert find_config_file(tmp_path) == tmp_path / ".repo-dump.toml"


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_config(self, tmp_path):
        """Test that no config file yields defaults."""
        config = load_config(tmp_path)

        assert config.description is None
        assert config.output is None
        assert config.exclude == []

    def test_flat_toml(self, tmp_path):
        """Test a flat TOML file."""
        (tmp_path / "repo-dump.toml").write_text(
            'description = "A tool"\noutput = "dump.txt"\nexclude = ["docs/", "*.lock"]\n'
        )

        config = load_config(tmp_path)

        assert config.description == "A tool"
        assert config.output == Path("dump.txt")
        assert config.exclude == ["docs/", "*.lock"]

    def test_nested_toml_section(self, tmp_path):
        """Test a [repo-dump] section."""
        (tmp_path / "repo-dump.toml").write_text(
            '[repo-dump]\ndescription = "Nested"\nexclude = "a/, b/"\n'
        )

        config = load_config(tmp_path)

        assert config.description == "Nested"
        assert config.exclude == ["a/", "b/"]

    def test_yaml(self, tmp_path):
        """Test a YAML config file."""
        (tmp_path / ".repo-dump.yaml").write_text(
            "repo-dump:\n  description: From YAML\n  ignore:\n    - '*.min.js'\n"
        )

        config = load_config(tmp_path)

        assert config.description == "From YAML"
        assert config.exclude == ["*.min.js"]

    def test_invalid_toml_ignored(self, tmp_path):
        """Test that parse errors fall back to defaults."""
        (tmp_path / "repo-dump.toml").write_text("description = [unclosed\n")

        config = load_config(tmp_path)

        assert config.description is None

    def test_explicit_path(self, tmp_path):
        """Test loading a config file outside the root."""
        config_path = tmp_path / "custom.toml"
        config_path.write_text('description = "Custom"\n')

        config = load_config(tmp_path / "elsewhere", config_path)

        assert config.description == "Custom"
        assert config.to_dict()["_loaded_from"] == str(config_path)


class TestNormalizePatterns:
    """Tests for normalize_patterns."""

    def test_comma_separated(self):
        """Test string input."""
        assert normalize_patterns(" a/ , *.log ,, ") == ["a/", "*.log"]

    def test_list_deduplicates_in_order(self):
        """Test list input keeps first occurrence."""
        assert normalize_patterns(["b", "a", "b"]) == ["b", "a"]

    def test_invalid(self):
        """Test unsupported input types."""
        assert normalize_patterns(None) == []
        assert normalize_patterns(42) == []


class TestMergeCliWithConfig:
    """Tests for merge_cli_with_config."""

    def test_cli_wins(self):
        """Test that CLI values override config values."""
        config = ProjectConfig(description="config", output=Path("config.txt"))

        merged = merge_cli_with_config(config, description="cli", output=Path("cli.txt"))

        assert merged["description"] == "cli"
        assert merged["output"] == Path("cli.txt")

    def test_config_used_when_cli_unset(self):
        """Test fallback to config values."""
        config = ProjectConfig(description="config")

        merged = merge_cli_with_config(config)

        assert merged["description"] == "config"
        assert merged["output"] is None

    def test_excludes_are_additive(self):
        """Test that CLI excludes extend config excludes."""
        config = ProjectConfig(exclude=["docs/"])

        merged = merge_cli_with_config(config, exclude=["*.lock", "docs/"])

        assert merged["exclude"] == ["docs/", "*.lock"]
