"""Tests for the CLI."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from repo_dump import __version__
from repo_dump.cli import app, parse_excludes
from repo_dump.formatter import FORMAT_EXPLANATION

runner = CliRunner()


@pytest.fixture
def repo(tmp_path):
    """Create a small repository."""
    (tmp_path / "a.txt").write_text("hello")
    (tmp_path / "b.txt").write_text("secret")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.md").write_text("# Guide\n")
    (tmp_path / "image.png").write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 16)
    (tmp_path / ".gitignore").write_text("b.txt\n")
    return tmp_path


def test_parse_excludes():
    """Test repeated, comma-separated exclude options."""
    assert parse_excludes(["a/,b/", "*.log"]) == ["a/", "b/", "*.log"]
    assert parse_excludes(None) == []


class TestDumpCommand:
    """Tests for the dump command."""

    def test_dump_to_stdout(self, repo):
        """Test dumping to stdout."""
        result = runner.invoke(app, ["dump", str(repo), "--quiet"])

        assert result.exit_code == 0
        assert result.stdout.startswith(FORMAT_EXPLANATION)
        assert "----\na.txt\nhello\n" in result.stdout
        assert "----\nb.txt\n" not in result.stdout
        assert "image.png" not in result.stdout
        assert result.stdout.endswith("--END--\n")

    def test_description(self, repo):
        """Test that the description is unescaped."""
        result = runner.invoke(
            app, ["dump", str(repo), "--quiet", "-d", r"Line one\nLine two"]
        )

        assert result.exit_code == 0
        assert "Line one\nLine two" in result.stdout

    def test_dump_to_file(self, repo, tmp_path_factory):
        """Test writing to an output file with a summary."""
        output = tmp_path_factory.mktemp("out") / "dump.txt"

        result = runner.invoke(app, ["dump", str(repo), "-o", str(output)])

        assert result.exit_code == 0
        content = output.read_text()
        assert "----\ndocs/guide.md\n# Guide\n" in content
        assert content.endswith("--END--\n")
        assert "Dump complete" in result.output
        assert "Statistics:" in result.output
        assert "Files dumped: 3" in result.output

    def test_exclude_option(self, repo):
        """Test extra ignore patterns from the command line."""
        result = runner.invoke(app, ["dump", str(repo), "-q", "-e", "docs/"])

        assert result.exit_code == 0
        assert "docs/guide.md" not in result.stdout
        assert "a.txt" in result.stdout

    def test_config_file_in_root(self, repo):
        """Test that a config file in the root supplies defaults."""
        (repo / "repo-dump.toml").write_text(
            'description = "From config"\nexclude = ["docs/", "repo-dump.toml"]\n'
        )

        result = runner.invoke(app, ["dump", str(repo), "-q"])

        assert result.exit_code == 0
        assert "From config" in result.stdout
        assert "docs/guide.md" not in result.stdout

    def test_missing_path(self, tmp_path):
        """Test that a nonexistent path fails."""
        result = runner.invoke(app, ["dump", str(tmp_path / "missing")])

        assert result.exit_code != 0

    def test_error_exit_code(self, repo):
        """Test that a dump error exits with status 1."""
        (repo / "sub").mkdir()
        (repo / "sub" / ".gitignore").mkdir()

        result = runner.invoke(app, ["dump", str(repo), "-q"])

        assert result.exit_code == 1

    def test_version(self):
        """Test the version flag."""
        result = runner.invoke(app, ["dump", "--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestFilesCommand:
    """Tests for the files command."""

    def test_lists_included_files(self, repo):
        """Test that only dumped files are listed."""
        result = runner.invoke(app, ["files", str(repo)])

        assert result.exit_code == 0
        assert result.stdout.splitlines() == [".gitignore", "a.txt", "docs/guide.md"]

    def test_all_shows_reasons(self, repo):
        """Test listing skipped entries."""
        result = runner.invoke(app, ["files", str(repo), "--all"])

        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert "b.txt (ignored)" in lines
        assert "image.png (binary: image/png)" in lines
        assert "a.txt (text/plain; charset=utf-8)" in lines
        assert "docs" not in lines

    def test_all_shows_detected_charset(self, repo):
        """Test that a non-UTF-8 text file is listed with its detected charset."""
        legacy_text = "Ceci est un caf\xe9 tr\xe8s agr\xe9able \xe0 c\xf4t\xe9 de la rivi\xe8re.\n"
        (repo / "legacy.txt").write_bytes(legacy_text.encode("latin-1"))

        result = runner.invoke(app, ["files", str(repo), "--all"])

        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        legacy = [line for line in lines if line.startswith("legacy.txt")]
        assert len(legacy) == 1
        assert legacy[0].startswith("legacy.txt (text/plain; charset=")
        assert "utf-8" not in legacy[0]

    def test_default_path_is_cwd(self, repo, monkeypatch):
        """Test that the current directory is used without a path."""
        monkeypatch.chdir(Path(repo))

        result = runner.invoke(app, ["files"])

        assert result.exit_code == 0
        assert "a.txt" in result.stdout.splitlines()
