"""Smoke tests for the CLI."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from folio.cli import app

from conftest import write


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


def _args(content_root: Path, output_root: Path, *extra: str) -> list[str]:
    return [
        "build",
        "--config",
        str(content_root / "missing.toml"),
        "--content",
        str(content_root),
        "--output",
        str(output_root),
        *extra,
    ]


class TestCLI:
    def test_main_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "build" in result.output
        assert "import-publications" in result.output

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "folio" in result.output


class TestBuildCommand:
    def test_successful_build(self, runner: CliRunner, content_root: Path, output_root: Path):
        result = runner.invoke(app, _args(content_root, output_root))
        assert result.exit_code == 0, result.output
        assert "Pages written:" in result.output
        assert (output_root / "publications/index.html").exists()

    def test_per_file_error_exits_non_zero(
        self, runner: CliRunner, content_root: Path, output_root: Path
    ):
        write(content_root, "_posts/broken.md", "---\ntitle: Broken\n")
        result = runner.invoke(app, _args(content_root, output_root))
        assert result.exit_code == 1
        assert "MalformedDocument" in result.output
        assert (output_root / "posts/index.html").exists()

    def test_abort_exits_non_zero(self, runner: CliRunner, content_root: Path, output_root: Path):
        write(content_root, "_posts/broken.md", "---\ntitle: Broken\n")
        result = runner.invoke(app, _args(content_root, output_root, "--strict"))
        assert result.exit_code == 1
        assert "Build aborted" in result.output
        assert not output_root.exists()


class TestCheckCommand:
    def test_reports_counts(self, runner: CliRunner, content_root: Path, output_root: Path):
        result = runner.invoke(
            app, ["check", "--config", str(content_root / "missing.toml"), "--content", str(content_root)]
        )
        assert result.exit_code == 0, result.output
        assert "publications: 2" in result.output
        assert "posts: 1" in result.output

    def test_reports_errors(self, runner: CliRunner, content_root: Path):
        write(content_root, "_posts/late.md", "---\ndate: whenever\n---\n")
        result = runner.invoke(
            app, ["check", "--config", str(content_root / "missing.toml"), "--content", str(content_root)]
        )
        assert result.exit_code == 1
        assert "InvalidDate" in result.output


class TestImportPublicationsCommand:
    def test_imports_rows(self, runner: CliRunner, tmp_path: Path):
        tsv = tmp_path / "pubs.tsv"
        tsv.write_text(
            "pub_date\ttitle\tvenue\texcerpt\tcitation\turl_slug\tpaper_url\n"
            "2020-05-04\tPaper A\tNature\t\t\tpaper-a\t\n",
            encoding="utf-8",
        )
        content = tmp_path / "content"
        result = runner.invoke(
            app,
            [
                "import-publications",
                str(tsv),
                "--config",
                str(tmp_path / "missing.toml"),
                "--content",
                str(content),
            ],
        )
        assert result.exit_code == 0, result.output
        assert (content / "_publications/2020-05-04-paper-a.md").exists()
