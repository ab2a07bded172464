"""Tests for CLI commands."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from postfinder.cli import _setup_logging, app
from postfinder.index.storage import write_artifact
from postfinder.models import DocumentRecord


runner = CliRunner()


class TestSetupLogging:
    """Tests for _setup_logging helper."""

    def test_setup_logging_verbose(self) -> None:
        """Verbose mode sets DEBUG level."""
        with patch("postfinder.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        """Normal mode sets INFO level."""
        with patch("postfinder.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.INFO


class TestBuildCommand:
    """Tests for the build command."""

    def test_build_writes_index(self, tmp_path: Path, content_dir: Path, write_post) -> None:
        """Builds the artifact and reports counts."""
        write_post("a.md", "Alpha")
        write_post("b/c.md", "Charlie")
        output = tmp_path / "index.json"

        result = runner.invoke(app, ["build", str(content_dir), "--output", str(output)])

        assert result.exit_code == 0
        assert "Indexed: 2" in result.stdout
        assert [item["slug"] for item in json.loads(output.read_text())] == ["a", "b/c"]

    def test_build_reports_parse_failures(self, tmp_path: Path, content_dir: Path) -> None:
        (content_dir / "bad.md").write_text("---\ntitle: [oops\n---\nBody", encoding="utf-8")

        result = runner.invoke(app, ["build", str(content_dir), "-o", str(tmp_path / "index.json")])

        assert result.exit_code == 0
        assert "parse failures: 1" in result.stdout

    def test_build_missing_content(self, tmp_path: Path) -> None:
        """Exits with an error when the content directory is missing."""
        result = runner.invoke(app, ["build", str(tmp_path / "missing"), "-o", str(tmp_path / "index.json")])

        assert result.exit_code == 1
        assert "Content directory not found" in result.stdout
        assert not (tmp_path / "index.json").exists()


class TestWatchCommand:
    """Tests for the watch command."""

    def test_watch_missing_content(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["watch", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "Content directory not found" in result.stdout

    def test_watch_starts_watcher(self, tmp_path: Path, content_dir: Path) -> None:
        """Hands resolved paths to the watcher."""
        output = tmp_path / "index.json"
        marker = tmp_path / ".stamp"

        with patch("postfinder.cli.watch_content") as mock_watch:
            result = runner.invoke(
                app, ["watch", str(content_dir), "--output", str(output), "--marker", str(marker)]
            )

        assert result.exit_code == 0
        mock_watch.assert_called_once_with(content_dir, output, marker_path=marker)


class TestSearchCommand:
    """Tests for the search command."""

    def _write_index(self, path: Path) -> None:
        write_artifact(
            path,
            [
                DocumentRecord("docker", ".", "Docker", "", ("devops",), "Containers", "", ""),
                DocumentRecord("python", ".", "Python", "", (), "Snakes", "", ""),
            ],
        )

    def test_search_missing_index(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["search", "docker", "--index", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "Search index not found" in result.stdout

    def test_search_corrupt_index(self, tmp_path: Path) -> None:
        index = tmp_path / "index.json"
        index.write_text("{oops")

        result = runner.invoke(app, ["search", "docker", "--index", str(index)])

        assert result.exit_code == 1
        assert "Corrupt search index" in result.stdout

    def test_search_prints_results(self, tmp_path: Path) -> None:
        index = tmp_path / "index.json"
        self._write_index(index)

        result = runner.invoke(app, ["search", "docker", "--index", str(index)])

        assert result.exit_code == 0
        assert "Docker" in result.stdout
        assert "Python" not in result.stdout

    def test_search_no_results(self, tmp_path: Path) -> None:
        index = tmp_path / "index.json"
        self._write_index(index)

        result = runner.invoke(app, ["search", "zzzzqq", "--index", str(index)])

        assert result.exit_code == 0
        assert "No matches found" in result.stdout


class TestPagesCommand:
    """Tests for the pages command."""

    def test_pages_window(self) -> None:
        result = runner.invoke(app, ["pages", "160", "--page", "6"])

        assert result.exit_code == 0
        assert "1 … 4 5 [6] 7 8 … 20" in result.stdout

    def test_pages_single_page(self) -> None:
        result = runner.invoke(app, ["pages", "5"])

        assert result.exit_code == 0
        assert "Everything fits on one page" in result.stdout

    def test_pages_invalid_page_size(self) -> None:
        result = runner.invoke(app, ["pages", "10", "--per-page", "0"])

        assert result.exit_code == 2


class TestSitemapCommand:
    """Tests for the sitemap command."""

    def test_sitemap_writes_file(self, tmp_path: Path, content_dir: Path, write_post) -> None:
        write_post("post.md", "Post")
        output = tmp_path / "sitemap.xml"

        result = runner.invoke(
            app,
            ["sitemap", str(content_dir), "--output", str(output), "--base-url", "https://blog.example.com"],
        )

        assert result.exit_code == 0
        assert "Wrote 3 URLs" in result.stdout
        assert "https://blog.example.com/post" in output.read_text()

    def test_sitemap_missing_content(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["sitemap", str(tmp_path / "missing"), "-o", str(tmp_path / "s.xml")])

        assert result.exit_code == 1


class TestWebCommand:
    """Tests for the web command."""

    def test_web_runs_uvicorn(self, tmp_path: Path) -> None:
        """Starts uvicorn with the configured host and port."""
        index = tmp_path / "index.json"
        index.write_text("[]")

        with patch("uvicorn.run") as mock_run:
            result = runner.invoke(app, ["web", "--port", "9000", "--index", str(index)])

        assert result.exit_code == 0
        mock_run.assert_called_once()
        assert mock_run.call_args[1]["port"] == 9000
        assert mock_run.call_args[1]["host"] == "127.0.0.1"
