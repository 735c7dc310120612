"""Tests for the typer CLI."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from gap_tailor.cli import app
from gap_tailor.config import AppConfig

runner = CliRunner()


@pytest.fixture(autouse=True)
def default_config():
    with patch("gap_tailor.cli.load_config", return_value=AppConfig()):
        yield


class TestExtract:
    def test_prints_text(self, tmp_path):
        resume = tmp_path / "resume.tex"
        resume.write_text("\\section{Experience}\n\\resumeItem{Built a pipeline processing 1M records/day}")
        result = runner.invoke(app, ["extract", str(resume)])
        assert result.exit_code == 0
        assert "Experience" in result.output
        assert "• Built a pipeline processing 1M records/day" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["extract", str(tmp_path / "nope.pdf")])
        assert result.exit_code == 1
        assert "Resume file not found" in result.output

    def test_unsupported_file(self, tmp_path):
        resume = tmp_path / "resume.txt"
        resume.write_text("plain text")
        result = runner.invoke(app, ["extract", str(resume)])
        assert result.exit_code == 1
        assert "Unsupported file type" in result.output


class TestScrape:
    def test_invalid_url(self):
        result = runner.invoke(app, ["scrape", "ftp://example.com/job"])
        assert result.exit_code == 1
        assert "Unsupported URL scheme" in result.output
