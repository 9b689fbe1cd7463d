"""Tests for cvscore.main - the command-line interface."""

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from cvscore.main import _configure_logging, main
from cvscore.models import CvDocument, LlmGrade


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


@pytest.fixture()
def cv_path(fixtures_dir: Path) -> str:
    return str(fixtures_dir / "full_cv.json")


class TestJsonOutput:
    def test_rules_only(self, cv_path: str, capsys: pytest.CaptureFixture):
        assert main([cv_path, "--no-cache", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["overallScore"] == 98
        assert data["ruleScore"] == 98
        assert data["llmGrade"] is None
        assert data["breakdown"]["dateContinuity"] == 5

    def test_locale_flag(self, cv_path: str, capsys: pytest.CaptureFixture):
        assert main([cv_path, "--no-cache", "--json", "--locale", "pt"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["categories"][0]["name"] == "Informações de Contato"

    def test_locale_defaults_to_cv_locale(self, tmp_path: Path, full_cv_data: dict, capsys: pytest.CaptureFixture):
        full_cv_data["locale"] = "pt"
        path = tmp_path / "cv.json"
        path.write_text(json.dumps(full_cv_data), encoding="utf-8")

        assert main([str(path), "--no-cache", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["categories"][-1]["name"] == "Continuidade de Carreira"

    @patch("cvscore.composer.fetch_llm_grade")
    @patch("cvscore.main.create_client")
    def test_with_llm_grade(
        self,
        mock_create: MagicMock,
        mock_fetch: MagicMock,
        cv_path: str,
        capsys: pytest.CaptureFixture,
        monkeypatch: pytest.MonkeyPatch,
    ):
        monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
        mock_fetch.return_value = LlmGrade(
            summary_grade="B", experience_grade="C", overall_impression="B", top_suggestion="Tighten the summary"
        )

        assert main([cv_path, "--no-cache", "--json", "--timeout", "3"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["overallScore"] == 95
        assert data["llmGrade"] == "B"
        assert data["suggestions"][-1]["text"] == "Tighten the summary"
        assert mock_fetch.call_args.args[0] is mock_create.return_value
        assert mock_fetch.call_args.kwargs["timeout"] == 3.0

    @patch("cvscore.main.create_client")
    def test_no_llm_flag_skips_client(self, mock_create: MagicMock, cv_path: str, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "test-key")

        assert main([cv_path, "--no-cache", "--json", "--no-llm"]) == 0

        mock_create.assert_not_called()


class TestRichOutput:
    def test_renders_tables(self, cv_path: str, capsys: pytest.CaptureFixture):
        assert main([cv_path, "--no-cache"]) == 0

        out = capsys.readouterr().out
        assert "Section Breakdown" in out
        assert "Recommended" in out
        assert "98" in out

    def test_uses_cache_dir(self, cv_path: str, tmp_path: Path):
        cache_dir = tmp_path / "cache"

        assert main([cv_path, "--cache-dir", str(cache_dir)]) == 0

        assert len(list(cache_dir.glob("*.json"))) == 1


class TestTranslate:
    @patch("cvscore.main.translate_cv")
    @patch("cvscore.main.create_client")
    def test_translate_then_score(
        self,
        mock_create: MagicMock,
        mock_translate: MagicMock,
        cv_path: str,
        full_cv_data: dict,
        tmp_path: Path,
        capsys: pytest.CaptureFixture,
    ):
        mock_translate.return_value = CvDocument.model_validate(dict(full_cv_data, locale="pt"))
        export = tmp_path / "cv.pt.json"

        assert main([cv_path, "--no-cache", "--json", "--translate", "pt", "--export", str(export)]) == 0

        assert mock_translate.call_args.args[0] is mock_create.return_value
        assert mock_translate.call_args.args[2] == "pt"
        data = json.loads(capsys.readouterr().out)
        assert data["categories"][0]["name"] == "Informações de Contato"
        assert json.loads(export.read_text(encoding="utf-8"))["locale"] == "pt"

    def test_translate_without_key(self, cv_path: str, capsys: pytest.CaptureFixture):
        assert main([cv_path, "--no-cache", "--translate", "pt"]) == 1
        assert "GOOGLE_API_KEY" in capsys.readouterr().out

    def test_export_without_translation(self, cv_path: str, tmp_path: Path):
        export = tmp_path / "out.json"

        assert main([cv_path, "--no-cache", "--export", str(export)]) == 0

        assert json.loads(export.read_text(encoding="utf-8"))["header"]["name"] == "Jane Doe"


class TestErrors:
    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture):
        assert main([str(tmp_path / "missing.json"), "--no-cache"]) == 1
        assert "Error" in capsys.readouterr().out

    def test_invalid_document(self, fixtures_dir: Path, capsys: pytest.CaptureFixture):
        assert main([str(fixtures_dir / "invalid_cv.json"), "--no-cache"]) == 1
        out = capsys.readouterr().out
        assert "Invalid CV document" in out
        assert "Configuration Error" not in out

    def test_text_import_without_key(self, fixtures_dir: Path):
        assert main([str(fixtures_dir / "sample.txt"), "--no-cache"]) == 1

    @patch("cvscore.main.load_cv", side_effect=KeyboardInterrupt)
    def test_interrupted(self, mock_load: MagicMock, cv_path: str):
        assert main([cv_path, "--no-cache"]) == 130


class TestConfigureLogging:
    @pytest.mark.parametrize(
        "verbosity, level",
        [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (3, logging.DEBUG)],
    )
    @patch("cvscore.main.logging.basicConfig")
    def test_levels(self, mock_config: MagicMock, verbosity: int, level: int):
        _configure_logging(verbosity)
        assert mock_config.call_args.kwargs["level"] == level
