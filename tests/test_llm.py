"""Tests for cvscore.llm - parse_json(), call_gemini() retry logic and client creation."""

from unittest.mock import MagicMock, patch

import pytest
from google.genai.errors import ClientError, ServerError

from cvscore.llm import api_key, call_gemini, create_client, parse_json


class TestParseJson:
    def test_raw_object(self):
        assert parse_json('{"summaryGrade": "A"}') == {"summaryGrade": "A"}

    def test_raw_array(self):
        assert parse_json('["a", "b"]') == ["a", "b"]

    def test_markdown_fenced(self):
        text = '```json\n{"overallImpression": "B"}\n```'
        assert parse_json(text) == {"overallImpression": "B"}

    def test_markdown_fenced_no_lang(self):
        assert parse_json("```\n[1, 2, 3]\n```") == [1, 2, 3]

    def test_json_embedded_in_text(self):
        text = 'Here is my grade: {"summaryGrade": "C", "experienceGrade": "B"} hope it helps.'
        assert parse_json(text)["summaryGrade"] == "C"

    def test_nested_object(self):
        assert parse_json('{"header": {"name": "Ana"}}')["header"]["name"] == "Ana"

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="Empty response"):
            parse_json("")

    def test_garbage_raises(self):
        with pytest.raises(ValueError, match="Could not parse JSON"):
            parse_json("this is not json at all")


class TestCallGemini:
    """call_gemini() with a mocked client.models.generate_content and time.sleep."""

    def _make_client(self, side_effects: list) -> MagicMock:
        client = MagicMock()
        client.models.generate_content.side_effect = side_effects
        return client

    def _make_response(self, text: str | None) -> MagicMock:
        resp = MagicMock()
        resp.text = text
        return resp

    @patch("cvscore.llm.time.sleep")
    def test_success_first_try(self, mock_sleep: MagicMock):
        client = self._make_client([self._make_response("hello")])

        assert call_gemini(client, "prompt") == "hello"
        mock_sleep.assert_not_called()

    @patch("cvscore.llm.time.sleep")
    def test_none_text_becomes_empty_string(self, mock_sleep: MagicMock):
        client = self._make_client([self._make_response(None)])
        assert call_gemini(client, "prompt") == ""

    @patch("cvscore.llm.time.sleep")
    def test_retries_on_server_error(self, mock_sleep: MagicMock):
        client = self._make_client([ServerError(503, {"error": "Unavailable"}), self._make_response("recovered")])

        assert call_gemini(client, "prompt") == "recovered"
        assert mock_sleep.call_count == 1

    @patch("cvscore.llm.time.sleep")
    def test_retries_on_429_client_error(self, mock_sleep: MagicMock):
        client = self._make_client([ClientError(429, {"error": "RESOURCE_EXHAUSTED"}), self._make_response("ok")])

        assert call_gemini(client, "prompt") == "ok"
        assert mock_sleep.call_count == 1

    @patch("cvscore.llm.time.sleep")
    def test_raises_immediately_on_non_429_client_error(self, mock_sleep: MagicMock):
        client = self._make_client([ClientError(400, {"error": "Bad Request"})])

        with pytest.raises(ClientError):
            call_gemini(client, "prompt")

        mock_sleep.assert_not_called()

    @patch("cvscore.llm.time.sleep")
    def test_gives_up_after_max_retries(self, mock_sleep: MagicMock):
        client = self._make_client([ServerError(503, {"error": "Unavailable"})] * 3)

        with pytest.raises(ServerError):
            call_gemini(client, "prompt", max_retries=3)

        assert client.models.generate_content.call_count == 3
        assert mock_sleep.call_count == 2

    @patch("cvscore.llm.time.sleep")
    def test_single_attempt_does_not_sleep(self, mock_sleep: MagicMock):
        client = self._make_client([ServerError(503, {"error": "Unavailable"})])

        with pytest.raises(ServerError):
            call_gemini(client, "prompt", max_retries=1)

        mock_sleep.assert_not_called()

    @patch("cvscore.llm.time.sleep")
    def test_json_output_sets_mime_type(self, mock_sleep: MagicMock):
        client = self._make_client([self._make_response("{}")])

        call_gemini(client, "prompt", json_output=True)

        config = client.models.generate_content.call_args.kwargs["config"]
        assert config.response_mime_type == "application/json"


class TestCreateClient:
    def test_missing_key_raises(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)

        with pytest.raises(ValueError, match="GOOGLE_API_KEY"):
            create_client()

    def test_gemini_key_fallback(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setenv("GEMINI_API_KEY", "secret")
        assert api_key() == "secret"

    @patch("cvscore.llm.genai.Client")
    def test_creates_client_with_key(self, mock_client: MagicMock, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "abc")

        create_client()

        mock_client.assert_called_once_with(api_key="abc")
