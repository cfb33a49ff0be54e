"""Tests for the OpenAI-backed generation and speech-to-text wrappers."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from videochat.errors import GenerationUnavailable
from videochat.providers.openai_client import (
    GenerationClient,
    OpenAISpeechToText,
    build_openai_client,
)


def completion(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def connection_error():
    return openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))


class TestGenerationClient:
    def test_generate_uses_text_model(self, test_settings):
        client = MagicMock()
        client.chat.completions.create.return_value = completion("hello")

        text = GenerationClient(client, test_settings).generate("prompt")

        assert text == "hello"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == test_settings.LLM_MODEL
        assert kwargs["messages"][-1] == {"role": "user", "content": "prompt"}

    def test_frames_use_multimodal_model(self, test_settings):
        client = MagicMock()
        client.chat.completions.create.return_value = completion("{}")

        GenerationClient(client, test_settings).generate_with_frames("describe", [(0.0, b"abc"), (10.0, b"def")])

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == test_settings.LLM_VIDEO_MODEL
        parts = kwargs["messages"][0]["content"]
        assert parts[0] == {"type": "text", "text": "describe"}
        assert parts[1] == {"type": "text", "text": "Frame at 0s"}
        assert parts[2] == {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,YWJj", "detail": "low"}}
        assert parts[3] == {"type": "text", "text": "Frame at 10s"}
        assert [p["type"] for p in parts] == ["text", "text", "image_url", "text", "image_url"]

    def test_none_content_becomes_empty_string(self, test_settings):
        client = MagicMock()
        client.chat.completions.create.return_value = completion(None)

        assert GenerationClient(client, test_settings).generate("prompt") == ""

    def test_transport_error_is_generation_unavailable(self, test_settings):
        client = MagicMock()
        client.chat.completions.create.side_effect = connection_error()

        with pytest.raises(GenerationUnavailable) as excinfo:
            GenerationClient(client, test_settings).generate("prompt")
        assert excinfo.value.retryable is True
        assert client.chat.completions.create.call_count == 1

    @patch("tenacity.nap.time.sleep", return_value=None)
    def test_retries_when_configured(self, _sleep, test_settings):
        test_settings.MAX_RETRIES = 3
        client = MagicMock()
        client.chat.completions.create.side_effect = [connection_error(), completion("second time")]

        assert GenerationClient(client, test_settings).generate("prompt") == "second time"
        assert client.chat.completions.create.call_count == 2


class TestSpeechToText:
    def test_transcribe(self, tmp_path, test_settings):
        audio = tmp_path / "a.mp3"
        audio.write_bytes(b"ID3")
        client = MagicMock()
        client.audio.transcriptions.create.return_value = SimpleNamespace(text="  hi there ")

        text = OpenAISpeechToText(client, test_settings).transcribe(str(audio))

        assert text == "hi there"
        assert client.audio.transcriptions.create.call_args.kwargs["model"] == test_settings.STT_MODEL

    def test_auth_error(self, tmp_path, test_settings):
        audio = tmp_path / "a.mp3"
        audio.write_bytes(b"ID3")
        client = MagicMock()
        response = httpx.Response(401, request=httpx.Request("POST", "https://api.openai.com/v1/audio/transcriptions"))
        client.audio.transcriptions.create.side_effect = openai.AuthenticationError("bad key", response=response, body=None)

        with pytest.raises(GenerationUnavailable):
            OpenAISpeechToText(client, test_settings).transcribe(str(audio))


class TestBuildClient:
    def test_missing_key(self, test_settings):
        test_settings.LLM_API_KEY = None
        with pytest.raises(GenerationUnavailable):
            build_openai_client(test_settings)

    def test_builds_client(self, test_settings):
        client = build_openai_client(test_settings)
        assert str(client.base_url).startswith("https://api.openai.com/v1")
