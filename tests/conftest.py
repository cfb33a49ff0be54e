"""Shared fakes for the video pipeline; nothing here touches the network."""

import os
from typing import List, Optional

import pytest

from videochat.config import Settings
from videochat.core.providers import AudioExtractor, CaptionProvider, FrameSampler, SpeechToText
from videochat.errors import CaptionsUnavailable
from videochat.models.transcript import Segment


class FakeGenerator:
    """Deterministic stand-in for GenerationClient that replays canned replies."""

    def __init__(self, reply: str = "", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []
        self.frame_calls = []

    def generate(self, prompt: str, system: Optional[str] = None) -> str:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.reply

    def generate_with_frames(self, prompt, frames) -> str:
        self.frame_calls.append((prompt, list(frames)))
        if self.error:
            raise self.error
        return self.reply


class FakeCaptions(CaptionProvider):
    def __init__(self, segments=None, error: Optional[CaptionsUnavailable] = None):
        self.segments = segments or []
        self.error = error
        self.calls = []

    def fetch_captions(self, video_id: str) -> List[Segment]:
        self.calls.append(video_id)
        if self.error:
            raise self.error
        return list(self.segments)


class FakeAudio(AudioExtractor):
    """Writes a real file so cleanup can be checked on disk."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.paths = []

    def _write(self, work_dir, key, suffix="mp3"):
        os.makedirs(work_dir, exist_ok=True)
        path = os.path.join(work_dir, f"{key}.{suffix}")
        with open(path, "wb") as f:
            f.write(b"ID3 fake audio")
        self.paths.append(path)
        if self.error:
            raise self.error
        return path

    def extract_from_url(self, url, work_dir, key):
        return self._write(work_dir, key)

    def extract_from_payload(self, payload, mime_type, work_dir, key):
        self._write(work_dir, key, suffix="source.mp4")
        return self._write(work_dir, key)


class FakeSTT(SpeechToText):
    def __init__(self, text: str = "spoken words", error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.seen = []

    def transcribe(self, audio_path, language=None):
        self.seen.append((audio_path, os.path.exists(audio_path)))
        if self.error:
            raise self.error
        return self.text


class FakeFrames(FrameSampler):
    def __init__(self, frames=None, error: Optional[Exception] = None):
        self.frames = frames if frames is not None else [(0.0, b"jpg0"), (10.0, b"jpg1")]
        self.error = error
        self.calls = []

    def sample(self, payload, mime_type, key):
        self.calls.append((payload, mime_type, key))
        if self.error:
            raise self.error
        return list(self.frames)


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        LLM_API_KEY="test-key-not-real",
        CACHE_DIR=str(tmp_path / "cache"),
        OUTPUT_DIR=str(tmp_path / "outputs"),
        MAX_CONTEXT_CHARS=1000,
        MAX_TIMING_LINES=3,
    )


@pytest.fixture
def rick_segments():
    return [
        Segment(text="Never gonna give you up", start=0.0, duration=2.5),
        Segment(text="never gonna let you down", start=2.5, duration=2.0),
        Segment(text="never gonna run around", start=4.5, duration=2.2),
    ]
