from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from videochat.models.transcript import Segment

class CaptionProvider(ABC):
    @abstractmethod
    def fetch_captions(self, video_id: str) -> List[Segment]:
        """Return timed caption segments, or raise CaptionsUnavailable."""
        pass

class AudioExtractor(ABC):
    @abstractmethod
    def extract_from_url(self, url: str, work_dir: str, key: str) -> str:
        """Write an audio file named ``<key>.*`` into work_dir and return its path."""
        pass

    @abstractmethod
    def extract_from_payload(self, payload: bytes, mime_type: str, work_dir: str, key: str) -> str:
        """Same as extract_from_url, for an uploaded video payload."""
        pass

class SpeechToText(ABC):
    @abstractmethod
    def transcribe(self, audio_path: str, language: Optional[str] = None) -> str:
        """Return the transcript text of an audio file."""
        pass

class FrameSampler(ABC):
    @abstractmethod
    def sample(self, payload: bytes, mime_type: str, key: str) -> List[Tuple[float, bytes]]:
        """Return ``(timestamp_seconds, jpeg_bytes)`` pairs taken evenly through the video."""
        pass
