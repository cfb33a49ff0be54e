import glob
import hashlib
import os
from typing import Optional
from videochat.core.providers import AudioExtractor, CaptionProvider, SpeechToText
from videochat.errors import CaptionsUnavailable, InvalidReference, NoTranscriptAvailable
from videochat.models.transcript import TranscriptResult
from videochat.models.video import VideoReference
from videochat.providers.youtube import extract_video_id
from videochat.utils.logger import logger


def payload_key(payload: bytes) -> str:
    return "upload_" + hashlib.sha256(payload).hexdigest()[:16]


class TranscriptAcquirer:
    """Captions first, speech-to-text second.

    The fallback writes audio into ``work_dir`` under a per-video key; every
    file with that key is removed before ``acquire`` returns or raises.
    """

    def __init__(self, captions: CaptionProvider, audio: AudioExtractor, stt: SpeechToText,
                 work_dir: str, language: Optional[str] = None):
        self.captions = captions
        self.audio = audio
        self.stt = stt
        self.work_dir = work_dir
        self.language = language

    def acquire(self, reference: VideoReference) -> TranscriptResult:
        if reference.is_upload:
            return self._speech_to_text(reference, payload_key(reference.payload), captions_reason=None)

        video_id = extract_video_id(reference.url)
        if not video_id:
            raise InvalidReference(f"Invalid YouTube URL format: {reference.url}")

        captions_reason = "no captions were returned"
        captions_disabled = False
        try:
            segments = self.captions.fetch_captions(video_id)
            if segments:
                return TranscriptResult(
                    text=" ".join(seg.text for seg in segments),
                    segments=segments,
                    source="captions",
                    video_id=video_id
                )
        except CaptionsUnavailable as e:
            captions_reason = str(e)
            captions_disabled = e.disabled
        logger.warning(f"Captions unavailable ({captions_reason}). Falling back to speech-to-text...")

        prefix = "captions disabled" if captions_disabled else "captions unavailable"
        return self._speech_to_text(reference, video_id, captions_reason=f"{prefix}: {captions_reason}")

    def _speech_to_text(self, reference: VideoReference, key: str, captions_reason: Optional[str]) -> TranscriptResult:
        try:
            if reference.is_upload:
                audio_path = self.audio.extract_from_payload(reference.payload, reference.mime_type, self.work_dir, key)
            else:
                audio_path = self.audio.extract_from_url(reference.url, self.work_dir, key)
            text = (self.stt.transcribe(audio_path, language=self.language) or "").strip()
        except Exception as e:
            raise NoTranscriptAvailable(self._failure_message(captions_reason, str(e))) from e
        finally:
            self._cleanup(key)

        if not text:
            raise NoTranscriptAvailable(self._failure_message(captions_reason, "no speech was recognized"))
        return TranscriptResult(
            text=text,
            segments=[],
            source="speech_to_text",
            video_id=None if reference.is_upload else key
        )

    def _cleanup(self, key: str):
        for path in glob.glob(os.path.join(glob.escape(self.work_dir), f"{glob.escape(key)}.*")):
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Could not remove temporary audio {path}: {e}")

    @staticmethod
    def _failure_message(captions_reason: Optional[str], stt_reason: str) -> str:
        if captions_reason:
            return f"No transcript available: {captions_reason}; speech-to-text also failed ({stt_reason})."
        return f"No transcript available: speech-to-text failed ({stt_reason})."
