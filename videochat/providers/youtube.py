import re
from typing import List, Optional, Sequence
from youtube_transcript_api import (
    YouTubeTranscriptApi,
    TranscriptsDisabled,
    NoTranscriptFound,
    CouldNotRetrieveTranscript,
)
from videochat.core.providers import CaptionProvider
from videochat.errors import CaptionsUnavailable
from videochat.models.transcript import Segment
from videochat.utils.logger import logger

# watch?v=, embed/, v/, e/, youtu.be/ and any other /<x>/<y>/ shape.
VIDEO_ID_RE = re.compile(
    r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)([^\"&?/\s]{11})"
)


def extract_video_id(url: str) -> Optional[str]:
    m = VIDEO_ID_RE.search(url or "")
    return m.group(1) if m else None


def _snippet_fields(item):
    if isinstance(item, dict):
        return item.get("text"), item.get("start"), item.get("duration")
    return getattr(item, "text", None), getattr(item, "start", None), getattr(item, "duration", None)


class YouTubeCaptionProvider(CaptionProvider):
    def __init__(self, languages: Sequence[str] = ("en",), api: Optional[YouTubeTranscriptApi] = None):
        self.languages = list(languages)
        self.api = api

    def _fetch_raw(self, video_id: str):
        # youtube-transcript-api >= 1.0 is instance based; older releases expose a classmethod.
        api = self.api or YouTubeTranscriptApi()
        if hasattr(api, "fetch"):
            return api.fetch(video_id, languages=self.languages)
        return YouTubeTranscriptApi.get_transcript(video_id, languages=self.languages)

    def fetch_captions(self, video_id: str) -> List[Segment]:
        logger.info(f"Fetching captions for {video_id} via youtube-transcript-api...")
        try:
            data = self._fetch_raw(video_id)
        except TranscriptsDisabled as e:
            raise CaptionsUnavailable(f"Captions are disabled for this video ({video_id})", disabled=True) from e
        except NoTranscriptFound as e:
            raise CaptionsUnavailable(f"No captions found in {', '.join(self.languages)} for {video_id}") from e
        except CouldNotRetrieveTranscript as e:
            raise CaptionsUnavailable(f"Could not retrieve captions for {video_id}: {e}") from e
        except Exception as e:
            logger.error(f"Unexpected error in youtube-transcript-api: {e}")
            raise CaptionsUnavailable(f"Caption provider error for {video_id}: {e}") from e

        segments = []
        for item in data:
            text, start, duration = _snippet_fields(item)
            if text is None or start is None or duration is None:
                continue
            segments.append(Segment(text=str(text), start=float(start), duration=float(duration)))
        logger.info(f"Fetched {len(segments)} caption segments.")
        return segments
