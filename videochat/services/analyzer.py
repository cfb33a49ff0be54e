from typing import List, Optional
from videochat.config import Settings
from videochat.core.providers import FrameSampler
from videochat.models.analysis import (
    AnalysisResult,
    FALLBACK_SECTION,
    UPLOAD_TRANSCRIPT_PLACEHOLDER,
    coerce_sections,
)
from videochat.models.transcript import Segment
from videochat.models.video import VideoReference
from videochat.providers.openai_client import GenerationClient
from videochat.services.transcript import payload_key
from videochat.utils.logger import logger
from videochat.utils.parsing import Parsed, parse_structured
from videochat.utils.templates import prompt_env

DEFAULT_PROMPT = """Analyze this video transcript and provide:
1. A comprehensive summary
2. Key sections with timestamps (estimate based on content flow)
3. Main topics covered"""

DEFAULT_VIDEO_PROMPT = """Analyze this video and provide:
1. A comprehensive summary of the content
2. Key sections/scenes with estimated timestamps
3. Main topics or events shown"""

DEFAULT_SUMMARY = "Video analysis completed"


def _clock(seconds: float) -> str:
    m, s = divmod(int(seconds), 60)
    h, m = divmod(m, 60)
    if h > 0:
        return f"{h:02d}:{m:02d}:{s:02d}"
    return f"{m:02d}:{s:02d}"

class AnalysisExtractor:
    """Turns a transcript (or an uploaded video) into a summary plus timed sections.

    The oracle is asked for JSON but nothing guarantees it; ``interpret`` never
    raises. A reply that is not a JSON object, or has no ``sections`` list,
    gets the single "Full Video" section. A sections list that is present is
    kept as given, even when empty.
    """

    def __init__(self, generator: GenerationClient, settings: Settings, frames: Optional[FrameSampler] = None):
        self.generator = generator
        self.frames = frames
        self.max_timing_lines = settings.MAX_TIMING_LINES
        self.frame_interval = settings.FRAME_INTERVAL
        self.env = prompt_env()
        self.text_template = self.env.get_template("analyze.jinja2")
        self.video_template = self.env.get_template("analyze_video.jinja2")

    def build_prompt(self, transcript: str, segments: Optional[List[Segment]] = None, prompt: Optional[str] = None) -> str:
        segments = segments or []
        timings = [f"[{_clock(seg.start)} = {seg.start:.0f}s] {seg.text}" for seg in segments[:self.max_timing_lines]]
        return self.text_template.render(
            instructions=(prompt or DEFAULT_PROMPT).strip(),
            timings=timings,
            truncated=max(0, len(segments) - self.max_timing_lines),
            transcript=transcript
        )

    def generate_raw(self, transcript: Optional[str], segments: Optional[List[Segment]] = None,
                     video: Optional[VideoReference] = None, prompt: Optional[str] = None) -> str:
        if transcript:
            return self.generator.generate(self.build_prompt(transcript, segments, prompt))
        if video is not None and video.is_upload:
            if self.frames is None:
                raise ValueError("Uploaded videos need a frame sampler")
            frames = self.frames.sample(video.payload, video.mime_type, payload_key(video.payload))
            video_prompt = self.video_template.render(
                instructions=(prompt or DEFAULT_VIDEO_PROMPT).strip(),
                frame_count=len(frames),
                interval=f"{self.frame_interval:g}"
            )
            return self.generator.generate_with_frames(video_prompt, frames)
        raise ValueError("Either transcript or video data is required")

    def interpret(self, raw: str, transcript: str) -> AnalysisResult:
        parsed = parse_structured(raw)
        if isinstance(parsed, Parsed) and isinstance(parsed.value, dict):
            data = parsed.value
            summary = data.get("summary")
            items = data.get("sections")
            if isinstance(items, list):
                sections = coerce_sections(items)
            else:
                sections = [FALLBACK_SECTION.model_copy()]
            return AnalysisResult(
                summary=str(summary) if summary is not None else (raw.strip() or DEFAULT_SUMMARY),
                sections=sections,
                transcript=transcript
            )

        logger.warning("Analysis reply was not structured JSON; using the raw text as summary.")
        return AnalysisResult(
            summary=raw.strip() or DEFAULT_SUMMARY,
            sections=[FALLBACK_SECTION.model_copy()],
            transcript=transcript
        )

    def extract(self, transcript: Optional[str], segments: Optional[List[Segment]] = None,
                video: Optional[VideoReference] = None, prompt: Optional[str] = None) -> AnalysisResult:
        logger.info("Requesting structured analysis...")
        raw = self.generate_raw(transcript, segments, video, prompt)
        if not transcript:
            transcript = UPLOAD_TRANSCRIPT_PLACEHOLDER if video is not None else ""
        return self.interpret(raw, transcript)
