import json
import math
import re
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

UPLOAD_TRANSCRIPT_PLACEHOLDER = "Video transcript not available for uploaded files"

_CLOCK_RE = re.compile(r"^\s*(?:(\d+):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)\s*$")


def _parse_seconds(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("boolean is not a timestamp")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        m = _CLOCK_RE.match(value)
        if m:
            h, mnt, s = m.groups()
            return int(h or 0) * 3600 + int(mnt) * 60 + float(s)
        return float(value.strip())
    raise ValueError(f"unsupported timestamp: {value!r}")


def to_seconds(value: Any) -> float:
    """Convert an oracle timestamp (number, "75", "1:15", "01:01:15") to seconds."""
    seconds = _parse_seconds(value)
    if not math.isfinite(seconds):
        raise ValueError(f"timestamp must be finite: {value!r}")
    return seconds


class Section(BaseModel):
    timestamp: float = 0.0
    title: str = ""
    description: str = ""

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, v):
        if v is None:
            return 0.0
        # No upper bound: the video duration is not known here.
        return max(0.0, to_seconds(v))

    @field_validator("title", "description", mode="before")
    @classmethod
    def _coerce_text(cls, v):
        return "" if v is None else str(v)


FALLBACK_SECTION = Section(timestamp=0, title="Full Video", description="Complete video content")


def coerce_sections(items: Any) -> List[Section]:
    """Keep the readable sections of an untrusted list, in order; drop the rest."""
    sections = []
    if not isinstance(items, list):
        return sections
    for item in items:
        if isinstance(item, Section):
            sections.append(item)
            continue
        if not isinstance(item, dict):
            continue
        try:
            sections.append(Section.model_validate(item))
        except ValidationError:
            continue
    return sections


class AnalysisResult(BaseModel):
    summary: str
    sections: List[Section]
    transcript: str


class ChatContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: str = ""
    sections: List[Section] = []
    transcript: str = ""
    video_url: Optional[str] = None

    def for_prompt(self, max_chars: int) -> str:
        data = self.model_dump(exclude_none=True)
        if len(self.transcript) > max_chars:
            data["transcript"] = self.transcript[:max_chars] + " ..."
        return json.dumps(data, ensure_ascii=False)


class ChatAnswer(BaseModel):
    answer: str
    timestamp: Optional[str] = None


class SearchResult(BaseModel):
    timestamp: float = Field(allow_inf_nan=False)
    description: str
    confidence: float = Field(ge=0.0, le=1.0)
