from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict

class Segment(BaseModel):
    text: str
    start: float
    duration: float

class TranscriptResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    segments: List[Segment] = []
    source: Literal["captions", "speech_to_text"] = "captions"
    video_id: Optional[str] = None
