from typing import Optional
from videochat.models.analysis import AnalysisResult, ChatContext
from videochat.models.video import VideoReference

class ContextAssembler:
    def assemble(self, analysis: AnalysisResult, reference: Optional[VideoReference] = None) -> ChatContext:
        return ChatContext(
            summary=analysis.summary,
            sections=[s.model_copy() for s in analysis.sections],
            transcript=analysis.transcript,
            video_url=reference.url if reference is not None and not reference.is_upload else None
        )
