import os
from dataclasses import dataclass
from typing import Any, List, Optional
from videochat.config import Settings
from videochat.models.analysis import AnalysisResult, ChatAnswer, ChatContext
from videochat.models.transcript import TranscriptResult
from videochat.models.video import VideoReference
from videochat.providers.audio import YtDlpAudioExtractor
from videochat.providers.frames import FfmpegFrameSampler
from videochat.providers.openai_client import GenerationClient, OpenAISpeechToText, build_openai_client
from videochat.providers.youtube import YouTubeCaptionProvider
from videochat.services.analyzer import AnalysisExtractor
from videochat.services.chat import ChatResponder
from videochat.services.context import ContextAssembler
from videochat.services.search import VisualSearchEngine
from videochat.services.transcript import TranscriptAcquirer
from videochat.utils.logger import logger


@dataclass
class Components:
    acquirer: TranscriptAcquirer
    extractor: AnalysisExtractor
    assembler: ContextAssembler
    responder: ChatResponder
    search_engine: VisualSearchEngine


def build_components(settings: Settings) -> Components:
    """Wire every service around one explicitly constructed OpenAI client."""
    client = build_openai_client(settings)
    generator = GenerationClient(client, settings)
    acquirer = TranscriptAcquirer(
        captions=YouTubeCaptionProvider(languages=settings.TRANSCRIPT_LANGS),
        audio=YtDlpAudioExtractor(cookies_path=settings.COOKIES_PATH),
        stt=OpenAISpeechToText(client, settings),
        work_dir=os.path.join(settings.CACHE_DIR, "audio")
    )
    return Components(
        acquirer=acquirer,
        extractor=AnalysisExtractor(generator, settings, frames=FfmpegFrameSampler(
            os.path.join(settings.CACHE_DIR, "frames"), settings.FRAME_INTERVAL, settings.MAX_FRAMES)),
        assembler=ContextAssembler(),
        responder=ChatResponder(generator, settings),
        search_engine=VisualSearchEngine(generator, settings)
    )


class VideoSession:
    """One analyzed video: transcript, analysis and the context chat/search run against."""

    def __init__(self, components: Components, reference: VideoReference):
        self.components = components
        self.reference = reference
        self.transcript: Optional[TranscriptResult] = None
        self.analysis: Optional[AnalysisResult] = None
        self.context: Optional[ChatContext] = None

    def start(self, prompt: Optional[str] = None) -> AnalysisResult:
        c = self.components
        if self.reference.is_upload:
            # Uploads go straight to the multimodal model.
            self.analysis = c.extractor.extract(None, video=self.reference, prompt=prompt)
        else:
            self.transcript = c.acquirer.acquire(self.reference)
            logger.info(f"Transcript ready ({self.transcript.source}, {len(self.transcript.segments)} segments)")
            self.analysis = c.extractor.extract(self.transcript.text, self.transcript.segments, prompt=prompt)
        self.context = c.assembler.assemble(self.analysis, self.reference)
        return self.analysis

    def _require_context(self) -> ChatContext:
        if self.context is None:
            raise RuntimeError("VideoSession.start() must be called first")
        return self.context

    def ask(self, question: str) -> ChatAnswer:
        return self.components.responder.respond(question, self._require_context())

    def search(self, query: str) -> List[Any]:
        return self.components.search_engine.search(query, self._require_context())
