import base64
import binascii
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from videochat.config import Settings, settings as default_settings
from videochat.errors import (
    EmptyQuestion,
    EmptySearchQuery,
    GenerationUnavailable,
    InvalidReference,
    NoTranscriptAvailable,
    VideoChatError,
)
from videochat.models.analysis import ChatContext, coerce_sections
from videochat.models.video import VideoReference
from videochat.services.session import Components, build_components
from videochat.utils.logger import logger

ERROR_STATUS = {
    InvalidReference: status.HTTP_400_BAD_REQUEST,
    EmptyQuestion: status.HTTP_400_BAD_REQUEST,
    EmptySearchQuery: status.HTTP_400_BAD_REQUEST,
    NoTranscriptAvailable: status.HTTP_404_NOT_FOUND,
    GenerationUnavailable: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# -------------------------------------------------------------------
# Request schemas (camelCase on the wire)
# -------------------------------------------------------------------
class TranscriptRequest(BaseModel):
    video_url: Optional[str] = Field(None, alias="videoUrl")

class InlineData(BaseModel):
    mime_type: str = Field(alias="mimeType")
    data: str

class VideoData(BaseModel):
    inline_data: InlineData = Field(alias="inlineData")

class AnalyzeRequest(BaseModel):
    transcript: Optional[str] = None
    prompt: Optional[str] = None
    video_data: Optional[VideoData] = Field(None, alias="videoData")

class ChatRequest(BaseModel):
    question: Optional[str] = None
    context: Dict[str, Any] = {}

class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: Optional[str] = None
    video_context: Dict[str, Any] = Field(default_factory=dict, alias="videoContext")


def error_response(code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=code, content={"error": message})


def context_from(data: Dict[str, Any]) -> ChatContext:
    """Build a chat context from client JSON; unreadable sections are dropped."""
    video_url = data.get("videoUrl") or data.get("video_url")
    return ChatContext(
        summary=str(data.get("summary") or ""),
        sections=coerce_sections(data.get("sections")),
        transcript=str(data.get("transcript") or ""),
        video_url=str(video_url) if video_url else None
    )


def validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    msg = first.get("msg", "invalid value")
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if location:
        return f"Invalid request: {location}: {msg}"
    return f"Invalid request: {msg}"


def create_app(components: Optional[Components] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    app = FastAPI(
        title="VideoChat AI",
        description="Transcripts, structured summaries, chat and visual search for videos.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.components = components

    def get_components() -> Components:
        if app.state.components is None:
            app.state.components = build_components(settings)
        return app.state.components

    @app.exception_handler(VideoChatError)
    async def handle_video_chat_error(request: Request, exc: VideoChatError):
        code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        logger.error(f"{request.url.path} failed: {exc.message}")
        return error_response(code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        message = validation_message(exc)
        logger.warning(f"{request.url.path} rejected: {message}")
        return error_response(status.HTTP_400_BAD_REQUEST, message)

    @app.get("/api/health")
    def health():
        return {"status": "Server is running", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.post("/api/transcript")
    def transcript(body: TranscriptRequest):
        if not body.video_url:
            return error_response(status.HTTP_400_BAD_REQUEST, "Video URL is required")
        logger.info(f"Fetching transcript for: {body.video_url}")
        result = get_components().acquirer.acquire(VideoReference.from_url(body.video_url))
        return {
            "transcript": result.text,
            "segments": [seg.model_dump() for seg in result.segments],
        }

    @app.post("/api/analyze")
    def analyze(body: AnalyzeRequest):
        if not body.transcript and body.video_data is None:
            return error_response(status.HTTP_400_BAD_REQUEST, "Either transcript or video data is required")
        video = None
        if body.video_data is not None:
            inline = body.video_data.inline_data
            try:
                payload = base64.b64decode(inline.data, validate=True)
            except (binascii.Error, ValueError):
                return error_response(status.HTTP_400_BAD_REQUEST, "videoData.inlineData.data must be base64")
            video = VideoReference.from_upload(payload, inline.mime_type)
        text = get_components().extractor.generate_raw(body.transcript, video=video, prompt=body.prompt)
        return {"analysis": text}

    @app.post("/api/chat")
    def chat(body: ChatRequest):
        context = context_from(body.context)
        answer = get_components().responder.respond(body.question or "", context)
        return answer.model_dump(exclude_none=True)

    @app.post("/api/search")
    def search(body: SearchRequest):
        context = context_from(body.video_context)
        results = get_components().search_engine.search(body.query or "", context)
        return {"results": results}

    return app


def serve(settings: Settings = default_settings):
    import uvicorn

    logger.info(f"VideoChat AI backend running on http://{settings.HOST}:{settings.PORT}")
    uvicorn.run(create_app(settings=settings), host=settings.HOST, port=settings.PORT)
