import base64
from typing import List, Optional, Tuple
import openai
from openai import OpenAI
from videochat.config import Settings
from videochat.core.providers import SpeechToText
from videochat.errors import GenerationUnavailable
from videochat.utils.logger import logger
from videochat.utils.retry import api_retry

SYSTEM_PROMPT = "You analyze videos from their transcripts. Follow the requested output format exactly."


def build_openai_client(settings: Settings) -> OpenAI:
    if not settings.LLM_API_KEY:
        raise GenerationUnavailable("LLM_API_KEY is not configured")
    return OpenAI(
        api_key=settings.LLM_API_KEY,
        base_url=settings.LLM_BASE_URL,
        timeout=settings.LLM_TIMEOUT,
        max_retries=0
    )


class GenerationClient:
    """Text and multimodal generation over an OpenAI-compatible chat endpoint.

    Only transport and auth problems raise (as GenerationUnavailable); whatever
    text comes back is returned untouched for the caller to interpret.
    """

    def __init__(self, client: OpenAI, settings: Settings):
        self.client = client
        self.model = settings.LLM_MODEL
        self.video_model = settings.LLM_VIDEO_MODEL
        self.temperature = settings.LLM_TEMPERATURE
        self._retry = api_retry(settings.MAX_RETRIES)

    def _complete(self, model: str, messages: list) -> str:
        def call():
            return self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=self.temperature
            )
        try:
            response = self._retry(call)()
        except openai.OpenAIError as e:
            logger.error(f"Generation request to {model} failed: {e}")
            raise GenerationUnavailable(f"Generation service unavailable: {e}") from e
        return response.choices[0].message.content or ""

    def generate(self, prompt: str, system: Optional[str] = SYSTEM_PROMPT) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return self._complete(self.model, messages)

    def generate_with_frames(self, prompt: str, frames: List[Tuple[float, bytes]]) -> str:
        user_content = [{"type": "text", "text": prompt}]
        for timestamp, jpeg in frames:
            b64 = base64.b64encode(jpeg).decode("utf-8")
            user_content.append({"type": "text", "text": f"Frame at {timestamp:g}s"})
            user_content.append({"type": "image_url", "image_url": {"url": f"data:image/jpeg;base64,{b64}", "detail": "low"}})
        messages = [{"role": "user", "content": user_content}]
        logger.info(f"Sending {len(frames)} frames to {self.video_model}...")
        return self._complete(self.video_model, messages)


class OpenAISpeechToText(SpeechToText):
    def __init__(self, client: OpenAI, settings: Settings):
        self.client = client
        self.model = settings.STT_MODEL
        self._retry = api_retry(settings.MAX_RETRIES)

    def transcribe(self, audio_path: str, language: Optional[str] = None) -> str:
        logger.info(f"Transcribing audio with {self.model} (this may take a while)...")
        extra = {"language": language} if language else {}

        def call():
            with open(audio_path, "rb") as audio_file:
                return self.client.audio.transcriptions.create(
                    model=self.model,
                    file=audio_file,
                    **extra
                )
        try:
            result = self._retry(call)()
        except openai.OpenAIError as e:
            raise GenerationUnavailable(f"Speech-to-text service unavailable: {e}") from e
        text = result if isinstance(result, str) else getattr(result, "text", "")
        return (text or "").strip()
