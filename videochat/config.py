from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    # LLM Configuration
    LLM_API_KEY: Optional[str] = None
    LLM_BASE_URL: str = "https://api.openai.com/v1"
    LLM_MODEL: str = "gpt-4o-mini"
    LLM_VIDEO_MODEL: str = "gpt-4o"  # used when video frames are sent
    LLM_TEMPERATURE: float = 0.7
    LLM_TIMEOUT: float = 120.0
    STT_MODEL: str = "whisper-1"

    # Uploaded videos are sent to the multimodal model as sampled frames
    FRAME_INTERVAL: float = 10.0
    MAX_FRAMES: int = 20

    # Transcript Settings
    TRANSCRIPT_LANGS: List[str] = ["en"]

    # Prompt limits
    MAX_CONTEXT_CHARS: int = 60000
    MAX_TIMING_LINES: int = 400

    # System Settings
    LOG_LEVEL: str = "INFO"
    MAX_RETRIES: int = 1

    # Paths
    OUTPUT_DIR: str = "outputs"
    CACHE_DIR: str = ".cache"
    COOKIES_PATH: Optional[str] = None

    # HTTP server
    HOST: str = "127.0.0.1"
    PORT: int = 3001
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
