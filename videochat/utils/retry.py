from typing import Optional
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import openai
from videochat.config import settings

def api_retry(max_attempts: Optional[int] = None):
    """Retry transient oracle failures; a single attempt unless MAX_RETRIES > 1."""
    return retry(
        stop=stop_after_attempt(max_attempts or settings.MAX_RETRIES),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((
            openai.APIConnectionError,
            openai.RateLimitError,
            openai.APITimeoutError,
        )),
        reraise=True
    )
