from typing import Any, List
from videochat.config import Settings
from videochat.errors import EmptySearchQuery
from videochat.models.analysis import ChatContext
from videochat.providers.openai_client import GenerationClient
from videochat.utils.logger import logger
from videochat.utils.parsing import Parsed, parse_structured
from videochat.utils.templates import prompt_env

class VisualSearchEngine:
    """Approximate "visual" search delegated to the text oracle.

    No frames are inspected. Any JSON array in the reply is returned as-is;
    everything else means no match and yields an empty list.
    """

    def __init__(self, generator: GenerationClient, settings: Settings):
        self.generator = generator
        self.max_context_chars = settings.MAX_CONTEXT_CHARS
        self.template = prompt_env().get_template("search.jinja2")

    def search(self, query: str, context: ChatContext) -> List[Any]:
        if not query or not query.strip():
            raise EmptySearchQuery("Search query is required")
        prompt = self.template.render(
            query=query.strip(),
            context=context.for_prompt(self.max_context_chars)
        )
        raw = self.generator.generate(prompt)
        parsed = parse_structured(raw)
        if isinstance(parsed, Parsed) and isinstance(parsed.value, list):
            return parsed.value
        logger.debug("Failed to parse search results as a JSON array, returning empty list")
        return []
