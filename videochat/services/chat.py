from videochat.config import Settings
from videochat.errors import EmptyQuestion
from videochat.models.analysis import ChatAnswer, ChatContext
from videochat.providers.openai_client import GenerationClient
from videochat.utils.logger import logger
from videochat.utils.parsing import Parsed, parse_structured
from videochat.utils.templates import prompt_env

class ChatResponder:
    """Answers questions about a video from its assembled context.

    Returned timestamps come straight from the oracle and are not checked
    against the sections; treat them as hints.
    """

    def __init__(self, generator: GenerationClient, settings: Settings):
        self.generator = generator
        self.max_context_chars = settings.MAX_CONTEXT_CHARS
        self.template = prompt_env().get_template("chat.jinja2")

    def respond(self, question: str, context: ChatContext) -> ChatAnswer:
        if not question or not question.strip():
            raise EmptyQuestion("Question is required")
        prompt = self.template.render(
            context=context.for_prompt(self.max_context_chars),
            question=question.strip()
        )
        raw = self.generator.generate(prompt)
        return self.interpret(raw)

    @staticmethod
    def interpret(raw: str) -> ChatAnswer:
        parsed = parse_structured(raw)
        if isinstance(parsed, Parsed) and isinstance(parsed.value, dict):
            answer = parsed.value.get("answer")
            if isinstance(answer, str) and answer.strip():
                timestamp = parsed.value.get("timestamp")
                if timestamp is not None and str(timestamp).strip():
                    timestamp = str(timestamp).strip()
                else:
                    timestamp = None
                return ChatAnswer(answer=answer, timestamp=timestamp)
        logger.debug("Chat reply was not structured; returning it verbatim.")
        return ChatAnswer(answer=raw, timestamp=None)
