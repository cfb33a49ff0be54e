"""Error taxonomy for the video pipeline.

Only malformed input and transport failures become errors. Malformed oracle
output is absorbed by the services that parse it.
"""


class VideoChatError(Exception):
    """Base class; ``message`` is always safe to show to a user."""

    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidReference(VideoChatError):
    """The video URL carries no recognizable video id."""


class NoTranscriptAvailable(VideoChatError):
    """Captions and speech-to-text both failed."""


class GenerationUnavailable(VideoChatError):
    """The generation or speech-to-text service could not be reached."""

    retryable = True


class EmptyQuestion(VideoChatError):
    pass


class EmptySearchQuery(VideoChatError):
    pass


class CaptionsUnavailable(Exception):
    """Raised by caption providers; handled inside the transcript acquirer."""

    def __init__(self, message: str, disabled: bool = False):
        super().__init__(message)
        self.disabled = disabled
