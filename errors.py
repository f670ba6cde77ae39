"""
Error types for Web Novel Chapter Translator

Every failure carries a machine-checkable kind so callers can decide
between retrying, suggesting another input mode, or giving up
"""

from enum import Enum
from typing import Optional


class NovelTranslatorError(Exception):
    """Base class for all errors raised by the translator"""


class InputError(NovelTranslatorError):
    """Malformed URL, empty text, unknown rule set or similar caller mistakes"""


class InsufficientContentError(NovelTranslatorError):
    """Extraction produced too little text to be worth translating"""

    def __init__(self, message: str, word_count: int = 0):
        super().__init__(message)
        self.word_count = word_count


class FetchErrorKind(Enum):
    INVALID_URL = "invalid_url"
    TRANSPORT = "transport"
    BAD_STATUS = "bad_status"
    DECODE_FAILURE = "decode_failure"


class FetchError(NovelTranslatorError):
    """Raised by the page fetcher"""

    def __init__(self, kind: FetchErrorKind, message: str,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class GenerationErrorKind(Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    CONTENT_BLOCKED = "content_blocked"
    UNSUPPORTED_REGION = "unsupported_region"
    MALFORMED_REQUEST = "malformed_request"
    OUTPUT_TRUNCATED = "output_truncated"
    OVERLOADED = "overloaded"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    TRANSPORT = "transport"
    EMPTY_RESPONSE = "empty_response"
    UNKNOWN = "unknown"


# Exhaustive over GenerationErrorKind; unknown and empty answers favour availability
RETRYABLE_KINDS = {
    GenerationErrorKind.INVALID_CREDENTIALS: False,
    GenerationErrorKind.CONTENT_BLOCKED: False,
    GenerationErrorKind.UNSUPPORTED_REGION: False,
    GenerationErrorKind.MALFORMED_REQUEST: False,
    GenerationErrorKind.OUTPUT_TRUNCATED: False,
    GenerationErrorKind.OVERLOADED: True,
    GenerationErrorKind.RATE_LIMITED: True,
    GenerationErrorKind.SERVER_ERROR: True,
    GenerationErrorKind.TRANSPORT: True,
    GenerationErrorKind.EMPTY_RESPONSE: True,
    GenerationErrorKind.UNKNOWN: True,
}

ERROR_DESCRIPTIONS = {
    GenerationErrorKind.INVALID_CREDENTIALS: "Invalid API key. Check ANTHROPIC_API_KEY or --api-key",
    GenerationErrorKind.CONTENT_BLOCKED: "Content was blocked by safety filters. Try different text",
    GenerationErrorKind.UNSUPPORTED_REGION: "The API is not available in your location",
    GenerationErrorKind.MALFORMED_REQUEST: "The API rejected the request as malformed",
    GenerationErrorKind.OUTPUT_TRUNCATED: "Response stopped early at the output length limit. Try shorter text",
    GenerationErrorKind.OVERLOADED: "The API is overloaded",
    GenerationErrorKind.RATE_LIMITED: "Rate limit reached",
    GenerationErrorKind.SERVER_ERROR: "The API reported an internal server error",
    GenerationErrorKind.TRANSPORT: "Network error while contacting the API",
    GenerationErrorKind.EMPTY_RESPONSE: "No response text received from the API",
    GenerationErrorKind.UNKNOWN: "Unexpected API error",
}


def is_retryable(kind: GenerationErrorKind) -> bool:
    return RETRYABLE_KINDS[kind]


class GenerationError(NovelTranslatorError):
    """Raised by a generate(prompt) collaborator"""

    def __init__(self, kind: GenerationErrorKind, message: str = "",
                 status_code: Optional[int] = None):
        super().__init__(message or ERROR_DESCRIPTIONS[kind])
        self.kind = kind
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return is_retryable(self.kind)


class TranslationErrorKind(Enum):
    TERMINAL = "terminal"
    MAX_RETRIES_EXCEEDED = "max_retries_exceeded"
    DEADLINE_EXCEEDED = "deadline_exceeded"


class TranslationError(NovelTranslatorError):
    """
    Raised by the translation client once a call cannot succeed
    `cause_kind` is the generation error kind that ended the call, if any
    """

    def __init__(self, kind: TranslationErrorKind, message: str, attempts: int = 0,
                 cause_kind: Optional[GenerationErrorKind] = None):
        super().__init__(message)
        self.kind = kind
        self.attempts = attempts
        self.cause_kind = cause_kind
