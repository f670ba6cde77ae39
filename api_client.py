"""
API Client module for Web Novel Chapter Translator

Handles interactions with Claude API, including message formatting,
mapping SDK failures to structured generation errors, and response processing
"""
import logging
from typing import Any, Dict, List, Optional
import anthropic
from anthropic import AsyncAnthropic
from config import API_CONFIG
from errors import GenerationError, GenerationErrorKind
from utils import truncate_str

logger = logging.getLogger('novel_translator')

OVERLOADED_STATUS_CODES = {503, 529}
MALFORMED_STATUS_CODES = {400, 404, 413, 422}

def classify_api_error(error: Exception) -> GenerationError:
    """Maps an anthropic SDK exception to a GenerationError with a closed kind"""
    if isinstance(error, anthropic.APIConnectionError):
        # Includes APITimeoutError
        return GenerationError(GenerationErrorKind.TRANSPORT, f"Network error: {error}")

    if isinstance(error, anthropic.APIStatusError):
        status = error.status_code
        if isinstance(error, anthropic.AuthenticationError):
            kind = GenerationErrorKind.INVALID_CREDENTIALS
        elif isinstance(error, anthropic.PermissionDeniedError):
            kind = GenerationErrorKind.UNSUPPORTED_REGION
        elif isinstance(error, anthropic.RateLimitError):
            kind = GenerationErrorKind.RATE_LIMITED
        elif status in OVERLOADED_STATUS_CODES:
            kind = GenerationErrorKind.OVERLOADED
        elif status >= 500:
            kind = GenerationErrorKind.SERVER_ERROR
        elif status in MALFORMED_STATUS_CODES:
            kind = GenerationErrorKind.MALFORMED_REQUEST
        else:
            kind = GenerationErrorKind.UNKNOWN
        return GenerationError(kind, f"API error ({status}): {truncate_str(str(error), 100)}",
                               status_code=status)

    return GenerationError(GenerationErrorKind.UNKNOWN, f"API error: {error}")

def message_params(messages: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Keyword arguments for messages.create"""
    return {
        "model": API_CONFIG['model'],
        "max_tokens": API_CONFIG['max_tokens'],
        "temperature": API_CONFIG['temperature'],
        "messages": messages,
    }

class TranslationAPIClient:
    def __init__(self, api_key: Optional[str] = None, client: Optional[AsyncAnthropic] = None):
        """
        Initialize API client with provided key, or an already configured SDK client
        SDK retries are disabled; TranslationClient owns the retry policy
        """
        self.client = client or AsyncAnthropic(api_key=api_key, max_retries=0)

    async def generate(self, prompt: str) -> str:
        """
        Sends a single-turn prompt and returns the answer text
        Raises GenerationError for every failure, including refusals and truncation
        """
        messages = [
            {"role": "user",
             "content": [{"type": "text", "text": prompt}]}
        ]
        if logger.getEffectiveLevel() <= logging.INFO:
            logger.info(f"Prompt size: {len(prompt)} "
                        f"Temp={API_CONFIG['temperature']} Max_tokens={API_CONFIG['max_tokens']}")

        try:
            message = await self.client.messages.create(**message_params(messages))
        except anthropic.APIError as e:
            error = classify_api_error(e)
            logger.error(f"API Error [{error.kind.value}]: {error}")
            raise error from e

        return self.process_response(message)

    def process_response(self, message: Any) -> str:
        """Validates stop reason and joins the text blocks of an API response"""
        if message.stop_reason == "refusal":
            raise GenerationError(GenerationErrorKind.CONTENT_BLOCKED)
        if message.stop_reason == "max_tokens":
            raise GenerationError(GenerationErrorKind.OUTPUT_TRUNCATED,
                                  f"Response stopped early after {API_CONFIG['max_tokens']} tokens. "
                                  "Try shorter text.")

        answer = "".join(block.text for block in message.content or []
                         if getattr(block, "type", None) == "text")
        if not answer.strip():
            raise GenerationError(GenerationErrorKind.EMPTY_RESPONSE)
        return answer

    async def check_connection(self) -> Dict[str, Any]:
        """
        Lists the models visible to the API key
        Returns whether the configured model is among them
        """
        try:
            models: List[str] = [model.id async for model in self.client.models.list()]
        except anthropic.APIError as e:
            raise classify_api_error(e) from e

        # Aliases such as 'claude-sonnet-4-5' prefix the dated model ids
        available = any(m.startswith(API_CONFIG['model']) for m in models)
        logger.info(f"Connection OK: {len(models)} models, "
                    f"{API_CONFIG['model']} {'available' if available else 'NOT available'}")
        return {'model': API_CONFIG['model'], 'available': available, 'models': models}
