from __future__ import annotations

import asyncio
import inspect
from types import SimpleNamespace

import anthropic
import httpx
import pytest

import api_client
from api_client import TranslationAPIClient, classify_api_error, message_params
from errors import GenerationError, GenerationErrorKind, is_retryable

REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def status_error(cls, status):
    response = httpx.Response(status, request=REQUEST)
    return cls(f"status {status}", response=response, body=None)


@pytest.mark.parametrize("error, kind", [
    (status_error(anthropic.AuthenticationError, 401), GenerationErrorKind.INVALID_CREDENTIALS),
    (status_error(anthropic.PermissionDeniedError, 403), GenerationErrorKind.UNSUPPORTED_REGION),
    (status_error(anthropic.BadRequestError, 400), GenerationErrorKind.MALFORMED_REQUEST),
    (status_error(anthropic.NotFoundError, 404), GenerationErrorKind.MALFORMED_REQUEST),
    (status_error(anthropic.RateLimitError, 429), GenerationErrorKind.RATE_LIMITED),
    (status_error(anthropic.InternalServerError, 500), GenerationErrorKind.SERVER_ERROR),
    (status_error(anthropic.APIStatusError, 503), GenerationErrorKind.OVERLOADED),
    (status_error(anthropic.APIStatusError, 529), GenerationErrorKind.OVERLOADED),
    (status_error(anthropic.APIStatusError, 418), GenerationErrorKind.UNKNOWN),
    (anthropic.APITimeoutError(request=REQUEST), GenerationErrorKind.TRANSPORT),
    (anthropic.APIConnectionError(request=REQUEST), GenerationErrorKind.TRANSPORT),
])
def test_classify_api_error(error, kind):
    classified = classify_api_error(error)
    assert classified.kind is kind


def test_classified_status_code_is_kept():
    classified = classify_api_error(status_error(anthropic.RateLimitError, 429))
    assert classified.status_code == 429
    assert classified.retryable


def test_retryable_table_covers_every_kind():
    terminal = {kind for kind in GenerationErrorKind if not is_retryable(kind)}
    assert terminal == {
        GenerationErrorKind.INVALID_CREDENTIALS,
        GenerationErrorKind.CONTENT_BLOCKED,
        GenerationErrorKind.UNSUPPORTED_REGION,
        GenerationErrorKind.MALFORMED_REQUEST,
        GenerationErrorKind.OUTPUT_TRUNCATED,
    }


def message(text="", stop_reason="end_turn"):
    content = [SimpleNamespace(type="text", text=text)] if text else []
    return SimpleNamespace(content=content, stop_reason=stop_reason)


class FakeMessages:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class FakeModels:
    def __init__(self, ids):
        self.ids = ids

    def list(self):
        async def pages():
            for model_id in self.ids:
                yield SimpleNamespace(id=model_id)
        return pages()


def make_client(outcome=None, model_ids=()):
    fake = SimpleNamespace(messages=FakeMessages(outcome), models=FakeModels(list(model_ids)))
    return TranslationAPIClient(client=fake), fake


def test_generate_returns_text_blocks():
    client, fake = make_client(message("Mingalaba"))
    assert asyncio.run(client.generate("prompt")) == "Mingalaba"
    sent = fake.messages.calls[0]
    assert sent["messages"][0]["content"][0]["text"] == "prompt"


def test_generate_maps_sdk_errors():
    client, _ = make_client(status_error(anthropic.AuthenticationError, 401))
    with pytest.raises(GenerationError) as info:
        asyncio.run(client.generate("prompt"))
    assert info.value.kind is GenerationErrorKind.INVALID_CREDENTIALS
    assert isinstance(info.value.__cause__, anthropic.AuthenticationError)


@pytest.mark.parametrize("response, kind", [
    (message("partial", stop_reason="max_tokens"), GenerationErrorKind.OUTPUT_TRUNCATED),
    (message("", stop_reason="refusal"), GenerationErrorKind.CONTENT_BLOCKED),
    (message("   "), GenerationErrorKind.EMPTY_RESPONSE),
    (message(""), GenerationErrorKind.EMPTY_RESPONSE),
])
def test_process_response_failures(response, kind):
    client, _ = make_client()
    with pytest.raises(GenerationError) as info:
        client.process_response(response)
    assert info.value.kind is kind


def test_check_connection():
    client, _ = make_client(model_ids=["claude-haiku-4-5-20251001", "claude-sonnet-4-5-20250929"])
    status = asyncio.run(client.check_connection())
    assert status["available"] is True
    assert len(status["models"]) == 2

    client, _ = make_client(model_ids=["claude-haiku-4-5-20251001"])
    assert asyncio.run(client.check_connection())["available"] is False


def test_sdk_retries_are_disabled():
    assert TranslationAPIClient(api_key="k").client.max_retries == 0


def test_message_params_match_sdk_signature():
    sdk_messages = TranslationAPIClient(api_key="k").client.messages
    accepted = inspect.signature(type(sdk_messages).create).parameters
    for name in message_params([]):
        assert name in accepted, name


def test_one_generate_attempt_sends_one_request(monkeypatch):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(529, json={"type": "error",
                                         "error": {"type": "overloaded_error", "message": "Overloaded"}})

    real_sdk = api_client.AsyncAnthropic
    monkeypatch.setattr(api_client, "AsyncAnthropic", lambda **kwargs: real_sdk(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)), **kwargs))

    with pytest.raises(GenerationError) as info:
        asyncio.run(TranslationAPIClient(api_key="k").generate("prompt"))
    assert info.value.kind is GenerationErrorKind.OVERLOADED
    assert len(requests) == 1
