import json

import httpx
import pytest

from alumni_finder.errors import LLMError
from alumni_finder.llm.deepseek_client import DeepSeekClient

MESSAGES = [{"role": "user", "content": "hello"}]


def _client(handler, api_key="sk-test"):
    return DeepSeekClient(api_key, base_url="https://api.deepseek.test/v1/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_chat_posts_completion_request():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "  Hi there  "}}]})

    content = await _client(handler).chat(MESSAGES, temperature=0.3, max_tokens=500)

    assert content == "Hi there"
    assert seen["url"] == "https://api.deepseek.test/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"] == {
        "model": "deepseek-chat",
        "messages": MESSAGES,
        "temperature": 0.3,
        "max_tokens": 500,
    }


@pytest.mark.asyncio
async def test_missing_api_key_fails_without_request():
    def handler(request):
        raise AssertionError("no request expected")

    with pytest.raises(LLMError, match="not configured"):
        await _client(handler, api_key="").chat(MESSAGES)


@pytest.mark.asyncio
async def test_error_status_surfaces_api_message():
    client = _client(lambda request: httpx.Response(401, json={"error": {"message": "Invalid API key"}}))

    with pytest.raises(LLMError, match="Invalid API key") as exc_info:
        await client.chat(MESSAGES)
    assert exc_info.value.details == {"status_code": 401}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"choices": []},
        {"unexpected": True},
        {"choices": [{"message": {"content": "   "}}]},
    ],
)
async def test_unusable_responses_raise(body):
    with pytest.raises(LLMError):
        await _client(lambda request: httpx.Response(200, json=body)).chat(MESSAGES)


@pytest.mark.asyncio
async def test_transport_errors_are_wrapped():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(LLMError, match="request failed"):
        await _client(handler).chat(MESSAGES)
