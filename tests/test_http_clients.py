"""Tests for the OpenAI search client adapter."""

import asyncio
import json

import httpx
import openai
import pytest

from photo_gallery.adapters.openai_search_client import OpenAISearchClient
from photo_gallery.errors import InvalidCredential, RemoteSearchFailure

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/responses")


class _FakeResponses:
    def __init__(self, output_text: str = "", error: Exception | None = None) -> None:
        self.output_text = output_text
        self.error = error
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        if self.error is not None:
            raise self.error
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, responses: _FakeResponses) -> None:
        self.responses = responses
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def _classify(client: OpenAISearchClient) -> dict[str, object]:
    return asyncio.run(
        client.classify(
            model="gpt-5.2",
            reasoning_effort="low",
            store=False,
            prompt="Find dogs",
            image_urls=["data:image/jpeg;base64,AAA=", "data:image/png;base64,BBB="],
            schema={"type": "object"},
        )
    )


def test_openai_search_client_builds_payload_and_parses_output() -> None:
    responses = _FakeResponses(json.dumps({"matched_indices": [1]}))
    client = OpenAISearchClient(client=_FakeOpenAI(responses))

    result = _classify(client)

    assert result == {"matched_indices": [1]}
    payload = responses.last_payload
    assert payload is not None
    content = payload["input"][0]["content"]
    assert content[0] == {"type": "input_text", "text": "Find dogs"}
    assert [item["image_url"] for item in content[1:]] == [
        "data:image/jpeg;base64,AAA=",
        "data:image/png;base64,BBB=",
    ]
    assert payload["reasoning"] == {"effort": "low"}
    assert payload["text"]["format"]["type"] == "json_schema"


def test_openai_search_client_maps_authentication_error() -> None:
    error = openai.AuthenticationError(
        "Incorrect API key provided",
        response=httpx.Response(401, request=_REQUEST),
        body=None,
    )
    client = OpenAISearchClient(client=_FakeOpenAI(_FakeResponses(error=error)))

    with pytest.raises(InvalidCredential):
        _classify(client)


def test_openai_search_client_maps_connection_error() -> None:
    error = openai.APIConnectionError(request=_REQUEST)
    client = OpenAISearchClient(client=_FakeOpenAI(_FakeResponses(error=error)))

    with pytest.raises(RemoteSearchFailure):
        _classify(client)


@pytest.mark.parametrize("output_text", ["", "not json"])
def test_openai_search_client_rejects_unusable_output(output_text: str) -> None:
    client = OpenAISearchClient(client=_FakeOpenAI(_FakeResponses(output_text)))

    with pytest.raises(RemoteSearchFailure):
        _classify(client)


def test_openai_search_client_close() -> None:
    fake = _FakeOpenAI(_FakeResponses())
    client = OpenAISearchClient(client=fake)

    asyncio.run(client.close())

    assert fake.closed is True
