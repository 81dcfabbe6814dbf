"""OpenAI Responses API client for batch photo matching."""

import json
from dataclasses import dataclass

import httpx
import openai
from openai import AsyncOpenAI

from photo_gallery.errors import InvalidCredential, RemoteSearchFailure
from photo_gallery.services.search import SearchClient


@dataclass
class OpenAISearchClient(SearchClient):
    """Search client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(
        cls, api_key: str, timeout_seconds: float = 60.0
    ) -> "OpenAISearchClient":
        """Create an OpenAI search client for one credential."""
        return cls(
            client=AsyncOpenAI(
                api_key=api_key,
                timeout=httpx.Timeout(timeout_seconds),
                max_retries=0,
            )
        )

    async def classify(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        image_urls: list[str],
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Call OpenAI Responses API with structured outputs."""
        content: list[dict[str, object]] = [{"type": "input_text", "text": prompt}]
        content.extend(
            {"type": "input_image", "image_url": image_url} for image_url in image_urls
        )
        request_payload: dict[str, object] = {
            "model": model,
            "input": [{"role": "user", "content": content}],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "photo_matches",
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        try:
            response = await self.client.responses.create(**request_payload)
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            raise InvalidCredential(f"API Key was rejected: {exc}") from exc
        except openai.OpenAIError as exc:
            raise RemoteSearchFailure(str(exc)) from exc

        output_text = response.output_text
        if not output_text:
            raise RemoteSearchFailure("OpenAI returned an empty response")
        try:
            return json.loads(output_text)
        except ValueError as exc:
            raise RemoteSearchFailure(f"OpenAI returned invalid JSON: {exc}") from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
