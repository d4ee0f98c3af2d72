"""OpenAI Responses API client for text generation."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from bytebuddy.domain.chat import Citation
from bytebuddy.domain.generation import GenerationResult
from bytebuddy.services.generation import GenerationClient


@dataclass
class OpenAIGenerationClient(GenerationClient):
    """Generation client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIGenerationClient":
        """Create an OpenAI generation client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        instructions: str | None,
        messages: list[dict[str, str]],
        web_search: bool,
        reasoning_effort: str | None,
        store: bool,
    ) -> GenerationResult:
        """Call OpenAI Responses API and collect URL citations."""
        request_payload: dict[str, object] = {
            "model": model,
            "input": [
                {"role": message["role"], "content": message["content"]}
                for message in messages
            ],
            "store": store,
        }
        if instructions:
            request_payload["instructions"] = instructions
        if web_search:
            request_payload["tools"] = [{"type": "web_search"}]
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return GenerationResult(
            text=output_text, citations=_extract_citations(response)
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()


def _extract_citations(response: object) -> list[Citation]:
    """Collect unique url_citation annotations from message output items."""
    citations: list[Citation] = []
    seen: set[str] = set()
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for part in getattr(item, "content", None) or []:
            for annotation in getattr(part, "annotations", None) or []:
                if getattr(annotation, "type", None) != "url_citation":
                    continue
                uri = getattr(annotation, "url", None)
                title = getattr(annotation, "title", None)
                if not uri or not title or uri in seen:
                    continue
                seen.add(uri)
                citations.append(Citation(uri=uri, title=title))
    return citations
