"""Fake google-genai client and canned Gemini responses for tests."""

from typing import Any


class FakeModels:
    """Stands in for `client.aio.models`; records calls and replays canned responses."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.responses: list[Any] = []
        self.error: Exception | None = None

    async def generate_content(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if not self.responses:
            return {}
        return self.responses.pop(0)


class FakeAio:
    def __init__(self, models: FakeModels) -> None:
        self.models = models


class FakeGenaiClient:
    def __init__(self) -> None:
        self.aio = FakeAio(FakeModels())

    def respond_with(self, *responses: Any) -> None:
        self.aio.models.responses.extend(responses)

    def fail_with(self, error: Exception) -> None:
        self.aio.models.error = error

    @property
    def calls(self) -> list[dict[str, Any]]:
        return self.aio.models.calls


def text_response(*texts: str, nested: bool = True) -> dict[str, Any]:
    """Response carrying only text parts, in the nested or top-level shape."""
    parts = [{"text": t} for t in texts]
    if nested:
        return {"candidates": [{"content": {"role": "model", "parts": parts}}]}
    return {"parts": parts}


def image_response(
    data: str = "aW1hZ2U=", mime_type: str = "image/png", text: str | None = None
) -> dict[str, Any]:
    """Response with an optional leading text part followed by one inline image."""
    parts: list[dict[str, Any]] = []
    if text:
        parts.append({"text": text})
    parts.append({"inlineData": {"data": data, "mimeType": mime_type}})
    return {"candidates": [{"content": {"role": "model", "parts": parts}}]}
