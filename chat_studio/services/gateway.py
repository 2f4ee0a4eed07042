import base64
import reprlib
from collections.abc import Mapping
from typing import Any

from google.genai import types
from loguru import logger

from chat_studio.models import (
    Conversation,
    GenerationConfig,
    GenerationFailure,
    GenerationResult,
    InlinePart,
    Turn,
)

from .normalizer import extract_text, normalize_response

# Gemini names the assistant side of a conversation "model".
PROVIDER_ROLES = {"user": "user", "assistant": "model"}


def _turn_to_content(turn: Turn) -> types.Content:
    parts: list[types.Part] = []
    for part in turn.parts:
        if isinstance(part, InlinePart):
            parts.append(
                types.Part.from_bytes(
                    data=base64.b64decode(part.inline_data.data),
                    mime_type=part.inline_data.mime_type,
                )
            )
        else:
            parts.append(types.Part(text=part.text))
    return types.Content(role=PROVIDER_ROLES[turn.role], parts=parts)


def to_provider_contents(conversation: Conversation) -> list[types.Content]:
    """Translate a conversation into google-genai `Content` objects."""
    return [_turn_to_content(turn) for turn in conversation]


def to_provider_config(config: GenerationConfig) -> types.GenerateContentConfig:
    """Translate a GenerationConfig into a google-genai request config."""
    kwargs: dict[str, Any] = {"response_modalities": list(config.modalities)}
    if config.aspect_ratio:
        kwargs["image_config"] = types.ImageConfig(aspect_ratio=config.aspect_ratio)
    return types.GenerateContentConfig(**kwargs)


def response_to_dict(response: Any) -> Any:
    """Dump SDK response objects to camelCase dicts; pass mappings through."""
    if isinstance(response, Mapping):
        return response
    if hasattr(response, "model_dump"):
        # python mode keeps inline data as bytes; the normalizer encodes them as standard base64
        return response.model_dump(by_alias=True, exclude_none=True)
    return response


class GenerationGateway:
    """
    One request/response round trip against the Gemini API.

    The provider client is injected; anything exposing
    `client.aio.models.generate_content(model=..., contents=..., config=...)` works,
    which lets tests substitute a fake.
    """

    def __init__(self, client: Any, text_model: str, image_model: str) -> None:
        self._client = client
        self.text_model = text_model
        self.image_model = image_model

    async def generate(
        self, conversation: Conversation, config: GenerationConfig | None = None
    ) -> GenerationResult | GenerationFailure:
        """Image-capable generation. Returns normalized output or a typed failure."""
        config = config or GenerationConfig()
        try:
            contents = to_provider_contents(conversation)
            logger.debug(
                f"Calling {self.image_model} with {len(contents)} turn(s), "
                f"modalities={config.modalities}, aspect_ratio={config.aspect_ratio!r}"
            )
            response = await self._client.aio.models.generate_content(
                model=self.image_model,
                contents=contents,
                config=to_provider_config(config),
            )
        except Exception as e:
            logger.exception(f"Gemini image request failed: {e}")
            return GenerationFailure.provider_error(str(e))

        raw = response_to_dict(response)
        logger.debug(f"Gemini image response: {reprlib.repr(raw)}")
        return normalize_response(raw)

    async def chat(self, conversation: Conversation) -> str | GenerationFailure:
        """Text-only generation. An empty response yields an empty string, not a failure."""
        try:
            contents = to_provider_contents(conversation)
            logger.debug(f"Calling {self.text_model} with {len(contents)} turn(s)")
            response = await self._client.aio.models.generate_content(
                model=self.text_model,
                contents=contents,
            )
        except Exception as e:
            logger.exception(f"Gemini text request failed: {e}")
            return GenerationFailure.provider_error(str(e))

        return extract_text(response_to_dict(response))
