"""
Turn a Gemini `generateContent` response of variable shape into a uniform result.

Depending on the SDK/API version, output parts live either at a top-level
`parts` field or under `candidates[0].content.parts`. Everything that depends on
that variability goes through `extract_parts`.
"""

import base64
from collections.abc import Mapping
from typing import Any

from loguru import logger

from chat_studio.models import (
    DEFAULT_MIME_TYPE,
    GenerationFailure,
    GenerationResult,
    InlineData,
)


def _field(obj: Any, *names: str) -> Any:
    """Return the first non-None field among `names`, from a mapping or an object."""
    if obj is None:
        return None
    for name in names:
        if isinstance(obj, Mapping):
            value = obj.get(name)
        else:
            value = getattr(obj, name, None)
        if value is not None:
            return value
    return None


def _as_str(value: Any) -> str | None:
    """Stringify enum-ish provider values (e.g. FinishReason.MAX_TOKENS)."""
    if value is None:
        return None
    value = getattr(value, "value", value)
    return str(value) or None


def _first_candidate(raw: Any) -> Any:
    candidates = _field(raw, "candidates") or []
    return candidates[0] if len(candidates) > 0 else None


def extract_parts(raw: Any) -> list[Any]:
    """Locate the output parts: top-level `parts` first, then the first candidate."""
    parts = _field(raw, "parts")
    if parts:
        return list(parts)

    content = _field(_first_candidate(raw), "content")
    return list(_field(content, "parts") or [])


def _part_image(part: Any) -> InlineData | None:
    inline = _field(part, "inlineData", "inline_data")
    data = _field(inline, "data")
    if not data:
        return None
    if isinstance(data, bytes | bytearray):
        data = base64.b64encode(data).decode("ascii")
    mime_type = _field(inline, "mimeType", "mime_type") or DEFAULT_MIME_TYPE
    return InlineData(data=data, mime_type=mime_type)


def classify_failure(raw: Any) -> GenerationFailure:
    """Explain an empty response. A block reason takes precedence over a finish reason."""
    feedback = _field(raw, "promptFeedback", "prompt_feedback")
    if block_reason := _as_str(_field(feedback, "blockReason", "block_reason")):
        return GenerationFailure.blocked(block_reason)

    finish_reason = _as_str(_field(_first_candidate(raw), "finishReason", "finish_reason"))
    return GenerationFailure.no_output(finish_reason)


def normalize_response(raw: Any) -> GenerationResult | GenerationFailure:
    """Split parts into images and text; report a failure when neither is present."""
    images: list[InlineData] = []
    texts: list[str] = []

    for part in extract_parts(raw):
        if image := _part_image(part):
            images.append(image)
        elif text := _field(part, "text"):
            texts.append(text)

    if not images and not texts:
        failure = classify_failure(raw)
        logger.warning(f"Gemini returned no usable output: {failure.message}")
        return failure

    logger.debug(f"Normalized response: {len(images)} image(s), {len(texts)} text part(s).")
    return GenerationResult(images=images, text="\n".join(texts))


def extract_text(raw: Any) -> str:
    """Text-flow reader: join text parts only, empty string when there are none."""
    return "\n".join(
        text for part in extract_parts(raw) if (text := _field(part, "text"))
    )
