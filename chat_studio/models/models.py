from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Role = Literal["user", "assistant"]
Modality = Literal["IMAGE", "TEXT"]
ResponseType = Literal["IMAGE", "TEXT", "BOTH"]
FailureKind = Literal["blocked_by_policy", "no_output", "provider_error"]

DEFAULT_MIME_TYPE = "image/png"


class InlineData(BaseModel):
    """Base64-encoded binary payload paired with its media type."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    data: str
    mime_type: str = Field(default=DEFAULT_MIME_TYPE, alias="mimeType")


class TextPart(BaseModel):
    """Plain text content part."""

    model_config = ConfigDict(frozen=True)

    text: str


class InlinePart(BaseModel):
    """Inline binary (image) content part."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    inline_data: InlineData = Field(..., alias="inlineData")


ContentPart = TextPart | InlinePart


class Turn(BaseModel):
    """One participant's contribution to a conversation."""

    model_config = ConfigDict(frozen=True)

    role: Role
    parts: list[ContentPart] = Field(default_factory=list)

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, value: Any) -> Any:
        """Accept Gemini's 'model' role as an alias for 'assistant'."""
        if value == "model":
            return "assistant"
        return value


Conversation = list[Turn]


class Attachment(BaseModel):
    """Inline file supplied by the browser alongside a prompt."""

    model_config = ConfigDict(populate_by_name=True)

    data: str
    mime_type: str | None = Field(default=None, alias="mimeType")


class GenerationConfig(BaseModel):
    """Output configuration for an image-capable generation call."""

    model_config = ConfigDict(frozen=True)

    modalities: list[Modality] = Field(default=["IMAGE"], min_length=1)
    aspect_ratio: str | None = Field(default=None)

    @field_validator("modalities")
    @classmethod
    def _dedupe_modalities(cls, v: list[Modality]) -> list[Modality]:
        return list(dict.fromkeys(v))

    @classmethod
    def for_response_type(
        cls, response_type: ResponseType | None, aspect_ratio: str | None = None
    ) -> GenerationConfig:
        """Map the HTTP `responseType` token onto provider modalities."""
        if response_type == "TEXT":
            modalities: list[Modality] = ["TEXT"]
        elif response_type == "BOTH":
            modalities = ["IMAGE", "TEXT"]
        else:
            modalities = ["IMAGE"]
        return cls(modalities=modalities, aspect_ratio=aspect_ratio or None)


class GenerationResult(BaseModel):
    """Normalized provider output."""

    images: list[InlineData] = Field(default_factory=list)
    text: str = Field(default="")


class GenerationFailure(BaseModel):
    """Typed reason a generation produced nothing usable."""

    model_config = ConfigDict(frozen=True)

    kind: FailureKind
    reason: str | None = Field(default=None)

    @classmethod
    def blocked(cls, reason: str) -> GenerationFailure:
        return cls(kind="blocked_by_policy", reason=reason)

    @classmethod
    def no_output(cls, finish_reason: str | None = None) -> GenerationFailure:
        return cls(kind="no_output", reason=finish_reason)

    @classmethod
    def provider_error(cls, message: str | None) -> GenerationFailure:
        return cls(kind="provider_error", reason=message or None)

    @property
    def message(self) -> str:
        """Human-readable message surfaced to the browser."""
        if self.kind == "blocked_by_policy":
            return f"Request blocked: {self.reason}"
        if self.kind == "no_output":
            if self.reason:
                return f"No output returned (finish reason: {self.reason})"
            return "No output returned"
        return self.reason or "Unexpected error"


class ImageRequest(BaseModel):
    """Body of `POST /image`."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str | None = Field(default=None)
    images: list[Attachment] | None = Field(default=None)
    aspect_ratio: str | None = Field(default=None, alias="aspectRatio")
    response_type: ResponseType | None = Field(default=None, alias="responseType")
    history: list[Turn] | None = Field(default=None)


class TextRequest(BaseModel):
    """Body of `POST /text`."""

    prompt: str | None = Field(default=None)
    files: list[Attachment] | None = Field(default=None)
    history: list[Turn] | None = Field(default=None)


class TextResponse(BaseModel):
    text: str


class ErrorResponse(BaseModel):
    error: str


class HealthCheckResponse(BaseModel):
    """Health check response model"""

    ok: bool
    text_model: str | None = Field(default=None)
    image_model: str | None = Field(default=None)
    error: str | None = Field(default=None)


class ChatMessage(BaseModel):
    """Message held by a ChatSession, as rendered in the chat window."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Role
    content: str = Field(default="")
    images: list[InlineData] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    is_error: bool = Field(default=False)
