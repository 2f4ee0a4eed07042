from collections.abc import Sequence
from typing import Literal, Protocol

from loguru import logger

from chat_studio.models import (
    DEFAULT_MIME_TYPE,
    Attachment,
    ChatMessage,
    Conversation,
    GenerationConfig,
    GenerationFailure,
    InlineData,
    InlinePart,
    ResponseType,
    TextPart,
    Turn,
)
from chat_studio.utils.errors import (
    InsufficientCreditsError,
    InvalidInputError,
    SessionBusyError,
)

from .conversation import build_conversation, build_text_conversation
from .gateway import GenerationGateway

SessionMode = Literal["text", "image"]

IMAGE_ONLY_PLACEHOLDER = "Generated image"


class EntitlementLedger(Protocol):
    """Credits ledger owned by the hosting application."""

    async def has_credits(self) -> bool: ...

    async def record_generation(self, prompt: str, images: list[InlineData]) -> None: ...


class MessageStore(Protocol):
    """Chat history persistence owned by the hosting application."""

    async def save(self, message: ChatMessage) -> None: ...


def _message_to_turn(message: ChatMessage) -> Turn | None:
    parts: list[TextPart | InlinePart] = []
    if message.content:
        parts.append(TextPart(text=message.content))
    parts.extend(InlinePart(inline_data=image) for image in message.images)
    if not parts:
        return None
    return Turn(role=message.role, parts=parts)


class ChatSession:
    """
    In-memory conversation for one user.

    Each `submit` appends the user message right away, then one assistant message
    carrying either the generated output or the failure text. Only one submission
    may be in flight at a time; a second one is rejected with SessionBusyError.
    """

    def __init__(
        self,
        gateway: GenerationGateway,
        ledger: EntitlementLedger | None = None,
        store: MessageStore | None = None,
    ) -> None:
        self._gateway = gateway
        self._ledger = ledger
        self._store = store
        self._messages: list[ChatMessage] = []
        self._busy = False

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    @property
    def busy(self) -> bool:
        return self._busy

    def turns(self) -> Conversation:
        """Provider history for this session; error replies are not sent back."""
        history: Conversation = []
        for message in self._messages:
            if message.is_error:
                continue
            if turn := _message_to_turn(message):
                history.append(turn)
        return history

    async def submit(
        self,
        prompt: str,
        attachments: Sequence[Attachment] | None = None,
        mode: SessionMode = "text",
        aspect_ratio: str | None = None,
        response_type: ResponseType | None = None,
    ) -> ChatMessage:
        """Send one user message and return the assistant message appended for it."""
        prompt = prompt or ""
        attachments = list(attachments or [])
        if not prompt.strip() and not attachments:
            raise InvalidInputError("Provide a prompt or files")
        if mode == "image" and not prompt.strip():
            raise InvalidInputError("Prompt is required")
        if self._busy:
            raise SessionBusyError("A message is already being generated for this session")

        self._busy = True
        try:
            if self._ledger is not None and not await self._ledger.has_credits():
                raise InsufficientCreditsError("No credits remaining")

            history = self.turns()
            user_message = ChatMessage(
                role="user",
                content=prompt,
                images=[
                    InlineData(data=a.data, mime_type=a.mime_type or DEFAULT_MIME_TYPE)
                    for a in attachments
                ],
            )
            await self._append(user_message)

            if mode == "image":
                conversation = build_conversation(history, prompt, attachments)
                config = GenerationConfig.for_response_type(
                    response_type or "IMAGE", aspect_ratio
                )
                outcome = await self._gateway.generate(conversation, config)
            else:
                conversation = build_text_conversation(history, prompt, attachments)
                outcome = await self._gateway.chat(conversation)

            if isinstance(outcome, GenerationFailure):
                logger.warning(f"Generation failed ({outcome.kind}): {outcome.message}")
                reply = ChatMessage(
                    role="assistant", content=f"Error: {outcome.message}", is_error=True
                )
                await self._append(reply)
                return reply

            if isinstance(outcome, str):
                reply = ChatMessage(role="assistant", content=outcome)
            else:
                reply = ChatMessage(
                    role="assistant",
                    content=outcome.text or IMAGE_ONLY_PLACEHOLDER,
                    images=outcome.images,
                )
            await self._append(reply)

            if self._ledger is not None:
                await self._ledger.record_generation(prompt, reply.images)
            return reply
        finally:
            self._busy = False

    async def _append(self, message: ChatMessage) -> None:
        self._messages.append(message)
        if self._store is not None:
            await self._store.save(message)
