from collections.abc import Sequence

from loguru import logger

from chat_studio.models import (
    DEFAULT_MIME_TYPE,
    Attachment,
    Conversation,
    InlineData,
    InlinePart,
    TextPart,
    Turn,
)
from chat_studio.utils.errors import InvalidInputError


def attachment_to_part(attachment: Attachment) -> InlinePart:
    """Wrap a browser attachment as an inline content part. Data is not validated."""
    return InlinePart(
        inline_data=InlineData(
            data=attachment.data,
            mime_type=attachment.mime_type or DEFAULT_MIME_TYPE,
        )
    )


def build_conversation(
    history: Sequence[Turn] | None,
    prompt: str | None,
    attachments: Sequence[Attachment] | None = None,
) -> Conversation:
    """
    Image flow: copy `history` and append one fresh user turn holding the prompt
    followed by every attachment, in input order.
    """
    if not prompt or not isinstance(prompt, str):
        raise InvalidInputError("Prompt is required")

    contents: Conversation = list(history or [])
    parts = [TextPart(text=prompt), *(attachment_to_part(a) for a in attachments or [])]
    contents.append(Turn(role="user", parts=parts))

    logger.debug(
        f"Built image conversation: {len(contents)} turns, {len(parts) - 1} attachment(s)."
    )
    return contents


def build_text_conversation(
    history: Sequence[Turn] | None,
    prompt: str | None,
    attachments: Sequence[Attachment] | None = None,
) -> Conversation:
    """
    Text flow: copy `history`, append the prompt as a user turn when given, then
    attach files to the trailing user turn (or to a new one if the last turn is
    not from the user).
    """
    has_prompt = bool(prompt) and isinstance(prompt, str)
    if not has_prompt and not attachments:
        raise InvalidInputError("Provide a prompt or files")

    contents: Conversation = list(history or [])
    if has_prompt:
        contents.append(Turn(role="user", parts=[TextPart(text=prompt)]))

    if attachments:
        inline_parts = [attachment_to_part(a) for a in attachments]
        if contents and contents[-1].role == "user":
            last = contents[-1]
            contents[-1] = last.model_copy(update={"parts": [*last.parts, *inline_parts]})
        else:
            contents.append(Turn(role="user", parts=inline_parts))

    logger.debug(f"Built text conversation: {len(contents)} turns.")
    return contents
