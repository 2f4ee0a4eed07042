from .client import create_genai_client
from .conversation import build_conversation, build_text_conversation
from .gateway import GenerationGateway
from .normalizer import extract_parts, extract_text, normalize_response
from .session import ChatSession, EntitlementLedger, MessageStore

__all__ = [
    "ChatSession",
    "EntitlementLedger",
    "GenerationGateway",
    "MessageStore",
    "build_conversation",
    "build_text_conversation",
    "create_genai_client",
    "extract_parts",
    "extract_text",
    "normalize_response",
]
