class ChatStudioError(Exception):
    """Base error for the chat studio backend."""


class InvalidInputError(ChatStudioError):
    """Request is missing something the user must supply (prompt or files)."""


class ConfigurationError(ChatStudioError):
    """Required configuration (e.g. the Gemini API key) is missing."""


class SessionBusyError(ChatStudioError):
    """A ChatSession already has a submission in flight."""


class InsufficientCreditsError(ChatStudioError):
    """The entitlement ledger reports no remaining credits."""
