"""Exception types raised by casual-creator."""


class CasualCreatorError(Exception):
    """Base class for all engine errors."""


class EmptyMessageError(CasualCreatorError, ValueError):
    """Raised when a turn is started with an empty or whitespace-only message."""


class ProviderError(CasualCreatorError):
    """
    An external provider (search, analysis, generation) failed.

    Args:
        message: Human readable description
        provider: Name of the failing provider
        transient: True for network-level failures worth retrying
    """

    def __init__(self, message: str, provider: str = "unknown", transient: bool = False):
        super().__init__(message)
        self.provider = provider
        self.transient = transient


class ProviderNotConfiguredError(ProviderError):
    """Raised when an action is requested but no provider is wired for it."""

    def __init__(self, provider: str):
        super().__init__(f"No provider configured for '{provider}'", provider=provider)


class ConversationNotFoundError(CasualCreatorError, LookupError):
    """Raised when a turn targets a conversation that does not exist."""

    def __init__(self, conversation_id: str):
        super().__init__(f"Conversation not found: {conversation_id}")
        self.conversation_id = conversation_id
