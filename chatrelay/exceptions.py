class ChatRelayError(Exception):
    """Base class for errors reported to API callers."""


class ValidationError(ChatRelayError):
    """Caller input failed a precondition; nothing was written."""


class StorageError(ChatRelayError):
    """The message store could not be read or written."""
