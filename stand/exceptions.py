"""
Errors raised by the stand stores and shown to staff as notices.
"""


class StandError(Exception):
    """Base class; the message is safe to show in the UI."""
    pass


class NicknameTaken(StandError):
    """Raised when a nickname is already used by another user."""

    def __init__(self, nickname):
        self.nickname = nickname
        super().__init__(f"The nickname '{nickname}' is already taken. Choose another one.")


class NotFound(StandError):
    """Raised when a document does not exist (anymore)."""

    def __init__(self, kind, key):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key} no longer exists.")


class ValidationFailed(StandError):
    """Raised when a store call gets values a form should have rejected."""
    pass


class NotCommentAuthor(StandError):
    """Raised when someone other than the author deletes a comment."""

    def __init__(self):
        super().__init__("Only the author can delete this comment.")
