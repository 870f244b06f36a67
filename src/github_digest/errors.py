"""Exception types shared across the relay."""


class DigestError(Exception):
    """Base class for all relay errors."""


class ConfigError(DigestError):
    """A required setting is missing or malformed."""


class FeedError(DigestError):
    """The upstream event feed could not be fetched."""


class StoreError(DigestError):
    """The subscriber store rejected a request."""


class MailError(DigestError):
    """The mail transport failed to deliver a message."""


class InvalidEmailError(DigestError, ValueError):
    """An email address failed validation."""

    def __init__(self, email: str | None):
        self.email = email
        super().__init__(f"Invalid email: {email!r}")
