"""
Domain exceptions. The API maps these to HTTP responses in omondi.main.
"""


class OmondiError(Exception):
    """Base class for all application errors."""


class InvalidMediaError(OmondiError, ValueError):
    """A media payload is not a well-formed base64 data URI."""


class GenerationError(OmondiError):
    """The provider or the muxer failed to produce a result."""


class ConfigurationError(OmondiError):
    """A required secret or setting is missing."""


class CharacterExistsError(OmondiError):
    pass


class QuotaExceededError(OmondiError):
    def __init__(self, used: int, requested: int, limit: int):
        self.used = used
        self.requested = requested
        self.limit = limit
        super().__init__(
            f"Storage limit reached: {used + requested} bytes requested, limit is {limit} bytes"
        )
