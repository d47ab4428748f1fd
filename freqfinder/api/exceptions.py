"""
Exception types raised by the frequency lookup pipeline.
"""


class FreqFinderError(Exception):
    """Base class for every error raised by this package."""


class TransportError(FreqFinderError):
    """An RPC or AI call failed at the network/HTTP layer."""

    def __init__(self, message: str, status_code: int = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AuthenticationError(FreqFinderError):
    """The database provider rejected the supplied credentials."""


class NotFoundError(FreqFinderError):
    """The request was valid but no matching region or data exists."""


class ParseError(FreqFinderError):
    """An AI response did not contain a usable JSON object."""


class PartialFailure(FreqFinderError):
    """A single subcategory or trunked system could not be fetched."""

    def __init__(self, unit: str, cause: Exception):
        super().__init__(f"{unit}: {cause}")
        self.unit = unit
        self.cause = cause


class InvalidQueryError(FreqFinderError, ValueError):
    """The caller supplied a malformed ZIP code or location."""


class LookupFailedError(FreqFinderError):
    """Every source failed and no usable cache entry exists."""


class ConfigurationError(FreqFinderError):
    """A source was asked for but its key or credentials are not configured."""
