"""
Failure classification for DeckForge.

Every error the library raises on purpose is a ``DeckForgeError`` carrying
a ``FailureKind``. Callers branch on the concrete subclass:

- NotFoundError: identifier, name or commander unresolvable locally or remotely
- NetworkError: transport failure, distinct from a definitive not-found
- ScrapeError: render-retry limit exceeded or page structurally unparsable
- ValidationError: bad input (non-commander seed, malformed deck line, ...)
- PersistenceError: durable read/write failure

The API layer turns these into a ``FailureDetail`` envelope with the error's
status code.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    NOT_FOUND = "not_found"
    NETWORK_ERROR = "network_error"
    SCRAPE_ERROR = "scrape_error"
    VALIDATION_FAILED = "validation_failed"
    PERSISTENCE_ERROR = "persistence_error"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class DeckForgeError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    kind: FailureKind = FailureKind.VALIDATION_FAILED
    status_code: int = 400

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ):
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a FailureDetail envelope."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class NotFoundError(DeckForgeError):
    """Raised when a card, name or commander cannot be resolved."""

    kind = FailureKind.NOT_FOUND
    status_code = 404


class NetworkError(DeckForgeError):
    """
    Raised when a remote call cannot be completed.

    Distinct from NotFoundError: the remote side never answered, so callers
    may fall back to offline (cache-only) lookups.
    """

    kind = FailureKind.NETWORK_ERROR
    status_code = 502


class ScrapeError(DeckForgeError):
    """
    Raised when a page never renders its card tiles or cannot be parsed.

    This is terminal - callers must not retry.
    """

    kind = FailureKind.SCRAPE_ERROR
    status_code = 502


class ValidationError(DeckForgeError):
    """Raised when input violates a precondition."""

    kind = FailureKind.VALIDATION_FAILED
    status_code = 400


class PersistenceError(DeckForgeError):
    """Raised when durable state cannot be read or written."""

    kind = FailureKind.PERSISTENCE_ERROR
    status_code = 500
