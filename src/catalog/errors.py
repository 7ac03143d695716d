"""
Per-call errors raised while handling a catalog tool invocation.

Every error here is recoverable: the tool boundary turns it into a failure
envelope whose message is "<stage>: <error text>".
"""

from typing import Iterable, Optional

MISSING_PARAMETER = "Missing required parameter"
INVALID_VCS = "Invalid VCS value"
INVALID_PARAMETER = "Invalid parameter value"


class CatalogError(Exception):
    """Base class for catalog tool errors."""

    #: Label prefixed to the message in failure envelopes
    stage: str = "Catalog error"


class ValidationError(CatalogError):
    """Raised when tool arguments are missing or invalid."""

    def __init__(self, field: str, detail: str):
        self.field = field
        self.detail = detail
        super().__init__(detail)


class MissingParameterError(ValidationError):
    """A required argument was absent or empty."""

    stage = MISSING_PARAMETER


class InvalidValueError(ValidationError):
    """An argument was present but outside its allowed values."""

    def __init__(self, field: str, detail: str, allowed: Optional[Iterable[str]] = None):
        self.allowed = tuple(allowed or ())
        super().__init__(field, detail)

    @property
    def stage(self) -> str:
        return INVALID_VCS if self.field == "vcs" else INVALID_PARAMETER


class DispatchError(CatalogError):
    """
    A backend call failed.

    Wraps the underlying error with the label of the operation that was
    being performed, e.g. "Failed to list catalogs".
    """

    def __init__(self, stage: str, cause: BaseException):
        self.stage = stage
        self.cause = cause
        super().__init__(str(cause))
