"""
Exceptions raised by the ENBUILD backend client.
"""

from typing import Optional


class EnbuildError(Exception):
    """Base class for all ENBUILD backend failures."""


class EnbuildAPIError(EnbuildError):
    """
    Raised when the ENBUILD API answers with a non-2xx status.

    The message carries the status code and whatever detail the API
    returned, so it can be shown to MCP clients as-is.
    """

    def __init__(self, status_code: int, detail: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail or ""
        message = f"ENBUILD API returned status {status_code}"
        if self.detail:
            message = f"{message}: {self.detail}"
        super().__init__(message)


class EnbuildConnectionError(EnbuildError):
    """Raised when the ENBUILD API could not be reached (DNS, TLS, timeout...)."""


class ConfigurationError(Exception):
    """Raised at startup when the process configuration is unusable."""
