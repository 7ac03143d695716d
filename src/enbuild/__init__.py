"""
ENBUILD backend access.

Holds the async HTTP client for the ENBUILD catalog API together with the
process settings and credential profiles it is built from.
"""

from .client import CATALOGS_PATH, Catalog, EnbuildClient
from .config import Credentials, Settings, TRANSPORTS, LOG_LEVELS
from .errors import (
    ConfigurationError,
    EnbuildAPIError,
    EnbuildConnectionError,
    EnbuildError,
)

__all__ = [
    "CATALOGS_PATH",
    "Catalog",
    "EnbuildClient",
    "Credentials",
    "Settings",
    "TRANSPORTS",
    "LOG_LEVELS",
    "ConfigurationError",
    "EnbuildAPIError",
    "EnbuildConnectionError",
    "EnbuildError",
]
