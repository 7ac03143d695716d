"""
Catalog query handling.

Validates tool arguments into a CatalogQuery, dispatches it to the ENBUILD
client and wraps the outcome in a CatalogResponse envelope.
"""

from .dispatcher import STAGE_LABELS, default_client_factory, dispatch
from .envelope import build_failure, build_success
from .errors import (
    CatalogError,
    DispatchError,
    InvalidValueError,
    MissingParameterError,
    ValidationError,
)
from .models import VCS, CatalogQuery, CatalogResponse, QueryKind
from .normalizer import normalize
from .rendering import render_table
from .service import run_query

__all__ = [
    "STAGE_LABELS",
    "default_client_factory",
    "dispatch",
    "build_failure",
    "build_success",
    "CatalogError",
    "DispatchError",
    "InvalidValueError",
    "MissingParameterError",
    "ValidationError",
    "VCS",
    "CatalogQuery",
    "CatalogResponse",
    "QueryKind",
    "normalize",
    "render_table",
    "run_query",
]
