"""
Request normalization for catalog tools.

Turns the raw argument mapping of a tool call into a CatalogQuery. The
checks only look at their explicit inputs (the arguments and the server
settings), never at the environment.
"""

from typing import Any, Dict, Mapping, Tuple

from src.enbuild.config import Credentials, Settings

from .errors import InvalidValueError, MissingParameterError
from .models import VCS, CatalogQuery, QueryKind

# Fields each operation needs, in the order they are checked
REQUIRED_FIELDS: Dict[QueryKind, Tuple[str, ...]] = {
    QueryKind.LIST_BY_VCS: ("vcs",),
    QueryKind.GET_BY_ID: ("id",),
    QueryKind.SEARCH: ("name", "type", "vcs"),
    QueryKind.FILTER_BY_TYPE: ("type",),
    QueryKind.FILTER_BY_VCS: ("vcs",),
}

MISSING_MESSAGES = {
    "id": "catalog ID is required",
    "name": "name parameter is required",
    "type": "type parameter is required",
    "vcs": "VCS parameter is required (GITHUB or GITLAB)",
    "token": "API token is required but not provided",
    "base_url": "base URL is required but not provided",
}


def get_string(arguments: Mapping[str, Any], field: str) -> str:
    """
    Read one string argument, trimmed.

    A missing key or None reads as "". Non-string values are rejected
    rather than coerced.
    """
    value = arguments.get(field)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidValueError(
            field, f"{field} must be a string, got {type(value).__name__}"
        )
    return value.strip()


def normalize_vcs(value: str) -> str:
    """
    Upper-case a VCS value and check it is supported.

    Raises:
        MissingParameterError: If the value is empty
        InvalidValueError: If the value is not GITHUB or GITLAB
    """
    value = value.strip()
    if not value:
        raise MissingParameterError("vcs", MISSING_MESSAGES["vcs"])
    value = value.upper()
    allowed = [v.value for v in VCS]
    if value not in allowed:
        raise InvalidValueError("vcs", "VCS must be either GITHUB or GITLAB", allowed)
    return value


def resolve_credentials(arguments: Mapping[str, Any], settings: Settings) -> Credentials:
    """
    Pick the credentials for a call.

    The explicit token argument wins, then the configured token, then the
    configured username/password pair.
    """
    token = get_string(arguments, "token") or settings.token
    if not token and not settings.has_basic_auth:
        raise MissingParameterError("token", MISSING_MESSAGES["token"])
    if not settings.base_url:
        raise MissingParameterError("base_url", MISSING_MESSAGES["base_url"])

    if token:
        return Credentials(base_url=settings.base_url, token=token)
    return Credentials(
        base_url=settings.base_url,
        username=settings.username,
        password=settings.password,
    )


def normalize(kind: QueryKind, arguments: Mapping[str, Any], settings: Settings) -> CatalogQuery:
    """
    Validate tool arguments for an operation.

    Args:
        kind: The operation being invoked
        arguments: Raw tool arguments
        settings: Server settings (credential fallbacks and base URL)

    Returns:
        A CatalogQuery whose required fields are non-empty and whose VCS,
        if any, is canonical

    Raises:
        MissingParameterError: A required field is empty
        InvalidValueError: A field has an unsupported value
    """
    fields = {}
    for name in REQUIRED_FIELDS[kind]:
        value = get_string(arguments, name)
        if not value:
            raise MissingParameterError(name, MISSING_MESSAGES[name])
        fields[name] = value

    if "vcs" in fields:
        fields["vcs"] = normalize_vcs(fields["vcs"])

    credentials = resolve_credentials(arguments, settings)
    return CatalogQuery(kind=kind, fields=fields, credentials=credentials)
