"""
Data model for catalog tool calls: the normalized query and the response
envelope returned to MCP clients.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from src.enbuild.config import Credentials


class QueryKind(str, Enum):
    """Catalog operations exposed as tools."""
    LIST_BY_VCS = "list_by_vcs"
    GET_BY_ID = "get_by_id"
    SEARCH = "search"
    FILTER_BY_TYPE = "filter_by_type"
    FILTER_BY_VCS = "filter_by_vcs"


class VCS(str, Enum):
    """Supported version control providers."""
    GITHUB = "GITHUB"
    GITLAB = "GITLAB"


@dataclass(frozen=True)
class CatalogQuery:
    """A validated catalog request, ready to dispatch."""
    kind: QueryKind
    fields: Dict[str, str]
    credentials: Credentials

    @property
    def name(self) -> str:
        return self.fields.get("name", "")

    @property
    def type(self) -> str:
        return self.fields.get("type", "")

    @property
    def vcs(self) -> str:
        return self.fields.get("vcs", "")

    @property
    def id(self) -> str:
        return self.fields.get("id", "")


CatalogData = Union[Dict[str, Any], List[Dict[str, Any]]]

# Serialization order of envelope fields
_FIELD_ORDER = ("success", "message", "count", "data", "table")


@dataclass
class CatalogResponse:
    """
    Uniform envelope returned by every catalog tool.

    Fields left as None are omitted when serialized.
    """
    success: bool
    message: Optional[str] = None
    count: Optional[int] = None
    data: Optional[CatalogData] = None
    table: Optional[str] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the envelope to a dictionary in stable field order."""
        result = {}
        for name in _FIELD_ORDER:
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        return result

    def to_json(self) -> str:
        """Convert the envelope to indented JSON."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogResponse":
        """Create an envelope from a dictionary."""
        return cls(
            success=bool(data.get("success", False)),
            message=data.get("message"),
            count=data.get("count"),
            data=data.get("data"),
            table=data.get("table"),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "CatalogResponse":
        """Create an envelope from JSON text."""
        return cls.from_dict(json.loads(json_str))
