from __future__ import annotations

from dataclasses import dataclass
from numbers import Number
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from . import links

COLLECTION_MEDIA_TYPE = "application/x.simplyrestful-collection-v1+json"
STREAMING_COLLECTION_MEDIA_TYPE = (
    "application/x.simplyrestful-streaming-collection-v1+json"
)
UNKNOWN_TOTAL = -1


class Link(BaseModel):
    href: str
    type: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class APIResource(BaseModel):
    """
    Base model for resources served by a SimplyRESTful API.
    Only the `self` link is known to the client; every other field is kept
    as-is so subclasses can declare whatever the API serves.
    """

    self_link: Optional[Link] = Field(default=None, alias="self")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def self_href(self) -> Optional[str]:
        return self.self_link.href if self.self_link else None


class APICollection(BaseModel):
    """
    Paginated collection envelope.
    `total` is kept loosely typed; servers may omit it or send garbage.
    Navigation links are exposed but never followed automatically.
    """

    total: Any = None
    item: Optional[List[Dict[str, Any]]] = None
    first: Optional[Link] = None
    last: Optional[Link] = None
    prev: Optional[Link] = None
    next: Optional[Link] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def declared_total(self) -> int:
        if isinstance(self.total, bool) or not isinstance(self.total, Number):
            return UNKNOWN_TOTAL
        if isinstance(self.total, float) and not self.total.is_integer():
            return UNKNOWN_TOTAL
        return int(self.total)

    @property
    def items(self) -> List[Dict[str, Any]]:
        return self.item or []


class ServiceDocument(BaseModel):
    described_by: Link = Field(alias="describedBy")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


@dataclass(frozen=True)
class SortOrder:
    field_name: str
    ascending: bool = True

    def to_param(self) -> str:
        return f"{self.field_name}:{'asc' if self.ascending else 'desc'}"


def resource_self_href(resource: Any) -> Optional[str]:
    """Self link href of a dict or model resource."""
    if isinstance(resource, APIResource):
        return resource.self_href()
    if isinstance(resource, BaseModel):
        resource = resource.model_dump(by_alias=True)
    if isinstance(resource, dict):
        return links.get_link_href(resource, "self")
    return None


__all__ = [
    "COLLECTION_MEDIA_TYPE",
    "STREAMING_COLLECTION_MEDIA_TYPE",
    "UNKNOWN_TOTAL",
    "Link",
    "APIResource",
    "APICollection",
    "ServiceDocument",
    "SortOrder",
    "resource_self_href",
]
