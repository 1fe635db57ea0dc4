"""
API discovery: locate the resource URI template of one media type.

service root --describedBy--> OpenAPI document --paths--> URI template

Only the path's GET responses ('default' or 2xx) are considered, and only by
their declared content types. The first matching path, in document order,
wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple, Union

from . import uri


@dataclass(frozen=True)
class Undiscovered:
    pass


@dataclass(frozen=True)
class Discovered:
    uri_template: str


DiscoveryState = Union[Undiscovered, Discovered]

UNDISCOVERED = Undiscovered()


def _is_success_key(status_key: Any) -> bool:
    key = str(status_key).strip()
    if key == "default":
        return True
    try:
        status = int(key)
    except ValueError:
        return False
    return 200 <= status < 300


def _normalize_media_type(content_type: str) -> str:
    return content_type.replace(" ", "")


def iter_success_media_types(path_item: Any) -> Iterator[str]:
    """Yield the normalized content types of a path's successful GET responses."""
    if not isinstance(path_item, dict):
        return
    get_operation = path_item.get("get")
    if not isinstance(get_operation, dict):
        return
    responses = get_operation.get("responses")
    if not isinstance(responses, dict):
        return
    for status_key, response in responses.items():
        if not _is_success_key(status_key) or not isinstance(response, dict):
            continue
        content = response.get("content")
        if not isinstance(content, dict):
            continue
        for content_type in content:
            yield _normalize_media_type(content_type)


def find_resource_path(
    description: Dict[str, Any], media_type: str
) -> Optional[str]:
    """
    Return the first path whose GET serves `media_type` on success.
    Example: find_resource_path(openapi, 'application/x.test-v1+json') -> '/tests/{id}'
    """
    paths = description.get("paths") if isinstance(description, dict) else None
    if not isinstance(paths, dict):
        return None
    for path, path_item in paths.items():
        if not path_item:
            continue
        if media_type in iter_success_media_types(path_item):
            return path
    return None


def resolve_uri_template(base_api_uri: str, discovered_path: str) -> str:
    """Join the API base URI's path with a discovered path into a URI template."""
    return uri.with_path(base_api_uri, discovered_path)


def discover_from_description(
    base_api_uri: str, description: Dict[str, Any], media_type: str
) -> Tuple[DiscoveryState, Optional[str]]:
    """Compute the discovery state from an API description (no I/O)."""
    path = find_resource_path(description, media_type)
    if path is None:
        return UNDISCOVERED, None
    return Discovered(resolve_uri_template(base_api_uri, path)), path


__all__ = [
    "Undiscovered",
    "Discovered",
    "DiscoveryState",
    "UNDISCOVERED",
    "iter_success_media_types",
    "find_resource_path",
    "resolve_uri_template",
    "discover_from_description",
]
