from typing import Any, Dict, Optional


def get_link(payload: Dict[str, Any], relation: str) -> Optional[Dict[str, Any]]:
    """
    Safely retrieves a link object stored under its relation name.
    SimplyRESTful resources keep links as top-level fields (e.g. 'self').
    """
    if not payload:
        return None
    link = payload.get(relation)
    return link if isinstance(link, dict) else None


def get_link_href(payload: Dict[str, Any], relation: str) -> Optional[str]:
    """
    Extracts the 'href' (URI) from a specific link relation.
    Example: get_link_href(resource, 'self') -> 'http://localhost/resources/1'
    """
    link = get_link(payload, relation)
    href = link.get("href") if link else None
    return href if isinstance(href, str) and href else None


def get_link_type(payload: Dict[str, Any], relation: str) -> Optional[str]:
    """
    Extracts the 'type' (media type of the target) from a link relation.
    Example: get_link_type(resource, 'self') -> 'application/x.testresource-v1+json'
    """
    link = get_link(payload, relation)
    return link.get("type") if link else None


__all__ = ["get_link", "get_link_href", "get_link_type"]
