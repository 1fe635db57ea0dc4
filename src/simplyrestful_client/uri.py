from typing import Optional
from urllib.parse import quote, unquote

import httpx

from .errors import ClientUsageError

ID_PLACEHOLDER = "{id}"

# Relative URIs are resolved against this unroutable origin so they can be
# handled as structured URLs. It must never show up in a request or a result.
PLACEHOLDER_HOST = "placeholderforrelativeurl"
PLACEHOLDER_ORIGIN = f"http://{PLACEHOLDER_HOST}/"


def join(base_path: str, relative_path: str) -> str:
    """
    Join two path segments with exactly one slash between them.
    Example: join('/api/', '/resources/{id}') -> '/api/resources/{id}'
    """
    relative_path = relative_path.lstrip("/")
    if base_path.endswith("/"):
        return base_path + relative_path
    return base_path + "/" + relative_path


def to_absolute(candidate: str) -> httpx.URL:
    """Resolve a relative or absolute URI string into an absolute httpx.URL."""
    return httpx.URL(PLACEHOLDER_ORIGIN).join(candidate)


def to_output_form(url: httpx.URL) -> str:
    """
    Inverse of to_absolute().
    Relative inputs come back as path (+ query); absolute inputs stay absolute.
    """
    if url.host == PLACEHOLDER_HOST:
        return url.raw_path.decode("ascii")
    return str(url)


def with_path(uri: str, path: str) -> str:
    """Replace the path of a relative or absolute URI, returned percent-decoded."""
    url = to_absolute(uri)
    url = url.copy_with(path=join(url.path, path))
    return unquote(to_output_form(url))


def require_template(template: Optional[str]) -> str:
    if not template:
        raise ClientUsageError(
            "The client needs to discover the resource URI template from the API "
            "before this method can be used. Use discover_api() first."
        )
    return template


def substitute_id(template: Optional[str], resource_id: Optional[str] = None) -> str:
    """
    Fill the id placeholder of a URI template.
    Without an id the placeholder is removed, giving the collection URI.
    """
    template = require_template(template)
    if not resource_id:
        return template.replace(ID_PLACEHOLDER, "", 1)
    return template.replace(ID_PLACEHOLDER, quote(str(resource_id), safe=""), 1)


def extract_id(template: str, uri: str) -> Optional[str]:
    """
    Recover the id from a URI built from `template`.
    Returns None when the URI does not fit the template.
    """
    prefix, sep, suffix = template.partition(ID_PLACEHOLDER)
    if not sep:
        return None
    if not uri.startswith(prefix) or not uri.endswith(suffix):
        return None
    end = len(uri) - len(suffix)
    if end <= len(prefix):
        return None
    return unquote(uri[len(prefix) : end])


__all__ = [
    "ID_PLACEHOLDER",
    "PLACEHOLDER_HOST",
    "PLACEHOLDER_ORIGIN",
    "join",
    "to_absolute",
    "to_output_form",
    "with_path",
    "require_template",
    "substitute_id",
    "extract_id",
]
