from __future__ import annotations

import os
from typing import Any, Tuple

from dotenv import load_dotenv

API_URI_ENV = "SIMPLYRESTFUL_API_URI"
MEDIA_TYPE_ENV = "SIMPLYRESTFUL_RESOURCE_MEDIA_TYPE"
TIMEOUT_ENV = "SIMPLYRESTFUL_TIMEOUT_SECONDS"
DEFAULT_TIMEOUT_SECONDS = 10.0


def load_env_config(*, use_dotenv: bool = True) -> Tuple[str, str]:
    """Load the API base URI and resource media type from environment (optional .env)."""  # noqa: E501
    if use_dotenv:
        load_dotenv()
    api_uri = os.getenv(API_URI_ENV, "").strip()
    media_type = os.getenv(MEDIA_TYPE_ENV, "").strip()
    return api_uri, media_type


def load_timeout_seconds() -> float:
    raw = os.getenv(TIMEOUT_ENV, "").strip()
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{TIMEOUT_ENV} must be a number, got {raw!r}") from exc


def create_client_from_env(**kwargs: Any):
    """Create a SimplyRESTfulClient from environment variables."""
    from ..client import SimplyRESTfulClient

    api_uri, media_type = load_env_config()
    if not api_uri or not media_type:
        raise ValueError(f"Missing {API_URI_ENV} or {MEDIA_TYPE_ENV} in environment.")
    kwargs.setdefault("timeout_seconds", load_timeout_seconds())
    return SimplyRESTfulClient(
        base_api_uri=api_uri, resource_media_type=media_type, **kwargs
    )


__all__ = [
    "API_URI_ENV",
    "MEDIA_TYPE_ENV",
    "TIMEOUT_ENV",
    "DEFAULT_TIMEOUT_SECONDS",
    "load_env_config",
    "load_timeout_seconds",
    "create_client_from_env",
]
