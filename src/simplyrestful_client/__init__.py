"""simplyrestful_client package exports."""

from .client import SimplyRESTfulClient, collection_params
from .core.config import create_client_from_env, load_env_config
from .discovery import Discovered, Undiscovered
from .errors import (
    BadGatewayError,
    BadRequestError,
    ClientError,
    ClientUsageError,
    ForbiddenError,
    GatewayTimeoutError,
    InternalServerError,
    ModelValidationError,
    NotAcceptableError,
    NotAllowedError,
    NotAuthorizedError,
    NotFoundError,
    NotImplementedServerError,
    NotSupportedError,
    ParseError,
    RedirectionError,
    ServerError,
    ServiceUnavailableError,
    SimplyRESTfulError,
    StatusContractError,
    TransportError,
    WebApplicationError,
    from_response,
    from_status,
)
from .links import get_link, get_link_href, get_link_type
from .models import (
    COLLECTION_MEDIA_TYPE,
    STREAMING_COLLECTION_MEDIA_TYPE,
    APICollection,
    APIResource,
    Link,
    SortOrder,
)

__all__ = [
    # Client
    "SimplyRESTfulClient",
    "collection_params",
    "Discovered",
    "Undiscovered",
    # Models
    "Link",
    "APIResource",
    "APICollection",
    "SortOrder",
    "COLLECTION_MEDIA_TYPE",
    "STREAMING_COLLECTION_MEDIA_TYPE",
    # Exceptions
    "SimplyRESTfulError",
    "ClientUsageError",
    "StatusContractError",
    "TransportError",
    "ParseError",
    "ModelValidationError",
    "WebApplicationError",
    "RedirectionError",
    "ClientError",
    "ServerError",
    "BadRequestError",
    "NotAuthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "NotAllowedError",
    "NotAcceptableError",
    "NotSupportedError",
    "InternalServerError",
    "NotImplementedServerError",
    "BadGatewayError",
    "ServiceUnavailableError",
    "GatewayTimeoutError",
    "from_response",
    "from_status",
    # Link utilities
    "get_link",
    "get_link_href",
    "get_link_type",
    # Config helpers
    "create_client_from_env",
    "load_env_config",
]
