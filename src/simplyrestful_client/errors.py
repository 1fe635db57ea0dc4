"""
Errors matching common HTTP status codes (modeled after JAX-RS exceptions).

A specific error class exists for every status code defined in RFC 7231 and
RFC 6585. Use from_response() (or from_status()) to get the right one; other
3xx, 4xx and 5xx codes produce the generic family class with that status.
"""

from typing import Dict, Optional, Type

import httpx

LOCATION_HEADER = "Location"


class SimplyRESTfulError(Exception):
    """Base error for client failures."""


class ClientUsageError(SimplyRESTfulError):
    """The client was used in a way the API contract does not allow."""


class StatusContractError(SimplyRESTfulError, ValueError):
    """An error was requested for a status (or response) that cannot carry one."""


class TransportError(SimplyRESTfulError):
    """Network/timeout failure raised by the underlying HTTP transport."""


class ParseError(SimplyRESTfulError):
    pass


class ModelValidationError(SimplyRESTfulError):
    pass


class WebApplicationError(SimplyRESTfulError):
    min_status = 300
    max_status = 600

    def __init__(
        self,
        status: int,
        reason: Optional[str] = None,
        cause: Optional[BaseException] = None,
        response: Optional[httpx.Response] = None,
    ):
        if status < self.min_status or status >= self.max_status:
            raise StatusContractError(
                f"Status code for {type(self).__name__} must be in the range "
                f"[{self.min_status}, {self.max_status}), got {status}"
            )
        super().__init__(_describe(status, reason, cause))
        self.status = status
        self.reason = reason
        self.cause = cause
        self.response = response
        self.__cause__ = cause


class RedirectionError(WebApplicationError):
    min_status = 300
    max_status = 400

    def __init__(
        self,
        status: int,
        location: str,
        reason: Optional[str] = None,
        cause: Optional[BaseException] = None,
        response: Optional[httpx.Response] = None,
    ):
        super().__init__(status, reason, cause, response)
        self.location = location


class ClientError(WebApplicationError):
    min_status = 400
    max_status = 500


class ServerError(WebApplicationError):
    min_status = 500
    max_status = 600


class _FixedStatusMixin:
    status_code: int
    default_reason: str

    def __init__(
        self,
        cause: Optional[BaseException] = None,
        response: Optional[httpx.Response] = None,
    ):
        super().__init__(self.status_code, self.default_reason, cause, response)


# --- 4xx (RFC 7231 section 6.5, RFC 6585) ---


class BadRequestError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 400, "Bad Request"


class NotAuthorizedError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 401, "Unauthorized"


class PaymentRequiredError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 402, "Payment Required"


class ForbiddenError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 403, "Forbidden"


class NotFoundError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 404, "Not Found"


class NotAllowedError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 405, "Method Not Allowed"


class NotAcceptableError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 406, "Not Acceptable"


class ProxyAuthenticationRequiredError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 407, "Proxy Authentication Required"


class RequestTimeoutError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 408, "Request Timeout"


class ConflictError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 409, "Conflict"


class GoneError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 410, "Gone"


class LengthRequiredError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 411, "Length Required"


class PreconditionFailedError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 412, "Precondition Failed"


class PayloadTooLargeError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 413, "Payload Too Large"


class UriTooLongError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 414, "URI Too Long"


class NotSupportedError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 415, "Unsupported Media Type"


class RangeNotSatisfiableError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 416, "Range Not Satisfiable"


class ExpectationFailedError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 417, "Expectation Failed"


class UpgradeRequiredError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 426, "Upgrade Required"


class PreconditionRequiredError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 428, "Precondition Required"


class TooManyRequestsError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 429, "Too Many Requests"


class RequestHeaderFieldsTooLargeError(_FixedStatusMixin, ClientError):
    status_code, default_reason = 431, "Request Header Fields Too Large"


# --- 5xx ---


class InternalServerError(_FixedStatusMixin, ServerError):
    status_code, default_reason = 500, "Internal Server Error"


class NotImplementedServerError(_FixedStatusMixin, ServerError):
    status_code, default_reason = 501, "Not Implemented"


class BadGatewayError(_FixedStatusMixin, ServerError):
    status_code, default_reason = 502, "Bad Gateway"


class ServiceUnavailableError(_FixedStatusMixin, ServerError):
    status_code, default_reason = 503, "Service Unavailable"


class GatewayTimeoutError(_FixedStatusMixin, ServerError):
    status_code, default_reason = 504, "Gateway Timeout"


ERRORS_BY_STATUS: Dict[int, Type[WebApplicationError]] = {
    cls.status_code: cls
    for cls in (
        BadRequestError,
        NotAuthorizedError,
        PaymentRequiredError,
        ForbiddenError,
        NotFoundError,
        NotAllowedError,
        NotAcceptableError,
        ProxyAuthenticationRequiredError,
        RequestTimeoutError,
        ConflictError,
        GoneError,
        LengthRequiredError,
        PreconditionFailedError,
        PayloadTooLargeError,
        UriTooLongError,
        NotSupportedError,
        RangeNotSatisfiableError,
        ExpectationFailedError,
        UpgradeRequiredError,
        PreconditionRequiredError,
        TooManyRequestsError,
        RequestHeaderFieldsTooLargeError,
        InternalServerError,
        NotImplementedServerError,
        BadGatewayError,
        ServiceUnavailableError,
        GatewayTimeoutError,
    )
}

REDIRECTION_REASONS: Dict[int, str] = {
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    307: "Temporary Redirect",
}

SERVER_ERROR_REASONS: Dict[int, str] = {
    505: "HTTP Version Not Supported",
    511: "Network Authentication Required",
}

DEFAULT_CLIENT_ERROR_REASON = "Client Error"


def _describe(
    status: int, reason: Optional[str], cause: Optional[BaseException]
) -> str:
    text = f"{status} {reason}" if reason else str(status)
    if cause is not None:
        text = f"{text}: {cause}"
    return text


def from_status(
    status: int,
    *,
    location: Optional[str] = None,
    reason: Optional[str] = None,
    cause: Optional[BaseException] = None,
    response: Optional[httpx.Response] = None,
) -> WebApplicationError:
    """
    Classify a status code into the matching WebApplicationError.
    - Raises StatusContractError for statuses outside [300, 600)
    - Raises StatusContractError for a 3xx status without a location
    - `reason` is only used for codes that have no fixed reason phrase
    """
    if status < 300 or status >= 600:
        raise StatusContractError(
            "Status codes that are not in the ranges 3xx, 4xx or 5xx do not imply an error"  # noqa: E501
        )

    if status < 400:
        if not location:
            raise StatusContractError(
                "When status code is in range 3xx, a location URI must be "
                "included in the Location HTTP header of the response"
            )
        return RedirectionError(
            status, location, REDIRECTION_REASONS.get(status), cause, response
        )

    named = ERRORS_BY_STATUS.get(status)
    if named is not None:
        return named(cause, response)

    if status < 500:
        return ClientError(
            status, reason or DEFAULT_CLIENT_ERROR_REASON, cause, response
        )
    return ServerError(
        status, SERVER_ERROR_REASONS.get(status, reason), cause, response
    )


def from_response(
    response: httpx.Response, cause: Optional[BaseException] = None
) -> WebApplicationError:
    """Classify a non-success transport response into a WebApplicationError."""
    return from_status(
        response.status_code,
        location=response.headers.get(LOCATION_HEADER),
        reason=response.reason_phrase or None,
        cause=cause,
        response=response,
    )


__all__ = [
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
    "PaymentRequiredError",
    "ForbiddenError",
    "NotFoundError",
    "NotAllowedError",
    "NotAcceptableError",
    "ProxyAuthenticationRequiredError",
    "RequestTimeoutError",
    "ConflictError",
    "GoneError",
    "LengthRequiredError",
    "PreconditionFailedError",
    "PayloadTooLargeError",
    "UriTooLongError",
    "NotSupportedError",
    "RangeNotSatisfiableError",
    "ExpectationFailedError",
    "UpgradeRequiredError",
    "PreconditionRequiredError",
    "TooManyRequestsError",
    "RequestHeaderFieldsTooLargeError",
    "InternalServerError",
    "NotImplementedServerError",
    "BadGatewayError",
    "ServiceUnavailableError",
    "GatewayTimeoutError",
    "ERRORS_BY_STATUS",
    "from_status",
    "from_response",
]
