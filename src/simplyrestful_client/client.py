import json
import logging
import time
from typing import (
    Any,
    Dict,
    Generic,
    List,
    Mapping,
    NoReturn,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
    Union,
)

import httpx
from pydantic import BaseModel, ValidationError

from . import discovery, uri
from .core.observability import log_event
from .discovery import UNDISCOVERED, Discovered, DiscoveryState
from .errors import (
    LOCATION_HEADER,
    BadRequestError,
    ClientUsageError,
    ModelValidationError,
    NotFoundError,
    ParseError,
    SimplyRESTfulError,
    TransportError,
    from_response,
)
from .models import (
    COLLECTION_MEDIA_TYPE,
    STREAMING_COLLECTION_MEDIA_TYPE,
    UNKNOWN_TOTAL,
    APICollection,
    ServiceDocument,
    SortOrder,
    resource_self_href,
)

R = TypeVar("R")

HeadersLike = Union[httpx.Headers, Mapping[str, str], Sequence[Tuple[str, str]]]
ParamsLike = Union[httpx.QueryParams, Mapping[str, Any], Sequence[Tuple[str, Any]]]


class SimplyRESTfulClient(Generic[R]):
    """
    Client for one resource type of a SimplyRESTful API.
    - Discovers the resource URI template from the API's OpenAPI document
      (once per client; see set_resource_uri_template() to skip it)
    - Works with relative or absolute base URIs; relative URIs are resolved
      by the underlying httpx.AsyncClient
    - Returns dicts, or instances of `resource_model` if one is given
    - Raises WebApplicationError subclasses for non-success responses
    """

    def __init__(
        self,
        base_api_uri: str,
        resource_media_type: str,
        *,
        resource_model: Optional[Type[R]] = None,
        timeout_seconds: float = 10.0,
        headers: Optional[HeadersLike] = None,
        request_id: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        resource_media_type = (resource_media_type or "").strip()
        if not resource_media_type:
            raise ValueError("resource_media_type must be provided.")

        self.base_api_uri = base_api_uri or ""
        self.resource_media_type = resource_media_type
        self.resource_model = resource_model
        self.request_id = request_id
        self.log = logger or logging.getLogger("simplyrestful_client.client")
        self.last_collection_total = UNKNOWN_TOTAL
        self._state: DiscoveryState = UNDISCOVERED

        # Sent on every request, also through an injected transport.
        self.default_headers = httpx.Headers(headers)

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(timeout=timeout_seconds)

    @classmethod
    def from_env(cls, **kwargs: Any) -> "SimplyRESTfulClient[Any]":
        from .core.config import create_client_from_env

        return create_client_from_env(**kwargs)

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "SimplyRESTfulClient[R]":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # --- Discovery ---

    @property
    def discovery_state(self) -> DiscoveryState:
        return self._state

    @property
    def resource_uri_template(self) -> Optional[str]:
        if isinstance(self._state, Discovered):
            return self._state.uri_template
        return None

    def set_resource_uri_template(self, resource_uri_template: str) -> None:
        """
        Manually set the resource URI template, e.g. 'http://host/things/{id}'.

        This disables discovering it from the API, so later changes to the
        resource URI are not picked up. Discovery is the recommended way;
        it happens automatically if this method is never used.
        """
        if isinstance(self._state, Discovered):
            raise ClientUsageError(
                "The resource URI template is already set to "
                f"{self._state.uri_template} and can not be changed."
            )
        if uri.ID_PLACEHOLDER not in (resource_uri_template or ""):
            raise ClientUsageError(
                f"The resource URI template must contain {uri.ID_PLACEHOLDER}."
            )
        self._state = Discovered(resource_uri_template)

    async def discover_api(self, headers: Optional[HeadersLike] = None) -> None:
        """
        Resolve the resource URI template, unless it is already known.
        - GET the base API URI and follow its describedBy link
        - GET the OpenAPI document found there
        - Use the first path whose GET serves the resource media type
        Leaves the template unset if no path matches.
        """
        if isinstance(self._state, Discovered):
            return

        description_url = await self._retrieve_service_document(headers)
        description = await self._retrieve_api_description(description_url, headers)

        state, path = discovery.discover_from_description(
            self.base_api_uri, description, self.resource_media_type
        )
        if isinstance(state, Discovered):
            self._state = state
            log_event(
                "api_discovered",
                request_id=self.request_id,
                media_type=self.resource_media_type,
                uri_template=state.uri_template,
            )
        else:
            log_event(
                "api_discovery_no_match",
                request_id=self.request_id,
                media_type=self.resource_media_type,
            )

    async def _retrieve_service_document(self, headers: Optional[HeadersLike]) -> str:
        resp = await self._send(
            "discover", "GET", self.base_api_uri, headers=self._headers(headers)
        )
        if not resp.is_success:
            self._raise_classified(
                resp, f"The client could not access the API at {self.base_api_uri}"
            )
        payload = self._parse_object(resp, "GET", self.base_api_uri)
        try:
            service_document = ServiceDocument.model_validate(payload)
        except ValidationError as exc:
            raise ParseError(
                f"The service document at {self.base_api_uri} does not contain "
                f"a valid describedBy link: {exc}"
            ) from exc
        return service_document.described_by.href

    async def _retrieve_api_description(
        self, description_url: str, headers: Optional[HeadersLike]
    ) -> Dict[str, Any]:
        resp = await self._send(
            "discover", "GET", description_url, headers=self._headers(headers)
        )
        if not resp.is_success:
            self._raise_classified(
                resp,
                "The client could not retrieve the OpenAPI Specification "
                f"document at {description_url}",
            )
        return self._parse_object(resp, "GET", description_url)

    # --- CRUD ---

    async def list(
        self,
        *,
        page_start: Optional[int] = None,
        page_size: Optional[int] = None,
        fields: Optional[Sequence[str]] = None,
        query: Optional[str] = None,
        sort: Optional[Sequence[SortOrder]] = None,
        headers: Optional[HeadersLike] = None,
        params: Optional[ParamsLike] = None,
    ) -> List[R]:
        """
        Retrieve one page of the resource collection.
        Updates last_collection_total with the collection's declared total
        (-1 when the API does not provide one).
        """
        await self.discover_api(headers)
        target = self._collection_target(
            collection_params(
                page_start=page_start,
                page_size=page_size,
                fields=fields,
                query=query,
                sort=sort,
                params=params,
            )
        )

        resp = await self._send(
            "list",
            "GET",
            target,
            headers=self._headers(headers, Accept=COLLECTION_MEDIA_TYPE),
        )
        if not resp.is_success:
            self._raise_classified(resp, f"Failed to list the resource at {target}")

        payload = self._parse_object(resp, "GET", target)
        try:
            collection = APICollection.model_validate(payload)
        except ValidationError as exc:
            raise ParseError(
                f"Expected a collection from GET {target}, got: {exc}"
            ) from exc

        self.last_collection_total = collection.declared_total
        return [self._to_resource(item) for item in collection.items]

    async def stream(
        self,
        *,
        fields: Optional[Sequence[str]] = None,
        query: Optional[str] = None,
        sort: Optional[Sequence[SortOrder]] = None,
        headers: Optional[HeadersLike] = None,
        params: Optional[ParamsLike] = None,
    ) -> List[R]:
        """
        Retrieve the whole collection as a streamed JSON array (no paging).
        Sets last_collection_total to the number of resources received.
        """
        await self.discover_api(headers)
        target = self._collection_target(
            collection_params(fields=fields, query=query, sort=sort, params=params)
        )

        body = await self._stream_body(
            "stream",
            target,
            headers=self._headers(headers, Accept=STREAMING_COLLECTION_MEDIA_TYPE),
        )
        try:
            items = json.loads(body) if body else []
        except ValueError as exc:
            raise ParseError(
                f"Expected JSON from GET {target}, got non-JSON body snippet: "
                f"{body[:500]!r}"
            ) from exc
        if not isinstance(items, list):
            raise ParseError(
                f"Expected a JSON array from GET {target}, "
                f"got {type(items).__name__}"
            )

        self.last_collection_total = len(items)
        return [self._to_resource(item) for item in items]

    async def create(
        self,
        resource: R,
        *,
        headers: Optional[HeadersLike] = None,
        params: Optional[ParamsLike] = None,
    ) -> str:
        """Create a new resource; returns the URI from the Location header."""
        await self.discover_api(headers)
        target = self._target(
            uri.substitute_id(self.resource_uri_template), params=params
        )

        resp = await self._send(
            "create",
            "POST",
            target,
            headers=self._headers(headers, **{"Content-Type": self.resource_media_type}),
            json=self._serialize(resource),
        )
        if resp.status_code != 201:
            self._raise_classified(resp, "Failed to create the new resource")

        location = resp.headers.get(LOCATION_HEADER)
        if not location:
            raise ClientUsageError(
                "Resource seems to have been created but no location was returned. "
                "Please report this to the maintainers of the API"
            )
        return location

    async def read(
        self,
        resource_identifier: str,
        *,
        headers: Optional[HeadersLike] = None,
        params: Optional[ParamsLike] = None,
    ) -> R:
        """Read the resource at a relative or absolute URI."""
        await self.discover_api(headers)
        target = self._target(resource_identifier, params=params)

        resp = await self._send(
            "read",
            "GET",
            target,
            headers=self._headers(headers, Accept=self.resource_media_type),
        )
        if not resp.is_success:
            self._raise_classified(
                resp, f"Failed to read the resource at {resource_identifier}"
            )
        return self._to_resource(self._parse_object(resp, "GET", target))

    async def read_with_uuid(
        self,
        resource_id: str,
        *,
        headers: Optional[HeadersLike] = None,
        params: Optional[ParamsLike] = None,
    ) -> R:
        await self.discover_api(headers)
        resource_uri = uri.substitute_id(self.resource_uri_template, resource_id)
        return await self.read(resource_uri, headers=headers, params=params)

    async def update(
        self,
        resource: R,
        *,
        headers: Optional[HeadersLike] = None,
        params: Optional[ParamsLike] = None,
    ) -> None:
        """Replace the resource at its own self link."""
        self_href = resource_self_href(resource)
        if not self_href:
            raise BadRequestError(
                SimplyRESTfulError(
                    "The update failed because the resource does not contain "
                    "a valid self link."
                )
            )

        await self.discover_api(headers)
        target = self._target(self_href, params=params)

        resp = await self._send(
            "update",
            "PUT",
            target,
            headers=self._headers(headers, **{"Content-Type": self.resource_media_type}),
            json=self._serialize(resource),
        )
        if resp.status_code == 404:
            raise NotFoundError(
                SimplyRESTfulError(f"Resource at {target} could not be found"), resp
            )
        if not resp.is_success:
            self._raise_classified(resp, f"Failed to update the resource at {target}")

    async def delete(
        self,
        resource_identifier: str,
        *,
        headers: Optional[HeadersLike] = None,
        params: Optional[ParamsLike] = None,
    ) -> bool:
        """Delete the resource at a relative or absolute URI; True on 204."""
        await self.discover_api(headers)
        target = self._target(resource_identifier, params=params)

        resp = await self._send("delete", "DELETE", target, headers=self._headers(headers))
        if resp.status_code == 404:
            raise NotFoundError(
                SimplyRESTfulError(
                    f"Resource at {resource_identifier} could not be found"
                ),
                resp,
            )
        if resp.status_code != 204:
            self._raise_classified(
                resp, f"Failed to delete the resource at {resource_identifier}"
            )
        return True

    async def delete_with_uuid(
        self,
        resource_id: str,
        *,
        headers: Optional[HeadersLike] = None,
        params: Optional[ParamsLike] = None,
    ) -> bool:
        await self.discover_api(headers)
        resource_uri = uri.substitute_id(self.resource_uri_template, resource_id)
        return await self.delete(resource_uri, headers=headers, params=params)

    def id_of(self, resource_uri: str) -> Optional[str]:
        """Recover a resource's id from its URI using the resolved template."""
        template = uri.require_template(self.resource_uri_template)
        return uri.extract_id(template, resource_uri)

    # --- Request plumbing ---

    def _collection_target(self, pairs: List[Tuple[str, str]]) -> str:
        url = uri.to_absolute(uri.substitute_id(self.resource_uri_template))
        if pairs:
            url = url.copy_with(params=httpx.QueryParams(pairs))
        return uri.to_output_form(url)

    @staticmethod
    def _target(resource_uri: str, *, params: Optional[ParamsLike] = None) -> str:
        url = uri.to_absolute(resource_uri)
        if params:
            url = url.copy_merge_params(httpx.QueryParams(params))
        return uri.to_output_form(url)

    def _headers(self, headers: Optional[HeadersLike], **added: str) -> httpx.Headers:
        # Per-call headers override the constructor defaults by name. Caller
        # headers are kept; ours are appended, never replacing theirs.
        base = self.default_headers.copy()
        if headers:
            base.update(headers)
        merged = list(base.multi_items())
        merged.extend(added.items())
        return httpx.Headers(merged)

    async def _send(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        headers: httpx.Headers,
        json: Optional[Any] = None,
    ) -> httpx.Response:
        """
        Single HTTP exchange, no status interpretation.
        - Raises TransportError on network/timeout errors (no retries)
        - Logs an op_call event with status and duration
        """
        start = time.perf_counter()
        try:
            resp = await self.http.request(method, url, headers=headers, json=json)
        except httpx.HTTPError as exc:
            self._log_call(
                operation,
                method,
                url,
                start,
                status="exception",
                error_type=type(exc).__name__,
            )
            raise TransportError(
                f"Network/timeout error calling {method} {url}: {exc}"
            ) from exc

        self._log_call(operation, method, url, start, status=resp.status_code)
        return resp

    async def _stream_body(
        self, operation: str, url: str, *, headers: httpx.Headers
    ) -> bytes:
        start = time.perf_counter()
        try:
            async with self.http.stream("GET", url, headers=headers) as resp:
                if not resp.is_success:
                    await resp.aread()
                    self._log_call(operation, "GET", url, start, status=resp.status_code)
                    self._raise_classified(
                        resp, f"Failed to stream the resource at {url}"
                    )
                chunks = [chunk async for chunk in resp.aiter_bytes()]
        except httpx.HTTPError as exc:
            self._log_call(
                operation,
                "GET",
                url,
                start,
                status="exception",
                error_type=type(exc).__name__,
            )
            raise TransportError(
                f"Network/timeout error calling GET {url}: {exc}"
            ) from exc

        self._log_call(operation, "GET", url, start, status=resp.status_code)
        return b"".join(chunks)

    def _log_call(
        self,
        operation: str,
        method: str,
        url: str,
        start: float,
        **fields: Any,
    ) -> None:
        duration_ms = int((time.perf_counter() - start) * 1000)
        self.log.debug("%s %s -> %s", method, url, fields.get("status"))
        log_event(
            "op_call",
            request_id=self.request_id,
            operation=operation,
            method=method,
            endpoint=url,
            duration_ms=duration_ms,
            **fields,
        )

    @staticmethod
    def _raise_classified(resp: httpx.Response, message: str) -> NoReturn:
        cause = SimplyRESTfulError(
            f"{message}.\nThe API returned status {resp.status_code} "
            f"with message:\n{resp.text}"
        )
        raise from_response(resp, cause)

    @staticmethod
    def _parse_object(resp: httpx.Response, method: str, url: str) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as exc:
            snippet = (resp.text or "")[:500]
            raise ParseError(
                f"Expected JSON from {method} {url}, got non-JSON body snippet: "
                f"{snippet!r}"
            ) from exc

        if not isinstance(data, dict):
            raise ParseError(
                f"Expected top-level JSON object from {method} {url}, "
                f"got {type(data).__name__}"
            )
        return data

    def _to_resource(self, payload: Any) -> R:
        if self.resource_model is None:
            return payload
        try:
            return self.resource_model.model_validate(payload)
        except ValidationError as exc:
            raise ModelValidationError(
                f"Response did not match model {self.resource_model.__name__}: {exc}"
            ) from exc

    @staticmethod
    def _serialize(resource: Any) -> Any:
        if isinstance(resource, BaseModel):
            return resource.model_dump(mode="json", by_alias=True, exclude_unset=True)
        if isinstance(resource, Mapping):
            return dict(resource)
        raise TypeError(
            f"Resources must be mappings or pydantic models, got {type(resource).__name__}"  # noqa: E501
        )


def collection_params(
    *,
    page_start: Optional[int] = None,
    page_size: Optional[int] = None,
    fields: Optional[Sequence[str]] = None,
    query: Optional[str] = None,
    sort: Optional[Sequence[SortOrder]] = None,
    params: Optional[ParamsLike] = None,
) -> List[Tuple[str, str]]:
    """
    Build the query parameters of a collection request, in order.
    Zero and None both omit pageStart/pageSize (server defaults apply).
    Extra `params` go last and may repeat built-in names.
    """
    pairs: List[Tuple[str, str]] = []
    if page_start:
        pairs.append(("pageStart", str(page_start)))
    if page_size:
        pairs.append(("pageSize", str(page_size)))
    if fields:
        pairs.append(("fields", ",".join(fields)))
    if query:
        pairs.append(("query", query))
    if sort:
        pairs.append(("sort", ",".join(order.to_param() for order in sort)))
    if params:
        pairs.extend(httpx.QueryParams(params).multi_items())
    return pairs


__all__ = ["SimplyRESTfulClient", "collection_params"]
