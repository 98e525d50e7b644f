"""Interface for the HTTP resource transport of the PIM REST API."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Mapping, Optional, Sequence

from domain.models import HttpResponse, RequestPart
from ports.adapter_error import AdapterError


class ResourceClient(ABC):
    """
    Generic transport for REST resources.

    Paths are templates such as ``api/rest/v1/media-files/{code}`` formatted
    with ``uri_parameters``. Implementations own authentication, headers and
    error mapping; they raise TransportError subclasses on failure.
    """

    @abstractmethod
    def get_resource(self, uri: str, uri_parameters: Mapping[str, Any]) -> dict:
        """
        Fetch a single resource.

        Args:
            uri: Path template of the resource.
            uri_parameters: Values for the template placeholders.

        Returns:
            Decoded JSON representation.

        Raises:
            TransportError: If the request fails.
        """
        pass

    @abstractmethod
    def get_resources(
        self,
        uri: str,
        uri_parameters: Mapping[str, Any],
        limit: Optional[int] = 10,
        with_count: Optional[bool] = False,
        query_parameters: Optional[Mapping[str, Any]] = None,
    ) -> dict:
        """
        Fetch one page of a resource collection.

        Args:
            uri: Path template of the collection.
            uri_parameters: Values for the template placeholders.
            limit: Page size.
            with_count: Whether the response must include the total count.
            query_parameters: Additional filter/sort parameters.

        Returns:
            Raw listing data as delivered by the API.

        Raises:
            AdapterError: If query_parameters redefine limit or with_count.
            TransportError: If the request fails.
        """
        pass

    @abstractmethod
    def get_page(self, uri: str) -> dict:
        """
        Fetch a listing page by its absolute URI (pagination link).

        Raises:
            TransportError: If the request fails.
        """
        pass

    @abstractmethod
    def create_multipart_resource(
        self,
        uri: str,
        uri_parameters: Mapping[str, Any],
        request_parts: Sequence[RequestPart],
    ) -> HttpResponse:
        """
        Create a resource from a multipart/form-data request.

        Args:
            uri: Path template of the collection.
            uri_parameters: Values for the template placeholders.
            request_parts: Named parts of the request body.

        Returns:
            The creation response (status, headers, body).

        Raises:
            TransportError: If the request fails.
        """
        pass

    @abstractmethod
    def get_streamed_resource(self, uri: str, uri_parameters: Mapping[str, Any]) -> BinaryIO:
        """
        Fetch a resource body as an open stream.

        The caller owns the returned stream and must close it.

        Raises:
            TransportError: If the request fails.
        """
        pass


class TransportError(AdapterError):
    """
    Base exception for transport failures (network, HTTP status, auth).

    Attributes:
        status_code: HTTP status, None for network-level failures.
        response_body: Decoded error body returned by the API, if any.
    """

    RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
    default_code = "TRANSPORT_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Any = None,
        code: Optional[str] = None,
    ):
        super().__init__(
            code=code or self.default_code,
            message=message,
            details={"status_code": status_code} if status_code is not None else None,
        )
        self.status_code = status_code
        self.response_body = response_body

    @property
    def retryable(self) -> bool:
        """Whether repeating the same request later may succeed."""
        return self.status_code in self.RETRYABLE_STATUS_CODES


class NetworkError(TransportError):
    """Connection failure or timeout; no HTTP response was received."""
    default_code = "NETWORK_ERROR"

    @property
    def retryable(self) -> bool:
        return True


class RedirectionError(TransportError):
    """Unexpected 3xx response."""
    default_code = "REDIRECTION"


class ClientError(TransportError):
    """4xx response."""
    default_code = "CLIENT_ERROR"


class BadRequestError(ClientError):
    """400 response."""
    default_code = "BAD_REQUEST"


class UnauthorizedError(ClientError):
    """401 response or failed token request."""
    default_code = "UNAUTHORIZED"


class NotFoundError(ClientError):
    """404 response."""
    default_code = "NOT_FOUND"


class UnprocessableEntityError(ClientError):
    """
    422 response: the API rejected the payload.

    Attributes:
        errors: Validation errors reported by the API (list of dicts).
    """
    default_code = "UNPROCESSABLE_ENTITY"

    @property
    def errors(self) -> list:
        if isinstance(self.response_body, dict):
            return list(self.response_body.get("errors", []))
        return []


class ServerError(TransportError):
    """5xx response."""
    default_code = "SERVER_ERROR"
