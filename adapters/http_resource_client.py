"""HTTP resource transport for the PIM REST API, built on requests."""
from __future__ import annotations

import json
import logging
from typing import Any, BinaryIO, Mapping, Optional, Sequence
from urllib.parse import quote, urlencode

import requests

from domain.models import HttpResponse, RequestPart
from ports.adapter_error import AdapterError
from ports.resource_client import (
    BadRequestError,
    ClientError,
    NetworkError,
    NotFoundError,
    RedirectionError,
    ResourceClient,
    ServerError,
    TransportError,
    UnauthorizedError,
    UnprocessableEntityError,
)

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Accept": "application/json"}
DEFAULT_FILENAME = "file"


class HttpResourceClient(ResourceClient):
    """
    requests-based implementation of ResourceClient.

    Authentication is carried by the session (see adapters.oauth_session);
    this class only builds URIs, sends requests and maps error statuses.
    """

    STATUS_ERRORS = {
        400: BadRequestError,
        401: UnauthorizedError,
        404: NotFoundError,
        422: UnprocessableEntityError,
    }

    def __init__(
        self,
        base_uri: str,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ):
        """
        Initialize HTTP resource client.

        Args:
            base_uri: Root of the PIM, e.g. https://pim.example.com.
            session: Session used for every request (authenticated, usually).
                     If None, a plain requests.Session is created.
            timeout: Timeout in seconds for connect and read.
        """
        self.base_uri = base_uri.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def get_resource(self, uri: str, uri_parameters: Mapping[str, Any]) -> dict:
        url = self.generate_uri(uri, uri_parameters)
        response = self._send("GET", url, headers=JSON_HEADERS)
        return self._decode_json(response)

    def get_resources(
        self,
        uri: str,
        uri_parameters: Mapping[str, Any],
        limit: Optional[int] = 10,
        with_count: Optional[bool] = False,
        query_parameters: Optional[Mapping[str, Any]] = None,
    ) -> dict:
        query = dict(query_parameters or {})
        for reserved in ("limit", "with_count"):
            if reserved in query:
                raise AdapterError(
                    code="INVALID_ARGUMENT",
                    message=f'The parameter "{reserved}" should not be defined in the additional query parameters',
                    details={"query_parameters": query},
                )

        if limit is not None:
            query["limit"] = limit
        if with_count is not None:
            query["with_count"] = with_count

        url = self.generate_uri(uri, uri_parameters, query)
        response = self._send("GET", url, headers=JSON_HEADERS)
        return self._decode_json(response)

    def get_page(self, uri: str) -> dict:
        response = self._send("GET", uri, headers=JSON_HEADERS)
        return self._decode_json(response)

    def create_multipart_resource(
        self,
        uri: str,
        uri_parameters: Mapping[str, Any],
        request_parts: Sequence[RequestPart],
    ) -> HttpResponse:
        url = self.generate_uri(uri, uri_parameters)

        files = []
        for part in request_parts:
            # Binary parts always carry a filename; string parts stay plain form fields.
            filename = part.filename
            if filename is None and not isinstance(part.contents, str):
                filename = DEFAULT_FILENAME
            files.append((part.name, (filename, part.contents)))

        response = self._send("POST", url, files=files)
        return HttpResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )

    def get_streamed_resource(self, uri: str, uri_parameters: Mapping[str, Any]) -> BinaryIO:
        url = self.generate_uri(uri, uri_parameters)
        response = self._send("GET", url, stream=True, headers={"Accept": "*/*"})
        response.raw.decode_content = True
        return response.raw

    def generate_uri(
        self,
        path: str,
        uri_parameters: Optional[Mapping[str, Any]] = None,
        query_parameters: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """
        Build an absolute URI from a path template and parameters.

        Path parameters are percent-encoded except for "/". Boolean query
        values become "true"/"false"; dict and list values are JSON-encoded.
        """
        encoded = {
            name: quote(str(value), safe="/")
            for name, value in (uri_parameters or {}).items()
        }
        url = f"{self.base_uri}/{path.format(**encoded)}"

        if query_parameters:
            url = f"{url}?{urlencode(_stringify_query(query_parameters))}"

        return url

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.error(f"Network error on {method} {url}: {e}")
            raise NetworkError(f"Network error on {method} {url}: {e}") from e

        logger.debug(f"{method} {url} -> {response.status_code}")
        if response.status_code >= 300:
            raise self._map_error(method, response)

        return response

    def _map_error(self, method: str, response: requests.Response) -> TransportError:
        status = response.status_code
        body = _decode_error_body(response)
        message = body.get("message") if isinstance(body, dict) else None
        message = message or f"HTTP error {status}"

        if status in self.STATUS_ERRORS:
            error_class = self.STATUS_ERRORS[status]
        elif status < 400:
            error_class = RedirectionError
        elif status < 500:
            error_class = ClientError
        else:
            error_class = ServerError

        logger.error(f"PIM API error {status} on {method} {response.url}: {message}")
        return error_class(message, status_code=status, response_body=body)

    def _decode_json(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON in response from {response.url}",
                status_code=response.status_code,
                response_body=response.text,
                code="INVALID_RESPONSE",
            ) from e


def _stringify_query(query_parameters: Mapping[str, Any]) -> dict:
    query = {}
    for name, value in query_parameters.items():
        if isinstance(value, bool):
            query[name] = "true" if value else "false"
        elif isinstance(value, (dict, list)):
            query[name] = json.dumps(value)
        else:
            query[name] = value
    return query


def _decode_error_body(response: requests.Response) -> Any:
    if 300 <= response.status_code < 400:
        return {"location": response.headers.get("Location")}
    try:
        return response.json()
    except ValueError:
        return response.text
