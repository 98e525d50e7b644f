"""Media-file API client built on the generic resource transport."""
from __future__ import annotations

import json
import logging
import os
import re
from contextlib import ExitStack
from typing import Any, BinaryIO, Mapping, Optional, Union

from domain.models import HttpResponse, MediaFileSource, MediaSourceKind, RequestPart
from domain.pagination import Page, ResourceCursor
from ports.cursor_factory import CursorFactory
from ports.media_file_api import (
    FileUnreadableError,
    MediaFileApi,
    MissingLocationHeaderError,
    UnrecognizedLocationFormatError,
)
from ports.page_factory import PageFactory
from ports.resource_client import ResourceClient

logger = logging.getLogger(__name__)

MEDIA_FILES_URI = "api/rest/v1/media-files"
MEDIA_FILE_URI = "api/rest/v1/media-files/{code}"
MEDIA_FILE_DOWNLOAD_URI = "api/rest/v1/media-files/{code}/download"
MEDIA_FILE_URI_CODE_REGEX = re.compile(r"/api/rest/v1/media\-files/(?P<code>.*)$")


def extract_code_from_creation_response(response: HttpResponse) -> str:
    """
    Extract the code of a media file from its creation response.

    The code is everything after ``/api/rest/v1/media-files/`` in the
    Location header, returned verbatim.

    Raises:
        MissingLocationHeaderError: If the Location header is absent or empty.
        UnrecognizedLocationFormatError: If the header is not a media-file URI.
    """
    location = response.header("Location")
    if not location:
        raise MissingLocationHeaderError(status_code=response.status_code)

    match = MEDIA_FILE_URI_CODE_REGEX.search(location)
    if match is None:
        raise UnrecognizedLocationFormatError(location)

    return match.group("code")


class ProductMediaFileApi(MediaFileApi):
    """
    Media files attached to products.

    Stateless apart from its collaborators: a resource transport, a page
    factory and a cursor factory, all injected.
    """

    def __init__(
        self,
        resource_client: ResourceClient,
        page_factory: PageFactory,
        cursor_factory: CursorFactory,
    ):
        self.resource_client = resource_client
        self.page_factory = page_factory
        self.cursor_factory = cursor_factory

    def get(self, code: str) -> dict:
        _require_code(code)
        logger.debug(f"Fetching media file {code}")
        return self.resource_client.get_resource(MEDIA_FILE_URI, {"code": code})

    def list_per_page(
        self,
        limit: int = 10,
        with_count: bool = False,
        query_parameters: Optional[Mapping[str, Any]] = None,
    ) -> Page:
        _require_positive("limit", limit)
        data = self.resource_client.get_resources(
            MEDIA_FILES_URI,
            {},
            limit,
            with_count,
            dict(query_parameters or {}),
        )

        return self.page_factory.create_page(data)

    def all(
        self,
        page_size: int = 10,
        query_parameters: Optional[Mapping[str, Any]] = None,
    ) -> ResourceCursor:
        # The total count is never requested: traversal follows next links.
        first_page = self.list_per_page(page_size, False, query_parameters)

        return self.cursor_factory.create_cursor(page_size, first_page)

    def create(
        self,
        media_file: Union[MediaFileSource, str, os.PathLike, BinaryIO],
        product_data: Mapping[str, Any],
    ) -> str:
        source = MediaFileSource.of(media_file)

        with ExitStack() as stack:
            if source.kind is MediaSourceKind.PATH:
                stream = stack.enter_context(_open_readable(source.path))
            else:
                stream = source.stream

            request_parts = [
                RequestPart(name="product", contents=json.dumps(product_data)),
                RequestPart(name="file", contents=stream, filename=source.filename),
            ]

            logger.info(f"Uploading media file {source.filename or '<stream>'}")
            response = self.resource_client.create_multipart_resource(
                MEDIA_FILES_URI, {}, request_parts
            )

        code = extract_code_from_creation_response(response)
        logger.info(f"Media file created: code={code}")
        return code

    def download(self, code: str) -> BinaryIO:
        _require_code(code)
        logger.debug(f"Downloading media file {code}")
        return self.resource_client.get_streamed_resource(MEDIA_FILE_DOWNLOAD_URI, {"code": code})


def _open_readable(path) -> BinaryIO:
    """Open a file for binary reading, mapping OS errors to FileUnreadableError."""
    try:
        return open(path, "rb")
    except OSError as e:
        logger.error(f"Cannot read media file {path}: {e}")
        raise FileUnreadableError(path, reason=e.strerror or str(e)) from e


def _require_code(code: str) -> None:
    if not code:
        raise ValueError("Media file code must be a non-empty string")


def _require_positive(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
