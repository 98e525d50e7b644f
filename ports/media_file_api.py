"""Interface for the media-file API (product images and attachments)."""
from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Mapping, Optional, Union

from domain.models import MediaFileSource
from domain.pagination import Page, ResourceCursor
from ports.adapter_error import AdapterError


class MediaFileApi(ABC):
    """
    Media files of the PIM: fetch, list, traverse, upload and download.

    Implementation examples: PIM REST API v1.
    """

    @abstractmethod
    def get(self, code: str) -> dict:
        """
        Fetch one media file by its code.

        Args:
            code: Media file code.

        Returns:
            Representation as delivered by the API.

        Raises:
            TransportError: If the request fails (not found, network, auth).
        """
        pass

    @abstractmethod
    def list_per_page(
        self,
        limit: int = 10,
        with_count: bool = False,
        query_parameters: Optional[Mapping[str, Any]] = None,
    ) -> Page:
        """
        Fetch one page of media files.

        Args:
            limit: Page size.
            with_count: Include the total count (slower on the server side).
            query_parameters: Additional filter/sort parameters.

        Returns:
            Page of media files.

        Raises:
            TransportError: If the request fails.
        """
        pass

    @abstractmethod
    def all(
        self,
        page_size: int = 10,
        query_parameters: Optional[Mapping[str, Any]] = None,
    ) -> ResourceCursor:
        """
        Traverse every media file, fetching pages lazily.

        Args:
            page_size: Page size used for each request.
            query_parameters: Additional filter/sort parameters.

        Returns:
            Cursor positioned on the first page.

        Raises:
            TransportError: If the first request fails.
        """
        pass

    @abstractmethod
    def create(
        self,
        media_file: Union[MediaFileSource, str, os.PathLike, BinaryIO],
        product_data: Mapping[str, Any],
    ) -> str:
        """
        Upload a media file and attach it to a product.

        Args:
            media_file: Binary stream, file path or MediaFileSource.
            product_data: Product association (identifier, attribute, scope, locale).

        Returns:
            Code of the created media file.

        Raises:
            FileUnreadableError: If a path was given and cannot be read.
            MalformedCreationResponseError: If the code cannot be extracted.
            TransportError: If the request fails.
        """
        pass

    @abstractmethod
    def download(self, code: str) -> BinaryIO:
        """
        Download the binary content of a media file.

        The returned stream is open; the caller must read and close it.

        Raises:
            TransportError: If the request fails.
        """
        pass


class MediaFileApiError(AdapterError):
    """Base exception for media-file API errors raised by the client itself."""
    pass


class FileUnreadableError(MediaFileApiError):
    """The file to upload cannot be opened for reading."""

    def __init__(self, path: Union[str, os.PathLike], reason: Optional[str] = None):
        super().__init__(
            code="FILE_UNREADABLE",
            message=f'The file "{path}" could not be read.',
            details={"path": str(path), "reason": reason} if reason else {"path": str(path)},
        )
        self.path = str(path)


class MalformedCreationResponseError(MediaFileApiError):
    """The creation succeeded but its response does not identify the new media file."""
    pass


class MissingLocationHeaderError(MalformedCreationResponseError):
    """The creation response has no Location header."""

    def __init__(self, status_code: Optional[int] = None):
        super().__init__(
            code="MISSING_LOCATION_HEADER",
            message="The response does not contain the URI of the created media-file.",
            details={"status_code": status_code} if status_code is not None else None,
        )


class UnrecognizedLocationFormatError(MalformedCreationResponseError):
    """The Location header does not point to a media file."""

    def __init__(self, location: str):
        super().__init__(
            code="UNRECOGNIZED_LOCATION_FORMAT",
            message="Unable to find the code in the URI of the created media-file.",
            details={"location": location},
        )
        self.location = location
