"""Domain models for the media-file client."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Mapping, Optional, Union

from requests.structures import CaseInsensitiveDict


class MediaSourceKind(str, Enum):
    """Kind of binary content source."""
    STREAM = "stream"
    PATH = "path"


@dataclass(frozen=True)
class MediaFileSource:
    """
    Binary content to upload: either an open byte stream or a file path.

    Use from_stream()/from_path(), or of() to wrap whatever the caller passed.
    """
    kind: MediaSourceKind
    stream: Optional[BinaryIO] = None
    path: Optional[Path] = None

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "MediaFileSource":
        return cls(kind=MediaSourceKind.STREAM, stream=stream)

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike]) -> "MediaFileSource":
        return cls(kind=MediaSourceKind.PATH, path=Path(path))

    @classmethod
    def of(cls, media_file: Union["MediaFileSource", str, os.PathLike, BinaryIO]) -> "MediaFileSource":
        """Wrap a path, a binary stream or an existing source."""
        if isinstance(media_file, MediaFileSource):
            return media_file
        if isinstance(media_file, (str, os.PathLike)):
            return cls.from_path(media_file)
        return cls.from_stream(media_file)

    @property
    def filename(self) -> Optional[str]:
        """Best-effort file name sent with the multipart part."""
        if self.path is not None:
            return self.path.name
        name = getattr(self.stream, "name", None)
        if isinstance(name, str) and name:
            return os.path.basename(name)
        return None


@dataclass
class RequestPart:
    """One named part of a multipart/form-data request."""
    name: str
    contents: Union[str, bytes, BinaryIO]
    filename: Optional[str] = None


@dataclass
class HttpResponse:
    """
    Transport-neutral HTTP response.

    Header lookups are case-insensitive.
    """
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self):
        """Normalize headers to a case-insensitive mapping."""
        if not isinstance(self.headers, CaseInsensitiveDict):
            self.headers = CaseInsensitiveDict(self.headers or {})

    def header(self, name: str) -> Optional[str]:
        """Return a header value, or None when absent."""
        return self.headers.get(name)
