"""Byte sources that supply growing prefixes of an image file."""

from __future__ import annotations

import hashlib
import http.client
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from .constants import DEFAULT_TIMEOUT
from .errors import SourceReadError

HTTP_SCHEMES = ("http://", "https://")
HTTP_RANGE_NOT_SATISFIABLE = 416
USER_AGENT = "imgprobe"


@runtime_checkable
class ByteSource(Protocol):
    """Supplies the first ``length`` bytes of an underlying object.

    A result shorter than ``length`` means the object has no more bytes.
    """

    @property
    def identifier(self) -> str: ...

    def read_prefix(self, length: int) -> bytes: ...


@dataclass(frozen=True, slots=True)
class BytesSource:
    """In-memory source, mostly useful for tests and already-buffered data.

    Without a ``label`` the identifier is derived from the content digest, so
    distinct buffers never share a cache entry.
    """

    data: bytes
    label: str | None = None

    @property
    def identifier(self) -> str:
        if self.label is not None:
            return self.label
        digest = hashlib.blake2b(self.data, digest_size=8).hexdigest()
        return f"<memory:{digest}>"

    def read_prefix(self, length: int) -> bytes:
        return bytes(self.data[: max(length, 0)])


@dataclass(frozen=True, slots=True)
class FileSource:
    path: Path

    @property
    def identifier(self) -> str:
        return str(self.path)

    def read_prefix(self, length: int) -> bytes:
        if length <= 0:
            return b""
        try:
            with self.path.open("rb") as f:
                return f.read(length)
        except OSError as err:
            msg = f"{self.path}: {err.strerror or err}"
            raise SourceReadError(msg) from err


@dataclass(frozen=True, slots=True)
class HttpSource:
    """Reads a URL prefix with a ``Range`` request starting at offset 0.

    Servers that ignore the range and answer ``200`` are tolerated; only the
    first ``length`` bytes of the body are read before the response is closed.
    """

    url: str
    timeout: float = DEFAULT_TIMEOUT

    @property
    def identifier(self) -> str:
        return self.url

    def read_prefix(self, length: int) -> bytes:
        if length <= 0:
            return b""
        request = urllib.request.Request(  # noqa: S310 - scheme checked by open_source
            self.url,
            headers={"Range": f"bytes=0-{length - 1}", "User-Agent": USER_AGENT},
        )
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:  # noqa: S310
                return response.read(length)
        except urllib.error.HTTPError as err:
            if err.code == HTTP_RANGE_NOT_SATISFIABLE:
                # the resource is empty
                return b""
            msg = f"{self.url}: HTTP {err.code} {err.reason}"
            raise SourceReadError(msg) from err
        except (OSError, http.client.HTTPException) as err:
            msg = f"{self.url}: {err}"
            raise SourceReadError(msg) from err


def is_url(ref: str) -> bool:
    return ref.lower().startswith(HTTP_SCHEMES)


def open_source(ref: str | Path, *, timeout: float = DEFAULT_TIMEOUT) -> ByteSource:
    """Return an HTTP source for http(s) references and a file source otherwise."""
    if isinstance(ref, str) and is_url(ref):
        return HttpSource(ref, timeout=timeout)
    return FileSource(Path(ref))


__all__ = ["ByteSource", "BytesSource", "FileSource", "HttpSource", "is_url", "open_source"]
