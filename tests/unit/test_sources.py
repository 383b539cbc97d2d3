from __future__ import annotations

import io
import urllib.error
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from imgprobe import sources
from imgprobe.errors import SourceReadError
from imgprobe.sources import ByteSource, BytesSource, FileSource, HttpSource, is_url, open_source

if TYPE_CHECKING:
    import urllib.request

pytestmark = pytest.mark.small


class _FakeResponse(io.BytesIO):
    def __enter__(self) -> _FakeResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def test_bytes_source_returns_prefix() -> None:
    src = BytesSource(b"abcdef", label="buf")
    assert src.identifier == "buf"
    assert src.read_prefix(3) == b"abc"
    assert src.read_prefix(100) == b"abcdef"
    assert src.read_prefix(0) == b""
    assert isinstance(src, ByteSource)


def test_unlabelled_bytes_sources_are_identified_by_content() -> None:
    a = BytesSource(b"first image")
    b = BytesSource(b"second image")
    assert a.identifier.startswith("<memory:")
    assert a.identifier != b.identifier
    assert BytesSource(b"first image").identifier == a.identifier



def test_file_source_reads_leading_bytes(tmp_path: Path) -> None:
    p = tmp_path / "blob.bin"
    p.write_bytes(bytes(range(50)))
    src = FileSource(p)
    assert src.identifier == str(p)
    assert src.read_prefix(4) == b"\x00\x01\x02\x03"
    assert src.read_prefix(500) == bytes(range(50))


def test_file_source_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(SourceReadError, match="missing.png"):
        FileSource(tmp_path / "missing.png").read_prefix(10)


def test_open_source_dispatches_on_scheme(tmp_path: Path) -> None:
    assert isinstance(open_source("https://example.com/a.png"), HttpSource)
    assert isinstance(open_source("HTTP://example.com/a.png"), HttpSource)
    assert isinstance(open_source(str(tmp_path / "a.png")), FileSource)
    assert isinstance(open_source(tmp_path / "a.png"), FileSource)
    assert open_source("https://example.com/a.png", timeout=2.5).timeout == 2.5  # type: ignore[attr-defined]


@pytest.mark.parametrize(
    ("ref", "expected"),
    [("http://x/y", True), ("https://x/y", True), ("ftp://x/y", False), ("photo.jpg", False)],
)
def test_is_url(ref: str, *, expected: bool) -> None:
    assert is_url(ref) is expected


def test_http_source_sends_range_request(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, Any] = {}

    def fake_urlopen(request: urllib.request.Request, timeout: float) -> _FakeResponse:
        seen["range"] = request.get_header("Range")
        seen["url"] = request.full_url
        seen["timeout"] = timeout
        return _FakeResponse(b"0123456789")

    monkeypatch.setattr(sources.urllib.request, "urlopen", fake_urlopen)
    data = HttpSource("https://example.com/img.jpg", timeout=3.0).read_prefix(4)
    assert data == b"0123"
    assert seen == {"range": "bytes=0-3", "url": "https://example.com/img.jpg", "timeout": 3.0}


def test_http_source_empty_resource(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(request: urllib.request.Request, timeout: float) -> _FakeResponse:
        msg = "Range Not Satisfiable"
        raise urllib.error.HTTPError(request.full_url, 416, msg, None, None)  # type: ignore[arg-type]

    monkeypatch.setattr(sources.urllib.request, "urlopen", fake_urlopen)
    assert HttpSource("https://example.com/empty").read_prefix(16) == b""


@pytest.mark.parametrize(
    "error",
    [
        urllib.error.HTTPError("https://example.com/x", 404, "Not Found", None, None),  # type: ignore[arg-type]
        urllib.error.URLError("name resolution failed"),
        TimeoutError("timed out"),
    ],
)
def test_http_source_wraps_network_errors(monkeypatch: pytest.MonkeyPatch, error: Exception) -> None:
    def fake_urlopen(request: urllib.request.Request, timeout: float) -> _FakeResponse:
        raise error

    monkeypatch.setattr(sources.urllib.request, "urlopen", fake_urlopen)
    with pytest.raises(SourceReadError, match="example.com"):
        HttpSource("https://example.com/x").read_prefix(16)


def test_http_source_zero_length_skips_request(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(*_: object, **__: object) -> _FakeResponse:
        msg = "no request expected"
        raise AssertionError(msg)

    monkeypatch.setattr(sources.urllib.request, "urlopen", fake_urlopen)
    assert HttpSource("https://example.com/x").read_prefix(0) == b""
