from __future__ import annotations

import pytest

try:  # import at module level; skip the whole module if unavailable
    from hypothesis import given
    from hypothesis import strategies as st
except ImportError:  # pragma: no cover - tooling availability
    pytest.skip("hypothesis not available", allow_module_level=True)

from imgprobe import Found, NeedMoreData, Unsupported, decode
from imgprobe.constants import SupportedFormat
from tests.support import bmp_bytes, dqt_segment, gif_bytes, jpeg_bytes, png_bytes

DIMENSION = st.integers(min_value=1, max_value=0xFFFF)
MAGIC_PREFIXES = st.sampled_from([b"\xff\xd8", b"\x89P", b"GI", b"BM", b"\xff\xd8\xff\xe0"])


@given(st.binary(max_size=512))
def test_arbitrary_bytes_always_resolve_to_an_outcome(data: bytes) -> None:
    assert isinstance(decode("fuzz", data), (Found, NeedMoreData, Unsupported))


@given(MAGIC_PREFIXES, st.binary(max_size=256))
def test_known_signature_with_garbage_never_raises(prefix: bytes, tail: bytes) -> None:
    outcome = decode("fuzz", prefix + tail)
    if isinstance(outcome, Found):
        assert outcome.info.bytes_examined <= len(prefix) + len(tail)
    else:
        assert outcome.format in SupportedFormat


@given(
    kind=st.sampled_from(["gif", "png", "bmp", "jpeg"]),
    width=DIMENSION,
    height=DIMENSION,
    cut=st.integers(min_value=0, max_value=200),
)
def test_prefixes_of_valid_headers_never_contradict(kind: str, width: int, height: int, cut: int) -> None:
    builders = {
        "gif": lambda: gif_bytes(width, height),
        "png": lambda: png_bytes(width, height),
        "bmp": lambda: bmp_bytes(width, height),
        "jpeg": lambda: jpeg_bytes(width, height, before_sof=(dqt_segment(),)),
    }
    data = builders[kind]()
    prefix = decode("p", data[:cut])
    full = decode("p", data)
    assert isinstance(full, Found)
    assert (full.info.width, full.info.height) == (width, height)
    assert not isinstance(prefix, Unsupported)
    if isinstance(prefix, Found):
        assert prefix == full
