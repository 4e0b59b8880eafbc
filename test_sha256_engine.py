import hashlib
import io
import os
import stat
from types import SimpleNamespace
from concurrent.futures import ThreadPoolExecutor

import pytest

from block_trace import BlockTrace
from sha256_engine import (
    DigestContext,
    digest,
    digest_bytes,
    digest_file,
    hexdigest,
)
from sha256_constants import DIGEST_SIZE
from sha256_errors import InputUnavailableError, InvalidUsageError
from sha256_padding import PaddingCase


# FIPS 180-4 / NIST test vectors plus a few well-known strings.
TEST_VECTORS = [
    (b"", "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"),
    (b"abc", "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"),
    (
        b"abcdbcdecdefdefgefghfghighijhijkijkljklmklmnlmnomnopnopq",
        "248d6a61d20638b8e5c026930c3e6039a33ce45964ff2167f6ecedd419db06c1",
    ),
    (b"hello", "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"),
    (
        b"The quick brown fox jumps over the lazy dog",
        "d7a8fbb307d7809469ca9abcb0082e4f8d5651e46d3cdb762d02d0bf37c9e592",
    ),
]


class UnseekableStream(io.RawIOBase):
    """Pipe-like stream: readable, not seekable, no known length."""

    def __init__(self, data: bytes) -> None:
        self._buf = io.BytesIO(data)

    def readable(self):
        return True

    def seekable(self):
        return False

    def read(self, n=-1):
        return self._buf.read(n)


def _pattern(length: int) -> bytes:
    return bytes((i * 131 + 7) & 0xFF for i in range(length))


@pytest.mark.parametrize("data,expected_hex", TEST_VECTORS)
def test_known_vectors(data, expected_hex):
    assert hexdigest(io.BytesIO(data)) == expected_hex
    assert digest_bytes(data).hex() == expected_hex


@pytest.mark.parametrize("length", [0, 1, 55, 56, 63, 64, 65, 119, 120, 127, 128, 129, 1000, 4096])
def test_matches_hashlib(length):
    data = _pattern(length)

    result = digest(io.BytesIO(data))

    assert len(result) == DIGEST_SIZE
    assert result == hashlib.sha256(data).digest()


def test_digest_is_deterministic():
    data = _pattern(777)

    assert digest_bytes(data) == digest_bytes(data)
    assert digest(UnseekableStream(data)) == digest_bytes(data)


def test_avalanche_smoke():
    data = bytearray(_pattern(100))
    before = int.from_bytes(digest_bytes(bytes(data)), "big")
    data[50] ^= 0x01
    after = int.from_bytes(digest_bytes(bytes(data)), "big")

    changed = bin(before ^ after).count("1")
    # Roughly half of the 256 bits should flip.
    assert 64 < changed < 192


def test_context_counts_blocks_and_length():
    ctx = DigestContext(io.BytesIO(b"x" * 120))

    assert not ctx.finished
    result = ctx.run()

    assert ctx.finished
    assert ctx.blocks_processed == 3
    assert ctx.message_length == 120
    assert ctx.run() == result


def test_observer_sees_every_block_in_order():
    records = []
    result = digest(io.BytesIO(b"y" * 56), observer=records.append)

    assert [r.index for r in records] == [0, 1]
    assert [r.case for r in records] == [PaddingCase.DATA_AND_STOP, PaddingCase.LENGTH_ONLY]
    assert len(records[0].words) == 16
    final_state = b"".join(w.to_bytes(4, "big") for w in records[-1].state)
    assert final_state == result


def test_block_trace_collects_hex_entries(tmp_path):
    trace = BlockTrace(name="abc")
    result = digest(io.BytesIO(b"abc"), observer=trace)
    trace.digest_hex = result.hex()

    data = trace.to_dict()
    assert data["total_blocks"] == 1
    block = data["blocks"][0]
    assert block["padding_case"] == "FINAL_DATA"
    assert block["words"][0] == "61626380"
    assert "".join(block["state"]) == result.hex()

    out = tmp_path / "trace.yaml"
    trace.dump(str(out))
    assert "digest_hex: " + result.hex() in out.read_text()


def test_independent_digests_run_in_parallel():
    inputs = [_pattern(n) for n in range(0, 400, 37)]

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(digest_bytes, inputs))

    assert results == [hashlib.sha256(d).digest() for d in inputs]


def test_digest_file(tmp_path):
    data = _pattern(3000)
    path = tmp_path / "input.bin"
    path.write_bytes(data)

    assert digest_file(path) == hashlib.sha256(data).digest()
    assert digest_file(str(path)) == hashlib.sha256(data).digest()


def test_missing_file_is_input_unavailable(tmp_path):
    path = tmp_path / "missing.bin"

    with pytest.raises(InputUnavailableError) as excinfo:
        digest_file(path)

    assert isinstance(excinfo.value, OSError)
    assert excinfo.value.path == path
    assert isinstance(excinfo.value.cause, FileNotFoundError)


def test_truncated_stream_is_input_unavailable():
    with pytest.raises(InputUnavailableError):
        digest(io.BytesIO(b"short"), expected_length=100)


@pytest.mark.parametrize("call", [
    lambda: digest(None),
    lambda: digest_bytes(None),
    lambda: digest_file(None),
    lambda: digest_file(""),
])
def test_missing_input_source_is_invalid_usage(call):
    with pytest.raises(InvalidUsageError):
        call()


def test_zero_size_regular_file_is_read_to_eof(tmp_path, monkeypatch):
    # Files under /proc and /sys are regular but report st_size == 0.
    data = _pattern(128)
    path = tmp_path / "status"
    path.write_bytes(data)
    monkeypatch.setattr(
        os, "fstat", lambda fd: SimpleNamespace(st_mode=stat.S_IFREG | 0o444, st_size=0)
    )

    assert digest_file(path) == hashlib.sha256(data).digest()


def test_shrunken_regular_file_is_input_unavailable(tmp_path, monkeypatch):
    path = tmp_path / "shrunk.bin"
    path.write_bytes(b"abc")
    monkeypatch.setattr(
        os, "fstat", lambda fd: SimpleNamespace(st_mode=stat.S_IFREG | 0o644, st_size=10)
    )

    with pytest.raises(InputUnavailableError):
        digest_file(path)


@pytest.mark.skipif(not os.path.exists("/proc/self/status"), reason="needs procfs")
def test_procfs_file():
    with open("/proc/self/status", "rb") as f:
        assert f.read(1)

    assert len(digest_file("/proc/self/status")) == DIGEST_SIZE
