"""SHA-256 digest engine.

Drives the padder, message schedule and compression function over a byte
stream. Every digest computation owns a `DigestContext`; nothing here keeps
module-level mutable state, so independent digests can run concurrently.

    bytes -> padded windows -> block words -> schedule -> state -> digest
"""

from __future__ import annotations

import io
import logging
import os
import stat
from typing import BinaryIO, Callable, List, NamedTuple, Optional, Tuple

from compress import compress64
from message_schedule import build_message_schedule
from sha256_constants import H0
from sha256_errors import InputUnavailableError, InvalidUsageError
from sha256_padding import Padder, PaddingCase, block_words


logger = logging.getLogger(__name__)


class BlockRecord(NamedTuple):
    """What an observer sees after each block is compressed."""

    index: int
    case: PaddingCase
    words: Tuple[int, ...]
    state: Tuple[int, ...]


Observer = Callable[[BlockRecord], None]


class DigestContext:
    """State of a single digest computation.

    The working state is seeded from `H0` once, then updated by each block
    strictly in order. After the final block it is frozen into the digest.
    """

    def __init__(
        self,
        stream: BinaryIO,
        expected_length: Optional[int] = None,
        name: str = "<stream>",
        observer: Optional[Observer] = None,
    ) -> None:
        if stream is None:
            raise InvalidUsageError("no input source given")

        self.name = name
        self.padder = Padder(stream, expected_length=expected_length, name=name)
        self.state: List[int] = list(H0)
        self.blocks_processed = 0
        self.observer = observer
        self._digest: Optional[bytes] = None

    @property
    def message_length(self) -> int:
        return self.padder.message_length

    @property
    def finished(self) -> bool:
        return self._digest is not None

    def run(self) -> bytes:
        """Consume every padded block and return the 32-byte digest."""
        if self._digest is not None:
            return self._digest

        for block in self.padder:
            words = block_words(block.data)
            compress64(self.state, build_message_schedule(words))
            if self.observer is not None:
                self.observer(
                    BlockRecord(self.blocks_processed, block.case, words, tuple(self.state))
                )
            self.blocks_processed += 1

        self._digest = self._freeze_state()
        logger.debug(
            "%s: %d bytes in %d blocks -> %s",
            self.name,
            self.message_length,
            self.blocks_processed,
            self._digest.hex(),
        )
        return self._digest

    def _freeze_state(self) -> bytes:
        """Serialize the working state as 32 big-endian bytes."""
        return b"".join(word.to_bytes(4, byteorder="big") for word in self.state)


def digest(
    stream: BinaryIO,
    expected_length: Optional[int] = None,
    observer: Optional[Observer] = None,
    name: str = "<stream>",
) -> bytes:
    """Compute the SHA-256 digest of everything readable from `stream`.

    Raises `InputUnavailableError` if the stream cannot be read to
    completion, and `InvalidUsageError` if no stream is given.
    """
    return DigestContext(
        stream, expected_length=expected_length, name=name, observer=observer
    ).run()


def hexdigest(
    stream: BinaryIO,
    expected_length: Optional[int] = None,
    observer: Optional[Observer] = None,
    name: str = "<stream>",
) -> str:
    """Like `digest`, rendered as 64 lowercase hex characters."""
    return digest(stream, expected_length, observer, name).hex()


def digest_bytes(data: bytes) -> bytes:
    """SHA-256 digest of an in-memory buffer."""
    if data is None:
        raise InvalidUsageError("no input data given")
    return digest(io.BytesIO(data), expected_length=len(data), name="<bytes>")


def digest_file(path, observer: Optional[Observer] = None) -> bytes:
    """SHA-256 digest of the file at `path`.

    For regular files with a non-zero size, the size reported on open is the
    expected length; a file that shrinks or grows while being read is
    reported as unavailable rather than hashed partially.
    """
    if path is None or str(path) == "":
        raise InvalidUsageError("no input file given")

    try:
        f = open(path, "rb")
    except OSError as e:
        raise InputUnavailableError(path, e) from e

    with f:
        try:
            st = os.fstat(f.fileno())
        except OSError as e:
            raise InputUnavailableError(path, e) from e
        # Pipes, devices and /proc-style files report no meaningful size.
        size = st.st_size if stat.S_ISREG(st.st_mode) and st.st_size > 0 else None
        return digest(f, expected_length=size, observer=observer, name=str(path))
