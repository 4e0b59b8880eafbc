"""SHA-256 message padding as an explicit finite-state machine.

The padded message is produced one 64-byte window at a time. Which bytes go
into a window depends only on the current `PadState` and on how many input
bytes are still unconsumed, giving exactly six cases:

    1. FULL_DATA        more than 64 bytes remain: a full data block
    2. FINAL_DATA       0 < remaining <= 55: data, stop byte, zeros, length
    3. EXACT_FILL       exactly 64 bytes remain: a full data block, the stop
                        byte and length move to the next block
    4. DATA_AND_STOP    56 <= remaining <= 63: data, stop byte, zeros; the
                        length moves to the next block
    5. STOP_AND_LENGTH  input exhausted, stop byte pending: stop byte, zeros,
                        length
    6. LENGTH_ONLY      input exhausted, stop byte already written: zeros,
                        length

Cases 2, 5 and 6 carry the length field and end the message.
"""

from __future__ import annotations

import enum
import logging
from typing import BinaryIO, Iterator, List, NamedTuple, Optional, Tuple

from sha256_constants import (
    BLOCK_SIZE,
    LENGTH_FIELD_SIZE,
    MAX_MESSAGE_BYTES,
    STOP_BYTE,
)
from sha256_errors import InputUnavailableError


logger = logging.getLogger(__name__)

# Largest tail that still leaves room for the stop byte and the length field.
_MAX_FINAL_DATA = BLOCK_SIZE - LENGTH_FIELD_SIZE - 1


class PadState(enum.Enum):
    STREAMING = "streaming"
    STOP_BYTE_EMITTED = "stop_byte_emitted"
    DONE = "done"


class PaddingCase(enum.Enum):
    FULL_DATA = 1
    FINAL_DATA = 2
    EXACT_FILL = 3
    DATA_AND_STOP = 4
    STOP_AND_LENGTH = 5
    LENGTH_ONLY = 6


class PaddedBlock(NamedTuple):
    """One 64-byte window of the padded message."""

    case: PaddingCase
    data: bytes
    next_state: PadState

    @property
    def is_final(self) -> bool:
        return self.next_state is PadState.DONE


class PaddingPlan(NamedTuple):
    """Shape of the padded message for a given input length."""

    message_length: int
    blocks_needed: int
    full_data_blocks: int
    tail_cases: Tuple[PaddingCase, ...]
    bytes_in_last_block: int
    padding_bytes: int


def classify(state: PadState, remaining: int) -> PaddingCase:
    """Select the padding case for the next window.

    `remaining` is the number of input bytes not yet consumed. Any value
    above 64 classifies the same way, so callers streaming input of
    unknown length only need to know whether more than one window is left.
    """
    if remaining < 0:
        raise ValueError(f"remaining must be non-negative, got {remaining}")

    if state is PadState.DONE:
        raise ValueError("padding is complete, no further blocks")

    if state is PadState.STOP_BYTE_EMITTED:
        if remaining:
            raise ValueError(
                f"stop byte already written but {remaining} input bytes remain"
            )
        return PaddingCase.LENGTH_ONLY

    if remaining > BLOCK_SIZE:
        return PaddingCase.FULL_DATA
    if remaining == BLOCK_SIZE:
        return PaddingCase.EXACT_FILL
    if remaining == 0:
        return PaddingCase.STOP_AND_LENGTH
    if remaining <= _MAX_FINAL_DATA:
        return PaddingCase.FINAL_DATA
    return PaddingCase.DATA_AND_STOP


def length_trailer(message_length: int) -> bytes:
    """Return the 64-bit big-endian bit length of a `message_length`-byte input."""
    if message_length < 0:
        raise ValueError(f"message length must be non-negative, got {message_length}")
    if message_length > MAX_MESSAGE_BYTES:
        raise ValueError(
            f"message of {message_length} bytes exceeds the SHA-256 maximum "
            f"of {MAX_MESSAGE_BYTES} bytes"
        )
    return (message_length * 8).to_bytes(LENGTH_FIELD_SIZE, byteorder="big")


def pad_block(
    state: PadState,
    chunk: bytes,
    remaining: int,
    message_length: int,
) -> PaddedBlock:
    """Pure padding transition: build the next 64-byte window.

    Parameters
    ----------
    state : PadState
        Padder state before this window.
    chunk : bytes
        The next input bytes, ``min(64, remaining)`` of them.
    remaining : int
        Input bytes not yet consumed, including `chunk`.
    message_length : int
        Total input length in bytes, written into the final window.
    """
    case = classify(state, remaining)
    expected_chunk = min(BLOCK_SIZE, remaining)
    if len(chunk) != expected_chunk:
        raise ValueError(
            f"{case.name} expects a {expected_chunk}-byte chunk, got {len(chunk)}"
        )

    if case in (PaddingCase.FULL_DATA, PaddingCase.EXACT_FILL):
        return PaddedBlock(case, bytes(chunk), PadState.STREAMING)

    window = bytearray(BLOCK_SIZE)
    window[: len(chunk)] = chunk

    if case is PaddingCase.DATA_AND_STOP:
        window[len(chunk)] = STOP_BYTE
        return PaddedBlock(case, bytes(window), PadState.STOP_BYTE_EMITTED)

    if case is not PaddingCase.LENGTH_ONLY:
        window[len(chunk)] = STOP_BYTE
    window[-LENGTH_FIELD_SIZE:] = length_trailer(message_length)
    return PaddedBlock(case, bytes(window), PadState.DONE)


def block_words(block: bytes) -> Tuple[int, ...]:
    """Pack a 64-byte window into 16 big-endian 32-bit words."""
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"Expected {BLOCK_SIZE}-byte block, got {len(block)}")

    return tuple(
        (block[i] << 24) | (block[i + 1] << 16) | (block[i + 2] << 8) | block[i + 3]
        for i in range(0, BLOCK_SIZE, 4)
    )


def plan_padding(message_length: int) -> PaddingPlan:
    """Describe how an input of `message_length` bytes will be padded.

    Leading FULL_DATA windows are only counted; the state machine is walked
    for the last few windows, so this is cheap even for very large lengths.
    """
    length_trailer(message_length)

    full_blocks = max(0, (message_length - 1) // BLOCK_SIZE)
    remaining = message_length - full_blocks * BLOCK_SIZE
    cases: List[PaddingCase] = []

    state = PadState.STREAMING
    bytes_in_last_block = 0
    while state is not PadState.DONE:
        case = classify(state, remaining)
        cases.append(case)
        consumed = min(BLOCK_SIZE, remaining)
        if consumed:
            bytes_in_last_block = consumed
        remaining -= consumed
        if case is PaddingCase.DATA_AND_STOP:
            state = PadState.STOP_BYTE_EMITTED
        elif case in (PaddingCase.FULL_DATA, PaddingCase.EXACT_FILL):
            state = PadState.STREAMING
        else:
            state = PadState.DONE

    blocks_needed = full_blocks + len(cases)
    padding_bytes = blocks_needed * BLOCK_SIZE - message_length - LENGTH_FIELD_SIZE
    return PaddingPlan(
        message_length=message_length,
        blocks_needed=blocks_needed,
        full_data_blocks=full_blocks,
        tail_cases=tuple(cases),
        bytes_in_last_block=bytes_in_last_block,
        padding_bytes=padding_bytes,
    )


class Padder:
    """Turn a binary stream into padded 64-byte windows.

    The padder never holds more than two windows of input: the one being
    emitted and the next one, which is only read to tell FULL_DATA apart
    from EXACT_FILL. The message length is counted while reading, so the
    stream does not have to be seekable.

    If `expected_length` is given, a stream that ends early or keeps going
    past it raises `InputUnavailableError`.
    """

    def __init__(
        self,
        stream: BinaryIO,
        expected_length: Optional[int] = None,
        name: str = "<stream>",
    ) -> None:
        self.stream = stream
        self.expected_length = expected_length
        self.name = name
        self.state = PadState.STREAMING
        self.bytes_consumed = 0
        self.blocks_emitted = 0
        self._eof = False

    @property
    def message_length(self) -> int:
        return self.bytes_consumed

    def _read_window(self) -> bytes:
        """Read up to 64 bytes, retrying short reads until EOF."""
        if self._eof:
            return b""

        parts = []
        wanted = BLOCK_SIZE
        while wanted:
            try:
                data = self.stream.read(wanted)
            except OSError as e:
                raise InputUnavailableError(self.name, e) from e
            if not data:
                self._eof = True
                break
            parts.append(data)
            wanted -= len(data)
        return b"".join(parts)

    def _check_length(self, total: int, complete: bool) -> None:
        if self.expected_length is None:
            return
        if total > self.expected_length or (complete and total != self.expected_length):
            raise InputUnavailableError(
                self.name,
                f"expected {self.expected_length} bytes, read {total}",
            )

    def __iter__(self) -> Iterator[PaddedBlock]:
        current = self._read_window()
        while self.state is not PadState.DONE:
            upcoming = b""
            if len(current) == BLOCK_SIZE:
                upcoming = self._read_window()

            remaining = len(current) + len(upcoming)
            # Once at most one window is left the total length is known.
            self._check_length(
                self.bytes_consumed + remaining, complete=remaining <= BLOCK_SIZE
            )

            block = pad_block(
                self.state,
                current,
                remaining,
                self.bytes_consumed + remaining,
            )
            self.bytes_consumed += len(current)
            self.blocks_emitted += 1
            self.state = block.next_state
            logger.debug(
                "%s: block %d %s (%d bytes consumed)",
                self.name,
                self.blocks_emitted - 1,
                block.case.name,
                self.bytes_consumed,
            )
            yield block
            current = upcoming
