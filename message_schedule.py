"""SHA-256 message schedule expansion.

Words 0..15 are the block words; for i in 16..63:

    w[i] = s1(w[i-2]) + w[i-7] + s0(w[i-15]) + w[i-16]   (mod 2**32)

    s0(x) = (x >>> 7) ^ (x >>> 18) ^ (x >> 3)
    s1(x) = (x >>> 17) ^ (x >>> 19) ^ (x >> 10)
"""

from __future__ import annotations

from typing import List, Sequence

from sha256_constants import MASK32, SCHEDULE_LENGTH, WORDS_PER_BLOCK


def rotr(x: int, n: int) -> int:
    """Right-rotate a 32-bit word `x` by `n` bits."""
    x &= MASK32
    return ((x >> n) | (x << (32 - n))) & MASK32


def shr(x: int, n: int) -> int:
    """Right-shift a 32-bit word `x` by `n` bits."""
    return (x & MASK32) >> n


def small_sigma0(x: int) -> int:
    """SHA-256 function σ0 used in the message schedule."""
    return rotr(x, 7) ^ rotr(x, 18) ^ shr(x, 3)


def small_sigma1(x: int) -> int:
    """SHA-256 function σ1 used in the message schedule."""
    return rotr(x, 17) ^ rotr(x, 19) ^ shr(x, 10)


def build_message_schedule(words: Sequence[int]) -> List[int]:
    """Expand the 16 words of one block into the 64-word schedule w[0..63]."""
    if len(words) != WORDS_PER_BLOCK:
        raise ValueError(
            f"Expected {WORDS_PER_BLOCK} block words, got {len(words)}"
        )

    w: List[int] = [0] * SCHEDULE_LENGTH
    w[:WORDS_PER_BLOCK] = words

    for i in range(WORDS_PER_BLOCK, SCHEDULE_LENGTH):
        w[i] = (
            small_sigma1(w[i - 2]) + w[i - 7] + small_sigma0(w[i - 15]) + w[i - 16]
        ) & MASK32

    return w
