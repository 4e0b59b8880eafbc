"""Compression step of SHA-256: fold one message schedule into the hash state.

`compress64` takes the running hash state H_i as a list of eight words and
a 64-word schedule. It copies the state into eight local registers, runs
the 64 rounds on those locals, then adds each register back into the list
so the caller's state becomes H_{i+1}. The list is the only container
involved; no tuple or list is built per round.

`ch`, `maj`, `big_sigma0` and `big_sigma1` are the bitwise primitives
used by each round. Rotation comes from `message_schedule.rotr`.
"""

from __future__ import annotations

from typing import List, Sequence

from message_schedule import rotr
from sha256_constants import K_VALUES, MASK32, SCHEDULE_LENGTH


def ch(x: int, y: int, z: int) -> int:
    """Choice: each bit of `x` selects the bit of `y` (1) or `z` (0)."""
    return ((x & y) ^ (~x & z)) & MASK32


def maj(x: int, y: int, z: int) -> int:
    """Majority vote of the three input bits."""
    return (x & y) ^ (x & z) ^ (y & z)


def big_sigma0(x: int) -> int:
    return rotr(x, 2) ^ rotr(x, 13) ^ rotr(x, 22)


def big_sigma1(x: int) -> int:
    return rotr(x, 6) ^ rotr(x, 11) ^ rotr(x, 25)


def compress64(state: List[int], ws: Sequence[int]) -> None:
    """Fold one 64-word message schedule into the 8-word hash `state`.

    Parameters
    ----------
    state : list[int]
        The running hash state H_i as eight 32-bit words. Updated in place
        to H_{i+1}.
    ws : Sequence[int]
        The 64-word message schedule `w[0..63]` for this block.
    """
    if len(ws) != SCHEDULE_LENGTH:
        raise ValueError(
            f"compress64 expects {SCHEDULE_LENGTH} message schedule words, got {len(ws)}"
        )

    a, b, c, d, e, f, g, h = state

    for i in range(SCHEDULE_LENGTH):
        temp1 = (h + big_sigma1(e) + ch(e, f, g) + K_VALUES[i] + ws[i]) & MASK32
        temp2 = (big_sigma0(a) + maj(a, b, c)) & MASK32

        h = g
        g = f
        f = e
        e = (d + temp1) & MASK32
        d = c
        c = b
        b = a
        a = (temp1 + temp2) & MASK32

    state[0] = (state[0] + a) & MASK32
    state[1] = (state[1] + b) & MASK32
    state[2] = (state[2] + c) & MASK32
    state[3] = (state[3] + d) & MASK32
    state[4] = (state[4] + e) & MASK32
    state[5] = (state[5] + f) & MASK32
    state[6] = (state[6] + g) & MASK32
    state[7] = (state[7] + h) & MASK32
