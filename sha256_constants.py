"""Fixed SHA-256 tables and sizes from FIPS 180-4.

The values here are published constants. `derive_constants.py` can
recompute them offline, but nothing on the hashing path derives them.
"""

from __future__ import annotations

from typing import Tuple


MASK32 = 0xFFFFFFFF

BLOCK_SIZE = 64  # bytes per 512-bit block
WORDS_PER_BLOCK = 16
SCHEDULE_LENGTH = 64
LENGTH_FIELD_SIZE = 8  # bytes of big-endian bit length in the final block
STOP_BYTE = 0x80
DIGEST_SIZE = 32

# The trailer holds the length in bits as a 64-bit value.
MAX_MESSAGE_BYTES = 2**61 - 1

# Initial hash values (first 32 bits of the fractional parts of the
# square roots of the first 8 primes 2..19).
H0: Tuple[int, ...] = (
    0x6A09E667,
    0xBB67AE85,
    0x3C6EF372,
    0xA54FF53A,
    0x510E527F,
    0x9B05688C,
    0x1F83D9AB,
    0x5BE0CD19,
)

# Round constants k[0..63] (first 32 bits of the fractional parts of the
# cube roots of the first 64 primes).
K_VALUES: Tuple[int, ...] = (
    0x428A2F98, 0x71374491, 0xB5C0FBCF, 0xE9B5DBA5,
    0x3956C25B, 0x59F111F1, 0x923F82A4, 0xAB1C5ED5,
    0xD807AA98, 0x12835B01, 0x243185BE, 0x550C7DC3,
    0x72BE5D74, 0x80DEB1FE, 0x9BDC06A7, 0xC19BF174,
    0xE49B69C1, 0xEFBE4786, 0x0FC19DC6, 0x240CA1CC,
    0x2DE92C6F, 0x4A7484AA, 0x5CB0A9DC, 0x76F988DA,
    0x983E5152, 0xA831C66D, 0xB00327C8, 0xBF597FC7,
    0xC6E00BF3, 0xD5A79147, 0x06CA6351, 0x14292967,
    0x27B70A85, 0x2E1B2138, 0x4D2C6DFC, 0x53380D13,
    0x650A7354, 0x766A0ABB, 0x81C2C92E, 0x92722C85,
    0xA2BFE8A1, 0xA81A664B, 0xC24B8B70, 0xC76C51A3,
    0xD192E819, 0xD6990624, 0xF40E3585, 0x106AA070,
    0x19A4C116, 0x1E376C08, 0x2748774C, 0x34B0BCB5,
    0x391C0CB3, 0x4ED8AA4A, 0x5B9CCA4F, 0x682E6FF3,
    0x748F82EE, 0x78A5636F, 0x84C87814, 0x8CC70208,
    0x90BEFFFA, 0xA4506CEB, 0xBEF9A3F7, 0xC67178F2,
)
