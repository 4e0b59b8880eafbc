"""Derive the SHA-256 constant tables from first principles.

The round constants are the first 32 bits of the fractional parts of the
cube roots of the first 64 primes; the initial hash values use the square
roots of the first 8 primes. This is an offline check on the tables in
`sha256_constants.py` and is never used while hashing.

Usage:
    python derive_constants.py cube 64
    python derive_constants.py square 8
"""

from __future__ import annotations

import argparse
from typing import List, Tuple


ROOTS = {"square": 2, "cube": 3}


def is_prime(n: int) -> bool:
    """Trial-division primality test (fine for the first few hundred primes)."""
    if n < 2:
        return False
    i = 2
    while i * i <= n:
        if n % i == 0:
            return False
        i += 1
    return True


def first_primes(count: int) -> List[int]:
    """Return the first `count` primes."""
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")

    primes: List[int] = []
    candidate = 2
    while len(primes) < count:
        if is_prime(candidate):
            primes.append(candidate)
        candidate += 1
    return primes


def integer_root(x: int, root: int) -> int:
    """Return floor(x ** (1/root)) using Newton's method on integers."""
    if x < 0:
        raise ValueError(f"x must be non-negative, got {x}")
    if root < 1:
        raise ValueError(f"root must be positive, got {root}")
    if x < 2 or root == 1:
        return x

    # Start above the true root; the iteration then decreases monotonically.
    y = 1 << -(-x.bit_length() // root)
    while True:
        z = ((root - 1) * y + x // y ** (root - 1)) // root
        if z >= y:
            return y
        y = z


def fractional_root_bits(n: int, root: int, bits: int = 32) -> int:
    """First `bits` bits of the fractional part of the `root`-th root of `n`.

    Scaling `n` by 2**(bits*root) before taking the integer root keeps the
    computation exact, so no floating point rounding can leak in.
    """
    scaled = integer_root(n << (bits * root), root)
    return scaled & ((1 << bits) - 1)


def round_constants(count: int = 64) -> Tuple[int, ...]:
    """Cube-root constants k[0..count-1]."""
    return tuple(fractional_root_bits(p, 3) for p in first_primes(count))


def initial_hash_values(count: int = 8) -> Tuple[int, ...]:
    """Square-root initial hash values H0[0..count-1]."""
    return tuple(fractional_root_bits(p, 2) for p in first_primes(count))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Derive SHA-256 constants from roots of the first primes"
    )
    parser.add_argument(
        "kind",
        choices=sorted(ROOTS),
        help="cube: round constants, square: initial hash values",
    )
    parser.add_argument(
        "count",
        type=int,
        help="Number of constants to derive",
    )
    args = parser.parse_args(argv)

    if args.count < 1:
        parser.error(f"count must be positive (got {args.count})")

    root = ROOTS[args.kind]
    for idx, prime in enumerate(first_primes(args.count), start=1):
        constant = fractional_root_bits(prime, root)
        print(f"SHA Constant {idx:2d}: Prime {prime:<3d}    Constant: {constant:08x}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
