"""Command-line SHA-256 file digest.

Usage:
    python sha256_cli.py path/to/file
    python sha256_cli.py -              # read standard input
    python sha256_cli.py --plan path/to/file
    cat file | python sha256_cli.py --plan -
    python sha256_cli.py --trace blocks.yaml path/to/file

Prints the 64-character lowercase hex digest. Exit codes: 0 on success,
2 for missing or extra arguments, 3 if the file cannot be opened or read,
1 if the trace file cannot be written.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from block_trace import BlockTrace
from sha256_engine import DigestContext, digest_file
from sha256_errors import InputUnavailableError
from sha256_padding import plan_padding


EXIT_USAGE = 2
EXIT_INPUT_UNAVAILABLE = 3
EXIT_TRACE_FAILED = 1


def _print_plan(size: int) -> None:
    """Print how an input of `size` bytes is padded into blocks."""
    plan = plan_padding(size)
    print(f"File Size: {size} bytes")
    print(f"Message blocks needed: {plan.blocks_needed}")
    print(f"Bytes in the last block: {plan.bytes_in_last_block}")
    print(f"Padding needed (without length encoding): {plan.padding_bytes} bytes")
    print(f"Final blocks: {', '.join(case.name for case in plan.tail_cases)}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compute the SHA-256 digest of a file"
    )
    parser.add_argument(
        "path",
        help="File to hash ('-' for standard input)",
    )
    parser.add_argument(
        "--plan",
        action="store_true",
        help="Print how the file will be padded into 512-bit blocks",
    )
    parser.add_argument(
        "--trace",
        type=str,
        default=None,
        help="Write per-block padding cases and hash states to this YAML file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log each block as it is processed",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse already printed the usage message.
        return EXIT_USAGE if e.code else 0

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    trace = BlockTrace(name=args.path) if args.trace else None

    try:
        if args.path == "-":
            # The length of standard input is only known once it is consumed.
            ctx = DigestContext(sys.stdin.buffer, name="<stdin>", observer=trace)
            result = ctx.run()
            if args.plan:
                _print_plan(ctx.message_length)
        else:
            if args.plan:
                _print_plan(os.path.getsize(args.path))
            result = digest_file(args.path, observer=trace)
    except InputUnavailableError as e:
        sys.stderr.write(f"Error reading file '{args.path}': {e.cause}\n")
        return EXIT_INPUT_UNAVAILABLE
    except OSError as e:
        sys.stderr.write(f"Error reading file '{args.path}': {e}\n")
        return EXIT_INPUT_UNAVAILABLE

    if trace is not None:
        trace.digest_hex = result.hex()
        try:
            trace.dump(args.trace)
        except OSError as e:
            sys.stderr.write(f"Error writing trace '{args.trace}': {e}\n")
            return EXIT_TRACE_FAILED

    print(result.hex())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
