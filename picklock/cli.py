"""
Command line front end.

    picklock weak --pem key.pub
    picklock strong --e 65537 --n 37909 --max-iterations 500 --report
    picklock sample --bits 512 > weak.pub

Exit codes: 0 cracked, 1 the key resisted, 2 invalid input or configuration.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from picklock.config import settings
from picklock.crypto import KeyType, format_int, generate_close_prime_key, parse_int, public_pem_from_numbers, to_pem
from picklock.errors import (
    ConfigError,
    DecodeError,
    FactorizationFailed,
    InvalidBitSize,
    NoInverseExists,
    SearchExhausted,
)
from picklock.services.descriptor import PickLock

logger = logging.getLogger(__name__)

EXIT_CRACKED = 0
EXIT_RESISTED = 1
EXIT_INVALID = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="picklock",
        description="Audit an RSA public key by trying to recover its private exponent"
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (default from PICKLOCK_LOG_LEVEL)"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("weak", "Fermat factorization for keys built from close primes"),
        ("strong", "Experimental concurrent safe-prime guessing"),
    ):
        crack = commands.add_parser(name, help=help_text)
        source = crack.add_mutually_exclusive_group(required=True)
        source.add_argument("--pem", type=Path, help="PEM-encoded RSA public key file")
        source.add_argument("--n", type=parse_int, help="Modulus (decimal or 0x-prefixed hex)")
        crack.add_argument("--e", type=parse_int, default=65537, help="Public exponent with --n (default: 65537)")
        crack.add_argument(
            "--max-iterations",
            type=int,
            default=None,
            help=f"Iteration cap (default: {settings.max_iterations})"
        )
        crack.add_argument(
            "--pem-out",
            action="store_true",
            help="Print the private exponent armored as PEM"
        )
        if name == "strong":
            crack.add_argument(
                "--report",
                action="store_true",
                default=settings.report,
                help="Print a progress table while searching"
            )
            crack.add_argument(
                "--workers",
                type=int,
                default=settings.workers_per_offset,
                help="Worker threads per bit offset"
            )

    sample = commands.add_parser("sample", help="Generate a deliberately weak public key")
    sample.add_argument("--bits", type=int, default=512, help="Bits per prime (default: 512)")
    sample.add_argument("--max-gap", type=int, default=1 << 20, help="Maximum distance between p and q")
    sample.add_argument("--e", type=int, default=65537, help="Public exponent (default: 65537)")

    return parser


def _load_lock(args: argparse.Namespace) -> PickLock:
    if args.pem is not None:
        lock = PickLock.from_pem(args.pem.read_bytes())
    else:
        lock = PickLock.from_exponent_and_modulus(args.e, args.n)
    if args.max_iterations is not None:
        lock.alter_max_iter(args.max_iterations)
    return lock


def run_crack(args: argparse.Namespace) -> int:
    try:
        lock = _load_lock(args)
        logger.debug("PickLock: %s", lock)
        if args.command == "weak":
            d = lock.try_lock_pick_weak_private()
        else:
            d = lock.try_lock_pick_strong_private(
                report=args.report,
                workers_per_offset=args.workers
            )
    except (DecodeError, ConfigError, InvalidBitSize, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID
    except (FactorizationFailed, SearchExhausted, NoInverseExists) as e:
        print(f"key resisted: {e}", file=sys.stderr)
        return EXIT_RESISTED

    print(to_pem(d, KeyType.PRIVATE) if args.pem_out else format_int(d))
    return EXIT_CRACKED


def run_sample(args: argparse.Namespace) -> int:
    try:
        key = generate_close_prime_key(bits=args.bits, max_gap=args.max_gap, e=args.e)
    except (InvalidBitSize, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID
    print(public_pem_from_numbers(key.e, key.n), end="")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.command == "sample":
        return run_sample(args)
    return run_crack(args)


if __name__ == "__main__":
    sys.exit(main())
