"""
Private exponent derivation from a verified factor pair.
"""

from typing import NamedTuple

import gmpy2

from picklock.crypto import format_int
from picklock.errors import NoInverseExists


class FactorPair(NamedTuple):
    """Two factors whose product has been checked against the modulus."""

    p: int
    q: int


def derive_private_exponent(e: int, pair: FactorPair) -> int:
    """
    Compute d = e^-1 mod (p-1)(q-1).

    Raises:
        NoInverseExists: If gcd(e, phi) != 1
    """
    phi = (pair.p - 1) * (pair.q - 1)
    try:
        d = gmpy2.invert(e, phi)
    except ZeroDivisionError as exc:
        raise NoInverseExists(
            f"cannot calculate private exponent for phi {format_int(phi)} and e {format_int(e)}"
        ) from exc

    # older gmpy2 releases return 0 instead of raising
    if d == 0:
        raise NoInverseExists(f"cannot calculate private exponent for phi {format_int(phi)} and e {format_int(e)}")
    return int(d)
