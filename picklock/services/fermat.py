"""
Close-prime factorization.

Fermat's method writes n = a^2 - b^2 = (a + b)(a - b) and walks `a` upward
from ceil(sqrt(n)). When p and q differ only in their lower half the
square is found within a handful of steps; for well separated primes the
iteration cap is exhausted and the search fails.

See https://en.wikipedia.org/wiki/Fermat%27s_factorization_method
"""

import logging

import gmpy2

from picklock.crypto import format_int
from picklock.errors import FactorizationFailed
from picklock.services.deriver import FactorPair

logger = logging.getLogger(__name__)


def fermat_factor(n: int, max_iterations: int, e: int = 0) -> FactorPair:
    """
    Factor n with at most `max_iterations` Fermat steps.

    Args:
        n: Modulus to factor
        max_iterations: Number of candidate values of `a` to test
        e: Public exponent, only used in the failure message

    Returns:
        FactorPair with p * q == n and q > 1

    Raises:
        FactorizationFailed: If no verified non-trivial pair was found
    """
    if max_iterations <= 0:
        raise FactorizationFailed(
            f"cannot crack the private exponent of the given n {format_int(n)} and e {format_int(e)}: "
            f"iteration cap is 0"
        )

    n = gmpy2.mpz(n)
    a, rem = gmpy2.isqrt_rem(n)
    if rem:
        a += 1

    for step in range(max_iterations):
        b_sq = a * a - n
        if gmpy2.is_square(b_sq):
            b = gmpy2.isqrt(b_sq)
            p, q = a + b, a - b
            if p * q == n and q > 1:
                logger.debug(f"Fermat square found after {step + 1} steps")
                return FactorPair(p=int(p), q=int(q))
            break
        a += 1

    raise FactorizationFailed(
        f"cannot crack the private exponent of the given n {format_int(n)} and e {format_int(e)}"
    )
