"""
RSA public key imprint and the two crack entry points.
"""

import logging
from typing import Optional, Union

from picklock.config import MAX_ITERATIONS_CEILING, settings
from picklock.crypto import format_int, parse_public_key
from picklock.errors import ConfigError
from picklock.services.deriver import derive_private_exponent
from picklock.services.fermat import fermat_factor
from picklock.services.prime_race import ConcurrentFactorSearch, ProgressCallback, ProgressTable

logger = logging.getLogger(__name__)


def _byte_length(value: int) -> int:
    return (value.bit_length() + 7) // 8


class PickLock:
    """
    Imprint of a public RSA key (e, n) used to attempt private key recovery.

    The iteration cap bounds both strategies: Fermat steps for the weak
    crack, distinct candidate primes for the strong crack.
    """

    def __init__(self, e: int, n: int, max_iterations: Optional[int] = None):
        if e <= 0 or n <= 0:
            raise ConfigError(f"exponent and modulus must be positive, got e {format_int(e)} and n {format_int(n)}")
        self._e = int(e)
        self._n = int(n)
        self._max_iter = settings.max_iterations
        if max_iterations is not None:
            self.alter_max_iter(max_iterations)

    @classmethod
    def from_pem(cls, rsa_pem: Union[str, bytes]) -> "PickLock":
        """
        Create a PickLock from a PEM-encoded public key.

        Raises:
            DecodeError: If the input is not a valid RSA public key
        """
        e, n = parse_public_key(rsa_pem)
        return cls(e, n)

    @classmethod
    def from_exponent_and_modulus(cls, e: int, n: int) -> "PickLock":
        """Create a PickLock from the publicly known exponent and modulus."""
        return cls(e, n)

    @property
    def e(self) -> int:
        return self._e

    @property
    def n(self) -> int:
        return self._n

    @property
    def max_iter(self) -> int:
        return self._max_iter

    def alter_max_iter(self, iterations: int) -> None:
        """
        Change the safety cap on search work.

        Badly picked p and q are usually recovered within 100 Fermat steps,
        so the default of 1000 is well above what a weak key needs.
        A cap of 0 is accepted; both strategies then fail without doing any work.

        Raises:
            ConfigError: If the value is negative or above the ceiling
        """
        if iterations > MAX_ITERATIONS_CEILING:
            raise ConfigError(
                f"Max allowed iter is {MAX_ITERATIONS_CEILING}, got {iterations}"
            )
        if iterations < 0:
            raise ConfigError(f"iteration cap cannot be negative, got {iterations}")
        self._max_iter = int(iterations)

    def try_lock_pick_weak_private(self) -> int:
        """
        Recover the private exponent of a key generated with close primes.

        With 2048-bit keys, 100 Fermat rounds reliably factor moduli whose
        primes differ by up to 2^517, that is primes that only differ in
        their lower half. If this succeeds the key generator is broken.

        Returns:
            The private exponent d

        Raises:
            FactorizationFailed: If no factor pair was found within the cap
            NoInverseExists: If e is not invertible modulo phi
        """
        logger.info(f"Weak crack of {self._n.bit_length()}-bit modulus, cap {self._max_iter}")
        pair = fermat_factor(self._n, self._max_iter, e=self._e)
        return derive_private_exponent(self._e, pair)

    def try_lock_pick_strong_private(
        self,
        report: Optional[bool] = None,
        progress: Optional[ProgressCallback] = None,
        workers_per_offset: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> int:
        """
        Guess safe primes of the expected size concurrently until one divides n.

        It is a prototype: nothing guarantees success, finding the right
        prime among all candidates is a matter of luck.

        Args:
            report: Print a progress table to stdout (defaults to settings)
            progress: Callback receiving the number of checked primes every 25 candidates
            workers_per_offset: Threads per bit offset (defaults to settings)
            timeout: Wall-clock ceiling in seconds (defaults to settings)

        Returns:
            The private exponent d

        Raises:
            SearchExhausted: If the budget ran out without a confirmed pair
            NoInverseExists: If e is not invertible modulo phi
        """
        if report is None:
            report = settings.report
        table = ProgressTable() if report else None
        search = ConcurrentFactorSearch(
            self._n,
            e=self._e,
            max_iterations=self._max_iter,
            workers_per_offset=workers_per_offset if workers_per_offset is not None else settings.workers_per_offset,
            progress=progress or table,
            timeout=timeout if timeout is not None else settings.search_timeout_seconds,
        )
        logger.info(f"Strong crack of {self._n.bit_length()}-bit modulus, cap {self._max_iter}")

        if table is not None:
            table.header()
        try:
            pair = search.run()
        finally:
            if table is not None:
                table.footer(search.checked)
        return derive_private_exponent(self._e, pair)

    def __str__(self) -> str:
        return (
            f"e: {format_int(self._e)} [ bytes {_byte_length(self._e)} ], "
            f"n: {format_int(self._n)} [ bytes {_byte_length(self._n)} ], "
            f"iter: {self._max_iter},"
        )
