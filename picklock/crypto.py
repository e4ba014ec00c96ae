"""
Cryptographic collaborators: key decoding, PEM armor, primality and prime generation.
"""

import logging
import secrets
import threading
from enum import Enum
from typing import NamedTuple, Optional, Tuple, Union

import gmpy2
from Crypto.IO import PEM
from Crypto.Util.number import getPrime
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from picklock.errors import ConversionError, DecodeError, InvalidBitSize, SearchCancelled

logger = logging.getLogger(__name__)

# Smallest bit length holding a safe prime (7 = 2*3 + 1).
MIN_SAFE_PRIME_BITS = 3

# Miller-Rabin rounds used by the primality oracle.
PRIMALITY_ROUNDS = 25


class KeyType(str, Enum):
    """PEM armor label for an exported integer."""

    PRIVATE = "PRIVATE KEY"
    PUBLIC = "PUBLIC KEY"

    def __str__(self) -> str:
        return self.value


class SampleKey(NamedTuple):
    """Close-prime RSA numbers for exercising the weak-key crack."""

    p: int
    q: int
    e: int
    n: int


def parse_public_key(public_key_pem: Union[str, bytes]) -> Tuple[int, int]:
    """
    Parse a PEM-encoded RSA public key.

    Args:
        public_key_pem: PEM-encoded public key (SubjectPublicKeyInfo or PKCS#1)

    Returns:
        Tuple of (public exponent, modulus)

    Raises:
        DecodeError: If the input is not a valid RSA public key
    """
    key_bytes = public_key_pem.encode('utf-8') if isinstance(public_key_pem, str) else public_key_pem
    try:
        public_key = serialization.load_pem_public_key(key_bytes, backend=default_backend())
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise DecodeError(f"Failed to parse public key: {e}") from e

    if not isinstance(public_key, rsa.RSAPublicKey):
        raise DecodeError(f"Expected RSA key, got {type(public_key).__name__}")

    numbers = public_key.public_numbers()
    return numbers.e, numbers.n


def public_pem_from_numbers(e: int, n: int) -> str:
    """Render (e, n) as a SubjectPublicKeyInfo PEM string."""
    public_key = rsa.RSAPublicNumbers(e, n).public_key(default_backend())
    return public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode('utf-8')


def format_int(value: int) -> str:
    """Decimal rendering not subject to the int/str digit limit."""
    return gmpy2.mpz(value).digits(10)


def parse_int(text: str, base: int = 0) -> int:
    """
    Parse an integer of any size.

    With the default base 0 the text is decimal or 0x / 0o / 0b prefixed.

    Raises:
        ValueError: If the text is not an integer literal
    """
    return int(gmpy2.mpz(text.strip(), base))


def is_probable_prime(value: int) -> bool:
    """Probabilistic primality oracle."""
    return bool(gmpy2.is_prime(gmpy2.mpz(value), PRIMALITY_ROUNDS))


def generate_safe_prime(bits: int, cancel: Optional[threading.Event] = None) -> int:
    """
    Generate a safe prime p = 2q + 1 of exactly `bits` bits.

    Args:
        bits: Requested bit length
        cancel: Optional event polled between attempts

    Returns:
        The safe prime

    Raises:
        InvalidBitSize: If no safe prime of that size exists
        SearchCancelled: If `cancel` is set before a prime is found
    """
    if bits < MIN_SAFE_PRIME_BITS:
        raise InvalidBitSize(
            f"size cannot be less than {MIN_SAFE_PRIME_BITS} bits, received {bits}"
        )

    while True:
        if cancel is not None and cancel.is_set():
            raise SearchCancelled(f"safe prime generation of {bits} bits cancelled")
        # getPrime sets the top bit, so 2q + 1 has exactly `bits` bits
        sophie_germain = getPrime(bits - 1)
        candidate = 2 * sophie_germain + 1
        if is_probable_prime(candidate):
            return candidate


def to_pem(d: int, key_type: KeyType = KeyType.PRIVATE) -> str:
    """
    Armor an integer as a PEM block.

    The body is the minimal big-endian byte encoding of the integer,
    not a structured key.
    """
    try:
        data = int(d).to_bytes(max(1, (int(d).bit_length() + 7) // 8), byteorder='big')
    except OverflowError as e:
        raise ConversionError(f"cannot encode {format_int(d)} as unsigned bytes") from e

    return PEM.encode(data, KeyType(key_type).value)


def generate_close_prime_key(bits: int = 512, max_gap: int = 1 << 20, e: int = 65537) -> SampleKey:
    """
    Generate RSA numbers whose primes are deliberately close: q = next_prime(p + delta).

    Args:
        bits: Bit length of p (n is about 2 * bits)
        max_gap: Upper bound on the random delta between p and q
        e: Public exponent

    Returns:
        SampleKey with p < q and gcd(e, (p-1)(q-1)) = 1
    """
    if bits < 8:
        raise InvalidBitSize(f"sample primes need at least 8 bits, received {bits}")
    if max_gap < 1:
        raise ValueError("max_gap must be >= 1")

    while True:
        p = getPrime(bits)
        q = int(gmpy2.next_prime(p + secrets.randbelow(max_gap)))
        phi = (p - 1) * (q - 1)
        if gmpy2.gcd(e, phi) == 1:
            logger.debug(f"Generated close-prime sample with gap {q - p}")
            return SampleKey(p=p, q=q, e=e, n=p * q)
