"""
Exception hierarchy for key analysis.

Messages carry the public values involved (modulus, exponent, totient)
and never a recovered factor or private exponent.
"""


class PickLockError(Exception):
    """Base exception for key analysis."""
    pass


class ConfigError(PickLockError):
    """Raised when a configuration value is out of range."""
    pass


class InvalidBitSize(PickLockError):
    """Raised when a prime of an impossible bit length is requested."""
    pass


class DecodeError(PickLockError):
    """Raised when a public key cannot be decoded."""
    pass


class FactorizationFailed(PickLockError):
    """Raised when the close-prime search finds no verified factor pair."""
    pass


class SearchExhausted(PickLockError):
    """Raised when the concurrent search runs out of budget."""
    pass


class NoInverseExists(PickLockError):
    """Raised when the public exponent is not invertible modulo phi."""
    pass


class ConversionError(PickLockError):
    """Raised when a numeric value cannot be converted."""
    pass


class SearchCancelled(PickLockError):
    """Raised inside a worker when generation is interrupted by cancellation."""
    pass
