"""
PickLock - RSA Public Key Weakness Auditor
==========================================

Recovers the private exponent of an RSA public key by factoring its modulus:
- Fermat factorization for keys generated with close primes
- Experimental concurrent safe-prime guessing for everything else
- FastAPI service and command line front ends
"""

__version__ = "1.0.0"
__author__ = "PickLock Team"
