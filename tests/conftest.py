"""
Test fixtures and configuration for pytest.
"""

import gmpy2
import pytest

from picklock.crypto import SampleKey, generate_close_prime_key, public_pem_from_numbers


# 512-bit key generated with a proper RSA generator
SECURE_PUBLIC_KEY_PEM = """-----BEGIN PUBLIC KEY-----
MFwwDQYJKoZIhvcNAQEBBQADSwAwSAJBAMp2Z+WFY2ygdgPMnWpJNxqtuweA1nix
kTirAEQ+F3NKfNEdR9J/+Rq+2ViT3wnamtuBG+10SKuKjr9FKhh/T0sCAwEAAQ==
-----END PUBLIC KEY-----
"""

# 2048-bit modulus built from close primes, with its private exponent
WEAK_2048_N = int(
    "24051723933323373230335109652699872887260372863633030520380856590934224554506308944154529656903683098544282868895265857723676740447085769973038138116162852753658181861191950778361549639563565516085451073539560657386103501608592321148669427604194877552133864887585897064910317370632491325912646759075452895764136071794899761625652745642888012193592843601786282707419064157922868466879644136792854722277212465067471658496818060980989808791352963906077940588038623347540668963885547785982543883250789113853569537794783330309654648546163063571756203834919697878945651911998161025323667873893944714006021586935213636888431"
)
WEAK_2048_D = int(
    "20859605057389981400415296665239606253551311979432043299936333792698939369418558891569637169366135826146428643134992692481438916188899523620207130817470747633629513081286743218201811495234043370443885950972963184234382668232155560092302387896834347699555010854105235260577040893379009940545782216749159515118484219566373157731404293321389017417036945992984437162056145246504943473128453889715274064071687926343900718250671226003207988553491071490774949729393790264296526140962891140650428560103645538027632465103573248308915991466476312603275778085679414182339076676621372222055380237829179961993191380693342799887257"
)

# Toy modulus from two 8-bit safe primes (167 = 2*83 + 1, 227 = 2*113 + 1)
SAFE_PRIME_N = 167 * 227


def _next_non_safe_prime(start: int) -> int:
    """Smallest prime >= start whose (p - 1) / 2 is composite."""
    p = int(gmpy2.next_prime(start - 1))
    while gmpy2.is_prime((p - 1) // 2):
        p = int(gmpy2.next_prime(p))
    return p


@pytest.fixture
def secure_public_key_pem() -> str:
    """PEM of a properly generated 512-bit RSA key."""
    return SECURE_PUBLIC_KEY_PEM


@pytest.fixture
def weak_key() -> SampleKey:
    """Freshly generated 256-bit-prime key with close primes."""
    return generate_close_prime_key(bits=256, max_gap=1 << 16)


@pytest.fixture
def weak_key_pem(weak_key: SampleKey) -> str:
    """PEM rendering of the weak key."""
    return public_pem_from_numbers(weak_key.e, weak_key.n)


@pytest.fixture
def separated_key() -> SampleKey:
    """
    64-bit modulus with far apart primes that are not safe primes,
    so neither strategy can find them.
    """
    p = _next_non_safe_prime(1 << 31)
    q = _next_non_safe_prime(3 << 31)
    e = 65537
    while gmpy2.gcd(e, (p - 1) * (q - 1)) != 1:
        q = _next_non_safe_prime(q + 1)
    return SampleKey(p=p, q=q, e=e, n=p * q)


@pytest.fixture
def weak_2048() -> tuple[int, int]:
    """(n, d) of a 2048-bit key built from close primes, e = 65537."""
    return WEAK_2048_N, WEAK_2048_D


@pytest.fixture
def safe_prime_modulus() -> int:
    """Modulus whose factors are both 8-bit safe primes."""
    return SAFE_PRIME_N


@pytest.fixture
def huge_modulus() -> int:
    """Modulus with more decimal digits than int() and str() accept by default."""
    return (1 << 16384) + 1
