"""
SPARK Curve Base Class

Defines the arithmetic interface shared by both curve families.

Design Principles:
- Closed set of families, tagged by CurveFamily
- Affine points are plain (x, y) tuples; None is the point at infinity
- Curves are immutable and shared by every key created on them
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Tuple

from ..primitives import random_int_below


Point = Optional[Tuple[int, int]]


class CurveFamily(Enum):
    """Curve family tag."""
    SHORT_WEIERSTRASS = "short_weierstrass"   # ECDSA
    TWISTED_EDWARDS = "twisted_edwards"       # EdDSA


_SMALL_PRIMES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47)


def is_probable_prime(n: int, rounds: int = 40) -> bool:
    """
    Miller-Rabin primality test with random witnesses.

    A composite passes with probability at most 4^-rounds.
    """
    if n < 2:
        return False
    for prime in _SMALL_PRIMES:
        if n % prime == 0:
            return n == prime

    d, s = n - 1, 0
    while d % 2 == 0:
        d //= 2
        s += 1

    for _ in range(rounds):
        x = pow(random_int_below(n - 1) + 1, d, n)
        if x in (1, n - 1):
            continue
        for _ in range(s - 1):
            x = x * x % n
            if x == n - 1:
                break
        else:
            return False
    return True


def mod_sqrt(value: int, p: int) -> Optional[int]:
    """
    Square root modulo an odd prime.

    Uses the direct exponentiation shortcut when p = 3 (mod 4) and
    Tonelli-Shanks otherwise (P-224 and Ed25519 need the general case).

    Returns:
        A root r with r*r = value (mod p), or None if value is a non-residue
    """
    value %= p
    if value == 0:
        return 0
    if pow(value, (p - 1) // 2, p) != 1:
        return None

    if p % 4 == 3:
        return pow(value, (p + 1) // 4, p)

    # p - 1 = q * 2^s with q odd
    q, s = p - 1, 0
    while q % 2 == 0:
        q //= 2
        s += 1

    z = 2
    while pow(z, (p - 1) // 2, p) != p - 1:
        z += 1

    m = s
    c = pow(z, q, p)
    t = pow(value, q, p)
    r = pow(value, (q + 1) // 2, p)
    while t != 1:
        i, t2 = 0, t
        while t2 != 1:
            t2 = t2 * t2 % p
            i += 1
        b = pow(c, 1 << (m - i - 1), p)
        m = i
        c = b * b % p
        t = t * c % p
        r = r * b % p
    return r


class BaseCurve(ABC):
    """
    Abstract base class for elliptic curves.

    Concrete curves are dataclasses providing at least the fields
    name, oid, p, order, cofactor, gx and gy.

    Usage:
        curve = get_curve("secp256r1")
        scalar = curve.random_scalar()
        point = curve.multiply_base(scalar)
        assert curve.is_on_curve(point)
    """

    family: CurveFamily

    # Field values every concrete curve declares
    name: Optional[str]
    oid: Optional[str]
    p: int
    order: int
    cofactor: int
    gx: int
    gy: int

    def base_point(self) -> Point:
        """Generator of the prime-order subgroup."""
        return (self.gx, self.gy)

    @property
    def bit_length(self) -> int:
        """Size of the field in bits."""
        return self.p.bit_length()

    @property
    def field_length(self) -> int:
        """Size of a field element in bytes."""
        return (self.p.bit_length() + 7) // 8

    @property
    def is_named(self) -> bool:
        return self.name is not None

    # Byte order and width of each signature component in the Raw codec
    component_byteorder = "big"

    @property
    def component_length(self) -> int:
        return self.field_length

    def random_scalar(self) -> int:
        """Uniform secret scalar in [1, order - 1] from the OS CSPRNG."""
        return random_int_below(self.order)

    def multiply_base(self, scalar: int) -> Point:
        """Compute scalar * G."""
        return self.multiply_point(self.base_point(), scalar)

    def has_valid_order(self, point: Point) -> bool:
        """True if order * point is the identity."""
        return self.is_identity(self.multiply_point(point, self.order))

    @abstractmethod
    def is_identity(self, point: Point) -> bool:
        """True for the neutral element of the group."""
        pass

    @abstractmethod
    def add_points(self, p1: Point, p2: Point) -> Point:
        """Group addition of two affine points."""
        pass

    @abstractmethod
    def negate_point(self, point: Point) -> Point:
        """Additive inverse of a point."""
        pass

    @abstractmethod
    def multiply_point(self, point: Point, scalar: int) -> Point:
        """Scalar multiplication."""
        pass

    @abstractmethod
    def is_on_curve(self, point: Point) -> bool:
        """True if the point satisfies the curve equation."""
        pass

    @abstractmethod
    def encode_point(self, point: Point) -> bytes:
        """Serialize a point in the family's standard encoding."""
        pass

    @abstractmethod
    def decode_point(self, data: bytes) -> Point:
        """
        Parse an encoded point.

        Raises:
            ValueError: If the encoding is malformed or not on the curve
        """
        pass

    @abstractmethod
    def signature_components_valid(self, first: int, second: int) -> bool:
        """Range check applied by every signature codec on decode."""
        pass
