"""
SPARK Twisted Edwards Curves

Curves a*x^2 + y^2 = 1 + d*x^2*y^2 (mod p), used by EdDSA (RFC 8032).

Arithmetic runs in extended coordinates (X, Y, Z, T) with x = X/Z,
y = Y/Z and x*y = T/Z, using the complete addition and doubling formulas
of Hisil, Wong, Carter and Dawson (2008). The identity is (0, 1).

Each curve fixes its hash, its point encoding width, its secret clamping
rule and its domain separation prefix:

    Ed25519: SHA-512,      32-byte encodings, cofactor 8, dom2 only with context
    Ed448:   SHAKE256/912, 57-byte encodings, cofactor 4, dom4 always
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .base import BaseCurve, CurveFamily, Point, mod_sqrt
from ..primitives import bytes_to_int, digest, int_to_bytes, random_bytes


Extended = Tuple[int, int, int, int]

_IDENTITY: Extended = (0, 1, 1, 0)


@dataclass(frozen=True)
class TwistedEdwardsCurve(BaseCurve):
    """Twisted Edwards curve with its EdDSA instantiation parameters."""
    p: int
    a: int
    d: int
    gx: int
    gy: int
    order: int
    cofactor: int
    encoded_length: int     # b/8: bytes in a point or scalar encoding
    clamp_bit: int          # highest bit forced to 1 by secret clamping
    hash_name: str          # fixed hash; cannot be overridden
    dom_prefix: bytes       # "SigEd25519 no Ed25519 collisions" / "SigEd448"
    always_dom: bool        # Ed448 prefixes dom4 even with an empty context
    name: Optional[str] = field(default=None, compare=False)
    oid: Optional[str] = field(default=None, compare=False)
    aliases: Tuple[str, ...] = field(default=(), compare=False)

    family = CurveFamily.TWISTED_EDWARDS
    component_byteorder = "little"

    def __repr__(self) -> str:
        return f"TwistedEdwardsCurve({self.name}, {self.bit_length} bits)"

    # === Extended-coordinate arithmetic ===

    def _to_extended(self, point: Point) -> Extended:
        x, y = point
        return (x, y, 1, x * y % self.p)

    def _from_extended(self, ep: Extended) -> Point:
        x, y, z, _ = ep
        z_inv = pow(z, -1, self.p)
        return (x * z_inv % self.p, y * z_inv % self.p)

    def _add(self, e1: Extended, e2: Extended) -> Extended:
        x1, y1, z1, t1 = e1
        x2, y2, z2, t2 = e2
        p = self.p
        a = x1 * x2 % p
        b = y1 * y2 % p
        c = t1 * self.d % p * t2 % p
        d = z1 * z2 % p
        e = ((x1 + y1) * (x2 + y2) - a - b) % p
        f = (d - c) % p
        g = (d + c) % p
        h = (b - self.a * a) % p
        return (e * f % p, g * h % p, f * g % p, e * h % p)

    def _double(self, ep: Extended) -> Extended:
        x1, y1, z1, _ = ep
        p = self.p
        a = x1 * x1 % p
        b = y1 * y1 % p
        c = 2 * z1 * z1 % p
        d = self.a * a % p
        e = ((x1 + y1) * (x1 + y1) - a - b) % p
        g = (d + b) % p
        f = (g - c) % p
        h = (d - b) % p
        return (e * f % p, g * h % p, f * g % p, e * h % p)

    # === Group operations ===

    def is_identity(self, point: Point) -> bool:
        return point == (0, 1)

    def add_points(self, p1: Point, p2: Point) -> Point:
        return self._from_extended(self._add(self._to_extended(p1), self._to_extended(p2)))

    def negate_point(self, point: Point) -> Point:
        x, y = point
        return ((-x) % self.p, y)

    def multiply_point(self, point: Point, scalar: int) -> Point:
        """Left-to-right double-and-add. The scalar is not reduced."""
        if scalar < 0:
            return self.multiply_point(self.negate_point(point), -scalar)

        addend = self._to_extended(point)
        result = _IDENTITY
        for bit in bin(scalar)[2:]:
            result = self._double(result)
            if bit == "1":
                result = self._add(result, addend)
        return self._from_extended(result)

    def clear_cofactor(self, point: Point) -> Point:
        """Multiply by the cofactor, mapping small-order components to the identity."""
        return self.multiply_point(point, self.cofactor)

    def is_on_curve(self, point: Point) -> bool:
        if point is None:
            return False
        x, y = point
        p = self.p
        if not (0 <= x < p and 0 <= y < p):
            return False
        xx = x * x % p
        yy = y * y % p
        return (self.a * xx + yy - 1 - self.d * xx * yy) % p == 0

    # === RFC 8032 encoding ===

    def encode_point(self, point: Point) -> bytes:
        """Little-endian y with the low bit of x in the top bit."""
        x, y = point
        value = y | ((x & 1) << (8 * self.encoded_length - 1))
        return int_to_bytes(value, self.encoded_length, "little")

    def decode_point(self, data: bytes) -> Point:
        if len(data) != self.encoded_length:
            raise ValueError(f"Invalid point length: {len(data)} (expected {self.encoded_length})")

        value = bytes_to_int(data, "little")
        sign_bit = 8 * self.encoded_length - 1
        x_0 = value >> sign_bit
        y = value & ((1 << sign_bit) - 1)
        if y >= self.p:
            raise ValueError("Point y-coordinate out of range")

        p = self.p
        yy = y * y % p
        x2 = (yy - 1) * pow((self.d * yy - self.a) % p, -1, p) % p
        x = mod_sqrt(x2, p)
        if x is None:
            raise ValueError("No curve point with this y-coordinate")
        if x == 0 and x_0 == 1:
            raise ValueError("Invalid sign bit for x = 0")
        if (x & 1) != x_0:
            x = p - x
        return (x, y)

    # === EdDSA helpers ===

    def random_secret(self) -> bytes:
        """Fresh RFC 8032 private key (the seed hashed into scalar and prefix)."""
        return random_bytes(self.encoded_length)

    def expand_secret(self, secret: bytes) -> Tuple[int, bytes]:
        """
        Expand an RFC 8032 secret into its signing scalar and nonce prefix.

        The first half of H(secret) is clamped: the low log2(cofactor) bits
        are cleared, bits above clamp_bit are cleared and clamp_bit is set.
        The scalar is returned reduced modulo the group order.

        Args:
            secret: encoded_length bytes

        Returns:
            Tuple[int, bytes]: (scalar mod order, prefix)
        """
        if len(secret) != self.encoded_length:
            raise ValueError(f"Invalid secret length: {len(secret)} (expected {self.encoded_length})")

        h = digest(self.hash_name, secret)
        scalar = bytes_to_int(h[:self.encoded_length], "little")
        scalar &= (1 << self.clamp_bit) - 1
        scalar |= 1 << self.clamp_bit
        scalar &= ~(self.cofactor - 1)
        return scalar % self.order, h[self.encoded_length:]

    def random_scalar(self) -> int:
        """Clamped scalar expanded from a fresh random secret."""
        while True:
            scalar, _ = self.expand_secret(self.random_secret())
            if scalar:
                return scalar

    def dom(self, context: bytes = b"") -> bytes:
        """dom2/dom4 prefix for pure EdDSA (phflag = 0)."""
        if not context and not self.always_dom:
            return b""
        return self.dom_prefix + bytes([0, len(context)]) + context

    @property
    def component_length(self) -> int:
        return self.encoded_length

    def hash_to_scalar(self, *chunks: bytes) -> int:
        """Little-endian digest of the chunks reduced modulo the order."""
        return bytes_to_int(digest(self.hash_name, *chunks), "little") % self.order

    def signature_components_valid(self, first: int, second: int) -> bool:
        return 0 <= first < (1 << (8 * self.encoded_length)) and 0 < second < self.order


# === Named curves (RFC 7748 / RFC 8032) ===

_P25519 = (1 << 255) - 19
ED25519 = TwistedEdwardsCurve(
    p=_P25519,
    a=_P25519 - 1,
    d=(-121665 * pow(121666, -1, _P25519)) % _P25519,
    gx=0x216936d3cd6e53fec0a4e231fdd6dc5c692cc7609525a7b2c9562d608f25d51a,
    gy=0x6666666666666666666666666666666666666666666666666666666666666658,
    order=0x1000000000000000000000000000000014def9dea2f79cd65812631a5cf5d3ed,
    cofactor=8,
    encoded_length=32,
    clamp_bit=254,
    hash_name="sha512",
    dom_prefix=b"SigEd25519 no Ed25519 collisions",
    always_dom=False,
    name="Ed25519",
    oid="1.3.101.112",
)

_P448 = (1 << 448) - (1 << 224) - 1
ED448 = TwistedEdwardsCurve(
    p=_P448,
    a=1,
    d=(-39081) % _P448,
    gx=0x4f1970c66bed0ded221d15a622bf36da9e146570470f1767ea6de324a3d3a46412ae1af72ab66511433b80e18b00938e2626a82bc70cc05e,
    gy=0x693f46716eb6bc248876203756c9c7624bea73736ca3984087789c1e05a0c2d73ad3ff1ce67c39c4fdbd132c4ed7c8ad9808795bf230fa14,
    order=0x3fffffffffffffffffffffffffffffffffffffffffffffffffffffff7cca23e9c44edb49aed63690216cc2728dc58f552378c292ab5844f3,
    cofactor=4,
    encoded_length=57,
    clamp_bit=447,
    hash_name="shake256-912",
    dom_prefix=b"SigEd448",
    always_dom=True,
    name="Ed448",
    oid="1.3.101.113",
)
