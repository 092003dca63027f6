"""
SPARK Short Weierstrass Curves

Prime-field curves y^2 = x^3 + a*x + b (mod p), used by ECDSA.

Arithmetic runs in Jacobian coordinates (X, Y, Z) representing the affine
point (X/Z^2, Y/Z^3); Z = 0 is the point at infinity. Conversion back to
affine costs one modular inversion per scalar multiplication.

Point encoding follows SEC 1 section 2.3.3:
    uncompressed: 0x04 || X || Y
    compressed:   0x02 | (Y & 1) || X
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .base import BaseCurve, CurveFamily, Point, mod_sqrt
from ..primitives import bytes_to_int, int_to_bytes


Jacobian = Tuple[int, int, int]

_INFINITY: Jacobian = (1, 1, 0)


@dataclass(frozen=True)
class ShortWeierstrassCurve(BaseCurve):
    """
    Short Weierstrass curve over a prime field.

    Equality compares the domain parameters only, so a curve rebuilt from
    explicit parameters compares equal to the named curve it matches.
    """
    p: int
    a: int
    b: int
    gx: int
    gy: int
    order: int
    cofactor: int = 1
    name: Optional[str] = field(default=None, compare=False)
    oid: Optional[str] = field(default=None, compare=False)
    aliases: Tuple[str, ...] = field(default=(), compare=False)

    family = CurveFamily.SHORT_WEIERSTRASS

    def __repr__(self) -> str:
        return f"ShortWeierstrassCurve({self.name or 'explicit'}, {self.bit_length} bits)"

    # === Jacobian arithmetic ===

    def _to_jacobian(self, point: Point) -> Jacobian:
        if point is None:
            return _INFINITY
        return (point[0], point[1], 1)

    def _from_jacobian(self, jp: Jacobian) -> Point:
        x, y, z = jp
        if z == 0:
            return None
        p = self.p
        z_inv = pow(z, -1, p)
        z_inv2 = z_inv * z_inv % p
        return (x * z_inv2 % p, y * z_inv2 * z_inv % p)

    def _double(self, jp: Jacobian) -> Jacobian:
        x, y, z = jp
        if z == 0 or y == 0:
            return _INFINITY
        p = self.p
        yy = y * y % p
        zz = z * z % p
        s = 4 * x * yy % p
        m = (3 * x * x + self.a * zz * zz) % p
        x3 = (m * m - 2 * s) % p
        y3 = (m * (s - x3) - 8 * yy * yy) % p
        z3 = 2 * y * z % p
        return (x3, y3, z3)

    def _add(self, j1: Jacobian, j2: Jacobian) -> Jacobian:
        x1, y1, z1 = j1
        x2, y2, z2 = j2
        if z1 == 0:
            return j2
        if z2 == 0:
            return j1

        p = self.p
        z1z1 = z1 * z1 % p
        z2z2 = z2 * z2 % p
        u1 = x1 * z2z2 % p
        u2 = x2 * z1z1 % p
        s1 = y1 * z2 * z2z2 % p
        s2 = y2 * z1 * z1z1 % p

        if u1 == u2:
            if s1 != s2:
                return _INFINITY
            return self._double(j1)

        h = (u2 - u1) % p
        r = (s2 - s1) % p
        hh = h * h % p
        hhh = h * hh % p
        v = u1 * hh % p
        x3 = (r * r - hhh - 2 * v) % p
        y3 = (r * (v - x3) - s1 * hhh) % p
        z3 = z1 * z2 * h % p
        return (x3, y3, z3)

    # === Group operations ===

    def is_identity(self, point: Point) -> bool:
        return point is None

    def add_points(self, p1: Point, p2: Point) -> Point:
        return self._from_jacobian(self._add(self._to_jacobian(p1), self._to_jacobian(p2)))

    def negate_point(self, point: Point) -> Point:
        if point is None:
            return None
        return (point[0], (-point[1]) % self.p)

    def multiply_point(self, point: Point, scalar: int) -> Point:
        """Left-to-right double-and-add. The scalar is not reduced."""
        if point is None or scalar == 0:
            return None
        if scalar < 0:
            return self.multiply_point(self.negate_point(point), -scalar)

        addend = self._to_jacobian(point)
        result = _INFINITY
        for bit in bin(scalar)[2:]:
            result = self._double(result)
            if bit == "1":
                result = self._add(result, addend)
        return self._from_jacobian(result)

    def multiply_add(self, p1: Point, k1: int, p2: Point, k2: int) -> Point:
        """
        Compute k1*p1 + k2*p2 with a single doubling chain (Shamir's trick).

        Both scalars must be non-negative. Used by ECDSA verification.
        """
        j1 = self._to_jacobian(p1)
        j2 = self._to_jacobian(p2)
        j12 = self._add(j1, j2)

        result = _INFINITY
        for i in range(max(k1.bit_length(), k2.bit_length()) - 1, -1, -1):
            result = self._double(result)
            b1 = (k1 >> i) & 1
            b2 = (k2 >> i) & 1
            if b1 and b2:
                result = self._add(result, j12)
            elif b1:
                result = self._add(result, j1)
            elif b2:
                result = self._add(result, j2)
        return self._from_jacobian(result)

    def is_on_curve(self, point: Point) -> bool:
        """
        Check the curve equation.

        The point at infinity has no affine coordinates and is reported as
        not on the curve, since it is never a valid public point.
        """
        if point is None:
            return False
        x, y = point
        p = self.p
        if not (0 <= x < p and 0 <= y < p):
            return False
        return (y * y - (x * x * x + self.a * x + self.b)) % p == 0

    # === Encoding ===

    def encode_point(self, point: Point, compressed: bool = False) -> bytes:
        if point is None:
            raise ValueError("Cannot encode the point at infinity")
        n = self.field_length
        x, y = point
        if compressed:
            return bytes([0x02 | (y & 1)]) + int_to_bytes(x, n)
        return b"\x04" + int_to_bytes(x, n) + int_to_bytes(y, n)

    def decode_point(self, data: bytes) -> Point:
        n = self.field_length
        if not data:
            raise ValueError("Empty point encoding")

        prefix = data[0]
        if prefix == 0x04 and len(data) == 1 + 2 * n:
            point = (bytes_to_int(data[1:1 + n]), bytes_to_int(data[1 + n:]))
        elif prefix in (0x02, 0x03) and len(data) == 1 + n:
            x = bytes_to_int(data[1:])
            if x >= self.p:
                raise ValueError("Point x-coordinate out of range")
            y = mod_sqrt(x * x * x + self.a * x + self.b, self.p)
            if y is None:
                raise ValueError("No curve point with this x-coordinate")
            if (y & 1) != (prefix & 1):
                y = self.p - y
            point = (x, y)
        else:
            raise ValueError(f"Invalid point encoding ({len(data)} bytes, prefix 0x{prefix:02x})")

        if not self.is_on_curve(point):
            raise ValueError("Point is not on the curve")
        return point

    # === ECDSA helpers ===

    def truncate_digest(self, digest: bytes) -> int:
        """Leftmost order-bit-length bits of a digest as an integer (bits2int)."""
        value = bytes_to_int(digest)
        excess = len(digest) * 8 - self.order.bit_length()
        if excess > 0:
            value >>= excess
        return value

    def signature_components_valid(self, first: int, second: int) -> bool:
        return 0 < first < self.order and 0 < second < self.order


# === Named curves (SEC 2 / FIPS 186-4) ===

_P192 = 0xfffffffffffffffffffffffffffffffeffffffffffffffff
SECP192R1 = ShortWeierstrassCurve(
    p=_P192,
    a=_P192 - 3,
    b=0x64210519e59c80e70fa7e9ab72243049feb8deecc146b9b1,
    gx=0x188da80eb03090f67cbf20eb43a18800f4ff0afd82ff1012,
    gy=0x07192b95ffc8da78631011ed6b24cdd573f977a11e794811,
    order=0xffffffffffffffffffffffff99def836146bc9b1b4d22831,
    name="secp192r1",
    oid="1.2.840.10045.3.1.1",
    aliases=("prime192v1", "nistp192", "p-192", "p192"),
)

_P224 = 0xffffffffffffffffffffffffffffffff000000000000000000000001
SECP224R1 = ShortWeierstrassCurve(
    p=_P224,
    a=_P224 - 3,
    b=0xb4050a850c04b3abf54132565044b0b7d7bfd8ba270b39432355ffb4,
    gx=0xb70e0cbd6bb4bf7f321390b94a03c1d356c21122343280d6115c1d21,
    gy=0xbd376388b5f723fb4c22dfe6cd4375a05a07476444d5819985007e34,
    order=0xffffffffffffffffffffffffffff16a2e0b8f03e13dd29455c5c2a3d,
    name="secp224r1",
    oid="1.3.132.0.33",
    aliases=("nistp224", "p-224", "p224"),
)

_P256 = 0xffffffff00000001000000000000000000000000ffffffffffffffffffffffff
SECP256R1 = ShortWeierstrassCurve(
    p=_P256,
    a=_P256 - 3,
    b=0x5ac635d8aa3a93e7b3ebbd55769886bc651d06b0cc53b0f63bce3c3e27d2604b,
    gx=0x6b17d1f2e12c4247f8bce6e563a440f277037d812deb33a0f4a13945d898c296,
    gy=0x4fe342e2fe1a7f9b8ee7eb4a7c0f9e162bce33576b315ececbb6406837bf51f5,
    order=0xffffffff00000000ffffffffffffffffbce6faada7179e84f3b9cac2fc632551,
    name="secp256r1",
    oid="1.2.840.10045.3.1.7",
    aliases=("prime256v1", "nistp256", "p-256", "p256"),
)

_P384 = 0xfffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffeffffffff0000000000000000ffffffff
SECP384R1 = ShortWeierstrassCurve(
    p=_P384,
    a=_P384 - 3,
    b=0xb3312fa7e23ee7e4988e056be3f82d19181d9c6efe8141120314088f5013875ac656398d8a2ed19d2a85c8edd3ec2aef,
    gx=0xaa87ca22be8b05378eb1c71ef320ad746e1d3b628ba79b9859f741e082542a385502f25dbf55296c3a545e3872760ab7,
    gy=0x3617de4a96262c6f5d9e98bf9292dc29f8f41dbd289a147ce9da3113b5f0b8c00a60b1ce1d7e819d7a431d7c90ea0e5f,
    order=0xffffffffffffffffffffffffffffffffffffffffffffffffc7634d81f4372ddf581a0db248b0a77aecec196accc52973,
    name="secp384r1",
    oid="1.3.132.0.34",
    aliases=("nistp384", "p-384", "p384"),
)

_P521 = (1 << 521) - 1
SECP521R1 = ShortWeierstrassCurve(
    p=_P521,
    a=_P521 - 3,
    b=0x0051953eb9618e1c9a1f929a21a0b68540eea2da725b99b315f3b8b489918ef109e156193951ec7e937b1652c0bd3bb1bf073573df883d2c34f1ef451fd46b503f00,
    gx=0x00c6858e06b70404e9cd9e3ecb662395b4429c648139053fb521f828af606b4d3dbaa14b5e77efe75928fe1dc127a2ffa8de3348b3c1856a429bf97e7e31c2e5bd66,
    gy=0x011839296a789a3bc0045c8a5fb42c7d1bd998f54449579b446817afbd17273e662c97ee72995ef42640c550b9013fad0761353c7086a272c24088be94769fd16650,
    order=0x01fffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffa51868783bf2f966b7fcc0148f709a5d03bb5c9b8899c47aebb6fb71e91386409,
    name="secp521r1",
    oid="1.3.132.0.35",
    aliases=("nistp521", "p-521", "p521"),
)

SECP256K1 = ShortWeierstrassCurve(
    p=0xfffffffffffffffffffffffffffffffffffffffffffffffffffffffefffffc2f,
    a=0,
    b=7,
    gx=0x79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798,
    gy=0x483ada7726a3c4655da4fbfc0e1108a8fd17b448a68554199c47d08ffb10d4b8,
    order=0xfffffffffffffffffffffffffffffffebaaedce6af48a03bbfd25e8cd0364141,
    name="secp256k1",
    oid="1.3.132.0.10",
)
