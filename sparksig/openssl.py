"""
SPARK OpenSSL Bridge

Accelerated ECDSA and EdDSA through the cryptography package, plus
conversions between cryptography key objects and plain curve values.

Only named curves have an OpenSSL counterpart. Every function here works
on (curve, scalar, point) values so the rest of the package never touches
cryptography key objects directly.

Dependencies:
- cryptography (OpenSSL backend)
"""

from typing import Callable, Dict, Optional, Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)
from cryptography.hazmat.primitives import serialization

from .curves import (
    BaseCurve,
    Point,
    get_curve,
)
from .errors import UnsupportedCurve
from .primitives import bytes_to_int, hash_algorithm, int_to_bytes


# Curve name -> cryptography curve class
OPENSSL_CURVES: Dict[str, Callable[[], ec.EllipticCurve]] = {
    "secp192r1": ec.SECP192R1,
    "secp224r1": ec.SECP224R1,
    "secp256r1": ec.SECP256R1,
    "secp384r1": ec.SECP384R1,
    "secp521r1": ec.SECP521R1,
    "secp256k1": ec.SECP256K1,
}

# Edwards curve name -> (private key class, public key class)
OPENSSL_EDWARDS = {
    "Ed25519": (ed25519.Ed25519PrivateKey, ed25519.Ed25519PublicKey),
    "Ed448": (ed448.Ed448PrivateKey, ed448.Ed448PublicKey),
}


def _ec_curve(curve: BaseCurve) -> ec.EllipticCurve:
    factory = OPENSSL_CURVES.get(curve.name or "")
    if factory is None:
        raise UnsupportedCurve(f"No OpenSSL curve for {curve!r}")
    return factory()


def _edwards_classes(curve: BaseCurve):
    classes = OPENSSL_EDWARDS.get(curve.name or "")
    if classes is None:
        raise UnsupportedCurve(f"No OpenSSL Edwards implementation for {curve!r}")
    return classes


def ecdsa_algorithm(hash_name: str, deterministic: bool = False) -> ec.ECDSA:
    """
    Build the cryptography ECDSA signature algorithm.

    Raises:
        TypeError: If deterministic signing is requested on a cryptography
            release without RFC 6979 support
    """
    if deterministic:
        return ec.ECDSA(hash_algorithm(hash_name), deterministic_signing=True)
    return ec.ECDSA(hash_algorithm(hash_name))


# === Key conversion ===

def ec_private_key(curve: BaseCurve, scalar: int) -> ec.EllipticCurvePrivateKey:
    return ec.derive_private_key(scalar, _ec_curve(curve))


def ec_public_key(curve: BaseCurve, point: Point) -> ec.EllipticCurvePublicKey:
    x, y = point
    return ec.EllipticCurvePublicNumbers(x, y, _ec_curve(curve)).public_key()


def edwards_private_key(curve: BaseCurve, secret: bytes):
    private_cls, _ = _edwards_classes(curve)
    return private_cls.from_private_bytes(secret)


def edwards_public_key(curve: BaseCurve, point: Point):
    _, public_cls = _edwards_classes(curve)
    return public_cls.from_public_bytes(curve.encode_point(point))


def to_openssl_private_key(curve: BaseCurve, scalar: int, secret: Optional[bytes] = None):
    """cryptography private key object for a named curve."""
    if curve.name in OPENSSL_EDWARDS:
        return edwards_private_key(curve, secret)
    return ec_private_key(curve, scalar)


def to_openssl_public_key(curve: BaseCurve, point: Point):
    """cryptography public key object for a named curve."""
    if curve.name in OPENSSL_EDWARDS:
        return edwards_public_key(curve, point)
    return ec_public_key(curve, point)


def from_openssl_key(key_object) -> Tuple[BaseCurve, Optional[int], Optional[bytes], Point]:
    """
    Extract plain values from a cryptography key object.

    Returns:
        Tuple: (curve, scalar or None, Edwards secret or None, public point)

    Raises:
        UnsupportedCurve: If the key is not an EC or Edwards key we support
    """
    if isinstance(key_object, ec.EllipticCurvePrivateKey):
        numbers = key_object.private_numbers()
        curve = get_curve(key_object.curve.name)
        public = numbers.public_numbers
        return curve, numbers.private_value, None, (public.x, public.y)

    if isinstance(key_object, ec.EllipticCurvePublicKey):
        numbers = key_object.public_numbers()
        return get_curve(key_object.curve.name), None, None, (numbers.x, numbers.y)

    for name, (private_cls, public_cls) in OPENSSL_EDWARDS.items():
        curve = get_curve(name)
        if isinstance(key_object, private_cls):
            secret = key_object.private_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PrivateFormat.Raw,
                encryption_algorithm=serialization.NoEncryption(),
            )
            scalar, _ = curve.expand_secret(secret)
            public = key_object.public_key().public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw,
            )
            return curve, scalar, secret, curve.decode_point(public)
        if isinstance(key_object, public_cls):
            public = key_object.public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw,
            )
            return curve, None, None, curve.decode_point(public)

    raise UnsupportedCurve(f"Unsupported key type: {type(key_object).__name__}")


# === ECDSA ===

def ecdsa_sign(
    curve: BaseCurve,
    scalar: int,
    message: bytes,
    hash_name: str,
    deterministic: bool,
) -> Tuple[int, int]:
    """Sign with OpenSSL and return (r, s)."""
    signature = ec_private_key(curve, scalar).sign(message, ecdsa_algorithm(hash_name, deterministic))
    return decode_dss_signature(signature)


def ecdsa_verify(
    curve: BaseCurve,
    point: Point,
    message: bytes,
    components: Tuple[int, int],
    hash_name: str,
) -> bool:
    """Verify (r, s) with OpenSSL."""
    signature = encode_dss_signature(components[0], components[1])
    try:
        ec_public_key(curve, point).verify(signature, message, ecdsa_algorithm(hash_name))
    except InvalidSignature:
        return False
    return True


# === EdDSA (pure, empty context) ===

def eddsa_sign(curve: BaseCurve, secret: bytes, message: bytes) -> Tuple[int, int]:
    """Sign with OpenSSL Ed25519/Ed448 and return (R, S) as little-endian integers."""
    signature = edwards_private_key(curve, secret).sign(message)
    width = curve.encoded_length
    return bytes_to_int(signature[:width], "little"), bytes_to_int(signature[width:], "little")


def eddsa_verify(curve: BaseCurve, point: Point, message: bytes, components: Tuple[int, int]) -> bool:
    """Verify (R, S) with OpenSSL Ed25519/Ed448."""
    width = curve.encoded_length
    signature = int_to_bytes(components[0], width, "little") + int_to_bytes(components[1], width, "little")
    try:
        edwards_public_key(curve, point).verify(signature, message)
    except InvalidSignature:
        return False
    return True


__all__ = [
    'OPENSSL_CURVES',
    'OPENSSL_EDWARDS',
    'ecdsa_algorithm',
    'ec_private_key',
    'ec_public_key',
    'edwards_private_key',
    'edwards_public_key',
    'to_openssl_private_key',
    'to_openssl_public_key',
    'from_openssl_key',
    'ecdsa_sign',
    'ecdsa_verify',
    'eddsa_sign',
    'eddsa_verify',
]
