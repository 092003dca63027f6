"""
SPARK ASN.1 Structures

asn1crypto schemas for the key containers, and conversion between curve
objects and EC domain parameters.

The PKCS#8 and SubjectPublicKeyInfo schemas are declared here rather than
taken from asn1crypto.keys so that the EC private key field is parsed as
a plain OCTET STRING whatever its width.

Structures:
    AlgorithmIdentifier  RFC 5280
    PrivateKeyInfo       RFC 5958 (OneAsymmetricKey, v1 and v2)
    PublicKeyInfo        RFC 5280 SubjectPublicKeyInfo
    ECPrivateKey         RFC 5915
    ECDomainParameters   SEC 1 / RFC 3279 (from asn1crypto.keys)
"""

from dataclasses import replace

from asn1crypto import core, keys

from ..curves import (
    BaseCurve,
    CurveFamily,
    ShortWeierstrassCurve,
    curve_from_oid,
    is_probable_prime,
    match_named_curve,
)
from ..errors import InvalidKeyMaterial, UnsupportedCurve
from ..primitives import bytes_to_int, int_to_bytes


EC_PUBLIC_KEY_OID = "1.2.840.10045.2.1"
ED25519_OID = "1.3.101.112"
ED448_OID = "1.3.101.113"
EDWARDS_OIDS = (ED25519_OID, ED448_OID)

# Largest field accepted in explicit domain parameters
MAX_FIELD_BITS = 1024


class AlgorithmIdentifier(core.Sequence):
    _fields = [
        ('algorithm', core.ObjectIdentifier),
        ('parameters', core.Any, {'optional': True}),
    ]


class Attributes(core.SetOf):
    _child_spec = core.Any


class PrivateKeyInfo(core.Sequence):
    _fields = [
        ('version', core.Integer),
        ('private_key_algorithm', AlgorithmIdentifier),
        ('private_key', core.OctetString),
        ('attributes', Attributes, {'implicit': 0, 'optional': True}),
        ('public_key', core.OctetBitString, {'implicit': 1, 'optional': True}),
    ]


class PublicKeyInfo(core.Sequence):
    _fields = [
        ('algorithm', AlgorithmIdentifier),
        ('public_key', core.OctetBitString),
    ]


class ECPrivateKey(core.Sequence):
    _fields = [
        ('version', core.Integer),
        ('private_key', core.OctetString),
        ('parameters', keys.ECDomainParameters, {'explicit': 0, 'optional': True}),
        ('public_key', keys.ECPointBitString, {'explicit': 1, 'optional': True}),
    ]


def is_present(value: core.Asn1Value) -> bool:
    """False for an omitted OPTIONAL field."""
    return not isinstance(value, core.Void)


def scalar_length(curve: BaseCurve) -> int:
    """Width of an ECPrivateKey privateKey octet string."""
    return (curve.order.bit_length() + 7) // 8


def domain_parameters(curve: BaseCurve, named_curve: bool = True) -> keys.ECDomainParameters:
    """
    Build ECDomainParameters for a short Weierstrass curve.

    Args:
        curve: Curve to describe
        named_curve: Use the curve OID when the curve has one; otherwise
            (or when False) write explicit prime-field parameters

    Raises:
        UnsupportedCurve: For twisted Edwards curves
    """
    if curve.family != CurveFamily.SHORT_WEIERSTRASS:
        raise UnsupportedCurve(f"{curve.name} has no EC domain parameters")

    if named_curve and curve.oid:
        return keys.ECDomainParameters(name='named', value=curve.oid)

    n = curve.field_length
    return keys.ECDomainParameters(name='specified', value={
        'version': 'ecdpVer1',
        'field_id': {
            'field_type': 'prime_field',
            'parameters': curve.p,
        },
        'curve': {
            'a': int_to_bytes(curve.a % curve.p, n),
            'b': int_to_bytes(curve.b % curve.p, n),
        },
        'base': curve.encode_point(curve.base_point()),
        'order': curve.order,
        'cofactor': curve.cofactor,
    })


def curve_from_domain(domain: keys.ECDomainParameters) -> BaseCurve:
    """
    Resolve ECDomainParameters to a curve.

    Explicit parameters equal to a named curve resolve to that named curve.

    Raises:
        UnsupportedCurve: Unknown named curve or a binary field
        InvalidKeyMaterial: implicitCA or inconsistent explicit parameters
    """
    if domain.name == 'named':
        return curve_from_oid(domain.chosen.dotted)
    if domain.name != 'specified':
        raise InvalidKeyMaterial("implicitCA curve parameters are not supported")

    spec = domain.chosen
    if spec['field_id']['field_type'].native != 'prime_field':
        raise UnsupportedCurve("Only prime field curves are supported")

    p = spec['field_id']['parameters'].native
    if not isinstance(p, int) or p < 5 or p.bit_length() > MAX_FIELD_BITS:
        raise InvalidKeyMaterial("Invalid field prime")
    if not is_probable_prime(p):
        raise InvalidKeyMaterial("Field modulus is not prime")

    order = spec['order'].native
    cofactor = spec['cofactor'].native if is_present(spec['cofactor']) else 1
    if order < 2 or cofactor < 1:
        raise InvalidKeyMaterial("Invalid curve order")
    # Hasse: order <= p + 1 + 2 * sqrt(p) < 2 * p + 2
    if order > 2 * p + 2 or not is_probable_prime(order):
        raise InvalidKeyMaterial("Curve order is not a prime subgroup order")

    curve = ShortWeierstrassCurve(
        p=p,
        a=bytes_to_int(spec['curve']['a'].native) % p,
        b=bytes_to_int(spec['curve']['b'].native) % p,
        gx=0,
        gy=0,
        order=order,
        cofactor=cofactor,
    )
    try:
        gx, gy = curve.decode_point(spec['base'].native)
    except ValueError as e:
        raise InvalidKeyMaterial(f"Invalid base point: {e}") from e
    curve = replace(curve, gx=gx, gy=gy)
    if not curve.has_valid_order(curve.base_point()):
        raise InvalidKeyMaterial("Base point does not have the stated order")

    return match_named_curve(curve) or curve
