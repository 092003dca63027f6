"""
SPARK Key Manager

Entry points for obtaining keys:
- create_key(): fresh key pair on a named curve
- load(): parse a key container into PrivateKey, PublicKey or Parameters
- get_parameters(): serialize only the curve definition of a key

Loaded keys are validated before they are returned: private scalars must
lie in [1, q-1], public points must be on the curve, and a stored public
point must equal the one derived from the private scalar.
"""

import logging
from typing import Optional, Union

from .codec import get_signature_format
from .config import get_config
from .container import KeyComponents, export_parameters, load_components
from .curves import BaseCurve, CurveFamily, get_curve
from .errors import InvalidKeyMaterial
from .keys import KeyMaterial, Parameters, PrivateKey, PublicKey, check_hash


logger = logging.getLogger("sparksig.manager")

# Edwards keys encode signatures as RFC 8032 ENC(R) || ENC(S)
EDWARDS_SIGNATURE_FORMAT = "Raw"


def _defaults(curve: BaseCurve) -> dict:
    """Hash and signature format a new key on this curve starts with."""
    if curve.family == CurveFamily.TWISTED_EDWARDS:
        return {"hash_name": curve.hash_name, "signature_format": EDWARDS_SIGNATURE_FORMAT}

    signing = get_config().signing
    return {
        "hash_name": check_hash(curve, signing.default_hash),
        "signature_format": get_signature_format(signing.signature_format).name,
    }


def create_key(curve_name: str) -> PrivateKey:
    """
    Generate a key pair on a named curve.

    Args:
        curve_name: Curve name or alias, case-insensitive (e.g. "secp256r1",
            "prime256v1", "Ed25519")

    Returns:
        PrivateKey: New private key. Edwards keys are bound to their curve's
        hash; short Weierstrass keys take the configured default hash and
        signature format.

    Raises:
        UnsupportedCurve: If the curve is not registered
    """
    curve = get_curve(curve_name)

    secret = None
    if curve.family == CurveFamily.TWISTED_EDWARDS:
        scalar = 0
        while not scalar:
            secret = curve.random_secret()
            scalar, _ = curve.expand_secret(secret)
    else:
        scalar = curve.random_scalar()

    key = PrivateKey(
        curve=curve,
        point=curve.multiply_base(scalar),
        scalar=scalar,
        secret=secret,
        **_defaults(curve),
    )
    logger.debug(f"Created {curve.name} key")
    return key


def build_key(components: KeyComponents) -> Union[PrivateKey, PublicKey, Parameters]:
    """
    Validate container components and wrap them in a key value.

    Raises:
        InvalidKeyMaterial: Out-of-range scalar, missing Edwards seed,
            invalid point, or a public point that does not match the scalar
    """
    curve = components.curve
    defaults = _defaults(curve)

    if components.is_parameters:
        return Parameters(curve, **defaults)

    if components.is_private:
        if curve.family == CurveFamily.TWISTED_EDWARDS:
            if components.secret is None:
                raise InvalidKeyMaterial(f"{curve.name} private key has no secret seed")
            scalar, _ = curve.expand_secret(components.secret)
        else:
            scalar = components.scalar
            if not 1 <= scalar < curve.order:
                raise InvalidKeyMaterial("Private scalar out of range [1, q-1]")

        point = curve.multiply_base(scalar)
        if components.point is not None and components.point != point:
            raise InvalidKeyMaterial("Public point does not match the private scalar")

        return PrivateKey(
            curve=curve,
            point=point,
            scalar=scalar,
            secret=components.secret,
            **defaults,
        )

    point = components.point
    if not curve.is_on_curve(point) or curve.is_identity(point):
        raise InvalidKeyMaterial("Public point is not a valid curve point")
    return PublicKey(curve=curve, point=point, **defaults)


def load(
    data: Union[bytes, str],
    format: Optional[str] = None,
    password: Union[bytes, str, None] = None,
) -> Union[PrivateKey, PublicKey, Parameters]:
    """
    Load a key container.

    Args:
        data: Key bytes or text (PEM, DER, OpenSSH line, libsodium raw)
        format: PKCS8, PKCS1, OpenSSH or libsodium; detected when omitted
        password: Password for encrypted containers

    Returns:
        PrivateKey, PublicKey or Parameters, depending on what the
        container holds

    Raises:
        InvalidKeyMaterial: Malformed container or invalid key values
        DecryptionError: Missing or wrong password
        UnsupportedCurve: Unknown curve in the container
        UnsupportedAlgorithm: Unknown format name or non-EC key
    """
    key = build_key(load_components(data, format, password))
    logger.debug(f"Loaded {type(key).__name__} on {key.curve_name or 'explicit curve'}")
    return key


def get_parameters(
    key: Union[KeyMaterial, Parameters],
    container_format: str = "PKCS1",
    named_curve: bool = True,
) -> bytes:
    """
    Serialize only the curve definition of a key.

    Args:
        key: Any key or Parameters value
        container_format: PKCS1 or PKCS8 (both write EC PARAMETERS)
        named_curve: Write the curve OID when the curve has one; False
            writes explicit prime-field parameters

    Returns:
        bytes: PEM EC PARAMETERS

    Raises:
        UnsupportedCurve: For twisted Edwards curves
    """
    return export_parameters(key.curve, container_format, named_curve)
