"""
SPARK Verifier

Checks ECDSA and EdDSA signatures.

Malformed signatures raise InvalidSignatureFormat; a well-formed signature
that does not match returns False. Final comparisons run in constant time
over fixed-width encodings.

EdDSA verification is cofactored on every engine: [c][S]B == [c]R + [c][k]A.
Signatures whose R carries a small-order component verify the same way
whether or not OpenSSL is available.
"""

from typing import Optional, Tuple

from . import openssl
from .codec import get_signature_format
from .curves import CurveFamily, Point, ShortWeierstrassCurve, TwistedEdwardsCurve
from .engine import Engine, EngineContext, default_engine_context
from .primitives import constant_time_compare, digest, int_to_bytes
from .signer import check_context


def ecdsa_verify_generic(
    curve: ShortWeierstrassCurve,
    point: Point,
    message: bytes,
    components: Tuple[int, int],
    hash_name: str,
) -> bool:
    q = curve.order
    r, s = components
    e = curve.truncate_digest(digest(hash_name, message))

    w = pow(s, -1, q)
    recovered = curve.multiply_add(curve.base_point(), e * w % q, point, r * w % q)
    if recovered is None:
        return False

    width = (q.bit_length() + 7) // 8
    return constant_time_compare(int_to_bytes(recovered[0] % q, width), int_to_bytes(r, width))


def eddsa_verify_generic(
    curve: TwistedEdwardsCurve,
    point: Point,
    message: bytes,
    components: Tuple[int, int],
    context: Optional[bytes] = None,
) -> bool:
    big_r, s = components
    encoded_r = int_to_bytes(big_r, curve.encoded_length, "little")
    try:
        r_point = curve.decode_point(encoded_r)
    except ValueError:
        return False

    k = curve.hash_to_scalar(curve.dom(context or b""), encoded_r, curve.encode_point(point), message)
    left = curve.clear_cofactor(curve.multiply_base(s))
    right = curve.clear_cofactor(curve.add_points(r_point, curve.multiply_point(point, k)))
    return constant_time_compare(curve.encode_point(left), curve.encode_point(right))


def verify(
    key,
    message: bytes,
    signature: bytes,
    context: Optional[bytes] = None,
    engine_context: Optional[EngineContext] = None,
) -> bool:
    """
    Verify a signature.

    Args:
        key: PublicKey or PrivateKey
        message: Signed message
        signature: Signature in the key's signature format
        context: EdDSA context; overrides the context bound to the key
        engine_context: Engine context (default: process-wide context)

    Returns:
        bool: True if the signature is valid

    Raises:
        InvalidSignatureFormat: If the signature cannot be decoded
        UnsupportedCurve: If a context is given for a short Weierstrass key
        InvalidContext: If the context is malformed
    """
    curve = key.curve
    components = get_signature_format(key.signature_format).decode(curve, signature)
    context = check_context(curve, context if context is not None else key.context)
    message = bytes(message)
    engine_context = engine_context or default_engine_context()

    if curve.family == CurveFamily.SHORT_WEIERSTRASS:
        engine = engine_context.select(curve, key.hash_name)
        if engine == Engine.OPENSSL:
            return openssl.ecdsa_verify(curve, key.point, message, components, key.hash_name)
        return ecdsa_verify_generic(curve, key.point, message, components, key.hash_name)

    engine = engine_context.select(curve, key.hash_name, context)
    # OpenSSL checks the cofactorless equation, which implies the
    # cofactored one; only its rejections are rechecked
    if engine == Engine.NATIVE_EDDSA and openssl.eddsa_verify(curve, key.point, message, components):
        return True
    return eddsa_verify_generic(curve, key.point, message, components, context)
