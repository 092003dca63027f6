"""
SPARK Signer

Produces ECDSA and EdDSA signatures for private keys.

Flow:
    1. Check the context against the curve family
    2. Pick an engine for (curve, hash, context, nonce mode)
    3. Hash, derive the nonce and compute the two components
    4. Encode with the key's signature format

ECDSA nonces are RFC 6979 deterministic unless configuration selects
random nonces. EdDSA nonces are always the RFC 8032 derivation from the
secret prefix; there is no way to override them.
"""

from typing import Optional, Tuple

from . import openssl
from .codec import get_signature_format
from .config import get_config
from .curves import BaseCurve, CurveFamily, Point, ShortWeierstrassCurve, TwistedEdwardsCurve
from .engine import Engine, EngineContext, default_engine_context
from .errors import InvalidContext, InvalidKeyMaterial, UnsupportedCurve
from .nonce import random_nonces, rfc6979_nonces
from .primitives import bytes_to_int, digest


MAX_CONTEXT_LENGTH = 255


def check_context(curve: BaseCurve, context: Optional[bytes]) -> Optional[bytes]:
    """
    Validate a domain separation context.

    Args:
        curve: Key curve
        context: Context bytes or None

    Returns:
        The context as bytes, or None

    Raises:
        UnsupportedCurve: If a context is given for a short Weierstrass curve
        InvalidContext: If the context is not bytes or exceeds 255 bytes
    """
    if context is None:
        return None
    if curve.family != CurveFamily.TWISTED_EDWARDS:
        raise UnsupportedCurve("Only Ed25519 and Ed448 support contexts")
    if not isinstance(context, (bytes, bytearray)):
        raise InvalidContext(f"Context must be bytes, not {type(context).__name__}")
    if len(context) > MAX_CONTEXT_LENGTH:
        raise InvalidContext(f"Context is {len(context)} bytes; at most {MAX_CONTEXT_LENGTH} allowed")
    return bytes(context)


def ecdsa_sign_generic(
    curve: ShortWeierstrassCurve,
    scalar: int,
    message: bytes,
    hash_name: str,
    deterministic: bool = True,
) -> Tuple[int, int]:
    """
    ECDSA signature with the generic engine.

    Returns:
        Tuple[int, int]: (r, s), both in [1, q-1]
    """
    q = curve.order
    message_digest = digest(hash_name, message)
    e = curve.truncate_digest(message_digest)

    if deterministic:
        nonces = rfc6979_nonces(curve, scalar, message_digest, hash_name)
    else:
        nonces = random_nonces(curve)

    for k in nonces:
        r = curve.multiply_base(k)[0] % q
        if r == 0:
            continue
        s = pow(k, -1, q) * (e + r * scalar) % q
        if s == 0:
            continue
        return r, s


def eddsa_sign_generic(
    curve: TwistedEdwardsCurve,
    secret: bytes,
    point: Point,
    message: bytes,
    context: Optional[bytes] = None,
) -> Tuple[int, int]:
    """
    Pure EdDSA signature (RFC 8032 section 5.1.6 / 5.2.6).

    Returns:
        Tuple[int, int]: (R as a little-endian integer, S)
    """
    scalar, prefix = curve.expand_secret(secret)
    dom = curve.dom(context or b"")

    r = curve.hash_to_scalar(dom, prefix, message)
    encoded_r = curve.encode_point(curve.multiply_base(r))
    k = curve.hash_to_scalar(dom, encoded_r, curve.encode_point(point), message)
    s = (r + k * scalar) % curve.order
    return bytes_to_int(encoded_r, "little"), s


def sign(
    key,
    message: bytes,
    context: Optional[bytes] = None,
    engine_context: Optional[EngineContext] = None,
) -> bytes:
    """
    Sign a message.

    Args:
        key: PrivateKey
        message: Message bytes
        context: EdDSA context; overrides the context bound to the key
        engine_context: Engine context (default: process-wide context)

    Returns:
        bytes: Signature in the key's signature format

    Raises:
        InvalidKeyMaterial: If the key has no private scalar
        UnsupportedCurve: If a context is given for a short Weierstrass key
        InvalidContext: If the context is malformed
    """
    if key.scalar is None:
        raise InvalidKeyMaterial("Public keys cannot sign")

    curve = key.curve
    message = bytes(message)
    context = check_context(curve, context if context is not None else key.context)
    codec = get_signature_format(key.signature_format)
    engine_context = engine_context or default_engine_context()

    if curve.family == CurveFamily.SHORT_WEIERSTRASS:
        deterministic = get_config().signing.ecdsa_nonce == "deterministic"
        engine = engine_context.select(curve, key.hash_name, None, deterministic)
        if engine == Engine.OPENSSL:
            components = openssl.ecdsa_sign(curve, key.scalar, message, key.hash_name, deterministic)
        else:
            components = ecdsa_sign_generic(curve, key.scalar, message, key.hash_name, deterministic)
    else:
        if key.secret is None:
            raise InvalidKeyMaterial(f"{curve.name} private key has no secret seed")
        engine = engine_context.select(curve, key.hash_name, context)
        if engine == Engine.NATIVE_EDDSA:
            components = openssl.eddsa_sign(curve, key.secret, message)
        else:
            components = eddsa_sign_generic(curve, key.secret, key.point, message, context)

    return codec.encode(curve, components)
