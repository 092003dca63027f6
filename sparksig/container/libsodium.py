"""
SPARK libsodium Key Format

Raw Ed25519 keys as produced by crypto_sign_keypair():
    secret key: 32-byte seed || 32-byte public key
    public key: 32-byte encoded point

Binary only and never auto-detected; ask for it by name.
"""

from typing import Optional

from .base import ContainerFormat, KeyComponents, decode_point
from ..curves import ED25519, BaseCurve, Point
from ..errors import InvalidKeyMaterial, UnsupportedAlgorithm, UnsupportedCurve


SEED_LENGTH = 32
PUBLIC_LENGTH = 32


class LibsodiumFormat(ContainerFormat):
    """Raw Ed25519 keys in libsodium layout."""

    name = "libsodium"

    def load(self, data: bytes, password: Optional[bytes] = None) -> KeyComponents:
        if password:
            raise UnsupportedAlgorithm("libsodium keys cannot be encrypted")

        if len(data) == SEED_LENGTH + PUBLIC_LENGTH:
            return KeyComponents(
                curve=ED25519,
                point=decode_point(ED25519, data[SEED_LENGTH:]),
                secret=data[:SEED_LENGTH],
            )
        if len(data) == PUBLIC_LENGTH:
            return KeyComponents(curve=ED25519, point=decode_point(ED25519, data))
        raise InvalidKeyMaterial(f"Invalid libsodium key length: {len(data)} (expected 32 or 64)")

    def save_private_key(
        self,
        curve: BaseCurve,
        scalar: int,
        secret: Optional[bytes],
        point: Point,
        password: Optional[bytes] = None,
    ) -> bytes:
        if curve != ED25519:
            raise UnsupportedCurve("libsodium keys are Ed25519 only")
        if password:
            raise UnsupportedAlgorithm("libsodium keys cannot be encrypted")
        return secret + curve.encode_point(point)

    def save_public_key(self, curve: BaseCurve, point: Point) -> bytes:
        if curve != ED25519:
            raise UnsupportedCurve("libsodium keys are Ed25519 only")
        return curve.encode_point(point)
