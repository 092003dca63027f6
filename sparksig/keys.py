"""
SPARK Key Material

Immutable key values bound to a curve.

Key Types:
- PrivateKey: scalar, public point and, for Edwards curves, the RFC 8032
  secret the scalar is expanded from
- PublicKey: public point only
- Parameters: curve only, as loaded from an EC PARAMETERS container

Every key also carries its signing configuration: hash, signature format,
EdDSA context and (private keys) an export password. The with_* builders
return a new key that shares the curve and the scalar/point; nothing is
ever mutated in place.

SECURITY NOTES:
- Scalars, secrets and passwords are excluded from repr()
- Edwards keys are pinned to their curve's hash
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from .codec import get_signature_format
from .config import get_config
from .container import export_key, export_parameters
from .container.openssh import fingerprint as openssh_fingerprint
from .curves import BaseCurve, CurveFamily, Point
from .engine import Engine, EngineContext, default_engine_context
from .errors import UnsupportedAlgorithm, UnsupportedCurve
from .primitives import XOF_HASHES, hash_algorithm, normalize_hash_name
from .signer import check_context
from . import signer, verifier


def check_hash(curve: BaseCurve, hash_name: str) -> str:
    """
    Validate a hash for a curve and return its registry name.

    Raises:
        UnsupportedAlgorithm: For unknown hashes, a non-canonical hash on an
            Edwards curve, or an extendable-output hash on ECDSA
    """
    name = normalize_hash_name(hash_name)
    if curve.family == CurveFamily.TWISTED_EDWARDS:
        if name != curve.hash_name:
            raise UnsupportedAlgorithm(f"{curve.name} only supports {curve.hash_name} as a hash")
        return name

    hash_algorithm(name)
    if name in XOF_HASHES:
        raise UnsupportedAlgorithm(f"{hash_name} cannot be used with ECDSA")
    return name


@dataclass(frozen=True)
class Parameters:
    """Curve-only value with no point and no scalar."""
    curve: BaseCurve
    hash_name: str = "sha256"
    signature_format: str = "ASN1"

    @property
    def curve_name(self) -> Optional[str]:
        return self.curve.name

    def get_length(self) -> int:
        return self.curve.bit_length

    def to_bytes(self, format: str = "PKCS1", named_curve: bool = True) -> bytes:
        """Serialize as an EC PARAMETERS container."""
        return export_parameters(self.curve, format, named_curve)


@dataclass(frozen=True)
class KeyMaterial:
    """
    Common base of PrivateKey and PublicKey.

    Use create_key() or load() to obtain keys; the constructors do not
    check that the point matches the scalar.
    """
    curve: BaseCurve
    point: Point
    scalar: Optional[int] = field(default=None, repr=False)
    secret: Optional[bytes] = field(default=None, repr=False)
    hash_name: str = "sha256"
    signature_format: str = "ASN1"
    context: Optional[bytes] = None
    password: Optional[bytes] = field(default=None, repr=False)

    @property
    def family(self) -> CurveFamily:
        return self.curve.family

    @property
    def curve_name(self) -> Optional[str]:
        """Registry name of the curve, or None for explicit parameters."""
        return self.curve.name

    @property
    def is_private(self) -> bool:
        return self.scalar is not None

    def get_length(self) -> int:
        """Key size: bit length of the field prime."""
        return self.curve.bit_length

    # === Builders ===

    def with_hash(self, hash_name: str) -> 'KeyMaterial':
        """
        Return a copy bound to another hash.

        Raises:
            UnsupportedAlgorithm: If the curve does not allow the hash
        """
        return replace(self, hash_name=check_hash(self.curve, hash_name))

    def with_signature_format(self, format_name: str) -> 'KeyMaterial':
        """
        Return a copy using another signature encoding (ASN1, SSH2 or Raw).

        Raises:
            UnsupportedAlgorithm: If the format is unknown
        """
        return replace(self, signature_format=get_signature_format(format_name).name)

    def with_context(self, context: Optional[bytes] = None) -> 'KeyMaterial':
        """
        Return a copy bound to an EdDSA context; None clears it.

        Raises:
            UnsupportedCurve: On short Weierstrass curves
            InvalidContext: If the context is not bytes or too long
        """
        if self.curve.family != CurveFamily.TWISTED_EDWARDS:
            raise UnsupportedCurve("Only Ed25519 and Ed448 support contexts")
        return replace(self, context=check_context(self.curve, context))

    def parameters(self) -> Parameters:
        return Parameters(self.curve, self.hash_name, self.signature_format)

    # === Engine ===

    def select_engine(self, engine_context: Optional[EngineContext] = None) -> Engine:
        """Engine a sign or verify call on this key would use."""
        engine_context = engine_context or default_engine_context()
        deterministic = self.is_private and get_config().signing.ecdsa_nonce == "deterministic"
        return engine_context.select(self.curve, self.hash_name, self.context, deterministic)

    @property
    def engine(self) -> Engine:
        return self.select_engine()

    # === Operations ===

    def verify(
        self,
        message: bytes,
        signature: bytes,
        context: Optional[bytes] = None,
        engine_context: Optional[EngineContext] = None,
    ) -> bool:
        return verifier.verify(self, message, signature, context, engine_context)

    def to_bytes(self, format: Optional[str] = None, password: Optional[bytes] = None) -> bytes:
        """
        Serialize into a key container.

        Args:
            format: PKCS8, PKCS1, OpenSSH or libsodium (default from config)
            password: Encrypt private keys with this password (default: the
                key's bound password)
        """
        return export_key(self, format, password)


@dataclass(frozen=True, repr=False)
class PublicKey(KeyMaterial):
    """Public key: curve point plus signing configuration."""

    def __repr__(self) -> str:
        return f"PublicKey({self.curve_name or 'explicit'}, hash={self.hash_name}, format={self.signature_format})"

    def fingerprint(self, algorithm: str = "sha256") -> str:
        """OpenSSH-style fingerprint of the public key."""
        return openssh_fingerprint(self.curve, self.point, algorithm)


@dataclass(frozen=True, repr=False)
class PrivateKey(KeyMaterial):
    """Private key: scalar, public point and signing configuration."""

    def __repr__(self) -> str:
        return f"PrivateKey({self.curve_name or 'explicit'}, hash={self.hash_name}, format={self.signature_format})"

    def public_key(self) -> PublicKey:
        """Public half, keeping hash, format and context."""
        return PublicKey(
            curve=self.curve,
            point=self.point,
            hash_name=self.hash_name,
            signature_format=self.signature_format,
            context=self.context,
        )

    def with_password(self, password: Optional[bytes] = None) -> 'PrivateKey':
        """Return a copy that to_bytes() encrypts with this password; None clears it."""
        if isinstance(password, str):
            password = password.encode("utf-8")
        return replace(self, password=password or None)

    def sign(
        self,
        message: bytes,
        context: Optional[bytes] = None,
        engine_context: Optional[EngineContext] = None,
    ) -> bytes:
        return signer.sign(self, message, context, engine_context)

    def fingerprint(self, algorithm: str = "sha256") -> str:
        return self.public_key().fingerprint(algorithm)
