"""
SPARK Key Container Base Class

Defines the interface every key container format implements, plus the
value loaders return and the PEM helpers they share.

Design Principles:
- Formats parse into KeyComponents and never build key objects
- Formats raise InvalidKeyMaterial for anything structurally wrong and
  DecryptionError only for password problems
- Checking that a scalar matches its point is left to the key manager
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Type, Union

from asn1crypto import core, pem

from ..curves import BaseCurve, CurveFamily, Point
from ..errors import InvalidKeyMaterial, UnsupportedAlgorithm, UnsupportedCurve


logger = logging.getLogger("sparksig.container")


@dataclass
class KeyComponents:
    """
    Values read from a container.

    point and scalar are both None for a parameters-only container.
    secret is the RFC 8032 seed of an Edwards private key.
    """
    curve: BaseCurve
    point: Point = None
    scalar: Optional[int] = None
    secret: Optional[bytes] = None

    @property
    def is_private(self) -> bool:
        return self.scalar is not None or self.secret is not None

    @property
    def is_parameters(self) -> bool:
        return self.point is None and not self.is_private


class ContainerFormat(ABC):
    """
    Abstract base class for key container formats.

    Subclasses must implement:
    - load(): Parse private, public or parameter containers
    - save_private_key(): Serialize a private key
    - save_public_key(): Serialize a public key

    Formats that can hold bare curve parameters also override
    save_parameters().
    """

    name: str = ""

    @abstractmethod
    def load(self, data: bytes, password: Optional[bytes] = None) -> KeyComponents:
        """
        Parse a container.

        Args:
            data: PEM or DER bytes (or the format's own text form)
            password: Password for encrypted containers

        Returns:
            KeyComponents: Curve plus whatever key values were present

        Raises:
            InvalidKeyMaterial: If the data is not a valid container
            DecryptionError: If a password is missing or wrong
            UnsupportedCurve: If the container names an unknown curve
        """
        pass

    @abstractmethod
    def save_private_key(
        self,
        curve: BaseCurve,
        scalar: int,
        secret: Optional[bytes],
        point: Point,
        password: Optional[bytes] = None,
    ) -> bytes:
        pass

    @abstractmethod
    def save_public_key(self, curve: BaseCurve, point: Point) -> bytes:
        pass

    def save_parameters(self, curve: BaseCurve, named_curve: bool = True) -> bytes:
        raise UnsupportedAlgorithm(f"{self.name} cannot store curve parameters")

    def __repr__(self) -> str:
        return f"<ContainerFormat {self.name}>"


# === Shared helpers ===

def as_bytes(data: Union[bytes, bytearray, str]) -> bytes:
    """Accept text or binary key data."""
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    raise InvalidKeyMaterial(f"Key data must be bytes or str, not {type(data).__name__}")


def password_bytes(password: Union[bytes, str, None]) -> Optional[bytes]:
    if isinstance(password, str):
        return password.encode("utf-8")
    return password or None


def read_pem(data: bytes) -> Tuple[Optional[str], Dict[str, str], bytes]:
    """
    Unarmor PEM data; non-PEM data is returned as DER.

    When a file holds several blocks (openssl ecparam -genkey writes
    EC PARAMETERS before EC PRIVATE KEY), the first key block wins.

    Returns:
        Tuple: (label or None, PEM headers, DER bytes)
    """
    if not pem.detect(data):
        return None, {}, data

    try:
        blocks = list(pem.unarmor(data, multiple=True))
    except ValueError as e:
        raise InvalidKeyMaterial(f"Malformed PEM: {e}") from e
    if not blocks:
        raise InvalidKeyMaterial("No PEM block found")

    for label, headers, der in blocks:
        if label != "EC PARAMETERS":
            return label, dict(headers), der
    label, headers, der = blocks[0]
    return label, dict(headers), der


def write_pem(label: str, der: bytes) -> bytes:
    return pem.armor(label, der)


def parse_der(schema: Type[core.Asn1Value], der: bytes) -> core.Asn1Value:
    """
    Parse DER strictly and force full decoding.

    Raises:
        InvalidKeyMaterial: On any structural error or trailing data
    """
    try:
        value = schema.load(der, strict=True)
        value.native  # decoding is lazy until accessed
    except (ValueError, TypeError) as e:
        raise InvalidKeyMaterial(f"Malformed {schema.__name__}: {e}") from e
    return value


def decode_point(curve: BaseCurve, data: bytes) -> Point:
    try:
        return curve.decode_point(data)
    except ValueError as e:
        raise InvalidKeyMaterial(f"Invalid public point: {e}") from e


def require_weierstrass(curve: BaseCurve, format_name: str) -> None:
    if curve.family != CurveFamily.SHORT_WEIERSTRASS:
        raise UnsupportedCurve(f"{format_name} containers only hold short Weierstrass keys")
