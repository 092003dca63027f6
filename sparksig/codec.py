"""
SPARK Signature Wire Formats

Maps the two signature components to and from bytes.

Formats:
    ASN1 (alias DER):
        SEQUENCE { INTEGER c1, INTEGER c2 }, minimal big-endian integers.
        The canonical ECDSA encoding.

    SSH2:
        uint32 len(c1) || c1 || uint32 len(c2) || c2
        Each component is an SSH mpint: minimal big-endian with a leading
        zero byte when the high bit is set (RFC 4251 section 5).

    Raw:
        Fixed-width, zero-padded concatenation. Width is the curve's
        component length; byte order is big-endian for short Weierstrass
        curves and little-endian for twisted Edwards curves, which makes
        an EdDSA Raw signature the RFC 8032 ENC(R) || ENC(S) (64 bytes for
        Ed25519, 114 bytes for Ed448).

Every decoder validates both components with the curve's range check
before returning them.
"""

import struct
from abc import ABC, abstractmethod
from typing import Dict, Tuple

from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from .curves import BaseCurve
from .errors import InvalidSignatureFormat, UnsupportedAlgorithm
from .primitives import bytes_to_int, int_to_bytes


Components = Tuple[int, int]


class SignatureFormat(ABC):
    """
    Abstract base class for signature encodings.

    Codecs are stateless; one shared instance per format is registered in
    SIGNATURE_FORMATS.
    """

    name: str = ""

    @abstractmethod
    def encode(self, curve: BaseCurve, components: Components) -> bytes:
        """Serialize (c1, c2) for the given curve."""
        pass

    @abstractmethod
    def _parse(self, curve: BaseCurve, blob: bytes) -> Components:
        """Structural parse without range validation."""
        pass

    def decode(self, curve: BaseCurve, blob: bytes) -> Components:
        """
        Parse and validate a signature.

        Args:
            curve: Curve the signature was made on
            blob: Encoded signature

        Returns:
            Components: (c1, c2)

        Raises:
            InvalidSignatureFormat: If the blob is malformed or a component
                is zero, negative or out of range
        """
        if not isinstance(blob, (bytes, bytearray)):
            raise InvalidSignatureFormat(f"{self.name} signature must be bytes")

        first, second = self._parse(curve, bytes(blob))
        if not curve.signature_components_valid(first, second):
            raise InvalidSignatureFormat(f"{self.name} signature component out of range")
        return first, second

    def __repr__(self) -> str:
        return f"<SignatureFormat {self.name}>"


class DerSignatureFormat(SignatureFormat):
    """DER SEQUENCE of two INTEGERs."""

    name = "ASN1"

    def encode(self, curve: BaseCurve, components: Components) -> bytes:
        return encode_dss_signature(components[0], components[1])

    def _parse(self, curve: BaseCurve, blob: bytes) -> Components:
        try:
            first, second = decode_dss_signature(blob)
        except ValueError as e:
            raise InvalidSignatureFormat(f"Malformed DER signature: {e}") from e
        return first, second


class Ssh2SignatureFormat(SignatureFormat):
    """Two length-prefixed SSH mpints."""

    name = "SSH2"

    @staticmethod
    def _mpint(value: int) -> bytes:
        if value == 0:
            return b""
        data = int_to_bytes(value, (value.bit_length() + 7) // 8)
        if data[0] & 0x80:
            data = b"\x00" + data
        return data

    def encode(self, curve: BaseCurve, components: Components) -> bytes:
        out = b""
        for value in components:
            data = self._mpint(value)
            out += struct.pack(">I", len(data)) + data
        return out

    def _parse(self, curve: BaseCurve, blob: bytes) -> Components:
        values = []
        offset = 0
        for _ in range(2):
            if len(blob) < offset + 4:
                raise InvalidSignatureFormat("Truncated SSH2 signature length")
            (length,) = struct.unpack(">I", blob[offset:offset + 4])
            offset += 4
            if len(blob) < offset + length:
                raise InvalidSignatureFormat(f"Truncated SSH2 signature component: expected {length} bytes")
            data = blob[offset:offset + length]
            offset += length
            if data and data[0] & 0x80:
                raise InvalidSignatureFormat("Negative SSH2 signature component")
            values.append(bytes_to_int(data))

        if offset != len(blob):
            raise InvalidSignatureFormat(f"Trailing data after SSH2 signature: {len(blob) - offset} bytes")
        return values[0], values[1]


class RawSignatureFormat(SignatureFormat):
    """Fixed-width concatenation in the curve's component byte order."""

    name = "Raw"

    def encode(self, curve: BaseCurve, components: Components) -> bytes:
        width = curve.component_length
        order = curve.component_byteorder
        return b"".join(int_to_bytes(value, width, order) for value in components)

    def _parse(self, curve: BaseCurve, blob: bytes) -> Components:
        width = curve.component_length
        if len(blob) != 2 * width:
            raise InvalidSignatureFormat(
                f"Invalid Raw signature length: {len(blob)} (expected {2 * width})"
            )
        order = curve.component_byteorder
        return bytes_to_int(blob[:width], order), bytes_to_int(blob[width:], order)


_DER = DerSignatureFormat()
_SSH2 = Ssh2SignatureFormat()
_RAW = RawSignatureFormat()

SIGNATURE_FORMATS: Dict[str, SignatureFormat] = {
    "asn1": _DER,
    "der": _DER,
    "ssh2": _SSH2,
    "raw": _RAW,
}


def get_signature_format(name: str) -> SignatureFormat:
    """
    Look up a signature format by name (case-insensitive).

    Raises:
        UnsupportedAlgorithm: If the format is unknown
    """
    codec = SIGNATURE_FORMATS.get(name.strip().lower())
    if codec is None:
        raise UnsupportedAlgorithm(f"Signature format not supported: {name}")
    return codec


def encode_signature(curve: BaseCurve, components: Components, format_name: str) -> bytes:
    """Encode (c1, c2) with the named format."""
    return get_signature_format(format_name).encode(curve, components)


def decode_signature(curve: BaseCurve, blob: bytes, format_name: str) -> Components:
    """Decode and validate a signature with the named format."""
    return get_signature_format(format_name).decode(curve, blob)
