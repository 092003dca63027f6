"""
SPARK SEC1 / PKCS#1-style Containers

ECPrivateKey (RFC 5915) under the PEM label EC PRIVATE KEY, and bare
ECDomainParameters under EC PARAMETERS. Short Weierstrass curves only.

Legacy OpenSSL PEM encryption (Proc-Type: 4,ENCRYPTED with a DEK-Info
header) is handled by cryptography, for both reading and writing.
"""

from typing import Optional

from asn1crypto import keys
from cryptography.hazmat.primitives import serialization

from .asn1 import ECPrivateKey, curve_from_domain, domain_parameters, is_present, scalar_length
from .base import (
    ContainerFormat,
    KeyComponents,
    decode_point,
    logger,
    parse_der,
    read_pem,
    require_weierstrass,
    write_pem,
)
from ..curves import BaseCurve, Point
from ..errors import DecryptionError, InvalidKeyMaterial, UnsupportedAlgorithm, UnsupportedCurve
from ..openssl import OPENSSL_CURVES, ec_private_key
from ..primitives import bytes_to_int, int_to_bytes


LABELS = ("EC PRIVATE KEY", "EC PARAMETERS")


def _decrypt_legacy_pem(label: str, headers: dict, der: bytes, password: Optional[bytes]) -> bytes:
    """Decrypt a Proc-Type encrypted PEM block to DER ECPrivateKey."""
    if password is None:
        raise DecryptionError("Key is encrypted; a password is required")

    armored = b"-----BEGIN " + label.encode("ascii") + b"-----\n"
    for name, value in headers.items():
        armored += f"{name}: {value}\n".encode("ascii")
    armored += b"\n" + write_pem(label, der).split(b"\n", 1)[1]

    try:
        private_key = serialization.load_pem_private_key(armored, password=password)
    except (ValueError, TypeError) as e:
        raise DecryptionError("Incorrect password") from e

    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


class Sec1Format(ContainerFormat):
    """ECPrivateKey and EC PARAMETERS."""

    name = "PKCS1"

    def load(self, data: bytes, password: Optional[bytes] = None) -> KeyComponents:
        label, headers, der = read_pem(data)
        if label is not None and label not in LABELS:
            raise InvalidKeyMaterial(f"Not a SEC1 PEM block: {label}")

        if label == "EC PARAMETERS":
            return self._load_parameters(der)

        if label == "EC PRIVATE KEY":
            if "ENCRYPTED" in headers.get("Proc-Type", ""):
                logger.debug("Decrypting legacy PEM encrypted EC key")
                der = _decrypt_legacy_pem(label, headers, der, password)
            return self._load_private(der)

        try:
            return self._load_private(der)
        except InvalidKeyMaterial:
            return self._load_parameters(der)

    def _load_parameters(self, der: bytes) -> KeyComponents:
        domain = parse_der(keys.ECDomainParameters, der)
        return KeyComponents(curve=curve_from_domain(domain))

    def _load_private(self, der: bytes) -> KeyComponents:
        ec_key = parse_der(ECPrivateKey, der)
        if ec_key['version'].native != 1:
            raise InvalidKeyMaterial(f"Unsupported ECPrivateKey version: {ec_key['version'].native}")
        if not is_present(ec_key['parameters']):
            raise InvalidKeyMaterial("EC private key has no curve parameters")

        curve = curve_from_domain(ec_key['parameters'])
        point = None
        if is_present(ec_key['public_key']):
            point = decode_point(curve, ec_key['public_key'].native)
        return KeyComponents(
            curve=curve,
            point=point,
            scalar=bytes_to_int(ec_key['private_key'].native),
        )

    def save_private_key(
        self,
        curve: BaseCurve,
        scalar: int,
        secret: Optional[bytes],
        point: Point,
        password: Optional[bytes] = None,
    ) -> bytes:
        require_weierstrass(curve, self.name)

        if password:
            if curve.name not in OPENSSL_CURVES:
                raise UnsupportedCurve("Encrypted SEC1 keys require a named curve")
            return ec_private_key(curve, scalar).private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.TraditionalOpenSSL,
                encryption_algorithm=serialization.BestAvailableEncryption(password),
            )

        der = ECPrivateKey({
            'version': 1,
            'private_key': int_to_bytes(scalar, scalar_length(curve)),
            'parameters': domain_parameters(curve),
            'public_key': curve.encode_point(point),
        }).dump()
        return write_pem("EC PRIVATE KEY", der)

    def save_public_key(self, curve: BaseCurve, point: Point) -> bytes:
        raise UnsupportedAlgorithm("SEC1 has no public key container; use PKCS8")

    def save_parameters(self, curve: BaseCurve, named_curve: bool = True) -> bytes:
        return write_pem("EC PARAMETERS", domain_parameters(curve, named_curve).dump())
