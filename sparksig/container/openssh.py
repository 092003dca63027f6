"""
SPARK OpenSSH Containers

Public keys as authorized_keys lines (ecdsa-sha2-nistp256/384/521,
ssh-ed25519) and private keys in the openssh-key-v1 format.

Parsing and serialization are done by cryptography; this module only
detects encryption up front so that a missing password is reported as a
DecryptionError, and maps cryptography's errors onto ours.

Wire format of openssh-key-v1 (before the encrypted section):
    "openssh-key-v1\\0" || string ciphername || string kdfname || ...
"""

import base64
import binascii
import struct
from typing import Optional

from cryptography.exceptions import UnsupportedAlgorithm as OpenSSLUnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization

from .base import ContainerFormat, KeyComponents, read_pem
from ..curves import BaseCurve, Point
from ..errors import DecryptionError, InvalidKeyMaterial, UnsupportedAlgorithm, UnsupportedCurve
from ..openssl import from_openssl_key, to_openssl_private_key, to_openssl_public_key


OPENSSH_MAGIC = b"openssh-key-v1\x00"

PRIVATE_LABEL = "OPENSSH PRIVATE KEY"

PUBLIC_PREFIXES = (b"ecdsa-sha2-", b"ssh-ed25519", b"ssh-ed448")


def looks_like_public_line(data: bytes) -> bool:
    return data.lstrip().startswith(PUBLIC_PREFIXES)


def cipher_name(blob: bytes) -> str:
    """
    Read the cipher name of an openssh-key-v1 blob.

    Raises:
        InvalidKeyMaterial: If the blob is not openssh-key-v1
    """
    if not blob.startswith(OPENSSH_MAGIC):
        raise InvalidKeyMaterial("Not an openssh-key-v1 private key")
    offset = len(OPENSSH_MAGIC)
    if len(blob) < offset + 4:
        raise InvalidKeyMaterial("Truncated openssh-key-v1 private key")
    (length,) = struct.unpack(">I", blob[offset:offset + 4])
    name = blob[offset + 4:offset + 4 + length]
    if len(name) != length:
        raise InvalidKeyMaterial("Truncated openssh-key-v1 cipher name")
    return name.decode("ascii", errors="replace")


class OpenSshFormat(ContainerFormat):
    """OpenSSH public key lines and openssh-key-v1 private keys."""

    name = "OpenSSH"

    def load(self, data: bytes, password: Optional[bytes] = None) -> KeyComponents:
        if looks_like_public_line(data):
            return self._load_public(data.strip())

        label, _, blob = read_pem(data)
        if label != PRIVATE_LABEL:
            raise InvalidKeyMaterial("Not an OpenSSH key")

        encrypted = cipher_name(blob) != "none"
        if encrypted and password is None:
            raise DecryptionError("Key is encrypted; a password is required")

        try:
            private_key = serialization.load_ssh_private_key(data, password=password if encrypted else None)
        except OpenSSLUnsupportedAlgorithm as e:
            raise UnsupportedAlgorithm(f"Unsupported OpenSSH key: {e}") from e
        except (ValueError, TypeError) as e:
            if encrypted:
                raise DecryptionError("Incorrect password") from e
            raise InvalidKeyMaterial(f"Malformed OpenSSH private key: {e}") from e

        curve, scalar, secret, point = from_openssl_key(private_key)
        return KeyComponents(curve=curve, point=point, scalar=scalar, secret=secret)

    def _load_public(self, line: bytes) -> KeyComponents:
        try:
            public_key = serialization.load_ssh_public_key(line)
        except OpenSSLUnsupportedAlgorithm as e:
            raise UnsupportedAlgorithm(f"Unsupported OpenSSH key: {e}") from e
        except ValueError as e:
            raise InvalidKeyMaterial(f"Malformed OpenSSH public key: {e}") from e

        curve, _, _, point = from_openssl_key(public_key)
        return KeyComponents(curve=curve, point=point)

    def save_private_key(
        self,
        curve: BaseCurve,
        scalar: int,
        secret: Optional[bytes],
        point: Point,
        password: Optional[bytes] = None,
    ) -> bytes:
        if password:
            encryption = serialization.BestAvailableEncryption(password)
        else:
            encryption = serialization.NoEncryption()
        try:
            return to_openssl_private_key(curve, scalar, secret).private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.OpenSSH,
                encryption_algorithm=encryption,
            )
        except ValueError as e:
            raise UnsupportedCurve(f"OpenSSH cannot store {curve.name} keys") from e

    def save_public_key(self, curve: BaseCurve, point: Point) -> bytes:
        try:
            return to_openssl_public_key(curve, point).public_bytes(
                encoding=serialization.Encoding.OpenSSH,
                format=serialization.PublicFormat.OpenSSH,
            )
        except ValueError as e:
            raise UnsupportedCurve(f"OpenSSH cannot store {curve.name} keys") from e


def fingerprint(curve: BaseCurve, point: Point, algorithm: str = "sha256") -> str:
    """
    OpenSSH key fingerprint.

    Args:
        curve: Key curve
        point: Public point
        algorithm: "sha256" (SHA256:base64) or "md5" (colon-separated hex)

    Returns:
        str: Fingerprint as printed by ssh-keygen -l
    """
    line = OpenSshFormat().save_public_key(curve, point)
    try:
        blob = base64.b64decode(line.split()[1])
    except (IndexError, binascii.Error) as e:
        raise InvalidKeyMaterial("Unable to encode public key blob") from e

    if algorithm == "md5":
        hasher = hashes.Hash(hashes.MD5())
        hasher.update(blob)
        return ":".join(f"{byte:02x}" for byte in hasher.finalize())
    if algorithm == "sha256":
        hasher = hashes.Hash(hashes.SHA256())
        hasher.update(blob)
        return "SHA256:" + base64.b64encode(hasher.finalize()).decode("ascii").rstrip("=")
    raise UnsupportedAlgorithm(f"Fingerprint algorithm not supported: {algorithm}")
