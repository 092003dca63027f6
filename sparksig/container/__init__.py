"""
SPARK Key Containers

Registry of key container formats and the load/export entry points the
key manager uses.

Formats:
    PKCS8      PrivateKeyInfo / EncryptedPrivateKeyInfo / SubjectPublicKeyInfo
    PKCS1      SEC1 ECPrivateKey and EC PARAMETERS (alias SEC1)
    OpenSSH    authorized_keys lines and openssh-key-v1
    libsodium  raw Ed25519 keys, explicit only

Auto-detection reads the PEM label when there is one, recognizes OpenSSH
public key lines, and otherwise tries PKCS8, SEC1 and OpenSSH in turn.
"""

from typing import Dict, Optional, Union

from asn1crypto import pem

from .base import (
    ContainerFormat,
    KeyComponents,
    as_bytes,
    logger,
    password_bytes,
    read_pem,
)
from .libsodium import LibsodiumFormat
from .openssh import OpenSshFormat, looks_like_public_line
from .pkcs8 import Pkcs8Format
from .sec1 import Sec1Format
from ..config import get_config
from ..curves import BaseCurve
from ..errors import InvalidKeyMaterial, UnsupportedAlgorithm


PKCS8 = Pkcs8Format()
SEC1 = Sec1Format()
OPENSSH = OpenSshFormat()
LIBSODIUM = LibsodiumFormat()

CONTAINER_FORMATS: Dict[str, ContainerFormat] = {
    "pkcs8": PKCS8,
    "pkcs1": SEC1,
    "sec1": SEC1,
    "openssh": OPENSSH,
    "libsodium": LIBSODIUM,
}

# PEM label -> format
PEM_LABELS: Dict[str, ContainerFormat] = {
    "PRIVATE KEY": PKCS8,
    "ENCRYPTED PRIVATE KEY": PKCS8,
    "PUBLIC KEY": PKCS8,
    "EC PRIVATE KEY": SEC1,
    "EC PARAMETERS": SEC1,
    "OPENSSH PRIVATE KEY": OPENSSH,
}

# Tried in order for DER input
AUTODETECT_ORDER = (PKCS8, SEC1, OPENSSH)


def get_container_format(name: str) -> ContainerFormat:
    """
    Look up a container format by name (case-insensitive).

    Raises:
        UnsupportedAlgorithm: If the format is unknown
    """
    container = CONTAINER_FORMATS.get(name.strip().lower())
    if container is None:
        raise UnsupportedAlgorithm(f"Key format not supported: {name}")
    return container


def detect_format(data: bytes) -> Optional[ContainerFormat]:
    """Format implied by a PEM label or an OpenSSH public key line, if any."""
    if looks_like_public_line(data):
        return OPENSSH
    if not pem.detect(data):
        return None

    label, _, _ = read_pem(data)
    container = PEM_LABELS.get(label)
    if container is None:
        raise InvalidKeyMaterial(f"Unsupported PEM block: {label}")
    return container


def load_components(
    data: Union[bytes, str],
    format: Optional[str] = None,
    password: Union[bytes, str, None] = None,
) -> KeyComponents:
    """
    Parse key data into KeyComponents.

    Args:
        data: Key container, PEM/text or DER/binary
        format: Container format name; detected when omitted
        password: Password for encrypted containers

    Raises:
        InvalidKeyMaterial: If no format can read the data
        DecryptionError: If a password is missing or wrong
    """
    data = as_bytes(data)
    password = password_bytes(password)

    if format is not None:
        return get_container_format(format).load(data, password)

    container = detect_format(data)
    if container is not None:
        logger.debug(f"Detected {container.name} key container")
        return container.load(data, password)

    for container in AUTODETECT_ORDER:
        try:
            components = container.load(data, password)
        except InvalidKeyMaterial:
            continue
        logger.debug(f"Read DER key as {container.name}")
        return components

    raise InvalidKeyMaterial("Unable to read key")


def export_key(key, format: Optional[str] = None, password: Union[bytes, str, None] = None) -> bytes:
    """
    Serialize a key.

    Args:
        key: PrivateKey or PublicKey
        format: Container format (default: configured export.key_format)
        password: Private key password (default: the key's bound password)
    """
    container = get_container_format(format or get_config().export.key_format)
    password = password_bytes(password)

    if key.scalar is None:
        if password:
            raise UnsupportedAlgorithm("Public keys cannot be encrypted")
        return container.save_public_key(key.curve, key.point)

    if password is None:
        password = key.password
    return container.save_private_key(key.curve, key.scalar, key.secret, key.point, password)


def export_parameters(curve: BaseCurve, format: str = "PKCS1", named_curve: bool = True) -> bytes:
    """Serialize curve parameters as an EC PARAMETERS container."""
    return get_container_format(format).save_parameters(curve, named_curve)


__all__ = [
    'ContainerFormat',
    'KeyComponents',
    'CONTAINER_FORMATS',
    'PEM_LABELS',
    'PKCS8',
    'SEC1',
    'OPENSSH',
    'LIBSODIUM',
    'get_container_format',
    'detect_format',
    'load_components',
    'export_key',
    'export_parameters',
]
