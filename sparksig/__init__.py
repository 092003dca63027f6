"""
SPARK Signatures - Elliptic Curve Signature Library

ECDSA on short Weierstrass curves and EdDSA (Ed25519, Ed448) on twisted
Edwards curves, behind one key abstraction.

This package contains:
- curves/     : Curve arithmetic and the named curve registry
- container/  : Key containers (PKCS8, SEC1, OpenSSH, libsodium)
- keys        : Immutable key values and their builders
- codec       : Signature encodings (ASN1, SSH2, Raw)
- engine      : Backend selection (OpenSSL, native EdDSA, generic)
- signer      : Signing
- verifier    : Verification
- manager     : create_key / load / get_parameters

Usage:
    key = create_key("secp256r1")
    signature = key.sign(b"message")
    assert key.public_key().verify(b"message", signature)

All hashing, HMAC and symmetric cryptography use python3-cryptography
(OpenSSL backend).
"""

import logging

__version__ = "0.1.0"
__author__ = "SPARK Project"

# Library logging stays silent unless the application configures it
logging.getLogger("sparksig").addHandler(logging.NullHandler())

from .errors import (
    SparkSigError,
    UnsupportedCurve,
    UnsupportedAlgorithm,
    InvalidKeyMaterial,
    DecryptionError,
    InvalidSignatureFormat,
    InvalidContext,
)

from .config import (
    Config,
    get_config,
    set_config,
    configure_logging,
)

from .curves import (
    CurveFamily,
    get_curve,
)

from .codec import (
    SIGNATURE_FORMATS,
    get_signature_format,
)

from .engine import (
    Engine,
    EngineCapability,
    EngineContext,
    default_engine_context,
)

from .keys import (
    KeyMaterial,
    PrivateKey,
    PublicKey,
    Parameters,
)

from .signer import sign
from .verifier import verify

from .manager import (
    create_key,
    load,
    get_parameters,
)

__all__ = [
    # Errors
    'SparkSigError',
    'UnsupportedCurve',
    'UnsupportedAlgorithm',
    'InvalidKeyMaterial',
    'DecryptionError',
    'InvalidSignatureFormat',
    'InvalidContext',
    # Configuration
    'Config',
    'get_config',
    'set_config',
    'configure_logging',
    # Curves
    'CurveFamily',
    'get_curve',
    # Codecs
    'SIGNATURE_FORMATS',
    'get_signature_format',
    # Engines
    'Engine',
    'EngineCapability',
    'EngineContext',
    'default_engine_context',
    # Keys
    'KeyMaterial',
    'PrivateKey',
    'PublicKey',
    'Parameters',
    # Operations
    'sign',
    'verify',
    'create_key',
    'load',
    'get_parameters',
]
