"""
SPARK PKCS#8 Containers

PrivateKeyInfo, EncryptedPrivateKeyInfo and SubjectPublicKeyInfo for
ECDSA (id-ecPublicKey) and EdDSA (id-Ed25519, id-Ed448) keys.

PEM labels:
    PRIVATE KEY            PrivateKeyInfo
    ENCRYPTED PRIVATE KEY  EncryptedPrivateKeyInfo
    PUBLIC KEY             SubjectPublicKeyInfo
    EC PARAMETERS          ECDomainParameters

Encryption is PBES2 (RFC 8018): PBKDF2-HMAC key derivation and AES-CBC.
Writing always uses AES-256-CBC with the configured PRF and iteration
count; reading accepts AES-128/192/256-CBC with any SHA-1/SHA-2 PRF.
"""

from typing import Optional

from asn1crypto import algos, core, keys

from .asn1 import (
    EC_PUBLIC_KEY_OID,
    EDWARDS_OIDS,
    AlgorithmIdentifier,
    ECPrivateKey,
    PrivateKeyInfo,
    PublicKeyInfo,
    curve_from_domain,
    domain_parameters,
    is_present,
    scalar_length,
)
from .base import (
    ContainerFormat,
    KeyComponents,
    decode_point,
    logger,
    parse_der,
    read_pem,
    write_pem,
)
from ..config import get_config
from ..curves import BaseCurve, CurveFamily, Point, curve_from_oid
from ..errors import DecryptionError, InvalidKeyMaterial, UnsupportedAlgorithm
from ..primitives import (
    aes_cbc_decrypt,
    aes_cbc_encrypt,
    bytes_to_int,
    int_to_bytes,
    pbkdf2_derive,
    random_bytes,
)


# PBES2 encryption scheme -> AES key length
AES_CBC_KEY_LENGTHS = {
    'aes128_cbc': 16,
    'aes192_cbc': 24,
    'aes256_cbc': 32,
}

PBES2_SALT_LENGTH = 16

LABELS = ("PRIVATE KEY", "ENCRYPTED PRIVATE KEY", "PUBLIC KEY", "EC PARAMETERS")


# === PBES2 ===

def encrypt_private_key_info(
    der: bytes,
    password: bytes,
    iterations: int,
    prf: str = "sha256",
) -> bytes:
    """
    Wrap a PrivateKeyInfo in an EncryptedPrivateKeyInfo.

    Args:
        der: DER PrivateKeyInfo
        password: Encryption password
        iterations: PBKDF2 iteration count
        prf: PBKDF2 HMAC hash

    Returns:
        bytes: DER EncryptedPrivateKeyInfo
    """
    salt = random_bytes(PBES2_SALT_LENGTH)
    iv = random_bytes(16)
    key = pbkdf2_derive(password, salt, iterations, AES_CBC_KEY_LENGTHS['aes256_cbc'], prf)

    algorithm = algos.EncryptionAlgorithm({
        'algorithm': 'pbes2',
        'parameters': {
            'key_derivation_func': {
                'algorithm': 'pbkdf2',
                'parameters': {
                    'salt': algos.Pbkdf2Salt(name='specified', value=salt),
                    'iteration_count': iterations,
                    'prf': {'algorithm': prf},
                },
            },
            'encryption_scheme': {
                'algorithm': 'aes256_cbc',
                'parameters': iv,
            },
        },
    })
    return keys.EncryptedPrivateKeyInfo({
        'encryption_algorithm': algorithm,
        'encrypted_data': aes_cbc_encrypt(key, iv, der),
    }).dump()


def decrypt_private_key_info(encrypted: keys.EncryptedPrivateKeyInfo, password: Optional[bytes]) -> bytes:
    """
    Decrypt an EncryptedPrivateKeyInfo to DER PrivateKeyInfo.

    Raises:
        DecryptionError: If the password is missing or wrong
        UnsupportedAlgorithm: For encryption schemes other than PBES2/AES-CBC
    """
    if password is None:
        raise DecryptionError("Key is encrypted; a password is required")

    algorithm = encrypted['encryption_algorithm']
    if algorithm['algorithm'].native != 'pbes2':
        raise UnsupportedAlgorithm(f"Unsupported key encryption: {algorithm['algorithm'].native}")

    params = algorithm['parameters']
    kdf = params['key_derivation_func']
    if kdf['algorithm'].native != 'pbkdf2':
        raise UnsupportedAlgorithm(f"Unsupported key derivation: {kdf['algorithm'].native}")

    kdf_params = kdf['parameters']
    if kdf_params['salt'].name != 'specified':
        raise UnsupportedAlgorithm("PBKDF2 salt from another source is not supported")

    scheme = params['encryption_scheme']
    cipher = scheme['algorithm'].native
    if cipher not in AES_CBC_KEY_LENGTHS:
        raise UnsupportedAlgorithm(f"Unsupported key cipher: {cipher}")

    key = pbkdf2_derive(
        password,
        kdf_params['salt'].native,
        kdf_params['iteration_count'].native,
        AES_CBC_KEY_LENGTHS[cipher],
        kdf_params['prf']['algorithm'].native,
    )
    try:
        plaintext = aes_cbc_decrypt(key, scheme['parameters'].native, encrypted['encrypted_data'].native)
    except ValueError as e:
        raise DecryptionError("Incorrect password") from e
    return plaintext


# === Format ===

class Pkcs8Format(ContainerFormat):
    """PKCS#8 / SubjectPublicKeyInfo."""

    name = "PKCS8"

    def load(self, data: bytes, password: Optional[bytes] = None) -> KeyComponents:
        label, _, der = read_pem(data)
        if label is not None and label not in LABELS:
            raise InvalidKeyMaterial(f"Not a PKCS8 PEM block: {label}")

        if label == "EC PARAMETERS":
            domain = parse_der(keys.ECDomainParameters, der)
            return KeyComponents(curve=curve_from_domain(domain))

        if label == "ENCRYPTED PRIVATE KEY":
            return self._load_encrypted(der, password)
        if label == "PRIVATE KEY":
            return self._load_private(der)
        if label == "PUBLIC KEY":
            return self._load_public(der)

        # DER: try each structure in turn
        for loader in (self._load_private, self._load_public):
            try:
                return loader(der)
            except InvalidKeyMaterial:
                continue
        try:
            encrypted = keys.EncryptedPrivateKeyInfo.load(der, strict=True)
            encrypted.native
        except (ValueError, TypeError) as e:
            raise InvalidKeyMaterial("Not a PKCS8 structure") from e
        return self._load_encrypted(der, password)

    def _load_encrypted(self, der: bytes, password: Optional[bytes]) -> KeyComponents:
        encrypted = parse_der(keys.EncryptedPrivateKeyInfo, der)
        plaintext = decrypt_private_key_info(encrypted, password)
        try:
            return self._load_private(plaintext)
        except InvalidKeyMaterial as e:
            # Valid padding under a wrong key leaves garbage behind
            raise DecryptionError("Incorrect password") from e

    def _load_private(self, der: bytes) -> KeyComponents:
        info = parse_der(PrivateKeyInfo, der)
        algorithm = info['private_key_algorithm']
        oid = algorithm['algorithm'].dotted

        if oid in EDWARDS_OIDS:
            curve = curve_from_oid(oid)
            secret = parse_der(core.OctetString, info['private_key'].native).native
            if len(secret) != curve.encoded_length:
                raise InvalidKeyMaterial(f"Invalid {curve.name} private key length: {len(secret)}")
            point = None
            if is_present(info['public_key']):
                point = decode_point(curve, info['public_key'].native)
            return KeyComponents(curve=curve, point=point, secret=secret)

        if oid != EC_PUBLIC_KEY_OID:
            raise UnsupportedAlgorithm(f"Not an elliptic curve key: {oid}")

        ec_key = parse_der(ECPrivateKey, info['private_key'].native)
        if is_present(algorithm['parameters']):
            domain = parse_der(keys.ECDomainParameters, algorithm['parameters'].dump())
        elif is_present(ec_key['parameters']):
            domain = ec_key['parameters']
        else:
            raise InvalidKeyMaterial("Private key has no curve parameters")

        curve = curve_from_domain(domain)
        point = None
        if is_present(ec_key['public_key']):
            point = decode_point(curve, ec_key['public_key'].native)
        return KeyComponents(
            curve=curve,
            point=point,
            scalar=bytes_to_int(ec_key['private_key'].native),
        )

    def _load_public(self, der: bytes) -> KeyComponents:
        info = parse_der(PublicKeyInfo, der)
        algorithm = info['algorithm']
        oid = algorithm['algorithm'].dotted

        if oid in EDWARDS_OIDS:
            curve = curve_from_oid(oid)
        elif oid == EC_PUBLIC_KEY_OID:
            if not is_present(algorithm['parameters']):
                raise InvalidKeyMaterial("Public key has no curve parameters")
            curve = curve_from_domain(parse_der(keys.ECDomainParameters, algorithm['parameters'].dump()))
        else:
            raise UnsupportedAlgorithm(f"Not an elliptic curve key: {oid}")

        return KeyComponents(curve=curve, point=decode_point(curve, info['public_key'].native))

    def _algorithm(self, curve: BaseCurve) -> AlgorithmIdentifier:
        if curve.family == CurveFamily.TWISTED_EDWARDS:
            return AlgorithmIdentifier({'algorithm': curve.oid})
        return AlgorithmIdentifier({
            'algorithm': EC_PUBLIC_KEY_OID,
            'parameters': domain_parameters(curve),
        })

    def save_private_key(
        self,
        curve: BaseCurve,
        scalar: int,
        secret: Optional[bytes],
        point: Point,
        password: Optional[bytes] = None,
    ) -> bytes:
        if curve.family == CurveFamily.TWISTED_EDWARDS:
            private_key = core.OctetString(secret).dump()
        else:
            private_key = ECPrivateKey({
                'version': 1,
                'private_key': int_to_bytes(scalar, scalar_length(curve)),
                'public_key': curve.encode_point(point),
            }).dump()

        der = PrivateKeyInfo({
            'version': 0,
            'private_key_algorithm': self._algorithm(curve),
            'private_key': private_key,
        }).dump()

        if not password:
            return write_pem("PRIVATE KEY", der)

        export = get_config().export
        logger.debug(f"Encrypting PKCS8 key with PBES2 ({export.pbkdf2_hash}, {export.pbkdf2_iterations} iterations)")
        encrypted = encrypt_private_key_info(der, password, export.pbkdf2_iterations, export.pbkdf2_hash)
        return write_pem("ENCRYPTED PRIVATE KEY", encrypted)

    def save_public_key(self, curve: BaseCurve, point: Point) -> bytes:
        der = PublicKeyInfo({
            'algorithm': self._algorithm(curve),
            'public_key': curve.encode_point(point),
        }).dump()
        return write_pem("PUBLIC KEY", der)

    def save_parameters(self, curve: BaseCurve, named_curve: bool = True) -> bytes:
        return write_pem("EC PARAMETERS", domain_parameters(curve, named_curve).dump())
