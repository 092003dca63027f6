"""
SPARK Cryptographic Primitives

Low-level helpers wrapping the cryptography library: randomness, hashing,
HMAC, key derivation, AES-CBC for encrypted key containers and
integer/byte conversion.

SECURITY NOTES:
- All randomness from os.urandom (kernel CSPRNG)
- All secret comparisons use constant-time operations
- Hash functions are never implemented here; they come from cryptography

Dependencies:
- cryptography (OpenSSL backend)
"""

import os
import hmac
from typing import Callable, Dict

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import UnsupportedAlgorithm


AES_BLOCK_SIZE = 16

# Hash name -> factory for the cryptography hash object.
# shake256-912 is SHAKE-256 read out to 912 bits (114 bytes), as used by Ed448.
HASH_ALGORITHMS: Dict[str, Callable[[], hashes.HashAlgorithm]] = {
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha512/224": hashes.SHA512_224,
    "sha512/256": hashes.SHA512_256,
    "sha3-224": hashes.SHA3_224,
    "sha3-256": hashes.SHA3_256,
    "sha3-384": hashes.SHA3_384,
    "sha3-512": hashes.SHA3_512,
    "shake256-912": lambda: hashes.SHAKE256(digest_size=114),
}

# Extendable-output functions cannot key an HMAC, so ECDSA never accepts them
XOF_HASHES = frozenset({"shake256-912"})


def random_bytes(length: int) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Uses os.urandom() which reads from the kernel's CSPRNG. This may block
    briefly on an unseeded system; it is the only suspension point in the
    library.

    Args:
        length: Number of random bytes to generate

    Returns:
        bytes: Cryptographically secure random bytes

    Raises:
        ValueError: If length is negative
    """
    if length < 0:
        raise ValueError("Length must be non-negative")
    return os.urandom(length)


def random_int_below(bound: int) -> int:
    """
    Draw a uniform integer from [1, bound - 1] by rejection sampling.

    Candidates are masked to the bit length of the bound so that on
    average fewer than two draws are needed.
    """
    if bound < 2:
        raise ValueError("Bound must be at least 2")

    bits = bound.bit_length()
    length = (bits + 7) // 8
    mask = (1 << bits) - 1
    while True:
        candidate = bytes_to_int(random_bytes(length)) & mask
        if 1 <= candidate < bound:
            return candidate


def normalize_hash_name(name: str) -> str:
    """Lower-case a hash name and map common spellings to registry keys."""
    name = name.strip().lower()
    if name.startswith("sha-"):
        name = "sha" + name[4:]
    return name


def hash_algorithm(name: str) -> hashes.HashAlgorithm:
    """
    Look up a hash algorithm by name.

    Args:
        name: Registry name (e.g. "sha256", "sha3-512", "shake256-912")

    Returns:
        A fresh cryptography hash algorithm instance

    Raises:
        UnsupportedAlgorithm: If the name is unknown
    """
    factory = HASH_ALGORITHMS.get(normalize_hash_name(name))
    if factory is None:
        raise UnsupportedAlgorithm(f"Hash algorithm not supported: {name}")
    return factory()


def digest(name: str, *chunks: bytes) -> bytes:
    """
    Hash the concatenation of chunks with the named algorithm.

    Args:
        name: Hash name
        chunks: Data to hash, fed in order

    Returns:
        bytes: Digest (114 bytes for shake256-912)
    """
    hasher = hashes.Hash(hash_algorithm(name))
    for chunk in chunks:
        hasher.update(chunk)
    return hasher.finalize()


def digest_size(name: str) -> int:
    """Return the output size in bytes of the named hash."""
    return hash_algorithm(name).digest_size


def hmac_digest(name: str, key: bytes, *chunks: bytes) -> bytes:
    """
    Compute HMAC over the concatenation of chunks.

    Used by RFC 6979 deterministic nonce generation.

    Raises:
        UnsupportedAlgorithm: For unknown hashes or extendable-output functions
    """
    if normalize_hash_name(name) in XOF_HASHES:
        raise UnsupportedAlgorithm(f"HMAC is not defined for {name}")
    mac = crypto_hmac.HMAC(key, hash_algorithm(name))
    for chunk in chunks:
        mac.update(chunk)
    return mac.finalize()


def pbkdf2_derive(
    password: bytes,
    salt: bytes,
    iterations: int,
    length: int,
    hash_name: str = "sha256",
) -> bytes:
    """
    Derive a symmetric key from a password using PBKDF2-HMAC (RFC 8018).

    Args:
        password: Password bytes
        salt: Random salt stored alongside the ciphertext
        iterations: PBKDF2 iteration count
        length: Desired key length in bytes
        hash_name: PRF hash

    Returns:
        bytes: Derived key
    """
    if iterations < 1:
        raise ValueError("Iteration count must be at least 1")

    kdf = PBKDF2HMAC(
        algorithm=hash_algorithm(hash_name),
        length=length,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password)


def aes_cbc_encrypt(key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    """
    Encrypt with AES-CBC and PKCS#7 padding (PBES2 encryption scheme).

    Args:
        key: 16, 24 or 32 byte AES key
        iv: 16-byte initialization vector
        plaintext: Data to encrypt

    Returns:
        bytes: Ciphertext, a multiple of 16 bytes
    """
    padder = padding.PKCS7(AES_BLOCK_SIZE * 8).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def aes_cbc_decrypt(key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    """
    Decrypt AES-CBC and strip PKCS#7 padding.

    Raises:
        ValueError: If the ciphertext length or the padding is invalid,
            which is what a wrong key usually produces
    """
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(AES_BLOCK_SIZE * 8).unpadder()
    return unpadder.update(padded) + unpadder.finalize()


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """
    Compare two byte strings in constant time.

    Uses hmac.compare_digest() so that the comparison time does not reveal
    the position of the first differing byte.

    Args:
        a: First byte string
        b: Second byte string

    Returns:
        bool: True if equal, False otherwise
    """
    return hmac.compare_digest(a, b)


def int_to_bytes(value: int, length: int, byteorder: str = "big") -> bytes:
    """Fixed-width unsigned encoding of a non-negative integer."""
    return value.to_bytes(length, byteorder)


def bytes_to_int(data: bytes, byteorder: str = "big") -> int:
    """Unsigned decoding of a byte string."""
    return int.from_bytes(data, byteorder)
