"""
SPARK ECDSA Nonce Generation

Two sources of per-signature secrets for short Weierstrass curves:

- deterministic: RFC 6979 section 3.2, HMAC_DRBG keyed by the private
  scalar and the message digest. Identical inputs give identical nonces.
- random: uniform draws from the OS CSPRNG.

Both are infinite generators; the signer pulls the next candidate when a
signature component comes out zero.

EdDSA nonces are derived inside the signer from the expanded secret
prefix (RFC 8032) and never come from here.
"""

from typing import Iterator

from .curves import ShortWeierstrassCurve
from .primitives import digest_size, hmac_digest, int_to_bytes


def rfc6979_nonces(
    curve: ShortWeierstrassCurve,
    scalar: int,
    message_digest: bytes,
    hash_name: str,
) -> Iterator[int]:
    """
    Yield RFC 6979 deterministic nonces.

    Args:
        curve: Signing curve
        scalar: Private scalar x
        message_digest: H(m) computed with hash_name
        hash_name: HMAC hash, the same one used for the message

    Yields:
        int: Candidate nonces in [1, q-1]
    """
    q = curve.order
    qlen = q.bit_length()
    rlen = (qlen + 7) // 8
    hlen = digest_size(hash_name)

    x_octets = int_to_bytes(scalar, rlen)
    h_octets = int_to_bytes(curve.truncate_digest(message_digest) % q, rlen)

    v = b"\x01" * hlen
    k = b"\x00" * hlen
    k = hmac_digest(hash_name, k, v, b"\x00", x_octets, h_octets)
    v = hmac_digest(hash_name, k, v)
    k = hmac_digest(hash_name, k, v, b"\x01", x_octets, h_octets)
    v = hmac_digest(hash_name, k, v)

    while True:
        t = b""
        while len(t) * 8 < qlen:
            v = hmac_digest(hash_name, k, v)
            t += v

        candidate = curve.truncate_digest(t)
        if 1 <= candidate < q:
            yield candidate

        k = hmac_digest(hash_name, k, v, b"\x00")
        v = hmac_digest(hash_name, k, v)


def random_nonces(curve: ShortWeierstrassCurve) -> Iterator[int]:
    """Yield uniform random nonces in [1, q-1]."""
    while True:
        yield curve.random_scalar()
