"""
SPARK Signature Errors

Exception taxonomy shared by every component. All errors are raised
synchronously at the point of detection and are never retried internally.
"""


class SparkSigError(Exception):
    """Base class for all signature library errors."""
    pass


class UnsupportedCurve(SparkSigError):
    """Unknown curve name, or a feature requested on an incompatible curve family."""
    pass


class UnsupportedAlgorithm(SparkSigError):
    """Hash, signature format or container format not usable with this key."""
    pass


class InvalidKeyMaterial(SparkSigError, ValueError):
    """Malformed, incomplete or inconsistent key container or key value."""
    pass


class DecryptionError(SparkSigError):
    """Encrypted key container could not be opened with the given password."""
    pass


class InvalidSignatureFormat(SparkSigError, ValueError):
    """Signature blob is malformed or holds out-of-range components."""
    pass


class InvalidContext(SparkSigError, ValueError):
    """Domain separation context is not bytes or exceeds 255 bytes."""
    pass
