"""
SPARK Engine Selection

Chooses, per sign or verify call, the fastest backend able to handle the
curve, hash and context combination.

Engines, in priority order:
    openssl       OpenSSL ECDSA through cryptography; named curves only,
                  and only for hashes the probe saw it accept
    native-eddsa  cryptography's Ed25519/Ed448; only with an empty context
    python        Generic arbitrary-precision arithmetic; always available

Capabilities are probed once per EngineContext by running real operations
against OpenSSL. Concurrent first use is single-flight: exactly one thread
runs the probe and every caller sees the same EngineCapability.

Usage:
    context = EngineContext()                     # probes lazily
    engine = context.select(key.curve, key.hash_name)

    generic = EngineContext.generic()             # never probes
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, FrozenSet, Iterable, Optional

from cryptography.exceptions import UnsupportedAlgorithm as OpenSSLUnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec

from .config import Config, get_config
from .curves import BaseCurve, CurveFamily
from .openssl import OPENSSL_CURVES, OPENSSL_EDWARDS, ecdsa_algorithm
from .primitives import HASH_ALGORITHMS, XOF_HASHES, normalize_hash_name


logger = logging.getLogger("sparksig.engine")

_PROBE_MESSAGE = b"sparksig capability probe"


class Engine(Enum):
    """Computation backends."""
    OPENSSL = "openssl"
    NATIVE_EDDSA = "native-eddsa"
    PYTHON = "python"


@dataclass(frozen=True)
class EngineCapability:
    """What the accelerated backends can do on this host."""
    ecdsa_curves: FrozenSet[str] = field(default_factory=frozenset)
    ecdsa_hashes: FrozenSet[str] = field(default_factory=frozenset)
    deterministic_ecdsa: bool = False
    eddsa_curves: FrozenSet[str] = field(default_factory=frozenset)

    def supports_ecdsa(self, curve_name: Optional[str], hash_name: str, deterministic: bool = False) -> bool:
        if curve_name not in self.ecdsa_curves:
            return False
        if normalize_hash_name(hash_name) not in self.ecdsa_hashes:
            return False
        return self.deterministic_ecdsa or not deterministic

    def supports_eddsa(self, curve_name: Optional[str]) -> bool:
        return curve_name in self.eddsa_curves


NO_CAPABILITY = EngineCapability()


def _probe_ecdsa_curves():
    keys = {}
    for name, factory in OPENSSL_CURVES.items():
        try:
            keys[name] = ec.generate_private_key(factory())
        except (OpenSSLUnsupportedAlgorithm, ValueError):
            logger.debug(f"OpenSSL lacks curve {name}")
    return keys


def _probe_ecdsa_hashes(key) -> FrozenSet[str]:
    supported = set()
    for hash_name in HASH_ALGORITHMS:
        if hash_name in XOF_HASHES:
            continue
        try:
            key.sign(_PROBE_MESSAGE, ecdsa_algorithm(hash_name))
        except (OpenSSLUnsupportedAlgorithm, ValueError):
            logger.debug(f"OpenSSL ECDSA lacks hash {hash_name}")
            continue
        supported.add(hash_name)
    return frozenset(supported)


def _probe_deterministic(key) -> bool:
    try:
        key.sign(_PROBE_MESSAGE, ecdsa_algorithm("sha256", deterministic=True))
    except TypeError:
        # cryptography release predates deterministic_signing
        return False
    except OpenSSLUnsupportedAlgorithm:
        # OpenSSL older than 3.2
        return False
    return True


def _probe_eddsa_curves() -> FrozenSet[str]:
    supported = set()
    for name, (private_cls, _) in OPENSSL_EDWARDS.items():
        try:
            private_cls.generate().sign(_PROBE_MESSAGE)
        except OpenSSLUnsupportedAlgorithm:
            logger.debug(f"OpenSSL lacks {name}")
            continue
        supported.add(name)
    return frozenset(supported)


def probe_capabilities() -> EngineCapability:
    """
    Probe OpenSSL through cryptography.

    Each capability is established by running the operation itself, so
    builds with curves or hashes disabled are reported accurately.

    Returns:
        EngineCapability: Immutable probe result
    """
    keys = _probe_ecdsa_curves()
    hashes = frozenset()
    deterministic = False
    if keys:
        probe_key = next(iter(keys.values()))
        hashes = _probe_ecdsa_hashes(probe_key)
        deterministic = _probe_deterministic(probe_key)

    capability = EngineCapability(
        ecdsa_curves=frozenset(keys),
        ecdsa_hashes=hashes,
        deterministic_ecdsa=deterministic,
        eddsa_curves=_probe_eddsa_curves(),
    )
    logger.info(
        f"OpenSSL capabilities: ecdsa curves={sorted(capability.ecdsa_curves)}, "
        f"hashes={len(capability.ecdsa_hashes)}, deterministic={capability.deterministic_ecdsa}, "
        f"eddsa={sorted(capability.eddsa_curves)}"
    )
    return capability


class EngineContext:
    """
    Once-probed capability set plus the engines callers allow.

    Thread-safe: the first access to capability probes under a lock with
    double-checked locking; later accesses read the cached value.
    """

    def __init__(
        self,
        allowed: Optional[Iterable[Engine]] = None,
        prober: Callable[[], EngineCapability] = probe_capabilities,
    ):
        """
        Initialize engine context.

        Args:
            allowed: Engines that may be selected (default: all).
                Engine.PYTHON is always allowed.
            prober: Capability probe, run at most once
        """
        allowed_set = set(Engine if allowed is None else allowed)
        allowed_set.add(Engine.PYTHON)
        self.allowed: FrozenSet[Engine] = frozenset(allowed_set)
        self._prober = prober
        self._capability: Optional[EngineCapability] = None
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> 'EngineContext':
        """Context allowing the engines enabled in configuration."""
        config = config or get_config()
        allowed = [Engine.PYTHON]
        if config.engines.openssl:
            allowed.append(Engine.OPENSSL)
        if config.engines.native_eddsa:
            allowed.append(Engine.NATIVE_EDDSA)
        return cls(allowed=allowed)

    @classmethod
    def generic(cls) -> 'EngineContext':
        """Context restricted to the generic engine."""
        return cls(allowed=[Engine.PYTHON])

    @property
    def accelerated(self) -> bool:
        return self.allowed != {Engine.PYTHON}

    @property
    def probed(self) -> bool:
        return self._capability is not None

    @property
    def capability(self) -> EngineCapability:
        """Probe result, computed on first access."""
        capability = self._capability
        if capability is not None:
            return capability

        if not self.accelerated:
            return NO_CAPABILITY

        with self._lock:
            if self._capability is None:
                self._capability = self._prober()
            return self._capability

    def select(
        self,
        curve: BaseCurve,
        hash_name: str,
        context: Optional[bytes] = None,
        deterministic: bool = False,
    ) -> Engine:
        """
        Pick the backend for one operation.

        Args:
            curve: Key curve
            hash_name: Hash bound to the key
            context: EdDSA context; a non-empty one forces the generic path
            deterministic: True when signing needs RFC 6979 nonces

        Returns:
            Engine: Selected backend
        """
        if curve.family == CurveFamily.SHORT_WEIERSTRASS:
            if (Engine.OPENSSL in self.allowed
                    and self.capability.supports_ecdsa(curve.name, hash_name, deterministic)):
                return Engine.OPENSSL
        elif not context:
            if (Engine.NATIVE_EDDSA in self.allowed
                    and self.capability.supports_eddsa(curve.name)):
                return Engine.NATIVE_EDDSA

        logger.debug(f"Using generic engine for {curve.name or 'explicit curve'} ({hash_name})")
        return Engine.PYTHON

    def __repr__(self) -> str:
        allowed = ", ".join(sorted(engine.value for engine in self.allowed))
        return f"EngineContext(allowed=[{allowed}], probed={self.probed})"


# Process-wide default context, created on first use
_default_context: Optional[EngineContext] = None
_default_lock = threading.Lock()


def default_engine_context() -> EngineContext:
    """Return the process-wide context built from the active configuration."""
    global _default_context
    context = _default_context
    if context is not None:
        return context

    with _default_lock:
        if _default_context is None:
            _default_context = EngineContext.from_config()
        return _default_context


def reset_default_engine_context() -> None:
    """Drop the default context; the next call rebuilds it from configuration."""
    global _default_context
    with _default_lock:
        _default_context = None
