"""
SPARK Curve Registry

Static registry of named curves for both families:
- Short Weierstrass: secp192r1, secp224r1, secp256r1, secp384r1,
  secp521r1, secp256k1
- Twisted Edwards: Ed25519, Ed448

Lookups are case-insensitive and accept the usual aliases
(prime256v1, nistp256, P-256, ...).
"""

from typing import Dict, Optional

from .base import BaseCurve, CurveFamily, Point, is_probable_prime, mod_sqrt
from .weierstrass import (
    ShortWeierstrassCurve,
    SECP192R1,
    SECP224R1,
    SECP256R1,
    SECP384R1,
    SECP521R1,
    SECP256K1,
)
from .edwards import (
    TwistedEdwardsCurve,
    ED25519,
    ED448,
)
from ..errors import UnsupportedCurve


ALL_CURVES = (
    SECP192R1,
    SECP224R1,
    SECP256R1,
    SECP384R1,
    SECP521R1,
    SECP256K1,
    ED25519,
    ED448,
)


def _build_registry() -> Dict[str, BaseCurve]:
    registry: Dict[str, BaseCurve] = {}
    for curve in ALL_CURVES:
        registry[curve.name.lower()] = curve
        for alias in curve.aliases:
            registry[alias.lower()] = curve
    return registry


NAMED_CURVES: Dict[str, BaseCurve] = _build_registry()

CURVES_BY_OID: Dict[str, BaseCurve] = {curve.oid: curve for curve in ALL_CURVES}


def get_curve(name: str) -> BaseCurve:
    """
    Resolve a curve name or alias.

    Args:
        name: Curve name, case-insensitive

    Returns:
        The shared curve instance

    Raises:
        UnsupportedCurve: If the name is not registered
    """
    curve = NAMED_CURVES.get(name.strip().lower())
    if curve is None:
        raise UnsupportedCurve(f"Named curve {name} is not supported")
    return curve


def curve_from_oid(oid: str) -> BaseCurve:
    """
    Resolve a named-curve object identifier.

    Raises:
        UnsupportedCurve: If the OID is not registered
    """
    curve = CURVES_BY_OID.get(oid)
    if curve is None:
        raise UnsupportedCurve(f"Curve OID {oid} is not supported")
    return curve


def match_named_curve(curve: BaseCurve) -> Optional[BaseCurve]:
    """Return the named curve with the same domain parameters, if any."""
    for named in ALL_CURVES:
        if named == curve:
            return named
    return None


__all__ = [
    'BaseCurve',
    'CurveFamily',
    'Point',
    'is_probable_prime',
    'mod_sqrt',
    'ShortWeierstrassCurve',
    'TwistedEdwardsCurve',
    'SECP192R1',
    'SECP224R1',
    'SECP256R1',
    'SECP384R1',
    'SECP521R1',
    'SECP256K1',
    'ED25519',
    'ED448',
    'ALL_CURVES',
    'NAMED_CURVES',
    'get_curve',
    'curve_from_oid',
    'match_named_curve',
]
