"""
Shared fixtures for sparksig tests.
"""
import pytest

from sparksig import EngineContext, create_key, get_config, set_config


WEIERSTRASS_CURVES = ["secp192r1", "secp224r1", "secp256r1", "secp384r1", "secp521r1", "secp256k1"]
EDWARDS_CURVES = ["Ed25519", "Ed448"]
ALL_CURVE_NAMES = WEIERSTRASS_CURVES + EDWARDS_CURVES


@pytest.fixture(autouse=True)
def restore_config():
    """Put back the process-wide configuration a test replaced."""
    original = get_config()
    yield
    if get_config() is not original:
        set_config(original)


@pytest.fixture
def generic_engine():
    """Engine context restricted to the pure Python engine."""
    return EngineContext.generic()


@pytest.fixture(params=["generic", "default"])
def engine_context(request):
    """Run a test once on the generic engine and once on the best available."""
    if request.param == "generic":
        return EngineContext.generic()
    return EngineContext()


@pytest.fixture(params=ALL_CURVE_NAMES)
def curve_name(request):
    return request.param


@pytest.fixture(params=WEIERSTRASS_CURVES)
def weierstrass_name(request):
    return request.param


@pytest.fixture(params=EDWARDS_CURVES)
def edwards_name(request):
    return request.param


@pytest.fixture
def private_key(curve_name):
    return create_key(curve_name)


@pytest.fixture
def p256_key():
    return create_key("secp256r1")


@pytest.fixture
def ed25519_key():
    return create_key("Ed25519")
