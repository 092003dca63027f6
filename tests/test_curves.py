"""
Tests for curve arithmetic, point encodings and the curve registry.
"""
import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from sparksig.curves import (
    ALL_CURVES,
    ED25519,
    ED448,
    SECP224R1,
    SECP256K1,
    SECP256R1,
    SECP384R1,
    SECP521R1,
    CurveFamily,
    curve_from_oid,
    get_curve,
    is_probable_prime,
    match_named_curve,
    mod_sqrt,
)
from sparksig.errors import UnsupportedCurve


# RFC 8032 section 7.1, TEST 1
ED25519_SEED = bytes.fromhex("9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60")
ED25519_PUBLIC = bytes.fromhex("d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a")


class TestCurveRegistry:
    """Test named curve lookup."""

    def test_lookup_is_case_insensitive(self):
        assert get_curve("SECP256R1") is SECP256R1
        assert get_curve("ed25519") is ED25519
        assert get_curve("  Ed448 ") is ED448

    @pytest.mark.parametrize("alias", ["prime256v1", "nistp256", "P-256", "p256"])
    def test_aliases(self, alias):
        assert get_curve(alias) is SECP256R1

    def test_unknown_curve(self):
        with pytest.raises(UnsupportedCurve):
            get_curve("brainpoolP256r1")

    def test_lookup_by_oid(self):
        assert curve_from_oid("1.2.840.10045.3.1.7") is SECP256R1
        assert curve_from_oid("1.3.101.112") is ED25519
        with pytest.raises(UnsupportedCurve):
            curve_from_oid("1.2.3.4")

    def test_families(self):
        assert SECP256K1.family == CurveFamily.SHORT_WEIERSTRASS
        assert ED448.family == CurveFamily.TWISTED_EDWARDS

    def test_match_named_curve_ignores_names(self):
        from dataclasses import replace

        anonymous = replace(SECP384R1, name=None, oid=None, aliases=())
        assert anonymous == SECP384R1
        assert not anonymous.is_named
        assert match_named_curve(anonymous) is SECP384R1


class TestModSqrt:
    """Test modular square roots."""

    @pytest.mark.parametrize("p", [SECP256R1.p, SECP224R1.p, ED25519.p, ED448.p])
    def test_square_roots(self, p):
        for value in (4, 25, 12345678901234567890):
            square = value * value % p
            root = mod_sqrt(square, p)
            assert root * root % p == square

    def test_non_residue(self):
        p = SECP224R1.p
        n = 2
        while pow(n, (p - 1) // 2, p) != p - 1:
            n += 1
        assert mod_sqrt(n, p) is None

    def test_zero(self):
        assert mod_sqrt(0, SECP256R1.p) == 0


class TestGroupLaw:
    """Properties every curve's group must satisfy."""

    @pytest.mark.parametrize("curve", ALL_CURVES, ids=lambda c: c.name)
    def test_base_point_on_curve(self, curve):
        assert curve.is_on_curve(curve.base_point())

    @pytest.mark.parametrize("curve", ALL_CURVES, ids=lambda c: c.name)
    def test_base_point_order(self, curve):
        assert curve.has_valid_order(curve.base_point())
        assert not curve.is_identity(curve.multiply_base(curve.order - 1))

    @pytest.mark.parametrize("curve", ALL_CURVES, ids=lambda c: c.name)
    def test_addition_matches_multiplication(self, curve):
        g = curve.base_point()
        two_g = curve.add_points(g, g)
        assert two_g == curve.multiply_base(2)
        assert curve.add_points(two_g, g) == curve.multiply_base(3)

    @pytest.mark.parametrize("curve", ALL_CURVES, ids=lambda c: c.name)
    def test_negation(self, curve):
        g = curve.base_point()
        assert curve.is_identity(curve.add_points(g, curve.negate_point(g)))
        assert curve.multiply_point(g, -5) == curve.negate_point(curve.multiply_base(5))

    @pytest.mark.parametrize("curve", ALL_CURVES, ids=lambda c: c.name)
    def test_random_scalar_range(self, curve):
        for _ in range(5):
            assert 1 <= curve.random_scalar() < curve.order


class TestShortWeierstrass:
    """Test short Weierstrass specifics."""

    @pytest.mark.parametrize("curve, openssl_curve", [
        (SECP256R1, ec.SECP256R1()),
        (SECP384R1, ec.SECP384R1()),
        (SECP521R1, ec.SECP521R1()),
    ], ids=["p256", "p384", "p521"])
    def test_multiplication_matches_openssl(self, curve, openssl_curve):
        scalar = curve.random_scalar()
        numbers = ec.derive_private_key(scalar, openssl_curve).public_key().public_numbers()
        assert curve.multiply_base(scalar) == (numbers.x, numbers.y)

    def test_point_at_infinity(self):
        assert SECP256R1.multiply_base(SECP256R1.order) is None
        assert SECP256R1.multiply_base(0) is None
        assert not SECP256R1.is_on_curve(None)
        assert SECP256R1.add_points(None, SECP256R1.base_point()) == SECP256R1.base_point()

    def test_multiply_add(self):
        curve = SECP256R1
        q = curve.multiply_base(7)
        u1, u2 = curve.random_scalar(), curve.random_scalar()
        expected = curve.add_points(curve.multiply_base(u1), curve.multiply_point(q, u2))
        assert curve.multiply_add(curve.base_point(), u1, q, u2) == expected

    @pytest.mark.parametrize("curve", [SECP224R1, SECP256R1, SECP521R1, SECP256K1], ids=lambda c: c.name)
    def test_encoding_round_trip(self, curve):
        point = curve.multiply_base(curve.random_scalar())
        uncompressed = curve.encode_point(point)
        compressed = curve.encode_point(point, compressed=True)
        assert len(uncompressed) == 1 + 2 * curve.field_length
        assert len(compressed) == 1 + curve.field_length
        assert curve.decode_point(uncompressed) == point
        assert curve.decode_point(compressed) == point

    def test_decode_rejects_off_curve_point(self):
        x, y = SECP256R1.base_point()
        n = SECP256R1.field_length
        data = b"\x04" + x.to_bytes(n, "big") + ((y + 1) % SECP256R1.p).to_bytes(n, "big")
        with pytest.raises(ValueError):
            SECP256R1.decode_point(data)

    def test_decode_rejects_bad_prefix_and_length(self):
        encoded = SECP256R1.encode_point(SECP256R1.base_point())
        with pytest.raises(ValueError):
            SECP256R1.decode_point(b"\x05" + encoded[1:])
        with pytest.raises(ValueError):
            SECP256R1.decode_point(encoded[:-1])
        with pytest.raises(ValueError):
            SECP256R1.decode_point(b"")

    def test_encode_infinity_fails(self):
        with pytest.raises(ValueError):
            SECP256R1.encode_point(None)

    def test_truncate_digest(self):
        digest = bytes(range(64))
        assert SECP256R1.truncate_digest(digest) == int.from_bytes(digest[:32], "big")
        assert SECP521R1.truncate_digest(digest) == int.from_bytes(digest, "big")


class TestTwistedEdwards:
    """Test twisted Edwards specifics."""

    def test_rfc8032_public_key(self):
        scalar, _ = ED25519.expand_secret(ED25519_SEED)
        assert ED25519.encode_point(ED25519.multiply_base(scalar)) == ED25519_PUBLIC

    def test_clamping(self):
        scalar, prefix = ED25519.expand_secret(ED25519_SEED)
        assert len(prefix) == 32
        assert 0 < scalar < ED25519.order

        _, prefix448 = ED448.expand_secret(bytes(57))
        assert len(prefix448) == 57

    def test_expand_rejects_wrong_length(self):
        with pytest.raises(ValueError):
            ED25519.expand_secret(bytes(31))

    @pytest.mark.parametrize("curve", [ED25519, ED448], ids=lambda c: c.name)
    def test_encoding_round_trip(self, curve):
        point = curve.multiply_base(curve.random_scalar())
        encoded = curve.encode_point(point)
        assert len(encoded) == curve.encoded_length
        assert curve.decode_point(encoded) == point

    def test_decode_rejects_invalid_points(self):
        with pytest.raises(ValueError):
            ED25519.decode_point(bytes(31))
        # y = p is not a canonical field element
        with pytest.raises(ValueError):
            ED25519.decode_point(ED25519.p.to_bytes(32, "little"))

    def test_identity(self):
        assert ED25519.is_identity((0, 1))
        assert ED25519.is_on_curve((0, 1))
        assert ED25519.multiply_base(ED25519.order) == (0, 1)

    def test_clear_cofactor_kills_small_order_points(self):
        small = (0, ED25519.p - 1)  # order 2
        assert ED25519.is_on_curve(small)
        assert ED25519.is_identity(ED25519.clear_cofactor(small))

    def test_dom_prefixes(self):
        assert ED25519.dom() == b""
        assert ED25519.dom(b"ctx") == b"SigEd25519 no Ed25519 collisions\x00\x03ctx"
        assert ED448.dom() == b"SigEd448\x00\x00"

    def test_signature_ranges(self):
        assert ED25519.signature_components_valid(0, 1)
        assert not ED25519.signature_components_valid(1 << 256, 1)
        assert not ED25519.signature_components_valid(1, ED25519.order)
        assert not ED25519.signature_components_valid(1, 0)


class TestPrimality:
    """Test the Miller-Rabin check used on explicit domain parameters."""

    @pytest.mark.parametrize("curve", ALL_CURVES, ids=lambda c: c.name)
    def test_curve_parameters_are_prime(self, curve):
        assert is_probable_prime(curve.p)
        assert is_probable_prime(curve.order)

    def test_small_values(self):
        assert [n for n in range(30) if is_probable_prime(n)] == [2, 3, 5, 7, 11, 13, 17, 19, 23, 29]

    @pytest.mark.parametrize("n", [21, 561, 3215031751, 2 * SECP256R1.order, SECP256R1.p * SECP256K1.p])
    def test_composites(self, n):
        assert not is_probable_prime(n)
