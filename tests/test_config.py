"""
Tests for configuration loading and validation.
"""
import logging

import pytest

from sparksig.config import Config, configure_logging, get_config, set_config


class TestDefaults:
    """Test default configuration values."""

    def test_defaults(self):
        config = Config()
        assert config.signing.default_hash == "sha256"
        assert config.signing.signature_format == "ASN1"
        assert config.signing.ecdsa_nonce == "deterministic"
        assert config.engines.openssl
        assert config.engines.native_eddsa
        assert config.export.key_format == "PKCS8"
        assert config.export.pbkdf2_iterations == 100000
        assert config.log_level == "INFO"

    def test_defaults_are_valid(self):
        Config().validate()

    def test_instances_do_not_share_sections(self):
        first, second = Config(), Config()
        first.signing.default_hash = "sha512"
        assert second.signing.default_hash == "sha256"


class TestValidation:
    """Test configuration validation."""

    @pytest.mark.parametrize("section, name, value", [
        ("signing", "default_hash", "md5"),
        ("signing", "default_hash", "shake256-912"),
        ("signing", "signature_format", "PGP"),
        ("signing", "ecdsa_nonce", "counter"),
        ("export", "key_format", "JWK"),
        ("export", "pbkdf2_iterations", 10),
        ("export", "pbkdf2_hash", "sha3-256"),
    ])
    def test_invalid_values(self, section, name, value):
        config = Config()
        setattr(getattr(config, section), name, value)
        with pytest.raises(ValueError):
            config.validate()

    def test_invalid_log_level(self):
        config = Config()
        config.log_level = "VERBOSE"
        with pytest.raises(ValueError):
            config.validate()

    def test_set_config_validates(self):
        config = Config()
        config.signing.ecdsa_nonce = "counter"
        with pytest.raises(ValueError):
            set_config(config)
        assert get_config() is not config


class TestLoad:
    """Test loading configuration files."""

    def test_missing_file(self, tmp_path):
        path = tmp_path / "missing.toml"
        config = Config.load(path)
        assert config.config_path == path
        assert config.signing.default_hash == "sha256"

    def test_load_toml(self, tmp_path):
        pytest.importorskip("toml")
        path = tmp_path / "sparksig.toml"
        path.write_text(
            'log_level = "debug"\n'
            "\n"
            "[signing]\n"
            'default_hash = "SHA384"\n'
            'signature_format = "SSH2"\n'
            'ecdsa_nonce = "random"\n'
            "\n"
            "[engines]\n"
            "openssl = false\n"
            "\n"
            "[export]\n"
            'key_format = "OpenSSH"\n'
            "pbkdf2_iterations = 200000\n"
        )
        config = Config.load(path)
        assert config.log_level == "DEBUG"
        assert config.signing.default_hash == "sha384"
        assert config.signing.signature_format == "SSH2"
        assert config.signing.ecdsa_nonce == "random"
        assert not config.engines.openssl
        assert config.engines.native_eddsa
        assert config.export.key_format == "OpenSSH"
        assert config.export.pbkdf2_iterations == 200000

    def test_invalid_toml(self, tmp_path):
        pytest.importorskip("toml")
        path = tmp_path / "broken.toml"
        path.write_text("[signing\n")
        with pytest.raises(ValueError):
            Config.load(path)

    def test_invalid_value_in_file(self, tmp_path):
        pytest.importorskip("toml")
        path = tmp_path / "bad.toml"
        path.write_text('[signing]\necdsa_nonce = "sometimes"\n')
        with pytest.raises(ValueError):
            Config.load(path)

    def test_invalid_key_format_in_file(self, tmp_path):
        pytest.importorskip("toml")
        path = tmp_path / "bad_format.toml"
        path.write_text('[export]\nkey_format = "PEM"\n')
        with pytest.raises(ValueError):
            Config.load(path)


class TestLogging:
    """Test logger configuration."""

    def test_configure_logging(self):
        logger = logging.getLogger("sparksig")
        previous = logger.level
        config = Config()
        config.log_level = "DEBUG"
        try:
            configure_logging(config)
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(previous)

    def test_set_config_applies_log_level(self):
        config = Config()
        config.log_level = "WARNING"
        set_config(config)
        assert logging.getLogger("sparksig").level == logging.WARNING
