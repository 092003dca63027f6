"""
SPARK Signature Configuration

Handles loading and validation of library defaults from a TOML file.

Example (config.toml):

    log_level = "DEBUG"

    [signing]
    default_hash = "sha384"
    signature_format = "SSH2"
    ecdsa_nonce = "random"

    [engines]
    openssl = false

    [export]
    pbkdf2_iterations = 200000
"""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

try:
    import toml
    HAS_TOML = True
except ImportError:
    HAS_TOML = False


logger = logging.getLogger("sparksig.config")

# Default configuration path
DEFAULT_CONFIG_PATH = Path("/etc/spark/sparksig.toml")

NONCE_MODES = ("deterministic", "random")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class SigningConfig:
    """Defaults applied to newly created or loaded short Weierstrass keys."""
    default_hash: str = "sha256"
    signature_format: str = "ASN1"
    ecdsa_nonce: str = "deterministic"  # RFC 6979, or "random"


@dataclass
class EngineConfig:
    """Which accelerated backends may be selected."""
    openssl: bool = True
    native_eddsa: bool = True


@dataclass
class ExportConfig:
    """Key container export defaults."""
    key_format: str = "PKCS8"
    pbkdf2_iterations: int = 100000
    pbkdf2_hash: str = "sha256"


@dataclass
class Config:
    """
    Complete library configuration.
    """
    # Sub-configurations
    signing: SigningConfig = field(default_factory=SigningConfig)
    engines: EngineConfig = field(default_factory=EngineConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    # Logging
    log_level: str = "INFO"

    # Source file
    config_path: Optional[Path] = None

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """
        Load configuration from file.

        A missing file, or a missing toml package, yields the defaults.

        Args:
            config_path: Path to config file (default: /etc/spark/sparksig.toml)

        Returns:
            Loaded configuration

        Raises:
            ValueError: If the file exists but cannot be parsed or is invalid
        """
        path = Path(config_path or DEFAULT_CONFIG_PATH)
        config = cls()
        config.config_path = path

        if not path.exists():
            return config

        if not HAS_TOML:
            logger.warning(f"toml package not installed, ignoring {path}")
            return config

        try:
            data = toml.load(path)
        except toml.TomlDecodeError as e:
            raise ValueError(f"Invalid configuration file {path}: {e}") from e

        config._apply_dict(data)
        config.validate()
        return config

    def _apply_dict(self, data: Dict[str, Any]) -> None:
        """Apply dictionary data to config."""
        # Top-level settings
        if "log_level" in data:
            self.log_level = str(data["log_level"]).upper()

        # Signing config
        if "signing" in data:
            s = data["signing"]
            if "default_hash" in s:
                self.signing.default_hash = str(s["default_hash"]).lower()
            if "signature_format" in s:
                self.signing.signature_format = str(s["signature_format"])
            if "ecdsa_nonce" in s:
                self.signing.ecdsa_nonce = str(s["ecdsa_nonce"]).lower()

        # Engine config
        if "engines" in data:
            e = data["engines"]
            if "openssl" in e:
                self.engines.openssl = bool(e["openssl"])
            if "native_eddsa" in e:
                self.engines.native_eddsa = bool(e["native_eddsa"])

        # Export config
        if "export" in data:
            x = data["export"]
            if "key_format" in x:
                self.export.key_format = str(x["key_format"])
            if "pbkdf2_iterations" in x:
                self.export.pbkdf2_iterations = int(x["pbkdf2_iterations"])
            if "pbkdf2_hash" in x:
                self.export.pbkdf2_hash = str(x["pbkdf2_hash"]).lower()

    def validate(self) -> None:
        """
        Validate configuration.

        Raises:
            ValueError: If configuration is invalid
        """
        # Imported here: codec, container and primitives pull in the cryptography stack
        from .codec import SIGNATURE_FORMATS
        from .container import CONTAINER_FORMATS
        from .primitives import HASH_ALGORITHMS, XOF_HASHES, normalize_hash_name

        default_hash = normalize_hash_name(self.signing.default_hash)
        if default_hash not in HASH_ALGORITHMS or default_hash in XOF_HASHES:
            raise ValueError(f"Invalid default hash: {self.signing.default_hash}")

        if self.signing.signature_format.lower() not in SIGNATURE_FORMATS:
            raise ValueError(f"Invalid signature format: {self.signing.signature_format}")

        if self.signing.ecdsa_nonce not in NONCE_MODES:
            raise ValueError(f"Invalid ECDSA nonce mode: {self.signing.ecdsa_nonce}")

        if self.export.key_format.strip().lower() not in CONTAINER_FORMATS:
            raise ValueError(f"Invalid key format: {self.export.key_format}")

        if self.export.pbkdf2_iterations < 1000:
            raise ValueError(f"PBKDF2 iteration count too low: {self.export.pbkdf2_iterations}")

        if normalize_hash_name(self.export.pbkdf2_hash) not in ("sha1", "sha224", "sha256", "sha384", "sha512"):
            raise ValueError(f"Invalid PBKDF2 hash: {self.export.pbkdf2_hash}")

        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")


# Process-wide configuration
_config = Config()
_config_lock = threading.Lock()


def get_config() -> Config:
    """Return the active process-wide configuration."""
    return _config


def set_config(config: Config) -> None:
    """
    Replace the process-wide configuration.

    The default engine context is reset so that engine switches take
    effect on the next sign or verify call.
    """
    global _config
    config.validate()
    with _config_lock:
        _config = config

    from .engine import reset_default_engine_context
    reset_default_engine_context()
    configure_logging(config)


def configure_logging(config: Config) -> None:
    """Apply the configured level to the sparksig logger hierarchy."""
    logging.getLogger("sparksig").setLevel(getattr(logging, config.log_level, logging.INFO))
