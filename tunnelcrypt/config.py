"""
Configuration management for tunnelcrypt.

Both ends of a tunnel need the same cipher name and passphrase. They are
looked up in this order:

    cipher:     explicit argument, $TUNNELCRYPT_CIPHER, <config_dir>/cipher, "aes-128"
    passphrase: $TUNNELCRYPT_PASSPHRASE, <config_dir>/passphrase

An unknown cipher name is reported once, at setup time.
"""

import logging
import os
from typing import Optional

from .crypto.registry import CipherDescriptor, ConfigurationError, resolve, supported_ciphers
from .protocol.session import CryptoSession

logger = logging.getLogger(__name__)


DEFAULT_CIPHER = "aes-128"
ENV_CIPHER = "TUNNELCRYPT_CIPHER"
ENV_PASSPHRASE = "TUNNELCRYPT_PASSPHRASE"
CIPHER_FILE = "cipher"
PASSPHRASE_FILE = "passphrase"


class ConfigError(ConfigurationError):
    """Raised when configuration operations fail."""
    pass


def _read_setting(path: str) -> str:
    with open(path, 'r', encoding='utf-8') as f:
        value = f.read()
    if value.endswith('\n'):
        value = value[:-1]
    return value


class TunnelConfig:
    """
    Configuration manager for one tunnel endpoint.
    """

    def __init__(self, config_dir: Optional[str] = None, cipher_name: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_dir: Directory for configuration files. Defaults to ~/.tunnelcrypt/
            cipher_name: Cipher to use, overriding environment and file settings
        """
        if config_dir is None:
            config_dir = os.path.expanduser("~/.tunnelcrypt")

        self.config_dir = config_dir
        self.cipher_name = cipher_name
        self.cipher_file_path = os.path.join(config_dir, CIPHER_FILE)
        self.passphrase_file_path = os.path.join(config_dir, PASSPHRASE_FILE)

        os.makedirs(config_dir, exist_ok=True)

    def get_cipher_name(self) -> str:
        """Get the configured cipher name, without validating it."""
        if self.cipher_name:
            return self.cipher_name

        env_value = os.environ.get(ENV_CIPHER)
        if env_value:
            return env_value

        if os.path.exists(self.cipher_file_path):
            try:
                value = _read_setting(self.cipher_file_path).strip()
            except OSError as e:
                raise ConfigError(f"Failed to read cipher setting: {e}") from e
            if value:
                return value

        return DEFAULT_CIPHER

    def get_cipher(self) -> CipherDescriptor:
        """
        Resolve the configured cipher.

        Returns:
            CipherDescriptor for the configured cipher

        Raises:
            ConfigError: If the cipher name is not supported
        """
        name = self.get_cipher_name()
        descriptor = resolve(name)
        if descriptor is None:
            message = (f"Unsupported cipher '{name}' in configuration, expected one of: "
                       f"{', '.join(supported_ciphers())}")
            logger.error(message)
            raise ConfigError(message)
        return descriptor

    def get_passphrase(self) -> str:
        """
        Load the shared passphrase.

        Returns:
            The passphrase; may be empty if configured that way

        Raises:
            ConfigError: If no passphrase is configured or it cannot be read
        """
        env_value = os.environ.get(ENV_PASSPHRASE)
        if env_value is not None:
            return env_value

        if not os.path.exists(self.passphrase_file_path):
            raise ConfigError(f"Passphrase file not found: {self.passphrase_file_path}")

        try:
            return _read_setting(self.passphrase_file_path)
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Failed to read passphrase: {e}") from e

    def set_passphrase(self, passphrase: str) -> None:
        """
        Store the passphrase with owner-only permissions.

        Raises:
            ConfigError: If the file cannot be written
        """
        try:
            with open(self.passphrase_file_path, 'w', encoding='utf-8') as f:
                f.write(passphrase + '\n')
        except OSError as e:
            raise ConfigError(f"Failed to save passphrase: {e}") from e

        try:
            os.chmod(self.passphrase_file_path, 0o600)
        except OSError:
            logger.warning(f"Could not set restrictive permissions on {self.passphrase_file_path}")

        logger.info(f"Passphrase saved to: {self.passphrase_file_path}")

    def set_cipher(self, cipher_name: str) -> None:
        """
        Store the cipher name.

        Raises:
            ConfigError: If the cipher is unsupported or the file cannot be written
        """
        if resolve(cipher_name) is None:
            raise ConfigError(f"Unsupported cipher '{cipher_name}', expected one of: "
                              f"{', '.join(supported_ciphers())}")
        try:
            with open(self.cipher_file_path, 'w', encoding='utf-8') as f:
                f.write(cipher_name.lower() + '\n')
        except OSError as e:
            raise ConfigError(f"Failed to save cipher setting: {e}") from e

        logger.info(f"Cipher set to {cipher_name.lower()} in {self.cipher_file_path}")

    def passphrase_exists(self) -> bool:
        """Check if a passphrase is available from the environment or a file."""
        return ENV_PASSPHRASE in os.environ or os.path.exists(self.passphrase_file_path)

    def create_session(self) -> CryptoSession:
        """
        Build a crypto session from this configuration.

        Raises:
            ConfigError: If the cipher or passphrase is not usable
        """
        cipher = self.get_cipher()
        return CryptoSession(cipher.name, self.get_passphrase())
