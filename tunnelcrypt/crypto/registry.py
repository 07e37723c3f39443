"""
Cipher registry for tunnelcrypt.

Maps a human-readable cipher name to an immutable descriptor of the block
cipher behind it. The set of ciphers is closed: every supported algorithm is
a member of ``CipherKind`` and has exactly one entry in the static table.

Supported ciphers (sizes follow the OpenSSL EVP definitions):
- aes-128: AES-128-CBC
- aes-256: AES-256-CBC
- des:     DES-CBC
- desx:    DESX-CBC
- rc4:     RC4 stream cipher (padded to 16-byte blocks)
"""

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)


# Static upper bounds every key and IV buffer is sized against
MAX_KEY_SIZE = 32
MAX_BLOCK_SIZE = 32

# Padding unit for ciphers without a native block size
STREAM_BLOCK_SIZE = 16


class ConfigurationError(Exception):
    """Raised when the caller asks for something the setup cannot provide."""
    pass


class UnknownCipherError(ConfigurationError):
    """Raised when a cipher name is not in the registry."""
    pass


class InvariantViolation(RuntimeError):
    """Raised when a cipher descriptor or cipher context is unusable."""
    pass


class CipherKind(enum.Enum):
    """Closed set of supported cipher algorithms."""
    AES_128 = "aes-128"
    AES_256 = "aes-256"
    DES = "des"
    DESX = "desx"
    RC4 = "rc4"


@dataclass(frozen=True)
class CipherDescriptor:
    """
    Immutable description of a supported cipher.

    Fields:
        kind: Algorithm identifier
        key_length: Required key size in bytes
        iv_length: Native IV size in bytes (0 for stream ciphers)
    """
    kind: CipherKind
    key_length: int
    iv_length: int

    @property
    def name(self) -> str:
        """Canonical lowercase cipher name."""
        return self.kind.value

    @property
    def block_length(self) -> int:
        """Block size used for IV construction and zero-padding."""
        return self.iv_length or STREAM_BLOCK_SIZE

    @property
    def is_stream(self) -> bool:
        """True for ciphers without a native block size."""
        return self.iv_length == 0


_CIPHER_TABLE = (
    CipherDescriptor(CipherKind.AES_128, key_length=16, iv_length=16),
    CipherDescriptor(CipherKind.AES_256, key_length=32, iv_length=16),
    CipherDescriptor(CipherKind.DES, key_length=8, iv_length=8),
    CipherDescriptor(CipherKind.DESX, key_length=24, iv_length=8),
    CipherDescriptor(CipherKind.RC4, key_length=16, iv_length=0),
)


def check_descriptor_bounds(descriptor: CipherDescriptor) -> None:
    """
    Verify a descriptor fits the static key and block buffers.

    Raises:
        InvariantViolation: If the key or IV length exceeds its bound
    """
    if descriptor.key_length > MAX_KEY_SIZE:
        logger.critical(f"Cipher {descriptor.name} key length {descriptor.key_length} "
                        f"exceeds MAX_KEY_SIZE ({MAX_KEY_SIZE})")
        raise InvariantViolation(f"Key length of {descriptor.name} exceeds {MAX_KEY_SIZE} bytes")
    if descriptor.iv_length > MAX_BLOCK_SIZE:
        logger.critical(f"Cipher {descriptor.name} IV length {descriptor.iv_length} "
                        f"exceeds MAX_BLOCK_SIZE ({MAX_BLOCK_SIZE})")
        raise InvariantViolation(f"IV length of {descriptor.name} exceeds {MAX_BLOCK_SIZE} bytes")


def resolve(name: str) -> Optional[CipherDescriptor]:
    """
    Look up a cipher by name.

    Args:
        name: Cipher identifier, matched case-insensitively

    Returns:
        The matching CipherDescriptor, or None if the name is unknown
    """
    wanted = name.lower()
    for descriptor in _CIPHER_TABLE:
        if descriptor.name == wanted:
            check_descriptor_bounds(descriptor)
            return descriptor
    return None


def require_cipher(name: str) -> CipherDescriptor:
    """
    Look up a cipher by name, failing loudly if it is unknown.

    Raises:
        UnknownCipherError: If the name is not registered
    """
    descriptor = resolve(name)
    if descriptor is None:
        message = (f"Unknown cipher '{name}', supported ciphers: "
                   f"{', '.join(supported_ciphers())}")
        logger.error(message)
        raise UnknownCipherError(message)
    return descriptor


def supported_ciphers() -> List[str]:
    """Names of all registered ciphers, in table order."""
    return [descriptor.name for descriptor in _CIPHER_TABLE]
