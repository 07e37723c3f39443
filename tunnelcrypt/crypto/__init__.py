"""
Cryptographic primitives for tunnelcrypt.

This module provides:
- Cipher registry (name to descriptor lookup)
- Passphrase key derivation (MD5 with tiling)
- Datagram encryption and decryption with a fixed IV
"""

from .registry import (
    CipherDescriptor,
    CipherKind,
    ConfigurationError,
    InvariantViolation,
    UnknownCipherError,
    MAX_BLOCK_SIZE,
    MAX_KEY_SIZE,
    require_cipher,
    resolve,
    supported_ciphers,
)
from .kdf import KeyMaterial, derive_key
from .transform import CRYPTO_IVEC_INITDATA, datagram_decrypt, datagram_encrypt, pad_to_block

__all__ = [
    'CipherDescriptor',
    'CipherKind',
    'ConfigurationError',
    'InvariantViolation',
    'UnknownCipherError',
    'MAX_BLOCK_SIZE',
    'MAX_KEY_SIZE',
    'require_cipher',
    'resolve',
    'supported_ciphers',
    'KeyMaterial',
    'derive_key',
    'CRYPTO_IVEC_INITDATA',
    'datagram_encrypt',
    'datagram_decrypt',
    'pad_to_block',
]
