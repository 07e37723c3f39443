"""
tunnelcrypt: symmetric datagram encryption for lightweight tunnels.

Encrypts whole datagrams under a key derived from a shared passphrase, using
one of a fixed set of ciphers (aes-128, aes-256, des, desx, rc4) in CBC mode
with a fixed IV and zero-padding.

There is no authentication tag: tampered ciphertext decrypts to garbage
without raising. The IV is constant, so equal plaintext prefixes give equal
ciphertext prefixes under the same key.

Basic Usage:
    >>> from tunnelcrypt import create_session
    >>>
    >>> alice = create_session("aes-128", "shared secret")
    >>> bob = create_session("aes-128", "shared secret")
    >>>
    >>> wire = alice.encrypt_datagram(b"Hello, Bob!")
    >>> bob.decrypt_datagram(wire).payload
    b'Hello, Bob!'

Low-level Usage:
    >>> from tunnelcrypt import resolve, derive_key, datagram_encrypt, datagram_decrypt
    >>>
    >>> cipher = resolve("aes-256")
    >>> key = derive_key("shared secret", cipher.key_length)
    >>> ciphertext = datagram_encrypt(key, cipher, b"abc")
    >>> datagram_decrypt(key, cipher, ciphertext)[:3]
    b'abc'
"""

__version__ = "1.0.0"

# Cryptographic core
from .crypto.registry import (
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
from .crypto.kdf import KeyMaterial, derive_key
from .crypto.transform import CRYPTO_IVEC_INITDATA, datagram_decrypt, datagram_encrypt, pad_to_block

# Framing and sessions
from .protocol.packet import DatagramHeader, DatagramMessage, MessageType, PacketFormatError
from .protocol.session import CryptoSession, SessionError, create_session

# Configuration
from .config import ConfigError, TunnelConfig

# Evaluation tools
from .evaluation.benchmark import CipherBenchmark, run_comprehensive_benchmark


def quick_benchmark(cipher_name: str = "aes-128") -> dict:
    """
    Run a quick performance benchmark for one cipher.

    Args:
        cipher_name: Registered cipher name

    Returns:
        Benchmark summary
    """
    benchmark = CipherBenchmark()
    benchmark.benchmark_cipher(cipher_name, [64, 512, 1024], iterations=100)
    return benchmark.get_summary_report()


__all__ = [
    '__version__',

    # Cipher registry
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

    # Key derivation
    'KeyMaterial',
    'derive_key',

    # Transform engine
    'CRYPTO_IVEC_INITDATA',
    'datagram_encrypt',
    'datagram_decrypt',
    'pad_to_block',

    # Sessions
    'DatagramHeader',
    'DatagramMessage',
    'MessageType',
    'PacketFormatError',
    'CryptoSession',
    'SessionError',
    'create_session',

    # Configuration
    'ConfigError',
    'TunnelConfig',

    # Evaluation
    'CipherBenchmark',
    'run_comprehensive_benchmark',
    'quick_benchmark',
]
