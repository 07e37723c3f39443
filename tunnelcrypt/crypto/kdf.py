"""
Key material derivation for tunnelcrypt.

Expands a shared passphrase into a key of the length the selected cipher
requires:
- The passphrase is hashed with MD5 into a 16-byte seed
- Keys up to 16 bytes are a prefix of the seed
- Longer keys repeat the seed, truncating the final copy

Both ends of a tunnel derive the same key from the same passphrase, so no
key material is ever exchanged.
"""

import hashlib

from .registry import CipherDescriptor
from .utils import SecureBytes


SEED_LENGTH = 16  # MD5 digest size


def derive_key(passphrase: str, key_length: int) -> bytes:
    """
    Derive a key from a passphrase.

    Args:
        passphrase: Shared passphrase (may be empty)
        key_length: Number of key bytes the cipher needs

    Returns:
        key_length bytes of key material

    Raises:
        ValueError: If key_length is not positive
    """
    if key_length <= 0:
        raise ValueError(f"Key length must be positive, got {key_length}")

    seed = hashlib.md5(passphrase.encode('utf-8')).digest()

    repeats = -(-key_length // SEED_LENGTH)
    return (seed * repeats)[:key_length]


class KeyMaterial(SecureBytes):
    """
    Derived key bytes owned by a single session.

    Cleared when the owning session closes.
    """

    @classmethod
    def from_passphrase(cls, passphrase: str, cipher: CipherDescriptor) -> 'KeyMaterial':
        """
        Derive key material sized for a cipher.

        Args:
            passphrase: Shared passphrase
            cipher: Resolved cipher descriptor

        Returns:
            KeyMaterial of cipher.key_length bytes
        """
        return cls(derive_key(passphrase, cipher.key_length))
