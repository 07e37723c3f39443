"""
Datagram transform engine for tunnelcrypt.

Encrypts and decrypts whole datagrams:
1. Build the IV from the fixed CRYPTO_IVEC_INITDATA constant
2. Zero-pad the buffer to the cipher's block length
3. Run the cipher in CBC mode with library padding disabled
   (RC4 runs as a plain keystream over the padded buffer)

The IV is the same for every datagram and no authentication tag is added.
Decryption returns the padded plaintext; stripping the padding is left to
the caller, which must carry the original length itself.
"""

import logging
from typing import Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.decrepit.ciphers.algorithms import ARC4, TripleDES
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .desx import desx_cbc_decrypt, desx_cbc_encrypt
from .registry import CipherDescriptor, CipherKind, InvariantViolation

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


CRYPTO_IVEC_INITDATA = bytes([
    0xab, 0xcd, 0xef, 0x12, 0x34, 0x56, 0x78, 0x90,
    0xab, 0xcd, 0xef, 0x12, 0x34, 0x56, 0x78, 0x90,
    0xab, 0xcd, 0xef, 0x12, 0x34, 0x56, 0x78, 0x90,
    0xab, 0xcd, 0xef, 0x12, 0x34, 0x56, 0x78, 0x90,
])


def pad_to_block(data: BytesLike, block_size: int) -> bytes:
    """
    Zero-pad data up to the next multiple of block_size.

    Args:
        data: Buffer to pad
        block_size: Padding unit in bytes

    Returns:
        Padded copy of data; unchanged in length if already aligned
    """
    remainder = len(data) % block_size
    if remainder:
        return bytes(data) + b'\x00' * (block_size - remainder)
    return bytes(data)


def build_iv(cipher: CipherDescriptor) -> bytes:
    """Get the fixed IV for a cipher, sized to its block length."""
    return CRYPTO_IVEC_INITDATA[:cipher.block_length]


def _make_cipher(key: bytes, cipher: CipherDescriptor, iv: bytes) -> Cipher:
    """Build a fresh cipher context for the block and stream ciphers."""
    if cipher.kind in (CipherKind.AES_128, CipherKind.AES_256):
        return Cipher(algorithms.AES(key), modes.CBC(iv))
    if cipher.kind == CipherKind.DES:
        # Three copies of the key (K1 = K2 = K3) make TripleDES single DES
        return Cipher(TripleDES(key * 3), modes.CBC(iv))
    if cipher.kind == CipherKind.RC4:
        return Cipher(ARC4(key), mode=None)
    raise ValueError(f"No cipher context for {cipher.name}")


def _check_key(key: bytes, cipher: CipherDescriptor) -> None:
    if len(key) != cipher.key_length:
        raise ValueError(f"{cipher.name} requires a {cipher.key_length}-byte key, got {len(key)}")


def _run(key: BytesLike, cipher: CipherDescriptor, data: BytesLike, encrypt: bool) -> bytes:
    key = bytes(key)
    iv = build_iv(cipher)
    padded = pad_to_block(data, cipher.block_length)

    try:
        _check_key(key, cipher)
        if cipher.kind == CipherKind.DESX:
            if encrypt:
                return desx_cbc_encrypt(key, iv, padded)
            return desx_cbc_decrypt(key, iv, padded)

        context = _make_cipher(key, cipher, iv)
        ctx = context.encryptor() if encrypt else context.decryptor()
        output = ctx.update(padded) + ctx.finalize()
    except (ValueError, UnsupportedAlgorithm) as e:
        logger.critical(f"Cipher initialisation failed for {cipher.name}: {e}")
        raise InvariantViolation(f"Cannot run {cipher.name}: {e}") from e

    if len(output) != len(padded):
        logger.critical(f"{cipher.name} produced {len(output)} bytes for {len(padded)} input bytes")
        raise InvariantViolation(f"{cipher.name} output length mismatch")

    return output


def datagram_encrypt(key: BytesLike, cipher: CipherDescriptor, data: BytesLike) -> bytes:
    """
    Encrypt one datagram.

    Args:
        key: Key material of cipher.key_length bytes
        cipher: Resolved cipher descriptor
        data: Plaintext of any length

    Returns:
        Ciphertext; its length is len(data) rounded up to the block length

    Raises:
        InvariantViolation: If the cipher context cannot be initialised
    """
    return _run(key, cipher, data, encrypt=True)


def datagram_decrypt(key: BytesLike, cipher: CipherDescriptor, data: BytesLike) -> bytes:
    """
    Decrypt one datagram.

    The input is zero-padded to the block length first, as on encryption.
    Trailing zero padding is kept in the result.

    Args:
        key: Key material of cipher.key_length bytes
        cipher: Resolved cipher descriptor
        data: Ciphertext, normally block-aligned

    Returns:
        Padded plaintext

    Raises:
        InvariantViolation: If the cipher context cannot be initialised
    """
    return _run(key, cipher, data, encrypt=False)
