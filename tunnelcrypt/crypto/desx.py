"""
DESX in CBC mode.

``cryptography`` does not ship DESX, so it is assembled here from single-DES
ECB blocks with the key layout OpenSSL uses for ``desx-cbc``:

    key[0:8]   DES key
    key[8:16]  input whitening
    key[16:24] output whitening

Each block is computed as ``C = DES(P ^ prev ^ in_w) ^ out_w`` and the CBC
chain runs on the whitened ciphertext ``C``.
"""

from cryptography.hazmat.decrepit.ciphers.algorithms import TripleDES
from cryptography.hazmat.primitives.ciphers import Cipher, modes


DESX_KEY_SIZE = 24
DESX_BLOCK_SIZE = 8


def _split_key(key: bytes):
    if len(key) != DESX_KEY_SIZE:
        raise ValueError(f"DESX requires a {DESX_KEY_SIZE}-byte key, got {len(key)}")
    # Three copies of the DES key (K1 = K2 = K3) make TripleDES single DES
    des = Cipher(TripleDES(key[:8] * 3), modes.ECB())
    in_w = int.from_bytes(key[8:16], 'big')
    out_w = int.from_bytes(key[16:24], 'big')
    return des, in_w, out_w


def _check_input(iv: bytes, data: bytes) -> None:
    if len(iv) != DESX_BLOCK_SIZE:
        raise ValueError(f"DESX requires an {DESX_BLOCK_SIZE}-byte IV, got {len(iv)}")
    if len(data) % DESX_BLOCK_SIZE:
        raise ValueError("DESX input must be a multiple of the block size")


def desx_cbc_encrypt(key: bytes, iv: bytes, data: bytes) -> bytes:
    """
    Encrypt block-aligned data with DESX-CBC.

    Args:
        key: 24-byte DESX key
        iv: 8-byte IV
        data: Plaintext, a multiple of 8 bytes long

    Returns:
        Ciphertext of the same length

    Raises:
        ValueError: If key, IV or data sizes are wrong
    """
    des, in_w, out_w = _split_key(key)
    _check_input(iv, data)

    encryptor = des.encryptor()
    chain = int.from_bytes(iv, 'big')
    out = bytearray()

    for offset in range(0, len(data), DESX_BLOCK_SIZE):
        block = int.from_bytes(data[offset:offset + DESX_BLOCK_SIZE], 'big')
        whitened = (block ^ chain ^ in_w).to_bytes(DESX_BLOCK_SIZE, 'big')
        chain = int.from_bytes(encryptor.update(whitened), 'big') ^ out_w
        out += chain.to_bytes(DESX_BLOCK_SIZE, 'big')

    encryptor.finalize()
    return bytes(out)


def desx_cbc_decrypt(key: bytes, iv: bytes, data: bytes) -> bytes:
    """
    Decrypt block-aligned data with DESX-CBC.

    Args:
        key: 24-byte DESX key
        iv: 8-byte IV
        data: Ciphertext, a multiple of 8 bytes long

    Returns:
        Plaintext of the same length

    Raises:
        ValueError: If key, IV or data sizes are wrong
    """
    des, in_w, out_w = _split_key(key)
    _check_input(iv, data)

    decryptor = des.decryptor()
    chain = int.from_bytes(iv, 'big')
    out = bytearray()

    for offset in range(0, len(data), DESX_BLOCK_SIZE):
        block = int.from_bytes(data[offset:offset + DESX_BLOCK_SIZE], 'big')
        unwhitened = (block ^ out_w).to_bytes(DESX_BLOCK_SIZE, 'big')
        plain = int.from_bytes(decryptor.update(unwhitened), 'big') ^ chain ^ in_w
        out += plain.to_bytes(DESX_BLOCK_SIZE, 'big')
        chain = block

    decryptor.finalize()
    return bytes(out)
