"""
Tests for the datagram transform engine.

Known-answer vectors were produced with ``openssl enc -nopad`` using the
key derived from "secret" and the fixed IV.
"""

import threading
import warnings

import pytest
from cryptography.utils import CryptographyDeprecationWarning

from tunnelcrypt.crypto.desx import desx_cbc_decrypt, desx_cbc_encrypt
from tunnelcrypt.crypto.kdf import derive_key
from tunnelcrypt.crypto.registry import InvariantViolation, resolve, supported_ciphers
from tunnelcrypt.crypto.transform import (
    CRYPTO_IVEC_INITDATA,
    build_iv,
    datagram_decrypt,
    datagram_encrypt,
    pad_to_block,
)

NO_DEPRECATED_CRYPTO = pytest.mark.filterwarnings(
    "error::cryptography.utils.CryptographyDeprecationWarning"
)


def _key(name: str, passphrase: str = "secret") -> bytes:
    return derive_key(passphrase, resolve(name).key_length)


class TestConstants:
    """Test the fixed IV."""

    def test_ivec_initdata(self):
        """Test the IV seed is the 8-byte pattern repeated four times."""
        assert CRYPTO_IVEC_INITDATA == bytes.fromhex("abcdef1234567890") * 4
        assert len(CRYPTO_IVEC_INITDATA) == 32

    def test_iv_sized_to_block(self):
        """Test the IV is cut to each cipher's block length."""
        assert build_iv(resolve("aes-128")) == CRYPTO_IVEC_INITDATA[:16]
        assert build_iv(resolve("des")) == CRYPTO_IVEC_INITDATA[:8]
        assert build_iv(resolve("rc4")) == CRYPTO_IVEC_INITDATA[:16]


class TestPadding:
    """Test zero-padding to the block boundary."""

    def test_aligned_unchanged(self):
        """Test aligned input gets no padding."""
        data = b"A" * 32
        assert pad_to_block(data, 16) == data

    def test_one_short(self):
        """Test input one byte short of a block gets one zero byte."""
        padded = pad_to_block(b"A" * 15, 16)
        assert padded == b"A" * 15 + b"\x00"

    def test_one_over(self):
        """Test input one byte over a block gets block - 1 zero bytes."""
        padded = pad_to_block(b"A" * 17, 16)
        assert len(padded) == 32
        assert padded[17:] == b"\x00" * 15

    def test_empty(self):
        """Test empty input stays empty."""
        assert pad_to_block(b"", 8) == b""

    def test_accepts_bytearray(self):
        """Test mutable buffers are padded into a bytes copy."""
        assert pad_to_block(bytearray(b"abc"), 8) == b"abc" + b"\x00" * 5


@NO_DEPRECATED_CRYPTO
class TestKnownAnswers:
    """Test against OpenSSL output."""

    @pytest.mark.parametrize("name,plaintext,expected", [
        ("aes-128", b"hello", "3d992db455c1f1ad02c867653bce51bb"),
        ("aes-256", b"hello", "16cce653074e97e101e5d6e99a270e88"),
        ("des", b"hello", "1360c5ddc918d202"),
        ("des", b"datagram payload", "5421670ff9ad8c0dcb873beb3cbd6ab6"),
        ("desx", b"hello", "d52a12843069a4f0"),
        ("desx", b"datagram payload", "d8ca2b8b1d5bc5311e0205a118c91610"),
        ("rc4", b"hello", "fe7994b3d47faf867d15bff9147f077d"),
    ])
    def test_vector(self, name, plaintext, expected):
        """Test ciphertext matches openssl enc and decrypts back."""
        cipher = resolve(name)
        key = _key(name)
        ciphertext = datagram_encrypt(key, cipher, plaintext)
        assert ciphertext.hex() == expected
        assert datagram_decrypt(key, cipher, ciphertext) == pad_to_block(plaintext, cipher.block_length)

    @pytest.mark.parametrize("name", ["des", "desx"])
    def test_single_des_uses_supported_key_form(self, name):
        """Test DES-based ciphers raise no cryptography deprecation warnings."""
        cipher = resolve(name)
        key = _key(name)
        with warnings.catch_warnings():
            warnings.simplefilter("error", CryptographyDeprecationWarning)
            ciphertext = datagram_encrypt(key, cipher, b"datagram payload")
            datagram_decrypt(key, cipher, ciphertext)


@NO_DEPRECATED_CRYPTO
class TestRoundTrip:
    """Test encrypt followed by decrypt."""

    @pytest.mark.parametrize("name", supported_ciphers())
    @pytest.mark.parametrize("size", [0, 1, 7, 8, 15, 16, 17, 1400])
    def test_roundtrip_reproduces_padded_plaintext(self, name, size):
        """Test decrypt(encrypt(P)) equals P padded to the block length."""
        cipher = resolve(name)
        key = _key(name)
        plaintext = bytes((i * 7 + 3) & 0xFF for i in range(size))

        ciphertext = datagram_encrypt(key, cipher, plaintext)
        assert len(ciphertext) % cipher.block_length == 0
        assert len(ciphertext) == len(pad_to_block(plaintext, cipher.block_length))

        decrypted = datagram_decrypt(key, cipher, ciphertext)
        assert decrypted == pad_to_block(plaintext, cipher.block_length)
        assert decrypted[:size] == plaintext

    def test_padding_boundary_lengths(self):
        """Test ciphertext length around the 16-byte boundary."""
        cipher = resolve("aes-128")
        key = _key("aes-128")
        assert len(datagram_encrypt(key, cipher, b"x" * 16)) == 16
        assert len(datagram_encrypt(key, cipher, b"x" * 15)) == 16
        assert len(datagram_encrypt(key, cipher, b"x" * 17)) == 32

    def test_accepts_bytearray_and_memoryview(self):
        """Test bytes-like keys and buffers give the same ciphertext."""
        cipher = resolve("aes-128")
        key = bytearray(_key("aes-128"))
        ciphertext = datagram_encrypt(key, cipher, bytearray(b"payload"))
        assert ciphertext == datagram_encrypt(bytes(key), cipher, memoryview(b"payload"))

    def test_unaligned_ciphertext_is_padded_before_decrypt(self):
        """Test decrypt pads a truncated buffer to the block length."""
        cipher = resolve("aes-128")
        key = _key("aes-128")
        ciphertext = datagram_encrypt(key, cipher, b"x" * 32)
        assert len(datagram_decrypt(key, cipher, ciphertext[:20])) == 32


class TestDeterminism:
    """Test the fixed-IV behaviour."""

    @pytest.mark.parametrize("name", supported_ciphers())
    def test_same_input_same_output(self, name):
        """Test encryption involves no randomness."""
        cipher = resolve(name)
        key = _key(name)
        assert datagram_encrypt(key, cipher, b"repeat me") == datagram_encrypt(key, cipher, b"repeat me")

    def test_shared_prefix_leaks(self):
        """Test equal first blocks give equal first ciphertext blocks."""
        cipher = resolve("aes-128")
        key = _key("aes-128")
        a = datagram_encrypt(key, cipher, b"0123456789abcdef-first")
        b = datagram_encrypt(key, cipher, b"0123456789abcdef-second")
        assert a[:16] == b[:16]
        assert a[16:] != b[16:]

    def test_cross_cipher_isolation(self):
        """Test aes-128 and aes-256 give block-aligned, different ciphertext."""
        plaintext = b"same plaintext, different ciphers"
        aes128 = resolve("aes-128")
        aes256 = resolve("aes-256")
        c128 = datagram_encrypt(_key("aes-128"), aes128, plaintext)
        c256 = datagram_encrypt(_key("aes-256"), aes256, plaintext)
        assert len(c128) % aes128.block_length == 0
        assert len(c256) % aes256.block_length == 0
        assert c128 != c256

    def test_different_passphrase_different_output(self):
        """Test different passphrases give different ciphertext."""
        cipher = resolve("des")
        assert (datagram_encrypt(_key("des", "one"), cipher, b"payload")
                != datagram_encrypt(_key("des", "two"), cipher, b"payload"))


class TestNoIntegrity:
    """Tampering is not detected."""

    def test_tampered_ciphertext_decrypts_silently(self):
        """Test a flipped bit decrypts to different bytes without raising."""
        cipher = resolve("aes-128")
        key = _key("aes-128")
        ciphertext = bytearray(datagram_encrypt(key, cipher, b"transfer 100 coins"))
        ciphertext[0] ^= 0x01

        decrypted = datagram_decrypt(key, cipher, bytes(ciphertext))
        assert len(decrypted) == 32
        assert decrypted != pad_to_block(b"transfer 100 coins", 16)


class TestInvariants:
    """Test fail-fast behaviour on misuse."""

    @pytest.mark.parametrize("name", supported_ciphers())
    def test_wrong_key_length(self, name):
        """Test a key of the wrong size raises InvariantViolation."""
        cipher = resolve(name)
        with pytest.raises(InvariantViolation):
            datagram_encrypt(b"\x01" * (cipher.key_length - 1), cipher, b"data")
        with pytest.raises(InvariantViolation):
            datagram_decrypt(b"\x01" * (cipher.key_length + 1), cipher, b"data")


class TestConcurrency:
    """Calls share no mutable state."""

    def test_parallel_encryption(self):
        """Test threads encrypting with one key all get the same result."""
        cipher = resolve("aes-256")
        key = _key("aes-256")
        expected = datagram_encrypt(key, cipher, b"concurrent datagram")
        results = []

        def worker():
            for _ in range(50):
                results.append(datagram_encrypt(key, cipher, b"concurrent datagram"))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 200
        assert all(r == expected for r in results)


@NO_DEPRECATED_CRYPTO
class TestDESX:
    """Test the DESX-CBC building block directly."""

    def test_roundtrip(self):
        """Test DESX-CBC decrypts what it encrypts."""
        key = bytes(range(24))
        iv = CRYPTO_IVEC_INITDATA[:8]
        data = b"sixteen byte msg" * 3
        assert desx_cbc_decrypt(key, iv, desx_cbc_encrypt(key, iv, data)) == data

    def test_whitening_keys_matter(self):
        """Test changing the output whitening changes the ciphertext."""
        iv = CRYPTO_IVEC_INITDATA[:8]
        base = bytes(range(24))
        changed = base[:16] + bytes(8)
        assert desx_cbc_encrypt(base, iv, b"8 bytes!") != desx_cbc_encrypt(changed, iv, b"8 bytes!")

    def test_rejects_unaligned(self):
        """Test input that is not block-aligned is rejected."""
        with pytest.raises(ValueError):
            desx_cbc_encrypt(bytes(24), bytes(8), b"short")

    def test_rejects_bad_key(self):
        """Test a key that is not 24 bytes is rejected."""
        with pytest.raises(ValueError):
            desx_cbc_encrypt(bytes(16), bytes(8), bytes(8))
