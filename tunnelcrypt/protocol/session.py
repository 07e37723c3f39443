"""
Crypto session for tunnelcrypt.

A session binds one resolved cipher to one derived key and turns
application payloads into encrypted datagrams and back:

    encrypt_datagram: frame (type, seq, length) -> zero-pad -> encrypt
    decrypt_datagram: decrypt -> parse header -> strip padding by length
"""

import logging

from ..crypto.kdf import KeyMaterial
from ..crypto.registry import require_cipher
from ..crypto.transform import datagram_decrypt, datagram_encrypt
from .packet import MAX_SEQ, DatagramMessage, MessageType, build_message, parse_message

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Raised when a closed session is used."""
    pass


class CryptoSession:
    """
    Owns the key material for one tunnel connection.

    Not thread-safe: the sequence counter is advanced without locking.
    """

    def __init__(self, cipher_name: str, passphrase: str):
        """
        Initialize session.

        Args:
            cipher_name: Registered cipher name, e.g. "aes-128"
            passphrase: Shared passphrase

        Raises:
            UnknownCipherError: If the cipher name is not registered
        """
        self.cipher = require_cipher(cipher_name)
        self.key = KeyMaterial.from_passphrase(passphrase, self.cipher)
        self.seq = 0
        self.closed = False
        logger.info(f"Session ready: cipher={self.cipher.name}, "
                    f"key={self.cipher.key_length}B, block={self.cipher.block_length}B")

    def _check_open(self):
        if self.closed:
            raise SessionError("Session is closed")

    def _next_seq(self) -> int:
        seq = self.seq
        self.seq = (self.seq + 1) & MAX_SEQ
        return seq

    def encrypt_datagram(self, payload: bytes,
                         msg_type: MessageType = MessageType.DATA) -> bytes:
        """
        Frame and encrypt a payload.

        Args:
            payload: Application data
            msg_type: Message kind

        Returns:
            Ciphertext ready to send

        Raises:
            SessionError: If the session is closed
            PacketFormatError: If the payload is too large
        """
        self._check_open()
        msg_type = MessageType(msg_type)
        message = build_message(payload, self._next_seq(), msg_type)
        ciphertext = datagram_encrypt(self.key.data, self.cipher, message.to_bytes())
        logger.debug(f"Encrypted {msg_type.name} seq={message.header.seq}: "
                     f"{len(payload)}B payload -> {len(ciphertext)}B")
        return ciphertext

    def decrypt_datagram(self, data: bytes) -> DatagramMessage:
        """
        Decrypt a datagram and strip its padding.

        A wrong key or tampered ciphertext is not detected cryptographically;
        it only surfaces when the decrypted header is malformed.

        Args:
            data: Received ciphertext

        Returns:
            Parsed DatagramMessage with the original payload

        Raises:
            SessionError: If the session is closed
            PacketFormatError: If the decrypted body is malformed
        """
        self._check_open()
        body = datagram_decrypt(self.key.data, self.cipher, data)
        message = parse_message(body)
        logger.debug(f"Decrypted {message.header.msg_type.name} seq={message.header.seq}: "
                     f"{len(data)}B -> {message.header.length}B payload")
        return message

    def build_echo(self) -> bytes:
        """Encrypt an empty keepalive message."""
        return self.encrypt_datagram(b"", MessageType.ECHO)

    def get_info(self) -> dict:
        """Get information about this session."""
        return {
            'cipher': self.cipher.name,
            'key_length': self.cipher.key_length,
            'block_length': self.cipher.block_length,
            'next_seq': self.seq,
            'closed': self.closed,
        }

    def close(self) -> None:
        """Clear the key material and refuse further use."""
        if not self.closed:
            self.key.clear()
            self.closed = True
            logger.info(f"Session closed: cipher={self.cipher.name}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_session(cipher_name: str, passphrase: str) -> CryptoSession:
    """
    Create a crypto session.

    Args:
        cipher_name: Registered cipher name
        passphrase: Shared passphrase

    Returns:
        CryptoSession ready to encrypt and decrypt datagrams
    """
    return CryptoSession(cipher_name, passphrase)
