"""
Datagram framing for tunnelcrypt.

The transform engine pads every datagram to the cipher block length and
does not record how long the plaintext was. This module carries that length
inside the encrypted body so the receiver can strip the padding:

header  = msg_type (1B) || reserved (1B) || seq (2B) || length (2B)
body    = header || payload
wire    = encrypt(body)            (zero-padded to the block length)

All integers are big-endian.
"""

import enum
import struct
from dataclasses import dataclass

from ..crypto.registry import MAX_BLOCK_SIZE
from ..crypto.utils import format_hex


HEADER_FORMAT = '!BBHH'
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)  # 6 bytes
MAX_PAYLOAD_SIZE = 0xFFFF - HEADER_SIZE - MAX_BLOCK_SIZE
MAX_SEQ = 0xFFFF


class PacketFormatError(Exception):
    """Raised when a framed datagram is malformed."""
    pass


class MessageType(enum.IntEnum):
    """Kinds of framed datagram."""
    DATA = 0x00
    ECHO = 0x01


@dataclass
class DatagramHeader:
    """
    Framing header placed in front of every payload.

    Fields:
        msg_type: Message kind
        seq: 16-bit sequence number
        length: Payload length in bytes, before padding
    """
    msg_type: MessageType
    seq: int
    length: int

    def __post_init__(self):
        """Validate header fields."""
        if not (0 <= self.seq <= MAX_SEQ):
            raise ValueError("Sequence number must be a 16-bit unsigned integer")
        if not (0 <= self.length <= MAX_PAYLOAD_SIZE):
            raise ValueError(f"Payload length must be 0-{MAX_PAYLOAD_SIZE}")

    def to_bytes(self) -> bytes:
        """Serialize header to bytes."""
        return struct.pack(HEADER_FORMAT, int(self.msg_type), 0, self.seq, self.length)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'DatagramHeader':
        """Deserialize header from bytes."""
        if len(data) != HEADER_SIZE:
            raise PacketFormatError(f"Header must be {HEADER_SIZE} bytes, got {len(data)}")

        msg_type, _reserved, seq, length = struct.unpack(HEADER_FORMAT, data)
        try:
            kind = MessageType(msg_type)
        except ValueError as e:
            raise PacketFormatError(f"Unknown message type 0x{msg_type:02x}") from e

        try:
            return cls(msg_type=kind, seq=seq, length=length)
        except ValueError as e:
            raise PacketFormatError(str(e)) from e


@dataclass
class DatagramMessage:
    """
    A framed datagram before encryption or after decryption.

    Fields:
        header: Framing header
        payload: Unpadded payload bytes
    """
    header: DatagramHeader
    payload: bytes

    @property
    def size(self) -> int:
        """Get the unpadded body size in bytes."""
        return HEADER_SIZE + len(self.payload)

    def to_bytes(self) -> bytes:
        """Serialize header and payload (no padding)."""
        return self.header.to_bytes() + self.payload

    @classmethod
    def from_bytes(cls, data: bytes) -> 'DatagramMessage':
        """
        Deserialize a decrypted body, dropping trailing padding.

        Raises:
            PacketFormatError: If the body is shorter than the header says
        """
        if len(data) < HEADER_SIZE:
            raise PacketFormatError(f"Datagram too short: {len(data)} bytes")

        header = DatagramHeader.from_bytes(data[:HEADER_SIZE])
        body = data[HEADER_SIZE:]
        if header.length > len(body):
            raise PacketFormatError(
                f"Declared length {header.length} exceeds body of {len(body)} bytes"
            )

        return cls(header=header, payload=bytes(body[:header.length]))

    def __len__(self) -> int:
        return self.size


def build_message(payload: bytes, seq: int,
                  msg_type: MessageType = MessageType.DATA) -> DatagramMessage:
    """
    Frame a payload.

    Args:
        payload: Application data
        seq: Sequence number (0-65535)
        msg_type: Message kind

    Returns:
        DatagramMessage ready to be encrypted

    Raises:
        PacketFormatError: If the payload is too large
    """
    if len(payload) > MAX_PAYLOAD_SIZE:
        raise PacketFormatError(f"Payload too large: {len(payload)} bytes")

    header = DatagramHeader(msg_type=msg_type, seq=seq, length=len(payload))
    return DatagramMessage(header=header, payload=bytes(payload))


def parse_message(body: bytes) -> DatagramMessage:
    """
    Parse a decrypted, possibly padded body.

    Raises:
        PacketFormatError: If the body is malformed
    """
    return DatagramMessage.from_bytes(body)


def message_summary(message: DatagramMessage) -> str:
    """
    Create a human-readable summary of a framed datagram.

    Args:
        message: Message to summarize

    Returns:
        Summary string
    """
    header = message.header
    preview = format_hex(message.payload[:16])
    if len(message.payload) > 16:
        preview += " ..."
    return (
        f"Datagram:\n"
        f"  Type: {header.msg_type.name}\n"
        f"  Seq: {header.seq}\n"
        f"  Payload size: {header.length} bytes\n"
        f"  Payload: {preview}"
    )
