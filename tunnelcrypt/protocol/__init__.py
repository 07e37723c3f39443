"""
Protocol layer components for tunnelcrypt.

This module provides:
- Datagram framing (type, sequence number, original length)
- Crypto sessions binding a cipher to derived key material
"""

from .packet import DatagramHeader, DatagramMessage, MessageType, PacketFormatError
from .session import CryptoSession, SessionError, create_session

__all__ = [
    'DatagramHeader',
    'DatagramMessage',
    'MessageType',
    'PacketFormatError',
    'CryptoSession',
    'SessionError',
    'create_session',
]
