"""
Byte helpers for secure memory handling and hex formatting.
"""

from typing import Union


def secure_zero(data: Union[bytes, bytearray, memoryview]) -> None:
    """
    Overwrite sensitive data with zeros.

    Args:
        data: Bytes, bytearray, or memoryview to zero out
    """
    if isinstance(data, (bytearray, memoryview)):
        for i in range(len(data)):
            data[i] = 0
    elif isinstance(data, bytes):
        # Immutable, nothing can be overwritten in place
        pass
    else:
        raise TypeError("Data must be bytes, bytearray, or memoryview")


class SecureBytes:
    """
    A wrapper for sensitive byte data that attempts secure cleanup.

    The wrapped buffer is zeroed on clear(), on context-manager exit and
    when the object is garbage collected.
    """

    def __init__(self, data: bytes):
        self._data = bytearray(data)

    @property
    def data(self) -> bytes:
        """Get the protected data as bytes."""
        return bytes(self._data)

    def clear(self) -> None:
        """Securely clear the protected data."""
        secure_zero(self._data)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.clear()

    def __del__(self):
        if hasattr(self, '_data'):
            self.clear()

    def __len__(self) -> int:
        return len(self._data)


def format_hex(data: bytes, separator: str = " ") -> str:
    """
    Format bytes as hexadecimal string.

    Args:
        data: Bytes to format
        separator: Separator between hex bytes

    Returns:
        Formatted hex string
    """
    return separator.join(f"{b:02x}" for b in data)
