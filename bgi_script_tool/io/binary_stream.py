"""
Little-endian binary stream used to read and write script files.
"""

import struct
from io import BytesIO
from typing import Union


class BinaryStream:
    """
    Binary stream reader/writer over an in-memory buffer.

    Reads never return short data: running past the end of the buffer
    raises EOFError, which callers translate into their own format errors.
    """

    def __init__(self, data: Union[bytes, BytesIO, None] = None):
        """
        Initialize a BinaryStream.

        Args:
            data: Raw bytes, an existing BytesIO stream, or None for an
                empty stream to write into
        """
        if data is None:
            self._stream = BytesIO()
        elif isinstance(data, (bytes, bytearray)):
            self._stream = BytesIO(data)
        else:
            self._stream = data

    # ========== Position ==========

    @property
    def position(self) -> int:
        """Get current stream position."""
        return self._stream.tell()

    @position.setter
    def position(self, value: int) -> None:
        """Set stream position."""
        self._stream.seek(value)

    # ========== Readers ==========

    def read_bytes(self, count: int) -> bytes:
        """Read exactly ``count`` raw bytes."""
        if count < 0:
            raise ValueError(f"Negative read length: {count}")
        data = self._stream.read(count)
        if len(data) != count:
            raise EOFError(
                f"Unexpected end of stream at 0x{self.position:X}: "
                f"wanted {count} bytes, got {len(data)}"
            )
        return data

    def read_to_end(self) -> bytes:
        """Read every remaining byte."""
        return self._stream.read()

    def read_int32(self) -> int:
        """Read a signed 32-bit integer."""
        return struct.unpack('<i', self.read_bytes(4))[0]

    def read_string_to_null(self, encoding: str = 'ascii') -> str:
        """
        Read a null-terminated string.

        Args:
            encoding: Text encoding of the string bytes

        Returns:
            The decoded string, without its terminator

        Raises:
            EOFError: If the stream ends before a terminator is found
        """
        # Read in chunks for better performance
        chunks = []
        while True:
            chunk = self._stream.read(256)
            if not chunk:
                raise EOFError("Unterminated string at end of stream")
            null_pos = chunk.find(b'\x00')
            if null_pos != -1:
                chunks.append(chunk[:null_pos])
                # Seek back to position after null
                self._stream.seek(self._stream.tell() - len(chunk) + null_pos + 1)
                break
            chunks.append(chunk)

        return b''.join(chunks).decode(encoding)

    # ========== Writers ==========

    def write_bytes(self, data: bytes) -> None:
        """Write raw bytes."""
        self._stream.write(data)

    def write_byte(self, value: int) -> None:
        """Write an unsigned byte."""
        self.write_bytes(struct.pack('<B', value))

    def write_int32(self, value: int) -> None:
        """Write a signed 32-bit integer."""
        self.write_bytes(struct.pack('<i', value))

    def write_string_to_null(self, value: str, encoding: str = 'ascii') -> None:
        """Write a string followed by a null terminator."""
        self.write_bytes(value.encode(encoding))
        self.write_byte(0)

    def getvalue(self) -> bytes:
        """Return the full contents of the underlying buffer."""
        return self._stream.getvalue()
