"""
Reader and writer for the small MessagePack subset carried by the challenge
envelope: integers up to 32 bits, byte strings and UTF-8 strings.

Encodings must match other implementations of the protocol byte for byte,
so the writer always picks the shortest tag for a value.
"""

import struct

from .errors import MalformedEncodingError, SerializationError
from .typing import BytesLike, WireTag


__all__ = ("WireReader", "WireWriter", "INT32_MIN", "UINT32_MAX")


INT32_MIN = -(2**31)
UINT32_MAX = 2**32 - 1

_INT_FORMATS = {
    WireTag.uint8: ">B",
    WireTag.uint16: ">H",
    WireTag.uint32: ">I",
    WireTag.int8: ">b",
    WireTag.int16: ">h",
    WireTag.int32: ">i",
}
_BIN_LENGTH_FORMATS = {
    WireTag.bin8: ">B",
    WireTag.bin16: ">H",
    WireTag.bin32: ">I",
}
_STR_LENGTH_FORMATS = {
    WireTag.str8: ">B",
    WireTag.str16: ">H",
    WireTag.str32: ">I",
}


class WireWriter:
    """
    Append-only encoder. Each ``write_*`` call adds one tagged value.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    def __len__(self) -> int:
        return len(self._buffer)

    def _write_tagged(self, tag: WireTag, fmt: str, value: int) -> None:
        self._buffer.append(tag)
        self._buffer += struct.pack(fmt, value)

    def write_byte(self, value: int) -> None:
        """
        Write a single octet value. On the wire it is an ordinary integer.
        """
        if isinstance(value, int) and not 0 <= value <= 0xFF:
            raise SerializationError(f"Byte value out of range: {value}")

        self.write_int32(value)

    def write_int32(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise SerializationError(
                f"Cannot encode {type(value).__name__} as an integer"
            )
        if not INT32_MIN <= value <= UINT32_MAX:
            raise SerializationError(f"Integer out of 32 bit range: {value}")

        if 0 <= value <= WireTag.positive_fixint_max:
            self._buffer.append(value)
        elif value > 0:
            if value <= 0xFF:
                self._write_tagged(WireTag.uint8, ">B", value)
            elif value <= 0xFFFF:
                self._write_tagged(WireTag.uint16, ">H", value)
            else:
                self._write_tagged(WireTag.uint32, ">I", value)
        elif value >= -32:
            self._buffer += struct.pack(">b", value)
        elif value >= -(2**7):
            self._write_tagged(WireTag.int8, ">b", value)
        elif value >= -(2**15):
            self._write_tagged(WireTag.int16, ">h", value)
        else:
            self._write_tagged(WireTag.int32, ">i", value)

    def write_bytes(self, value: BytesLike) -> None:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise SerializationError(
                f"Cannot encode {type(value).__name__} as a byte string"
            )

        data = bytes(value)
        length = len(data)
        if length <= 0xFF:
            self._write_tagged(WireTag.bin8, ">B", length)
        elif length <= 0xFFFF:
            self._write_tagged(WireTag.bin16, ">H", length)
        elif length <= UINT32_MAX:
            self._write_tagged(WireTag.bin32, ">I", length)
        else:
            raise SerializationError(f"Byte string too long: {length} bytes")

        self._buffer += data

    def write_string(self, value: str) -> None:
        if not isinstance(value, str):
            raise SerializationError(f"Cannot encode {type(value).__name__} as a string")

        try:
            data = value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise SerializationError(f"String is not encodable as UTF-8: {exc}") from None

        length = len(data)
        if length < 32:
            self._buffer.append(WireTag.fixstr | length)
        elif length <= 0xFF:
            self._write_tagged(WireTag.str8, ">B", length)
        elif length <= 0xFFFF:
            self._write_tagged(WireTag.str16, ">H", length)
        elif length <= UINT32_MAX:
            self._write_tagged(WireTag.str32, ">I", length)
        else:
            raise SerializationError(f"String too long: {length} bytes")

        self._buffer += data

    def to_bytes(self) -> bytes:
        return bytes(self._buffer)


class WireReader:
    """
    Forward-only decoder over an immutable copy of the input.

    Every read checks the tag family and that the payload fits in what is
    left of the buffer before slicing, so a hostile length prefix can neither
    read out of bounds nor make us allocate more than the input size.
    """

    def __init__(self, data: BytesLike) -> None:
        self._data = bytes(data)
        self._offset = 0

    def bytes_consumed(self) -> int:
        """
        Number of input bytes consumed so far, i.e. the length of the prefix
        that encodes every value read until now.
        """
        return self._offset

    def remaining(self) -> int:
        return len(self._data) - self._offset

    def at_end(self) -> bool:
        return self._offset >= len(self._data)

    def _take(self, size: int, what: str) -> bytes:
        available = self.remaining()
        if size > available:
            raise MalformedEncodingError(
                f"Truncated {what}: need {size} bytes, {available} remaining",
                self._offset,
            )

        chunk = self._data[self._offset : self._offset + size]
        self._offset += size

        return chunk

    def _unpack(self, fmt: str, what: str) -> int:
        (value,) = struct.unpack(fmt, self._take(struct.calcsize(fmt), what))
        return value

    def read_int32(self) -> int:
        start = self._offset
        tag = self._take(1, "integer tag")[0]

        if tag <= WireTag.positive_fixint_max:
            return tag
        if tag >= WireTag.negative_fixint:
            return tag - 0x100

        fmt = _INT_FORMATS.get(tag)
        if fmt is None:
            raise MalformedEncodingError(
                f"Expected integer, found tag 0x{tag:02x}", start
            )

        return self._unpack(fmt, "integer")

    def read_byte(self) -> int:
        start = self._offset
        value = self.read_int32()
        if not 0 <= value <= 0xFF:
            raise MalformedEncodingError(f"Byte value out of range: {value}", start)

        return value

    def read_bytes(self) -> bytes:
        start = self._offset
        tag = self._take(1, "byte string tag")[0]

        fmt = _BIN_LENGTH_FORMATS.get(tag)
        if fmt is None:
            raise MalformedEncodingError(
                f"Expected byte string, found tag 0x{tag:02x}", start
            )

        length = self._unpack(fmt, "byte string length")

        return self._take(length, "byte string")

    def read_string(self) -> str:
        start = self._offset
        tag = self._take(1, "string tag")[0]

        if WireTag.fixstr <= tag <= WireTag.fixstr_max:
            length = tag & 0x1F
        else:
            fmt = _STR_LENGTH_FORMATS.get(tag)
            if fmt is None:
                raise MalformedEncodingError(
                    f"Expected string, found tag 0x{tag:02x}", start
                )
            length = self._unpack(fmt, "string length")

        data = self._take(length, "string")
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            raise MalformedEncodingError("String is not valid UTF-8", start) from None
