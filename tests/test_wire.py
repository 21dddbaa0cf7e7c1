"""
Tests for the wire reader and writer.
"""
import pytest
from hypothesis import given
from hypothesis.strategies import binary, text

from crtchallenge.errors import MalformedEncodingError, SerializationError
from crtchallenge.wire import WireReader, WireWriter

from .strategies import int32s


def encode_int(value: int) -> bytes:
    writer = WireWriter()
    writer.write_int32(value)
    return writer.to_bytes()


@pytest.mark.parametrize(
    "value,expected",
    (
        (0, b"\x00"),
        (1, b"\x01"),
        (127, b"\x7f"),
        (128, b"\xcc\x80"),
        (255, b"\xcc\xff"),
        (256, b"\xcd\x01\x00"),
        (1000, b"\xcd\x03\xe8"),
        (65535, b"\xcd\xff\xff"),
        (65536, b"\xce\x00\x01\x00\x00"),
        (2**32 - 1, b"\xce\xff\xff\xff\xff"),
        (-1, b"\xff"),
        (-32, b"\xe0"),
        (-33, b"\xd0\xdf"),
        (-128, b"\xd0\x80"),
        (-129, b"\xd1\xff\x7f"),
        (-32768, b"\xd1\x80\x00"),
        (-32769, b"\xd2\xff\xff\x7f\xff"),
        (-(2**31), b"\xd2\x80\x00\x00\x00"),
    ),
    ids=str,
)
def test_write_int32_uses_smallest_tag(value: int, expected: bytes) -> None:
    assert encode_int(value) == expected
    assert WireReader(expected).read_int32() == value


@pytest.mark.parametrize(
    "value,expected",
    (
        (b"", b"\xc4\x00"),
        (b"ab", b"\xc4\x02ab"),
        (b"\x00" * 255, b"\xc4\xff" + b"\x00" * 255),
        (b"\x00" * 256, b"\xc5\x01\x00" + b"\x00" * 256),
        (b"\x00" * 65536, b"\xc6\x00\x01\x00\x00" + b"\x00" * 65536),
    ),
    ids=("empty", "short", "bin8-max", "bin16", "bin32"),
)
def test_write_bytes(value: bytes, expected: bytes) -> None:
    writer = WireWriter()
    writer.write_bytes(value)

    assert writer.to_bytes() == expected


@pytest.mark.parametrize(
    "value,expected",
    (
        ("", b"\xa0"),
        ("srv", b"\xa3srv"),
        ("é", b"\xa2\xc3\xa9"),
        ("x" * 31, b"\xbf" + b"x" * 31),
        ("x" * 32, b"\xd9\x20" + b"x" * 32),
        ("x" * 256, b"\xda\x01\x00" + b"x" * 256),
        ("x" * 65536, b"\xdb\x00\x01\x00\x00" + b"x" * 65536),
    ),
    ids=("empty", "fixstr", "utf-8", "fixstr-max", "str8", "str16", "str32"),
)
def test_write_string(value: str, expected: bytes) -> None:
    writer = WireWriter()
    writer.write_string(value)

    assert writer.to_bytes() == expected
    assert WireReader(expected).read_string() == value


def test_write_byte_is_an_integer() -> None:
    writer = WireWriter()
    writer.write_byte(1)
    writer.write_byte(ord("c"))
    writer.write_byte(200)

    assert writer.to_bytes() == b"\x01\x63\xcc\xc8"
    assert len(writer) == 4


@pytest.mark.parametrize("value", (-1, 256, True, "1"), ids=repr)
def test_write_byte_out_of_range(value: object) -> None:
    with pytest.raises(SerializationError):
        WireWriter().write_byte(value)  # type: ignore


@pytest.mark.parametrize("value", (2**32, -(2**31) - 1, True, 1.0, "1"), ids=repr)
def test_write_int32_unrepresentable(value: object) -> None:
    with pytest.raises(SerializationError):
        WireWriter().write_int32(value)  # type: ignore


def test_write_bytes_rejects_str() -> None:
    with pytest.raises(SerializationError):
        WireWriter().write_bytes("abc")  # type: ignore


def test_write_string_rejects_bytes() -> None:
    with pytest.raises(SerializationError):
        WireWriter().write_string(b"abc")  # type: ignore


def test_write_string_rejects_lone_surrogate() -> None:
    with pytest.raises(SerializationError):
        WireWriter().write_string("\ud800")


def test_write_bytes_copies_buffer() -> None:
    buffer = bytearray(b"abc")
    writer = WireWriter()
    writer.write_bytes(buffer)
    buffer[0] = 0

    assert writer.to_bytes() == b"\xc4\x03abc"


@given(int32s())
def test_int32_decodes_to_written_value(value: int) -> None:
    reader = WireReader(encode_int(value))

    assert reader.read_int32() == value
    assert reader.at_end()


@given(binary(), text())
def test_bytes_consumed_tracks_each_value(data: bytes, string: str) -> None:
    writer = WireWriter()
    writer.write_bytes(data)
    first_length = len(writer)
    writer.write_string(string)

    reader = WireReader(writer.to_bytes())
    assert reader.bytes_consumed() == 0
    assert reader.read_bytes() == data
    assert reader.bytes_consumed() == first_length
    assert reader.read_string() == string
    assert reader.bytes_consumed() == len(writer)
    assert reader.remaining() == 0


@pytest.mark.parametrize(
    "encoded,value",
    (
        (b"\xcc\x05", 5),
        (b"\xcd\x00\x05", 5),
        (b"\xce\x00\x00\x00\x05", 5),
        (b"\xd0\x05", 5),
        (b"\xd1\xff\xff", -1),
        (b"\xd2\x00\x00\x00\x05", 5),
    ),
    ids=repr,
)
def test_read_int32_accepts_wide_encodings(encoded: bytes, value: int) -> None:
    assert WireReader(encoded).read_int32() == value


def test_read_byte_out_of_range() -> None:
    with pytest.raises(MalformedEncodingError) as excinfo:
        WireReader(b"\xcd\x01\x00").read_byte()

    assert excinfo.value.offset == 0


@pytest.mark.parametrize(
    "method,encoded,offset",
    (
        ("read_int32", b"", 0),
        ("read_int32", b"\xcd\x01", 1),
        ("read_int32", b"\xce", 1),
        ("read_int32", b"\xc4\x00", 0),
        ("read_int32", b"\xa1x", 0),
        ("read_bytes", b"", 0),
        ("read_bytes", b"\x05", 0),
        ("read_bytes", b"\xa1x", 0),
        ("read_bytes", b"\xc4", 1),
        ("read_bytes", b"\xc4\x05ab", 2),
        ("read_bytes", b"\xc5\x00", 1),
        ("read_bytes", b"\xc6\xff\xff\xff\xff", 5),
        ("read_string", b"", 0),
        ("read_string", b"\xc4\x00", 0),
        ("read_string", b"\x01", 0),
        ("read_string", b"\xa3ab", 1),
        ("read_string", b"\xd9", 1),
        ("read_string", b"\xdb\xff\xff\xff\xffabc", 5),
        ("read_string", b"\xa1\xff", 0),
    ),
    ids=repr,
)
def test_read_malformed(method: str, encoded: bytes, offset: int) -> None:
    reader = WireReader(encoded)

    with pytest.raises(MalformedEncodingError) as excinfo:
        getattr(reader, method)()

    assert excinfo.value.offset == offset


@given(binary(min_size=1))
def test_read_bytes_truncated_never_overreads(data: bytes) -> None:
    writer = WireWriter()
    writer.write_bytes(data)
    encoded = writer.to_bytes()

    for length in range(len(encoded)):
        with pytest.raises(MalformedEncodingError):
            WireReader(encoded[:length]).read_bytes()


def test_reader_copies_input() -> None:
    buffer = bytearray(b"\xc4\x01a")
    reader = WireReader(buffer)
    buffer[2] = ord("b")

    assert reader.read_bytes() == b"a"
