import enum
from typing import Protocol, Union


__all__ = ("BytesLike", "TimeSupplier", "WireTag")

BytesLike = Union[bytes, bytearray, memoryview]


class TimeSupplier(Protocol):
    """
    Zero-argument callable returning the current time in whole seconds since
    the epoch.
    """

    def __call__(self) -> int: ...


@enum.unique
class WireTag(enum.IntEnum):
    """
    Type tags of the MessagePack subset used on the wire.

    See also: https://github.com/msgpack/msgpack/blob/master/spec.md
    """

    positive_fixint_max = 0x7F
    fixstr = 0xA0
    fixstr_max = 0xBF
    bin8 = 0xC4
    bin16 = 0xC5
    bin32 = 0xC6
    uint8 = 0xCC
    uint16 = 0xCD
    uint32 = 0xCE
    int8 = 0xD0
    int16 = 0xD1
    int32 = 0xD2
    str8 = 0xD9
    str16 = 0xDA
    str32 = 0xDB
    negative_fixint = 0xE0
