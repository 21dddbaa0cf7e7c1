"""
The challenge message: an immutable value, its builder, and the
HMAC-authenticated wire envelope.
"""

import logging
import secrets
from typing import Any, Iterable, NamedTuple, Optional, Union

from .digest import compute_digest, digests_equal
from .errors import AuthenticationError, InvalidFieldError, MalformedEncodingError
from .timeutils import is_expired, system_time
from .typing import BytesLike, TimeSupplier
from .wire import UINT32_MAX, WireReader, WireWriter


__all__ = (
    "CHALLENGE_MAGIC",
    "FINGERPRINT_LENGTH",
    "PROTOCOL_VERSION",
    "UNIQUE_DATA_LENGTH",
    "Challenge",
    "ChallengeBuilder",
    "create_challenge",
    "generate_unique_data",
    "parse_version_magic",
)

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = 1
CHALLENGE_MAGIC = ord("c")
UNIQUE_DATA_LENGTH = 20
FINGERPRINT_LENGTH = 6
MAX_TIMESTAMP = UINT32_MAX
DEFAULT_LIFETIME = 20
DEFAULT_CLOCK_FUDGE = 2


def _copy_bytes(value: Any, field: str) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise InvalidFieldError(f"'{field}' must be a bytes-like object", field)

    return bytes(value)


def _check_length(value: bytes, length: int, field: str) -> None:
    if len(value) != length:
        raise InvalidFieldError(
            f"'{field}' must be exactly {length} bytes, got {len(value)}", field
        )


def _check_timestamp(value: Any, field: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFieldError(f"'{field}' must be an integer", field)
    if not 0 <= value <= MAX_TIMESTAMP:
        raise InvalidFieldError(
            f"'{field}' must be an unsigned 32 bit timestamp, got {value}", field
        )


def _check_name(value: Any, field: str) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidFieldError(f"'{field}' must be set and non-empty", field)


def generate_unique_data() -> bytes:
    return secrets.token_bytes(UNIQUE_DATA_LENGTH)


def parse_version_magic(reader: WireReader, magic: int) -> None:
    """
    Consume the protocol version and message type header, rejecting anything
    but the current version and the expected message type.
    """
    offset = reader.bytes_consumed()
    version = reader.read_byte()
    if version != PROTOCOL_VERSION:
        logger.debug("Rejecting message with protocol version %d", version)
        raise MalformedEncodingError(
            f"Unsupported protocol version {version}, expected {PROTOCOL_VERSION}",
            offset,
        )

    offset = reader.bytes_consumed()
    found = reader.read_byte()
    if found != magic:
        logger.debug("Rejecting message with type %r, expected %r", chr(found), chr(magic))
        raise MalformedEncodingError(
            f"Invalid message type {chr(found)!r}, expected {chr(magic)!r}", offset
        )


def _expect_end(reader: WireReader) -> None:
    if not reader.at_end():
        raise MalformedEncodingError(
            f"{reader.remaining()} unexpected trailing bytes", reader.bytes_consumed()
        )


BaseChallenge = NamedTuple(
    "Challenge",
    [
        ("unique_data", bytes),
        ("valid_from", int),
        ("valid_to", int),
        ("fingerprint", bytes),
        ("server_name", str),
        ("user_name", str),
    ],
)


class Challenge(BaseChallenge):
    """
    A server issued challenge, valid in the half-open window
    ``[valid_from, valid_to)``.

    Instances are immutable and compare (and hash) by value over all six
    fields. Bytes-like arguments are copied on construction, so later changes
    to a caller's ``bytearray`` are never observed.

        >>> challenge = Challenge(bytes(20), 1000, 2000, bytes(6), "srv", "alice")
        >>> challenge.valid_to
        2000
        >>> challenge == Challenge(bytearray(20), 1000, 2000, bytes(6), "srv", "alice")
        True

    """

    __slots__ = ()

    def __new__(
        cls,
        unique_data: BytesLike,
        valid_from: int,
        valid_to: int,
        fingerprint: BytesLike,
        server_name: str,
        user_name: str,
    ) -> "Challenge":
        unique_data = _copy_bytes(unique_data, "unique_data")
        _check_length(unique_data, UNIQUE_DATA_LENGTH, "unique_data")

        fingerprint = _copy_bytes(fingerprint, "fingerprint")
        _check_length(fingerprint, FINGERPRINT_LENGTH, "fingerprint")

        _check_timestamp(valid_from, "valid_from")
        _check_timestamp(valid_to, "valid_to")
        if not valid_from < valid_to:
            raise InvalidFieldError(
                "validity timestamps are invalid, 'valid_from' must be smaller "
                "than 'valid_to'",
                "valid_from",
            )

        _check_name(server_name, "server_name")
        _check_name(user_name, "user_name")

        return super().__new__(
            cls, unique_data, valid_from, valid_to, fingerprint, server_name, user_name
        )

    @classmethod
    def _make(cls, iterable: Iterable[Any]) -> "Challenge":
        # namedtuple's _make (and so _replace) skips __new__
        return cls(*iterable)

    def __repr__(self) -> str:
        return (
            "Challenge(unique_data={unique_data}, valid_from={self.valid_from}, "
            "valid_to={self.valid_to}, fingerprint={fingerprint}, "
            "server_name={self.server_name!r}, user_name={self.user_name!r})"
        ).format(
            self=self,
            unique_data=self.unique_data.hex(),
            fingerprint=self.fingerprint.hex(),
        )

    @staticmethod
    def new_builder() -> "ChallengeBuilder":
        return ChallengeBuilder()

    def is_expired(self, time_supplier: TimeSupplier) -> bool:
        return is_expired(self.valid_from, self.valid_to, time_supplier)

    def serialize(self, secret: Union[str, BytesLike]) -> bytes:
        """
        Encode the challenge and append an HMAC tag over every preceding byte.

        :raises SerializationError: a field cannot be represented on the wire
        """
        writer = WireWriter()
        writer.write_byte(PROTOCOL_VERSION)
        writer.write_byte(CHALLENGE_MAGIC)
        writer.write_bytes(self.unique_data)
        writer.write_int32(self.valid_from)
        writer.write_int32(self.valid_to)
        writer.write_bytes(self.fingerprint)
        writer.write_string(self.server_name)
        writer.write_string(self.user_name)

        signed = writer.to_bytes()
        writer.write_bytes(compute_digest(secret, signed))

        return writer.to_bytes()

    @staticmethod
    def _read_fields(reader: WireReader) -> tuple:
        parse_version_magic(reader, CHALLENGE_MAGIC)

        return (
            reader.read_bytes(),  # unique_data
            reader.read_int32(),  # valid_from
            reader.read_int32(),  # valid_to
            reader.read_bytes(),  # fingerprint
            reader.read_string(),  # server_name
            reader.read_string(),  # user_name
        )

    @classmethod
    def deserialize(cls, data: BytesLike) -> "Challenge":
        """
        Parse a serialized challenge WITHOUT checking its HMAC tag.

        The trailing tag must still be present, so a message cut short
        anywhere fails to parse. Only use this on a message that has already
        been authenticated, or where authentication happens elsewhere.

        :raises MalformedEncodingError: the bytes are not a challenge
        :raises InvalidFieldError: the fields break a challenge invariant
        """
        reader = WireReader(data)
        fields = cls._read_fields(reader)
        reader.read_bytes()
        _expect_end(reader)

        return cls(*fields)

    @classmethod
    def deserialize_authenticated(
        cls, data: BytesLike, secret: Union[str, BytesLike]
    ) -> "Challenge":
        """
        Parse a serialized challenge and verify its HMAC tag with ``secret``.

        The tag is recomputed over exactly the bytes that encoded the fields
        read, and compared in constant time. Field invariants are only
        checked once the tag has been verified.

        :raises MalformedEncodingError: the bytes are not a challenge
        :raises AuthenticationError: the tag does not match
        :raises InvalidFieldError: the fields break a challenge invariant
        """
        data = bytes(data)
        reader = WireReader(data)
        fields = cls._read_fields(reader)
        signed_length = reader.bytes_consumed()
        tag = reader.read_bytes()
        _expect_end(reader)

        expected = compute_digest(secret, data, 0, signed_length)
        if not digests_equal(expected, tag):
            logger.debug(
                "Challenge HMAC validation failed over %d bytes", signed_length
            )
            raise AuthenticationError("HMAC validation failed")

        return cls(*fields)


class ChallengeBuilder:
    """
    Collects challenge fields one at a time; ``build`` checks them all.

    A builder is meant to be filled and built by a single owner; it is not
    safe to share between threads while it is being filled in.
    """

    def __init__(self) -> None:
        self._unique_data: Optional[bytes] = None
        self._valid_from: Optional[int] = None
        self._valid_to: Optional[int] = None
        self._fingerprint: Optional[bytes] = None
        self._server_name: Optional[str] = None
        self._user_name: Optional[str] = None

    def set_unique_data(self, unique_data: BytesLike) -> "ChallengeBuilder":
        data = _copy_bytes(unique_data, "unique_data")
        _check_length(data, UNIQUE_DATA_LENGTH, "unique_data")
        self._unique_data = data

        return self

    def set_valid_from(self, timestamp: int) -> "ChallengeBuilder":
        self._valid_from = timestamp

        return self

    def set_valid_to(self, timestamp: int) -> "ChallengeBuilder":
        self._valid_to = timestamp

        return self

    def set_fingerprint(self, fingerprint: BytesLike) -> "ChallengeBuilder":
        """
        Use the first ``FINGERPRINT_LENGTH`` bytes of ``fingerprint``;
        shorter input is zero padded.
        """
        data = _copy_bytes(fingerprint, "fingerprint")[:FINGERPRINT_LENGTH]
        self._fingerprint = data.ljust(FINGERPRINT_LENGTH, b"\0")

        return self

    def set_server_name(self, server_name: str) -> "ChallengeBuilder":
        self._server_name = server_name

        return self

    def set_user_name(self, user_name: str) -> "ChallengeBuilder":
        self._user_name = user_name

        return self

    def build(self) -> Challenge:
        values = {
            "unique_data": self._unique_data,
            "valid_from": self._valid_from,
            "valid_to": self._valid_to,
            "fingerprint": self._fingerprint,
            "server_name": self._server_name,
            "user_name": self._user_name,
        }
        for field, value in values.items():
            if value is None:
                raise InvalidFieldError(f"'{field}' must be set", field)

        return Challenge(**values)


def create_challenge(
    fingerprint: BytesLike,
    server_name: str,
    user_name: str,
    *,
    lifetime: int = DEFAULT_LIFETIME,
    clock_fudge: int = DEFAULT_CLOCK_FUDGE,
    time_supplier: TimeSupplier = system_time,
    unique_data: Optional[BytesLike] = None,
) -> Challenge:
    """
    Issue a fresh challenge for ``user_name``.

    :param fingerprint: Fingerprint of the public key the response must be
        signed with. Only the first ``FINGERPRINT_LENGTH`` bytes are used.
    :param server_name: Name of the issuing server.
    :param user_name: User being authenticated.
    :keyword lifetime: Seconds from now until the challenge expires.
        Defaults to 20.
    :keyword clock_fudge: Seconds the window starts before now, to tolerate
        client clocks running slightly behind. Defaults to 2.
    :keyword time_supplier: Clock used to read "now". Defaults to the wall
        clock.
    :keyword unique_data: Nonce to use. Defaults to fresh random bytes.

    :raises InvalidFieldError: the arguments do not make a valid challenge
    """
    if unique_data is None:
        unique_data = generate_unique_data()

    now = time_supplier()

    return (
        Challenge.new_builder()
        .set_unique_data(unique_data)
        .set_valid_from(max(now - clock_fudge, 0))
        .set_valid_to(now + lifetime)
        .set_fingerprint(fingerprint)
        .set_server_name(server_name)
        .set_user_name(user_name)
        .build()
    )
