__all__ = (
    "AuthenticationError",
    "CRTChallengeException",
    "InvalidFieldError",
    "MalformedEncodingError",
    "SerializationError",
)


class CRTChallengeException(Exception):
    """
    Base class for all challenge envelope exceptions.
    """

    def __init__(self, message: str, /) -> None:
        self.message = message
        self.args = (message,)


class MalformedEncodingError(CRTChallengeException, ValueError):
    """
    The wire bytes do not parse as the expected sequence of tagged values:
    wrong tag, truncated buffer, or a length prefix running past the end.
    """

    def __init__(self, message: str, offset: int, /) -> None:
        self.message = message
        self.offset = offset
        self.args = (message, offset)


class InvalidFieldError(CRTChallengeException, ValueError):
    """
    A field value, or a combination of field values, breaks a challenge
    invariant.
    """

    def __init__(self, message: str, field: str, /) -> None:
        self.message = message
        self.field = field
        self.args = (message, field)


class AuthenticationError(CRTChallengeException):
    """
    The keyed digest recomputed over the received fields does not match the
    transmitted tag.
    """


class SerializationError(CRTChallengeException):
    """
    A value could not be represented in the wire format.
    """
