"""
crtchallenge
============

The authenticated challenge envelope of the crtauth challenge-response
protocol: a compact MessagePack wire encoding, an HMAC-SHA256 tag binding it
to a shared server secret, and validity window checks.
"""

from .challenge import (
    CHALLENGE_MAGIC,
    FINGERPRINT_LENGTH,
    PROTOCOL_VERSION,
    UNIQUE_DATA_LENGTH,
    Challenge,
    ChallengeBuilder,
    create_challenge,
    generate_unique_data,
)
from .errors import (
    AuthenticationError,
    CRTChallengeException,
    InvalidFieldError,
    MalformedEncodingError,
    SerializationError,
)
from .timeutils import fixed_time, is_expired, system_time
from .typing import TimeSupplier


__title__ = "crtchallenge"
__version__ = "1.0.0"
__license__ = "Apache-2.0"
__all__ = (
    "CHALLENGE_MAGIC",
    "FINGERPRINT_LENGTH",
    "PROTOCOL_VERSION",
    "UNIQUE_DATA_LENGTH",
    "Challenge",
    "ChallengeBuilder",
    "TimeSupplier",
    "create_challenge",
    "generate_unique_data",
    "fixed_time",
    "is_expired",
    "system_time",
    "AuthenticationError",
    "CRTChallengeException",
    "InvalidFieldError",
    "MalformedEncodingError",
    "SerializationError",
)
