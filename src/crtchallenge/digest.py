"""
Keyed digest (HMAC-SHA256) over a byte range, with constant time verification.
"""

import hmac
from typing import Optional, Union

from .typing import BytesLike


__all__ = (
    "DIGEST_ALGORITHM",
    "DIGEST_SIZE",
    "compute_digest",
    "digests_equal",
    "verify_digest",
)


DIGEST_ALGORITHM = "sha256"
DIGEST_SIZE = 32


def _ensure_bytes(value: Union[str, BytesLike]) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)

    return value.encode("utf-8")


def compute_digest(
    secret: Union[str, BytesLike],
    data: BytesLike,
    /,
    start: int = 0,
    end: Optional[int] = None,
) -> bytes:
    """
    HMAC of ``data[start:end]`` keyed with the shared server secret.

    A ``str`` secret is used as its UTF-8 encoding.
    """
    secret_bytes = _ensure_bytes(secret)
    if not secret_bytes:
        raise ValueError("HMAC secret must not be empty")

    if end is None:
        end = len(data)
    if not 0 <= start <= end <= len(data):
        raise ValueError(f"Invalid digest range [{start}, {end}) for {len(data)} bytes")

    message = memoryview(data)[start:end]

    return hmac.new(secret_bytes, msg=message, digestmod=DIGEST_ALGORITHM).digest()


def digests_equal(expected: BytesLike, actual: BytesLike, /) -> bool:
    """
    Compare two tags without short circuiting on the first differing byte.
    """
    return hmac.compare_digest(bytes(expected), bytes(actual))


def verify_digest(
    secret: Union[str, BytesLike],
    data: BytesLike,
    tag: BytesLike,
    /,
    start: int = 0,
    end: Optional[int] = None,
) -> bool:
    """
    Recompute the digest of ``data[start:end]`` and compare it to ``tag``.
    """
    return digests_equal(compute_digest(secret, data, start, end), tag)
