"""
Validity window checks against an injectable clock.
"""

import time

from .typing import TimeSupplier


__all__ = ("fixed_time", "is_expired", "system_time")


def system_time() -> int:
    """Wall clock time in whole seconds since the epoch."""
    return int(time.time())


def fixed_time(now: int, /) -> TimeSupplier:
    """
    A time supplier that always reports ``now``.
    """

    def supplier() -> int:
        return now

    return supplier


def is_expired(valid_from: int, valid_to: int, time_supplier: TimeSupplier) -> bool:
    """
    True unless the supplied time lies in ``[valid_from, valid_to)``.
    """
    now = time_supplier()

    return now < valid_from or now >= valid_to
