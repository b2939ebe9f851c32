"""
Injectable time source.

Every TTL and expiry decision in the auth core reads time through a
``Clock`` so tests can advance time deterministically instead of sleeping.
Values are epoch seconds as floats, which is also what ``cachetools``
expects from its ``timer`` callable.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def time(self) -> float:
        ...


class SystemClock:
    """Wall-clock time."""

    def time(self) -> float:
        return time.time()

