"""Lengths of time in whole microseconds, and clocks that produce them."""

from __future__ import annotations

import os
import re
import time
from dataclasses import dataclass

from stereodisp.errors import assert_that

__all__ = [
    "TimeSpan",
    "current_time",
    "cpu_time",
    "cpu_system_time",
    "cpu_user_time",
]

_C_WHITESPACE = " \t\n\r\v\f"
_FLOAT_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _truncating_div(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator < 0) == (denominator < 0) else -quotient


@dataclass(frozen=True, order=True)
class TimeSpan:
    """The length of an interval of time, stored as whole microseconds."""

    microseconds: int

    @classmethod
    def from_seconds(cls, seconds: float) -> TimeSpan:
        """Build a span from seconds, truncating towards zero to microseconds."""
        return cls(int(seconds * 1000000.0))

    @property
    def seconds(self) -> float:
        return self.microseconds / 1000000.0

    @property
    def milliseconds(self) -> float:
        return self.microseconds / 1000.0

    def to_string(self, append_unit: bool = True) -> str:
        """Format as seconds with six decimals, optionally followed by ``s``."""
        text = f"{self.seconds:.6f}"
        return text + "s" if append_unit else text

    @classmethod
    def parse(cls, text: str, append_unit: bool = True) -> TimeSpan:
        """Parse the form produced by :meth:`to_string`.

        Raises :class:`~stereodisp.errors.AssertionFailure` when the unit is
        missing or the text is not a single number.
        """
        body = text
        if append_unit:
            assert_that(
                len(text) > 0 and text.endswith("s"),
                "str.length () > 0 && str[str.length () - 1] == 's'",
            )
            body = text[:-1]

        body = body.lstrip(_C_WHITESPACE)
        if not body:
            return cls(0)
        match = _FLOAT_PATTERN.match(body)
        assert_that(match is not None and match.end() == len(body), "stream.eof ()")
        return cls.from_seconds(float(body))

    def __add__(self, other: object) -> TimeSpan:
        if not isinstance(other, TimeSpan):
            return NotImplemented
        return TimeSpan(self.microseconds + other.microseconds)

    def __sub__(self, other: object) -> TimeSpan:
        if not isinstance(other, TimeSpan):
            return NotImplemented
        return TimeSpan(self.microseconds - other.microseconds)

    def __mul__(self, factor: object) -> TimeSpan:
        if isinstance(factor, bool) or not isinstance(factor, (int, float)):
            return NotImplemented
        if isinstance(factor, int):
            return TimeSpan(self.microseconds * factor)
        return TimeSpan(int(float(self.microseconds) * factor))

    __rmul__ = __mul__

    def __truediv__(self, divisor: object) -> TimeSpan:
        if isinstance(divisor, bool) or not isinstance(divisor, (int, float)):
            return NotImplemented
        if isinstance(divisor, int):
            if divisor == 0:
                raise ZeroDivisionError("TimeSpan division by zero")
            return TimeSpan(_truncating_div(self.microseconds, divisor))
        return TimeSpan(int(float(self.microseconds) / divisor))

    def __str__(self) -> str:
        return self.to_string()


def current_time() -> TimeSpan:
    """Return the wall-clock time as a span since the epoch."""
    return TimeSpan(time.time_ns() // 1000)


def cpu_time() -> TimeSpan:
    """Return the user plus system CPU time used by this process."""
    times = os.times()
    return TimeSpan.from_seconds(times.user) + TimeSpan.from_seconds(times.system)


def cpu_system_time() -> TimeSpan:
    """Return the system CPU time used by this process."""
    return TimeSpan.from_seconds(os.times().system)


def cpu_user_time() -> TimeSpan:
    """Return the user CPU time used by this process."""
    return TimeSpan.from_seconds(os.times().user)