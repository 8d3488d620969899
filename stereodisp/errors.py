"""Exception hierarchy and checking helpers shared across the package."""

from __future__ import annotations

import errno as _errno
import os
import sys
from typing import Any, TypeVar

__all__ = [
    "CoreError",
    "AssertionFailure",
    "AbortCalled",
    "OSCallError",
    "StreamFailure",
    "assert_that",
    "abort",
    "errnum_to_string",
    "check_result",
]

T = TypeVar("T")


class CoreError(Exception):
    """Base class of every error raised by this package.

    Subclasses describe themselves by overriding :meth:`message`;
    ``str()`` of the exception is that message.
    """

    def __init__(self, text: str = "") -> None:
        super().__init__(text)
        self._text = text

    def message(self) -> str:
        """Return a human-readable description of the error."""
        return self._text or type(self).__name__

    def __str__(self) -> str:
        return self.message()


class _LocatedFailure(CoreError):
    """A failure tied to a source location, with an optional extra message."""

    def __init__(self, file: str, line: int, additional_message: str = "") -> None:
        super().__init__()
        self.file = file
        self.line = line
        self.additional_message = additional_message

    def _with_additional(self, head: str) -> str:
        if self.additional_message:
            return f"{head}: `{self.additional_message}'"
        return head


class AssertionFailure(_LocatedFailure):
    """Raised when an always-enabled assertion does not hold."""

    def __init__(
        self, file: str, line: int, condition: str, additional_message: str = ""
    ) -> None:
        super().__init__(file, line, additional_message)
        self.condition = condition

    def message(self) -> str:
        return self._with_additional(
            f"Assertion `{self.condition}' failed in {self.file}:{self.line}"
        )


class AbortCalled(_LocatedFailure):
    """Raised by :func:`abort`."""

    def message(self) -> str:
        return self._with_additional(f"Abort called in {self.file}:{self.line}")


class OSCallError(CoreError):
    """Raised when an operating-system level call reports an error number."""

    def __init__(self, function: str, errnum: int) -> None:
        super().__init__()
        self.function = function
        self.errnum = errnum

    def errstr(self) -> str:
        """Return the text describing :attr:`errnum`."""
        return errnum_to_string(self.errnum)

    def message(self) -> str:
        return f"{self.function}: {self.errstr()}"


class StreamFailure(CoreError):
    """Raised when a stream operation fails without an error number."""

    def __init__(self, function: str) -> None:
        super().__init__()
        self.function = function

    def message(self) -> str:
        return f"{self.function}: Stream operation failed"


def _caller_location(depth: int = 2) -> tuple[str, int]:
    frame = sys._getframe(depth)
    return frame.f_code.co_filename, frame.f_lineno


def assert_that(condition: Any, condition_text: str = "", message: str = "") -> None:
    """Raise :class:`AssertionFailure` at the caller's location unless *condition* holds."""
    if not condition:
        file, line = _caller_location()
        raise AssertionFailure(file, line, condition_text, message)


def abort(message: str = "") -> None:
    """Unconditionally raise :class:`AbortCalled` at the caller's location."""
    file, line = _caller_location()
    raise AbortCalled(file, line, message)


def errnum_to_string(errnum: int) -> str:
    """Return the system description of an error number.

    Numbers the system does not know give ``"Unknown error number N"``.
    """
    if errnum != 0 and errnum not in _errno.errorcode:
        return f"Unknown error number {errnum}"
    try:
        return os.strerror(errnum)
    except ValueError:
        return f"Unknown error number {errnum}"


def check_result(function: str, value: T) -> T:
    """Return *value* unless it signals failure, otherwise raise :class:`OSCallError`.

    Failure is an :class:`OSError` instance (its error number is used), ``None``
    or the integer ``-1`` (reported with error number 0).
    """
    if isinstance(value, OSError):
        raise OSCallError(function, value.errno or 0) from value
    if value is None:
        raise OSCallError(function, 0)
    if isinstance(value, int) and not isinstance(value, bool) and value == -1:
        raise OSCallError(function, 0)
    return value