"""Range-checked conversion between fixed-width integer types."""

from __future__ import annotations

import enum
import operator

from stereodisp.errors import CoreError

__all__ = ["IntType", "ConversionOverflowError", "checked_cast"]


class IntType(enum.Enum):
    """A fixed-width machine integer type, described by name, signedness and width."""

    INT8 = ("signed char", True, 8)
    UINT8 = ("unsigned char", False, 8)
    INT16 = ("short", True, 16)
    UINT16 = ("unsigned short", False, 16)
    INT32 = ("int", True, 32)
    UINT32 = ("unsigned int", False, 32)
    INT64 = ("long", True, 64)
    UINT64 = ("unsigned long", False, 64)

    def __init__(self, type_name: str, signed: bool, bits: int) -> None:
        self.type_name = type_name
        self.signed = signed
        self.bits = bits

    @property
    def min(self) -> int:
        """Smallest value the type can hold."""
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max(self) -> int:
        """Largest value the type can hold."""
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

    def contains(self, value: int) -> bool:
        """Return whether *value* lies within the type's range."""
        return self.min <= value <= self.max

    def __str__(self) -> str:
        return self.type_name


class ConversionOverflowError(CoreError):
    """Raised when a value does not fit into the target integer type."""

    def __init__(self, value: int, source: IntType, target: IntType) -> None:
        super().__init__()
        self.value = value
        self.source = source
        self.target = target

    def target_type_info(self) -> str:
        """Describe the target type: its name, signedness and range."""
        target = self.target
        kind = "signed" if target.signed else "unsigned"
        return (
            f"Type `{target.type_name}' is {kind}, "
            f"min is {target.min}, max is {target.max}"
        )

    def message(self) -> str:
        return (
            f"Error converting from {self.source.type_name} to "
            f"{self.target.type_name}: {self.value} is not in "
            f"[{self.target.min};{self.target.max}]"
        )


def checked_cast(value: int, target: IntType, source: IntType = IntType.INT64) -> int:
    """Convert *value* of type *source* to *target*, checking the range.

    Returns the value unchanged when it fits into *target*, otherwise raises
    :class:`ConversionOverflowError`. Non-integers raise :class:`TypeError`;
    a value that is not a valid *source* value raises :class:`ValueError`.
    """
    if isinstance(value, bool):
        raise TypeError("checked_cast requires an integer, not bool")
    try:
        number = operator.index(value)
    except TypeError:
        raise TypeError(
            f"checked_cast requires an integer, not {type(value).__name__}"
        ) from None
    if not source.contains(number):
        raise ValueError(
            f"{number} is not a value of source type {source.type_name}"
        )
    if not target.contains(number):
        raise ConversionOverflowError(number, source, target)
    return number