import pytest

from stereodisp.checked import ConversionOverflowError, IntType, checked_cast
from stereodisp.errors import CoreError


@pytest.mark.parametrize("int_type", list(IntType))
def test_range_covers_exactly_two_to_the_bits(int_type):
    assert int_type.max - int_type.min + 1 == 2 ** int_type.bits
    assert int_type.contains(int_type.min) is True
    assert int_type.contains(int_type.max) is True
    assert int_type.contains(int_type.max + 1) is False
    assert int_type.contains(int_type.min - 1) is False
    assert checked_cast(int_type.min, int_type, int_type) == int_type.min
    assert checked_cast(int_type.max, int_type, int_type) == int_type.max


@pytest.mark.parametrize("int_type", list(IntType))
def test_boundaries_pass_through_unchanged(int_type):
    source = IntType.INT64 if int_type is not IntType.UINT64 else IntType.UINT64
    if source.contains(int_type.min):
        assert checked_cast(int_type.min, int_type, source) == int_type.min
    assert checked_cast(int_type.max, int_type, source) == int_type.max


@pytest.mark.parametrize("int_type", [t for t in IntType if t.bits < 64])
def test_one_past_the_ends_overflows(int_type):
    with pytest.raises(ConversionOverflowError):
        checked_cast(int_type.max + 1, int_type, IntType.INT64)
    with pytest.raises(ConversionOverflowError):
        checked_cast(int_type.min - 1, int_type, IntType.INT64)


def test_negative_to_unsigned_overflows():
    with pytest.raises(ConversionOverflowError) as info:
        checked_cast(-1, IntType.UINT64, IntType.INT64)
    assert info.value.value == -1
    assert info.value.target is IntType.UINT64
    assert info.value.source is IntType.INT64


def test_large_unsigned_to_signed_overflows():
    with pytest.raises(ConversionOverflowError) as info:
        checked_cast(IntType.UINT64.max, IntType.INT64, IntType.UINT64)
    assert info.value.value == IntType.UINT64.max


def test_widening_always_succeeds():
    for value in (IntType.INT32.min, -7, 0, 7, IntType.INT32.max):
        assert checked_cast(value, IntType.INT64, IntType.INT32) == value


def test_overflow_message_format():
    with pytest.raises(ConversionOverflowError) as info:
        checked_cast(300, IntType.UINT8, IntType.INT32)
    assert info.value.message() == (
        "Error converting from int to unsigned char: 300 is not in [0;255]"
    )
    assert str(info.value) == info.value.message()


def test_target_type_info_format():
    with pytest.raises(ConversionOverflowError) as info:
        checked_cast(40000, IntType.INT16, IntType.INT32)
    assert info.value.target_type_info() == (
        "Type `short' is signed, min is -32768, max is 32767"
    )


def test_overflow_is_core_error():
    with pytest.raises(CoreError):
        checked_cast(1 << 40, IntType.INT32)


def test_value_outside_source_raises_value_error():
    with pytest.raises(ValueError):
        checked_cast(-5, IntType.INT32, IntType.UINT32)


@pytest.mark.parametrize("bad", [1.5, "3", True, None])
def test_non_integer_rejected(bad):
    with pytest.raises(TypeError):
        checked_cast(bad, IntType.INT32)