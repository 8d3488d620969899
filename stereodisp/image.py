"""Reading and writing binary PGM / PPM images."""

from __future__ import annotations

import re
from dataclasses import dataclass
from os import PathLike
from typing import BinaryIO, Iterable, Union

import numpy as np

from stereodisp.errors import OSCallError, StreamFailure, assert_that

__all__ = [
    "PgmImage",
    "float_to_byte",
    "float_to_byte_color",
    "write_pgm_stream",
    "write_pgm",
    "write_ppm_stream",
    "write_ppm",
    "read_pgm_stream",
    "read_pgm",
]

PathType = Union[str, "PathLike[str]"]

_C_WHITESPACE = " \t\n\r\v\f"
_NUMBER = re.compile(r"\+?\d+")


@dataclass(eq=False)
class PgmImage:
    """A grey-scale image: row-major float32 pixel values and its size."""

    data: np.ndarray
    width: int
    height: int


def _clamped_float32(values: Iterable[float]) -> np.ndarray:
    arr = np.asarray(list(values) if not isinstance(values, np.ndarray) else values,
                     dtype=np.float32).ravel()
    # NaN compares false both ways, so the clamp sends it to the upper bound.
    return np.where(np.isnan(arr), np.float32(1.0), np.clip(arr, 0.0, 1.0)).astype(
        np.float32
    )


def _quantise(values: Iterable[float], scale: int) -> np.ndarray:
    clamped = _clamped_float32(values)
    scaled = (clamped * np.float32(scale)).astype(np.float64) + 0.5
    return np.clip(np.trunc(scaled), 0, scale).astype(np.int32)


def float_to_byte(values: Iterable[float]) -> bytes:
    """Map values in [0, 1] to grey levels 0..255, clamping outside values."""
    return _quantise(values, 255).astype(np.uint8).tobytes()


def float_to_byte_color(values: Iterable[float]) -> bytes:
    """Map values in [0, 1] to RGB triples along a red-green-blue ramp."""
    v = _quantise(values, 767)
    low, mid = v < 256, v < 512
    r = np.where(low, v, np.where(mid, 255 - (v - 256), 0))
    g = np.where(low, 0, np.where(mid, v - 256, 255 - (v - 512)))
    b = np.where(mid, 0, v - 512)
    return np.stack([r, g, b], axis=1).astype(np.uint8).tobytes()


def _raw_bytes(data) -> bytes | None:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, np.ndarray) and data.dtype == np.uint8:
        return data.tobytes()
    return None


def _write_netpbm(stream: BinaryIO, magic: str, payload: bytes, count: int,
                  width: int, height: int) -> None:
    assert_that(len(payload) >= count, "data.size () >= count")
    stream.write(f"{magic}\n{width} {height}\n255\n".encode("ascii"))
    stream.write(payload[:count])


def write_pgm_stream(stream: BinaryIO, data, width: int, height: int) -> None:
    """Write raw grey bytes as a binary PGM to an open binary stream."""
    _write_netpbm(stream, "P5", bytes(data), width * height, width, height)


def write_ppm_stream(stream: BinaryIO, data, width: int, height: int) -> None:
    """Write raw RGB bytes as a binary PPM to an open binary stream."""
    _write_netpbm(stream, "P6", bytes(data), width * height * 3, width, height)


def _write_file(path: PathType, writer, payload: bytes, width: int, height: int) -> None:
    try:
        stream = open(path, "wb")
    except OSError as exc:
        raise OSCallError("open", exc.errno or 0) from exc
    with stream:
        try:
            writer(stream, payload, width, height)
        except OSError as exc:
            raise OSCallError("write", exc.errno or 0) from exc


def write_pgm(path: PathType, data, width: int, height: int) -> None:
    """Write a PGM file.

    *data* is either raw bytes (or a uint8 array) with one byte per pixel, or
    a sequence of floats in [0, 1] converted with :func:`float_to_byte`.
    """
    payload = _raw_bytes(data)
    if payload is None:
        payload = float_to_byte(data)
    assert_that(len(payload) == width * height, "data.size () == width * height")
    _write_file(path, write_pgm_stream, payload, width, height)


def write_ppm(path: PathType, data, width: int, height: int) -> None:
    """Write a PPM file.

    *data* is either raw RGB bytes (or a uint8 array), or a sequence of floats
    in [0, 1] converted with :func:`float_to_byte_color`.
    """
    payload = _raw_bytes(data)
    if payload is None:
        payload = float_to_byte_color(data)
    assert_that(len(payload) == width * height * 3, "data.size () == width * height * 3")
    _write_file(path, write_ppm_stream, payload, width, height)


def _getline(stream: BinaryIO) -> str:
    raw = stream.readline()
    if not raw:
        raise StreamFailure("read")
    line = raw.decode("latin-1")
    return line[:-1] if line.endswith("\n") else line


def _header_numbers(line: str, limit: int) -> list[int]:
    numbers: list[int] = []
    rest = line
    while len(numbers) < limit:
        rest = rest.lstrip(_C_WHITESPACE)
        if not rest:
            break
        match = _NUMBER.match(rest)
        if match is None:
            raise StreamFailure("read")
        numbers.append(int(match.group()))
        rest = rest[match.end():]
    return numbers


def read_pgm_stream(stream: BinaryIO) -> PgmImage:
    """Read a binary PGM image; pixel values are divided by the maximum value."""
    magic = _getline(stream)
    assert_that(magic == "P5", 'line == "P5"', "Not a binary pgm image")

    header: list[int] = []
    while len(header) < 3:
        line = _getline(stream)
        if line.startswith("#"):
            continue
        header.extend(_header_numbers(line, 3 - len(header)))
    width, height, maxval = header

    count = width * height
    raw = stream.read(count)
    if len(raw) < count:
        raise StreamFailure("read")
    assert_that(stream.read(1) == b"", "chr == -1", "Expected EOF")

    with np.errstate(divide="ignore", invalid="ignore"):
        data = np.frombuffer(raw, dtype=np.uint8).astype(np.float32) / np.float32(maxval)
    return PgmImage(data=data, width=width, height=height)


def read_pgm(path: PathType) -> PgmImage:
    """Read a binary PGM image from a file."""
    try:
        stream = open(path, "rb")
    except OSError as exc:
        raise OSCallError("open", exc.errno or 0) from exc
    with stream:
        try:
            return read_pgm_stream(stream)
        except OSError as exc:
            raise OSCallError("read", exc.errno or 0) from exc