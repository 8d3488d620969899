"""Block-matching disparity map between two rectified grey-scale images."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

import numpy as np

from stereodisp.errors import CoreError
from stereodisp.image import read_pgm, write_pgm
from stereodisp.timespan import current_time

__all__ = [
    "WINDOW_SIZE",
    "DISPARITY_RANGE",
    "INITIAL_SSD",
    "WORK_GROUP_SIZE",
    "value_at",
    "tile_image",
    "disparity_map",
    "main",
]

WINDOW_SIZE = 11
DISPARITY_RANGE = 100
INITIAL_SSD = 99999.0
WORK_GROUP_SIZE = (16, 16)
GRID_SIZE = (WORK_GROUP_SIZE[0] * 24, WORK_GROUP_SIZE[1] * 18)

DEFAULT_LEFT = "scene1.pgm"
DEFAULT_RIGHT = "scene2.pgm"
DEFAULT_OUTPUT = "Disparity_map_cpu_scene_result.pgm"


def value_at(image: Sequence[float], count_x: int, count_y: int, i: int, j: int) -> float:
    """Return pixel (i, j) of a row-major image, or 0 outside the image."""
    if i < 0 or i >= count_x or j < 0 or j >= count_y:
        return 0.0
    return float(image[j * count_x + i])


def tile_image(data: Sequence[float], width: int, height: int,
               count_x: int, count_y: int) -> np.ndarray:
    """Repeat a width x height image periodically to fill count_x x count_y."""
    if count_x < 0 or count_y < 0:
        raise ValueError("grid size must not be negative")
    if count_x * count_y == 0:
        return np.zeros(0, dtype=np.float32)
    if width <= 0 or height <= 0:
        raise ValueError("cannot tile an empty image")
    source = np.asarray(data, dtype=np.float32).ravel()
    if source.size != width * height:
        raise ValueError(
            f"image has {source.size} values, expected {width * height}"
        )
    grid = source.reshape(height, width)
    rows = np.arange(count_y) % height
    cols = np.arange(count_x) % width
    return grid[rows[:, None], cols[None, :]].ravel()


def _as_image(values: Sequence[float], count: int, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float32).ravel()
    if arr.size != count:
        raise ValueError(f"{name} has {arr.size} values, expected {count}")
    return arr


def _padded(image: np.ndarray, count_x: int, count_y: int,
            width: int, height: int) -> np.ndarray:
    """Zero-padded canvas indexed [j, i + DISPARITY_RANGE] for every lookup needed."""
    extent = WINDOW_SIZE - 1
    canvas = np.zeros((width + extent, DISPARITY_RANGE + height + extent), dtype=np.float32)
    rows = min(count_y, width + extent)
    cols = min(count_x, height + extent)
    if rows > 0 and cols > 0:
        grid = image.reshape(count_y, count_x)
        canvas[:rows, DISPARITY_RANGE:DISPARITY_RANGE + cols] = grid[:rows, :cols]
    return canvas


def disparity_map(img1: Sequence[float], img2: Sequence[float], width: int, height: int,
                  count_x: int, count_y: int) -> np.ndarray:
    """Compute the sum-of-squared-differences disparity between two images.

    Both images are row-major with ``count_x`` columns and ``count_y`` rows;
    pixels outside them read as 0. For every ``x < height`` and ``y < width``
    the window of ``WINDOW_SIZE`` squared at ``(x, y)`` in *img1* is compared
    with the window shifted left by each disparity ``0..DISPARITY_RANGE`` in
    *img2*; the first disparity with the smallest sum, divided by
    ``DISPARITY_RANGE``, is stored at index ``width * y + x`` of the result.
    A pixel whose sums never fall below ``INITIAL_SSD`` keeps the value of the
    pixel processed before it. Entries never written are NaN.
    """
    if width < 0 or height < 0 or count_x < 0 or count_y < 0:
        raise ValueError("sizes must not be negative")
    count = count_x * count_y
    first = _as_image(img1, count, "img1")
    second = _as_image(img2, count, "img2")
    result = np.full(count, np.nan, dtype=np.float32)
    if width == 0 or height == 0:
        return result

    last_index = width * (width - 1) + height - 1
    if last_index >= count:
        raise IndexError(
            f"output index {last_index} is outside a result of {count} values"
        )

    pad1 = _padded(first, count_x, count_y, width, height)
    pad2 = _padded(second, count_x, count_y, width, height)
    windows1 = [
        pad1[h:h + width, DISPARITY_RANGE + w:DISPARITY_RANGE + w + height]
        for w in range(WINDOW_SIZE)
        for h in range(WINDOW_SIZE)
    ]

    # Arrays below are indexed [y, x].
    ssd_min = np.full((width, height), INITIAL_SSD, dtype=np.float32)
    best = np.zeros((width, height), dtype=np.float32)
    updated = np.zeros((width, height), dtype=bool)
    scale = np.float32(DISPARITY_RANGE)

    for disp in range(DISPARITY_RANGE + 1):
        ssd = np.zeros((width, height), dtype=np.float32)
        offsets = ((w, h) for w in range(WINDOW_SIZE) for h in range(WINDOW_SIZE))
        for window1, (w, h) in zip(windows1, offsets):
            start = DISPARITY_RANGE + w - disp
            diff = window1 - pad2[h:h + width, start:start + height]
            ssd += diff * diff
        better = ssd_min > ssd
        ssd_min = np.where(better, ssd, ssd_min)
        best = np.where(better, np.float32(disp) / scale, best)
        updated |= better

    # Processing order is x outer, y inner; carry the last value forward.
    order_values = best.T.ravel()
    order_updated = updated.T.ravel()
    positions = np.arange(order_values.size)
    source = np.maximum.accumulate(np.where(order_updated, positions, -1))
    filled = np.where(source >= 0, order_values[np.maximum(source, 0)], np.float32(0.0))

    xs, ys = np.meshgrid(np.arange(height), np.arange(width), indexing="ij")
    indices = (width * ys + xs).ravel()
    reversed_indices = indices[::-1]
    _, first_in_reversed = np.unique(reversed_indices, return_index=True)
    last_writes = indices.size - 1 - first_in_reversed
    result[indices[last_writes]] = filled[last_writes]
    return result


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="stereodisp",
        description="Compute a disparity map from a pair of binary PGM images.",
    )
    parser.add_argument("--left", default=DEFAULT_LEFT, help="left image (PGM)")
    parser.add_argument("--right", default=DEFAULT_RIGHT, help="right image (PGM)")
    parser.add_argument("--output", default=DEFAULT_OUTPUT, help="output image (PGM)")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Read two images, compute their disparity map and write it as a PGM."""
    args = _parse_args(argv)
    count_x, count_y = GRID_SIZE
    try:
        left = read_pgm(args.left)
        right = read_pgm(args.right)
        input1 = tile_image(left.data, left.width, left.height, count_x, count_y)
        input2 = tile_image(right.data, right.width, right.height, count_x, count_y)

        print("-------CPU Execution----------")
        start = current_time()
        output = disparity_map(input1, input2, left.width, left.height, count_x, count_y)
        cpu_time = current_time() - start
        write_pgm(args.output, output, count_x, count_y)
        print("-------CPU Execution Done----------")
    except (CoreError, ValueError, IndexError) as exc:
        print(f"stereodisp: {exc}", file=sys.stderr)
        return 1

    print("--------Performance Parameters-------------------")
    print(f"1. CPU execution time: {cpu_time}")
    print("--------Performance Parameters End---------------")
    print("Disparity image result generated")
    return 0


if __name__ == "__main__":
    sys.exit(main())