import math

import numpy as np
import pytest

from stereodisp.disparity import (
    DISPARITY_RANGE,
    GRID_SIZE,
    disparity_map,
    main,
    tile_image,
    value_at,
)
from stereodisp.image import read_pgm, write_pgm


def _random_image(shape, seed):
    rng = np.random.default_rng(seed)
    return rng.random(shape).astype(np.float32)


def test_value_at_inside_returns_pixel():
    image = [0.1, 0.2, 0.3, 0.4, 0.5, 0.6]
    assert value_at(image, 3, 2, 1, 1) == pytest.approx(image[4])
    assert value_at(image, 3, 2, 2, 0) == pytest.approx(image[2])


@pytest.mark.parametrize("i,j", [(-1, 0), (3, 0), (0, -1), (0, 2)])
def test_value_at_outside_is_zero(i, j):
    image = [0.1, 0.2, 0.3, 0.4, 0.5, 0.6]
    assert value_at(image, 3, 2, i, j) == 0.0


def test_tile_image_repeats_periodically():
    data = [1.0, 2.0, 3.0, 4.0]
    tiled = tile_image(data, 2, 2, 3, 3)
    assert tiled.tolist() == [1.0, 2.0, 1.0, 3.0, 4.0, 3.0, 1.0, 2.0, 1.0]


def test_tile_image_same_size_is_identity():
    data = _random_image(12, 1)
    assert np.array_equal(tile_image(data, 4, 3, 4, 3), data)


def test_tile_image_rejects_empty_source():
    with pytest.raises(ValueError):
        tile_image([], 0, 0, 2, 2)


def test_tile_image_rejects_wrong_length():
    with pytest.raises(ValueError):
        tile_image([1.0, 2.0, 3.0], 2, 2, 4, 4)


def test_identical_images_give_zero_disparity():
    n = 12
    image = _random_image(n * n, 2)
    result = disparity_map(image, image, n, n, n, n)
    assert result.shape == (n * n,)
    assert result.tolist() == [0.0] * (n * n)


def test_shifted_image_recovers_shift():
    n, shift = 24, 3
    field = _random_image((n, n + shift), 3)
    left = field[:, :n].ravel()
    right = field[:, shift:shift + n].ravel()
    result = disparity_map(left, right, n, n, n, n)
    for x in range(shift, n - 10):
        for y in range(n):
            assert round(float(result[n * y + x]) * DISPARITY_RANGE) == shift


def test_results_are_disparity_steps_in_unit_range():
    n = 10
    result = disparity_map(_random_image(n * n, 4), _random_image(n * n, 5), n, n, n, n)
    values = result.tolist()
    assert min(values) >= 0.0
    assert max(values) <= 1.0
    for value in values:
        steps = value * DISPARITY_RANGE
        assert steps == pytest.approx(round(steps), abs=1e-3)


def test_unwritten_entries_are_nan():
    result = disparity_map(_random_image(16, 6), _random_image(16, 7), 2, 2, 4, 4)
    flags = [math.isnan(v) for v in result.tolist()]
    assert flags == [False] * 4 + [True] * 12


def test_no_improvement_keeps_initial_value():
    n = 6
    left = np.full(n * n, 1000.0, dtype=np.float32)
    right = np.zeros(n * n, dtype=np.float32)
    result = disparity_map(left, right, n, n, n, n)
    assert result.tolist() == [0.0] * (n * n)


def test_empty_region_leaves_everything_unwritten():
    result = disparity_map(_random_image(9, 8), _random_image(9, 9), 0, 0, 3, 3)
    values = result.tolist()
    assert len(values) == 9
    assert sum(1 for v in values if math.isnan(v)) == 9


def test_size_mismatch_raises():
    with pytest.raises(ValueError):
        disparity_map([0.0] * 5, [0.0] * 4, 2, 2, 2, 2)


def test_output_index_out_of_range_raises():
    with pytest.raises(IndexError):
        disparity_map([0.0] * 4, [0.0] * 4, 3, 1, 2, 2)


def test_main_writes_disparity_image(tmp_path, capsys):
    left_path = tmp_path / "left.pgm"
    right_path = tmp_path / "right.pgm"
    out_path = tmp_path / "out.pgm"
    pixels = bytes(range(0, 160, 10))
    write_pgm(left_path, pixels, 4, 4)
    write_pgm(right_path, pixels, 4, 4)

    code = main(["--left", str(left_path), "--right", str(right_path),
                 "--output", str(out_path)])

    assert code == 0
    image = read_pgm(out_path)
    assert (image.width, image.height) == GRID_SIZE
    assert "Disparity image result generated" in capsys.readouterr().out


def test_main_missing_input_fails(tmp_path, capsys):
    code = main(["--left", str(tmp_path / "absent.pgm"),
                 "--right", str(tmp_path / "absent2.pgm"),
                 "--output", str(tmp_path / "out.pgm")])
    assert code == 1
    assert not (tmp_path / "out.pgm").exists()
    assert "open" in capsys.readouterr().err