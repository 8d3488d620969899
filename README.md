# stereodisp

`stereodisp` computes a disparity map from a pair of stereo images with a
sum-of-squared-differences block matcher. It reads and writes binary PGM (P5)
images and can write false-colour PPM (P6) images. It also has helpers for
timing runs and for reporting errors.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Command line

```
stereodisp [--left LEFT] [--right RIGHT] [--output OUTPUT]
```

By default the command reads `scene1.pgm` and `scene2.pgm` from the current
directory. It tiles both images periodically to fill the working grid of
384 x 288 pixels (`stereodisp.disparity.GRID_SIZE`) and computes the disparity
map. The result goes to `Disparity_map_cpu_scene_result.pgm`, and the time the
computation took is printed. The same entry point runs with
`python -m stereodisp.disparity`.

If an image cannot be read, or the sizes do not fit, the command prints the
error to standard error and exits with status 1.

## Library use

```python
from stereodisp.disparity import GRID_SIZE, disparity_map, tile_image
from stereodisp.image import read_pgm, write_pgm
from stereodisp.timespan import current_time

left = read_pgm("scene1.pgm")
right = read_pgm("scene2.pgm")
count_x, count_y = GRID_SIZE

left_tiled = tile_image(left.data, left.width, left.height, count_x, count_y)
right_tiled = tile_image(right.data, right.width, right.height, count_x, count_y)

start = current_time()
result = disparity_map(left_tiled, right_tiled, left.width, left.height, count_x, count_y)
print("elapsed:", (current_time() - start).to_string())

write_pgm("disparity.pgm", result, count_x, count_y)
```

`disparity_map` compares an 11 x 11 window (`WINDOW_SIZE`) in the first image
with the window shifted by each disparity from 0 to 100 (`DISPARITY_RANGE`) in
the second image. For each pixel it stores the first disparity with the
smallest sum, divided by `DISPARITY_RANGE`, so values lie in [0, 1]. Pixels
outside the images read as 0. Entries of the result that are never written are
NaN. `write_pgm` writes NaN as white.

Modules:

- `stereodisp.disparity`: `value_at`, `tile_image`, `disparity_map`, and the `main` command entry point.
- `stereodisp.image`: `read_pgm`, `read_pgm_stream`, `write_pgm`, `write_pgm_stream`, `write_ppm`, `write_ppm_stream`, `float_to_byte`, `float_to_byte_color`, and the `PgmImage` dataclass (`data`, `width`, `height`).
- `stereodisp.timespan`: `TimeSpan`, a span of time in whole microseconds.
  - It has `from_seconds`, `parse`, `to_string`, the `seconds` and `milliseconds` properties, and arithmetic.
  - The module also provides `current_time`, `cpu_time`, `cpu_system_time` and `cpu_user_time`.
- `stereodisp.checked`: `checked_cast` for range-checked conversion between `IntType` kinds. It raises `ConversionOverflowError` when a value does not fit.
- `stereodisp.errors`: the exception hierarchy (`CoreError`, `AssertionFailure`, `AbortCalled`, `OSCallError`, `StreamFailure`) and the helpers `assert_that`, `abort`, `errnum_to_string` and `check_result`.
- `stereodisp.clerror`: helpers for compute-API status codes.
  - `get_error_string` names a status code. `OpenCLError` and `BuildError` are the exceptions for failed calls and builds.
  - `logs_to_string` and `build_warnings` format per-device build logs.
  - `load_program_source` reads a kernel source file as text. `elapsed_time` turns a pair of nanosecond profiling timestamps into a `TimeSpan`.

## What it does not do

All computation runs on the CPU with NumPy. The package does not find, select
or run on a GPU or other accelerator device. It does not compile or launch
kernels, so it produces no accelerator result and no speed-up figure. The
`stereodisp.clerror` helpers only name and format status codes, build logs and
timestamps that you supply. They do not call any compute API themselves.