[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stereodisp"
version = "0.1.0"
description = "Stereo disparity maps from PGM image pairs by SSD block matching, with PGM/PPM image I/O and timing helpers"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["stereo", "disparity", "block matching", "pgm", "ppm", "image processing"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Processing",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
stereodisp = "stereodisp.disparity:main"

[tool.hatch.build.targets.wheel]
packages = ["stereodisp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
