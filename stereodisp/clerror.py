"""OpenCL error reporting, build-log formatting, program source loading and event timing."""

from __future__ import annotations

from os import PathLike
from typing import Iterable, Optional, Sequence, Union

from stereodisp.errors import CoreError, OSCallError
from stereodisp.timespan import TimeSpan

__all__ = [
    "OpenCLError",
    "BuildError",
    "get_error_string",
    "logs_to_string",
    "build_warnings",
    "load_program_source",
    "elapsed_time",
]

PathType = Union[str, "PathLike[str]"]

_ERROR_NAMES: dict[int, str] = {
    0: "CL_SUCCESS",
    -1: "CL_DEVICE_NOT_FOUND",
    -2: "CL_DEVICE_NOT_AVAILABLE",
    -3: "CL_COMPILER_NOT_AVAILABLE",
    -4: "CL_MEM_OBJECT_ALLOCATION_FAILURE",
    -5: "CL_OUT_OF_RESOURCES",
    -6: "CL_OUT_OF_HOST_MEMORY",
    -7: "CL_PROFILING_INFO_NOT_AVAILABLE",
    -8: "CL_MEM_COPY_OVERLAP",
    -9: "CL_IMAGE_FORMAT_MISMATCH",
    -10: "CL_IMAGE_FORMAT_NOT_SUPPORTED",
    -11: "CL_BUILD_PROGRAM_FAILURE",
    -12: "CL_MAP_FAILURE",
    -13: "CL_MISALIGNED_SUB_BUFFER_OFFSET",
    -14: "CL_EXEC_STATUS_ERROR_FOR_EVENTS_IN_WAIT_LIST",
    -30: "CL_INVALID_VALUE",
    -31: "CL_INVALID_DEVICE_TYPE",
    -32: "CL_INVALID_PLATFORM",
    -33: "CL_INVALID_DEVICE",
    -34: "CL_INVALID_CONTEXT",
    -35: "CL_INVALID_QUEUE_PROPERTIES",
    -36: "CL_INVALID_COMMAND_QUEUE",
    -37: "CL_INVALID_HOST_PTR",
    -38: "CL_INVALID_MEM_OBJECT",
    -39: "CL_INVALID_IMAGE_FORMAT_DESCRIPTOR",
    -40: "CL_INVALID_IMAGE_SIZE",
    -41: "CL_INVALID_SAMPLER",
    -42: "CL_INVALID_BINARY",
    -43: "CL_INVALID_BUILD_OPTIONS",
    -44: "CL_INVALID_PROGRAM",
    -45: "CL_INVALID_PROGRAM_EXECUTABLE",
    -46: "CL_INVALID_KERNEL_NAME",
    -47: "CL_INVALID_KERNEL_DEFINITION",
    -48: "CL_INVALID_KERNEL",
    -49: "CL_INVALID_ARG_INDEX",
    -50: "CL_INVALID_ARG_VALUE",
    -51: "CL_INVALID_ARG_SIZE",
    -52: "CL_INVALID_KERNEL_ARGS",
    -53: "CL_INVALID_WORK_DIMENSION",
    -54: "CL_INVALID_WORK_GROUP_SIZE",
    -55: "CL_INVALID_WORK_ITEM_SIZE",
    -56: "CL_INVALID_GLOBAL_OFFSET",
    -57: "CL_INVALID_EVENT_WAIT_LIST",
    -58: "CL_INVALID_EVENT",
    -59: "CL_INVALID_OPERATION",
    -60: "CL_INVALID_GL_OBJECT",
    -61: "CL_INVALID_BUFFER_SIZE",
    -62: "CL_INVALID_MIP_LEVEL",
    -63: "CL_INVALID_GLOBAL_WORK_SIZE",
    -64: "CL_INVALID_PROPERTY",
}

_ULONG_MOD = 1 << 64


def get_error_string(code: int) -> str:
    """Return the symbolic name of an OpenCL error code, or the number itself."""
    return _ERROR_NAMES.get(code, str(code))


class OpenCLError(CoreError):
    """Raised when an OpenCL call returns an error code."""

    def __init__(self, code: int, err_str: Optional[str] = None) -> None:
        super().__init__()
        self.code = code
        self.err_str = err_str

    def _origin(self) -> str:
        return self.err_str if self.err_str else "empty"

    def message(self) -> str:
        return f"OpenCL Error: {self._origin()}: {get_error_string(self.code)}"


class BuildError(OpenCLError):
    """Raised when building an OpenCL program fails; carries one log per device."""

    def __init__(self, code: int, err_str: Optional[str], logs: Sequence[str]) -> None:
        super().__init__(code, err_str)
        self.logs = list(logs)

    def message(self) -> str:
        return (
            f"OpenCL Build Error: {self._origin()}: {get_error_string(self.code)}\n"
            + logs_to_string(self.logs)
        )


def logs_to_string(logs: Iterable[str]) -> str:
    """Format per-device build logs, quoting every log line with ``> ``."""
    parts = []
    for index, log in enumerate(logs):
        text = "\n" + log
        if text.endswith("\n"):
            text = text[:-1]
        text = text.replace("\n", "\n> ")
        parts.append(f"Build log for device {index}:{text}\n\n")
    return "".join(parts)


def build_warnings(logs: Iterable[str]) -> str:
    """Return the warning report for build logs, or ``""`` if every log is blank."""
    logs = list(logs)
    if not any(log.strip() for log in logs):
        return ""
    return "Got warnings while compiling OpenCL code:\n" + logs_to_string(logs)


def load_program_source(path: PathType) -> str:
    """Read the text of an OpenCL program source file."""
    try:
        stream = open(path, "r", encoding="utf-8", newline="")
    except OSError as exc:
        raise OSCallError("open", exc.errno or 0) from exc
    with stream:
        try:
            return stream.read()
        except OSError as exc:
            raise OSCallError("read", exc.errno or 0) from exc


def elapsed_time(start_ns: int, end_ns: int) -> TimeSpan:
    """Return the time between two profiling timestamps, rounded to microseconds.

    Timestamps are unsigned 64-bit nanosecond counters; the difference wraps
    around as such.
    """
    nanoseconds = (end_ns - start_ns) % _ULONG_MOD
    return TimeSpan(((nanoseconds + 500) % _ULONG_MOD) // 1000)