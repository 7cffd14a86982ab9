"""libopenmpt playback engine reached through ctypes.

Only the slice of the C API the extractor needs is bound: module loading
through the "ext" entry points (for the ``interactive`` mute interface),
counts/names/metadata, render parameters, position/duration and the three
float read functions.
"""

from __future__ import annotations

import ctypes
import ctypes.util
import logging
import pathlib
from ctypes import POINTER, byref, c_char_p, c_double, c_float, c_int, c_int32, c_size_t, c_void_p
from typing import List, Optional

import numpy as np

from ..protocols import EngineError, ModuleLoadError, RenderParam


logger = logging.getLogger(__name__)

_LIBRARY_NAMES = ("libopenmpt.so.0", "libopenmpt.so", "libopenmpt.dylib", "libopenmpt.dll")
_INTERACTIVE_ID = b"interactive"

_lib: Optional[ctypes.CDLL] = None


class _Interactive(ctypes.Structure):
    """openmpt_module_ext_interface_interactive (function table, declaration order)."""

    _fields_ = [
        ("set_current_speed", ctypes.CFUNCTYPE(c_int, c_void_p, c_int32)),
        ("set_current_tempo", ctypes.CFUNCTYPE(c_int, c_void_p, c_int32)),
        ("set_tempo_factor", ctypes.CFUNCTYPE(c_int, c_void_p, c_double)),
        ("get_tempo_factor", ctypes.CFUNCTYPE(c_double, c_void_p)),
        ("set_pitch_factor", ctypes.CFUNCTYPE(c_int, c_void_p, c_double)),
        ("get_pitch_factor", ctypes.CFUNCTYPE(c_double, c_void_p)),
        ("set_global_volume", ctypes.CFUNCTYPE(c_int, c_void_p, c_double)),
        ("get_global_volume", ctypes.CFUNCTYPE(c_double, c_void_p)),
        ("set_channel_volume", ctypes.CFUNCTYPE(c_int, c_void_p, c_int32, c_double)),
        ("get_channel_volume", ctypes.CFUNCTYPE(c_double, c_void_p, c_int32)),
        ("set_channel_mute_status", ctypes.CFUNCTYPE(c_int, c_void_p, c_int32, c_int)),
        ("get_channel_mute_status", ctypes.CFUNCTYPE(c_int, c_void_p, c_int32)),
        ("set_instrument_mute_status", ctypes.CFUNCTYPE(c_int, c_void_p, c_int32, c_int)),
        ("get_instrument_mute_status", ctypes.CFUNCTYPE(c_int, c_void_p, c_int32)),
        ("play_note", ctypes.CFUNCTYPE(c_int32, c_void_p, c_int32, c_int32, c_double, c_double)),
        ("stop_note", ctypes.CFUNCTYPE(c_int, c_void_p, c_int32)),
    ]


def _declare(lib: ctypes.CDLL) -> None:
    # openmpt_module_ext * openmpt_module_ext_create_from_memory(const void *, size_t,
    #     log_func, void *, error_func, void *, int *, const char **, const ctls *)
    lib.openmpt_module_ext_create_from_memory.argtypes = [
        c_void_p, c_size_t, c_void_p, c_void_p, c_void_p, c_void_p,
        POINTER(c_int), POINTER(c_void_p), c_void_p,
    ]
    lib.openmpt_module_ext_create_from_memory.restype = c_void_p
    lib.openmpt_module_ext_destroy.argtypes = [c_void_p]
    lib.openmpt_module_ext_destroy.restype = None
    lib.openmpt_module_ext_get_module.argtypes = [c_void_p]
    lib.openmpt_module_ext_get_module.restype = c_void_p
    lib.openmpt_module_ext_get_interface.argtypes = [c_void_p, c_char_p, c_void_p, c_size_t]
    lib.openmpt_module_ext_get_interface.restype = c_int

    for name in ("num_instruments", "num_samples", "num_channels"):
        fn = getattr(lib, f"openmpt_module_get_{name}")
        fn.argtypes = [c_void_p]
        fn.restype = c_int32

    # returned strings are owned by the caller and released via openmpt_free_string
    for name in ("instrument_name", "sample_name"):
        fn = getattr(lib, f"openmpt_module_get_{name}")
        fn.argtypes = [c_void_p, c_int32]
        fn.restype = c_void_p
    lib.openmpt_module_get_metadata.argtypes = [c_void_p, c_char_p]
    lib.openmpt_module_get_metadata.restype = c_void_p
    lib.openmpt_free_string.argtypes = [c_void_p]
    lib.openmpt_free_string.restype = None

    lib.openmpt_module_set_render_param.argtypes = [c_void_p, c_int, c_int32]
    lib.openmpt_module_set_render_param.restype = c_int
    lib.openmpt_module_get_render_param.argtypes = [c_void_p, c_int, POINTER(c_int32)]
    lib.openmpt_module_get_render_param.restype = c_int

    lib.openmpt_module_set_position_seconds.argtypes = [c_void_p, c_double]
    lib.openmpt_module_set_position_seconds.restype = c_double
    lib.openmpt_module_get_position_seconds.argtypes = [c_void_p]
    lib.openmpt_module_get_position_seconds.restype = c_double
    lib.openmpt_module_get_duration_seconds.argtypes = [c_void_p]
    lib.openmpt_module_get_duration_seconds.restype = c_double

    for name in ("read_float_mono", "read_interleaved_float_stereo", "read_interleaved_float_quad"):
        fn = getattr(lib, f"openmpt_module_{name}")
        fn.argtypes = [c_void_p, c_int32, c_size_t, POINTER(c_float)]
        fn.restype = c_size_t


def load_library() -> ctypes.CDLL:
    """Locate and bind libopenmpt once per process."""

    global _lib
    if _lib is not None:
        return _lib

    candidates: List[str] = []
    found = ctypes.util.find_library("openmpt")
    if found:
        candidates.append(found)
    candidates.extend(_LIBRARY_NAMES)

    errors = []
    for candidate in candidates:
        try:
            lib = ctypes.CDLL(candidate)
        except OSError as exc:
            errors.append(f"{candidate}: {exc}")
            continue
        _declare(lib)
        logger.debug("Loaded libopenmpt from %s", candidate)
        _lib = lib
        return lib

    raise ModuleLoadError("libopenmpt shared library not found (" + "; ".join(errors) + ")")


class OpenMPTModule:
    """A loaded module plus its optional interactive (mute) interface."""

    def __init__(self, data: bytes, lib: Optional[ctypes.CDLL] = None):
        self._lib = lib or load_library()
        self._data = ctypes.create_string_buffer(data, len(data))
        error = c_int(0)
        message = c_void_p()
        handle = self._lib.openmpt_module_ext_create_from_memory(
            ctypes.cast(self._data, c_void_p), len(data),
            None, None, None, None,
            byref(error), byref(message), None,
        )
        if not handle:
            detail = self._take_string(message.value) or f"error {error.value}"
            raise ModuleLoadError(f"libopenmpt could not load module: {detail}")

        self._ext = handle
        self._mod = self._lib.openmpt_module_ext_get_module(handle)

        self._interactive: Optional[_Interactive] = _Interactive()
        ok = self._lib.openmpt_module_ext_get_interface(
            handle, _INTERACTIVE_ID, ctypes.addressof(self._interactive), ctypes.sizeof(_Interactive)
        )
        if not ok:
            logger.warning("libopenmpt interactive interface unavailable; voices cannot be muted")
            self._interactive = None

    # -------- lifecycle --------
    def close(self) -> None:
        if self._ext:
            self._lib.openmpt_module_ext_destroy(self._ext)
            self._ext = None
            self._mod = None

    def __enter__(self) -> "OpenMPTModule":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -------- strings --------
    def _take_string(self, ptr: Optional[int]) -> str:
        if not ptr:
            return ""
        try:
            return ctypes.string_at(ptr).decode("utf-8", errors="replace")
        finally:
            self._lib.openmpt_free_string(ptr)

    # -------- counts / names / metadata --------
    def get_num_instruments(self) -> int:
        return int(self._lib.openmpt_module_get_num_instruments(self._mod))

    def get_num_samples(self) -> int:
        return int(self._lib.openmpt_module_get_num_samples(self._mod))

    def get_num_channels(self) -> int:
        return int(self._lib.openmpt_module_get_num_channels(self._mod))

    def get_metadata(self, key: str) -> str:
        return self._take_string(self._lib.openmpt_module_get_metadata(self._mod, key.encode("utf-8")))

    def get_instrument_names(self) -> List[str]:
        fn = self._lib.openmpt_module_get_instrument_name
        return [self._take_string(fn(self._mod, i)) for i in range(self.get_num_instruments())]

    def get_sample_names(self) -> List[str]:
        fn = self._lib.openmpt_module_get_sample_name
        return [self._take_string(fn(self._mod, i)) for i in range(self.get_num_samples())]

    # -------- render params --------
    def get_render_param(self, param: RenderParam) -> int:
        value = c_int32(0)
        if not self._lib.openmpt_module_get_render_param(self._mod, int(param), byref(value)):
            raise EngineError(f"could not read render param {RenderParam(param).name}")
        return int(value.value)

    def set_render_param(self, param: RenderParam, value: int) -> None:
        if not self._lib.openmpt_module_set_render_param(self._mod, int(param), int(value)):
            raise EngineError(f"could not set render param {RenderParam(param).name}={value}")

    # -------- position --------
    def get_position_seconds(self) -> float:
        return float(self._lib.openmpt_module_get_position_seconds(self._mod))

    def set_position_seconds(self, seconds: float) -> float:
        return float(self._lib.openmpt_module_set_position_seconds(self._mod, float(seconds)))

    def get_duration_seconds(self) -> float:
        return float(self._lib.openmpt_module_get_duration_seconds(self._mod))

    # -------- muting --------
    def set_instrument_mute_status(self, index: int, mute: bool) -> None:
        if self._interactive is None:
            raise EngineError("interactive interface unavailable")
        if not self._interactive.set_instrument_mute_status(self._ext, int(index), int(bool(mute))):
            raise EngineError(f"{'mute' if mute else 'unmute'} rejected for voice {index}")

    def get_instrument_mute_status(self, index: int) -> bool:
        if self._interactive is None:
            raise EngineError("interactive interface unavailable")
        return bool(self._interactive.get_instrument_mute_status(self._ext, int(index)))

    # -------- rendering --------
    def _read(self, fn, sample_rate: int, count: int, buffer: np.ndarray, channels: int) -> int:
        if buffer.dtype != np.float32 or not buffer.flags["C_CONTIGUOUS"]:
            raise ValueError("buffer must be a contiguous float32 array")
        if buffer.size < count * channels:
            raise ValueError(f"buffer holds {buffer.size} samples, need {count * channels}")
        return int(fn(self._mod, int(sample_rate), int(count), buffer.ctypes.data_as(POINTER(c_float))))

    def read_mono(self, sample_rate: int, count: int, buffer: np.ndarray) -> int:
        return self._read(self._lib.openmpt_module_read_float_mono, sample_rate, count, buffer, 1)

    def read_interleaved_stereo(self, sample_rate: int, count: int, buffer: np.ndarray) -> int:
        return self._read(self._lib.openmpt_module_read_interleaved_float_stereo, sample_rate, count, buffer, 2)

    def read_interleaved_quad(self, sample_rate: int, count: int, buffer: np.ndarray) -> int:
        return self._read(self._lib.openmpt_module_read_interleaved_float_quad, sample_rate, count, buffer, 4)


def load_module(path: str | pathlib.Path) -> OpenMPTModule:
    """Read *path* and hand its bytes to libopenmpt.

    Raises ``OSError`` when the file cannot be read and ``ModuleLoadError``
    when libopenmpt is missing or rejects the data.
    """

    path = pathlib.Path(path)
    data = path.read_bytes()
    logger.debug("Read %d bytes from %s", len(data), path)
    module = OpenMPTModule(data)
    logger.info(
        "Loaded %s (%s, %.1fs)",
        path.name,
        module.get_metadata("type_long") or module.get_metadata("type") or "unknown type",
        module.get_duration_seconds(),
    )
    return module


__all__ = ["OpenMPTModule", "load_library", "load_module"]
