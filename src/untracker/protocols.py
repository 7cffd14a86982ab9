"""Interfaces the extraction pipeline needs from its external collaborators."""

from __future__ import annotations

from enum import IntEnum
from typing import Protocol, Sequence

import numpy as np


class EngineError(RuntimeError):
    """A single playback-engine call was rejected."""


class ModuleLoadError(RuntimeError):
    """The playback engine could not load the module."""


class RenderParam(IntEnum):
    """Engine render parameter ids (libopenmpt numbering)."""

    MASTERGAIN_MILLIBEL = 1
    STEREOSEPARATION_PERCENT = 2
    INTERPOLATIONFILTER_LENGTH = 3
    VOLUMERAMPING_STRENGTH = 4


class PlaybackEngine(Protocol):
    def get_num_instruments(self) -> int: ...

    def get_num_samples(self) -> int: ...

    def get_num_channels(self) -> int: ...

    def get_metadata(self, key: str) -> str: ...

    def get_instrument_names(self) -> Sequence[str]: ...

    def get_sample_names(self) -> Sequence[str]: ...

    def get_render_param(self, param: RenderParam) -> int: ...

    def set_render_param(self, param: RenderParam, value: int) -> None: ...

    def get_position_seconds(self) -> float: ...

    def set_position_seconds(self, seconds: float) -> float: ...

    def get_duration_seconds(self) -> float: ...

    def set_instrument_mute_status(self, index: int, mute: bool) -> None: ...

    def get_instrument_mute_status(self, index: int) -> bool: ...

    def read_mono(self, sample_rate: int, count: int, buffer: np.ndarray) -> int: ...

    def read_interleaved_stereo(self, sample_rate: int, count: int, buffer: np.ndarray) -> int: ...

    def read_interleaved_quad(self, sample_rate: int, count: int, buffer: np.ndarray) -> int: ...


class AudioSink(Protocol):
    def write(self, frames: np.ndarray) -> int: ...

    def close(self) -> None: ...


__all__ = [
    "AudioSink",
    "EngineError",
    "ModuleLoadError",
    "PlaybackEngine",
    "RenderParam",
]
