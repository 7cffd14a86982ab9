from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pytest

from untracker.protocols import EngineError, RenderParam


class FakeEngine:
    """In-memory playback engine.

    Every voice listed in ``levels`` contributes a constant sample value
    while unmuted; the output is the sum over unmuted voices, so a muted or
    level-0 voice is silent.
    """

    def __init__(
        self,
        *,
        instruments: int = 0,
        samples: int = 0,
        channels: int = 4,
        module_type: str = "it",
        instrument_names: Optional[Sequence[str]] = None,
        sample_names: Optional[Sequence[str]] = None,
        sample_names_error: bool = False,
        levels: Optional[Dict[int, float]] = None,
        duration: float = 0.5,
        reject_mute: Iterable[int] = (),
        fail_read_after: Optional[int] = None,
        never_ends: bool = False,
    ):
        self.instruments = instruments
        self.samples = samples
        self.channels = channels
        self.module_type = module_type
        self.instrument_names = list(instrument_names or [])
        self.sample_names = list(sample_names or [])
        self.sample_names_error = sample_names_error
        self.levels = dict(levels or {})
        self.duration = duration
        self.reject_mute = set(reject_mute)
        self.fail_read_after = fail_read_after
        self.never_ends = never_ends

        self.muted: Dict[int, bool] = {}
        self.mute_calls: List[tuple[int, bool]] = []
        self.params = {
            RenderParam.INTERPOLATIONFILTER_LENGTH: 4,
            RenderParam.STEREOSEPARATION_PERCENT: 100,
        }
        self.reads: List[tuple[str, int, int]] = []
        self._pos_s = 0.0

    # counts / names
    def get_num_instruments(self) -> int:
        return self.instruments

    def get_num_samples(self) -> int:
        return self.samples

    def get_num_channels(self) -> int:
        return self.channels

    def get_metadata(self, key: str) -> str:
        return self.module_type if key == "type" else ""

    def get_instrument_names(self) -> List[str]:
        return list(self.instrument_names)

    def get_sample_names(self) -> List[str]:
        if self.sample_names_error:
            raise EngineError("sample names not supported")
        return list(self.sample_names)

    # render params
    def get_render_param(self, param) -> int:
        return self.params[RenderParam(param)]

    def set_render_param(self, param, value: int) -> None:
        self.params[RenderParam(param)] = int(value)

    # position
    def get_position_seconds(self) -> float:
        return self._pos_s

    def set_position_seconds(self, seconds: float) -> float:
        self._pos_s = float(seconds)
        return self._pos_s

    def get_duration_seconds(self) -> float:
        return self.duration

    # muting
    def set_instrument_mute_status(self, index: int, mute: bool) -> None:
        self.mute_calls.append((index, bool(mute)))
        if index in self.reject_mute:
            raise EngineError(f"voice {index} cannot be muted")
        self.muted[index] = bool(mute)

    def get_instrument_mute_status(self, index: int) -> bool:
        return self.muted.get(index, False)

    # rendering
    def _level(self) -> float:
        return float(sum(level for idx, level in self.levels.items() if not self.muted.get(idx, False)))

    def _read(self, layout: str, width: int, sample_rate: int, count: int, buffer: np.ndarray) -> int:
        self.reads.append((layout, sample_rate, self.params[RenderParam.INTERPOLATIONFILTER_LENGTH]))
        if self.fail_read_after is not None and len(self.reads) > self.fail_read_after:
            raise EngineError("decoder crashed")
        if self.never_ends:
            frames = count
        else:
            remaining = int(round((self.duration - self._pos_s) * sample_rate))
            frames = max(0, min(count, remaining))
        buffer[: frames * width] = self._level()
        if not self.never_ends:
            self._pos_s += frames / float(sample_rate)
        return frames

    def read_mono(self, sample_rate: int, count: int, buffer: np.ndarray) -> int:
        return self._read("mono", 1, sample_rate, count, buffer)

    def read_interleaved_stereo(self, sample_rate: int, count: int, buffer: np.ndarray) -> int:
        return self._read("stereo", 2, sample_rate, count, buffer)

    def read_interleaved_quad(self, sample_rate: int, count: int, buffer: np.ndarray) -> int:
        return self._read("quad", 4, sample_rate, count, buffer)


class FakeSink:
    def __init__(self, path, channels: int, short_write_at: Optional[int] = None):
        self.path = path
        self.channels = channels
        self.short_write_at = short_write_at
        self.blocks: List[np.ndarray] = []
        self.close_calls = 0
        path.write_bytes(b"partial")

    def write(self, frames: np.ndarray) -> int:
        block = np.array(frames, dtype=np.float32).reshape(-1, self.channels)
        self.blocks.append(block)
        if self.short_write_at is not None and len(self.blocks) >= self.short_write_at:
            return len(block) - 1
        return len(block)

    def close(self) -> None:
        self.close_calls += 1


@pytest.fixture
def engine_factory():
    return FakeEngine


@pytest.fixture
def sink_recorder():
    """Sink opener that records every sink it hands out."""

    class _Recorder:
        def __init__(self):
            self.sinks: List[FakeSink] = []
            self.short_write_at: Optional[int] = None
            self.fail_open = False

        def __call__(self, path, config):
            if self.fail_open:
                return None
            sink = FakeSink(path, config.channels, self.short_write_at)
            self.sinks.append(sink)
            return sink

    return _Recorder()
