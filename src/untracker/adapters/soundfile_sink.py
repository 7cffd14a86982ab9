"""soundfile (libsndfile) output sink for rendered stems."""

from __future__ import annotations

import logging
import pathlib
from typing import Optional

import numpy as np
import soundfile as sf

from ..util.config import RenderConfig


logger = logging.getLogger(__name__)


class SoundFileSink:
    """Write-once sink taking interleaved float32 blocks."""

    def __init__(self, handle: sf.SoundFile, channels: int):
        self._handle = handle
        self._channels = channels
        self.closed = False

    @property
    def path(self) -> str:
        return self._handle.name

    def write(self, frames: np.ndarray) -> int:
        """Write an interleaved block; return how many frames made it to disk."""
        block = np.ascontiguousarray(frames, dtype=np.float32).reshape(-1, self._channels)
        before = self._handle.frames
        try:
            self._handle.write(block)
        except (RuntimeError, AssertionError) as exc:
            # soundfile asserts on short writes and raises LibsndfileError otherwise
            logger.error("Write to %s failed: %s", self.path, exc)
        return int(self._handle.frames - before)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._handle.close()


def open_stem_sink(path: str | pathlib.Path, config: RenderConfig) -> Optional[SoundFileSink]:
    """Open *path* for writing; return ``None`` (and log) instead of raising."""

    kwargs = {}
    level = config.compression_level
    if level is not None:
        kwargs["compression_level"] = min(max(level, 0.0), 1.0)

    try:
        handle = sf.SoundFile(
            str(path),
            mode="w",
            samplerate=config.sample_rate,
            channels=config.channels,
            format=config.output_format.container,
            subtype=config.subtype,
            **kwargs,
        )
    except (OSError, RuntimeError, ValueError, TypeError) as exc:
        logger.error("Could not create output file %s: %s", path, exc)
        return None

    logger.debug(
        "Opened %s (%s/%s, %d Hz, %d ch)",
        path,
        config.output_format.container,
        config.subtype,
        config.sample_rate,
        config.channels,
    )
    return SoundFileSink(handle, config.channels)


__all__ = ["SoundFileSink", "open_stem_sink"]
