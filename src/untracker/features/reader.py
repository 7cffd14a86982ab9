"""Block reading shared by the silence probe and the stem renderer."""

from __future__ import annotations

import math
from typing import Callable

import numpy as np

from ..constants.audio import ChannelLayout
from ..constants.render_defaults import LIMITS, RenderLimits
from ..protocols import PlaybackEngine

BlockReader = Callable[[int, int, np.ndarray], int]


def reader_for(engine: PlaybackEngine, layout: ChannelLayout) -> BlockReader:
    """Pick the engine entry point that renders natively in *layout*."""
    if layout is ChannelLayout.MONO:
        return engine.read_mono
    if layout is ChannelLayout.STEREO:
        return engine.read_interleaved_stereo
    if layout is ChannelLayout.QUAD:
        return engine.read_interleaved_quad
    raise ValueError(f"Unsupported channel layout: {layout!r}")


def block_buffer(layout: ChannelLayout, block_frames: int = LIMITS.block_frames) -> np.ndarray:
    return np.zeros(block_frames * layout.channels, dtype=np.float32)


def max_blocks(
    duration_s: float,
    sample_rate: int,
    block_frames: int = LIMITS.block_frames,
    limits: RenderLimits = LIMITS,
) -> int:
    """Upper bound on reads for one pass, guarding against engines that never end."""
    if not duration_s or duration_s <= 0 or math.isnan(duration_s) or math.isinf(duration_s):
        duration_s = limits.unknown_duration_cap_s
    frames = duration_s * limits.overrun_factor * sample_rate
    return int(math.ceil(frames / block_frames)) + limits.slack_blocks
