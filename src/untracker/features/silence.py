"""Cheap pre-render pass deciding whether an isolated voice makes any sound."""

from __future__ import annotations

import logging

import numpy as np

from ..constants.audio import ChannelLayout, Interpolation
from ..constants.render_defaults import LIMITS, RenderLimits
from ..protocols import EngineError, PlaybackEngine, RenderParam
from .reader import block_buffer, max_blocks, reader_for


logger = logging.getLogger(__name__)


def is_audible(
    engine: PlaybackEngine,
    layout: ChannelLayout,
    sample_rate: int,
    *,
    limits: RenderLimits = LIMITS,
) -> bool:
    """Render from the start at nearest-neighbour quality until a sample is heard.

    Returns ``True`` on the first sample whose magnitude exceeds
    ``limits.silence_epsilon``. Returns ``False`` when playback reaches the
    end (99% of the duration or a zero-frame read) without one. The engine's
    interpolation filter is restored and playback is rewound to 0 on every
    exit path.
    """

    try:
        saved_filter = engine.get_render_param(RenderParam.INTERPOLATIONFILTER_LENGTH)
    except EngineError as exc:
        logger.debug("Interpolation filter not readable (%s); probing at current quality", exc)
        saved_filter = None
    if saved_filter is not None:
        try:
            engine.set_render_param(RenderParam.INTERPOLATIONFILTER_LENGTH, Interpolation.NEAREST.filter_length)
        except EngineError as exc:
            logger.warning("Engine rejected nearest-neighbour probing (%s); probing at current quality", exc)
            saved_filter = None

    read = reader_for(engine, layout)
    buffer = block_buffer(layout, limits.block_frames)
    channels = layout.channels

    try:
        engine.set_position_seconds(0.0)
        duration = engine.get_duration_seconds()
        end_threshold = duration * (1.0 - limits.duration_tolerance)
        bound = max_blocks(duration, sample_rate, limits.block_frames, limits)

        for _ in range(bound):
            frames = read(sample_rate, limits.block_frames, buffer)
            if frames <= 0:
                return False
            if np.any(np.abs(buffer[: frames * channels]) > limits.silence_epsilon):
                return True
            if duration > 0 and engine.get_position_seconds() >= end_threshold:
                return False

        logger.warning("Silence probe stopped after %d blocks without reaching the end", bound)
        return False
    finally:
        if saved_filter is not None:
            try:
                engine.set_render_param(RenderParam.INTERPOLATIONFILTER_LENGTH, saved_filter)
            except EngineError as exc:
                logger.warning("Could not restore interpolation filter length %s: %s", saved_filter, exc)
        engine.set_position_seconds(0.0)


__all__ = ["is_audible"]
