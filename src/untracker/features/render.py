"""Full-quality render of one isolated voice into an output file."""

from __future__ import annotations

import logging
import pathlib
from typing import Callable, Optional

from ..constants.render_defaults import LIMITS, RenderLimits
from ..protocols import AudioSink, EngineError, PlaybackEngine
from ..util.config import RenderConfig
from .outcome import StemOutcome
from .reader import block_buffer, max_blocks, reader_for


logger = logging.getLogger(__name__)

SinkOpener = Callable[[pathlib.Path, RenderConfig], Optional[AudioSink]]


def _discard(path: pathlib.Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove partial file %s: %s", path, exc)
    else:
        logger.debug("Removed partial file %s", path)


def render_stem(
    engine: PlaybackEngine,
    path: pathlib.Path,
    config: RenderConfig,
    *,
    open_sink: SinkOpener,
    limits: RenderLimits = LIMITS,
) -> StemOutcome:
    """Stream the engine's output for the current mute state into *path*.

    Expects playback at position 0 and the configured interpolation already
    applied. The sink is closed exactly once on every path; on a short write
    or an engine failure the partial file is deleted and a write-error
    outcome is returned instead of raising.
    """

    path = pathlib.Path(path)
    sink = open_sink(path, config)
    if sink is None:
        return StemOutcome.write_error(f"could not open {path}", path=path)

    layout = config.channel_layout
    channels = layout.channels
    read = reader_for(engine, layout)
    buffer = block_buffer(layout, limits.block_frames)
    bound = max_blocks(engine.get_duration_seconds(), config.sample_rate, limits.block_frames, limits)

    failure: Optional[str] = None
    total_frames = 0
    try:
        for _ in range(bound):
            frames = read(config.sample_rate, limits.block_frames, buffer)
            if frames <= 0:
                break
            written = sink.write(buffer[: frames * channels])
            total_frames += max(written, 0)
            if written != frames:
                failure = f"wrote {written} of {frames} frames"
                break
        else:
            logger.warning("Render of %s stopped after %d blocks; output may be truncated", path.name, bound)
    except EngineError as exc:
        failure = f"engine error: {exc}"
    finally:
        sink.close()

    if failure is not None:
        logger.error("Error writing %s: %s", path, failure)
        _discard(path)
        return StemOutcome.write_error(failure, path=path)

    logger.debug("Rendered %d frames (%.2fs) into %s", total_frames, total_frames / config.sample_rate, path)
    return StemOutcome.written(path)


__all__ = ["render_stem"]
