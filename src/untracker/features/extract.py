"""Per-module extraction loop: isolate → probe → render, one voice at a time."""

from __future__ import annotations

import logging
import pathlib
import sys
from typing import List, Optional

# --- progress bars ---
from tqdm.auto import tqdm
PROGRESS_STREAM = sys.stdout
IS_TTY = PROGRESS_STREAM.isatty()

from ..protocols import EngineError, PlaybackEngine, RenderParam
from ..util.config import RenderConfig, WritingConfig
from ..util.helpers import atomic_json
from ..util.naming import derive_stem_path, module_base_name, module_output_dir
from .mute import MuteController
from .outcome import StemOutcome, StemStatus, summarize
from .render import SinkOpener, render_stem
from .silence import is_audible
from .voices import enumerate_voices


logger = logging.getLogger(__name__)

WR = WritingConfig()


def apply_render_params(engine: PlaybackEngine, config: RenderConfig) -> None:
    """Push the session-wide interpolation and stereo separation to the engine."""
    for param, value in (
        (RenderParam.INTERPOLATIONFILTER_LENGTH, config.interpolation.filter_length),
        (RenderParam.STEREOSEPARATION_PERCENT, config.stereo_separation),
    ):
        try:
            engine.set_render_param(param, value)
        except EngineError as exc:
            logger.warning("Engine rejected %s=%s: %s", param.name, value, exc)


def extract_stems(
    engine: PlaybackEngine,
    module_path: str | pathlib.Path,
    output_dir: str | pathlib.Path,
    config: RenderConfig,
    *,
    open_sink: SinkOpener,
    progress: bool = True,
) -> List[StemOutcome]:
    """Write one file per audible voice of the loaded module.

    Per-voice failures come back as ``StemOutcome`` entries; only
    unexpected exceptions escape, and even then every voice is unmuted
    before they propagate.
    """

    base = module_base_name(module_path)
    apply_render_params(engine, config)
    voices = enumerate_voices(engine)

    logger.info(
        "Extracting %d %s stem(s) from %s → %s (%s, %d Hz, %d ch, %s)",
        voices.count,
        voices.kind.value,
        base,
        module_output_dir(output_dir, base),
        config.output_format.value,
        config.sample_rate,
        config.channels,
        config.interpolation.value,
    )

    outcomes: List[StemOutcome] = []
    controller = MuteController(engine, voices.count)

    bar = tqdm(
        total=voices.count, desc="[stems]", unit="voice",
        dynamic_ncols=True, mininterval=0.2, leave=True,
        disable=not (progress and IS_TTY), file=PROGRESS_STREAM,
    )
    try:
        with controller.session():
            for voice in voices.descriptors():
                logger.info("Processing %s %d: %s", voice.kind.value, voice.index, voice.label)
                controller.isolate(voice.index)

                if not is_audible(engine, config.channel_layout, config.sample_rate):
                    logger.info("Skipping silent %s %d (%s)", voice.kind.value, voice.index, voice.label)
                    outcomes.append(StemOutcome.silent(voice))
                    bar.update(1)
                    continue

                try:
                    path = derive_stem_path(output_dir, base, voice.index, voice.display_name, config.output_format)
                except OSError as exc:
                    outcome = StemOutcome.write_error(f"could not create output directory: {exc}", voice=voice)
                else:
                    outcome = render_stem(engine, path, config, open_sink=open_sink).with_voice(voice)
                if outcome.status is StemStatus.WRITTEN:
                    logger.info("Extracted stem: %s", outcome.path)
                else:
                    logger.warning("Skipped %s: %s", voice.label, outcome.reason)
                outcomes.append(outcome)
                bar.update(1)
    finally:
        bar.close()

    counts = summarize(outcomes)
    logger.info(
        "%s: %d written, %d silent, %d failed",
        base,
        counts[StemStatus.WRITTEN.value],
        counts[StemStatus.SKIPPED_SILENT.value],
        counts[StemStatus.SKIPPED_WRITE_ERROR.value],
    )
    return outcomes


def write_manifest(
    output_dir: str | pathlib.Path,
    module_path: str | pathlib.Path,
    config: RenderConfig,
    outcomes: List[StemOutcome],
    name: Optional[str] = None,
) -> pathlib.Path:
    """Record the run's outcomes as JSON inside the module's output directory."""

    base = module_base_name(module_path)
    target = module_output_dir(output_dir, base) / (name or WR.manifest_name)
    payload = {
        "module": pathlib.Path(module_path).name,
        "config": {
            "sample_rate": config.sample_rate,
            "channels": config.channels,
            "interpolation": config.interpolation.value,
            "stereo_separation": config.stereo_separation,
            "format": config.output_format.value,
            "bit_depth": config.bit_depth if config.is_lossless else None,
        },
        "summary": summarize(outcomes),
        "stems": [outcome.to_dict() for outcome in outcomes],
    }
    atomic_json(target, payload)
    logger.debug("Wrote manifest %s", target)
    return target


__all__ = ["apply_render_params", "extract_stems", "write_manifest"]
