from __future__ import annotations

# Rendering/output settings, resolved once per run
import logging
from dataclasses import dataclass
from typing import Optional

from ...constants.audio import (
    OPUS_SAMPLE_RATES,
    PCM_SUBTYPES,
    ChannelLayout,
    Interpolation,
    OutputFormat,
)

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 44100
OPUS_DEFAULT_SAMPLE_RATE = 48000

OPUS_BITRATE_RANGE = (16, 512)
VORBIS_QUALITY_RANGE = (0, 10)
STEREO_SEPARATION_RANGE = (0, 200)


@dataclass(frozen=True)
class RenderConfig:
    sample_rate: int = DEFAULT_SAMPLE_RATE
    channel_layout: ChannelLayout = ChannelLayout.STEREO
    interpolation: Interpolation = Interpolation.CUBIC
    stereo_separation: int = 100        # percent, 0 → mono
    output_format: OutputFormat = OutputFormat.WAV
    bit_depth: int = 16                 # WAV/FLAC only
    opus_bitrate_kbps: int = 128        # 16–512
    vorbis_quality: int = 5             # 0–10

    @property
    def channels(self) -> int:
        return self.channel_layout.channels

    @property
    def is_lossless(self) -> bool:
        return self.output_format.is_lossless

    @property
    def subtype(self) -> str:
        """soundfile subtype for the configured format."""
        fixed = self.output_format.codec_subtype
        if fixed is not None:
            return fixed
        return PCM_SUBTYPES[self.bit_depth]

    @property
    def compression_level(self) -> Optional[float]:
        """libsndfile compression level (0 = best quality) for lossy codecs."""
        if self.output_format is OutputFormat.VORBIS:
            low, high = VORBIS_QUALITY_RANGE
            return 1.0 - (self.vorbis_quality - low) / float(high - low)
        if self.output_format is OutputFormat.OPUS:
            low, high = OPUS_BITRATE_RANGE
            return 1.0 - (self.opus_bitrate_kbps - low) / float(high - low)
        return None


def _check_range(name: str, value: int, bounds: tuple[int, int]) -> int:
    low, high = bounds
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high} (got {value})")
    return value


def resolve_render_config(
    *,
    sample_rate: Optional[int] = None,
    channels: int = 2,
    resample: str = Interpolation.CUBIC.value,
    output_format: str = OutputFormat.WAV.value,
    bit_depth: int = 16,
    opus_bitrate: int = 128,
    vorbis_quality: int = 5,
    stereo_separation: int = 100,
) -> RenderConfig:
    """Validate user options and build the immutable render configuration.

    ``sample_rate=None`` means the user did not pick one: Opus then defaults
    to 48 kHz, everything else to 44.1 kHz. A stereo separation of 0 forces
    a mono layout whatever channel count was requested. Raises
    ``ValueError`` for any out-of-range option.
    """

    fmt = OutputFormat.parse(output_format)
    interpolation = Interpolation.parse(resample)
    layout = ChannelLayout.from_channels(int(channels))

    if bit_depth not in PCM_SUBTYPES:
        raise ValueError(f"bit depth must be 16 or 24 (got {bit_depth})")
    _check_range("opus bitrate", opus_bitrate, OPUS_BITRATE_RANGE)
    _check_range("vorbis quality", vorbis_quality, VORBIS_QUALITY_RANGE)
    _check_range("stereo separation", stereo_separation, STEREO_SEPARATION_RANGE)

    if sample_rate is None:
        sample_rate = OPUS_DEFAULT_SAMPLE_RATE if fmt is OutputFormat.OPUS else DEFAULT_SAMPLE_RATE
    elif sample_rate <= 0:
        raise ValueError(f"sample rate must be positive (got {sample_rate})")

    if fmt is OutputFormat.OPUS and sample_rate not in OPUS_SAMPLE_RATES:
        logger.warning(
            "Opus cannot encode at %d Hz; stems will likely fail to open (use one of %s)",
            sample_rate,
            ", ".join(str(rate) for rate in OPUS_SAMPLE_RATES),
        )

    if stereo_separation == 0 and layout is not ChannelLayout.MONO:
        logger.info("Stereo separation is 0; rendering mono instead of %d channels", layout.channels)
        layout = ChannelLayout.MONO

    if not fmt.is_lossless and bit_depth != 16:
        logger.debug("Bit depth %d ignored for %s output", bit_depth, fmt.value)

    return RenderConfig(
        sample_rate=int(sample_rate),
        channel_layout=layout,
        interpolation=interpolation,
        stereo_separation=int(stereo_separation),
        output_format=fmt,
        bit_depth=int(bit_depth),
        opus_bitrate_kbps=int(opus_bitrate),
        vorbis_quality=int(vorbis_quality),
    )
