"""Channel layouts, interpolation filters and output formats."""

from __future__ import annotations

from enum import Enum


class ChannelLayout(Enum):
    """Output channel layout; also selects the engine read entry point."""

    MONO = 1
    STEREO = 2
    QUAD = 4

    @property
    def channels(self) -> int:
        return self.value

    @classmethod
    def from_channels(cls, channels: int) -> "ChannelLayout":
        for layout in cls:
            if layout.value == channels:
                return layout
        raise ValueError(f"Unsupported channel count: {channels} (expected 1, 2 or 4)")


class Interpolation(Enum):
    """Resampling quality, ordered cheapest first."""

    NEAREST = "nearest"
    LINEAR = "linear"
    CUBIC = "cubic"
    SINC = "sinc"

    @property
    def filter_length(self) -> int:
        return _FILTER_LENGTHS[self]

    @classmethod
    def parse(cls, name: str) -> "Interpolation":
        key = name.strip().lower()
        key = _INTERPOLATION_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError as exc:
            raise ValueError(f"Unknown resampling method: {name!r}") from exc


# libopenmpt RENDER_INTERPOLATIONFILTER_LENGTH values
_FILTER_LENGTHS = {
    Interpolation.NEAREST: 1,
    Interpolation.LINEAR: 2,
    Interpolation.CUBIC: 4,
    Interpolation.SINC: 8,
}

_INTERPOLATION_ALIASES = {"8tap": "sinc"}


class OutputFormat(Enum):
    """Container/codec pair written through libsndfile."""

    WAV = "wav"
    FLAC = "flac"
    VORBIS = "vorbis"
    OPUS = "opus"

    @property
    def extension(self) -> str:
        return _FORMAT_TABLE[self][0]

    @property
    def container(self) -> str:
        return _FORMAT_TABLE[self][1]

    @property
    def codec_subtype(self) -> str | None:
        """Fixed soundfile subtype, or None when it follows the bit depth."""
        return _FORMAT_TABLE[self][2]

    @property
    def is_lossless(self) -> bool:
        return self.codec_subtype is None

    @classmethod
    def parse(cls, name: str) -> "OutputFormat":
        key = name.strip().lower()
        key = _FORMAT_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError as exc:
            raise ValueError(f"Unknown output format: {name!r}") from exc


# format -> (extension, soundfile container, soundfile subtype)
_FORMAT_TABLE: dict[OutputFormat, tuple[str, str, str | None]] = {
    OutputFormat.WAV: ("wav", "WAV", None),
    OutputFormat.FLAC: ("flac", "FLAC", None),
    OutputFormat.VORBIS: ("ogg", "OGG", "VORBIS"),
    OutputFormat.OPUS: ("opus", "OGG", "OPUS"),
}

_FORMAT_ALIASES = {"ogg": "vorbis"}

PCM_SUBTYPES = {16: "PCM_16", 24: "PCM_24"}

# libopus only encodes at these rates
OPUS_SAMPLE_RATES = (8000, 12000, 16000, 24000, 48000)


__all__ = [
    "ChannelLayout",
    "Interpolation",
    "OPUS_SAMPLE_RATES",
    "OutputFormat",
    "PCM_SUBTYPES",
]
