from __future__ import annotations

import dataclasses

import pytest

from untracker.constants.audio import ChannelLayout, Interpolation, OutputFormat
from untracker.util.config import RenderConfig, resolve_render_config


def test_defaults_match_cli_defaults():
    config = resolve_render_config()

    assert config == RenderConfig()
    assert config.sample_rate == 44100
    assert config.channel_layout is ChannelLayout.STEREO
    assert config.interpolation is Interpolation.CUBIC
    assert config.subtype == "PCM_16"
    assert config.compression_level is None


def test_opus_defaults_to_48k_without_explicit_rate():
    assert resolve_render_config(output_format="opus").sample_rate == 48000


def test_explicit_rate_wins_for_opus():
    assert resolve_render_config(output_format="opus", sample_rate=24000).sample_rate == 24000


def test_opus_unsupported_rate_warns(caplog):
    with caplog.at_level("WARNING"):
        config = resolve_render_config(output_format="opus", sample_rate=44100)

    assert config.sample_rate == 44100
    assert "Opus cannot encode at 44100 Hz" in caplog.text


@pytest.mark.parametrize("channels", [1, 2, 4])
def test_zero_stereo_separation_forces_mono(channels):
    config = resolve_render_config(channels=channels, stereo_separation=0)

    assert config.channel_layout is ChannelLayout.MONO
    assert config.channels == 1


def test_aliases():
    config = resolve_render_config(resample="8tap", output_format="ogg")

    assert config.interpolation is Interpolation.SINC
    assert config.interpolation.filter_length == 8
    assert config.output_format is OutputFormat.VORBIS
    assert config.output_format.extension == "ogg"


def test_lossless_bit_depth_subtype():
    assert resolve_render_config(output_format="flac", bit_depth=24).subtype == "PCM_24"


def test_lossy_formats_ignore_bit_depth():
    config = resolve_render_config(output_format="vorbis", bit_depth=24, vorbis_quality=10)

    assert config.subtype == "VORBIS"
    assert config.compression_level == pytest.approx(0.0)


def test_opus_bitrate_maps_to_compression_level():
    low = resolve_render_config(output_format="opus", opus_bitrate=16)
    high = resolve_render_config(output_format="opus", opus_bitrate=512)

    assert low.compression_level == pytest.approx(1.0)
    assert high.compression_level == pytest.approx(0.0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"sample_rate": 0},
        {"sample_rate": -8000},
        {"channels": 3},
        {"bit_depth": 8},
        {"opus_bitrate": 8},
        {"opus_bitrate": 513},
        {"vorbis_quality": 11},
        {"stereo_separation": 201},
        {"stereo_separation": -1},
        {"resample": "bicubic"},
        {"output_format": "mp3"},
    ],
)
def test_out_of_range_values_rejected(kwargs):
    with pytest.raises(ValueError):
        resolve_render_config(**kwargs)


def test_config_is_frozen():
    config = resolve_render_config()

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.sample_rate = 8000  # type: ignore[misc]
