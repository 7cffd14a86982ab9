from __future__ import annotations

import numpy as np

from untracker.constants.audio import ChannelLayout
from untracker.features.outcome import StemStatus
from untracker.features.render import render_stem
from untracker.protocols import RenderParam
from untracker.util.config import RenderConfig


def test_render_streams_until_zero_frames(engine_factory, sink_recorder, tmp_path):
    engine = engine_factory(instruments=1, levels={0: 0.5}, duration=0.25)
    config = RenderConfig(sample_rate=8000)
    target = tmp_path / "001-lead.wav"

    outcome = render_stem(engine, target, config, open_sink=sink_recorder)

    assert outcome.status is StemStatus.WRITTEN
    assert outcome.path == target
    sink = sink_recorder.sinks[0]
    assert sink.close_calls == 1
    frames = np.concatenate(sink.blocks)
    assert frames.shape == (2000, 2)
    assert np.allclose(frames, 0.5)


def test_render_selects_mono_entry_point(engine_factory, sink_recorder, tmp_path):
    engine = engine_factory(instruments=1, levels={0: 0.1}, duration=0.1)
    config = RenderConfig(sample_rate=8000, channel_layout=ChannelLayout.MONO)

    render_stem(engine, tmp_path / "001.wav", config, open_sink=sink_recorder)

    assert {layout for layout, _, _ in engine.reads} == {"mono"}
    assert sink_recorder.sinks[0].blocks[0].shape[1] == 1


def test_render_uses_engine_quality_setting(engine_factory, sink_recorder, tmp_path):
    engine = engine_factory(instruments=1, levels={0: 0.1}, duration=0.1)
    engine.params[RenderParam.INTERPOLATIONFILTER_LENGTH] = 8

    render_stem(engine, tmp_path / "001.wav", RenderConfig(sample_rate=8000), open_sink=sink_recorder)

    assert {interp for _, _, interp in engine.reads} == {8}


def test_unopenable_sink_skips_without_rendering(engine_factory, sink_recorder, tmp_path):
    engine = engine_factory(instruments=1, levels={0: 0.5})
    sink_recorder.fail_open = True

    outcome = render_stem(engine, tmp_path / "001.wav", RenderConfig(), open_sink=sink_recorder)

    assert outcome.status is StemStatus.SKIPPED_WRITE_ERROR
    assert engine.reads == []


def test_short_write_discards_partial_file(engine_factory, sink_recorder, tmp_path):
    engine = engine_factory(instruments=1, levels={0: 0.5}, duration=2.0)
    sink_recorder.short_write_at = 2
    target = tmp_path / "001-bass.wav"

    outcome = render_stem(engine, target, RenderConfig(sample_rate=8000), open_sink=sink_recorder)

    assert outcome.status is StemStatus.SKIPPED_WRITE_ERROR
    assert "wrote 4095 of 4096 frames" in outcome.reason
    assert sink_recorder.sinks[0].close_calls == 1
    assert not target.exists()


def test_engine_failure_mid_render_is_contained(engine_factory, sink_recorder, tmp_path):
    engine = engine_factory(instruments=1, levels={0: 0.5}, duration=2.0, fail_read_after=1)
    target = tmp_path / "001.wav"

    outcome = render_stem(engine, target, RenderConfig(sample_rate=8000), open_sink=sink_recorder)

    assert outcome.status is StemStatus.SKIPPED_WRITE_ERROR
    assert "engine error" in outcome.reason
    assert sink_recorder.sinks[0].close_calls == 1
    assert not target.exists()
