from __future__ import annotations

import pytest

from untracker.features.voices import VOICE_TIERS, VoiceDescriptor, VoiceKind, enumerate_voices


def test_instruments_take_priority(engine_factory):
    engine = engine_factory(
        instruments=3,
        samples=12,
        instrument_names=["Bass", "Lead", ""],
    )

    voices = enumerate_voices(engine)
    count, kind, names = voices

    assert count == 3
    assert kind is VoiceKind.INSTRUMENT
    assert list(names) == ["Bass", "Lead", ""]
    descriptors = list(voices.descriptors())
    assert [d.index for d in descriptors] == [0, 1, 2]
    assert all(d.kind is VoiceKind.INSTRUMENT for d in descriptors)


@pytest.mark.parametrize("count", [1, 4, 17])
def test_instrument_count_always_yields_that_many_descriptors(engine_factory, count):
    engine = engine_factory(instruments=count, samples=5, module_type="MOD")

    descriptors = list(enumerate_voices(engine).descriptors())

    assert len(descriptors) == count
    assert {d.kind for d in descriptors} == {VoiceKind.INSTRUMENT}


def test_samples_used_when_no_instruments(engine_factory):
    engine = engine_factory(samples=2, sample_names=["kick", "snare"])

    voices = enumerate_voices(engine)

    assert voices.count == 2
    assert voices.kind is VoiceKind.SAMPLE
    assert list(voices.names) == ["kick", "snare"]


def test_sample_name_failure_yields_empty_names(engine_factory, caplog):
    engine = engine_factory(samples=3, sample_names_error=True)

    with caplog.at_level("WARNING"):
        voices = enumerate_voices(engine)

    assert voices.count == 3
    assert list(voices.names) == ["", "", ""]
    assert "Sample names unavailable" in caplog.text


def test_legacy_mod_assumes_31_samples(engine_factory):
    engine = engine_factory(module_type="mod", channels=4)

    voices = enumerate_voices(engine)

    assert voices.count == 31
    assert voices.kind is VoiceKind.SAMPLE
    assert list(voices.names) == []


def test_channel_count_is_last_resort(engine_factory):
    engine = engine_factory(module_type="s3m", channels=8)

    voices = enumerate_voices(engine)

    assert voices.count == 8
    assert voices.kind is VoiceKind.SAMPLE


def test_short_name_list_pads_with_empty_names(engine_factory):
    engine = engine_factory(instruments=3, instrument_names=["only"])

    descriptors = list(enumerate_voices(engine).descriptors())

    assert [d.display_name for d in descriptors] == ["only", "", ""]


def test_descriptor_label_falls_back_to_position():
    named = VoiceDescriptor(index=0, display_name="Pad", kind=VoiceKind.INSTRUMENT)
    unnamed = VoiceDescriptor(index=4, display_name="", kind=VoiceKind.SAMPLE)

    assert named.label == "Pad"
    assert unnamed.label == "sample_5"


def test_channel_fallback_applies_after_all_tiers(engine_factory, caplog):
    engine = engine_factory(module_type="xm", channels=6)

    with caplog.at_level("INFO"):
        voices = enumerate_voices(engine)

    assert voices.count == 6
    assert "via channels" in caplog.text
    assert [label for label, _, _ in VOICE_TIERS] == ["instruments", "samples", "legacy-bank"]
