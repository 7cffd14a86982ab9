"""Enumerate the isolatable voices (instruments or samples) of a module.

Tracker formats disagree on what they expose: IT/XM usually carry an
instrument list, MOD/S3M only samples, and some loaders report neither. The
tiers below are tried in order and the first one that applies decides the
voice count, the kind and where names come from.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, NamedTuple, Sequence, Tuple

from ..constants.render_defaults import LEGACY_SAMPLE_BANK_SIZE, LEGACY_SAMPLE_BANK_TYPES
from ..protocols import EngineError, PlaybackEngine


logger = logging.getLogger(__name__)


class VoiceKind(Enum):
    INSTRUMENT = "instrument"
    SAMPLE = "sample"


@dataclass(frozen=True)
class VoiceDescriptor:
    """One isolatable voice; ``display_name`` may be empty."""

    index: int
    display_name: str
    kind: VoiceKind

    @property
    def label(self) -> str:
        """Name for log lines, with a positional fallback (1-based)."""
        return self.display_name or f"{self.kind.value}_{self.index + 1}"


class VoiceSet(NamedTuple):
    count: int
    kind: VoiceKind
    names: Sequence[str]

    def descriptors(self) -> Iterator[VoiceDescriptor]:
        for index in range(self.count):
            name = self.names[index] if index < len(self.names) else ""
            yield VoiceDescriptor(index=index, display_name=name or "", kind=self.kind)


def _instrument_names(engine: PlaybackEngine) -> List[str]:
    try:
        return list(engine.get_instrument_names())
    except EngineError as exc:
        logger.warning("Instrument names unavailable: %s", exc)
        return []


def _sample_names(engine: PlaybackEngine, count: int) -> List[str]:
    try:
        return list(engine.get_sample_names())
    except EngineError as exc:
        logger.warning("Sample names unavailable: %s", exc)
        return [""] * count


def _is_legacy_sample_bank(engine: PlaybackEngine) -> bool:
    module_type = (engine.get_metadata("type") or "").upper()
    return any(token in module_type for token in LEGACY_SAMPLE_BANK_TYPES)


def _by_instruments(engine: PlaybackEngine) -> VoiceSet:
    count = engine.get_num_instruments()
    return VoiceSet(count, VoiceKind.INSTRUMENT, _instrument_names(engine))


def _by_samples(engine: PlaybackEngine) -> VoiceSet:
    count = engine.get_num_samples()
    return VoiceSet(count, VoiceKind.SAMPLE, _sample_names(engine, count))


def _by_legacy_bank(engine: PlaybackEngine) -> VoiceSet:
    logger.warning(
        "No instrument or sample count reported; assuming a %d-sample MOD bank",
        LEGACY_SAMPLE_BANK_SIZE,
    )
    return VoiceSet(LEGACY_SAMPLE_BANK_SIZE, VoiceKind.SAMPLE, [])


def _by_channels(engine: PlaybackEngine) -> VoiceSet:
    count = engine.get_num_channels()
    logger.warning("No instrument or sample count reported; falling back to %d channels", count)
    return VoiceSet(count, VoiceKind.SAMPLE, [])


# (label, applies, resolve), tried in order; first match wins, channels otherwise
VOICE_TIERS: Tuple[Tuple[str, Callable[[PlaybackEngine], bool], Callable[[PlaybackEngine], VoiceSet]], ...] = (
    ("instruments", lambda engine: engine.get_num_instruments() > 0, _by_instruments),
    ("samples", lambda engine: engine.get_num_samples() > 0, _by_samples),
    ("legacy-bank", _is_legacy_sample_bank, _by_legacy_bank),
)


def enumerate_voices(engine: PlaybackEngine) -> VoiceSet:
    """Return ``(count, kind, names)`` for the loaded module."""

    label, resolve = next(
        ((label, resolve) for label, applies, resolve in VOICE_TIERS if applies(engine)),
        ("channels", _by_channels),
    )
    voices = resolve(engine)
    logger.info("Found %d %s voice(s) via %s", voices.count, voices.kind.value, label)
    if len(voices.names) < voices.count:
        logger.debug(
            "%d of %d voice names missing; positional names will be used",
            voices.count - len(voices.names),
            voices.count,
        )
    return voices
