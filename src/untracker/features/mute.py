"""Isolate one voice at a time through the engine's per-voice mute flags."""

from __future__ import annotations

import contextlib
import logging
from typing import Iterator, Set

from ..protocols import EngineError, PlaybackEngine


logger = logging.getLogger(__name__)


class MuteController:
    """Issue isolate/restore commands; never caches the engine's mute map.

    Engines may reject individual commands (formats without per-voice
    muting). Rejections are logged and skipped, so the resulting mute state
    can be partial; extraction carries on with whatever isolation it got.
    """

    def __init__(self, engine: PlaybackEngine, total: int):
        self.engine = engine
        self.total = max(0, int(total))
        self._reported: Set[int] = set()

    def _set(self, index: int, mute: bool) -> bool:
        try:
            self.engine.set_instrument_mute_status(index, mute)
        except EngineError as exc:
            action = "mute" if mute else "unmute"
            if index in self._reported:
                logger.debug("Could not %s voice %d: %s", action, index, exc)
            else:
                logger.warning("Could not %s voice %d: %s", action, index, exc)
                self._reported.add(index)
            return False
        return True

    def isolate(self, index: int) -> int:
        """Mute every voice but *index*; return how many commands failed."""
        failures = 0
        for voice in range(self.total):
            if not self._set(voice, voice != index):
                failures += 1
        return failures

    def restore_all(self) -> int:
        """Unmute every voice; return how many commands failed."""
        failures = 0
        for voice in range(self.total):
            if not self._set(voice, False):
                failures += 1
        logger.debug("Restored %d voice(s) (%d rejected)", self.total, failures)
        return failures

    @contextlib.contextmanager
    def session(self) -> Iterator["MuteController"]:
        """Scope an extraction loop; every voice is unmuted on exit, once."""
        try:
            yield self
        finally:
            self.restore_all()


__all__ = ["MuteController"]
