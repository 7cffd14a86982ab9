"""Per-voice results reported back to the caller."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from .voices import VoiceDescriptor


class StemStatus(Enum):
    WRITTEN = "written"
    SKIPPED_SILENT = "skipped_silent"
    SKIPPED_WRITE_ERROR = "skipped_write_error"


@dataclass(frozen=True)
class StemOutcome:
    status: StemStatus
    voice: Optional[VoiceDescriptor] = None
    path: Optional[Path] = None
    reason: Optional[str] = None

    @classmethod
    def written(cls, path: Path, voice: Optional[VoiceDescriptor] = None) -> "StemOutcome":
        return cls(StemStatus.WRITTEN, voice=voice, path=Path(path))

    @classmethod
    def silent(cls, voice: Optional[VoiceDescriptor] = None) -> "StemOutcome":
        return cls(StemStatus.SKIPPED_SILENT, voice=voice)

    @classmethod
    def write_error(
        cls, reason: str, path: Optional[Path] = None, voice: Optional[VoiceDescriptor] = None
    ) -> "StemOutcome":
        return cls(StemStatus.SKIPPED_WRITE_ERROR, voice=voice, path=path, reason=reason)

    def with_voice(self, voice: VoiceDescriptor) -> "StemOutcome":
        return StemOutcome(self.status, voice=voice, path=self.path, reason=self.reason)

    def to_dict(self) -> dict:
        data: dict = {"status": self.status.value}
        if self.voice is not None:
            data["index"] = self.voice.index
            data["name"] = self.voice.display_name
            data["kind"] = self.voice.kind.value
        if self.path is not None:
            data["path"] = str(self.path)
        if self.reason is not None:
            data["reason"] = self.reason
        return data


def summarize(outcomes: Iterable[StemOutcome]) -> dict[str, int]:
    """Count outcomes per status (every status present, zero if unused)."""
    counts = Counter(outcome.status for outcome in outcomes)
    return {status.value: counts.get(status, 0) for status in StemStatus}


__all__ = ["StemOutcome", "StemStatus", "summarize"]
