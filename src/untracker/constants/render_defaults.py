"""Default limits for the probe and render passes."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RenderLimits:
    """Block sizes and termination thresholds shared by both passes."""

    block_frames: int = 4096
    # anything at or below this magnitude counts as silence (zero, denormals)
    silence_epsilon: float = 1e-9
    # probe stops once position >= duration * (1 - tolerance)
    duration_tolerance: float = 0.01
    # iteration bound: duration * overrun_factor worth of blocks, plus slack
    overrun_factor: float = 1.01
    slack_blocks: int = 16
    # used when the engine reports no usable duration
    unknown_duration_cap_s: float = 3600.0


LIMITS = RenderLimits()

# metadata "type" tokens of tracker families with a fixed 31-sample bank
LEGACY_SAMPLE_BANK_TYPES = ("MOD",)
LEGACY_SAMPLE_BANK_SIZE = 31


__all__ = [
    "LEGACY_SAMPLE_BANK_SIZE",
    "LEGACY_SAMPLE_BANK_TYPES",
    "LIMITS",
    "RenderLimits",
]
