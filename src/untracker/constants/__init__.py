"""Constant tables shared across the extraction pipeline."""

from .audio import ChannelLayout, Interpolation, OutputFormat
from .render_defaults import LIMITS, RenderLimits

__all__ = [
    "ChannelLayout",
    "Interpolation",
    "LIMITS",
    "OutputFormat",
    "RenderLimits",
]
