"""Core extraction steps."""

from .extract import apply_render_params, extract_stems, write_manifest
from .mute import MuteController
from .outcome import StemOutcome, StemStatus, summarize
from .render import render_stem
from .silence import is_audible
from .voices import VoiceDescriptor, VoiceKind, VoiceSet, enumerate_voices

__all__ = [
    "MuteController",
    "StemOutcome",
    "StemStatus",
    "VoiceDescriptor",
    "VoiceKind",
    "VoiceSet",
    "apply_render_params",
    "enumerate_voices",
    "extract_stems",
    "is_audible",
    "render_stem",
    "summarize",
    "write_manifest",
]
