"""Adapter layer for external dependencies."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "OpenMPTModule",
    "SoundFileSink",
    "load_module",
    "open_stem_sink",
]

_ATTR_TO_MODULE = {
    "OpenMPTModule": ("untracker.adapters.openmpt", "OpenMPTModule"),
    "load_module": ("untracker.adapters.openmpt", "load_module"),
    "SoundFileSink": ("untracker.adapters.soundfile_sink", "SoundFileSink"),
    "open_stem_sink": ("untracker.adapters.soundfile_sink", "open_stem_sink"),
}


def __getattr__(name: str) -> Any:
    try:
        module_name, attr_name = _ATTR_TO_MODULE[name]
    except KeyError as exc:
        raise AttributeError(f"module {__name__} has no attribute {name}") from exc
    module = import_module(module_name)
    return getattr(module, attr_name)
