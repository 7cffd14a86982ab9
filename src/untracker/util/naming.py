"""Output path construction for extracted stems."""

from __future__ import annotations

import pathlib

from ..constants.audio import OutputFormat
from .config.writing import WritingConfig

WR = WritingConfig()

_UNSAFE_CHARS = '<>:"/\\|?* '
_SANITIZE_TABLE = str.maketrans({ch: "_" for ch in _UNSAFE_CHARS})


def sanitize_filename(name: str) -> str:
    """Return *name* with path separators, reserved characters and spaces replaced.

    ``"Lead Guitar/Solo"`` → ``"Lead_Guitar_Solo"``; ``".."`` → ``"_"``;
    ``""`` → ``"unknown"``.
    """
    if not name:
        return WR.placeholder
    sanitized = name.translate(_SANITIZE_TABLE)
    if sanitized in (".", ".."):
        return "_"
    return sanitized


def module_base_name(module_path: str | pathlib.Path) -> str:
    """File name of the module without its (last) extension."""
    name = pathlib.PurePath(module_path).name
    stem, dot, _ext = name.rpartition(".")
    return stem if dot else name


def format_voice_number(index: int) -> str:
    """1-based, zero-padded voice number; only the last digits are kept past 999."""
    width = WR.number_width
    return f"{index + 1:0{width}d}"[-width:]


def module_output_dir(output_dir: str | pathlib.Path, module_base: str) -> pathlib.Path:
    return pathlib.Path(output_dir) / sanitize_filename(module_base)


def derive_stem_path(
    output_dir: str | pathlib.Path,
    module_base: str,
    index: int,
    display_name: str,
    output_format: OutputFormat,
) -> pathlib.Path:
    """Create the per-module directory (if needed) and return the stem's path.

    The file is ``NNN-<name>.<ext>``, or ``NNN.<ext>`` when the voice has no
    name.
    """
    target_dir = module_output_dir(output_dir, module_base)
    target_dir.mkdir(parents=True, exist_ok=True)

    number = format_voice_number(index)
    if display_name:
        filename = f"{number}-{sanitize_filename(display_name)}.{output_format.extension}"
    else:
        filename = f"{number}.{output_format.extension}"
    return target_dir / filename


__all__ = [
    "derive_stem_path",
    "format_voice_number",
    "module_base_name",
    "module_output_dir",
    "sanitize_filename",
]
