#!/usr/bin/env python3
# cli.py
# Pipeline: resolve config → load module → per voice: isolate → silence probe
# → render stem → restore mute state → summary (+ optional manifest)

from __future__ import annotations
import os, sys, pathlib
import logging

# --- configs ---
from .util.config import LoggingConfig, RenderConfig, resolve_render_config

# --- adapters (external engine / encoder) ---
from .adapters import load_module, open_stem_sink
from .protocols import ModuleLoadError

# --- core steps ---
from .features import StemOutcome, extract_stems, summarize, write_manifest


# ========================= CLI =========================
import argparse


logger = logging.getLogger(__name__)


LOG = LoggingConfig()

LOG_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


class _ArgumentParser(argparse.ArgumentParser):
    """argparse with exit status 1 for usage errors."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    ap = _ArgumentParser(
        prog="untracker",
        description="Render each instrument/sample of a tracker module (MOD, XM, IT, S3M, …) to its own audio file",
        epilog="Input formats: anything libopenmpt can play. Output formats: WAV, FLAC, Ogg/Vorbis, Ogg/Opus.",
    )
    ap.add_argument("-i", "--input", dest="input", required=True, help="Input module file")
    ap.add_argument("-o", "--output", dest="output", required=True,
                    help="Output directory (stems go to <output>/<module name>/)")
    ap.add_argument("--sample-rate", type=int, default=None,
                    help="Sample rate in Hz (default: 44100, or 48000 for opus)")
    ap.add_argument("--channels", type=int, choices=[1, 2, 4], default=2,
                    help="Output channels: 1 mono, 2 stereo, 4 quad (default: %(default)s)")
    ap.add_argument("--resample", choices=["nearest", "linear", "cubic", "sinc", "8tap"], default="cubic",
                    help="Interpolation filter (default: %(default)s; 8tap = sinc)")
    ap.add_argument("--format", dest="output_format", choices=["wav", "flac", "vorbis", "ogg", "opus"],
                    default="wav", help="Output format (default: %(default)s; ogg = vorbis)")
    ap.add_argument("--bit-depth", type=int, choices=[16, 24], default=16,
                    help="Bit depth for WAV/FLAC (default: %(default)s)")
    ap.add_argument("--opus-bitrate", type=int, default=128, help="Opus bitrate in kbps, 16-512 (default: %(default)s)")
    ap.add_argument("--vorbis-quality", type=int, default=5, help="Vorbis quality 0-10 (default: %(default)s)")
    ap.add_argument("--stereo-separation", type=int, default=100,
                    help="Stereo separation percent 0-200; 0 renders mono (default: %(default)s)")
    ap.add_argument("--manifest", action="store_true",
                    help="Write a stems.json summary into the module's output directory")
    ap.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    ap.add_argument(
        "--log-level",
        choices=tuple(LOG_LEVELS.keys()),
        default=LOG.level,
        help="Logging verbosity (default: %(default)s)",
    )
    return ap


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def config_from_args(args: argparse.Namespace) -> RenderConfig:
    """Turn parsed options into a RenderConfig; bad values are fatal."""
    try:
        return resolve_render_config(
            sample_rate=args.sample_rate,
            channels=args.channels,
            resample=args.resample,
            output_format=args.output_format,
            bit_depth=args.bit_depth,
            opus_bitrate=args.opus_bitrate,
            vorbis_quality=args.vorbis_quality,
            stereo_separation=args.stereo_separation,
        )
    except ValueError as exc:
        raise SystemExit(f"Invalid option: {exc}") from exc


# ======================= MAIN =======================
def run_extraction(args: argparse.Namespace, *, configure_logging: bool = True) -> list[StemOutcome]:
    """Execute stem extraction using CLI-style arguments."""

    if configure_logging:
        logging.basicConfig(
            level=LOG_LEVELS.get(getattr(args, "log_level", LOG.level), logging.INFO),
            format=LOG.format,
            force=True,
        )
    logger.debug("Logging initialized at %s", getattr(args, "log_level", LOG.level))

    config = config_from_args(args)
    logger.debug("Resolved config: %s", config)

    module_path = pathlib.Path(args.input).expanduser().resolve()
    if not module_path.is_file():
        raise SystemExit(f"Input module not found: {module_path}")
    output_dir = pathlib.Path(args.output).expanduser().resolve()

    try:
        engine = load_module(module_path)
    except (OSError, ModuleLoadError) as exc:
        raise SystemExit(f"Could not load {module_path}: {exc}") from exc

    try:
        outcomes = extract_stems(
            engine,
            module_path,
            output_dir,
            config,
            open_sink=open_stem_sink,
            progress=not getattr(args, "no_progress", False),
        )
    finally:
        close = getattr(engine, "close", None)
        if close is not None:
            close()

    if getattr(args, "manifest", False):
        manifest = write_manifest(output_dir, module_path, config, outcomes)
        logger.info("Manifest written → %s", manifest)

    counts = summarize(outcomes)
    if not counts["written"]:
        logger.warning("No stems extracted from %s", module_path.name)
    logger.info("Stem extraction completed (%d written)", counts["written"])
    return outcomes


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    run_extraction(args)
    return 0

if __name__ == "__main__":
    # Encourage unbuffered output so bars animate in more shells
    os.environ.setdefault("PYTHONUNBUFFERED", "1")
    sys.exit(main())
