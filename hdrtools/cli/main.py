"""
Command-line driver: `hdrtools tonemap` and `hdrtools compose`.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from ..exceptions import HdrToolsError
from ..models.codec_engine import CodecEngine
from ..models.color_space import ColorSpace
from ..models.settings import CompositeSettings, ToneMapSettings
from ..pipeline.compositor import compose_files
from ..pipeline.tonemapper import tonemap_file

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    tm_defaults = ToneMapSettings.from_env()
    cp_defaults = CompositeSettings.from_env()

    ap = argparse.ArgumentParser(prog="hdrtools", description="Tonemap HDR images and composite LDR layers.")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    tm = sub.add_parser("tonemap", help="convert an HDR image to 8-bit")
    tm.add_argument("input", help="HDR image (.hdr, .exr, or any 8-bit file)")
    tm.add_argument("-o", "--output", required=True, help="output PNG")
    tm.add_argument("-e", "--exposure", type=float, default=tm_defaults.exposure,
                    help="exposure in stops (pixels are scaled by 2^exposure)")
    tm.add_argument("-f", "--filmic", action="store_true", default=tm_defaults.use_filmic,
                    help="apply the filmic tone curve")
    tm.add_argument("--no-srgb", action="store_true",
                    default=tm_defaults.color_space is ColorSpace.LINEAR,
                    help="write linear values instead of gamma-encoded sRGB")

    cp = sub.add_parser("compose", help="stack 8-bit layers with alpha blending")
    cp.add_argument("inputs", nargs="+", help="layers, bottom first")
    cp.add_argument("-o", "--output", required=True, help="output PNG")
    cp.add_argument("-p", "--premultiplied", action="store_true", default=cp_defaults.premultiplied,
                    help="inputs already store color * alpha")
    cp.add_argument("--no-srgb", action="store_true",
                    default=cp_defaults.color_space is ColorSpace.LINEAR,
                    help="blend raw byte values instead of linearised sRGB")
    return ap


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    CodecEngine().initialize()

    try:
        if args.command == "tonemap":
            settings = ToneMapSettings(
                exposure=args.exposure,
                use_filmic=args.filmic,
                color_space=ColorSpace.from_no_srgb(args.no_srgb),
            )
            result = tonemap_file(args.input, args.output, settings)
        else:
            settings = CompositeSettings(
                premultiplied=args.premultiplied,
                color_space=ColorSpace.from_no_srgb(args.no_srgb),
            )
            result = compose_files(args.inputs, args.output, settings)
    except (HdrToolsError, FileNotFoundError, TimeoutError) as err:
        logger.error(str(err))
        return 1

    logger.info(f"Wrote {result.path} ({result.width}x{result.height})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
