"""
SlideFlix command line.

    slideflix compose URL_A URL_B --output video.mp4 [--duration 3] [--logo URL]
    slideflix serve [--host 0.0.0.0] [--port 3000]
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from slideflix import settings
from slideflix.composition.exceptions import CompositionError
from slideflix.composition.models import CompositionRequest
from slideflix.composition.service import CompositionService
from slideflix.logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="slideflix", description="SlideFlix crossfade video generator")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    compose = subparsers.add_parser("compose", help="Compose two slides into a video file")
    compose.add_argument("slides", nargs="+", help="Slide image URLs, outgoing first")
    compose.add_argument("--output", "-o", required=True, help="Destination .mp4 path")
    compose.add_argument("--duration", type=float, default=None,
                         help=f"Seconds each slide is held (default: {settings.get_default_hold_duration()})")
    compose.add_argument("--logo", default=None, help="Optional corner logo URL")
    compose.add_argument("--name", default=None, help="Video name (default: output file stem)")
    compose.add_argument("--owner", default="local", help="Owner identifier (default: local)")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None, help=f"Bind address (default: {settings.get_api_host()})")
    serve.add_argument("--port", type=int, default=None, help=f"Port (default: {settings.get_api_port()})")
    return parser


def run_compose(args: argparse.Namespace, service: Optional[CompositionService] = None) -> int:
    output = Path(args.output)
    request = CompositionRequest(
        slide_urls=tuple(args.slides),
        hold_duration=args.duration if args.duration is not None else settings.get_default_hold_duration(),
        output_name=args.name or output.stem,
        owner_id=args.owner,
        logo_url=args.logo,
    )
    service = service or CompositionService.from_settings()
    result = service.compose(request, inline=True)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.video_bytes)
    logger.info(f"✅ Wrote {output} ({result.size_bytes} bytes, {result.elapsed_seconds:.2f}s)")
    for degradation in result.degradations:
        logger.warning(f"⚠️ {degradation}")
    return 0


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "slideflix.api.main:app",
        host=args.host or settings.get_api_host(),
        port=args.port or settings.get_api_port(),
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        if args.command == "compose":
            return run_compose(args)
        return run_serve(args)
    except CompositionError as e:
        logger.error(f"Composition failed ({e.kind}): {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
