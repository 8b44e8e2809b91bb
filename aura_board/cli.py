#!/usr/bin/env python
"""
Command-line interface for the AURA whiteboard pipeline.

Usage:
    aura-board --input <image> [options]

Examples:
    # Read the text on a whiteboard snapshot
    aura-board --input board.png

    # Read it and ask the answer service
    aura-board --input board.png --ask

    # Save the filtered OCR inputs for inspection
    aura-board --input board.png --debug-dir ./debug
"""

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Optional

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("aura_board")


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="AURA Smart White Board - read handwriting and answer it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Extract text from a whiteboard image:
    aura-board --input board.png

  Extract and generate an answer (needs GEMINI_API_KEY):
    aura-board --input board.png --ask

  Write the result as JSON:
    aura-board --input board.png --output result.json
        """
    )

    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Whiteboard image file"
    )

    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Write the extraction (and answer) as JSON to this file"
    )

    parser.add_argument(
        "--ask",
        action="store_true",
        help="Send the result to the answer service"
    )

    parser.add_argument(
        "--debug-dir",
        default=None,
        help="Save the raw and filtered OCR inputs to this directory"
    )

    parser.add_argument(
        "--min-chars",
        type=int,
        default=None,
        help="Minimum characters for a usable OCR result (default: 5)"
    )

    parser.add_argument(
        "--min-tokens",
        type=int,
        default=None,
        help="Minimum whitespace-separated tokens for a usable OCR result (default: 2)"
    )

    parser.add_argument(
        "--tesseract-cmd",
        default=None,
        help="Path to the tesseract binary"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0"
    )

    return parser


def check_dependencies(tesseract_cmd: Optional[str] = None) -> bool:
    """Check if required dependencies are available."""
    missing = []

    try:
        import cv2
    except ImportError:
        missing.append("opencv-python")

    try:
        import numpy
    except ImportError:
        missing.append("numpy")

    try:
        import PIL
    except ImportError:
        missing.append("Pillow")

    from .config import check_tesseract_available
    try:
        import pytesseract
        if not check_tesseract_available(tesseract_cmd):
            missing.append("tesseract-ocr (system package)")
    except ImportError:
        missing.append("pytesseract")

    if missing:
        logger.error("Missing required dependencies:")
        for dep in missing:
            logger.error(f"  - {dep}")
        logger.error("\nInstall with: pip install -e .")
        return False

    return True


def save_debug_images(image, debug_dir: Path):
    """Write the raw image and both filtered variants."""
    from .utils.images import apply_filter, STANDARD_FILTER, MATH_FILTER
    from .utils.io import save_image

    save_image(image.pixels, debug_dir / "raw.png")
    for profile in (STANDARD_FILTER, MATH_FILTER):
        path = save_image(apply_filter(image, profile).pixels, debug_dir / f"{profile.name}.png")
        logger.info(f"Saved {profile.name} filter output: {path}")


async def run_pipeline(args) -> int:
    """Run the whiteboard pipeline on an image file."""
    from .config import get_config
    from .errors import EngineStartupError
    from .session import WhiteboardSession
    from .utils.extractor import OutcomeStatus
    from .utils.io import save_json
    from .utils.surface import ImageFileSurface

    start_time = time.time()

    config = get_config()
    if args.min_chars is not None:
        config.extraction.min_chars = args.min_chars
    if args.min_tokens is not None:
        config.extraction.min_tokens = args.min_tokens
    if args.tesseract_cmd:
        config.ocr.tesseract_cmd = args.tesseract_cmd

    input_path = Path(args.input)
    session = WhiteboardSession(surface=ImageFileSurface(input_path), config=config)

    try:
        await session.start()
    except EngineStartupError as e:
        logger.error(f"Could not start OCR engines: {e}")
        return 1

    answer = None
    if args.ask:
        result = await session.generate_answer()
        outcome, answer = result.extraction, result.answer
        image = None
    else:
        outcome, image = await session.orchestrator.extract_with_image()

    failed = outcome is None or outcome.status in (
        OutcomeStatus.NOT_READY, OutcomeStatus.RASTERIZATION_FAILED
    )

    if args.debug_dir and not failed:
        if image is None:
            image = await session.surface.rasterize()
        save_debug_images(image, Path(args.debug_dir))

    if args.output:
        payload = {
            "source_file": str(input_path),
            "extraction": outcome.to_dict() if outcome else None,
            "answer": answer
        }
        save_json(payload, args.output)
        logger.info(f"Saved JSON: {args.output}")

    elapsed = time.time() - start_time

    if not args.quiet:
        print("\n" + "=" * 60)
        print("WHITEBOARD EXTRACTION COMPLETE")
        print("=" * 60)
        print(f"Source: {input_path}")
        print(f"Processing time: {elapsed:.2f}s")
        if outcome is not None:
            print(f"Status: {outcome.status}")
            if outcome.profile:
                print(f"Selected pass: {outcome.profile}")
            print()
            print(outcome.display_text())
        if answer is not None:
            print("-" * 60)
            print(answer.display_text())
        print("=" * 60)

    if failed or (answer is not None and not answer.ok):
        return 1
    return 0


def main():
    """Main entry point."""
    parser = setup_argparser()
    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    if not check_dependencies(args.tesseract_cmd):
        sys.exit(1)

    try:
        exit_code = asyncio.run(run_pipeline(args))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.verbose:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
