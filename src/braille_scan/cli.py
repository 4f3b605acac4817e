#!/usr/bin/env python
"""
Command-line interface for the Braille recognition pipeline.

Usage:
    braille-scan --input <image_or_folder> [options]

Examples:
    # Decode a single photo
    braille-scan --input scan.png

    # Decode a folder and write JSON results
    braille-scan --input ./scans --output ./results --format json

    # Debug mode with cell box visualization
    braille-scan --input scan.png --output ./results --debug
"""

import sys
from pathlib import Path

# Add src directory to path for imports when running as script
_src_dir = Path(__file__).parent.parent
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

import argparse
import json
import logging
import time
from typing import List, Tuple

from braille_scan import __version__

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("braille_scan")


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Braille Scan - Convert photographed Braille cells to text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Decode a single image:
    braille-scan --input scan.png

  Decode every image in a folder and save JSON results:
    braille-scan --input ./scans --output ./results

  Use the remote recognizer (needs OPENROUTER_API_KEY):
    braille-scan --input scan.jpg --engine remote
        """
    )

    # Required arguments
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Input image file or folder of images"
    )

    # Optional arguments
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output directory for JSON results and debug images"
    )

    parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default="text",
        help="Printed output format (default: text)"
    )

    parser.add_argument(
        "--engine",
        choices=["grid", "remote"],
        default=None,
        help="Recognition engine (default: grid, or BRAILLE_SCAN_ENGINE)"
    )

    parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Do not fall back to the grid engine when the remote engine fails"
    )

    parser.add_argument(
        "--threshold",
        type=int,
        default=None,
        help="Luminance threshold for ink pixels (default: 128)"
    )

    parser.add_argument(
        "--cell-width",
        type=int,
        default=None,
        help="Cell footprint width in pixels (default: 10)"
    )

    parser.add_argument(
        "--cell-height",
        type=int,
        default=None,
        help="Cell footprint height in pixels (default: 15)"
    )

    parser.add_argument(
        "--min-confidence",
        type=float,
        default=None,
        help="Minimum cell confidence to keep a cell (default: 0.3)"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (writes annotated cell images to --output)"
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
        version=f"%(prog)s {__version__}"
    )

    return parser


def check_dependencies() -> bool:
    """Check if required dependencies are available."""
    missing = []

    try:
        import cv2  # noqa: F401
    except ImportError:
        missing.append("opencv-python")

    try:
        import numpy  # noqa: F401
    except ImportError:
        missing.append("numpy")

    if missing:
        logger.error("Missing required dependencies:")
        for dep in missing:
            logger.error(f"  - {dep}")
        logger.error("\nInstall with: pip install -e .")
        return False

    return True


def build_config(args):
    """Apply command-line overrides on top of the environment configuration."""
    from braille_scan.config import get_config

    config = get_config()

    if args.engine:
        config.engine = args.engine
    if args.no_fallback:
        config.fallback_to_grid = False
    if args.threshold is not None:
        config.image.threshold = args.threshold
    if args.cell_width is not None:
        config.scan.cell_width = args.cell_width
    if args.cell_height is not None:
        config.scan.cell_height = args.cell_height
    if args.min_confidence is not None:
        config.scan.min_confidence = args.min_confidence
    if args.debug:
        config.debug_mode = True

    return config


def collect_inputs(input_path: Path) -> List[Tuple[Path, object]]:
    """Load the image, or every image in the folder, at input_path."""
    from braille_scan.utils.io import detect_input_type, load_image, load_images_from_folder

    input_type = detect_input_type(input_path)
    logger.info(f"Input type detected: {input_type}")

    if input_type == "image":
        return [(input_path, load_image(input_path))]
    if input_type == "image_folder":
        return load_images_from_folder(input_path)

    logger.error(f"Unsupported input: {input_path}")
    return []


def save_debug(result, buffer, output_path: Path) -> None:
    """Write the image with accepted cells boxed and labelled."""
    from braille_scan.utils.assembler import cell_labels, sort_reading_order
    from braille_scan.utils.images import draw_debug_image
    from braille_scan.utils.io import save_image

    width = result.metadata.get("cell_width")
    height = result.metadata.get("cell_height")
    cells = sort_reading_order(result.cells, height)
    boxes = [(c.x, c.y, width, height) for c in cells]
    labels = cell_labels(cells, height)

    save_image(draw_debug_image(buffer, boxes, labels), output_path)
    logger.info(f"Saved debug image: {output_path}")


def run_pipeline(args) -> int:
    """Run the recognition pipeline over the requested input."""
    from braille_scan.config import JSON_SCHEMA_VERSION
    from braille_scan.utils.io import ensure_dir, save_json
    from braille_scan.utils.pixels import InvalidInputError
    from braille_scan.utils.recognition import BrailleOCR

    start_time = time.time()
    config = build_config(args)

    output_dir = Path(args.output) if args.output else None
    if output_dir is not None:
        ensure_dir(output_dir)

    inputs = collect_inputs(Path(args.input))
    if not inputs:
        logger.error("No images to process")
        return 1

    ocr = BrailleOCR(
        engine=config.engine,
        fallback_to_grid=config.fallback_to_grid,
        config=config
    )

    exit_code = 0
    for image_path, buffer in inputs:
        try:
            result = ocr.recognize(buffer)
        except InvalidInputError as e:
            logger.error(f"Invalid image {image_path}: {e}")
            exit_code = 1
            continue

        result.metadata["source_file"] = str(image_path)

        if not args.quiet:
            if args.format == "json":
                print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
            elif len(inputs) > 1:
                print(f"{image_path.name}: {result.display_text}")
            else:
                print(result.display_text)

        if output_dir is not None:
            payload = result.to_dict()
            payload["schema_version"] = JSON_SCHEMA_VERSION
            json_path = save_json(payload, output_dir / f"{image_path.stem}.json")
            logger.info(f"Saved JSON: {json_path}")

            if config.debug_mode and result.cells:
                save_debug(result, buffer, output_dir / f"{image_path.stem}_debug.png")

    logger.info(f"Processed {len(inputs)} image(s) in {time.time() - start_time:.2f}s")
    return exit_code


def main():
    """Main entry point."""
    parser = setup_argparser()
    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    if not check_dependencies():
        sys.exit(1)

    try:
        exit_code = run_pipeline(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except (OSError, ValueError) as e:
        logger.error(f"Error: {e}")
        if args.debug:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
