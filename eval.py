#!/usr/bin/env python
"""
Evaluation script for the Braille recognition pipeline.

Runs the recognizer over a folder of images and compares the decoded text
against expected outputs.

Usage:
    python eval.py --images examples/sample_pages --expected-dir examples/expected_outputs
    python eval.py --images <dir> --expected-dir <dir> --report <report.json>
"""

import argparse
import difflib
import json
import logging
from pathlib import Path
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any
import sys

sys.path.insert(0, str(Path(__file__).parent / "src"))

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@dataclass
class EvaluationMetrics:
    """Evaluation metrics for one recognized image."""
    text: str = ""
    expected_text: Optional[str] = None
    confidence: float = 0.0
    cell_count: int = 0
    status: str = ""
    processing_time_ms: float = 0.0

    # Accuracy (if expected output provided)
    char_accuracy: Optional[float] = None
    exact_match: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def normalize_text(text: str) -> str:
    """Lower-case and drop whitespace; blank cells never survive the grid scan."""
    return "".join(text.lower().split())


def compare_text(expected: str, actual: str) -> float:
    """
    Compare expected and actual text, return similarity score.
    Uses a character-level sequence ratio on normalized text.
    """
    expected = normalize_text(expected)
    actual = normalize_text(actual)

    if not expected and not actual:
        return 1.0
    if not expected or not actual:
        return 0.0

    return difflib.SequenceMatcher(None, expected, actual).ratio()


def evaluate_image(ocr, image_path: Path, expected_dir: Optional[Path] = None) -> EvaluationMetrics:
    """Recognize a single image and score it."""
    result = ocr.recognize_file(image_path)

    metrics = EvaluationMetrics(
        text=result.text,
        confidence=result.confidence,
        cell_count=result.cell_count,
        status=result.status,
        processing_time_ms=result.processing_time_ms
    )

    if expected_dir:
        expected_file = expected_dir / f"{image_path.stem}.json"
        if expected_file.exists():
            with open(expected_file, 'r', encoding='utf-8') as f:
                expected = json.load(f)
            metrics.expected_text = expected.get("text", "")
            metrics.char_accuracy = compare_text(metrics.expected_text, result.text)
            metrics.exact_match = normalize_text(metrics.expected_text) == normalize_text(result.text)

    return metrics


def evaluate_directory(
    ocr,
    images_dir: Path,
    expected_dir: Optional[Path] = None
) -> Dict[str, EvaluationMetrics]:
    """Evaluate all images in a directory."""
    from braille_scan.utils.io import list_images

    results = {}
    for image_path in list_images(images_dir):
        try:
            results[image_path.stem] = evaluate_image(ocr, image_path, expected_dir)
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping {image_path}: {e}")
    return results


def print_metrics(metrics: EvaluationMetrics, name: str = "Image"):
    """Print metrics in a formatted way."""
    print(f"\n{'='*60}")
    print(f"Evaluation Results: {name}")
    print('='*60)
    print(f"  Decoded: {metrics.text!r}")
    print(f"  Status: {metrics.status}")
    print(f"  Cells: {metrics.cell_count}")
    print(f"  Confidence: {metrics.confidence:.1%}")
    print(f"  Time: {metrics.processing_time_ms:.1f}ms")

    if metrics.char_accuracy is not None:
        print(f"  Expected: {metrics.expected_text!r}")
        print(f"  Character accuracy: {metrics.char_accuracy:.1%}")
        print(f"  Exact match: {'yes' if metrics.exact_match else 'no'}")


def generate_report(
    results: Dict[str, EvaluationMetrics]
) -> Dict[str, Any]:
    """Generate a summary report from multiple evaluations."""
    if not results:
        return {"error": "No results to report"}

    total = len(results)
    scored = [m for m in results.values() if m.char_accuracy is not None]

    return {
        "summary": {
            "images_evaluated": total,
            "images_with_expected": len(scored),
            "average_confidence": round(sum(m.confidence for m in results.values()) / total, 3),
            "average_char_accuracy": round(sum(m.char_accuracy for m in scored) / len(scored), 3) if scored else None,
            "exact_matches": sum(1 for m in scored if m.exact_match),
            "no_text": sum(1 for m in results.values() if m.status == "no_text"),
        },
        "individual_results": {
            name: metrics.to_dict()
            for name, metrics in results.items()
        }
    }


def main():
    parser = argparse.ArgumentParser(
        description="Evaluate Braille recognition accuracy"
    )

    parser.add_argument(
        "--images",
        type=Path,
        required=True,
        help="Directory containing images to recognize"
    )

    parser.add_argument(
        "--expected-dir",
        type=Path,
        help="Directory containing expected outputs (<stem>.json with a 'text' field)"
    )

    parser.add_argument(
        "--engine",
        choices=["grid", "remote"],
        default="grid",
        help="Recognition engine (default: grid)"
    )

    parser.add_argument(
        "--report", "-r",
        type=Path,
        help="Output path for evaluation report JSON"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress printed output"
    )

    args = parser.parse_args()

    from braille_scan.config import get_config
    from braille_scan.utils.recognition import BrailleOCR

    if not args.images.is_dir():
        logger.error(f"Images directory not found: {args.images}")
        return 1

    ocr = BrailleOCR(engine=args.engine, config=get_config())
    results = evaluate_directory(ocr, args.images, args.expected_dir)

    if not args.quiet:
        for name, metrics in results.items():
            print_metrics(metrics, name)

    report = generate_report(results)

    if args.report and results:
        with open(args.report, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2)
        logger.info(f"Report saved to: {args.report}")

    if not args.quiet and "summary" in report:
        print("\nSummary:")
        for key, value in report["summary"].items():
            print(f"  {key}: {value}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
