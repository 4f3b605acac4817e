"""
Utility modules for the Braille recognition pipeline.
"""

from .pixels import PixelBuffer, InvalidInputError
from .images import GrayscaleMap, BinaryMap, to_grayscale, apply_threshold, binarize
from .cells import Cell, DOT_OFFSETS, sample_cell, scan_cells
from .patterns import BRAILLE_PATTERNS, DecodeState, decode, encode_text
from .assembler import assemble, sort_reading_order
from .result import RecognitionResult
from .recognition import GridRecognizer, BrailleOCR
from .io import load_image, save_image, save_json, ensure_dir

__all__ = [
    # Pixels
    "PixelBuffer", "InvalidInputError",
    # Images
    "GrayscaleMap", "BinaryMap", "to_grayscale", "apply_threshold", "binarize",
    # Cells
    "Cell", "DOT_OFFSETS", "sample_cell", "scan_cells",
    # Patterns
    "BRAILLE_PATTERNS", "DecodeState", "decode", "encode_text",
    # Assembly
    "assemble", "sort_reading_order",
    # Recognition
    "RecognitionResult", "GridRecognizer", "BrailleOCR",
    # IO
    "load_image", "save_image", "save_json", "ensure_dir",
]
