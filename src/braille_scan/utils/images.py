"""
Image preprocessing utilities for the Braille recognition pipeline.

Provides:
- Grayscale conversion (luminance)
- Fixed-threshold binarization
- Map statistics
- Debug visualization
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .pixels import PixelBuffer, InvalidInputError

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 128

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class GrayscaleMap:
    """One luminance value (0-255) per pixel."""
    data: np.ndarray

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def height(self) -> int:
        return self.data.shape[0]


@dataclass(frozen=True)
class BinaryMap:
    """One boolean per pixel, True where the pixel is ink."""
    data: np.ndarray

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def height(self) -> int:
        return self.data.shape[0]

    def is_ink(self, x: int, y: int) -> bool:
        """Ink test for a single pixel. Positions off the map are background."""
        if 0 <= x < self.width and 0 <= y < self.height:
            return bool(self.data[y, x])
        return False


@dataclass
class MapStats:
    """Statistics about a binarized image."""
    height: int
    width: int
    ink_pixels: int
    ink_ratio: float
    mean_luminance: Optional[float] = None


# ============================================================================
# Core Preprocessing Functions
# ============================================================================

def to_grayscale(buffer: PixelBuffer) -> GrayscaleMap:
    """
    Convert an RGBA buffer to a luminance map.

    Luminance = round(0.299 R + 0.587 G + 0.114 B), halves rounded up.
    The alpha channel is ignored.

    Args:
        buffer: Input pixel buffer

    Returns:
        GrayscaleMap with the buffer's dimensions
    """
    if not isinstance(buffer, PixelBuffer):
        raise InvalidInputError(f"Expected a PixelBuffer, got {type(buffer).__name__}")

    rgb = buffer.data[:, :, :3].astype(np.float64)
    wr, wg, wb = LUMA_WEIGHTS
    luminance = wr * rgb[:, :, 0] + wg * rgb[:, :, 1] + wb * rgb[:, :, 2]
    gray = np.clip(np.floor(luminance + 0.5), 0, 255).astype(np.uint8)

    return GrayscaleMap(data=gray)


def apply_threshold(gray: GrayscaleMap, threshold: int = DEFAULT_THRESHOLD) -> BinaryMap:
    """
    Classify each pixel as ink (luminance strictly below threshold) or background.

    Args:
        gray: Luminance map
        threshold: Fixed threshold, 0-256

    Returns:
        BinaryMap with the same dimensions
    """
    if not 0 <= threshold <= 256:
        raise ValueError(f"Threshold must be between 0 and 256, got {threshold}")

    # Widen before comparing so a threshold of 256 stays in range
    return BinaryMap(data=gray.data.astype(np.int16) < int(threshold))


def binarize(buffer: PixelBuffer, threshold: int = DEFAULT_THRESHOLD) -> BinaryMap:
    """
    Convert an RGBA buffer to a two-level ink/background bitmap.

    Args:
        buffer: Input pixel buffer
        threshold: Luminance threshold (default 128)

    Returns:
        BinaryMap

    Raises:
        InvalidInputError: If the buffer is malformed
    """
    binary = apply_threshold(to_grayscale(buffer), threshold)
    logger.debug(f"Binarized {buffer.width}x{buffer.height} image at threshold {threshold}")
    return binary


def get_map_stats(binary: BinaryMap, gray: Optional[GrayscaleMap] = None) -> MapStats:
    """
    Calculate statistics about a binarized image.

    Args:
        binary: Binarized map
        gray: Optional luminance map for mean intensity

    Returns:
        MapStats
    """
    total = binary.data.size
    ink = int(np.count_nonzero(binary.data))

    return MapStats(
        height=binary.height,
        width=binary.width,
        ink_pixels=ink,
        ink_ratio=(ink / total) if total else 0.0,
        mean_luminance=float(np.mean(gray.data)) if gray is not None and gray.data.size else None
    )


# ============================================================================
# Debug Visualization
# ============================================================================

def draw_debug_image(
    buffer: PixelBuffer,
    boxes: List[Tuple[int, int, int, int]],
    labels: Optional[List[str]] = None,
    colors: Optional[List[Tuple[int, int, int]]] = None,
    line_width: int = 1,
    scale: int = 4
) -> np.ndarray:
    """
    Draw cell boxes on an enlarged copy of the image for debugging.

    Args:
        buffer: Input pixel buffer
        boxes: List of (x, y, width, height) tuples in source pixels
        labels: Optional labels for each box
        colors: Optional colors for each box (BGR)
        line_width: Line thickness
        scale: Integer magnification, cells are only a few pixels wide

    Returns:
        BGR image with drawn boxes
    """
    import cv2

    debug_img = cv2.cvtColor(np.ascontiguousarray(buffer.data), cv2.COLOR_RGBA2BGR)
    if scale > 1:
        debug_img = cv2.resize(
            debug_img,
            (buffer.width * scale, buffer.height * scale),
            interpolation=cv2.INTER_NEAREST
        )

    default_colors = [
        (0, 200, 0),    # Green
        (255, 0, 0),    # Blue
        (0, 0, 255),    # Red
    ]

    for i, box in enumerate(boxes):
        x, y, w, h = (v * scale for v in box)
        color = colors[i] if colors and i < len(colors) else default_colors[i % len(default_colors)]

        cv2.rectangle(debug_img, (x, y), (x + w - 1, y + h - 1), color, line_width)

        if labels and i < len(labels):
            cv2.putText(
                debug_img,
                labels[i],
                (x + 2, y + h - 4),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.4,
                color,
                1
            )

    return debug_img
