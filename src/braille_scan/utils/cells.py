"""
Braille cell localization and dot sampling.

Provides:
- Cell data model
- Dot sampling at fixed offsets inside a cell footprint
- Fixed-grid cell scanning over a binarized image

The scanner assumes the image is already cropped and aligned to cell
boundaries. It performs no rotation, scale or spacing search, so misaligned
input yields poor output rather than an error.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Sequence, Tuple

from .images import BinaryMap
from .patterns import DOT_ORDER, pattern_from_dots

logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

CELL_WIDTH = 10
CELL_HEIGHT = 15

# Cells must score strictly above this to be kept
MIN_CONFIDENCE = 0.3

# Confidence contributed by each ink dot
DOT_WEIGHT = 0.2

# (dx, dy) sample offsets from the cell origin, in DOT_ORDER:
# dot 1 top-left, dot 4 top-right, dot 2 middle-left,
# dot 5 middle-right, dot 3 bottom-left, dot 6 bottom-right
DOT_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (2, 2), (7, 2),
    (2, 7), (7, 7),
    (2, 12), (7, 12),
)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class Cell:
    """One scan-grid position and the dots sampled there."""
    x: int
    y: int
    dots: Tuple[bool, ...]
    confidence: float

    @property
    def pattern(self) -> str:
        return pattern_from_dots(self.dots)

    @property
    def ink_count(self) -> int:
        return sum(1 for dot in self.dots if dot)

    @property
    def raised_dots(self) -> Tuple[int, ...]:
        """Standard dot numbers (1-6) sampled as ink, ascending."""
        return tuple(sorted(num for num, dot in zip(DOT_ORDER, self.dots) if dot))

    def row(self, cell_height: int = CELL_HEIGHT) -> int:
        return self.y // cell_height

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "pattern": self.pattern,
            "dots": list(self.raised_dots),
            "confidence": self.confidence,
        }


def dot_confidence(ink_count: int) -> float:
    """
    Density score for a cell: DOT_WEIGHT per ink dot, capped at 1.0.

    This is a heuristic, not a calibrated probability.
    """
    return min(1.0, round(DOT_WEIGHT * ink_count, 6))


# ============================================================================
# Sampling and Scanning
# ============================================================================

def sample_cell(
    binary: BinaryMap,
    origin_x: int,
    origin_y: int,
    dot_offsets: Sequence[Tuple[int, int]] = DOT_OFFSETS
) -> Cell:
    """
    Sample the six dot positions of the cell at (origin_x, origin_y).

    Positions that fall outside the map are read as background.

    Args:
        binary: Binarized image
        origin_x: Cell origin, pixel column
        origin_y: Cell origin, pixel row
        dot_offsets: Six (dx, dy) offsets in DOT_ORDER

    Returns:
        Cell with its dot vector and confidence
    """
    if len(dot_offsets) != len(DOT_ORDER):
        raise ValueError(f"Expected {len(DOT_ORDER)} dot offsets, got {len(dot_offsets)}")

    dots = tuple(
        binary.is_ink(origin_x + dx, origin_y + dy)
        for dx, dy in dot_offsets
    )
    confidence = dot_confidence(sum(dots))

    return Cell(x=origin_x, y=origin_y, dots=dots, confidence=confidence)


def scan_cells(
    binary: BinaryMap,
    cell_width: int = CELL_WIDTH,
    cell_height: int = CELL_HEIGHT,
    min_confidence: float = MIN_CONFIDENCE,
    dot_offsets: Sequence[Tuple[int, int]] = DOT_OFFSETS
) -> Iterator[Cell]:
    """
    Walk the map in a regular, non-overlapping grid and yield accepted cells.

    Grid positions run row-major: y from 0 while y + cell_height <= height,
    x from 0 while x + cell_width <= width. A cell is yielded only when its
    confidence is strictly greater than min_confidence.

    Args:
        binary: Binarized image
        cell_width: Cell footprint width in pixels
        cell_height: Cell footprint height in pixels
        min_confidence: Acceptance threshold
        dot_offsets: Six (dx, dy) offsets in DOT_ORDER

    Yields:
        Accepted cells in row-major order
    """
    if cell_width <= 0 or cell_height <= 0:
        raise ValueError(f"Cell dimensions must be positive, got {cell_width}x{cell_height}")

    scanned = 0
    accepted = 0

    for y in range(0, binary.height - cell_height + 1, cell_height):
        for x in range(0, binary.width - cell_width + 1, cell_width):
            scanned += 1
            cell = sample_cell(binary, x, y, dot_offsets)
            if cell.confidence > min_confidence:
                accepted += 1
                yield cell

    logger.debug(f"Grid scan: {accepted}/{scanned} cells above {min_confidence}")
