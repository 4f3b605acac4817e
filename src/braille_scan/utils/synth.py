"""
Synthetic Braille image rendering.

Draws cells on a blank page using the same grid geometry and dot offsets
the scanner samples, so rendered text decodes back through the pipeline.
Used for sample generation, evaluation and tests.
"""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from .cells import CELL_WIDTH, CELL_HEIGHT, DOT_OFFSETS
from .patterns import encode_text, is_valid_pattern
from .pixels import PixelBuffer

logger = logging.getLogger(__name__)

INK = (0, 0, 0, 255)
PAPER = (255, 255, 255, 255)


def render_patterns(
    rows: Sequence[Sequence[str]],
    cell_width: int = CELL_WIDTH,
    cell_height: int = CELL_HEIGHT,
    dot_offsets: Sequence[Tuple[int, int]] = DOT_OFFSETS,
    dot_size: int = 3,
    columns: Optional[int] = None,
    ink: Tuple[int, int, int, int] = INK,
    paper: Tuple[int, int, int, int] = PAPER
) -> PixelBuffer:
    """
    Render rows of pattern keys as a pixel buffer.

    Args:
        rows: One sequence of six-character pattern keys per line of cells
        cell_width: Cell footprint width
        cell_height: Cell footprint height
        dot_offsets: Dot centres in pattern order
        dot_size: Side of the square drawn for each raised dot
        columns: Minimum number of cells per line (pads with blank cells)
        ink: RGBA colour of dots
        paper: RGBA colour of the background

    Returns:
        PixelBuffer of size (columns * cell_width) x (len(rows) * cell_height)
    """
    n_cols = max([len(row) for row in rows] + [columns or 0])
    height = len(rows) * cell_height
    width = n_cols * cell_width

    data = np.empty((height, width, 4), dtype=np.uint8)
    data[:, :] = paper

    half = dot_size // 2
    for r, row in enumerate(rows):
        for c, pattern in enumerate(row):
            if not is_valid_pattern(pattern):
                raise ValueError(f"Invalid Braille pattern: {pattern!r}")

            x0 = c * cell_width
            y0 = r * cell_height
            for flag, (dx, dy) in zip(pattern, dot_offsets):
                if flag != "1":
                    continue
                # Clip each dot to its own cell
                x1 = max(x0, x0 + dx - half)
                x2 = min(x0 + cell_width, x0 + dx - half + dot_size)
                y1 = max(y0, y0 + dy - half)
                y2 = min(y0 + cell_height, y0 + dy - half + dot_size)
                data[y1:y2, x1:x2] = ink

    logger.debug(f"Rendered {len(rows)} row(s) x {n_cols} cell(s) as {width}x{height}")
    return PixelBuffer(width=width, height=height, data=data)


def render_text(
    text: str,
    columns: Optional[int] = None,
    **kwargs
) -> PixelBuffer:
    """
    Render text as Braille cells.

    Lines are split on newlines; with `columns` set, long lines are also
    wrapped every `columns` cells. Digits take two cells (number sign + a-j).

    Raises:
        ValueError: For characters with no Braille cell
    """
    rows = []
    for line in text.split("\n"):
        patterns = encode_text(line)
        if columns:
            rows.extend(patterns[i:i + columns] for i in range(0, len(patterns), columns))
            if not patterns:
                rows.append([])
        else:
            rows.append(patterns)

    return render_patterns(rows, columns=columns, **kwargs)
