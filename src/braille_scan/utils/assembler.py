"""
Text assembler for the Braille recognition pipeline.

Orders accepted cells into reading order and runs them through the
pattern decoder to produce the final string.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from .cells import Cell, CELL_HEIGHT
from .patterns import BRAILLE_PATTERNS, NUMBER_SIGN, DecodeState, decode, pattern_to_unicode

logger = logging.getLogger(__name__)


def sort_reading_order(cells: Iterable[Cell], cell_height: int = CELL_HEIGHT) -> List[Cell]:
    """
    Sort cells row-major: by grid row (y // cell_height), then by x.

    Args:
        cells: Cells in any order
        cell_height: Cell footprint height used to derive the row index

    Returns:
        New list in reading order
    """
    if cell_height <= 0:
        raise ValueError(f"Cell height must be positive, got {cell_height}")
    return sorted(cells, key=lambda c: (c.y // cell_height, c.x))


def decode_cells(
    cells: Iterable[Cell],
    cell_height: int = CELL_HEIGHT
) -> List[Tuple[Cell, Optional[str]]]:
    """
    Decode cells in reading order with a fresh DecodeState.

    Returns:
        (cell, character) pairs in reading order. The character is None for
        number signs and for patterns with no dictionary entry.
    """
    state = DecodeState()
    return [
        (cell, decode(cell.pattern, state))
        for cell in sort_reading_order(cells, cell_height)
    ]


def assemble(cells: Iterable[Cell], cell_height: int = CELL_HEIGHT) -> str:
    """
    Decode cells into text.

    Cells are re-sorted into reading order, decoded with a fresh
    DecodeState, concatenated, and stripped of surrounding whitespace.
    An empty string is a valid result.

    Args:
        cells: Accepted cells from the grid scanner
        cell_height: Cell footprint height

    Returns:
        Decoded text
    """
    decoded = decode_cells(cells, cell_height)

    chars = [char for _, char in decoded if char is not None]
    text = "".join(chars).strip()
    logger.debug(
        f"Assembled {len(decoded)} cells into {len(text)} characters "
        f"({len(decoded) - len(chars)} cells emitted nothing)"
    )
    return text


def cell_labels(cells: Iterable[Cell], cell_height: int = CELL_HEIGHT) -> List[str]:
    """
    One label per cell in reading order, matching the decoded text.

    Number signs get an empty label and unmapped patterns get "?".
    """
    labels = []
    for cell, char in decode_cells(cells, cell_height):
        if char is not None:
            labels.append(char)
        elif BRAILLE_PATTERNS.get(cell.pattern) == NUMBER_SIGN:
            labels.append("")
        else:
            labels.append("?")
    return labels


def braille_text(cells: Iterable[Cell], cell_height: int = CELL_HEIGHT) -> str:
    """Render cells in reading order as Unicode Braille glyphs."""
    return "".join(
        pattern_to_unicode(cell.pattern)
        for cell in sort_reading_order(cells, cell_height)
    )
