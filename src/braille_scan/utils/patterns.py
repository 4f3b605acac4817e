"""
Braille pattern dictionary and decoder.

Pattern keys are six-character strings of '0'/'1', one character per sampled
dot position in the fixed order 1, 4, 2, 5, 3, 6 (left/right across each of
the three rows of the cell, top to bottom). The key -> character table is a
fixed literal, wrapped in a read-only mapping once at import.

Digits are not table entries. They are the letters a-j read while the
decoder is in number mode, which is entered by the number sign (010111)
and left again after the next emitted character.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


# ============================================================================
# Dot Layout
# ============================================================================

# Order in which the six dots appear in a pattern key
DOT_ORDER: Tuple[int, ...] = (1, 4, 2, 5, 3, 6)

PATTERN_LENGTH = len(DOT_ORDER)

NUMBER_SIGN = "#"

BRAILLE_UNICODE_BASE = 0x2800


def pattern_from_dots(flags: Sequence[bool]) -> str:
    """Concatenate six sampled ink flags (in DOT_ORDER) into a pattern key."""
    if len(flags) != PATTERN_LENGTH:
        raise ValueError(f"Expected {PATTERN_LENGTH} dot flags, got {len(flags)}")
    return "".join("1" if flag else "0" for flag in flags)


def is_valid_pattern(pattern: str) -> bool:
    return (
        isinstance(pattern, str)
        and len(pattern) == PATTERN_LENGTH
        and all(ch in "01" for ch in pattern)
    )


def pattern_to_unicode(pattern: str) -> str:
    """
    Render a pattern key as a Unicode Braille glyph (U+2800 block).

    The glyph shows the sampled dot positions: key character i is dot
    DOT_ORDER[i] of the cell.

    Raises:
        ValueError: If the key is not six '0'/'1' characters
    """
    if not is_valid_pattern(pattern):
        raise ValueError(f"Invalid Braille pattern: {pattern!r}")

    offset = 0
    for dot, flag in zip(DOT_ORDER, pattern):
        if flag == "1":
            offset |= 1 << (dot - 1)
    return chr(BRAILLE_UNICODE_BASE + offset)


# ============================================================================
# Dictionary
# ============================================================================

# Pattern key -> character. Digits are not listed: they are a-j read in
# number mode. 010111 is the number sign, so w has no cell of its own.
PATTERN_TABLE: Tuple[Tuple[str, str], ...] = (
    ("000000", " "),
    ("100000", "a"),
    ("110000", "b"),
    ("100100", "c"),
    ("100110", "d"),
    ("100010", "e"),
    ("110100", "f"),
    ("110110", "g"),
    ("110010", "h"),
    ("010100", "i"),
    ("010110", "j"),
    ("101000", "k"),
    ("111000", "l"),
    ("101100", "m"),
    ("101110", "n"),
    ("101010", "o"),
    ("111100", "p"),
    ("111110", "q"),
    ("111010", "r"),
    ("011100", "s"),
    ("011110", "t"),
    ("101001", "u"),
    ("111001", "v"),
    ("101101", "x"),
    ("101111", "y"),
    ("101011", "z"),
    ("010111", NUMBER_SIGN),
    ("000001", "'"),
    ("000011", '"'),
    ("001000", ","),
    ("001001", ";"),
    ("001010", ":"),
    ("001100", "."),
    ("001101", "!"),
    ("001110", "?"),
    ("010001", "-"),
)

# Digits share the cells of a-j
LETTER_TO_DIGIT: Mapping[str, str] = MappingProxyType(
    dict(zip("abcdefghij", "1234567890"))
)
DIGIT_TO_LETTER: Mapping[str, str] = MappingProxyType(
    {digit: letter for letter, digit in LETTER_TO_DIGIT.items()}
)


def _build_patterns() -> Mapping[str, str]:
    table: Dict[str, str] = {}

    for key, symbol in PATTERN_TABLE:
        if not is_valid_pattern(key):
            raise ValueError(f"Invalid pattern key {key!r} for {symbol!r}")
        if key in table:
            raise ValueError(
                f"Pattern {key} assigned to both {table[key]!r} and {symbol!r}"
            )
        table[key] = symbol

    return MappingProxyType(table)


BRAILLE_PATTERNS: Mapping[str, str] = _build_patterns()

SYMBOL_TO_PATTERN: Mapping[str, str] = MappingProxyType(
    {symbol: key for key, symbol in BRAILLE_PATTERNS.items()}
)


# ============================================================================
# Decoding
# ============================================================================

@dataclass
class DecodeState:
    """Per-run decoder state. Allocate a fresh instance for every image."""
    in_number_mode: bool = False


def decode(pattern: str, state: DecodeState) -> Optional[str]:
    """
    Decode one cell pattern.

    The number sign switches the state into number mode and emits nothing.
    Any other known pattern emits its character (a digit when the state is
    in number mode and the cell is a-j) and clears number mode, so only the
    single cell after a number sign is read as a digit.

    Args:
        pattern: Six-character pattern key
        state: Decoder state for the current run, updated in place

    Returns:
        The decoded character, or None for the number sign and for patterns
        with no dictionary entry
    """
    symbol = BRAILLE_PATTERNS.get(pattern) if isinstance(pattern, str) else None

    if symbol is None:
        logger.debug(f"No dictionary entry for pattern {pattern!r}")
        return None

    if symbol == NUMBER_SIGN:
        state.in_number_mode = True
        return None

    char = symbol
    if state.in_number_mode and symbol in LETTER_TO_DIGIT:
        char = LETTER_TO_DIGIT[symbol]

    state.in_number_mode = False
    return char


def decode_sequence(patterns: Iterable[str]) -> str:
    """Decode an ordered run of patterns with a fresh state (no trimming)."""
    state = DecodeState()
    chars = []
    for pattern in patterns:
        char = decode(pattern, state)
        if char is not None:
            chars.append(char)
    return "".join(chars)


# ============================================================================
# Encoding
# ============================================================================

def encode_text(text: str) -> List[str]:
    """
    Convert text to the sequence of cell patterns that decodes back to it.

    Letters are lower-cased. Each digit is written as a number sign followed
    by the matching a-j cell.

    Raises:
        ValueError: For characters with no Braille cell in the dictionary
    """
    patterns = []
    for ch in text.lower():
        if ch in DIGIT_TO_LETTER:
            patterns.append(SYMBOL_TO_PATTERN[NUMBER_SIGN])
            patterns.append(SYMBOL_TO_PATTERN[DIGIT_TO_LETTER[ch]])
        elif ch in SYMBOL_TO_PATTERN and ch != NUMBER_SIGN:
            patterns.append(SYMBOL_TO_PATTERN[ch])
        else:
            raise ValueError(f"No Braille cell for character {ch!r}")
    return patterns
