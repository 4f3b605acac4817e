"""
Braille Scan
============

A fixed-grid Braille recognizer. Converts a photographed region of
six-dot Braille cells into printable text.

Main components:
- Binarization (luminance + fixed threshold)
- Grid cell scanning and per-cell dot sampling
- Pattern decoding with number-sign state
- Reading-order text assembly
- Optional remote recognition service client
"""

__version__ = "1.0.0"
__author__ = "Braille Scan Team"
