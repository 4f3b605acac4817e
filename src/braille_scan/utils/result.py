"""
Recognition result dataclass.

Shared by every recognizer (local grid scanner and remote service).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..config import NO_TEXT_MESSAGE, ResultStatus
from .cells import Cell


@dataclass
class RecognitionResult:
    """Complete recognition result for one image."""
    text: str
    confidence: float
    braille_text: str = ""
    cells: List[Cell] = field(default_factory=list)
    engine_used: str = ""
    status: str = ResultStatus.SUCCESS  # success, no_text, failed
    processing_time_ms: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.text

    @property
    def display_text(self) -> str:
        """Text for the caller-facing layer; empty output is reported, not raised."""
        return self.text if self.text else NO_TEXT_MESSAGE

    @property
    def cell_count(self) -> int:
        return len(self.cells)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "braille_text": self.braille_text,
            "confidence": self.confidence,
            "engine": self.engine_used,
            "status": self.status,
            "cell_count": self.cell_count,
            "cells": [c.to_dict() for c in self.cells],
            "processing_time_ms": self.processing_time_ms,
            "metadata": self.metadata
        }
