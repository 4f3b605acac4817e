"""
Braille recognition module.

Provides:
- GridRecognizer: the local fixed-grid pipeline
  (binarize -> scan cells -> sample dots -> decode -> assemble)
- BrailleOCR: engine selection with fallback to the local pipeline
"""

import logging
import time
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from ..config import PipelineConfig, ResultStatus
from .assembler import assemble, braille_text, sort_reading_order
from .cells import CELL_WIDTH, CELL_HEIGHT, DOT_OFFSETS, MIN_CONFIDENCE, scan_cells
from .images import DEFAULT_THRESHOLD, apply_threshold, get_map_stats, to_grayscale
from .pixels import PixelBuffer
from .result import RecognitionResult

logger = logging.getLogger(__name__)


# ============================================================================
# Local Grid Recognizer
# ============================================================================

class GridRecognizer:
    """
    Fixed-grid Braille recognizer.

    Every call builds its own luminance map, bitmap and decoder state, so one
    instance can serve repeated or concurrent calls on different images.
    """

    def __init__(
        self,
        threshold: int = DEFAULT_THRESHOLD,
        cell_width: int = CELL_WIDTH,
        cell_height: int = CELL_HEIGHT,
        min_confidence: float = MIN_CONFIDENCE,
        dot_offsets: Sequence[Tuple[int, int]] = DOT_OFFSETS
    ):
        if cell_width <= 0 or cell_height <= 0:
            raise ValueError(f"Cell dimensions must be positive, got {cell_width}x{cell_height}")
        self.threshold = threshold
        self.cell_width = cell_width
        self.cell_height = cell_height
        self.min_confidence = min_confidence
        self.dot_offsets = tuple(dot_offsets)

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "GridRecognizer":
        return cls(
            threshold=config.image.threshold,
            cell_width=config.scan.cell_width,
            cell_height=config.scan.cell_height,
            min_confidence=config.scan.min_confidence
        )

    @property
    def name(self) -> str:
        return "grid"

    def recognize(self, buffer: PixelBuffer) -> RecognitionResult:
        """
        Run the full pipeline on one image.

        Args:
            buffer: Decoded RGBA image

        Returns:
            RecognitionResult; status is "no_text" when nothing decodes

        Raises:
            InvalidInputError: If the buffer is malformed
        """
        start_time = time.perf_counter()

        gray = to_grayscale(buffer)
        binary = apply_threshold(gray, self.threshold)

        cells = sort_reading_order(
            scan_cells(
                binary,
                cell_width=self.cell_width,
                cell_height=self.cell_height,
                min_confidence=self.min_confidence,
                dot_offsets=self.dot_offsets
            ),
            self.cell_height
        )

        text = assemble(cells, self.cell_height)
        confidence = sum(c.confidence for c in cells) / len(cells) if cells else 0.0
        stats = get_map_stats(binary, gray)

        if not cells:
            logger.info("No Braille cells above the confidence threshold")

        return RecognitionResult(
            text=text,
            confidence=confidence,
            braille_text=braille_text(cells, self.cell_height),
            cells=cells,
            engine_used=self.name,
            status=ResultStatus.SUCCESS if text else ResultStatus.NO_TEXT,
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
            metadata={
                "width": buffer.width,
                "height": buffer.height,
                "grid_columns": buffer.width // self.cell_width,
                "grid_rows": buffer.height // self.cell_height,
                "cell_width": self.cell_width,
                "cell_height": self.cell_height,
                "ink_ratio": stats.ink_ratio,
                "threshold": self.threshold,
            }
        )


# ============================================================================
# Braille OCR Main Class
# ============================================================================

class BrailleOCR:
    """
    Main Braille recognition interface.

    Supports:
    - grid (local fixed-grid scanner, always available)
    - remote (hosted vision model, needs an API key)
    """

    ENGINES = ("grid", "remote")

    def __init__(
        self,
        engine: str = "grid",
        fallback_to_grid: bool = True,
        config: Optional[PipelineConfig] = None
    ):
        if engine not in self.ENGINES:
            raise ValueError(f"Unknown recognition engine: {engine}. Available: {', '.join(self.ENGINES)}")

        self.config = config or PipelineConfig()
        self.engine = engine
        self.fallback_to_grid = fallback_to_grid

        self._grid = GridRecognizer.from_config(self.config)
        self._remote = None
        self._initialize_engine()

    def _initialize_engine(self):
        """Initialize the selected recognition engine."""
        if self.engine != "remote":
            logger.debug("Using local grid recognizer")
            return

        remote = self.config.remote
        if remote.api_key:
            from .remote import RemoteRecognizer

            self._remote = RemoteRecognizer(
                api_key=remote.api_key,
                model=remote.model,
                api_url=remote.api_url,
                timeout=remote.timeout,
                jpeg_quality=remote.jpeg_quality
            )
            logger.info(f"Using remote recognizer ({remote.model})")
        elif self.fallback_to_grid:
            logger.warning("Remote recognizer has no API key, falling back to grid recognizer")
            self.engine = "grid"
        else:
            raise ValueError("Remote recognizer requires an API key (set OPENROUTER_API_KEY)")

    def recognize(self, buffer: PixelBuffer) -> RecognitionResult:
        """
        Recognize Braille text in an image.

        Args:
            buffer: Decoded RGBA image

        Returns:
            RecognitionResult
        """
        if self._remote is None:
            return self._grid.recognize(buffer)

        result = self._remote.recognize(buffer)

        if result.status == ResultStatus.FAILED and self.fallback_to_grid:
            logger.warning("Remote recognition failed, using grid recognizer")
            fallback = self._grid.recognize(buffer)
            fallback.metadata["used_fallback"] = True
            fallback.metadata["remote_error"] = result.metadata.get("error")
            return fallback

        return result

    def recognize_file(self, image_path: Union[str, Path]) -> RecognitionResult:
        """Load an image file and recognize it."""
        from .io import load_image

        result = self.recognize(load_image(image_path))
        result.metadata["source_file"] = str(image_path)
        return result
