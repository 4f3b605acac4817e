"""
Configuration and constants for the Braille recognition pipeline.

This module provides:
- Global configuration settings
- Grid scanning parameters
- API configuration for the optional remote recognizer
"""

import os
from dataclasses import dataclass, field
from typing import Optional
import logging

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("braille_scan")


# ============================================================================
# Processing Configuration
# ============================================================================

@dataclass
class ImageConfig:
    """Binarization configuration."""
    threshold: int = 128  # ink when luminance < threshold


@dataclass
class ScanConfig:
    """Grid scanning configuration.

    The cell footprint is calibrated for the expected capture distance and
    is not detected from the image.
    """
    cell_width: int = 10
    cell_height: int = 15
    min_confidence: float = 0.3  # cells must score strictly above this


@dataclass
class RemoteConfig:
    """Remote recognition service configuration."""
    api_key: Optional[str] = None
    model: str = "google/gemini-2.5-flash-lite"
    api_url: str = "https://openrouter.ai/api/v1/chat/completions"
    timeout: float = 30.0
    jpeg_quality: int = 80


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    image: ImageConfig = field(default_factory=ImageConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    remote: RemoteConfig = field(default_factory=RemoteConfig)

    # Global settings
    engine: str = "grid"  # grid, remote
    fallback_to_grid: bool = True
    debug_mode: bool = False


# ============================================================================
# Default Configuration Instance
# ============================================================================

def get_config() -> PipelineConfig:
    """Get the default pipeline configuration with environment overrides."""
    config = PipelineConfig()

    if os.environ.get("BRAILLE_SCAN_DEBUG", "").lower() == "true":
        config.debug_mode = True

    engine = os.environ.get("BRAILLE_SCAN_ENGINE")
    if engine:
        config.engine = engine.lower()

    threshold = os.environ.get("BRAILLE_SCAN_THRESHOLD")
    if threshold:
        try:
            config.image.threshold = int(threshold)
        except ValueError:
            logger.warning(f"Ignoring invalid BRAILLE_SCAN_THRESHOLD: {threshold!r}")

    # Remote service credentials from environment
    config.remote.api_key = os.environ.get("OPENROUTER_API_KEY")
    model = os.environ.get("BRAILLE_SCAN_REMOTE_MODEL")
    if model:
        config.remote.model = model

    return config


# ============================================================================
# Result Status Values
# ============================================================================

class ResultStatus:
    """Standard recognition status identifiers."""
    SUCCESS = "success"
    NO_TEXT = "no_text"
    FAILED = "failed"


NO_TEXT_MESSAGE = "No Braille text detected"


# ============================================================================
# JSON Schema Version
# ============================================================================

JSON_SCHEMA_VERSION = "1.0"
