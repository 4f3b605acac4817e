"""
Tests for the grid recognizer, engine selection and configuration.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def clean_env(monkeypatch):
    """Remove environment overrides that would change the defaults."""
    for name in (
        "BRAILLE_SCAN_DEBUG",
        "BRAILLE_SCAN_ENGINE",
        "BRAILLE_SCAN_THRESHOLD",
        "BRAILLE_SCAN_REMOTE_MODEL",
        "OPENROUTER_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfig:
    """Test configuration defaults and environment overrides."""

    def test_defaults(self, clean_env):
        """Test default pipeline configuration."""
        from braille_scan.config import get_config

        config = get_config()

        assert config.image.threshold == 128
        assert config.scan.cell_width == 10
        assert config.scan.cell_height == 15
        assert config.scan.min_confidence == 0.3
        assert config.engine == "grid"
        assert config.remote.api_key is None
        assert config.debug_mode is False

    def test_env_overrides(self, clean_env):
        """Test that environment variables override defaults."""
        from braille_scan.config import get_config

        clean_env.setenv("BRAILLE_SCAN_DEBUG", "true")
        clean_env.setenv("BRAILLE_SCAN_ENGINE", "Remote")
        clean_env.setenv("BRAILLE_SCAN_THRESHOLD", "100")
        clean_env.setenv("OPENROUTER_API_KEY", "sk-test")
        clean_env.setenv("BRAILLE_SCAN_REMOTE_MODEL", "vendor/model")

        config = get_config()

        assert config.debug_mode is True
        assert config.engine == "remote"
        assert config.image.threshold == 100
        assert config.remote.api_key == "sk-test"
        assert config.remote.model == "vendor/model"

    def test_invalid_threshold_ignored(self, clean_env):
        """Test that a non-numeric threshold keeps the default."""
        from braille_scan.config import get_config

        clean_env.setenv("BRAILLE_SCAN_THRESHOLD", "dark")

        assert get_config().image.threshold == 128


class TestGridRecognizer:
    """Test the local recognition pipeline."""

    @pytest.fixture
    def recognizer(self):
        from braille_scan.utils.recognition import GridRecognizer
        return GridRecognizer()

    def test_recognize_word(self, recognizer):
        """Test decoding a rendered word."""
        from braille_scan.utils.synth import render_text

        result = recognizer.recognize(render_text("hi"))

        assert result.text == "hi"
        assert result.status == "success"
        assert result.engine_used == "grid"
        assert result.braille_text == "⠍⠘"
        assert result.cell_count == 2
        # h = 3 dots (0.6), i = 2 dots (0.4)
        assert result.confidence == pytest.approx(0.5)

    def test_metadata(self, recognizer):
        """Test image and grid metadata."""
        from braille_scan.utils.synth import render_text

        result = recognizer.recognize(render_text("hi"))

        assert result.metadata["width"] == 20
        assert result.metadata["height"] == 15
        assert result.metadata["grid_columns"] == 2
        assert result.metadata["grid_rows"] == 1
        assert result.metadata["cell_width"] == 10
        assert result.metadata["cell_height"] == 15
        assert result.metadata["threshold"] == 128

    def test_blank_image(self, recognizer):
        """Test that a blank page reports no text instead of raising."""
        from braille_scan.utils.pixels import PixelBuffer

        result = recognizer.recognize(PixelBuffer.filled(100, 45))

        assert result.text == ""
        assert result.status == "no_text"
        assert result.confidence == 0.0
        assert result.is_empty
        assert result.display_text == "No Braille text detected"

    def test_image_smaller_than_cell(self, recognizer):
        """Test that an image smaller than one cell yields no text."""
        from braille_scan.utils.pixels import PixelBuffer

        result = recognizer.recognize(PixelBuffer.filled(5, 5, (0, 0, 0, 255)))

        assert result.text == ""
        assert result.cells == []

    def test_repeated_calls_are_independent(self, recognizer):
        """Test that decoder state does not carry between images."""
        from braille_scan.utils.synth import render_patterns
        from braille_scan.utils.patterns import SYMBOL_TO_PATTERN as P

        trailing_sign = render_patterns([[P["b"], P["#"]]])
        letter = render_patterns([[P["b"]]])

        assert recognizer.recognize(trailing_sign).text == "b"
        assert recognizer.recognize(letter).text == "b"

    def test_configured_threshold(self):
        """Test that the threshold controls which pixels are ink."""
        from braille_scan.utils.recognition import GridRecognizer
        from braille_scan.utils.synth import render_text

        gray_ink = render_text("hi", ink=(150, 150, 150, 255))

        assert GridRecognizer().recognize(gray_ink).text == ""
        assert GridRecognizer(threshold=200).recognize(gray_ink).text == "hi"

    def test_from_config(self, clean_env):
        """Test building the recognizer from pipeline configuration."""
        from braille_scan.config import get_config
        from braille_scan.utils.recognition import GridRecognizer

        config = get_config()
        config.scan.min_confidence = 0.1
        recognizer = GridRecognizer.from_config(config)

        assert recognizer.min_confidence == 0.1
        assert recognizer.cell_width == 10

    def test_invalid_dimensions(self):
        """Test that non-positive cell dimensions are rejected."""
        from braille_scan.utils.recognition import GridRecognizer

        with pytest.raises(ValueError):
            GridRecognizer(cell_height=0)

    def test_result_to_dict(self, recognizer):
        """Test result serialization."""
        from braille_scan.utils.synth import render_text

        data = recognizer.recognize(render_text("hi")).to_dict()

        assert data["text"] == "hi"
        assert data["engine"] == "grid"
        assert data["cell_count"] == 2
        assert data["cells"][0]["pattern"] == "110010"


class TestBrailleOCR:
    """Test engine selection and fallback."""

    def test_default_engine(self):
        """Test that grid is the default engine."""
        from braille_scan.utils.recognition import BrailleOCR
        from braille_scan.utils.synth import render_text

        ocr = BrailleOCR()

        assert ocr.engine == "grid"
        assert ocr.recognize(render_text("hi")).text == "hi"

    def test_unknown_engine(self):
        """Test that an unknown engine is rejected."""
        from braille_scan.utils.recognition import BrailleOCR

        with pytest.raises(ValueError):
            BrailleOCR(engine="tesseract")

    def test_remote_without_key_falls_back(self):
        """Test that the remote engine without credentials falls back to grid."""
        from braille_scan.utils.recognition import BrailleOCR

        ocr = BrailleOCR(engine="remote")

        assert ocr.engine == "grid"

    def test_remote_without_key_no_fallback(self):
        """Test that disabling fallback makes missing credentials an error."""
        from braille_scan.utils.recognition import BrailleOCR

        with pytest.raises(ValueError):
            BrailleOCR(engine="remote", fallback_to_grid=False)

    def test_remote_failure_uses_grid(self, monkeypatch):
        """Test that a failed remote call falls back to the grid result."""
        from braille_scan.config import PipelineConfig
        from braille_scan.utils import remote
        from braille_scan.utils.recognition import BrailleOCR
        from braille_scan.utils.synth import render_text

        def fake_post(*args, **kwargs):
            raise remote.requests.exceptions.ConnectionError("offline")

        monkeypatch.setattr(remote.requests, "post", fake_post)

        config = PipelineConfig()
        config.remote.api_key = "sk-test"
        ocr = BrailleOCR(engine="remote", config=config)
        result = ocr.recognize(render_text("hi"))

        assert result.text == "hi"
        assert result.engine_used == "grid"
        assert result.metadata["used_fallback"] is True
        assert "offline" in result.metadata["remote_error"]

    def test_remote_failure_without_fallback(self, monkeypatch):
        """Test that a failed remote call is returned as-is without fallback."""
        from braille_scan.config import PipelineConfig
        from braille_scan.utils import remote
        from braille_scan.utils.recognition import BrailleOCR
        from braille_scan.utils.synth import render_text

        def fake_post(*args, **kwargs):
            raise remote.requests.exceptions.Timeout("slow")

        monkeypatch.setattr(remote.requests, "post", fake_post)

        config = PipelineConfig()
        config.remote.api_key = "sk-test"
        ocr = BrailleOCR(engine="remote", fallback_to_grid=False, config=config)
        result = ocr.recognize(render_text("hi"))

        assert result.status == "failed"
        assert result.text == ""
        assert result.display_text == "No Braille text detected"

    def test_recognize_file(self, tmp_path):
        """Test recognizing an image file written to disk."""
        from braille_scan.utils.io import save_image
        from braille_scan.utils.recognition import BrailleOCR
        from braille_scan.utils.synth import render_text

        path = save_image(render_text("the"), tmp_path / "the.png")
        result = BrailleOCR().recognize_file(path)

        assert result.text == "the"
        assert result.metadata["source_file"] == str(path)

    def test_recognize_missing_file(self, tmp_path):
        """Test that a missing image file raises."""
        from braille_scan.utils.recognition import BrailleOCR

        with pytest.raises(FileNotFoundError):
            BrailleOCR().recognize_file(tmp_path / "missing.png")
