"""
End-to-end integration tests for the Braille recognition pipeline.
"""

import pytest
import numpy as np
import json
import sys
import tempfile
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class TestEndToEnd:
    """Full pipeline from pixels to text."""

    @pytest.fixture
    def temp_output_dir(self):
        """Create a temporary output directory."""
        with tempfile.TemporaryDirectory(prefix="braille_scan_test_") as tmp_dir:
            yield Path(tmp_dir)

    def test_all_white_image(self):
        """A 100x45 white image decodes to nothing."""
        from braille_scan.utils.pixels import PixelBuffer
        from braille_scan.utils.recognition import GridRecognizer

        result = GridRecognizer().recognize(PixelBuffer.filled(100, 45))

        assert result.text == ""
        assert result.cells == []

    def test_single_dot_cell_below_threshold(self):
        """A lone dot 1 scores 0.2 and is dropped at the default threshold."""
        from braille_scan.utils.recognition import GridRecognizer
        from braille_scan.utils.synth import render_patterns

        image = render_patterns([["100000"]])

        assert GridRecognizer().recognize(image).text == ""
        assert GridRecognizer(min_confidence=0.1).recognize(image).text == "a"

    def test_solid_cell_has_no_entry(self):
        """A fully inked 10x15 block reads as all six dots, which is unmapped."""
        from braille_scan.utils.pixels import PixelBuffer
        from braille_scan.utils.recognition import GridRecognizer

        result = GridRecognizer().recognize(PixelBuffer.filled(10, 15, (0, 0, 0, 255)))

        assert result.cell_count == 1
        assert result.cells[0].pattern == "111111"
        assert result.cells[0].confidence == 1.0
        assert result.text == ""
        assert result.status == "no_text"

    def test_number_sign_sequence(self):
        """Number sign followed by h, i decodes to '8i'."""
        from braille_scan.utils.recognition import GridRecognizer
        from braille_scan.utils.synth import render_patterns

        image = render_patterns([["010111", "110010", "010100"]])

        assert GridRecognizer().recognize(image).text == "8i"

    def test_numbers(self):
        """Digits survive the round trip through rendered cells."""
        from braille_scan.utils.recognition import GridRecognizer
        from braille_scan.utils.synth import render_text

        result = GridRecognizer().recognize(render_text("room 42"))

        # Blank cells have no ink and never pass the scanner
        assert result.text == "room42"

    def test_multiple_rows(self):
        """Rows are read top to bottom, left to right."""
        from braille_scan.utils.recognition import GridRecognizer
        from braille_scan.utils.synth import render_text

        result = GridRecognizer().recognize(render_text("the quick\nred fox"))

        assert result.text == "thequickredfox"
        assert result.metadata["grid_rows"] == 2

    def test_punctuation(self):
        """Multi-dot punctuation is decoded."""
        from braille_scan.utils.recognition import GridRecognizer
        from braille_scan.utils.synth import render_text

        assert GridRecognizer().recognize(render_text("stop! hey?")).text == "stop!hey?"

    def test_scaled_cells(self):
        """A larger cell footprint works with matching offsets."""
        from braille_scan.utils.recognition import GridRecognizer
        from braille_scan.utils.synth import render_text

        offsets = [(4, 4), (14, 4), (4, 14), (14, 14), (4, 24), (14, 24)]
        image = render_text("hello", cell_width=20, cell_height=30, dot_offsets=offsets, dot_size=5)
        recognizer = GridRecognizer(cell_width=20, cell_height=30, dot_offsets=offsets)

        assert recognizer.recognize(image).text == "hello"

    def test_noise_does_not_raise(self):
        """Random pixels produce some result without raising."""
        from braille_scan.utils.pixels import PixelBuffer
        from braille_scan.utils.recognition import GridRecognizer

        rng = np.random.default_rng(0)
        noisy = PixelBuffer.from_array(rng.integers(0, 256, (60, 80, 4), dtype=np.uint8))
        result = GridRecognizer().recognize(noisy)

        assert 0.0 <= result.confidence <= 1.0
        assert all(c.confidence > 0.3 for c in result.cells)

    def test_file_round_trip(self, temp_output_dir):
        """Save a rendered page, load it, recognize it and store JSON."""
        from braille_scan.utils.io import save_image, load_image, save_json, load_json
        from braille_scan.utils.recognition import BrailleOCR
        from braille_scan.utils.synth import render_text

        path = save_image(render_text("hello"), temp_output_dir / "hello.png")
        result = BrailleOCR().recognize(load_image(path))

        json_path = save_json(result.to_dict(), temp_output_dir / "hello.json")
        loaded = load_json(json_path)

        assert loaded["text"] == "hello"
        assert loaded["cell_count"] == 5
        assert loaded["braille_text"] == result.braille_text


class TestCLI:
    """Command-line interface."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ("BRAILLE_SCAN_ENGINE", "BRAILLE_SCAN_THRESHOLD", "BRAILLE_SCAN_DEBUG"):
            monkeypatch.delenv(name, raising=False)

    def run_cli(self, monkeypatch, *argv):
        from braille_scan import cli

        monkeypatch.setattr(sys, "argv", ["braille-scan", *argv])
        with pytest.raises(SystemExit) as excinfo:
            cli.main()
        return excinfo.value.code

    def test_single_image(self, tmp_path, monkeypatch, capsys):
        from braille_scan.utils.io import save_image
        from braille_scan.utils.synth import render_text

        path = save_image(render_text("hi"), tmp_path / "hi.png")

        assert self.run_cli(monkeypatch, "--input", str(path)) == 0
        assert capsys.readouterr().out.strip() == "hi"

    def test_blank_image_message(self, tmp_path, monkeypatch, capsys):
        from braille_scan.utils.io import save_image
        from braille_scan.utils.pixels import PixelBuffer

        path = save_image(PixelBuffer.filled(30, 15), tmp_path / "blank.png")

        assert self.run_cli(monkeypatch, "--input", str(path)) == 0
        assert capsys.readouterr().out.strip() == "No Braille text detected"

    def test_folder_with_json_output(self, tmp_path, monkeypatch, capsys):
        from braille_scan.utils.io import save_image
        from braille_scan.utils.synth import render_text

        images = tmp_path / "images"
        out = tmp_path / "out"
        save_image(render_text("hi"), images / "one.png")
        save_image(render_text("the"), images / "two.png")

        code = self.run_cli(monkeypatch, "--input", str(images), "--output", str(out), "--debug")

        assert code == 0
        printed = capsys.readouterr().out.splitlines()
        assert printed == ["one.png: hi", "two.png: the"]

        data = json.loads((out / "one.json").read_text(encoding="utf-8"))
        assert data["text"] == "hi"
        assert data["schema_version"] == "1.0"
        assert (out / "one_debug.png").exists()

    def test_json_format(self, tmp_path, monkeypatch, capsys):
        from braille_scan.utils.io import save_image
        from braille_scan.utils.synth import render_text

        path = save_image(render_text("hi"), tmp_path / "hi.png")

        assert self.run_cli(monkeypatch, "--input", str(path), "--format", "json") == 0
        data = json.loads(capsys.readouterr().out)
        assert data["text"] == "hi"
        assert data["engine"] == "grid"

    def test_min_confidence_option(self, tmp_path, monkeypatch, capsys):
        from braille_scan.utils.io import save_image
        from braille_scan.utils.synth import render_patterns

        path = save_image(render_patterns([["100000"]]), tmp_path / "a.png")

        assert self.run_cli(monkeypatch, "--input", str(path), "--min-confidence", "0.1") == 0
        assert capsys.readouterr().out.strip() == "a"

    def test_debug_labels_follow_number_mode(self, tmp_path, monkeypatch):
        from braille_scan import cli
        from braille_scan.utils import images
        from braille_scan.utils.recognition import GridRecognizer
        from braille_scan.utils.synth import render_text

        captured = {}

        def fake_draw(buffer, boxes, labels=None, **kwargs):
            captured["labels"] = labels
            return np.zeros((1, 1, 3), dtype=np.uint8)

        monkeypatch.setattr(images, "draw_debug_image", fake_draw)

        buffer = render_text("room 42")
        result = GridRecognizer().recognize(buffer)
        cli.save_debug(result, buffer, tmp_path / "debug.png")

        assert captured["labels"] == ["r", "o", "o", "m", "", "4", "", "2"]

    def test_missing_input(self, tmp_path, monkeypatch):
        assert self.run_cli(monkeypatch, "--input", str(tmp_path / "nothing.png")) == 1


class TestIOOperations:
    """Test I/O operations."""

    def test_save_and_load_json(self):
        """Test JSON save and load cycle."""
        from braille_scan.utils.io import save_json, load_json

        with tempfile.TemporaryDirectory() as tmp_dir:
            test_data = {
                "text": "hi",
                "cells": [{"x": 0, "y": 0, "pattern": "110010"}],
                "confidence": np.float64(0.5),
            }

            json_path = Path(tmp_dir) / "test.json"
            save_json(test_data, json_path)

            loaded = load_json(json_path)

            assert loaded == {**test_data, "confidence": 0.5}

    def test_detect_input_type(self):
        """Test input type detection."""
        from braille_scan.utils.io import detect_input_type

        with tempfile.TemporaryDirectory() as tmp_dir:
            tmp_dir = Path(tmp_dir)

            (tmp_dir / "notes.txt").touch()
            (tmp_dir / "scan.png").touch()

            img_dir = tmp_dir / "images"
            img_dir.mkdir()
            (img_dir / "page1.jpg").touch()

            empty_dir = tmp_dir / "empty"
            empty_dir.mkdir()

            assert detect_input_type(tmp_dir / "notes.txt") == "unknown"
            assert detect_input_type(tmp_dir / "scan.png") == "image"
            assert detect_input_type(img_dir) == "image_folder"
            assert detect_input_type(empty_dir) == "unknown"
            assert detect_input_type(tmp_dir / "missing.png") == "unknown"

    def test_load_undecodable_image(self, tmp_path):
        """Test that a file that is not an image raises ValueError."""
        from braille_scan.utils.io import load_image

        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image")

        with pytest.raises(ValueError):
            load_image(path)

    def test_folder_skips_broken_files(self, tmp_path):
        """Test that unreadable images in a folder are skipped."""
        from braille_scan.utils.io import save_image, load_images_from_folder
        from braille_scan.utils.synth import render_text

        save_image(render_text("hi"), tmp_path / "good.png")
        (tmp_path / "bad.png").write_bytes(b"junk")

        loaded = load_images_from_folder(tmp_path)

        assert [p.name for p, _ in loaded] == ["good.png"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
