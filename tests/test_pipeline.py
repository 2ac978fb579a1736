"""
Rainbleed — Pipeline Tests
Effects registry, end-to-end frame edit, file round trips, failure paths.

Run with: pytest tests/test_pipeline.py -v
"""

import os

import numpy as np
import pytest
from PIL import Image, ImageFile

from core.image_io import ImageReadError, ImageWriteError, read_image, write_image
from core.pipeline import default_output_path, edit_frame, edit_image
from core.safety import SafetyError
from core.settings import PipelineSettings
from effects import EFFECTS, PIPELINE_ORDER, apply_chain, apply_effect, get_effect, list_effects
from effects.blur import strong_blur
from effects.overlay import grid_plan, paint_grid
from conftest import make_uniform_frame


# ---------------------------------------------------------------------------
# REGISTRY
# ---------------------------------------------------------------------------

class TestRegistry:

    def test_pipeline_effects_registered(self):
        for name in PIPELINE_ORDER:
            assert name in EFFECTS
            assert callable(EFFECTS[name]["fn"])
            assert len(EFFECTS[name]["description"]) > 10

    def test_defaults_match_classic_values(self):
        assert EFFECTS["blur"]["params"]["kernel_size"] == 7
        assert EFFECTS["gridcircles"]["params"] == {"grid_step": 30, "circle_size": 20}
        assert EFFECTS["cracks"]["params"]["count"] == 50

    def test_get_effect_returns_copy_of_defaults(self):
        _, params = get_effect("blur")
        params["kernel_size"] = 99
        assert EFFECTS["blur"]["params"]["kernel_size"] == 7

    def test_unknown_effect(self):
        with pytest.raises(ValueError, match="Unknown effect"):
            get_effect("pixelsort")

    def test_list_effects_by_category(self):
        names = [e["name"] for e in list_effects(category="overlay")]
        assert names == ["gridcircles", "cracks"]


class TestApplyEffect:

    def test_rgb_in_rgb_out(self, gradient_frame):
        rgb = gradient_frame[:, :, :3].copy()
        result = apply_effect(rgb, "gridcircles")
        assert result.shape == rgb.shape
        assert result.dtype == np.uint8

    def test_rgba_in_rgba_out(self, gradient_frame):
        result = apply_effect(gradient_frame, "blur")
        assert result.shape == gradient_frame.shape

    def test_gray_in_rgb_out(self):
        gray = np.full((40, 40), 90, dtype=np.uint8)
        result = apply_effect(gray, "gridcircles")
        assert result.shape == (40, 40, 3)

    def test_params_override_defaults(self, gray_frame):
        a = apply_effect(gray_frame, "gridcircles", grid_step=50)
        b = apply_effect(gray_frame, "gridcircles")
        assert not np.array_equal(a, b)

    def test_unknown_param_rejected(self, gray_frame):
        with pytest.raises(ValueError, match="Unknown params"):
            apply_effect(gray_frame, "blur", radius=3)

    def test_invalid_param_fails_fast(self, gray_frame):
        with pytest.raises(ValueError):
            apply_effect(gray_frame, "gridcircles", grid_step=0)
        with pytest.raises(ValueError):
            apply_effect(gray_frame, "cracks", count=-5)


class TestApplyChain:

    def test_empty_chain_is_identity(self, gradient_frame):
        np.testing.assert_array_equal(apply_chain(gradient_frame, []), gradient_frame)

    def test_bypassed_step_skipped(self, gray_frame):
        chain = [{"name": "gridcircles", "params": {}, "bypassed": True}]
        np.testing.assert_array_equal(apply_chain(gray_frame, chain), gray_frame)

    def test_chain_too_deep(self, gray_frame):
        chain = [{"name": "blur", "params": {}}] * 11
        with pytest.raises(SafetyError):
            apply_chain(gray_frame, chain)


# ---------------------------------------------------------------------------
# END TO END (in memory)
# ---------------------------------------------------------------------------

class TestEditFrame:

    def test_uniform_gray_reference_scenario(self, gray_frame):
        """100x100 gray, 7x7 blur, 30px grid of 20px discs, no cracks."""
        settings = PipelineSettings(kernel_size=7, grid_step=30, circle_size=20, crack_count=0)

        # (a) blur leaves uniform input unchanged
        np.testing.assert_array_equal(strong_blur(gray_frame, 7), gray_frame)

        # (b) 16 discs, first and last-of-first-row colors
        discs = grid_plan(100, 100, 30, 20)
        assert len(discs) == 16
        assert (discs[-1].x, discs[-1].y) == (90, 90)
        assert discs[0].color == (255, 140, 140, 20)
        assert (discs[3].x, discs[3].y, discs[3].color) == (90, 0, (240, 125, 140, 35))

        expected = gray_frame.copy()
        paint_grid(expected, 30, 20)
        np.testing.assert_array_equal(edit_frame(gray_frame, settings), expected)

    def test_input_not_modified(self, gradient_frame):
        before = gradient_frame.copy()
        edit_frame(gradient_frame, PipelineSettings(seed=1))
        np.testing.assert_array_equal(gradient_frame, before)

    def test_seeded_run_reproducible(self, gradient_frame):
        settings = PipelineSettings(seed=123)
        np.testing.assert_array_equal(edit_frame(gradient_frame, settings),
                                      edit_frame(gradient_frame, settings))

    def test_default_settings(self, gradient_frame):
        result = edit_frame(gradient_frame)
        assert result.shape == gradient_frame.shape
        assert result.dtype == np.uint8


# ---------------------------------------------------------------------------
# IMAGE I/O
# ---------------------------------------------------------------------------

class TestImageIO:

    def test_read_rgb_png(self, gray_png):
        frame, has_alpha = read_image(gray_png)
        assert frame.shape == (100, 100, 4)
        assert not has_alpha
        np.testing.assert_array_equal(frame[:, :, 3], 255)

    def test_read_rgba_png(self, rgba_png):
        frame, has_alpha = read_image(rgba_png)
        assert has_alpha
        assert frame[0, 0].tolist() == [10, 20, 30, 128]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageReadError, match="cannot be found"):
            read_image(tmp_path / "nope.png")

    def test_undecodable_file(self, tmp_path):
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"definitely not a png")
        with pytest.raises(ImageReadError, match="cannot be decoded"):
            read_image(bad)

    def test_write_drops_alpha_when_asked(self, tmp_path, gray_frame):
        out = write_image(gray_frame, tmp_path / "out.png", keep_alpha=False)
        with Image.open(out) as img:
            assert img.mode == "RGB"
            assert img.size == (100, 100)

    def test_write_keeps_alpha(self, tmp_path):
        frame = make_uniform_frame(8, 6, (1, 2, 3, 4))
        out = write_image(frame, tmp_path / "out.png")
        back, has_alpha = read_image(out)
        assert has_alpha
        np.testing.assert_array_equal(back, frame)

    def test_jpeg_written_without_alpha(self, tmp_path, gray_frame):
        out = write_image(gray_frame, tmp_path / "out.jpg")
        with Image.open(out) as img:
            assert img.format == "JPEG"
            assert img.mode == "RGB"

    def test_write_into_missing_directory(self, tmp_path, gray_frame):
        with pytest.raises(ImageWriteError):
            write_image(gray_frame, tmp_path / "missing" / "out.png")

    def test_failed_encode_leaves_nothing(self, tmp_path, gray_frame, monkeypatch):
        def broken_save(self, fp, format=None, **params):
            fp.write(b"half an image")
            raise OSError("disk full")

        monkeypatch.setattr(Image.Image, "save", broken_save)
        with pytest.raises(ImageWriteError, match="disk full"):
            write_image(gray_frame, tmp_path / "out.png")
        assert os.listdir(tmp_path) == []

    def test_failed_encode_keeps_previous_file(self, tmp_path, gray_frame, monkeypatch):
        out = tmp_path / "out.png"
        out.write_bytes(b"previous")

        def broken_save(self, fp, format=None, **params):
            raise OSError("disk full")

        monkeypatch.setattr(Image.Image, "save", broken_save)
        with pytest.raises(ImageWriteError):
            write_image(gray_frame, out)
        assert out.read_bytes() == b"previous"
        assert os.listdir(tmp_path) == ["out.png"]


# ---------------------------------------------------------------------------
# END TO END (files)
# ---------------------------------------------------------------------------

class TestEditImage:

    def test_default_output_name(self, tmp_path):
        assert default_output_path(tmp_path / "inputRainyNightImage.png") == \
            tmp_path / "EDITEDinputRainyNightImage.png"
        assert default_output_path(tmp_path / "photo.jpg").name == "EDITEDphoto.png"

    def test_writes_edited_copy(self, gray_png):
        info = edit_image(gray_png, settings=PipelineSettings(crack_count=0))
        out = gray_png.with_name("EDITEDinputRainyNightImage.png")
        assert info["output"] == str(out)
        assert (info["width"], info["height"]) == (100, 100)
        with Image.open(out) as img:
            assert img.mode == "RGB"
            assert img.size == (100, 100)
            pixels = np.array(img)
        assert pixels[0, 0].tolist() != [128, 128, 128]
        assert pixels[15, 15].tolist() == [128, 128, 128]

    def test_alpha_input_keeps_alpha(self, rgba_png, tmp_path):
        out = tmp_path / "result.png"
        edit_image(rgba_png, out, PipelineSettings(seed=2))
        with Image.open(out) as img:
            assert img.mode == "RGBA"

    def test_missing_input_writes_nothing(self, tmp_path):
        with pytest.raises(ImageReadError):
            edit_image(tmp_path / "inputRainyNightImage.png")
        assert os.listdir(tmp_path) == []

    def test_undecodable_input_writes_nothing(self, tmp_path):
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"\x89PNG garbage")
        with pytest.raises(ImageReadError):
            edit_image(bad)
        assert os.listdir(tmp_path) == ["bad.png"]

    def test_unsupported_extension(self, tmp_path):
        src = tmp_path / "notes.txt"
        src.write_text("hello")
        with pytest.raises(SafetyError):
            edit_image(src, tmp_path / "out.png")

    def test_refuses_to_overwrite_input(self, gray_png):
        with pytest.raises(SafetyError):
            edit_image(gray_png, gray_png)

    def test_missing_output_directory(self, gray_png, tmp_path):
        with pytest.raises(SafetyError):
            edit_image(gray_png, tmp_path / "nowhere" / "out.png")

    def test_too_many_pixels_rejected(self, tmp_path):
        big = tmp_path / "big.png"
        Image.new("L", (8100, 8000)).save(big)
        with pytest.raises(SafetyError, match="exceeds"):
            edit_image(big, tmp_path / "out.png")
        assert os.listdir(tmp_path) == ["big.png"]

    def test_pixel_limit_checked_before_decode(self, gray_png, tmp_path, monkeypatch):
        monkeypatch.setattr("core.safety.MAX_PIXELS", 50 * 50)

        def no_decode(self):
            raise AssertionError("pixel data decoded")

        monkeypatch.setattr(ImageFile.ImageFile, "load", no_decode)
        with pytest.raises(SafetyError):
            read_image(gray_png)

    def test_decompression_bomb_reported_as_safety_error(self, gray_png, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
        with pytest.raises(SafetyError, match="too large"):
            read_image(gray_png)
