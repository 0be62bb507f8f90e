"""
Unit tests for PreviewGenerator.
"""

import pytest
from PIL import Image

from conftest import make_image_bytes
from imagehost.preview import PreviewGenerator

ORIENTATION_TAG = 0x0112


@pytest.fixture
def generator():
    return PreviewGenerator()


def write(path, content):
    path.write_bytes(content)
    return path


class TestPreviewGenerator:
    def test_wide_image_resized_to_max_width(self, generator, tmp_path):
        src = write(tmp_path / "wide.jpg", make_image_bytes((3000, 1500), "JPEG"))
        dst = tmp_path / "out" / "wide.jpg"

        assert generator.generate(src, dst) is True
        with Image.open(dst) as img:
            assert img.format == "WEBP"
            assert img.size == (1000, 500)

    def test_small_image_not_upscaled(self, generator, tmp_path):
        src = write(tmp_path / "small.png", make_image_bytes((400, 300), "PNG"))
        dst = tmp_path / "small.png.preview"

        assert generator.generate(src, dst) is True
        with Image.open(dst) as img:
            assert img.size == (400, 300)

    def test_exif_orientation_applied(self, generator, tmp_path):
        exif = Image.Exif()
        exif[ORIENTATION_TAG] = 6  # rotate 90° clockwise on display
        src = write(tmp_path / "rotated.jpg", make_image_bytes((200, 100), "JPEG", exif=exif))
        dst = tmp_path / "rotated.webp"

        assert generator.generate(src, dst) is True
        with Image.open(dst) as img:
            assert img.size == (100, 200)

    def test_palette_and_alpha_images_encode(self, generator, tmp_path):
        rgba = write(tmp_path / "alpha.png", make_image_bytes((50, 50), "PNG", color=(1, 2, 3, 128), mode="RGBA"))
        palette = write(tmp_path / "pal.png", make_image_bytes((50, 50), "PNG", color=3, mode="P"))

        assert generator.generate(rgba, tmp_path / "p1") is True
        assert generator.generate(palette, tmp_path / "p2") is True

    def test_original_never_modified(self, generator, tmp_path):
        content = make_image_bytes((1500, 900), "JPEG")
        src = write(tmp_path / "orig.jpg", content)

        generator.generate(src, tmp_path / "preview.jpg")
        assert src.read_bytes() == content

    def test_corrupt_input_returns_false(self, generator, tmp_path):
        src = write(tmp_path / "bad.jpg", b"definitely not an image")
        dst = tmp_path / "previews" / "bad.jpg"

        assert generator.generate(src, dst) is False
        assert not dst.exists()

    def test_missing_input_returns_false(self, generator, tmp_path):
        assert generator.generate(tmp_path / "nope.jpg", tmp_path / "out.jpg") is False

    def test_no_temp_files_left_behind(self, generator, tmp_path):
        src = write(tmp_path / "a.jpg", make_image_bytes((20, 20), "JPEG"))
        out_dir = tmp_path / "previews"

        generator.generate(src, out_dir / "a.jpg")
        assert [p.name for p in out_dir.iterdir()] == ["a.jpg"]

    def test_custom_profile(self, tmp_path):
        src = write(tmp_path / "a.png", make_image_bytes((600, 300), "PNG"))
        dst = tmp_path / "a.out"

        assert PreviewGenerator(width=120, quality=80).generate(src, dst) is True
        with Image.open(dst) as img:
            assert img.size == (120, 60)
