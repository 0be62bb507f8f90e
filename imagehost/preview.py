"""
PreviewGenerator - renders downsized, low-quality WebP previews of originals.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps

from imagehost.config import PREVIEW_QUALITY, PREVIEW_WIDTH


class PreviewGenerator:
    """
    Generates preview renditions from stored originals using Pillow.

    Previews are always WebP-encoded but keep the original's filename, so a
    preview of ``photo.jpg`` is WebP bytes stored as ``photo.jpg``.
    """

    FORMAT = "WEBP"

    def __init__(
        self,
        width: int = PREVIEW_WIDTH,
        quality: int = PREVIEW_QUALITY,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize preview generator.

        Args:
            width: Maximum preview width in pixels (default: 1000)
            quality: WebP quality for output (default: 30)
            logger: Optional logger instance
        """
        self.width = width
        self.quality = quality
        self.logger = logger or logging.getLogger(__name__)

    def generate(self, source: Path, destination: Path) -> bool:
        """
        Render a preview of *source* into *destination*.

        Failures are logged and reported through the return value; this
        method does not raise.

        Returns:
            True if the preview was written, False otherwise.
        """
        try:
            with Image.open(source) as img:
                preview = self.render(img)
            self._write(preview, Path(destination))
        except Exception as e:
            self.logger.error("Failed to create preview for %s: %s", Path(source).name, e)
            return False

        self.logger.info("Preview created: %s", Path(destination).name)
        return True

    def render(self, img: Image.Image) -> Image.Image:
        """Orient, downscale and colour-convert *img* for WebP output."""
        img = ImageOps.exif_transpose(img)
        if img.width > self.width:
            height = max(1, round(img.height * self.width / img.width))
            img = img.resize((self.width, height), Image.Resampling.LANCZOS)
        return self._convert_color_mode(img)

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """WebP only takes RGB or RGBA."""
        if img.mode in ("RGB", "RGBA"):
            return img
        if img.mode in ("LA", "PA") or (img.mode == "P" and "transparency" in img.info):
            return img.convert("RGBA")
        return img.convert("RGB")

    def _write(self, img: Image.Image, destination: Path) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=destination.parent, prefix=".preview-", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                img.save(fh, format=self.FORMAT, quality=self.quality)
            os.replace(tmp_name, destination)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
