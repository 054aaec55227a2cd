"""
ImageScaler - Resizes image files in place using Pillow.
"""

import logging
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError


class ScalableImage:
    """
    A decoded image bound to the file it was loaded from.
    """

    # Camera JPEGs decode as multi-picture MPO; derivatives are single JPEGs
    SAVE_FORMATS = {'MPO': 'JPEG'}

    def __init__(
        self,
        path: str,
        image: Image.Image,
        image_format: Optional[str] = None,
        quality: int = 85,
        logger: Optional[logging.Logger] = None
    ):
        self.path = path
        self.image = image
        fmt = image_format or image.format or 'JPEG'
        self.format = self.SAVE_FORMATS.get(fmt, fmt)
        self.quality = quality
        self.logger = logger or logging.getLogger(__name__)

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    def scale_to_fit(self, width: int, height: int, allow_upscale: bool = True) -> bool:
        """
        Scale to fit within width x height, preserving aspect ratio.

        Args:
            width: Maximum width
            height: Maximum height
            allow_upscale: Enlarge images smaller than the box

        Returns:
            True if the image now fits the box
        """
        if width <= 0 or height <= 0:
            self.logger.error(f"Invalid target size {width}x{height} for {self.path}")
            return False

        src_width, src_height = self.image.size
        ratio = min(width / src_width, height / src_height)
        if ratio >= 1 and not allow_upscale:
            return True

        new_size = (
            max(1, round(src_width * ratio)),
            max(1, round(src_height * ratio)),
        )
        if new_size != self.image.size:
            self.image = self.image.resize(new_size, Image.Resampling.LANCZOS)
        return True

    def save(self) -> bool:
        """Write the image back to its file in its original format."""
        try:
            if self.format == 'JPEG':
                img = self._convert_color_mode(self.image)
                img.save(self.path, format='JPEG', quality=self.quality, optimize=True)
            elif self.format == 'PNG':
                self.image.save(self.path, format='PNG', optimize=True)
            else:
                self.image.save(self.path, format=self.format)
            return True
        except (OSError, ValueError) as e:
            self.logger.error(f"Error saving {self.path}: {e}")
            return False

    @staticmethod
    def _convert_color_mode(img: Image.Image) -> Image.Image:
        """Flatten transparency onto white for JPEG output."""
        if img.mode in ('RGBA', 'LA'):
            background = Image.new('RGB', img.size, (255, 255, 255))
            if img.mode == 'LA':
                img = img.convert('RGBA')
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode == 'P':
            img = img.convert('RGBA')
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode not in ('RGB', 'L', 'CMYK'):
            return img.convert('RGB')
        return img


class PillowImageCodec:
    """
    Loads image files with Pillow.
    """

    def __init__(self, quality: int = 85, logger: Optional[logging.Logger] = None):
        """
        Initialize codec.

        Args:
            quality: JPEG quality for re-encoded images (default: 85)
            logger: Optional logger instance
        """
        self.quality = quality
        self.logger = logger or logging.getLogger(__name__)

    def load(self, path: str) -> Optional[ScalableImage]:
        """Decode an image file, returning None if it cannot be read."""
        try:
            with Image.open(path) as img:
                img.load()
                fmt = img.format
                # Detached copy so the file can be rewritten
                image = img.copy()
        except (UnidentifiedImageError, OSError) as e:
            self.logger.error(f"Unable to decode image {path}: {e}")
            return None
        return ScalableImage(path, image, fmt, quality=self.quality, logger=self.logger)


class ImageScaler:
    """
    Scales image files at target dimensions.

    Errors never propagate: every decode, scale or save problem is logged
    and reported as False.
    """

    def __init__(self, codec=None, logger: Optional[logging.Logger] = None):
        """
        Initialize scaler.

        Args:
            codec: Image codec (default: PillowImageCodec)
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.codec = codec or PillowImageCodec(logger=self.logger)

    def scale(
        self,
        path: str,
        width: int,
        height: int,
        allow_upscale: bool = True
    ) -> bool:
        """
        Resize the image at path to fit width x height and save it in place.

        Returns:
            True only if the image was decoded, scaled and saved
        """
        try:
            image = self.codec.load(path)
            if image is None:
                return False
            if not image.scale_to_fit(width, height, allow_upscale):
                self.logger.error(f"Failed to scale {path} to {width}x{height}")
                return False
            if not image.save():
                return False
            self.logger.debug(f"Scaled {path} to {image.size[0]}x{image.size[1]}")
            return True
        except Exception:
            self.logger.exception(f"Error scaling {path}")
            return False
