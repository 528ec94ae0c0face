# pkghost/host/images.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

__all__ = ["ImageDecoder", "ImageHandle", "PillowImageDecoder"]



@dataclass(frozen=True, slots=True)
class ImageHandle:
    """Decoded image handed to the menu. An empty handle renders as no icon."""
    path: Path
    image: Image.Image | None = None

    @property
    def isEmpty(self) -> bool:
        return self.image is None

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size if self.image is not None else (0, 0)



class ImageDecoder(Protocol):
    def fromPath(self, path: Path) -> ImageHandle: ...



class PillowImageDecoder:
    def fromPath(self, path: Path) -> ImageHandle:
        path = Path(path)
        try:
            with Image.open(path) as img:
                img.load()
                return ImageHandle(path=path, image=img.copy())
        except (OSError, UnidentifiedImageError) as err:
            logger.debug("Could not decode image '%s': %s", path, err)
            return ImageHandle(path=path)
