# SPDX-License-Identifier: MIT
"""Template thumbnail inspection.

The registry only renders PNG and WebP previews, so the file extension has to
agree with the actual image format read from the file header.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .schema import MAX_THUMBNAIL_BYTES, MIN_THUMBNAIL_SIZE, THUMBNAIL_FORMATS

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ThumbnailInfo:
    """What could be learned about a thumbnail file.

    Attributes:
        path: Location of the file
        extension: Lowercased extension without the dot
        mime_type: Detected MIME type, None when the format is not PNG/WebP
        width: Pixel width, None if the header could not be read
        height: Pixel height, None if the header could not be read
        size: File size in bytes
    """

    path: Path
    extension: str
    mime_type: Optional[str]
    width: Optional[int]
    height: Optional[int]
    size: int

    @property
    def has_dimensions(self) -> bool:
        return self.width is not None and self.height is not None

    @property
    def longest_side(self) -> int:
        return max(self.width or 0, self.height or 0)

    @property
    def extension_matches_format(self) -> bool:
        expected = {"png": "image/png", "webp": "image/webp"}.get(self.extension)
        return expected is not None and expected == self.mime_type

    @property
    def is_large_enough(self) -> bool:
        return self.longest_side >= MIN_THUMBNAIL_SIZE

    @property
    def is_small_enough(self) -> bool:
        return self.size <= MAX_THUMBNAIL_BYTES


def inspect_thumbnail(path: Path) -> ThumbnailInfo:
    """Read the format and dimensions of an image without decoding pixel data.

    Unreadable or unknown images yield ``mime_type=None`` and no dimensions;
    deciding what that means is up to the caller.
    """
    mime_type: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    try:
        with Image.open(path) as image:
            mime_type = THUMBNAIL_FORMATS.get(image.format or "")
            width, height = image.size
    except (UnidentifiedImageError, OSError) as e:
        logger.debug("Could not read image header of %s: %s", path, e)

    return ThumbnailInfo(
        path=path,
        extension=path.suffix.lstrip(".").lower(),
        mime_type=mime_type,
        width=width,
        height=height,
        size=path.stat().st_size,
    )
