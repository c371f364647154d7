"""Decode image EXIF into a flat tag-name mapping using Pillow.

The result has the same shape browser EXIF readers produce:
``{"Make": "Apple", "GPSLatitude": (37.0, 23.0, 45.0), ...}``. IFD0, the
Exif sub-IFD and the GPS IFD are merged into one dict.
"""

import io
from typing import Any, Dict

from PIL import ExifTags, Image

# Pointer tags whose values are offsets, not data
_POINTER_TAGS = {"ExifOffset", "GPSInfo", "InteropOffset"}


def decode_exif_tags(data: bytes) -> Dict[str, Any]:
    """Return every EXIF tag in ``data`` keyed by its standard name.

    Raises:
        PIL.UnidentifiedImageError: If ``data`` is not an image Pillow reads.
    """
    tags: Dict[str, Any] = {}

    with Image.open(io.BytesIO(data)) as image:
        exif = image.getexif()

        for tag_id, value in exif.items():
            name = ExifTags.TAGS.get(tag_id, tag_id)
            if name not in _POINTER_TAGS:
                tags[name] = value

        for tag_id, value in exif.get_ifd(ExifTags.IFD.Exif).items():
            tags[ExifTags.TAGS.get(tag_id, tag_id)] = value

        for tag_id, value in exif.get_ifd(ExifTags.IFD.GPSInfo).items():
            tags[ExifTags.GPSTAGS.get(tag_id, tag_id)] = value

    return tags
