"""
GPS Extractor - EXIF Location Extraction
========================================

Turns the GPS tags embedded in photo metadata into a signed decimal
coordinate pair. Two adapters share one converter:

1. ``extract_from_tags``: works on an already-decoded ``{tag name: value}``
   mapping (the preview path, fed by ``exif_tags.decode_exif_tags``).
2. ``extract_from_file``: works on a stored file (the upload path). The
   file is opened with Pillow and its EXIF block parsed with piexif.

How GPS is Stored in EXIF:
-------------------------
Each axis is three rationals plus a hemisphere letter:
```
GPSLatitude: ((37, 1), (23, 1), (45, 1))   # 37° 23' 45"
GPSLatitudeRef: 'N'
GPSLongitude: ((127, 1), (6, 1), (19, 1))  # 127° 6' 19"
GPSLongitudeRef: 'E'
```
decimal = degrees + minutes/60 + seconds/3600, negated for 'S' and 'W'.

Outcomes:
--------
Every extraction returns an ``ExtractionResult`` by value:
- COORDINATE: both axes converted
- ABSENT: no GPS tags, or tags present but structurally invalid
- MALFORMED: the file's metadata container could not be parsed at all

Nothing here raises for missing or broken metadata. A photo without a
location is the normal case (screenshots, messenger re-encodes).

Example Usage:
-------------
```python
from travel_diary.services.gps_extractor import extract_from_file

result = extract_from_file("public/uploads/media-1700000000000-1.jpg")
if result.has_coordinate:
    print(result.coordinate.latitude, result.coordinate.longitude)
```
"""

import logging
from dataclasses import dataclass
from enum import Enum
from numbers import Real
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

import piexif
from PIL import Image

from travel_diary.services.exif_tags import decode_exif_tags

logger = logging.getLogger(__name__)

# Placeholder for device tags the camera did not write
UNKNOWN_DEVICE_FIELD = "Unknown"

# Digits kept on the file path, whose output is persisted
FILE_COORDINATE_PRECISION = 6

NEGATIVE_REFS = {"S", "W"}


class ExtractionStatus(str, Enum):
    COORDINATE = "coordinate"
    ABSENT = "absent"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class GeoCoordinate:
    """Signed decimal degrees. Range is not validated."""

    latitude: float
    longitude: float

    def rounded(self, digits: int) -> "GeoCoordinate":
        return GeoCoordinate(round(self.latitude, digits), round(self.longitude, digits))


@dataclass(frozen=True)
class DeviceInfo:
    """Camera details read alongside the coordinate, best effort."""

    make: str = UNKNOWN_DEVICE_FIELD
    model: str = UNKNOWN_DEVICE_FIELD
    date_time: str = UNKNOWN_DEVICE_FIELD


@dataclass(frozen=True)
class ExtractionResult:
    """
    Outcome of one extraction.

    Use the ``found``/``absent``/``malformed`` constructors rather than
    building instances directly, so ``coordinate`` is set exactly when
    ``status`` is COORDINATE.

    Attributes:
        status: Which of the three outcomes this is.
        coordinate: The decimal coordinate (COORDINATE only).
        device: Camera make/model/timestamp (tag path only).
        reason: Diagnostic text for ABSENT/MALFORMED, for logs only.
    """

    status: ExtractionStatus
    coordinate: Optional[GeoCoordinate] = None
    device: Optional[DeviceInfo] = None
    reason: str = ""

    @classmethod
    def found(
        cls,
        coordinate: GeoCoordinate,
        device: Optional[DeviceInfo] = None,
    ) -> "ExtractionResult":
        return cls(ExtractionStatus.COORDINATE, coordinate=coordinate, device=device)

    @classmethod
    def absent(cls, reason: str = "no GPS data") -> "ExtractionResult":
        return cls(ExtractionStatus.ABSENT, reason=reason)

    @classmethod
    def malformed(cls, reason: str) -> "ExtractionResult":
        return cls(ExtractionStatus.MALFORMED, reason=reason)

    @property
    def has_coordinate(self) -> bool:
        return self.status is ExtractionStatus.COORDINATE


# =============================================================================
# DMS -> DECIMAL
# =============================================================================

def _rational_to_float(value: Any) -> Optional[float]:
    """
    Evaluate one EXIF rational.

    Accepts a ``(numerator, denominator)`` pair (piexif), anything with
    ``numerator``/``denominator`` attributes (Pillow's IFDRational,
    ``fractions.Fraction``) or a plain number (browser EXIF readers
    already divide). Returns None for a zero denominator or any other
    shape.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)

    if hasattr(value, "numerator") and hasattr(value, "denominator"):
        numerator, denominator = value.numerator, value.denominator
    elif isinstance(value, (tuple, list)) and len(value) == 2:
        numerator, denominator = value
    else:
        return None

    for part in (numerator, denominator):
        if isinstance(part, bool) or not isinstance(part, Real):
            return None
    if denominator == 0:
        return None

    return float(numerator) / float(denominator)


def _normalize_ref(ref: Any) -> Optional[str]:
    # piexif hands refs back as bytes (b"N"), Pillow as str
    if isinstance(ref, bytes):
        ref = ref.decode("ascii", errors="ignore")
    if isinstance(ref, str):
        return ref.strip().strip("\x00").strip()
    return None


def dms_to_decimal(
    triple: Optional[Sequence[Any]],
    ref: Any = None,
) -> Optional[float]:
    """
    Convert a degrees/minutes/seconds triple to signed decimal degrees.

    Math:
    ----
    decimal = degrees + minutes/60 + seconds/3600

    Only 'S' and 'W' negate the result. Any other reference, including a
    missing one or lowercase letters, leaves the sign alone.

    Args:
        triple: Three rationals [degrees, minutes, seconds].
        ref: Hemisphere letter ('N', 'S', 'E', 'W'), str or bytes.

    Returns:
        Decimal degrees, unrounded and unclamped, or None when the triple
        is missing, not exactly three values, or holds a malformed rational.

    Example:
        37° 23' 45" N = 37 + 23/60 + 45/3600 = 37.395833...
    """
    if triple is None or isinstance(triple, (str, bytes)):
        return None
    if not isinstance(triple, (tuple, list)) or len(triple) != 3:
        return None

    parts = [_rational_to_float(component) for component in triple]
    if any(part is None for part in parts):
        return None

    degrees, minutes, seconds = parts
    decimal = degrees + minutes / 60 + seconds / 3600

    if _normalize_ref(ref) in NEGATIVE_REFS:
        decimal = -decimal

    return decimal


# =============================================================================
# TAG MAPPING ADAPTER
# =============================================================================

def _tag_text(value: Any) -> str:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="ignore")
    if value is None:
        return UNKNOWN_DEVICE_FIELD
    text = str(value).strip().strip("\x00").strip()
    return text or UNKNOWN_DEVICE_FIELD


def extract_from_tags(tags: Mapping[str, Any]) -> ExtractionResult:
    """
    Extract a coordinate from a decoded tag mapping.

    Args:
        tags: Tag name -> value, e.g. ``{"GPSLatitude": ..., "Make": ...}``.

    Returns:
        COORDINATE with device details when both axes convert, otherwise
        ABSENT. Exceptions raised while reading the mapping are logged and
        reported as ABSENT.
    """
    try:
        lat_dms = tags.get("GPSLatitude")
        lon_dms = tags.get("GPSLongitude")

        if not lat_dms or not lon_dms:
            logger.debug("Image has no GPS latitude/longitude tags")
            return ExtractionResult.absent("GPS tags missing")

        latitude = dms_to_decimal(lat_dms, tags.get("GPSLatitudeRef"))
        longitude = dms_to_decimal(lon_dms, tags.get("GPSLongitudeRef"))

        if latitude is None or longitude is None:
            logger.debug("GPS tags present but not a valid DMS triple")
            return ExtractionResult.absent("GPS tags malformed")

        device = DeviceInfo(
            make=_tag_text(tags.get("Make")),
            model=_tag_text(tags.get("Model")),
            date_time=_tag_text(tags.get("DateTime")),
        )
    except Exception as e:
        logger.warning(f"Failed to read EXIF tags: {e}")
        return ExtractionResult.absent(f"tag decoding failed: {e}")

    logger.info(f"GPS detected: ({latitude:.4f}, {longitude:.4f})")
    return ExtractionResult.found(GeoCoordinate(latitude, longitude), device)


def extract_from_image_bytes(data: bytes) -> ExtractionResult:
    """
    Decode an in-memory image with Pillow and run ``extract_from_tags``.

    Undecodable images are ABSENT on this path; the caller only wants to
    know whether a coordinate can pre-fill the form.
    """
    try:
        tags = decode_exif_tags(data)
    except Exception as e:
        logger.info(f"Could not decode image metadata for preview: {e}")
        return ExtractionResult.absent(f"metadata decoding failed: {e}")

    return extract_from_tags(tags)


# =============================================================================
# FILE ADAPTER
# =============================================================================

def extract_from_file(path: Union[str, Path]) -> ExtractionResult:
    """
    Extract a coordinate from a stored image file.

    The file handle is held only inside the ``with`` block, so it is
    closed whether the metadata parses or not.

    Args:
        path: Path of the stored image.

    Returns:
        COORDINATE rounded to 6 decimal places, ABSENT when the image
        carries no GPS IFD, MALFORMED when the file is not a readable
        image or its EXIF block is corrupt.
    """
    path = Path(path)

    try:
        with Image.open(path) as image:
            exif_bytes = image.info.get("exif")
    except Exception as e:
        logger.warning(f"Unreadable image metadata in {path.name}: {e}")
        return ExtractionResult.malformed(f"cannot open image: {e}")

    if not exif_bytes:
        return ExtractionResult.absent("no EXIF block")

    try:
        exif_dict = piexif.load(exif_bytes)
    except Exception as e:
        logger.warning(f"Corrupt EXIF block in {path.name}: {e}")
        return ExtractionResult.malformed(f"cannot parse EXIF: {e}")

    gps_ifd = exif_dict.get("GPS") or {}
    if not gps_ifd:
        return ExtractionResult.absent("no GPS IFD")

    lat_dms = gps_ifd.get(piexif.GPSIFD.GPSLatitude)
    lon_dms = gps_ifd.get(piexif.GPSIFD.GPSLongitude)
    if not lat_dms or not lon_dms:
        return ExtractionResult.absent("GPS IFD lacks latitude/longitude")

    latitude = dms_to_decimal(lat_dms, gps_ifd.get(piexif.GPSIFD.GPSLatitudeRef))
    longitude = dms_to_decimal(lon_dms, gps_ifd.get(piexif.GPSIFD.GPSLongitudeRef))
    if latitude is None or longitude is None:
        return ExtractionResult.absent("GPS IFD holds an invalid DMS triple")

    coordinate = GeoCoordinate(latitude, longitude).rounded(FILE_COORDINATE_PRECISION)
    return ExtractionResult.found(coordinate)
