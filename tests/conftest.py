"""
Shared pytest fixtures.

Images are built in memory with Pillow; GPS, camera and timestamp tags
are embedded with piexif, the same way a phone camera writes them.
Gemini is replaced by ``FakeModel``.
"""

import io
import os
import tempfile
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

# Point the import-time default app at a scratch directory before
# travel_diary.main is imported anywhere
_SCRATCH_DIR = tempfile.mkdtemp(prefix="travel-diary-tests-")
os.environ["DATA_FILE"] = os.path.join(_SCRATCH_DIR, "data", "travels.json")
os.environ["UPLOAD_DIR"] = os.path.join(_SCRATCH_DIR, "uploads")
os.environ["GEMINI_API_KEY"] = ""

import piexif  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from PIL import Image  # noqa: E402

from travel_diary.core.config import Settings  # noqa: E402
from travel_diary.main import create_application  # noqa: E402

Rational = Tuple[int, int]
DMS = Tuple[Rational, Rational, Rational]

# 37° 23' 45" N, 127° 6' 19" E
SEONGNAM_LAT: DMS = ((37, 1), (23, 1), (45, 1))
SEONGNAM_LON: DMS = ((127, 1), (6, 1), (19, 1))


# =============================================================================
# IMAGE FIXTURES
# =============================================================================

def build_jpeg(
    gps: Optional[Dict[int, Any]] = None,
    make: Optional[str] = None,
    model: Optional[str] = None,
    date_time: Optional[str] = None,
) -> bytes:
    """
    Encode a small JPEG, optionally carrying EXIF tags.

    Without any arguments the image has no EXIF block at all.
    """
    image = Image.new("RGB", (64, 48), color="blue")
    buffer = io.BytesIO()

    zeroth: Dict[int, Any] = {}
    if make:
        zeroth[piexif.ImageIFD.Make] = make
    if model:
        zeroth[piexif.ImageIFD.Model] = model
    if date_time:
        zeroth[piexif.ImageIFD.DateTime] = date_time

    if gps is None and not zeroth:
        image.save(buffer, format="JPEG")
        return buffer.getvalue()

    exif_bytes = piexif.dump({
        "0th": zeroth,
        "Exif": {},
        "GPS": gps or {},
        "1st": {},
        "thumbnail": None,
    })
    image.save(buffer, format="JPEG", exif=exif_bytes)
    return buffer.getvalue()


def gps_ifd(lat: DMS, lat_ref: str, lon: DMS, lon_ref: str) -> Dict[int, Any]:
    return {
        piexif.GPSIFD.GPSLatitudeRef: lat_ref,
        piexif.GPSIFD.GPSLatitude: lat,
        piexif.GPSIFD.GPSLongitudeRef: lon_ref,
        piexif.GPSIFD.GPSLongitude: lon,
    }


@pytest.fixture
def jpeg_with_gps() -> bytes:
    return build_jpeg(
        gps=gps_ifd(SEONGNAM_LAT, "N", SEONGNAM_LON, "E"),
        make="TestCamera",
        model="TestModel",
        date_time="2024:01:15 14:30:00",
    )


@pytest.fixture
def jpeg_without_exif() -> bytes:
    return build_jpeg()


@pytest.fixture
def jpeg_without_gps() -> bytes:
    return build_jpeg(make="TestCamera", model="TestModel")


# =============================================================================
# GEMINI FAKE
# =============================================================================

class FakeResponse:
    def __init__(self, text: str) -> None:
        self.text = text


class FakeModel:
    """
    Stand-in for ``genai.GenerativeModel``.

    Replies with ``reply`` (or raises ``error``) and records every
    ``generate_content`` call in ``calls``.
    """

    def __init__(self, reply: str = "", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: List[Any] = []

    def generate_content(self, contents: Any) -> FakeResponse:
        self.calls.append(contents)
        if self.error is not None:
            raise self.error
        return FakeResponse(self.reply)


@pytest.fixture
def fake_model_factory() -> Callable[..., FakeModel]:
    return FakeModel


# =============================================================================
# APP FIXTURES
# =============================================================================

@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        APP_ENV="test",
        DATA_FILE=tmp_path / "data" / "travels.json",
        UPLOAD_DIR=tmp_path / "uploads",
        MAX_UPLOAD_FILES=3,
        GEMINI_API_KEY="",
    )


@pytest.fixture
def app(settings):
    return create_application(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
