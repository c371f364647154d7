"""EXIF preview route: GPS pre-fill for the add page.

The page posts the first selected image here before the real upload.
A found coordinate is rounded to 4 digits for the form inputs; anything
else is reported as ``found: false`` and the page leaves the form alone.
"""

from typing import Any, Dict

from fastapi import APIRouter, File, UploadFile

from travel_diary.schemas import ExifPreviewResponse
from travel_diary.services.gps_extractor import extract_from_image_bytes

router = APIRouter(prefix="/api/exif", tags=["EXIF"])

DISPLAY_PRECISION = 4


@router.post("/preview", response_model=ExifPreviewResponse)
async def preview_exif(file: UploadFile = File(...)) -> Dict[str, Any]:
    data = await file.read()
    result = extract_from_image_bytes(data)

    if not result.has_coordinate:
        return {"found": False}

    coordinate = result.coordinate.rounded(DISPLAY_PRECISION)
    device = result.device
    return {
        "found": True,
        "latitude": coordinate.latitude,
        "longitude": coordinate.longitude,
        "make": device.make if device else None,
        "model": device.model if device else None,
        "date_time": device.date_time if device else None,
    }
