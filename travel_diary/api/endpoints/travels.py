"""
Travel API Routes - Upload, list and delete travel entries.

Uploads arrive as multipart form data: the entry fields plus up to
``MAX_UPLOAD_FILES`` files under ``media``. Each stored image gets its
own GPS coordinate read from EXIF; the entry-level coordinate is whatever
the user left in the form (the map pin) and may differ.
"""

import logging
import math
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, File, Form, UploadFile

from travel_diary.api.deps import AppSettings, Media, Store
from travel_diary.core.exceptions import BadRequestException, NotFoundException, StorageException
from travel_diary.schemas import MessageResponse, UploadResponse
from travel_diary.services.gps_extractor import ExtractionStatus, extract_from_file

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Travels"])

DEFAULT_TITLE = "Untitled"


def parse_coordinate(value: Optional[str]) -> Optional[float]:
    """Form coordinate to float. Blank, unparsable, zero or non-finite is None."""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number == 0:
        return None
    return number


def parse_tags(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [tag.strip() for tag in value.split(",") if tag.strip()]


@router.post("/upload", response_model=UploadResponse)
async def upload_travel(
    settings: AppSettings,
    store: Store,
    media_storage: Media,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    latitude: Optional[str] = Form(None),
    longitude: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    media: Optional[List[UploadFile]] = File(None),
) -> Dict[str, Any]:
    """
    Create a travel entry from the upload form.

    Files are stored and then inspected one at a time, in request order.
    A file without usable GPS metadata is stored all the same, just
    without per-file coordinates.

    Raises:
        400: More files than ``MAX_UPLOAD_FILES``
        500: Files or the travel record could not be written
    """
    files = media or []
    if len(files) > settings.MAX_UPLOAD_FILES:
        raise BadRequestException(
            f"Maximum {settings.MAX_UPLOAD_FILES} files per upload",
            details={"received": len(files)},
        )

    media_records = []
    for index, upload in enumerate(files, start=1):
        stored = await media_storage.save(upload, index)
        record = stored.to_record()

        if stored.is_image:
            result = extract_from_file(stored.file_path)
            if result.has_coordinate:
                record["latitude"] = result.coordinate.latitude
                record["longitude"] = result.coordinate.longitude
                logger.info(
                    f"Image {index} GPS: {result.coordinate.latitude}, "
                    f"{result.coordinate.longitude}"
                )
            elif result.status is ExtractionStatus.MALFORMED:
                logger.info(f"Image {index} metadata unreadable: {result.reason}")

        media_records.append(record)

    now = datetime.now()
    travel = {
        "id": str(int(time.time() * 1000)),
        "title": title or DEFAULT_TITLE,
        "description": description or "",
        "latitude": parse_coordinate(latitude),
        "longitude": parse_coordinate(longitude),
        "tags": parse_tags(tags),
        "media": media_records,
        "uploadDate": now.strftime("%Y-%m-%d %H:%M:%S"),
        "createdAt": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    }

    try:
        store.add(travel)
    except StorageException:
        for record in media_records:
            media_storage.delete(record["path"])
        raise

    return {"success": True, "message": "Travel added.", "travel": travel}


@router.get("/travels")
async def list_travels(store: Store) -> List[Dict[str, Any]]:
    return store.list()


@router.delete("/travel/{travel_id}", response_model=MessageResponse)
async def delete_travel(
    travel_id: str,
    store: Store,
    media_storage: Media,
) -> Dict[str, Any]:
    """
    Delete a travel entry and its stored files.

    Missing files are skipped; the record is removed regardless.
    """
    travel = store.get(travel_id)
    if travel is None:
        raise NotFoundException("Travel not found", details={"id": travel_id})

    for item in travel.get("media", []):
        path = item.get("path")
        if path:
            media_storage.delete(path)

    store.remove(travel_id)

    return {"success": True, "message": "Travel deleted."}
