"""AI-assisted routes: travel title generation and reverse geocoding.

Both are plain ``def`` routes; the Gemini client blocks, so FastAPI runs
them in its threadpool.
"""

from fastapi import APIRouter

from travel_diary.api.deps import Titles
from travel_diary.core.exceptions import BadRequestException
from travel_diary.schemas import (
    ReverseGeocodeRequest,
    ReverseGeocodeResponse,
    TitleRequest,
    TitleResponse,
)

router = APIRouter(prefix="/api", tags=["AI"])


@router.post("/generate-title", response_model=TitleResponse)
def generate_title(body: TitleRequest, titles: Titles) -> TitleResponse:
    """
    Suggest a travel title from photos and location.

    Always succeeds: when Gemini is unavailable the response carries a
    template title instead.
    """
    return titles.generate_title(body)


@router.post("/reverse-geocode", response_model=ReverseGeocodeResponse)
def reverse_geocode(body: ReverseGeocodeRequest, titles: Titles) -> ReverseGeocodeResponse:
    """
    Name the region around a coordinate.

    Raises:
        400: latitude or longitude missing
    """
    if body.latitude is None or body.longitude is None:
        raise BadRequestException("Latitude and longitude are required")

    name = titles.reverse_geocode(body.latitude, body.longitude)

    return ReverseGeocodeResponse(
        location_name=name or f"{body.latitude:.4f}, {body.longitude:.4f}",
        latitude=body.latitude,
        longitude=body.longitude,
    )
