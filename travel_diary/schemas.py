"""Request and response models for the JSON API.

Field names on the wire are camelCase to stay compatible with the
existing front-end scripts; Python attributes are snake_case.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ImageData(CamelModel):
    """One image sent for analysis, as a data URL or bare base64."""

    data: str
    name: Optional[str] = None


class TitleRequest(CamelModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    photo_count: int = Field(0, alias="photoCount")
    current_title: Optional[str] = Field(None, alias="currentTitle")
    image_data_list: Optional[List[ImageData]] = Field(None, alias="imageDataList")
    image_data: Optional[str] = Field(None, alias="imageData")


class TitleResponse(CamelModel):
    success: bool = True
    title: str
    suggestions: List[str] = Field(default_factory=list)
    activity_type: str = Field("Travel", alias="activityType")
    travel_theme: str = Field("Memory", alias="travelTheme")


class ReverseGeocodeRequest(CamelModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class ReverseGeocodeResponse(CamelModel):
    success: bool = True
    location_name: str = Field(..., alias="locationName")
    latitude: float
    longitude: float


class ExifPreviewResponse(CamelModel):
    """GPS pre-fill data for the add page. Coordinates are rounded to 4 digits."""

    success: bool = True
    found: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    make: Optional[str] = None
    model: Optional[str] = None
    date_time: Optional[str] = Field(None, alias="dateTime")


class UploadResponse(CamelModel):
    success: bool = True
    message: str
    travel: Dict[str, Any]


class MessageResponse(CamelModel):
    success: bool = True
    message: str
