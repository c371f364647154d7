"""
Title Generator - Gemini Travel Titles and Place Names
======================================================

Asks Google Gemini for a travel-diary title based on the uploaded photos
and the map location, and for a place name when the built-in gazetteer
does not know a coordinate.

Modes (first match wins):
------------------------
1. Multi-image: ``image_data_list`` is non-empty, all images are sent
2. Single image: ``image_data`` looks like real image data (> 100 chars)
3. Text only: just the location, photo count and current title

Gemini is told to answer with JSON only. We still search the reply for
the first ``{...}`` block because models like to wrap JSON in markdown.

Failure Policy:
--------------
Title generation never fails from the caller's point of view. Any AI
error (missing key, network, unparsable reply) is logged and replaced by
a template title built from the location name.
"""

import base64
import binascii
import json
import logging
import random
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from google import genai
from google.genai import types

from travel_diary.core.exceptions import AIServiceException
from travel_diary.schemas import TitleRequest, TitleResponse
from travel_diary.services import gazetteer

logger = logging.getLogger(__name__)

DATA_URL_RE = re.compile(r"^data:([A-Za-z\-+/]+);base64,(.+)$", re.DOTALL)
JSON_BLOCK_RE = re.compile(r"\{[\s\S]*\}")

DEFAULT_MIME_TYPE = "image/jpeg"
DEFAULT_TITLE = "Capturing travel memories"

# Shorter strings are placeholders, not image data
MIN_IMAGE_DATA_LENGTH = 100

IMAGE_PROMPT = """You are a travel diary writer and an image analysis expert.

Analyze {scope} and create an emotional, appealing travel title.

## Analysis
1. Places and activities visible in the photos (food, architecture, nature, people, activities){common}
2. The type of travel activity (hanok tour, food trip, hiking, shopping, cafe, nature, heritage, night view, festival...)
3. The mood of the trip (sentimental, active, relaxing, adventurous...)

## Title requirements
- Location: {location}
- Number of photos: {photo_count}
- Style: a title that carries feelings and experience (e.g. "A slow afternoon on Gangneung's cafe street")
- Length: 18-28 characters
- Must include the activity type and an emotion

## Response (JSON only)
{{
  "activityType": "main detected activity",
  "atmosphere": "mood or feeling",
  "mainTitle": "emotional travel title",
  "suggestions": ["alternative title 1", "alternative title 2", "alternative title 3"]
}}"""

TEXT_PROMPT = """You are a travel diary expert. Create an emotional, appealing travel title.

## Trip
- Location: {location}
- Photos/videos: {photo_count}
- Title entered by the user: {current_title}

## Title requirements
- Carries feelings and experience
- Length: 18-28 characters
- Must include the place name
- Must include an emotion
- e.g. "Exciting shopping in Myeongdong, Seoul", "Watching the sunset on a Busan beach"

## Response (JSON only)
{{
  "mainTitle": "emotional travel title",
  "suggestions": ["alternative title 1", "alternative title 2", "alternative title 3"]
}}"""

REVERSE_GEOCODE_PROMPT = """Find the exact region name for the given coordinates.

Coordinates: latitude {latitude}, longitude {longitude}

Response (JSON only):
{{
  "regionName": "metropolitan city or region (e.g. Seoul, Busan, Gyeongju, Gangneung)",
  "city": "city/county/district detail (if any)",
  "landmark": "famous landmark or attraction nearby (if any)"
}}"""

FALLBACK_TEMPLATES = (
    "Special days in {location}",
    "Falling for the charm of {location}",
    "{location}, an unforgettable trip",
    "Excitement waiting in {location}",
    "Beautiful moments in {location}",
    "The start of a {location} journey",
    "New experiences in {location}",
    "The hidden charm of {location}",
    "Happiness found in {location}",
    "{location}, a trip that moved me",
)

FALLBACK_SUGGESTIONS = (
    "A special day in {location}",
    "{location} travel log",
    "Beautiful moments of {location}",
)


def split_image_data(data: str) -> Tuple[str, bytes]:
    """
    Split a data URL (or bare base64) into MIME type and raw bytes.

    Raises:
        AIServiceException: If the payload is not valid base64.
    """
    mime_type = DEFAULT_MIME_TYPE
    payload = data

    match = DATA_URL_RE.match(data)
    if match:
        mime_type, payload = match.group(1), match.group(2)

    try:
        return mime_type, base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise AIServiceException(f"Invalid image data: {e}")


def parse_json_reply(text: str) -> Dict[str, Any]:
    """Pull the first JSON object out of a model reply."""
    match = JSON_BLOCK_RE.search(text or "")
    if not match:
        raise AIServiceException("Invalid response format from Gemini")

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise AIServiceException(f"Unparsable JSON from Gemini: {e}")

    if not isinstance(parsed, dict):
        raise AIServiceException("Gemini reply is not a JSON object")
    return parsed


def _text(parsed: Dict[str, Any], key: str, default: str) -> str:
    value = parsed.get(key)
    return str(value) if value else default


def _suggestions(parsed: Dict[str, Any]) -> List[str]:
    value = parsed.get("suggestions")
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item]


def to_genai_contents(contents: Any) -> Any:
    """Turn ``{"mime_type", "data"}`` image dicts into google-genai parts; strings pass through."""
    if isinstance(contents, str):
        return contents
    return [
        types.Part.from_bytes(data=item["data"], mime_type=item["mime_type"])
        if isinstance(item, dict) else item
        for item in contents
    ]


class GeminiModel:
    """
    One Gemini model behind a ``generate_content(contents)`` call.

    Wraps a google-genai ``Client`` so ``TitleGenerator`` can be handed
    any object with the same method.
    """

    def __init__(self, api_key: str, model_name: str) -> None:
        self.client = genai.Client(api_key=api_key)
        self.model_name = model_name

    def generate_content(self, contents: Any) -> Any:
        return self.client.models.generate_content(
            model=self.model_name,
            contents=to_genai_contents(contents),
        )


class TitleGenerator:
    """
    Gemini client wrapper for titles and reverse geocoding.

    Attributes:
        model: Object with a ``generate_content(contents)`` method returning
            a response with ``.text``. None when no API key is configured.
    """

    def __init__(
        self,
        api_key: str = "",
        model_name: str = "gemini-2.0-flash",
        model: Optional[Any] = None,
    ) -> None:
        """
        Args:
            api_key: Gemini API key. Empty leaves the generator disabled
                unless ``model`` is given.
            model_name: Gemini model to use.
            model: Pre-built model, mainly for tests.
        """
        if model is None and api_key:
            model = GeminiModel(api_key, model_name)

        self.model = model

    @property
    def enabled(self) -> bool:
        return self.model is not None

    def _ask(self, contents: Any) -> Dict[str, Any]:
        if self.model is None:
            raise AIServiceException("Gemini API key is not configured")

        try:
            response = self.model.generate_content(contents)
            text = response.text
        except AIServiceException:
            raise
        except Exception as e:
            raise AIServiceException(f"Gemini request failed: {e}")

        logger.debug(f"Gemini reply: {text[:100]}")
        return parse_json_reply(text)

    # =========================================================================
    # TITLES
    # =========================================================================

    def generate_title(self, request: TitleRequest) -> TitleResponse:
        """
        Produce a title and alternatives for a trip. Never raises.
        """
        location = gazetteer.location_name(request.latitude, request.longitude)

        try:
            if request.image_data_list:
                logger.info(f"Analyzing {len(request.image_data_list)} images for a title")
                images = [item.data for item in request.image_data_list]
                return self._title_from_images(images, location, request.photo_count)

            if request.image_data and len(request.image_data) > MIN_IMAGE_DATA_LENGTH:
                logger.info(
                    f"Analyzing one image for a title ({len(request.image_data) // 1024} KB)"
                )
                return self._title_from_images(
                    [request.image_data], location, request.photo_count
                )

            logger.info("Generating a text-only title")
            return self._title_from_text(location, request)
        except AIServiceException as e:
            logger.warning(f"AI title generation failed, using a template: {e.message}")
            return self.fallback_title(request)

    def _title_from_images(
        self,
        images: Sequence[str],
        location: str,
        photo_count: int,
    ) -> TitleResponse:
        parts: List[Any] = []
        for data in images:
            mime_type, raw = split_image_data(data)
            parts.append({"mime_type": mime_type, "data": raw})

        if len(images) > 1:
            scope = f"all {len(images)} provided photos together"
            common = ", looking for what they have in common"
        else:
            scope = "the photo"
            common = ""

        prompt = IMAGE_PROMPT.format(
            scope=scope,
            common=common,
            location=location,
            photo_count=photo_count,
        )
        parsed = self._ask([*parts, prompt])

        return TitleResponse(
            title=_text(parsed, "mainTitle", DEFAULT_TITLE),
            suggestions=_suggestions(parsed),
            activity_type=_text(parsed, "activityType", "Travel"),
            travel_theme=_text(parsed, "atmosphere", "A special experience"),
        )

    def _title_from_text(self, location: str, request: TitleRequest) -> TitleResponse:
        prompt = TEXT_PROMPT.format(
            location=location,
            photo_count=request.photo_count,
            current_title=request.current_title or "none",
        )
        parsed = self._ask(prompt)

        return TitleResponse(
            title=_text(parsed, "mainTitle", DEFAULT_TITLE),
            suggestions=_suggestions(parsed),
            activity_type="Travel",
            travel_theme="Memories",
        )

    def fallback_title(self, request: TitleRequest) -> TitleResponse:
        """Template title used whenever Gemini cannot answer."""
        location = gazetteer.location_name(request.latitude, request.longitude)

        if request.current_title and request.current_title.strip():
            title = request.current_title
        else:
            title = random.choice(FALLBACK_TEMPLATES).format(location=location)

        return TitleResponse(
            title=title,
            suggestions=[s.format(location=location) for s in FALLBACK_SUGGESTIONS],
            activity_type="Travel",
            travel_theme="Memory",
        )

    # =========================================================================
    # REVERSE GEOCODING
    # =========================================================================

    def reverse_geocode(self, latitude: float, longitude: float) -> str:
        """
        Name a coordinate: gazetteer first, then Gemini, then a label.

        Gemini is only asked when the gazetteer has no city in range and an
        API key is configured. Its failures are logged and ignored.
        """
        city = gazetteer.find_city(latitude, longitude)
        if city:
            return city

        fallback = gazetteer.coordinate_label(latitude, longitude)
        if not self.enabled:
            return fallback

        logger.info(f"Asking Gemini for the place name of ({latitude}, {longitude})")
        try:
            parsed = self._ask(
                REVERSE_GEOCODE_PROMPT.format(latitude=latitude, longitude=longitude)
            )
        except AIServiceException as e:
            logger.warning(f"Gemini reverse geocoding failed: {e.message}")
            return fallback

        region = parsed.get("regionName")
        if not region:
            return fallback

        name = str(region)
        if parsed.get("city"):
            name += f" ({parsed['city']})"
        if parsed.get("landmark"):
            name += f" - {parsed['landmark']}"

        logger.info(f"Gemini place name: {name}")
        return name
