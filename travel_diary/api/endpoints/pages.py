"""HTML pages rendered with Jinja2 templates.

The add and detail pages draw a Leaflet map over OpenStreetMap tiles.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from travel_diary.api.deps import Store, Templates

router = APIRouter(tags=["Pages"], include_in_schema=False)

# Map center before any pin is placed (Seongnam, Gyeonggi)
DEFAULT_MAP_CENTER = (37.3595704, 127.105399)
DEFAULT_MAP_ZOOM = 12


def map_points(travel: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Markers for the detail map: the entry's pin, then each geotagged file."""
    points = []
    if travel.get("latitude") is not None and travel.get("longitude") is not None:
        points.append({
            "label": travel.get("title") or "Travel location",
            "latitude": travel["latitude"],
            "longitude": travel["longitude"],
        })
    for item in travel.get("media", []):
        if item.get("latitude") is not None and item.get("longitude") is not None:
            points.append({
                "label": f"#{item.get('index')} {item.get('originalName', '')}".strip(),
                "latitude": item["latitude"],
                "longitude": item["longitude"],
            })
    return points


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, store: Store, templates: Templates):
    travels = store.list()
    return templates.TemplateResponse(request, "index.html", {"travels": travels})


@router.get("/add", response_class=HTMLResponse)
async def add_travel_page(request: Request, templates: Templates):
    return templates.TemplateResponse(
        request,
        "add.html",
        {"map_center": DEFAULT_MAP_CENTER, "map_zoom": DEFAULT_MAP_ZOOM},
    )


@router.get("/travel/{travel_id}", response_class=HTMLResponse)
async def travel_detail(
    travel_id: str,
    request: Request,
    store: Store,
    templates: Templates,
):
    travel = store.get(travel_id)
    if travel is None:
        return templates.TemplateResponse(
            request, "404.html", {"id": travel_id}, status_code=404
        )
    return templates.TemplateResponse(
        request,
        "travel_detail.html",
        {"travel": travel, "map_points": map_points(travel)},
    )
