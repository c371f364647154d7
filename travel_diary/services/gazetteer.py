"""Coarse place names for coordinates from a small table of Korean cities.

Distance is planar, in degrees; good enough to tell Seoul from Busan and
nothing more.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class City:
    name: str
    latitude: float
    longitude: float
    radius: float


# Checked in order; the first city within its radius wins
CITIES: Tuple[City, ...] = (
    City("Seoul", 37.5665, 126.9780, 0.3),
    City("Busan", 35.1796, 129.0756, 0.3),
    City("Daegu", 35.8716, 128.5948, 0.3),
    City("Daejeon", 36.3504, 127.3845, 0.3),
    City("Gwangju", 35.1596, 126.8526, 0.3),
    City("Incheon", 37.2557, 126.7314, 0.3),
    City("Jeju", 33.4996, 126.5312, 0.4),
    City("Gangwon", 37.2411, 128.5945, 0.5),
    City("Gyeongju", 35.8264, 129.2236, 0.2),
    City("Jeonju", 35.8242, 127.1477, 0.2),
)


def find_city(latitude: float, longitude: float) -> Optional[str]:
    """Return the first known city within range, or None."""
    for city in CITIES:
        distance = math.hypot(latitude - city.latitude, longitude - city.longitude)
        if distance < city.radius:
            return city.name
    return None


def coordinate_label(latitude: float, longitude: float) -> str:
    return f"Lat {latitude:.2f}, Lon {longitude:.2f} area"


def location_name(latitude: Optional[float], longitude: Optional[float]) -> str:
    """City name for a coordinate, falling back to a coordinate label.

    Missing coordinates give the generic "Unknown location".
    """
    if latitude is None or longitude is None:
        return "Unknown location"
    return find_city(latitude, longitude) or coordinate_label(latitude, longitude)
