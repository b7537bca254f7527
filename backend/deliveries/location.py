"""
Geographic helpers for dispatch: straight-line distance, a rough ETA and
display formatting for addresses.
"""
import math
from decimal import Decimal
from urllib.parse import urlencode

EARTH_RADIUS_MILES = 3959
# Average city driving speed used for ETAs
AVERAGE_SPEED_MPH = 25


def calculate_distance(lat1, lon1, lat2, lon2) -> Decimal:
    """
    Haversine distance between two coordinates, in miles, rounded to 2 places.

    >>> calculate_distance(40.7128, -74.0060, 40.7128, -74.0060)
    Decimal('0.00')
    """
    lat1, lon1, lat2, lon2 = (float(value) for value in (lat1, lon1, lat2, lon2))
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return Decimal(str(round(EARTH_RADIUS_MILES * c, 2))).quantize(Decimal("0.01"))


def estimate_delivery_minutes(distance_miles, average_speed_mph=AVERAGE_SPEED_MPH) -> int:
    """Driving time in whole minutes at a constant average speed."""
    return math.floor(float(distance_miles) / average_speed_mph * 60 + 0.5)


def validate_coordinates(latitude, longitude) -> bool:
    try:
        latitude, longitude = float(latitude), float(longitude)
    except (TypeError, ValueError):
        return False
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


def format_address(address) -> str:
    if not address:
        return ""
    if isinstance(address, str):
        return address

    parts = [address.get(key) for key in ("street", "city", "state", "zip_code")]
    return ", ".join(part for part in parts if part)


def navigation_url(latitude, longitude) -> str:
    """Google Maps driving directions to a destination."""
    query = urlencode({"api": 1, "destination": f"{latitude},{longitude}", "travelmode": "driving"})
    return f"https://www.google.com/maps/dir/?{query}"
