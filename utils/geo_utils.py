"""
Geometry Utilities Module

Distance and containment primitives shared by the zone registry and the
history track processor. Zone radii are always meters; distances returned
by distance_km are kilometers.
"""

import math
from geopy.distance import great_circle
from utils.errors import InvalidCoordinate

def validate_coordinate(latitude, longitude):
    """
    Coerce a latitude/longitude pair to floats and check its range.

    Args:
        latitude: Latitude in degrees (number or numeric string)
        longitude: Longitude in degrees (number or numeric string)

    Returns:
        tuple: (latitude, longitude) as floats

    Raises:
        InvalidCoordinate: If either value is missing, non-numeric, NaN,
                           or outside [-90, 90] / [-180, 180]
    """
    if latitude is None or longitude is None:
        raise InvalidCoordinate(latitude, longitude, "missing value")
    if isinstance(latitude, bool) or isinstance(longitude, bool):
        raise InvalidCoordinate(latitude, longitude, "not a number")
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        raise InvalidCoordinate(latitude, longitude, "not a number")
    if math.isnan(lat) or math.isnan(lon):
        raise InvalidCoordinate(latitude, longitude, "not a number")
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
        raise InvalidCoordinate(latitude, longitude)
    return lat, lon

def distance_km(a, b):
    """Great-circle distance in kilometers between two (lat, lon) pairs."""
    return great_circle(tuple(a), tuple(b)).kilometers

def is_inside(point, zone):
    """
    True when point lies within zone's circle. The boundary counts as inside.

    Args:
        point (tuple): (latitude, longitude) of the vehicle
        zone (Zone): Zone with center (lat, lon) and radius in meters
    """
    return distance_km(point, zone.center) * 1000 <= zone.radius
