"""Geospatial helper functions."""

from __future__ import annotations

import math

from shapely.geometry import Polygon

EARTH_RADIUS_KM = 6371.0
KM_PER_MILE = 1.609344


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def miles_to_km(miles: float) -> float:
    return miles * KM_PER_MILE


def destination_point(lat: float, lon: float, bearing: float, distance_km: float) -> tuple[float, float]:
    """Return the (lat, lon) reached travelling ``distance_km`` along ``bearing`` degrees."""

    phi1 = math.radians(lat)
    lambda1 = math.radians(lon)
    theta = math.radians(bearing)
    delta = distance_km / EARTH_RADIUS_KM

    phi2 = math.asin(math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta))
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )
    lon2 = (math.degrees(lambda2) + 540) % 360 - 180
    return math.degrees(phi2), lon2


def territory_circle(lat: float, lon: float, radius_miles: float, segments: int = 64) -> Polygon:
    """Approximate a territory circle as a polygon in (lon, lat) order."""

    if segments < 3:
        raise ValueError("A circle needs at least 3 segments")
    radius_km = miles_to_km(radius_miles)
    ring = []
    for step in range(segments):
        point_lat, point_lon = destination_point(lat, lon, 360.0 * step / segments, radius_km)
        ring.append((point_lon, point_lat))
    return Polygon(ring)
