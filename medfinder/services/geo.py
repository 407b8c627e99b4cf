from __future__ import annotations

import math
from typing import List, Optional, Sequence

from medfinder.models.schemas import Coordinate, Specialist


EARTH_RADIUS_KM = 6371.0


def _central_angle(a: Coordinate, b: Coordinate) -> float:
    """Angle in radians subtended at the Earth's centre (haversine form)."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    half_dlat = math.radians(b.latitude - a.latitude) / 2
    half_dlon = math.radians(b.longitude - a.longitude) / 2
    h = math.sin(half_dlat) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(half_dlon) ** 2
    # Rounding can push h just past 1 for antipodal points
    h = min(1.0, max(0.0, h))
    return 2 * math.asin(math.sqrt(h))


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates, rounded to 0.1 km."""
    d = EARTH_RADIUS_KM * _central_angle(a, b)
    # Half away from zero; d is never negative
    return math.floor(d * 10 + 0.5) / 10


def _sort_key(specialist: Specialist) -> float:
    return specialist.distance if specialist.distance is not None else math.inf


def annotate_specialists(specialists: Optional[Sequence[Specialist]], origin: Optional[Coordinate]) -> Optional[List[Specialist]]:
    if specialists is None:
        return None

    annotated: List[Specialist] = []
    for specialist in specialists:
        distance = None
        if origin is not None and specialist.location is not None:
            distance = distance_km(origin, specialist.location)
        annotated.append(specialist.model_copy(update={"distance": distance}, deep=True))

    # sorted() is stable, so unknown distances keep catalog order at the tail
    return sorted(annotated, key=_sort_key)
