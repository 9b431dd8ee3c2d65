"""GeoJSON export of territory circles for the map front end."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Sequence

from shapely.geometry import mapping

from ...models.domain import Hold, Territory
from ..geospatial import territory_circle

LOCK_FILL_COLOR = "#e0003e"
HOLD_FILL_COLOR = "#e0af00"


def _feature(record: Territory | Hold, segments: int, now: datetime | None) -> Dict[str, Any]:
    polygon = territory_circle(record.lat, record.lng, record.radius, segments)
    properties: Dict[str, Any] = {
        "id": record.id,
        "kind": record.kind,
        "practice": record.practice,
        "rep": record.rep,
        "status": record.status,
        "radiusMiles": record.radius,
        "center": [record.lat, record.lng],
        "fillColor": LOCK_FILL_COLOR if isinstance(record, Territory) else HOLD_FILL_COLOR,
        "fillOpacity": 0.33 if isinstance(record, Territory) else 0.2,
    }
    if isinstance(record, Hold):
        properties["expiresAt"] = record.expires_at.isoformat()
        if now is not None:
            properties["timeRemaining"] = record.time_remaining(now)
    return {"type": "Feature", "geometry": mapping(polygon), "properties": properties}


def territories_to_feature_collection(
    locked: Sequence[Territory],
    held: Sequence[Hold],
    *,
    segments: int = 64,
    now: datetime | None = None,
) -> Dict[str, Any]:
    """Render locks then holds as circle polygons in a FeatureCollection."""

    features: List[Dict[str, Any]] = [_feature(territory, segments, now) for territory in locked]
    features.extend(_feature(hold, segments, now) for hold in held)
    return {"type": "FeatureCollection", "features": features}
