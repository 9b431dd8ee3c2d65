"""Export services."""

from .geojson import territories_to_feature_collection

__all__ = ["territories_to_feature_collection"]
