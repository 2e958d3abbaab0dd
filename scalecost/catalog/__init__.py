"""Runtime flavor catalogs per zone. See loader.py for the JSON format."""
from scalecost.catalog.loader import (
    get_zones,
    get_instance_types,
    get_instance_type,
    clear_cache,
)

__all__ = ["get_zones", "get_instance_types", "get_instance_type", "clear_cache"]
