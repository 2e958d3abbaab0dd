"""Load zone/instance/flavor catalog from JSON. One file per zone: <zone>.json.

{
  "id": "par", "name": "Paris",
  "instance_types": [
    {"type": "node", "name": "Node.js", "version": "20",
     "flavors": [{"name": "S", "hourly_price": 0.0278, "memory_mb": 2048, "cpus": 2, "available": true}]}
  ]
}
"""
import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from scalecost.models import InstanceType

_LOG = logging.getLogger(__name__)
_DEFAULT_DIR = Path(__file__).resolve().parent
_ZONES_CACHE: dict[str, dict] = {}


def _catalog_dir() -> Path:
    raw = (os.environ.get("SCALECOST_CATALOG_DIR") or "").strip()
    return Path(raw) if raw else _DEFAULT_DIR


def clear_cache() -> None:
    """Forget loaded zones (catalog files changed, or tests switched directory)."""
    _ZONES_CACHE.clear()


def _load_zone(zone_id: str) -> dict | None:
    if zone_id in _ZONES_CACHE:
        return _ZONES_CACHE[zone_id]
    path = _catalog_dir() / f"{zone_id}.json"
    if not path.is_file():
        return None
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        data["id"] = data.get("id", zone_id)
        data["instance_types"] = [
            InstanceType.model_validate(i) for i in data.get("instance_types") or []
        ]
    except (json.JSONDecodeError, OSError, ValidationError) as e:
        _LOG.warning("Catalog %s could not be loaded: %s", path, e)
        return None
    _ZONES_CACHE[zone_id] = data
    return data


def _all_zone_ids() -> list[str]:
    directory = _catalog_dir()
    if not directory.is_dir():
        return []
    return sorted(p.stem for p in directory.iterdir() if p.suffix == ".json")


def get_zones() -> list[dict[str, Any]]:
    """Return list of { id, name } for all zones with a readable catalog file."""
    result = []
    for zid in _all_zone_ids():
        z = _load_zone(zid)
        if z:
            result.append({"id": z["id"], "name": z.get("name", zid.upper())})
    return result


def get_instance_types(zone: str) -> list[InstanceType] | None:
    """Instance types of a zone, or None when the zone catalog is not available."""
    z = _load_zone(zone)
    if z is None:
        return None
    return list(z["instance_types"])


def get_instance_type(zone: str, instance_type: str) -> InstanceType | None:
    """Return a single instance type by type id, or None."""
    for inst in get_instance_types(zone) or []:
        if inst.type == instance_type:
            return inst
    return None
