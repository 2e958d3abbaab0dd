"""Usage-based add-on pricing registry, loaded from JSON (addon_pricing.json)."""
import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from scalecost.models import UsageBasedPricing

_LOG = logging.getLogger(__name__)
_DEFAULT_PATH = Path(__file__).resolve().parent / "addon_pricing.json"
_REGISTRY: dict[str, UsageBasedPricing] | None = None


def _registry_path() -> Path:
    raw = (os.environ.get("SCALECOST_ADDON_PRICING_PATH") or "").strip()
    return Path(raw) if raw else _DEFAULT_PATH


def _load() -> dict[str, UsageBasedPricing]:
    global _REGISTRY
    if _REGISTRY is not None:
        return _REGISTRY
    path = _registry_path()
    registry: dict[str, UsageBasedPricing] = {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        for item in data.get("providers") or []:
            pricing = UsageBasedPricing.model_validate(item)
            registry[pricing.provider_id] = pricing
    except (json.JSONDecodeError, OSError, ValidationError) as e:
        # Every add-on falls back to flat pricing
        _LOG.warning("Addon pricing registry %s could not be loaded: %s", path, e)
    _REGISTRY = registry
    return registry


def reload_registry() -> None:
    global _REGISTRY
    _REGISTRY = None


def get_usage_pricing(provider_id: str) -> UsageBasedPricing | None:
    """Usage pricing record for a provider, or None when it is billed flat."""
    return _load().get(provider_id)


def is_usage_based(provider_id: str) -> bool:
    return provider_id in _load()


def list_usage_pricing() -> list[UsageBasedPricing]:
    return sorted(_load().values(), key=lambda p: p.provider_id)
