"""Upgrade stored runtime documents to the current RuntimeConfig shape.

Run once when a project is loaded, never inside the cost engine.

Legacy shape:
    default_flavor_name, scaling_flavor_name?, default_min_instances,
    default_max_instances, weekly_schedule: {day: [extra instances x 24]}
Intermediate shape:
    base_flavor_name, base_instances, scaling_profiles,
    weekly_schedule: {day: [HourlyConfig x 24]}
Current shape:
    scaling_enabled, baseline_config, scaling_profiles (with baseline), weekly_schedule?
"""
import logging
import math
from typing import Any

from scalecost.constants import (
    BASELINE_PROFILE_ID,
    DAYS_OF_WEEK,
    DEFAULT_PROFILE_ID,
    HOURS_PER_DAY,
    MAX_LOAD_LEVEL,
)
from scalecost.models import (
    BaselineConfig,
    HourlyConfig,
    Project,
    RawDocument,
    RuntimeConfig,
    ScalingProfile,
    WeeklySchedule,
)

_LOG = logging.getLogger(__name__)


def is_legacy_runtime(raw: RawDocument) -> bool:
    return (
        isinstance(raw.get("default_min_instances"), int)
        and isinstance(raw.get("default_max_instances"), int)
        and "base_instances" not in raw
        and "scaling_enabled" not in raw
    )


def is_intermediate_runtime(raw: RawDocument) -> bool:
    return (
        isinstance(raw.get("base_flavor_name"), str)
        and isinstance(raw.get("base_instances"), int)
        and "scaling_enabled" not in raw
    )


def is_legacy_schedule(schedule: Any) -> bool:
    """Legacy grids hold plain numbers (extra instances) instead of HourlyConfig objects."""
    if not isinstance(schedule, dict):
        return False
    first = schedule.get("mon")
    return isinstance(first, list) and bool(first) and isinstance(first[0], (int, float))


def _baseline_profile(instances: int, flavor_name: str) -> ScalingProfile:
    return ScalingProfile(
        id=BASELINE_PROFILE_ID,
        name="Baseline",
        min_instances=instances,
        max_instances=instances,
        min_flavor_name=flavor_name,
        max_flavor_name=flavor_name,
        enabled=True,
    )


def extra_instances_to_load_level(extra: float, max_extra: int) -> int:
    """0 stays baseline; otherwise ceil(ratio * 5) clamped to 1..5."""
    if extra <= 0 or max_extra <= 0:
        return 0
    ratio = min(extra / max_extra, 1.0)
    return max(1, min(MAX_LOAD_LEVEL, math.ceil(ratio * MAX_LOAD_LEVEL)))


def _extra_instances(value: Any) -> float:
    """A legacy cell as a number of extra instances; None counts as 0."""
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValueError(f"legacy schedule cell must be a number, got {value!r}")
    return float(value)


def _profile_list(raw: RawDocument) -> list:
    profiles = raw.get("scaling_profiles") or []
    if not isinstance(profiles, list):
        raise ValueError("scaling_profiles must be a list")
    return profiles


def migrate_legacy_schedule(legacy: dict, max_extra: int, profile_id: str) -> WeeklySchedule:
    days = {}
    for day in DAYS_OF_WEEK:
        hours = legacy.get(day) or []
        if not isinstance(hours, list):
            raise ValueError(f"legacy schedule day {day!r} must be a list")
        hours = list(hours)
        hours += [0] * (HOURS_PER_DAY - len(hours))
        cells = []
        for extra in hours[:HOURS_PER_DAY]:
            level = extra_instances_to_load_level(_extra_instances(extra), max_extra)
            cells.append(HourlyConfig(profile_id=profile_id if level else None, load_level=level))
        days[day] = cells
    return WeeklySchedule(**days)


def migrate_legacy_runtime(raw: RawDocument) -> RuntimeConfig:
    """Legacy min/max instances become a baseline profile plus a 'default' scaling profile."""
    min_instances = raw["default_min_instances"]
    max_instances = raw["default_max_instances"]
    flavor = raw["default_flavor_name"]
    max_extra = max_instances - min_instances
    has_scaling = max_extra > 0

    profiles = [_baseline_profile(min_instances, flavor)]
    if has_scaling:
        profiles.append(ScalingProfile(
            id=DEFAULT_PROFILE_ID,
            name="Standard",
            min_instances=min_instances,
            max_instances=max_instances,
            min_flavor_name=flavor,
            max_flavor_name=raw.get("scaling_flavor_name") or flavor,
            enabled=True,
        ))

    schedule = None
    if has_scaling:
        legacy_schedule = raw.get("weekly_schedule")
        if is_legacy_schedule(legacy_schedule):
            schedule = migrate_legacy_schedule(legacy_schedule, max_extra, DEFAULT_PROFILE_ID)
        else:
            schedule = WeeklySchedule.empty()

    return RuntimeConfig(
        id=raw["id"],
        instance_type=raw["instance_type"],
        instance_name=raw.get("instance_name", ""),
        scaling_enabled=has_scaling,
        baseline_config=BaselineConfig(instances=min_instances, flavor_name=flavor),
        scaling_profiles=profiles,
        weekly_schedule=schedule,
    )


def migrate_intermediate_runtime(raw: RawDocument) -> RuntimeConfig:
    """base_instances/base_flavor_name move into the baseline profile and baseline_config."""
    instances = raw["base_instances"]
    flavor = raw["base_flavor_name"]
    baseline = _baseline_profile(instances, flavor)

    profiles = []
    for p in _profile_list(raw):
        profile = ScalingProfile.model_validate(p)
        profiles.append(baseline if profile.id == BASELINE_PROFILE_ID else profile)
    if not any(p.id == BASELINE_PROFILE_ID for p in profiles):
        profiles.insert(0, baseline)

    has_scaling = any(p.id != BASELINE_PROFILE_ID and p.enabled for p in profiles)
    schedule = None
    if has_scaling and raw.get("weekly_schedule") is not None:
        schedule = WeeklySchedule.model_validate(raw["weekly_schedule"])
    elif has_scaling:
        schedule = WeeklySchedule.empty()

    return RuntimeConfig(
        id=raw["id"],
        instance_type=raw["instance_type"],
        instance_name=raw.get("instance_name", ""),
        scaling_enabled=has_scaling,
        baseline_config=BaselineConfig(instances=instances, flavor_name=flavor),
        scaling_profiles=profiles,
        weekly_schedule=schedule,
    )


def _migrate_current_runtime(raw: RawDocument) -> RuntimeConfig:
    """Current shape; baseline_config is derived from the baseline profile when missing."""
    if raw.get("baseline_config") is None:
        for p in _profile_list(raw):
            if isinstance(p, dict) and p.get("id") == BASELINE_PROFILE_ID:
                raw = {**raw, "baseline_config": {
                    "instances": p.get("min_instances", 1),
                    "flavor_name": p.get("min_flavor_name", ""),
                }}
                break
    runtime = RuntimeConfig.model_validate(raw)
    if not any(p.id == BASELINE_PROFILE_ID for p in runtime.scaling_profiles):
        runtime = runtime.model_copy(update={
            "scaling_profiles": [runtime.baseline_profile(), *runtime.scaling_profiles],
        })
    return runtime


def normalize_runtime(raw: RawDocument) -> RuntimeConfig:
    """
    Return the current RuntimeConfig for any stored runtime shape.
    Raises pydantic.ValidationError, ValueError or KeyError (missing legacy keys) on
    unusable input.
    """
    if not isinstance(raw, dict):
        raise ValueError("runtime document must be an object")
    if is_legacy_runtime(raw):
        _LOG.info("Migrating legacy runtime %s", raw.get("id"))
        return migrate_legacy_runtime(raw)
    if is_intermediate_runtime(raw):
        _LOG.info("Migrating intermediate runtime %s", raw.get("id"))
        return migrate_intermediate_runtime(raw)
    return _migrate_current_runtime(raw)


def normalize_project(raw: RawDocument) -> Project:
    """Normalize every runtime of a stored project; add-ons are validated as-is."""
    runtimes = [normalize_runtime(r) for r in raw.get("runtimes") or []]
    return Project.model_validate({**raw, "runtimes": runtimes})
