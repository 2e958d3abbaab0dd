"""Scaling profile resolution for one schedule hour (pure functions, no I/O).

A schedule cell (profile id + load level) is turned into a concrete
instances x flavor pair:

- load level 0, no schedule, or scaling disabled: baseline
- unknown or disabled profile: baseline (the estimate never fails on a dangling reference)
- otherwise instances are interpolated linearly between the profile bounds, level 1
  on the min bound and level 5 on the max bound:
  instances = round_half_up(min + (max - min) * (level - 1) / 4)
  The flavor is picked discretely: min flavor below MAX_FLAVOR_LOAD_LEVEL, max flavor
  from it on.

Example with min=1xS, max=5xXL:
    level 1 -> 1xS, level 2 -> 2xS, level 3 -> 3xXL, level 4 -> 4xXL, level 5 -> 5xXL
"""
from typing import Mapping, Optional

from scalecost.constants import BASELINE_PROFILE_ID, MAX_FLAVOR_LOAD_LEVEL, MAX_LOAD_LEVEL
from scalecost.models import Flavor, HourlyConfig, RuntimeConfig, ScalingProfile, ScalingState
from scalecost.money import round_half_up

FlavorMap = Mapping[str, Flavor]


def flavor_price(flavors: FlavorMap, name: str) -> float:
    """Hourly price of a flavor; 0 when the name is not in the catalog."""
    flavor = flavors.get(name)
    if flavor is None:
        return 0.0
    return flavor.hourly_price


def _state(instances: int, flavor_name: str, flavors: FlavorMap) -> ScalingState:
    price = flavor_price(flavors, flavor_name)
    return ScalingState(
        instances=instances,
        flavor_name=flavor_name,
        hourly_price=price,
        hourly_cost=instances * price,
    )


def baseline_state(runtime: RuntimeConfig, flavors: FlavorMap) -> ScalingState:
    base = runtime.baseline_config
    return _state(base.instances, base.flavor_name, flavors)


def profile_state(profile: ScalingProfile, load_level: int, flavors: FlavorMap) -> ScalingState:
    """Size of a profile at a load level (1..5). Does not check profile.enabled."""
    fraction = max(0, load_level - 1) / (MAX_LOAD_LEVEL - 1)
    instances = round_half_up(
        profile.min_instances + (profile.max_instances - profile.min_instances) * fraction
    )
    if load_level >= MAX_FLAVOR_LOAD_LEVEL:
        flavor_name = profile.max_flavor_name
    else:
        flavor_name = profile.min_flavor_name
    return _state(instances, flavor_name, flavors)


def active_profile(runtime: RuntimeConfig, config: HourlyConfig) -> Optional[ScalingProfile]:
    """
    Profile that actually scales this cell, or None when the cell runs on baseline
    (level 0, baseline reference, unknown id, disabled profile).
    """
    if config.load_level == 0 or config.profile_id in (None, BASELINE_PROFILE_ID):
        return None
    profile = runtime.find_profile(config.profile_id)
    if profile is None or not profile.enabled:
        return None
    return profile


def resolve_config(runtime: RuntimeConfig, config: HourlyConfig, flavors: FlavorMap) -> ScalingState:
    """Resolve one HourlyConfig of the runtime's schedule."""
    profile = active_profile(runtime, config)
    if profile is None:
        return baseline_state(runtime, flavors)
    return profile_state(profile, config.load_level, flavors)


def resolve_cell(runtime: RuntimeConfig, day: str, hour: int, flavors: FlavorMap) -> ScalingState:
    """Resolve the schedule cell (day, hour) of a runtime to instances, flavor and price."""
    if not runtime.scaling_enabled or runtime.weekly_schedule is None:
        return baseline_state(runtime, flavors)
    return resolve_config(runtime, runtime.weekly_schedule.cell(day, hour), flavors)


def max_profile_state(runtime: RuntimeConfig, flavors: FlavorMap) -> ScalingState:
    """Most expensive hour the configuration allows: richest enabled profile at level 5, or baseline."""
    best = baseline_state(runtime, flavors)
    for profile in runtime.scaling_profiles:
        if profile.id == BASELINE_PROFILE_ID or not profile.enabled:
            continue
        state = profile_state(profile, MAX_LOAD_LEVEL, flavors)
        if state.hourly_cost > best.hourly_cost:
            best = state
    return best


def describe_state(state: ScalingState) -> str:
    return f"{state.instances}x {state.flavor_name}"
