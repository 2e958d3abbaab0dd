"""Monthly cost of a runtime over its weekly schedule (pure functions, no I/O)."""
import logging
from collections import defaultdict

from scalecost.constants import BASELINE_PROFILE_ID, HOURS_PER_MONTH, HOURS_PER_WEEK, WEEKS_PER_MONTH
from scalecost.models import RuntimeConfig, RuntimeCostDetail, WeeklySchedule
from scalecost.money import round_cents
from scalecost.scaling import (
    FlavorMap,
    active_profile,
    baseline_state,
    describe_state,
    max_profile_state,
    resolve_cell,
)

_LOG = logging.getLogger(__name__)


def compute_runtime_cost(runtime: RuntimeConfig, flavors: FlavorMap) -> RuntimeCostDetail:
    """
    Fixed runtime:
        total = min = max = instances * hourly_price * HOURS_PER_MONTH
    Scaling runtime (168 cells, each recurring WEEKS_PER_MONTH times a month):
        total = sum(cell instances * cell hourly_price) * WEEKS_PER_MONTH
        min   = baseline on every hour
        max   = richest enabled profile at level 5 on every hour
    min and max describe the configuration's envelope, not the current schedule.
    """
    base = baseline_state(runtime, flavors)
    if base.flavor_name not in flavors:
        _LOG.warning(
            "Runtime %s: baseline flavor %r not in catalog, priced at 0",
            runtime.id, base.flavor_name,
        )

    if not runtime.scaling_enabled:
        monthly = round_cents(base.hourly_cost * HOURS_PER_MONTH)
        return RuntimeCostDetail(
            runtime_id=runtime.id,
            runtime_name=runtime.instance_name,
            instance_type=runtime.instance_type,
            base_flavor_name=base.flavor_name,
            base_instances=base.instances,
            base_hourly_price=base.hourly_price,
            base_monthly_cost=monthly,
            estimated_scaling_cost=0,
            total_monthly_cost=monthly,
            min_monthly_cost=monthly,
            max_monthly_cost=monthly,
            instance_hours_by_flavor={base.flavor_name: float(base.instances * HOURS_PER_WEEK)},
        )

    schedule = runtime.weekly_schedule or WeeklySchedule.empty()
    instance_hours: dict[str, float] = defaultdict(float)
    weekly_cost = 0.0
    scaling_hours = 0
    total_level = 0
    degraded = 0
    hours_by_profile: dict[str, int] = defaultdict(int)
    weekly_cost_by_profile: dict[str, float] = defaultdict(float)

    for day, hour, config in schedule.cells():
        state = resolve_cell(runtime, day, hour, flavors)
        profile = active_profile(runtime, config)
        if profile is None:
            if config.load_level > 0 and config.profile_id not in (None, BASELINE_PROFILE_ID):
                degraded += 1
        else:
            scaling_hours += 1
            total_level += config.load_level
            hours_by_profile[profile.id] += 1
            weekly_cost_by_profile[profile.id] += state.hourly_cost
        instance_hours[state.flavor_name] += state.instances
        weekly_cost += state.hourly_cost

    if degraded:
        _LOG.debug(
            "Runtime %s: %d scheduled hours reference a missing or disabled profile, using baseline",
            runtime.id, degraded,
        )
    unknown = sorted(name for name in instance_hours if name not in flavors)
    if unknown:
        _LOG.warning("Runtime %s: flavors %s not in catalog, priced at 0", runtime.id, unknown)

    peak = max_profile_state(runtime, flavors)
    _LOG.debug("Runtime %s: envelope %s .. %s", runtime.id, describe_state(base), describe_state(peak))

    total = round_cents(weekly_cost * WEEKS_PER_MONTH)
    min_cost = round_cents(base.hourly_cost * HOURS_PER_WEEK * WEEKS_PER_MONTH)
    max_cost = round_cents(peak.hourly_cost * HOURS_PER_WEEK * WEEKS_PER_MONTH)

    return RuntimeCostDetail(
        runtime_id=runtime.id,
        runtime_name=runtime.instance_name,
        instance_type=runtime.instance_type,
        base_flavor_name=base.flavor_name,
        base_instances=base.instances,
        base_hourly_price=base.hourly_price,
        base_monthly_cost=min_cost,
        estimated_scaling_cost=round_cents(max(0.0, total - min_cost)),
        total_monthly_cost=total,
        min_monthly_cost=min_cost,
        max_monthly_cost=max_cost,
        scaling_hours=scaling_hours,
        average_load_level=round(total_level / scaling_hours, 1) if scaling_hours else 0,
        scaling_hours_by_profile=dict(hours_by_profile),
        scaling_cost_by_profile={
            pid: round_cents(cost * WEEKS_PER_MONTH) for pid, cost in weekly_cost_by_profile.items()
        },
        instance_hours_by_flavor=dict(instance_hours),
    )
