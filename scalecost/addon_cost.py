"""Add-on cost: flat plan price plus tiered usage (pure functions, no I/O)."""
import logging
from typing import Callable, Optional

from scalecost.models import (
    AddonConfig,
    AddonCostDetail,
    UsageBasedPricing,
    UsageEstimate,
    UsageMetricCostDetail,
)
from scalecost.money import round_cents
from scalecost.tiers import compute_metric_cost, free_quota_applied

_LOG = logging.getLogger(__name__)

PricingLookup = Callable[[str], Optional[UsageBasedPricing]]


def compute_addon_cost(addon: AddonConfig, pricing_lookup: PricingLookup) -> AddonCostDetail:
    """
    Providers without a usage pricing record are billed flat (monthly_price unchanged).
    Otherwise every metric of the provider is priced, using the user's estimate when
    present and the metric default otherwise:
        monthly_price = flat plan price + sum(metric costs)
    """
    flat = AddonCostDetail(
        addon_id=addon.id,
        provider_name=addon.provider_name,
        plan_name=addon.plan_name,
        monthly_price=addon.monthly_price,
    )
    pricing = pricing_lookup(addon.provider_id)
    if pricing is None:
        if addon.usage_estimates:
            _LOG.debug("No usage pricing for provider %s; billing addon %s flat", addon.provider_id, addon.id)
        return flat

    estimates = {e.metric_id: e.value for e in addon.usage_estimates or []}
    details = []
    for metric in pricing.metrics:
        value = estimates.get(metric.id, metric.default_value)
        details.append(UsageMetricCostDetail(
            metric_id=metric.id,
            metric_name=metric.name,
            value=value,
            unit=metric.unit,
            cost=compute_metric_cost(metric, value),
            free_quota_applied=free_quota_applied(metric, value),
        ))

    usage_cost = sum(d.cost for d in details)
    return flat.model_copy(update={
        "monthly_price": round_cents(addon.monthly_price + usage_cost),
        "is_usage_based": True,
        "is_estimate": True,
        "usage_cost": round_cents(usage_cost),
        "usage_details": details,
    })


def default_usage_estimates(pricing: UsageBasedPricing) -> list[UsageEstimate]:
    """One estimate per metric, at the metric's default value."""
    return [UsageEstimate(metric_id=m.id, value=m.default_value) for m in pricing.metrics]
