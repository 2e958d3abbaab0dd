"""Tiered usage billing (pure functions, no I/O)."""
from scalecost.models import UsageMetric
from scalecost.money import round_cents


def compute_metric_cost(metric: UsageMetric, value: float) -> float:
    """
    billable = max(0, value - free_quota)
    Walk tiers in ascending order; each tier takes min(remaining, max - min) units,
    an open tier (max_threshold None) takes everything left.
    cost = sum(quantity_in_tier * price_per_unit), rounded to cents.

    Tiers are trusted to be contiguous and sorted; gaps or overlaps are not detected.
    """
    billable = max(0.0, value - metric.free_quota)
    if billable == 0:
        return 0.0

    total = 0.0
    remaining = billable
    for tier in metric.tiers:
        if remaining <= 0:
            break
        if tier.max_threshold is None:
            width = remaining
        else:
            width = tier.max_threshold - tier.min_threshold
        quantity = min(remaining, width)
        total += quantity * tier.price_per_unit
        remaining -= quantity

    return round_cents(total)


def free_quota_applied(metric: UsageMetric, value: float) -> float:
    """Part of the value absorbed by the free quota."""
    return min(value, metric.free_quota)
