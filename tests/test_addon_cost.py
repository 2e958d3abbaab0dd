"""Tests for add-on cost resolution."""
from scalecost.addon_cost import compute_addon_cost, default_usage_estimates
from scalecost.models import AddonConfig, PricingTier, UsageBasedPricing, UsageEstimate, UsageMetric

CELLAR = UsageBasedPricing(
    provider_id="cellar-addon",
    metrics=[
        UsageMetric(
            id="storage_gb", name="Storage", unit="GB", free_quota=0,
            tiers=[PricingTier(min_threshold=0, max_threshold=None, price_per_unit=0.02)],
            default_value=100,
        ),
        UsageMetric(
            id="bandwidth_gb", name="Bandwidth", unit="GB", free_quota=10,
            tiers=[PricingTier(min_threshold=0, max_threshold=None, price_per_unit=0.09)],
            default_value=50,
        ),
    ],
)


def _lookup(provider_id):
    return {"cellar-addon": CELLAR}.get(provider_id)


def test_flat_addon_price_unchanged():
    addon = AddonConfig(id="a1", provider_id="postgresql-addon", plan_name="XS", monthly_price=15.5)
    detail = compute_addon_cost(addon, _lookup)
    assert detail.monthly_price == 15.5
    assert detail.is_usage_based is False
    assert detail.is_estimate is False
    assert detail.usage_details == []
    assert detail.usage_cost is None


def test_flat_addon_ignores_estimates_without_pricing():
    addon = AddonConfig(
        id="a1", provider_id="redis-addon", monthly_price=10,
        usage_estimates=[UsageEstimate(metric_id="storage_gb", value=1000)],
    )
    assert compute_addon_cost(addon, _lookup).monthly_price == 10


def test_usage_addon_uses_defaults_when_no_estimates():
    """storage 100 * 0.02 = 2.00, bandwidth (50 - 10) * 0.09 = 3.60."""
    addon = AddonConfig(id="a2", provider_id="cellar-addon", monthly_price=0)
    detail = compute_addon_cost(addon, _lookup)
    assert detail.is_usage_based is True
    assert detail.is_estimate is True
    assert [d.metric_id for d in detail.usage_details] == ["storage_gb", "bandwidth_gb"]
    assert [d.cost for d in detail.usage_details] == [2.00, 3.60]
    assert detail.usage_cost == 5.60
    assert detail.monthly_price == 5.60


def test_usage_addon_adds_flat_price_and_estimates():
    addon = AddonConfig(
        id="a3", provider_id="cellar-addon", monthly_price=4.5,
        usage_estimates=[UsageEstimate(metric_id="storage_gb", value=500)],
    )
    detail = compute_addon_cost(addon, _lookup)
    storage, bandwidth = detail.usage_details
    assert storage.value == 500 and storage.cost == 10.00
    assert bandwidth.value == 50  # default, no estimate given
    assert bandwidth.free_quota_applied == 10
    assert detail.monthly_price == round(4.5 + sum(d.cost for d in detail.usage_details), 2)
    assert detail.monthly_price == 18.10


def test_free_quota_applied_capped_by_value():
    addon = AddonConfig(
        id="a4", provider_id="cellar-addon",
        usage_estimates=[UsageEstimate(metric_id="bandwidth_gb", value=4)],
    )
    bandwidth = compute_addon_cost(addon, _lookup).usage_details[1]
    assert bandwidth.free_quota_applied == 4
    assert bandwidth.cost == 0


def test_estimates_are_not_clamped():
    addon = AddonConfig(
        id="a5", provider_id="cellar-addon",
        usage_estimates=[UsageEstimate(metric_id="storage_gb", value=1_000_000)],
    )
    assert compute_addon_cost(addon, _lookup).usage_details[0].cost == 20_000


def test_default_usage_estimates():
    estimates = default_usage_estimates(CELLAR)
    assert [(e.metric_id, e.value) for e in estimates] == [("storage_gb", 100), ("bandwidth_gb", 50)]
