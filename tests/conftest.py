"""Pytest fixtures for scalecost tests."""
import pytest

from scalecost.catalog import clear_cache
from scalecost.models import (
    BaselineConfig,
    Flavor,
    RuntimeConfig,
    ScalingProfile,
    WeeklySchedule,
)
from scalecost.pricing_registry import reload_registry


@pytest.fixture
def flavors():
    """Small catalog keyed by name: S 0.02, M 0.05, L 0.10, XL 0.20 per hour."""
    return {
        "S": Flavor(name="S", hourly_price=0.02, memory_mb=2048, cpus=2),
        "M": Flavor(name="M", hourly_price=0.05, memory_mb=4096, cpus=4),
        "L": Flavor(name="L", hourly_price=0.10, memory_mb=8192, cpus=6),
        "XL": Flavor(name="XL", hourly_price=0.20, memory_mb=16384, cpus=8),
    }


def make_runtime(
    scaling_enabled=False,
    instances=1,
    flavor="S",
    profiles=(),
    schedule=None,
    instance_type="node",
):
    """RuntimeConfig with a baseline profile plus the given scaling profiles."""
    baseline = ScalingProfile(
        id="baseline", name="Baseline",
        min_instances=instances, max_instances=instances,
        min_flavor_name=flavor, max_flavor_name=flavor,
    )
    return RuntimeConfig(
        id="rt-1",
        instance_type=instance_type,
        instance_name="Node.js",
        scaling_enabled=scaling_enabled,
        baseline_config=BaselineConfig(instances=instances, flavor_name=flavor),
        scaling_profiles=[baseline, *profiles],
        weekly_schedule=schedule,
    )


@pytest.fixture
def peak_profile():
    """1xS at level 1 up to 5xXL at level 5."""
    return ScalingProfile(
        id="peak", name="Peak",
        min_instances=1, max_instances=5,
        min_flavor_name="S", max_flavor_name="XL",
    )


@pytest.fixture
def scaling_runtime(peak_profile):
    """Scaling runtime, baseline 1xS, all hours on baseline until a test fills the grid."""
    return make_runtime(scaling_enabled=True, profiles=[peak_profile], schedule=WeeklySchedule.empty())


@pytest.fixture(autouse=True)
def fresh_catalogs():
    """Catalog and pricing registry caches must not leak between tests."""
    clear_cache()
    reload_registry()
    yield
    clear_cache()
    reload_registry()
