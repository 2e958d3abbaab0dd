"""Input/output types for the scalecost engine and API."""
from typing import Any, Iterator, Optional
from pydantic import BaseModel, ConfigDict, Field

from scalecost.constants import BASELINE_PROFILE_ID, DAYS_OF_WEEK, HOURS_PER_DAY


# --- Flavor catalog (external, read-only) ---

class Flavor(BaseModel):
    """One size of a runtime (e.g. XS, S, M) and its hourly price."""
    model_config = ConfigDict(allow_inf_nan=False)

    name: str = Field(..., min_length=1, max_length=32)
    hourly_price: float = Field(..., ge=0, description="EUR per hour per instance")
    memory_mb: int = Field(0, ge=0)
    cpus: int = Field(0, ge=0)
    available: bool = True


class InstanceType(BaseModel):
    """Runtime type (node, python, docker...) and the flavors it can run on."""
    type: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=128)
    version: Optional[str] = None
    flavors: list[Flavor] = Field(default_factory=list)


# --- Runtime configuration ---

class ScalingProfile(BaseModel):
    """Min/max instances and flavors selectable per schedule hour."""
    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field("", max_length=128)
    min_instances: int = Field(..., ge=0, le=1000)
    max_instances: int = Field(..., ge=0, le=1000)
    min_flavor_name: str = Field(..., max_length=32)
    max_flavor_name: str = Field(..., max_length=32)
    enabled: bool = True


class BaselineConfig(BaseModel):
    """Fixed instances and flavor used when no scaling applies."""
    instances: int = Field(1, ge=0, le=1000)
    flavor_name: str = Field(..., min_length=1, max_length=32)


class HourlyConfig(BaseModel):
    """One schedule cell: which profile to use and how hard to scale it."""
    profile_id: Optional[str] = None
    load_level: int = Field(0, ge=0, le=5, description="0 = baseline, 1..5 = scaling intensity")


def _empty_day() -> list[HourlyConfig]:
    return [HourlyConfig() for _ in range(HOURS_PER_DAY)]


class WeeklySchedule(BaseModel):
    """7 days x 24 hours grid of HourlyConfig."""
    mon: list[HourlyConfig] = Field(default_factory=_empty_day, min_length=HOURS_PER_DAY, max_length=HOURS_PER_DAY)
    tue: list[HourlyConfig] = Field(default_factory=_empty_day, min_length=HOURS_PER_DAY, max_length=HOURS_PER_DAY)
    wed: list[HourlyConfig] = Field(default_factory=_empty_day, min_length=HOURS_PER_DAY, max_length=HOURS_PER_DAY)
    thu: list[HourlyConfig] = Field(default_factory=_empty_day, min_length=HOURS_PER_DAY, max_length=HOURS_PER_DAY)
    fri: list[HourlyConfig] = Field(default_factory=_empty_day, min_length=HOURS_PER_DAY, max_length=HOURS_PER_DAY)
    sat: list[HourlyConfig] = Field(default_factory=_empty_day, min_length=HOURS_PER_DAY, max_length=HOURS_PER_DAY)
    sun: list[HourlyConfig] = Field(default_factory=_empty_day, min_length=HOURS_PER_DAY, max_length=HOURS_PER_DAY)

    @classmethod
    def empty(cls) -> "WeeklySchedule":
        """All 168 hours on baseline."""
        return cls()

    @classmethod
    def filled(cls, profile_id: Optional[str], load_level: int) -> "WeeklySchedule":
        """All 168 hours on the same profile and level."""
        return cls(**{
            d: [HourlyConfig(profile_id=profile_id, load_level=load_level) for _ in range(HOURS_PER_DAY)]
            for d in DAYS_OF_WEEK
        })

    def cell(self, day: str, hour: int) -> HourlyConfig:
        return getattr(self, day)[hour]

    def cells(self) -> Iterator[tuple[str, int, HourlyConfig]]:
        """Yield (day, hour, config) for the 168 cells, Monday 00h first."""
        for day in DAYS_OF_WEEK:
            for hour, config in enumerate(getattr(self, day)):
                yield day, hour, config


class RuntimeConfig(BaseModel):
    """A deployed runtime: baseline size plus optional weekly scaling plan."""
    id: str = Field(..., min_length=1, max_length=64)
    instance_type: str = Field(..., min_length=1, max_length=64, description="e.g. node, python")
    instance_name: str = Field("", max_length=128, description="e.g. Node.js")
    scaling_enabled: bool = False
    baseline_config: BaselineConfig
    scaling_profiles: list[ScalingProfile] = Field(default_factory=list)
    weekly_schedule: Optional[WeeklySchedule] = None

    def baseline_profile(self) -> ScalingProfile:
        """
        The reserved baseline profile. Built from baseline_config when the profile list
        does not carry it; the stored instance is never mutated.
        """
        for p in self.scaling_profiles:
            if p.id == BASELINE_PROFILE_ID:
                return p
        base = self.baseline_config
        return ScalingProfile(
            id=BASELINE_PROFILE_ID,
            name="Baseline",
            min_instances=base.instances,
            max_instances=base.instances,
            min_flavor_name=base.flavor_name,
            max_flavor_name=base.flavor_name,
            enabled=True,
        )

    def find_profile(self, profile_id: Optional[str]) -> Optional[ScalingProfile]:
        if profile_id is None:
            return None
        for p in self.scaling_profiles:
            if p.id == profile_id:
                return p
        return None


# --- Usage-based add-on pricing ---

class PricingTier(BaseModel):
    """Price per unit between min_threshold and max_threshold (None = open-ended)."""
    model_config = ConfigDict(allow_inf_nan=False)

    min_threshold: float = Field(..., ge=0)
    max_threshold: Optional[float] = Field(None, ge=0)
    price_per_unit: float = Field(..., ge=0)


class UsageMetric(BaseModel):
    """A metered quantity (storage, bandwidth, users, I/O) with its tiers."""
    model_config = ConfigDict(allow_inf_nan=False)

    id: str = Field(..., min_length=1, max_length=64, description="e.g. storage_gb, bandwidth_gb")
    name: str = ""
    unit: str = ""
    free_quota: float = Field(0, ge=0)
    tiers: list[PricingTier] = Field(default_factory=list)
    default_value: float = 0
    min_value: float = 0
    max_value: float = 0
    step: float = 1


class UsageBasedPricing(BaseModel):
    """Usage pricing record of one add-on provider."""
    provider_id: str
    pricing_description: str = ""
    metrics: list[UsageMetric] = Field(default_factory=list)


class UsageEstimate(BaseModel):
    """User estimate for one metric. Not clamped by the engine."""
    model_config = ConfigDict(allow_inf_nan=False)

    metric_id: str
    value: float


class AddonConfig(BaseModel):
    """An add-on of a project: flat plan price plus optional usage estimates."""
    model_config = ConfigDict(allow_inf_nan=False)

    id: str = Field(..., min_length=1, max_length=64)
    provider_id: str = Field(..., min_length=1, max_length=64, description="e.g. postgresql-addon, cellar-addon")
    provider_name: str = ""
    plan_id: str = ""
    plan_name: str = ""
    monthly_price: float = Field(0, ge=0, description="Flat plan price, EUR per month")
    usage_estimates: Optional[list[UsageEstimate]] = None


class Project(BaseModel):
    """Deployment topology: runtimes and add-ons."""
    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field("", max_length=200)
    organization_id: Optional[str] = None
    parent_project_id: Optional[str] = None
    runtimes: list[RuntimeConfig] = Field(default_factory=list)
    addons: list[AddonConfig] = Field(default_factory=list)


# --- Results (recomputed on demand, never persisted) ---

class ScalingState(BaseModel):
    """Resolved size of one schedule hour."""
    instances: int
    flavor_name: str
    hourly_price: float
    hourly_cost: float


class RuntimeCostDetail(BaseModel):
    """Monthly cost of one runtime, with its min/max envelope."""
    runtime_id: str
    runtime_name: str
    instance_type: str
    base_flavor_name: str
    base_instances: int
    base_hourly_price: float
    base_monthly_cost: float
    estimated_scaling_cost: float
    total_monthly_cost: float
    min_monthly_cost: float
    max_monthly_cost: float
    scaling_hours: int = 0  # weekly hours with load_level > 0
    average_load_level: float = 0
    scaling_hours_by_profile: dict[str, int] = Field(default_factory=dict)
    scaling_cost_by_profile: dict[str, float] = Field(default_factory=dict)  # monthly
    instance_hours_by_flavor: dict[str, float] = Field(default_factory=dict)  # weekly


class UsageMetricCostDetail(BaseModel):
    """Cost of one metric of a usage-based add-on."""
    metric_id: str
    metric_name: str = ""
    value: float
    unit: str = ""
    cost: float
    free_quota_applied: float


class AddonCostDetail(BaseModel):
    """Monthly cost of one add-on."""
    addon_id: str
    provider_name: str = ""
    plan_name: str = ""
    monthly_price: float
    is_usage_based: bool = False
    is_estimate: bool = False
    usage_cost: Optional[float] = None
    usage_details: list[UsageMetricCostDetail] = Field(default_factory=list)


class ProjectCostSummary(BaseModel):
    """Project-level monthly cost summary."""
    project_id: str
    project_name: str = ""
    runtimes_cost: float
    runtimes_detail: list[RuntimeCostDetail] = Field(default_factory=list)
    addons_cost: float
    addons_detail: list[AddonCostDetail] = Field(default_factory=list)
    total_monthly_cost: float


class ProjectionPoint(BaseModel):
    """One month of a cost projection."""
    month: int
    monthly_cost: float
    cumulative_cost: float


# --- API request bodies ---

class EstimateRequest(BaseModel):
    """Request body for POST /v1/estimate."""
    zone: Optional[str] = Field(None, max_length=32, description="Catalog zone, e.g. par")
    project: Project


class TreeEstimateRequest(BaseModel):
    """Request body for POST /v1/estimate/tree: a project and its descendants."""
    zone: Optional[str] = Field(None, max_length=32)
    project_id: str
    projects: list[Project]


class RuntimeEstimateRequest(BaseModel):
    """Request body for POST /v1/estimate/runtime."""
    zone: Optional[str] = Field(None, max_length=32)
    runtime: RuntimeConfig


class ProjectionRequest(BaseModel):
    """Request body for POST /v1/projection."""
    model_config = ConfigDict(allow_inf_nan=False)

    monthly_cost: float = Field(..., ge=0)
    months: int = Field(12, ge=1, le=36)
    growth_rate_pct: Optional[float] = Field(None, ge=-50, le=500, description="Annual growth %")


RawDocument = dict[str, Any]
