"""Project cost aggregation and projections (pure functions)."""
from typing import Optional, Sequence

from scalecost.addon_cost import PricingLookup, compute_addon_cost
from scalecost.models import (
    Flavor,
    InstanceType,
    Project,
    ProjectCostSummary,
    ProjectionPoint,
)
from scalecost.money import round_cents
from scalecost.runtime_cost import compute_runtime_cost


def build_flavor_map(instances: Sequence[InstanceType], instance_type: str) -> dict[str, Flavor]:
    """Flavors of one instance type keyed by name. Empty when the type is not in the catalog."""
    for inst in instances:
        if inst.type == instance_type:
            return {f.name: f for f in inst.flavors}
    return {}


def compute_project_cost(
    project: Project,
    instances: Optional[Sequence[InstanceType]],
    pricing_lookup: PricingLookup,
) -> ProjectCostSummary | None:
    """
    runtimes_cost = sum(runtime total_monthly_cost)
    addons_cost = sum(addon monthly_price)
    total = runtimes_cost + addons_cost
    Returns None when the flavor catalog is not loaded yet (instances is None);
    that is distinct from a project that legitimately costs 0.
    """
    if instances is None:
        return None

    runtimes_detail = [
        compute_runtime_cost(runtime, build_flavor_map(instances, runtime.instance_type))
        for runtime in project.runtimes
    ]
    addons_detail = [compute_addon_cost(addon, pricing_lookup) for addon in project.addons]

    runtimes_cost = sum(r.total_monthly_cost for r in runtimes_detail)
    addons_cost = sum(a.monthly_price for a in addons_detail)
    return ProjectCostSummary(
        project_id=project.id,
        project_name=project.name,
        runtimes_cost=round_cents(runtimes_cost),
        runtimes_detail=runtimes_detail,
        addons_cost=round_cents(addons_cost),
        addons_detail=addons_detail,
        total_monthly_cost=round_cents(runtimes_cost + addons_cost),
    )


def descendant_ids(projects: Sequence[Project], parent_id: str) -> list[str]:
    """Ids of every project below parent_id (children, grandchildren...). Cycles are cut."""
    out: list[str] = []
    seen = {parent_id}
    stack = [parent_id]
    while stack:
        current = stack.pop()
        for p in projects:
            if p.parent_project_id == current and p.id not in seen:
                seen.add(p.id)
                out.append(p.id)
                stack.append(p.id)
    return out


def compute_project_tree_cost(
    projects: Sequence[Project],
    project_id: str,
    instances: Optional[Sequence[InstanceType]],
    pricing_lookup: PricingLookup,
) -> ProjectCostSummary | None:
    """
    Cost of a project plus all its sub-projects, details concatenated.
    None when the catalog is not loaded or project_id is unknown.
    """
    if instances is None:
        return None
    root = next((p for p in projects if p.id == project_id), None)
    if root is None:
        return None

    wanted = {project_id, *descendant_ids(projects, project_id)}
    summaries = [
        compute_project_cost(p, instances, pricing_lookup)
        for p in projects
        if p.id in wanted
    ]
    runtimes_cost = sum(s.runtimes_cost for s in summaries)
    addons_cost = sum(s.addons_cost for s in summaries)
    return ProjectCostSummary(
        project_id=root.id,
        project_name=root.name,
        runtimes_cost=round_cents(runtimes_cost),
        runtimes_detail=[r for s in summaries for r in s.runtimes_detail],
        addons_cost=round_cents(addons_cost),
        addons_detail=[a for s in summaries for a in s.addons_detail],
        total_monthly_cost=round_cents(runtimes_cost + addons_cost),
    )


def compute_projection(
    monthly_cost: float,
    months: int,
    growth_rate_pct: float | None = None,
) -> list[ProjectionPoint]:
    """
    Project a monthly cost over N months. If growth_rate_pct (annual), usage and thus
    cost grow by growth_rate_pct / 12 each month after the first.
    """
    out = []
    g = (growth_rate_pct / 100.0) / 12.0 if growth_rate_pct is not None else 0.0  # monthly growth factor
    cur = monthly_cost
    cumulative = 0.0
    for m in range(1, months + 1):
        if m > 1 and g != 0:
            cur = cur * (1 + g)
        cumulative += cur
        out.append(ProjectionPoint(
            month=m,
            monthly_cost=round_cents(cur),
            cumulative_cost=round_cents(cumulative),
        ))
    return out
