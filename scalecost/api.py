"""FastAPI routes for the scalecost estimator."""
import logging
import os
from pathlib import Path

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from scalecost.addon_cost import compute_addon_cost
from scalecost.catalog import get_instance_type, get_instance_types, get_zones
from scalecost.cost_model import (
    build_flavor_map,
    compute_project_cost,
    compute_project_tree_cost,
    compute_projection,
)
from scalecost.migration import normalize_runtime
from scalecost.models import (
    AddonConfig,
    AddonCostDetail,
    EstimateRequest,
    InstanceType,
    ProjectCostSummary,
    ProjectionPoint,
    ProjectionRequest,
    RawDocument,
    RuntimeConfig,
    RuntimeCostDetail,
    RuntimeEstimateRequest,
    TreeEstimateRequest,
    UsageBasedPricing,
)
from scalecost.observability import RequestLoggingMiddleware, get_metrics_text, record_estimate
from scalecost.pricing_registry import get_usage_pricing, is_usage_based, list_usage_pricing
from scalecost.runtime_cost import compute_runtime_cost
from scalecost.security import RateLimitMiddleware

_LOG = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    raw = (os.environ.get("SCALECOST_CORS_ORIGINS") or "").strip()
    if not raw:
        return []
    if raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


def _default_zone() -> str:
    return (os.environ.get("SCALECOST_DEFAULT_ZONE") or "par").strip()


app = FastAPI(
    title="scalecost",
    description="Monthly cost estimator for scaling runtimes and usage-billed add-ons",
    version="0.1.0",
)
origins = _cors_origins()
if origins:
    app.add_middleware(CORSMiddleware, allow_origins=origins, allow_credentials=True, allow_methods=["*"], allow_headers=["*"])
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLoggingMiddleware)


def _catalog_or_503(zone: str | None, kind: str) -> list[InstanceType]:
    """Flavor catalog of a zone; 503 while it is not available (not the same as a zero cost)."""
    zone_id = zone or _default_zone()
    instances = get_instance_types(zone_id)
    if instances is None:
        record_estimate(kind, "not_ready")
        raise HTTPException(status_code=503, detail=f"Flavor catalog for zone '{zone_id}' is not loaded.")
    return instances


@app.get("/v1/health")
def health():
    """Health check."""
    return {"status": "ok", "service": "scalecost"}


@app.get("/v1/metrics")
def metrics():
    """Prometheus-style metrics (request counts, estimates, uptime, duration)."""
    return PlainTextResponse(get_metrics_text(), media_type="text/plain; charset=utf-8")


@app.get("/v1/catalog/zones")
def catalog_zones():
    """List zones with a flavor catalog."""
    return get_zones()


@app.get("/v1/catalog/instances", response_model=list[InstanceType])
def catalog_instances(zone: str | None = None):
    """List runtime instance types and flavors of a zone."""
    zone_id = zone or _default_zone()
    instances = get_instance_types(zone_id)
    if instances is None:
        raise HTTPException(status_code=404, detail=f"Unknown zone '{zone_id}'.")
    return instances


@app.get("/v1/catalog/instances/{instance_type}", response_model=InstanceType)
def catalog_instance(instance_type: str, zone: str | None = None):
    """One runtime instance type of a zone, with its flavors."""
    zone_id = zone or _default_zone()
    inst = get_instance_type(zone_id, instance_type)
    if inst is None:
        raise HTTPException(status_code=404, detail=f"Unknown instance type '{instance_type}' in zone '{zone_id}'.")
    return inst


@app.get("/v1/addons/pricing", response_model=list[UsageBasedPricing])
def addons_pricing():
    """All add-on providers billed on usage, with their metrics and tiers."""
    return list_usage_pricing()


@app.get("/v1/addons/pricing/{provider_id}", response_model=UsageBasedPricing)
def addon_pricing(provider_id: str):
    if not is_usage_based(provider_id):
        raise HTTPException(status_code=404, detail=f"Provider '{provider_id}' is billed flat.")
    return get_usage_pricing(provider_id)


@app.post("/v1/estimate", response_model=ProjectCostSummary)
def estimate(body: EstimateRequest):
    """Monthly cost summary of a project: runtimes + add-ons."""
    instances = _catalog_or_503(body.zone, "project")
    summary = compute_project_cost(body.project, instances, get_usage_pricing)
    record_estimate("project", "ok")
    return summary


@app.post("/v1/estimate/tree", response_model=ProjectCostSummary)
def estimate_tree(body: TreeEstimateRequest):
    """Monthly cost of a project and all its sub-projects."""
    instances = _catalog_or_503(body.zone, "tree")
    summary = compute_project_tree_cost(body.projects, body.project_id, instances, get_usage_pricing)
    if summary is None:
        raise HTTPException(status_code=404, detail=f"Project '{body.project_id}' not in request.")
    record_estimate("tree", "ok")
    return summary


@app.post("/v1/estimate/runtime", response_model=RuntimeCostDetail)
def estimate_runtime(body: RuntimeEstimateRequest):
    """Monthly cost of a single runtime, with its min/max range."""
    instances = _catalog_or_503(body.zone, "runtime")
    detail = compute_runtime_cost(body.runtime, build_flavor_map(instances, body.runtime.instance_type))
    record_estimate("runtime", "ok")
    return detail


@app.post("/v1/estimate/addon", response_model=AddonCostDetail)
def estimate_addon(addon: AddonConfig):
    """Monthly cost of a single add-on (flat or usage-based)."""
    detail = compute_addon_cost(addon, get_usage_pricing)
    record_estimate("addon", "ok")
    return detail


@app.post("/v1/projection", response_model=list[ProjectionPoint])
def projection(body: ProjectionRequest):
    """Cumulative cost over N months, with optional annual growth."""
    return compute_projection(body.monthly_cost, body.months, body.growth_rate_pct)


@app.post("/v1/runtimes/normalize", response_model=RuntimeConfig)
def runtimes_normalize(raw: RawDocument = Body(...)):
    """Upgrade a stored runtime document (legacy, intermediate or current) to the current shape."""
    try:
        return normalize_runtime(raw)
    except (KeyError, ValueError) as e:
        _LOG.info("Runtime document rejected: %s", e)
        raise HTTPException(status_code=422, detail=f"Unusable runtime document: {e}")


def mount_static(app: FastAPI, static_dir: Path):
    """Mount a static frontend if the directory exists."""
    resolved = Path(static_dir).resolve()
    if resolved.is_dir():
        app.mount("/", StaticFiles(directory=str(resolved), html=True), name="static")
