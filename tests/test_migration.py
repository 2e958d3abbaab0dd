"""Tests for stored runtime document normalisation."""
import pytest
from pydantic import ValidationError

from scalecost.migration import (
    extra_instances_to_load_level,
    is_intermediate_runtime,
    is_legacy_runtime,
    normalize_project,
    normalize_runtime,
)


def _legacy(min_instances=1, max_instances=3, schedule=None):
    return {
        "id": "rt-legacy",
        "instance_type": "node",
        "instance_name": "Node.js",
        "default_flavor_name": "S",
        "scaling_flavor_name": "L",
        "default_min_instances": min_instances,
        "default_max_instances": max_instances,
        "weekly_schedule": schedule or {day: [0] * 24 for day in ("mon", "tue", "wed", "thu", "fri", "sat", "sun")},
    }


@pytest.mark.parametrize("extra, max_extra, level", [(0, 2, 0), (1, 2, 3), (2, 2, 5), (5, 2, 5), (1, 10, 1), (3, 0, 0)])
def test_extra_instances_to_load_level(extra, max_extra, level):
    assert extra_instances_to_load_level(extra, max_extra) == level


def test_legacy_runtime_with_scaling():
    raw = _legacy()
    raw["weekly_schedule"]["mon"][10] = 2
    runtime = normalize_runtime(raw)
    assert is_legacy_runtime(raw)
    assert runtime.scaling_enabled is True
    assert runtime.baseline_config.instances == 1
    assert runtime.baseline_config.flavor_name == "S"
    assert [p.id for p in runtime.scaling_profiles] == ["baseline", "default"]
    default = runtime.scaling_profiles[1]
    assert (default.min_instances, default.max_instances) == (1, 3)
    assert (default.min_flavor_name, default.max_flavor_name) == ("S", "L")
    cell = runtime.weekly_schedule.cell("mon", 10)
    assert (cell.profile_id, cell.load_level) == ("default", 5)
    assert runtime.weekly_schedule.cell("mon", 9).load_level == 0


def test_legacy_runtime_without_scaling():
    runtime = normalize_runtime(_legacy(min_instances=2, max_instances=2))
    assert runtime.scaling_enabled is False
    assert runtime.weekly_schedule is None
    assert [p.id for p in runtime.scaling_profiles] == ["baseline"]
    assert runtime.baseline_config.instances == 2


def test_intermediate_runtime():
    raw = {
        "id": "rt-mid",
        "instance_type": "python",
        "base_flavor_name": "M",
        "base_instances": 2,
        "scaling_profiles": [
            {"id": "baseline", "name": "Baseline", "min_instances": 1, "max_instances": 1,
             "min_flavor_name": "", "max_flavor_name": "", "enabled": False},
            {"id": "night", "name": "Night", "min_instances": 1, "max_instances": 4,
             "min_flavor_name": "M", "max_flavor_name": "L", "enabled": True},
        ],
        "weekly_schedule": {"sat": [{"profile_id": "night", "load_level": 2}] * 24},
    }
    assert is_intermediate_runtime(raw)
    runtime = normalize_runtime(raw)
    assert runtime.scaling_enabled is True
    baseline = runtime.baseline_profile()
    assert (baseline.min_instances, baseline.min_flavor_name, baseline.enabled) == (2, "M", True)
    assert runtime.weekly_schedule.cell("sat", 3).profile_id == "night"
    assert runtime.weekly_schedule.cell("mon", 3).load_level == 0


def test_intermediate_runtime_without_scaling_profiles():
    raw = {"id": "rt", "instance_type": "go", "base_flavor_name": "XS", "base_instances": 1, "scaling_profiles": []}
    runtime = normalize_runtime(raw)
    assert runtime.scaling_enabled is False
    assert runtime.weekly_schedule is None
    assert runtime.scaling_profiles[0].id == "baseline"


def test_current_runtime_derives_baseline_config():
    raw = {
        "id": "rt-now",
        "instance_type": "node",
        "scaling_enabled": False,
        "scaling_profiles": [
            {"id": "baseline", "min_instances": 3, "max_instances": 3, "min_flavor_name": "S", "max_flavor_name": "S"},
        ],
    }
    runtime = normalize_runtime(raw)
    assert runtime.baseline_config.instances == 3
    assert runtime.baseline_config.flavor_name == "S"


def test_current_runtime_gets_baseline_profile():
    raw = {
        "id": "rt-now",
        "instance_type": "node",
        "baseline_config": {"instances": 2, "flavor_name": "M"},
    }
    runtime = normalize_runtime(raw)
    assert [p.id for p in runtime.scaling_profiles] == ["baseline"]
    assert runtime.scaling_profiles[0].min_flavor_name == "M"


def test_invalid_document_raises():
    with pytest.raises(ValidationError):
        normalize_runtime({"id": "rt", "instance_type": "node", "scaling_enabled": True})


def test_normalize_project():
    project = normalize_project({"id": "p", "name": "Legacy", "runtimes": [_legacy()], "addons": []})
    assert project.runtimes[0].scaling_enabled is True


@pytest.mark.parametrize("cell", ["x", [1], {"extra": 1}, True, float("nan")])
def test_legacy_schedule_with_non_numeric_cell_raises(cell):
    raw = _legacy()
    raw["weekly_schedule"]["mon"][3] = cell
    with pytest.raises(ValueError):
        normalize_runtime(raw)


def test_legacy_schedule_with_non_list_day_raises():
    raw = _legacy()
    raw["weekly_schedule"]["tue"] = "busy"
    with pytest.raises(ValueError):
        normalize_runtime(raw)


def test_legacy_schedule_null_cell_is_baseline():
    raw = _legacy()
    raw["weekly_schedule"]["mon"][3] = None
    assert normalize_runtime(raw).weekly_schedule.cell("mon", 3).load_level == 0


@pytest.mark.parametrize("profiles", [["x"], [None, 3], "baseline", 5])
def test_current_runtime_with_malformed_profiles_raises(profiles):
    raw = {"id": "rt", "instance_type": "node", "scaling_profiles": profiles}
    with pytest.raises(ValueError):
        normalize_runtime(raw)


def test_intermediate_runtime_with_malformed_profiles_raises():
    raw = {"id": "rt", "instance_type": "go", "base_flavor_name": "XS", "base_instances": 1,
           "scaling_profiles": ["x"]}
    with pytest.raises(ValueError):
        normalize_runtime(raw)


def test_non_object_document_raises():
    with pytest.raises(ValueError):
        normalize_runtime(["rt"])
