"""Schema conformance tests for core Pydantic models.

This test suite validates that core Pydantic models both accept valid inputs
and reject invalid ones in strict alignment with their corresponding JSON
Schemas. Cross-field rules that JSON Schema cannot express are checked on
the Pydantic side only.
"""

# pylint: disable=line-too-long,missing-function-docstring
# pylint: disable=redefined-outer-name,global-statement
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from jsonschema import ValidationError as JsonSchemaValidationError
from jsonschema import validate as jsonschema_validate
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

from batch_factory.core.config.controller_config import ControllerConfig
from batch_factory.core.config.planner_config import PlannerConfig
from batch_factory.core.config.scripts_config import ScriptsConfig
from batch_factory.core.domain.types import HostBudget, PlanStep, TargetSnapshot

SCHEMA_REGISTRY = Registry()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def load_schema(name: str) -> dict:
    """
    Load JSON schema from the package schema directory.
    """
    global SCHEMA_REGISTRY

    root = Path(__file__).parent.parent.parent.parent
    schema_path = root / "batch_factory" / "core" / "schemas" / name

    with schema_path.open("r", encoding="utf-8") as f:
        schema = json.load(f)

    schema_id = schema.get("$id")
    if isinstance(schema_id, str) and schema_id:
        resource = Resource.from_contents(schema, default_specification=DRAFT202012)
        SCHEMA_REGISTRY = SCHEMA_REGISTRY.with_resource(schema_id, resource)

    return schema


def dump_for_jsonschema(model: Any) -> dict:
    """
    Dump a Pydantic model to a JSON-compatible dict for schema validation.
    Excludes None values so optional fields are omitted instead of null.
    """
    return model.model_dump(mode="json", exclude_none=True)


def pydantic_validate(model_type: Any, data: dict[str, Any]) -> Any:
    adapter = TypeAdapter(model_type)
    return adapter.validate_python(data)


def assert_pydantic_then_schema_ok(model_type: Any, data: dict[str, Any], schema: dict[str, Any]) -> dict:
    """
    Validate with Pydantic first, then validate the dumped instance with JSON Schema.
    Returns the dumped instance.
    """
    obj = pydantic_validate(model_type, data)
    instance = dump_for_jsonschema(obj)
    jsonschema_validate(instance=instance, schema=schema, registry=SCHEMA_REGISTRY)
    return instance


def assert_schema_invalid_but_pydantic_rejects(model_type: Any, data: dict[str, Any], schema: dict[str, Any]):
    """
    Ensures Pydantic is at least as strict as the JSON Schema for the given input.
    If schema rejects, Pydantic must reject too (otherwise model is too lax).
    """
    with pytest.raises(JsonSchemaValidationError):
        jsonschema_validate(instance=data, schema=schema, registry=SCHEMA_REGISTRY)

    with pytest.raises(PydanticValidationError):
        pydantic_validate(model_type, data)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module", autouse=True)
def _load_common_schema() -> None:
    load_schema("common.schema.json")


@pytest.fixture(scope="module")
def target_snapshot_schema() -> dict:
    return load_schema("target_snapshot.schema.json")


@pytest.fixture(scope="module")
def host_budget_schema() -> dict:
    return load_schema("host_budget.schema.json")


@pytest.fixture(scope="module")
def plan_step_schema() -> dict:
    return load_schema("plan_step.schema.json")


@pytest.fixture(scope="module")
def scripts_config_schema() -> dict:
    return load_schema("scripts_config.schema.json")


@pytest.fixture(scope="module")
def planner_config_schema() -> dict:
    return load_schema("planner_config.schema.json")


@pytest.fixture(scope="module")
def controller_config_schema() -> dict:
    return load_schema("controller_config.schema.json")


# ---------------------------------------------------------------------------
# TargetSnapshot
# ---------------------------------------------------------------------------

def make_snapshot(**overrides) -> dict[str, Any]:
    data = {
        "hostname": "n00dles",
        "max_money": 1_000_000.0,
        "money_available": 700_000.0,
        "min_security": 10.0,
        "security_level": 12.0,
    }
    data.update(overrides)
    return data


def test_target_snapshot_valid(target_snapshot_schema):
    assert_pydantic_then_schema_ok(TargetSnapshot, make_snapshot(), target_snapshot_schema)


def test_target_snapshot_required_fields(target_snapshot_schema):
    bad = make_snapshot()
    bad.pop("security_level")
    assert_schema_invalid_but_pydantic_rejects(TargetSnapshot, bad, target_snapshot_schema)


def test_target_snapshot_minimum_constraints(target_snapshot_schema):
    bad = make_snapshot(max_money=-1.0, money_available=0.0)
    assert_schema_invalid_but_pydantic_rejects(TargetSnapshot, bad, target_snapshot_schema)

    bad = make_snapshot(hostname="")
    assert_schema_invalid_but_pydantic_rejects(TargetSnapshot, bad, target_snapshot_schema)


def test_target_snapshot_rejects_additional_properties(target_snapshot_schema):
    data = make_snapshot()
    data["server_growth"] = 25

    with pytest.raises(PydanticValidationError):
        pydantic_validate(TargetSnapshot, data)

    with pytest.raises(JsonSchemaValidationError):
        jsonschema_validate(instance=data, schema=target_snapshot_schema, registry=SCHEMA_REGISTRY)


def test_target_snapshot_cross_field_rules_are_model_only(target_snapshot_schema):
    too_rich = make_snapshot(money_available=2_000_000.0)
    jsonschema_validate(instance=too_rich, schema=target_snapshot_schema, registry=SCHEMA_REGISTRY)
    with pytest.raises(PydanticValidationError):
        pydantic_validate(TargetSnapshot, too_rich)

    too_secure = make_snapshot(security_level=5.0)
    jsonschema_validate(instance=too_secure, schema=target_snapshot_schema, registry=SCHEMA_REGISTRY)
    with pytest.raises(PydanticValidationError):
        pydantic_validate(TargetSnapshot, too_secure)


# ---------------------------------------------------------------------------
# HostBudget
# ---------------------------------------------------------------------------

def test_host_budget_valid(host_budget_schema):
    assert_pydantic_then_schema_ok(HostBudget, {"hostname": "home", "available_ram": 0.0}, host_budget_schema)


def test_host_budget_negative_ram_rejected(host_budget_schema):
    bad = {"hostname": "home", "available_ram": -0.5}
    assert_schema_invalid_but_pydantic_rejects(HostBudget, bad, host_budget_schema)


# ---------------------------------------------------------------------------
# PlanStep
# ---------------------------------------------------------------------------

def make_step(**overrides) -> dict[str, Any]:
    data = {
        "kind": "grow",
        "script_threads": 12,
        "start_delay_ms": 800,
        "expected_run_time_ms": 3200,
    }
    data.update(overrides)
    return data


def test_plan_step_valid_minimal(plan_step_schema):
    instance = assert_pydantic_then_schema_ok(PlanStep, make_step(), plan_step_schema)
    assert instance["batch_index"] == 0


def test_plan_step_zero_threads_allowed(plan_step_schema):
    assert_pydantic_then_schema_ok(PlanStep, make_step(script_threads=0), plan_step_schema)


def test_plan_step_unknown_kind_rejected(plan_step_schema):
    bad = make_step(kind="share")
    assert_schema_invalid_but_pydantic_rejects(PlanStep, bad, plan_step_schema)


def test_plan_step_minimum_constraints(plan_step_schema):
    assert_schema_invalid_but_pydantic_rejects(PlanStep, make_step(script_threads=-1), plan_step_schema)
    assert_schema_invalid_but_pydantic_rejects(PlanStep, make_step(start_delay_ms=-20), plan_step_schema)
    assert_schema_invalid_but_pydantic_rejects(PlanStep, make_step(batch_index=-1), plan_step_schema)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def test_scripts_config_defaults(scripts_config_schema):
    instance = assert_pydantic_then_schema_ok(ScriptsConfig, {}, scripts_config_schema)
    assert instance["hack_script"] == "hack.js"


def test_scripts_config_empty_name_rejected(scripts_config_schema):
    assert_schema_invalid_but_pydantic_rejects(ScriptsConfig, {"grow_script": ""}, scripts_config_schema)


def test_planner_config_defaults(planner_config_schema):
    instance = assert_pydantic_then_schema_ok(PlannerConfig, {}, planner_config_schema)
    assert instance["stage_offsets_ms"] == {"hack": 0, "weaken_hack": 20, "grow": 40, "weaken_grow": 60}


def test_planner_config_constraints(planner_config_schema):
    assert_schema_invalid_but_pydantic_rejects(PlannerConfig, {"decay_step": 0}, planner_config_schema)
    assert_schema_invalid_but_pydantic_rejects(PlannerConfig, {"trailing_batch": "always"}, planner_config_schema)
    assert_schema_invalid_but_pydantic_rejects(PlannerConfig, {"min_hack_percent": 1.0}, planner_config_schema)


def test_controller_config_defaults(controller_config_schema):
    instance = assert_pydantic_then_schema_ok(ControllerConfig, {}, controller_config_schema)
    assert instance["money_threshold"] == 0.8
    assert instance["security_threshold"] == 1.15
    assert "max_cycles" not in instance


def test_controller_config_constraints(controller_config_schema):
    assert_schema_invalid_but_pydantic_rejects(ControllerConfig, {"money_threshold": 0}, controller_config_schema)
    assert_schema_invalid_but_pydantic_rejects(ControllerConfig, {"security_threshold": 0.9}, controller_config_schema)
    assert_schema_invalid_but_pydantic_rejects(ControllerConfig, {"poll_interval_ms": 0}, controller_config_schema)
    assert_schema_invalid_but_pydantic_rejects(ControllerConfig, {"max_cycles": 0}, controller_config_schema)
