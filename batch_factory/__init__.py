"""Public API for the batch_factory package.

Only symbols imported here are considered part of the stable,
supported external interface.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ----------------------------------------------------------------------
# Config API
# ----------------------------------------------------------------------
from batch_factory.core.config.controller_config import ControllerConfig
from batch_factory.core.config.factory_config import FactoryConfig
from batch_factory.core.config.planner_config import PlannerConfig, StageOffsets
from batch_factory.core.config.scripts_config import ScriptsConfig

# ----------------------------------------------------------------------
# Engine API
# ----------------------------------------------------------------------
from batch_factory.core.control.mode_controller import (
    CycleReport,
    EngagementOutcome,
    ModeController,
)

# ----------------------------------------------------------------------
# Domain Types
# ----------------------------------------------------------------------
from batch_factory.core.domain.failure_reasons import FailureReason
from batch_factory.core.domain.operations import OperationCatalog, OperationSpec
from batch_factory.core.domain.plan import Plan
from batch_factory.core.domain.types import (
    CycleMode,
    HostBudget,
    OperationKind,
    PlanStep,
    TargetSnapshot,
)
from batch_factory.core.execution.completion_monitor import CompletionMonitor
from batch_factory.core.execution.dispatcher import DispatchResult, Dispatcher
from batch_factory.core.execution.results_channel import InMemoryResultsChannel

# ----------------------------------------------------------------------
# Planning API
# ----------------------------------------------------------------------
from batch_factory.core.planning.hack_plan import build_hack_plan
from batch_factory.core.planning.packing import PlanningOutcome
from batch_factory.core.planning.prep_plan import build_prep_plan
from batch_factory.core.planning.summary import describe_plan, format_duration

# ----------------------------------------------------------------------
# Ports
# ----------------------------------------------------------------------
from batch_factory.core.ports.host_backend import (
    CompletionBackend,
    HostInspector,
    LaunchBackend,
)
from batch_factory.core.ports.model_provider import AnalyticModelProvider
from batch_factory.core.ports.resource_estimator import ResourceEstimator
from batch_factory.core.ports.results_channel import ResultsChannel
from batch_factory.core.ports.snapshot_reader import SnapshotReader
from batch_factory.core.resources.host_resource_estimator import HostResourceEstimator

# ----------------------------------------------------------------------
# Public API definition
# ----------------------------------------------------------------------

__all__ = [
    # Engine
    "ModeController",
    "EngagementOutcome",
    "CycleReport",
    "Dispatcher",
    "DispatchResult",
    "CompletionMonitor",
    "InMemoryResultsChannel",
    "HostResourceEstimator",

    # Config
    "FactoryConfig",
    "ScriptsConfig",
    "PlannerConfig",
    "StageOffsets",
    "ControllerConfig",

    # Planning
    "build_prep_plan",
    "build_hack_plan",
    "PlanningOutcome",
    "describe_plan",
    "format_duration",

    # Domain
    "OperationKind",
    "CycleMode",
    "TargetSnapshot",
    "HostBudget",
    "PlanStep",
    "Plan",
    "OperationCatalog",
    "OperationSpec",
    "FailureReason",

    # Ports
    "AnalyticModelProvider",
    "SnapshotReader",
    "ResourceEstimator",
    "HostInspector",
    "LaunchBackend",
    "CompletionBackend",
    "ResultsChannel",

    # Version
    "__version__",
]

# ----------------------------------------------------------------------
# Package version
# ----------------------------------------------------------------------

try:
    __version__ = version("batch-factory")
except PackageNotFoundError:
    __version__ = "0.0.0"
