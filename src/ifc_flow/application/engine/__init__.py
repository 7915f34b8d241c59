"""Workflow graph execution engine.

Validation, scheduling, dispatch and the write-once result store, driven by
``WorkflowExecutor``.
"""
from __future__ import annotations

from ifc_flow.application.engine.executor import (
    ExecutionReport,
    WorkflowExecutor,
    parse_graph,
    run_sync,
)
from ifc_flow.application.engine.result_store import ResultStore
from ifc_flow.application.engine.scheduler import ExecutionPlan
from ifc_flow.application.engine.validator import ValidatedGraph, find_cycle, validate_graph

__all__ = [
    "WorkflowExecutor",
    "ExecutionReport",
    "ExecutionPlan",
    "ResultStore",
    "ValidatedGraph",
    "find_cycle",
    "parse_graph",
    "run_sync",
    "validate_graph",
]
