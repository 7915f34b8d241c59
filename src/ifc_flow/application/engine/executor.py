"""Execution Façade.

Runs a workflow graph: validate, plan, evaluate every node once, and hand back
either the completed result store or a structured failure.
"""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from ifc_flow.application.engine.dispatch import DispatchContext, dispatch
from ifc_flow.application.engine.result_store import ResultStore
from ifc_flow.application.engine.scheduler import ExecutionPlan
from ifc_flow.application.engine.validator import validate_graph
from ifc_flow.application.nodes.base import NodeInputs
from ifc_flow.domain.exceptions import (
    DomainError,
    ExecutionError,
    GraphValidationError,
    NodeExecutionError,
    NodeTimeoutError,
    ValidationIssue,
)
from ifc_flow.domain.interfaces import IModelProvider, IModelWriter
from ifc_flow.domain.models.graph import WorkflowGraph
from ifc_flow.domain.models.result import (
    Cancelled,
    DependencyFailure,
    NodeFailure,
    NodeResult,
    is_error,
)
from ifc_flow.shared.config import Settings, get_settings
from ifc_flow.shared.logging import get_logger
from ifc_flow.shared.result import Failure, Result, Success

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExecutionReport:
    """Outcome of one run.

    Attributes:
        results: Result store with exactly one entry per node
        order: Topological order the nodes were scheduled in
        cancelled: Whether the run was cancelled before finishing
        duration_ms: Wall-clock duration of the run
    """

    results: ResultStore
    order: tuple[str, ...]
    cancelled: bool = False
    duration_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return not self.cancelled and not self.results.failures()

    def to_dict(self) -> dict[str, Any]:
        return {
            "order": list(self.order),
            "cancelled": self.cancelled,
            "duration_ms": round(self.duration_ms, 3),
            "failures": sorted(self.results.failures()),
            "results": self.results.to_dict(),
        }


def parse_graph(document: WorkflowGraph | dict[str, Any]) -> WorkflowGraph:
    """Turn a raw graph document into a ``WorkflowGraph``.

    Raises:
        GraphValidationError: If the document does not have the graph shape
    """
    if isinstance(document, WorkflowGraph):
        return document
    try:
        return WorkflowGraph.model_validate(document)
    except ValidationError as e:
        issues = [
            ValidationIssue(
                code="invalid_document",
                message=f"{'.'.join(str(p) for p in detail['loc']) or 'graph'}: {detail['msg']}",
            )
            for detail in e.errors()
        ]
        raise GraphValidationError(issues) from e


class WorkflowExecutor:
    """Executes workflow graphs against a model provider.

    Each node runs as its own task, created in topological order and awaiting
    the tasks of its predecessors, so independent branches overlap while a
    semaphore caps how many nodes evaluate at once.
    """

    def __init__(
        self,
        provider: IModelProvider,
        writer: IModelWriter | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            provider: Source of parsed models for source nodes
            writer: Native writer for excel/glb/ifc export nodes
            settings: Execution limits; defaults to the application settings
        """
        self._context = DispatchContext(provider=provider, writer=writer)
        self._settings = settings or get_settings()

    # =========================================================================
    # Public API
    # =========================================================================

    async def run(
        self,
        graph: WorkflowGraph | dict[str, Any],
        cancel_event: asyncio.Event | None = None,
    ) -> Result[ExecutionReport, DomainError]:
        """Run a workflow graph once.

        Args:
            graph: Graph document or parsed graph
            cancel_event: Setting this event cancels the run; nodes without a
                result are then recorded as cancelled

        Returns:
            Success with the execution report, or Failure with a
            GraphValidationError (nothing ran) or ExecutionError
        """
        started = time.perf_counter()
        try:
            validated = validate_graph(parse_graph(graph))
        except GraphValidationError as e:
            logger.warning("Workflow rejected", issues=[issue.code for issue in e.issues])
            return Failure(e)

        plan = ExecutionPlan(validated)
        store = ResultStore()
        logger.info("Workflow started", nodes=len(plan.order))

        try:
            cancelled = await self._execute(plan, store, cancel_event)
        except Exception as e:
            logger.exception("Workflow execution failed")
            return Failure(ExecutionError("Workflow execution failed", {"reason": str(e)}))

        report = ExecutionReport(
            results=store,
            order=tuple(plan.order),
            cancelled=cancelled,
            duration_ms=(time.perf_counter() - started) * 1000,
        )
        logger.info(
            "Workflow finished",
            nodes=len(store),
            failures=len(store.failures()),
            cancelled=cancelled,
            duration_ms=round(report.duration_ms, 1),
        )
        return Success(report)

    # =========================================================================
    # Scheduling
    # =========================================================================

    async def _execute(
        self,
        plan: ExecutionPlan,
        store: ResultStore,
        cancel_event: asyncio.Event | None,
    ) -> bool:
        """Evaluate every node; return whether the run was cancelled."""
        if cancel_event is not None and cancel_event.is_set():
            self._mark_cancelled(plan, store)
            return True

        semaphore = asyncio.Semaphore(self._settings.max_concurrency)
        tasks: dict[str, asyncio.Task[None]] = {}
        for node_id in plan.order:
            tasks[node_id] = asyncio.create_task(
                self._run_node(node_id, plan, store, tasks, semaphore),
                name=f"node:{node_id}",
            )

        everything = asyncio.gather(*tasks.values(), return_exceptions=True)
        cancelled = False
        if cancel_event is None:
            outcomes = await everything
        else:
            watcher = asyncio.create_task(cancel_event.wait())
            done, _pending = await asyncio.wait(
                {everything, watcher},
                return_when=asyncio.FIRST_COMPLETED,
            )
            if everything not in done:
                cancelled = True
                logger.info("Workflow cancellation requested")
                for task in tasks.values():
                    task.cancel()
            watcher.cancel()
            outcomes = await everything

        for outcome in outcomes:
            if isinstance(outcome, Exception):
                raise outcome

        if cancelled:
            self._mark_cancelled(plan, store)
        return cancelled

    @staticmethod
    def _mark_cancelled(plan: ExecutionPlan, store: ResultStore) -> None:
        for node_id in plan.order:
            if node_id not in store:
                store.record(node_id, Cancelled())

    async def _run_node(
        self,
        node_id: str,
        plan: ExecutionPlan,
        store: ResultStore,
        tasks: dict[str, asyncio.Task[None]],
        semaphore: asyncio.Semaphore,
    ) -> None:
        predecessors = plan.predecessors(node_id)
        for upstream in predecessors:
            await tasks[upstream]

        node = plan.node(node_id)
        failed = next((up for up in predecessors if not store.ok(up)), None)
        if failed is not None:
            store.record(node_id, DependencyFailure(upstream=failed))
            logger.info("Node skipped", node_id=node_id, kind=node.kind.value, upstream=failed)
            return

        inputs = plan.inputs_for(node_id, store)
        async with semaphore:
            result = await self._evaluate(node_id, plan, inputs)
        store.record(node_id, result)

        if is_error(result):
            logger.warning(
                "Node failed",
                node_id=node_id,
                kind=node.kind.value,
                error=result.error,
                dependents=len(plan.downstream_of(node_id)),
            )
        else:
            logger.info("Node completed", node_id=node_id, kind=node.kind.value, result=result.kind)

    async def _evaluate(self, node_id: str, plan: ExecutionPlan, inputs: NodeInputs) -> NodeResult:
        """Invoke one node, converting every failure into a NodeFailure."""
        node = plan.node(node_id)
        timeout = self._settings.node_timeout_seconds
        try:
            if timeout is None:
                return await dispatch(node, inputs, self._context)
            return await asyncio.wait_for(dispatch(node, inputs, self._context), timeout)
        except NodeExecutionError as e:
            return NodeFailure(error=str(e), error_type=type(e).__name__)
        except asyncio.TimeoutError:
            timed_out = NodeTimeoutError(node_id, timeout)
            return NodeFailure(error=timed_out.message, error_type=type(timed_out).__name__)
        except Exception as e:
            logger.exception("Unexpected node error", node_id=node_id, kind=node.kind.value)
            return NodeFailure(error=str(e) or type(e).__name__, error_type=type(e).__name__)


def run_sync(
    graph: WorkflowGraph | dict[str, Any],
    provider: IModelProvider,
    writer: IModelWriter | None = None,
    settings: Settings | None = None,
) -> Result[ExecutionReport, DomainError]:
    """Run a workflow from synchronous code."""
    executor = WorkflowExecutor(provider, writer, settings)
    return asyncio.run(executor.run(graph))
