"""
Per-node fan-out and result combinators

Stages that work on every node at once (readiness, rollout) run one worker
per node. Each worker writes exactly one slot of a list indexed by node
position; leaving the executor is the barrier. No slot has two writers, so
no lock is needed.

Two ways of combining per-node outcomes are provided and kept apart:

* aggregate: every node is attempted, failures are collected and reported
  together (FleetReport.raise_for_failures);
* rollback on failure: a sequential step that fails undoes the work done
  so far before the failure is reported (rollback_on_failure).
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Type, TypeVar

from loguru import logger

from .configs import FleetNode
from .errors import FleetError

T = TypeVar("T")


@dataclass
class NodeResult:
    """Outcome of one stage on one node"""
    node_name: str
    success: bool
    error: Optional[BaseException] = None


@dataclass
class FleetReport:
    """Per-node outcomes of a stage, in fleet order"""
    results: List[NodeResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(r.success for r in self.results)

    @property
    def failures(self) -> Dict[str, BaseException]:
        return {
            r.node_name: r.error if r.error is not None else FleetError(f"{r.node_name} failed")
            for r in self.results
            if not r.success
        }

    @property
    def succeeded(self) -> List[str]:
        return [r.node_name for r in self.results if r.success]

    def raise_for_failures(self, error_type: Type[FleetError]) -> None:
        """Aggregate combinator: raise error_type naming every failed node"""
        failures = self.failures
        if failures:
            raise error_type(failures)


def fan_out(
    nodes: Sequence[FleetNode],
    work: Callable[[FleetNode], None],
    stage: str,
) -> FleetReport:
    """
    Run work(node) for every node concurrently and wait for all of them.

    A worker succeeds when work returns and fails when it raises; the
    exception is kept in that node's slot and never reaches siblings.

    Args:
        nodes: Nodes to work on, one worker each
        work: Per-node callable; it may only touch its own node's state
        stage: Stage name used for thread names and log context

    Returns:
        FleetReport in the same order as nodes
    """
    slots: List[Optional[NodeResult]] = [None] * len(nodes)
    if not nodes:
        return FleetReport([])

    def run_slot(index: int) -> None:
        node = nodes[index]
        with logger.contextualize(node=node.name):
            try:
                work(node)
            except Exception as e:
                slots[index] = NodeResult(node_name=node.name, success=False, error=e)
            else:
                slots[index] = NodeResult(node_name=node.name, success=True)

    with ThreadPoolExecutor(max_workers=len(nodes), thread_name_prefix=stage) as pool:
        for index in range(len(nodes)):
            pool.submit(run_slot, index)

    return FleetReport([
        slot if slot is not None else NodeResult(nodes[i].name, False, FleetError(f"{stage} worker did not report"))
        for i, slot in enumerate(slots)
    ])


def rollback_on_failure(
    step: Callable[[], T],
    rollback: Callable[[], object],
    error_type: Type[FleetError],
) -> T:
    """
    Rollback combinator: run step; if it raises error_type, run rollback
    and re-raise.

    An error raised by rollback replaces the original one (which stays
    attached as __context__), since it means resources may still be live.
    """
    try:
        return step()
    except error_type as e:
        logger.error(f"{e}")
        logger.warning("trying to shut down")
        rollback()
        raise
