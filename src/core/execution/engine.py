"""
Execution Engine for Flowline Core
Walks a workflow graph from its trigger node, threading one ExecutionState
through every node
"""
import inspect
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional, Tuple

from ..types import NodeGraph, NodeID, NodeResult
from .graph import WorkflowGraph
from .node_base import (
    BaseNode,
    BranchResult,
    ExecutionState,
    ExecutionLimitError,
    MissingTriggerError,
    PassthroughNode,
)
from .node_registry import create_node, trigger_types
from ...utils.logger import get_logger, log_context

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def elapsed_ms(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() * 1000)


@dataclass
class RunContext:
    """
    Everything one walk needs: the indexed graph, the built nodes, the state
    and the result list. Control-flow nodes use it to re-enter the walker.
    """
    engine: 'ExecutionEngine'
    graph: WorkflowGraph
    nodes: Dict[NodeID, BaseNode]
    state: ExecutionState
    results: List[NodeResult] = field(default_factory=list)
    visits: int = 0

    async def walk(self, node_id: NodeID) -> None:
        """Walk the graph starting at node_id (used by loop replays)"""
        await self.engine.walk(node_id, self)


class ExecutionEngine:
    """
    Executes JSON workflow graphs

    Features:
    - Depth-first traversal from the trigger node, in edge-list order
    - At-most-once execution per node outside loop replays
    - Branch routing through edge source handles
    - One NodeResult per node invocation, failures abort the run
    """

    def __init__(self, container: Any = None, max_node_visits: Optional[int] = None):
        """
        Initialize execution engine

        Args:
            container: Optional ServiceContainer exposed to nodes through the state
            max_node_visits: Optional cap on node visits per run (defaults to
                Config.MAX_NODE_VISITS; None means unlimited)
        """
        self.container = container
        if max_node_visits is None:
            from config import Config
            max_node_visits = Config.MAX_NODE_VISITS
        self.max_node_visits = max_node_visits

    def create_state(self, trigger_data: Any = None, **kwargs) -> ExecutionState:
        """Fresh state for a new run"""
        return ExecutionState(container=self.container, previous_output=trigger_data, **kwargs)

    async def run(
        self,
        workflow: NodeGraph,
        state: Optional[ExecutionState] = None,
        results: Optional[List[NodeResult]] = None,
    ) -> List[NodeResult]:
        """
        Execute a workflow from its trigger node

        Args:
            workflow: NodeGraph definition (from JSON)
            state: Execution state (a fresh one is created if omitted)
            results: List that receives NodeResults; pass one in to keep
                the partial results when the run fails

        Returns:
            The list of NodeResults, in execution order

        Raises:
            MissingTriggerError: if the workflow has no trigger node
            Exception: the first node failure, re-raised unchanged
        """
        state = state if state is not None else self.create_state()
        results = results if results is not None else []
        start_time = time.time()

        graph = WorkflowGraph(workflow)
        logger.info(f"Executing workflow: {graph.name}")

        trigger = graph.find_trigger(trigger_types())
        if trigger is None:
            raise MissingTriggerError("No trigger node found in workflow")

        run = RunContext(
            engine=self,
            graph=graph,
            nodes=self.build_nodes(graph),
            state=state,
            results=results,
        )

        # Setup all nodes now that every node exists
        for node in run.nodes.values():
            node._setup(run)

        try:
            await self.walk(trigger['id'], run)
        finally:
            logger.info(
                f"Workflow {graph.name} walked {len(results)} node invocation(s) "
                f"in {time.time() - start_time:.3f}s"
            )

        return results

    def build_nodes(self, graph: WorkflowGraph) -> Dict[NodeID, BaseNode]:
        """
        Build node instances from workflow

        Args:
            graph: Indexed workflow graph

        Returns:
            Dictionary of node_id -> node instance
        """
        nodes: Dict[NodeID, BaseNode] = {}

        for node_data in graph.nodes:
            if node_data['id'] in nodes:
                continue
            node = create_node(node_data)
            if isinstance(node, PassthroughNode):
                logger.warning(
                    f"Unknown node type '{node_data.get('type')}' for node {node_data['id']}, "
                    f"passing input through"
                )
            nodes[node_data['id']] = node

        return nodes

    async def walk(self, start_id: NodeID, run: RunContext) -> None:
        """
        Depth-first walk from start_id

        Uses an explicit stack instead of recursion; children are pushed in
        reverse edge order so they are visited in edge order, each subtree
        finishing before the next sibling starts.
        """
        stack: List[NodeID] = [start_id]
        state = run.state

        while stack:
            node_id = stack.pop()
            node = run.nodes.get(node_id)
            if node is None:
                continue

            if state.should_skip(node_id):
                logger.debug(f"Skipping node {node_id}: already executed")
                continue

            if not node.is_ready(state):
                logger.debug(f"Node {node_id} ({node.node_type}) not ready, leaving pending")
                continue

            run.visits += 1
            if self.max_node_visits is not None and run.visits > self.max_node_visits:
                raise ExecutionLimitError(
                    f"Run exceeded {self.max_node_visits} node visits (possible cycle in a loop body)"
                )

            branch = await self.execute_node(node, run)

            if not node.traverses_outgoing:
                continue

            targets = run.graph.outgoing_targets(node_id, branch)
            stack.extend(reversed(targets))

    async def execute_node(self, node: BaseNode, run: RunContext) -> Optional[str]:
        """
        Invoke a single node and record its result

        Returns:
            The branch tag chosen by the node, or None

        Raises:
            Exception: any node failure, after a failed NodeResult is recorded
        """
        state = run.state
        start = utc_now()
        result: NodeResult = {
            'node_id': node.node_id,
            'node_name': node.label,
            'status': 'running',
            'start_time': start.isoformat(),
            'input': state.previous_output,
        }

        with log_context(node_id=node.node_id):
            logger.info(f"Executing node: {node.label} ({node.node_type})")

            try:
                node.validate()
                output, branch = await self._invoke(node, state)
            except Exception as e:
                end = utc_now()
                error_msg = str(e) or type(e).__name__
                result.update({
                    'status': 'failed',
                    'end_time': end.isoformat(),
                    'duration': elapsed_ms(start, end),
                    'error': error_msg,
                })
                run.results.append(result)
                logger.error(f"Node {node.node_type} failed: {error_msg}", exc_info=True)
                raise

            end = utc_now()
            result.update({
                'status': 'success',
                'end_time': end.isoformat(),
                'duration': elapsed_ms(start, end),
                'output': output,
            })
            run.results.append(result)

            state.record_output(node.node_id, output)

            logger.debug(
                f"Node {node.node_type} executed successfully in {result['duration']}ms"
                + (f", branch={branch}" if branch else "")
            )
        return branch

    async def _invoke(self, node: BaseNode, state: ExecutionState) -> Tuple[Any, Optional[str]]:
        """Call the node, awaiting coroutine results, and split out any branch"""
        value = node.execute(state)
        if inspect.isawaitable(value):
            value = await value
        if isinstance(value, BranchResult):
            return value.output, value.branch
        return value, None
