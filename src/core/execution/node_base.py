"""
Base node class and execution state for the execution engine
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Any, Optional, List, Set, Iterable, Iterator, NamedTuple, TYPE_CHECKING
from dataclasses import dataclass, field
import copy
from ..types import NodeID, NodeData

if TYPE_CHECKING:
    from .graph import WorkflowGraph
    from .engine import RunContext


class ConfigurationError(ValueError):
    """Raised when a node or workflow is misconfigured (always fatal to the run)"""
    pass


class MissingTriggerError(ConfigurationError):
    """Raised when a workflow has no trigger node to start from"""
    pass


class ExecutionLimitError(RuntimeError):
    """Raised when a run exceeds its node visit budget"""
    pass


class BranchResult(NamedTuple):
    """Output of a branching node: the value plus the outgoing handle to follow"""
    output: Any
    branch: str


@dataclass
class LoopFrame:
    """Marks an active loop replay; suspends the at-most-once rule for its body"""
    node_id: NodeID
    items: List[Any]
    current_index: int = 0


@dataclass
class ExecutionState:
    """
    Mutable state threaded through one workflow run

    One instance per run, owned by the engine for the run's lifetime.
    Nodes read previous_output, variables and all_outputs; executed_nodes and
    loop_frame belong to the engine and the loop primitive.
    """
    container: Any = None  # Optional ServiceContainer (storage access for store-data)
    variables: Dict[str, Any] = field(default_factory=dict)
    previous_output: Any = None
    all_outputs: Dict[NodeID, Any] = field(default_factory=dict)
    executed_nodes: Set[NodeID] = field(default_factory=set)
    loop_frame: Optional[LoopFrame] = None
    execution_id: Optional[str] = None

    @property
    def in_loop(self) -> bool:
        return self.loop_frame is not None

    def should_skip(self, node_id: NodeID) -> bool:
        """Outside a loop, each node runs at most once per run"""
        return node_id in self.executed_nodes and not self.in_loop

    def record_output(self, node_id: NodeID, output: Any) -> None:
        """Store a node's output and mark it executed (unless replaying a loop body)"""
        self.all_outputs[node_id] = output
        self.previous_output = output
        if not self.in_loop:
            self.executed_nodes.add(node_id)

    def mark_executed(self, node_ids: Iterable[NodeID]) -> None:
        self.executed_nodes.update(node_ids)

    @contextmanager
    def loop_scope(self, node_id: NodeID, items: List[Any]) -> Iterator[LoopFrame]:
        """
        Install a loop frame for the duration of a loop replay

        The enclosing frame and previous_output are restored on every exit
        path, including exceptions raised by body nodes.
        """
        saved_frame = self.loop_frame
        saved_output = self.previous_output
        frame = LoopFrame(node_id=node_id, items=items)
        self.loop_frame = frame
        try:
            yield frame
        finally:
            self.loop_frame = saved_frame
            self.previous_output = saved_output

    def snapshot(self) -> Dict[str, Any]:
        """JSON-friendly view of the state (for logs and API responses)"""
        from .serialization import make_serializable
        return {
            'variables': make_serializable(self.variables),
            'outputs': make_serializable(self.all_outputs),
            'executed_nodes': sorted(self.executed_nodes),
        }


class BaseNode(ABC):
    """
    Base class for all execution nodes

    Each node:
    - Has a unique ID and a type tag
    - Carries an executor-specific config (copied from node.data.config)
    - Validates its config before any side effect
    - Produces an output, or a BranchResult for branching types
    """

    # Trigger types are valid entry points for a run
    is_trigger: bool = False
    # When False the engine does not follow outgoing edges (loop replays its own body)
    traverses_outgoing: bool = True
    # Short description exposed through the node type listing
    description: str = ""

    def __init__(self, node_id: NodeID, node_data: NodeData):
        """
        Initialize node

        Args:
            node_id: Unique node identifier
            node_data: Node definition from workflow JSON
        """
        self.node_id = node_id
        self.node_data = node_data
        self.node_type = node_data.get('type', '')
        data = node_data.get('data') or {}
        self.label = data.get('label') or node_id
        # Deep copy config to prevent mutations from affecting original workflow
        self.config: Dict[str, Any] = copy.deepcopy(data.get('config') or {})

    def validate(self) -> None:
        """
        Check required config fields

        Raises:
            ConfigurationError: if the config is unusable
        """
        pass

    @abstractmethod
    def execute(self, state: ExecutionState) -> Any:
        """
        Execute the node

        May be a coroutine function; the engine awaits the result either way.

        Args:
            state: Execution state for the current run

        Returns:
            The node output, or a BranchResult for branching nodes
        """
        pass

    def initialize(self, graph: 'WorkflowGraph', all_nodes: Dict[NodeID, 'BaseNode']) -> None:
        """
        Initialize node after all nodes are built
        Called by engine to allow nodes to set up relationships if needed.

        Args:
            graph: Indexed workflow graph
            all_nodes: Dictionary of all node instances (node_id -> node)
        """
        pass

    def _setup(self, run: 'RunContext') -> None:
        """
        Setup node against the run it belongs to
        Called by engine once all nodes are built; delegates to initialize().

        Args:
            run: Run context holding the graph, the nodes and the state
        """
        self.initialize(run.graph, run.nodes)

    def is_ready(self, state: ExecutionState) -> bool:
        """
        Whether the node can run now

        Returning False makes the engine leave the node pending (no result,
        not marked executed) so a later path can reach it again.
        """
        return True

    def require(self, key: str, message: Optional[str] = None) -> Any:
        """Return a required config value or raise ConfigurationError"""
        value = self.config.get(key)
        if value is None or (isinstance(value, (str, list, dict)) and len(value) == 0):
            raise ConfigurationError(message or f"{self.label} requires '{key}'")
        return value

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.node_id} ({self.node_type})>"


class PassthroughNode(BaseNode):
    """Fallback for unknown node types: forwards the previous output unchanged"""

    def execute(self, state: ExecutionState) -> Any:
        return state.previous_output
