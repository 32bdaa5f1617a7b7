"""
Execution Engine for Flowline Core
Provides graph-walking workflow execution with branching, loops and merges
"""
from .engine import ExecutionEngine, RunContext
from .graph import WorkflowGraph
from .node_base import (
    BaseNode,
    BranchResult,
    ConfigurationError,
    ExecutionLimitError,
    ExecutionState,
    LoopFrame,
    MissingTriggerError,
    PassthroughNode,
)
from .node_registry import (
    NODE_REGISTRY,
    register_node,
    register_executor,
    get_node_class,
    list_node_types,
    trigger_types,
)
from .runner import WorkflowRunner
from .serialization import make_serializable

__all__ = [
    'ExecutionEngine',
    'RunContext',
    'WorkflowGraph',
    'BaseNode',
    'BranchResult',
    'ConfigurationError',
    'ExecutionLimitError',
    'ExecutionState',
    'LoopFrame',
    'MissingTriggerError',
    'PassthroughNode',
    'NODE_REGISTRY',
    'register_node',
    'register_executor',
    'get_node_class',
    'list_node_types',
    'trigger_types',
    'WorkflowRunner',
    'make_serializable',
]
