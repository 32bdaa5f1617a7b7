"""
Node registry for execution engine
Maps node type strings to node classes
"""
import inspect
from typing import Any, Callable, Dict, List, Optional, Type

from .node_base import BaseNode, BranchResult, ExecutionState
from ..types import NodeData, NodeID, NodeTypeDefinition

# Registry mapping node type -> node class
NODE_REGISTRY: Dict[str, Type[BaseNode]] = {}


def register_node(node_type: str, node_class: Type[BaseNode]):
    """
    Register a node type

    Args:
        node_type: String identifier for the node type (e.g., "condition")
        node_class: Node class that extends BaseNode
    """
    NODE_REGISTRY[node_type] = node_class


def register_executor(
    node_type: str,
    executor: Callable[[Dict[str, Any], ExecutionState], Any],
    *,
    branching: bool = False,
    is_trigger: bool = False,
    description: str = "",
) -> Type[BaseNode]:
    """
    Register a plain function as a node executor

    The function receives (config, state) and may be sync or async. Branching
    executors return {"output": ..., "branch": ...} (or a BranchResult).

    Returns:
        The generated node class
    """
    def execute(self, state: ExecutionState) -> Any:
        result = executor(self.config, state)
        if not branching:
            return result
        if inspect.isawaitable(result):
            return _unpack_branch_async(result)
        return _unpack_branch(result)

    class_name = ''.join(part.capitalize() for part in node_type.replace('_', '-').split('-')) + 'Node'
    node_class = type(class_name, (BaseNode,), {
        'execute': execute,
        'is_trigger': is_trigger,
        'description': description or (executor.__doc__ or '').strip().split('\n')[0],
    })
    register_node(node_type, node_class)
    return node_class


def _unpack_branch(result: Any) -> BranchResult:
    if isinstance(result, BranchResult):
        return result
    if isinstance(result, dict) and 'branch' in result:
        return BranchResult(result.get('output'), str(result['branch']))
    raise TypeError("Branching executor must return {'output': ..., 'branch': ...}")


async def _unpack_branch_async(awaitable) -> BranchResult:
    return _unpack_branch(await awaitable)


def get_node_class(node_type: str) -> Optional[Type[BaseNode]]:
    """
    Get node class for a given type

    Args:
        node_type: String identifier for the node type

    Returns:
        Node class or None if not found
    """
    return NODE_REGISTRY.get(node_type)


def create_node(node_data: NodeData) -> BaseNode:
    """
    Instantiate the node for a definition, falling back to passthrough

    Unknown types are tolerated so editor-only or newer node types do not
    break older engines.
    """
    from .node_base import PassthroughNode

    node_id: NodeID = node_data['id']
    node_class = get_node_class(node_data.get('type', ''))
    if node_class is None:
        return PassthroughNode(node_id, node_data)
    return node_class(node_id, node_data)


def trigger_types() -> List[str]:
    """Node types that can start a run"""
    return [node_type for node_type, cls in NODE_REGISTRY.items() if cls.is_trigger]


def list_node_types() -> List[NodeTypeDefinition]:
    """Describe every registered node type"""
    return [
        NodeTypeDefinition(
            type=node_type,
            name=cls.__name__,
            is_trigger=cls.is_trigger,
            description=cls.description,
        )
        for node_type, cls in sorted(NODE_REGISTRY.items())
    ]


# Import and register all node types
# This ensures nodes are registered when the module is imported
def _register_all_nodes():
    """Register all node types"""
    from .nodes.triggers import TRIGGER_NODE_CLASSES
    from .nodes.condition import ConditionNode
    from .nodes.switch import SwitchNode
    from .nodes.loop import LoopNode
    from .nodes.merge import MergeNode
    from .nodes.set_variable import SetVariableNode
    from .nodes.wait import WaitNode
    from .nodes.filter import FilterNode
    from .nodes.sort import SortNode
    from .nodes.http_request import HttpRequestNode
    from .nodes.store_data import StoreDataNode
    from .nodes.webhook_response import WebhookResponseNode

    for node_type, node_class in TRIGGER_NODE_CLASSES.items():
        register_node(node_type, node_class)

    register_node("condition", ConditionNode)
    register_node("switch", SwitchNode)
    register_node("loop", LoopNode)
    register_node("merge", MergeNode)
    register_node("set-variable", SetVariableNode)
    register_node("wait", WaitNode)
    register_node("filter", FilterNode)
    register_node("sort", SortNode)
    register_node("http-request", HttpRequestNode)
    register_node("store-data", StoreDataNode)
    register_node("webhook-response", WebhookResponseNode)


# Auto-register on import
_register_all_nodes()
