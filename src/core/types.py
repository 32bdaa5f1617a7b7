"""
Type definitions for Flowline Core

This module provides:
- Type aliases for common identifiers
- TypedDicts for the workflow graph (editor wire format)
- TypedDicts for execution records and per-node results
"""
from typing import TypedDict, TypeAlias, Optional, Dict, Any, List, Literal
from typing_extensions import NotRequired


# ============================================================================
# Type Aliases
# ============================================================================

NodeID: TypeAlias = str
EdgeID: TypeAlias = str
WorkflowID: TypeAlias = str
ExecutionID: TypeAlias = str
ExecutionStatus: TypeAlias = Literal["pending", "running", "success", "failed"]
TriggerReason: TypeAlias = Literal["manual", "webhook", "schedule"]

TRIGGER_REASONS = ("manual", "webhook", "schedule")


# ============================================================================
# Workflow Graph Types
# ============================================================================

class NodeConfigData(TypedDict):
    """The `data` block of a node: label plus executor-specific config"""
    label: str
    config: Dict[str, Any]


class NodeData(TypedDict):
    """A single node in the workflow graph"""
    id: NodeID
    type: str  # Type tag selecting the executor (e.g., "condition", "http-request")
    position: NotRequired[Dict[str, float]]  # {"x": 0.0, "y": 0.0}, editor only
    data: NodeConfigData


class EdgeData(TypedDict):
    """Directed connection between two nodes"""
    id: EdgeID
    source: NodeID
    target: NodeID
    sourceHandle: NotRequired[Optional[str]]  # Branch tag; absent means unconditional
    targetHandle: NotRequired[Optional[str]]


class NodeGraph(TypedDict):
    """Complete workflow definition"""
    id: WorkflowID
    name: str
    nodes: List[NodeData]
    edges: List[EdgeData]
    description: NotRequired[str]
    metadata: NotRequired[Dict[str, Any]]


# ============================================================================
# Execution Result Types
# ============================================================================

class NodeResult(TypedDict):
    """Audit record for one node invocation"""
    node_id: NodeID
    node_name: str
    status: ExecutionStatus
    start_time: str
    end_time: NotRequired[str]
    duration: NotRequired[int]  # milliseconds
    input: NotRequired[Any]
    output: NotRequired[Any]
    error: NotRequired[str]


class ExecutionRecord(TypedDict):
    """Persisted summary of one complete run"""
    id: ExecutionID
    workflow_id: WorkflowID
    workflow_name: str
    status: ExecutionStatus
    triggered_by: TriggerReason
    start_time: str
    end_time: NotRequired[Optional[str]]
    duration: NotRequired[Optional[int]]  # milliseconds
    node_results: List[NodeResult]
    error: NotRequired[Optional[str]]


class NodeTypeDefinition(TypedDict):
    """Description of a registered node type (for editors and the API)"""
    type: str
    name: str
    is_trigger: bool
    description: NotRequired[str]
