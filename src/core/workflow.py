"""
Workflow definition codec
Parses, validates and writes the editor's workflow JSON
"""
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .types import NodeGraph, NodeData, EdgeData
from ..utils.logger import get_logger

logger = get_logger(__name__)


class WorkflowFormatError(ValueError):
    """Raised when a workflow definition is structurally invalid"""
    pass


def is_safe_id(value: str) -> bool:
    """Whether an id can double as a file name (no path separators, no '..')"""
    return bool(value) and not any(part in value for part in ('/', '\\', '..', '\x00'))


def _parse_node(raw: Any, index: int) -> NodeData:
    if not isinstance(raw, dict):
        raise WorkflowFormatError(f"Node {index} must be an object")
    if not raw.get('id'):
        raise WorkflowFormatError(f"Node {index} is missing an id")
    if not raw.get('type'):
        raise WorkflowFormatError(f"Node {raw['id']} is missing a type")

    data = raw.get('data') or {}
    if not isinstance(data, dict):
        raise WorkflowFormatError(f"Node {raw['id']} data must be an object")
    config = data.get('config') or {}
    if not isinstance(config, dict):
        raise WorkflowFormatError(f"Node {raw['id']} config must be an object")

    node: NodeData = {
        'id': str(raw['id']),
        'type': str(raw['type']),
        'data': {'label': data.get('label') or str(raw['id']), 'config': config},
    }
    if 'position' in raw:
        node['position'] = raw['position']
    return node


def _parse_edge(raw: Any, index: int) -> EdgeData:
    if not isinstance(raw, dict):
        raise WorkflowFormatError(f"Edge {index} must be an object")
    for key in ('source', 'target'):
        if not raw.get(key):
            raise WorkflowFormatError(f"Edge {raw.get('id', index)} is missing a {key}")

    edge: EdgeData = {
        'id': str(raw.get('id') or f"e{index}-{raw['source']}-{raw['target']}"),
        'source': str(raw['source']),
        'target': str(raw['target']),
    }
    for handle in ('sourceHandle', 'targetHandle'):
        if raw.get(handle) is not None:
            edge[handle] = str(raw[handle])
    return edge


def parse_workflow(data: Union[str, bytes, Dict[str, Any]]) -> NodeGraph:
    """
    Parse and validate a workflow definition

    Args:
        data: Workflow JSON text or an already-decoded dict

    Returns:
        Normalized NodeGraph

    Raises:
        WorkflowFormatError: If the definition is not a valid workflow
    """
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise WorkflowFormatError(f"Workflow is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise WorkflowFormatError("Workflow must be a JSON object")

    nodes = data.get('nodes')
    edges = data.get('edges', [])
    if not isinstance(nodes, list):
        raise WorkflowFormatError("Workflow nodes must be a list")
    if not isinstance(edges, list):
        raise WorkflowFormatError("Workflow edges must be a list")

    workflow_id = str(data.get('id') or 'workflow')
    if not is_safe_id(workflow_id):
        raise WorkflowFormatError(f"Workflow id {workflow_id!r} must not contain path separators or '..'")
    workflow: NodeGraph = {
        'id': workflow_id,
        'name': str(data.get('name') or workflow_id),
        'nodes': [_parse_node(node, i) for i, node in enumerate(nodes)],
        'edges': [_parse_edge(edge, i) for i, edge in enumerate(edges)],
    }
    for optional in ('description', 'metadata'):
        if optional in data:
            workflow[optional] = data[optional]

    node_ids = [node['id'] for node in workflow['nodes']]
    if len(set(node_ids)) != len(node_ids):
        logger.warning(f"Workflow {workflow_id} has duplicate node ids; first definition wins")

    return workflow


def load_workflow(path: Union[str, Path]) -> NodeGraph:
    """Read and parse a workflow JSON file"""
    with open(path, 'r', encoding='utf-8') as f:
        return parse_workflow(f.read())


def dump_workflow(workflow: NodeGraph, path: Optional[Union[str, Path]] = None, indent: int = 2) -> str:
    """
    Encode a workflow as JSON text, optionally writing it to a file

    Returns:
        The JSON text
    """
    text = json.dumps(workflow, indent=indent)
    if path is not None:
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)
    return text