"""
Indexed view of a workflow graph
Answers the adjacency questions the engine and control-flow nodes ask
"""
from collections import defaultdict
from typing import Dict, List, Optional, Set, Iterable

from ..types import NodeGraph, NodeData, EdgeData, NodeID


class WorkflowGraph:
    """
    Read-only index over a workflow's nodes and edges

    Edge order is preserved everywhere: outgoing targets are returned in the
    order the edges appear in the workflow definition.
    """

    def __init__(self, workflow: NodeGraph):
        self.workflow = workflow
        self.id = workflow.get('id', 'unknown')
        self.name = workflow.get('name', self.id)
        self.nodes: List[NodeData] = list(workflow.get('nodes') or [])
        self.edges: List[EdgeData] = list(workflow.get('edges') or [])

        self._nodes_by_id: Dict[NodeID, NodeData] = {}
        for node in self.nodes:
            # First definition wins if an id is duplicated
            self._nodes_by_id.setdefault(node['id'], node)

        self._outgoing: Dict[NodeID, List[EdgeData]] = defaultdict(list)
        self._incoming: Dict[NodeID, List[EdgeData]] = defaultdict(list)
        for edge in self.edges:
            self._outgoing[edge['source']].append(edge)
            self._incoming[edge['target']].append(edge)

    def node(self, node_id: NodeID) -> Optional[NodeData]:
        return self._nodes_by_id.get(node_id)

    def __contains__(self, node_id: NodeID) -> bool:
        return node_id in self._nodes_by_id

    def outgoing_targets(self, node_id: NodeID, branch: Optional[str] = None) -> List[NodeID]:
        """
        Targets of a node's outgoing edges

        Args:
            node_id: Source node
            branch: When set, only edges whose sourceHandle equals it are followed

        Returns:
            Target node IDs in edge-list order (edges to unknown nodes dropped)
        """
        targets = []
        for edge in self._outgoing.get(node_id, []):
            if branch and edge.get('sourceHandle') != branch:
                continue
            if edge['target'] in self._nodes_by_id:
                targets.append(edge['target'])
        return targets

    def incoming_sources(self, node_id: NodeID) -> List[NodeID]:
        """Sources of a node's incoming edges, in edge-list order"""
        return [
            edge['source'] for edge in self._incoming.get(node_id, [])
            if edge['source'] in self._nodes_by_id
        ]

    def body_of(self, node_id: NodeID) -> Set[NodeID]:
        """
        All nodes reachable from a node (BFS), excluding the node itself

        Used by the loop primitive to know which nodes belong to its body.
        """
        reachable: Set[NodeID] = set()
        queue = list(self.outgoing_targets(node_id))

        while queue:
            current = queue.pop(0)
            if current in reachable or current == node_id:
                continue
            reachable.add(current)
            queue.extend(self.outgoing_targets(current))

        return reachable

    def find_trigger(self, trigger_types: Iterable[str]) -> Optional[NodeData]:
        """First node (in definition order) whose type is a trigger type"""
        types = set(trigger_types)
        for node in self.nodes:
            if node.get('type') in types:
                return node
        return None
