"""
Merge Node
Combines the outputs of its predecessors
"""
from typing import Any, Dict, List

from ..node_base import BaseNode, ExecutionState
from ....utils.logger import get_logger

logger = get_logger(__name__)


class MergeNode(BaseNode):
    """
    Joins several incoming paths into one output

    Merge reads whatever predecessor outputs exist when it is reached, plus
    the current previous output. Under depth-first traversal it usually runs
    on the first arriving path and only sees the predecessors executed so
    far; set waitForAll to make it defer until every predecessor has output.

    Config:
        mode: "merge" (default) unions object inputs, "append" concatenates
            list inputs, "multiplex" outputs the inputs as a list; any other
            mode outputs the last input
        waitForAll: Defer until every predecessor has produced output
    """

    description = "Combine the outputs of incoming paths"

    def __init__(self, node_id, node_data):
        super().__init__(node_id, node_data)
        self.sources: List[str] = []

    def initialize(self, graph, all_nodes) -> None:
        # Distinct predecessors, in edge order
        self.sources = list(dict.fromkeys(graph.incoming_sources(self.node_id)))

    def is_ready(self, state: ExecutionState) -> bool:
        if not self.config.get('waitForAll'):
            return True
        missing = [source for source in self.sources if source not in state.all_outputs]
        if missing:
            logger.debug(f"Merge {self.node_id} waiting for {missing}")
            return False
        return True

    def _collect_inputs(self, state: ExecutionState) -> List[Any]:
        inputs = [state.all_outputs[source] for source in self.sources if source in state.all_outputs]
        previous = state.previous_output
        if previous is not None and not any(previous is value for value in inputs):
            inputs.append(previous)
        return inputs

    def execute(self, state: ExecutionState) -> Any:
        mode = self.config.get('mode') or 'merge'
        inputs = self._collect_inputs(state)

        if mode == 'merge':
            merged: Dict[str, Any] = {}
            for index, value in enumerate(inputs):
                if isinstance(value, dict):
                    merged.update(value)
                elif value is not None:
                    merged[f'value{index}'] = value
            return merged if merged else state.previous_output

        if mode == 'append':
            appended: List[Any] = []
            for value in inputs:
                if isinstance(value, list):
                    appended.extend(value)
                else:
                    appended.append(value)
            return appended

        if mode == 'multiplex':
            return inputs if inputs else [state.previous_output]

        return inputs[-1] if inputs else state.previous_output
