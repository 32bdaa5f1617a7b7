"""
Loop Node
Replays its downstream subgraph once per item
"""
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from ..node_base import BaseNode, ConfigurationError, ExecutionState
from ..expressions import evaluate_expression
from ....utils.logger import get_logger

if TYPE_CHECKING:
    from ..engine import RunContext

logger = get_logger(__name__)


class LoopNode(BaseNode):
    """
    Iterates over a list and walks the loop body for every item

    The body is everything reachable from this node. While an item is being
    processed the at-most-once rule is suspended, so each body node runs once
    per item. Afterwards the whole body is marked executed and the engine does
    not follow this node's edges again.

    Config:
        items: Expression ("$input.data", "{{users}}") or a literal list
            (default "$input.data")
        itemVariable: Variable name bound to the current item (default "item")
        indexVariable: Optional variable name bound to the current index
    """

    traverses_outgoing = False
    description = "Run the downstream nodes once per list item"

    def __init__(self, node_id, node_data):
        super().__init__(node_id, node_data)
        self._run: Optional['RunContext'] = None

    def _setup(self, run: 'RunContext') -> None:
        self._run = run
        super()._setup(run)

    def _resolve_items(self, state: ExecutionState) -> List[Any]:
        expression = self.config.get('items')
        if expression is None or expression == '':
            expression = '$input.data'
        items = evaluate_expression(expression, state)
        if not isinstance(items, (list, tuple)):
            raise ConfigurationError('Loop items must be an array')
        return list(items)

    async def execute(self, state: ExecutionState) -> Dict[str, Any]:
        if self._run is None:
            raise RuntimeError(f"Loop node {self.node_id} was not set up by the engine")

        items = self._resolve_items(state)
        item_variable = self.config.get('itemVariable') or 'item'
        index_variable = self.config.get('indexVariable')

        graph = self._run.graph
        targets = graph.outgoing_targets(self.node_id)
        logger.debug(f"Loop {self.node_id}: {len(items)} item(s), body entry {targets}")

        results: List[Dict[str, Any]] = []
        with state.loop_scope(self.node_id, items) as frame:
            for index, item in enumerate(items):
                frame.current_index = index
                state.variables[item_variable] = item
                if index_variable:
                    state.variables[index_variable] = index
                state.previous_output = item

                for target in targets:
                    await self._run.walk(target)

                results.append({'index': index, 'item': item, 'processed': True})

        # The body already ran per item; the main walk must not run it again
        state.mark_executed(graph.body_of(self.node_id) | {self.node_id})

        return {
            'looped': True,
            'itemCount': len(items),
            'results': results,
            'items': items,
        }
