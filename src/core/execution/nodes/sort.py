"""
Sort Node
Orders list items by a field
"""
from functools import cmp_to_key
from typing import Any, List

from ..node_base import BaseNode, ExecutionState
from ..expressions import get_nested_value, to_text


def _compare(a: Any, b: Any) -> int:
    if isinstance(a, (int, float)) and isinstance(b, (int, float)) \
            and not isinstance(a, bool) and not isinstance(b, bool):
        return (a > b) - (a < b)
    a_text, b_text = to_text(a), to_text(b)
    return (a_text > b_text) - (a_text < b_text)


class SortNode(BaseNode):
    """
    Config:
        field: Dotted path used as the sort key (required)
        direction: "asc" (default) or "desc"

    Items whose key is missing always sort last. Object inputs have each of
    their list values sorted; other inputs pass through.
    """

    description = "Sort items by a field"

    def validate(self) -> None:
        self.require('field', 'Sort node requires a field')

    def _sort(self, items: List[Any]) -> List[Any]:
        field = self.config['field']
        descending = self.config.get('direction') == 'desc'

        keyed = [(get_nested_value(item, field), item) for item in items]
        present = [pair for pair in keyed if pair[0] is not None]
        missing = [item for key, item in keyed if key is None]

        present.sort(key=cmp_to_key(lambda x, y: _compare(x[0], y[0])), reverse=descending)
        return [item for _, item in present] + missing

    def execute(self, state: ExecutionState) -> Any:
        data = state.previous_output

        if isinstance(data, list):
            return {
                'sorted': True,
                'direction': self.config.get('direction', 'asc'),
                'items': self._sort(data),
            }

        if isinstance(data, dict):
            return {
                key: self._sort(value) if isinstance(value, list) else value
                for key, value in data.items()
            }

        return data
