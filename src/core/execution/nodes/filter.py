"""
Filter Node
Keeps the items that satisfy a condition
"""
from typing import Any, List

from ..node_base import BaseNode, ExecutionState
from ..expressions import get_nested_value, evaluate_condition


class FilterNode(BaseNode):
    """
    Config:
        field: Dotted path evaluated on each item (required)
        operator: Condition operator (see ConditionNode)
        value: Comparison value

    A list input produces {filtered, originalCount, filteredCount, items};
    an object input has each of its list values filtered; any other input is
    passed through when it matches and replaced by None when it does not.
    """

    description = "Keep items matching a condition"

    def validate(self) -> None:
        self.require('field', 'Filter node requires a field')

    def _matches(self, item: Any) -> bool:
        field_value = get_nested_value(item, self.config['field'])
        return evaluate_condition(field_value, self.config.get('operator', 'equals'), self.config.get('value'))

    def _filter(self, items: List[Any]) -> List[Any]:
        return [item for item in items if self._matches(item)]

    def execute(self, state: ExecutionState) -> Any:
        data = state.previous_output

        if isinstance(data, list):
            filtered = self._filter(data)
            return {
                'filtered': True,
                'originalCount': len(data),
                'filteredCount': len(filtered),
                'items': filtered,
            }

        if isinstance(data, dict):
            return {
                key: self._filter(value) if isinstance(value, list) else value
                for key, value in data.items()
            }

        return data if self._matches(data) else None
