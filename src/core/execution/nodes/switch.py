"""
Switch Node
Routes the run to one of several numbered outputs
"""
from typing import Any, Dict

from ..node_base import BaseNode, BranchResult, ConfigurationError, ExecutionState
from ..expressions import get_nested_value, evaluate_condition

SWITCH_OPERATORS = ('equals', 'contains', 'greater_than', 'less_than')


class SwitchNode(BaseNode):
    """
    Ordered rule matching; the first matching rule wins

    Config:
        field: Dotted path into the previous output
        rules: [{"value": ..., "operator": "equals", "output": 1}, ...]
            ("outputIndex" is accepted as an alias of "output")
        defaultOutput: Output index used when no rule matches (default 0)

    Branches:
        "output{N}" for the selected output index
    """

    description = "Route to the first matching output"

    def validate(self) -> None:
        rules = self.config.get('rules') or []
        if not isinstance(rules, list):
            raise ConfigurationError('Switch node rules must be a list')
        for rule in rules:
            operator = rule.get('operator') or 'equals'
            if operator not in SWITCH_OPERATORS:
                raise ConfigurationError(f"Switch node has unsupported operator '{operator}'")

    @staticmethod
    def _output_index(rule: Dict[str, Any]) -> Any:
        return rule.get('output', rule.get('outputIndex', 0))

    def execute(self, state: ExecutionState) -> BranchResult:
        field_value = get_nested_value(state.previous_output, self.config.get('field') or '')

        for rule in self.config.get('rules') or []:
            operator = rule.get('operator') or 'equals'
            if evaluate_condition(field_value, operator, rule.get('value')):
                return BranchResult(state.previous_output, f"output{self._output_index(rule)}")

        default_output = self.config.get('defaultOutput')
        if default_output is None:
            default_output = 0
        return BranchResult(state.previous_output, f"output{default_output}")
