"""
Condition Node
Routes the run down the "true" or "false" handle
"""
from ..node_base import BaseNode, BranchResult, ExecutionState
from ..expressions import get_nested_value, evaluate_condition


class ConditionNode(BaseNode):
    """
    Evaluates one field / operator / value triple against the previous output

    Config:
        field: Dotted path into the previous output (required)
        operator: equals, not_equals, contains, greater_than, less_than,
            is_empty, is_not_empty
        value: Comparison value

    Branches:
        "true" when the comparison holds, "false" otherwise
    """

    description = "Branch on a field comparison"

    def validate(self) -> None:
        self.require('field', 'Condition node requires a field')

    def execute(self, state: ExecutionState) -> BranchResult:
        field = self.config['field']
        operator = self.config.get('operator', 'equals')
        value = self.config.get('value', '')

        field_value = get_nested_value(state.previous_output, field)
        condition_met = evaluate_condition(field_value, operator, value)

        return BranchResult(
            output={
                'condition': {
                    'field': field,
                    'operator': operator,
                    'value': value,
                    'fieldValue': field_value,
                    'result': condition_met,
                },
                'data': state.previous_output,
            },
            branch='true' if condition_met else 'false',
        )
