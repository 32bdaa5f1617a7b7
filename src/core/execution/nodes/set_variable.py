"""
Set Variable Node
Writes named values into the run's variables
"""
from typing import Any, Dict

from ..node_base import BaseNode, ConfigurationError, ExecutionState
from ..expressions import evaluate_expression, interpolate_variables, to_number, to_text


class SetVariableNode(BaseNode):
    """
    Sets one or more run variables

    Config:
        variables: [{"key": "name", "value": "...", "type": "string"}, ...]
            type is one of string (templates interpolated), number, boolean
            or expression

    Output:
        The previous output (when it is an object) plus a "variables" key
        holding the values set by this node
    """

    description = "Set run variables"

    def validate(self) -> None:
        variables = self.config.get('variables')
        if not variables:
            raise ConfigurationError('Set Variable node requires at least one variable')
        for variable in variables:
            if not isinstance(variable, dict) or not variable.get('key'):
                raise ConfigurationError('Set Variable entries require a key')

    def _convert(self, raw: Any, value_type: str, state: ExecutionState) -> Any:
        if value_type == 'number':
            return to_number(raw)
        if value_type == 'boolean':
            if isinstance(raw, bool):
                return raw
            return to_text(raw).strip().lower() == 'true'
        if value_type == 'expression':
            return evaluate_expression(raw, state)
        if isinstance(raw, str):
            return interpolate_variables(raw, state)
        return raw

    def execute(self, state: ExecutionState) -> Dict[str, Any]:
        result: Dict[str, Any] = {}

        for variable in self.config['variables']:
            value = self._convert(variable.get('value', ''), variable.get('type') or 'string', state)
            state.variables[variable['key']] = value
            result[variable['key']] = value

        previous = state.previous_output if isinstance(state.previous_output, dict) else {}
        return {**previous, 'variables': result}
