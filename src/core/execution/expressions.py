"""
Template and expression helpers shared by node executors

Supports:
- {{variable}} and {{variable.path}} lookups in state.variables
- {{$node.NODE_ID.path}} references to any executed node's output
- {{$input.path}} references to the previous node's output
- dotted-path lookup into nested dicts / lists
- condition operators with string / number coercion
"""
import ast
import json
import math
import re
from typing import Any, Optional

from .node_base import ExecutionState
from ...utils.logger import get_logger

logger = get_logger(__name__)

TEMPLATE_PATTERN = re.compile(r"\{\{([^}]+)\}\}")
_SINGLE_TEMPLATE = re.compile(r"^\s*\{\{([^}]+)\}\}\s*$")

_MISSING = object()
# Text form of an absent field in condition comparisons
MISSING_TEXT = "undefined"


def get_nested_value(obj: Any, path: str) -> Any:
    """
    Get a nested value using dot notation ("user.address.city", "items.0.id")

    Returns None when any segment is missing or the root is not a container.
    An empty path returns the object itself.
    """
    if not isinstance(obj, (dict, list, tuple)):
        return None
    if not path:
        return obj

    current: Any = obj
    for part in path.split('.'):
        if current is None:
            return None
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, (list, tuple)):
            try:
                current = current[int(part)]
            except (ValueError, IndexError):
                return None
        else:
            return None
    return current


def to_text(value: Any) -> str:
    """String coercion used by comparisons and interpolation"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def to_number(value: Any) -> float:
    """Numeric coercion; anything unparseable becomes NaN (never compares true)"""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def evaluate_condition(field_value: Any, operator: Optional[str], value: Any) -> bool:
    """
    Evaluate a single comparison

    Supported operators: equals, not_equals, contains, greater_than,
    less_than, is_empty, is_not_empty. Unknown operators evaluate to False.
    A missing field renders as "undefined" in text comparisons, so it never
    equals an empty string; use is_empty to test for absence.
    """
    field_text = MISSING_TEXT if field_value is None else to_text(field_value)
    if operator == 'equals':
        return field_text == to_text(value)
    if operator == 'not_equals':
        return field_text != to_text(value)
    if operator == 'contains':
        return to_text(value) in field_text
    if operator == 'greater_than':
        return to_number(field_value) > to_number(value)
    if operator == 'less_than':
        return to_number(field_value) < to_number(value)
    if operator == 'is_empty':
        return field_value is None or field_value == ''
    if operator == 'is_not_empty':
        return field_value is not None and field_value != ''
    return False


def _lookup(path: str, state: ExecutionState) -> Any:
    """Resolve one template path against the state, or _MISSING"""
    path = path.strip()

    if path.startswith('$node.'):
        parts = path[len('$node.'):].split('.', 1)
        node_id = parts[0]
        if node_id not in state.all_outputs:
            return _MISSING
        value = get_nested_value(state.all_outputs[node_id], parts[1] if len(parts) > 1 else '')
        return _MISSING if value is None else value

    if path == '$input':
        return state.previous_output
    if path.startswith('$input.'):
        value = get_nested_value(state.previous_output, path[len('$input.'):])
        return _MISSING if value is None else value

    if path in state.variables:
        return state.variables[path]

    head, _, rest = path.partition('.')
    if rest and head in state.variables:
        value = get_nested_value(state.variables[head], rest)
        return _MISSING if value is None else value

    return _MISSING


def interpolate_variables(template: str, state: ExecutionState) -> str:
    """
    Replace every {{...}} in a string; unresolved templates are left as-is
    """
    def replace(match: "re.Match[str]") -> str:
        value = _lookup(match.group(1), state)
        return match.group(0) if value is _MISSING else to_text(value)

    return TEMPLATE_PATTERN.sub(replace, template)


def resolve_template(template: Any, state: ExecutionState) -> Any:
    """
    Resolve a config value that may contain templates

    A string that is exactly one {{...}} yields the referenced value with its
    type intact; other strings are interpolated; non-strings pass through.
    """
    if not isinstance(template, str):
        return template
    single = _SINGLE_TEMPLATE.match(template)
    if single:
        value = _lookup(single.group(1), state)
        return template if value is _MISSING else value
    return interpolate_variables(template, state)


def evaluate_expression(expression: Any, state: ExecutionState) -> Any:
    """
    Evaluate a data expression against the state

    Understands $input / $vars / $nodes path roots, {{...}} templates and
    JSON or Python literals. Falls back to returning the expression itself.
    """
    if not isinstance(expression, str):
        return expression

    text = expression.strip()
    if _SINGLE_TEMPLATE.match(text):
        return resolve_template(text, state)

    roots = (
        ('$input', state.previous_output),
        ('$vars', state.variables),
        ('$nodes', state.all_outputs),
    )
    for prefix, root in roots:
        if text == prefix:
            return root
        if text.startswith(prefix + '.'):
            return get_nested_value(root, text[len(prefix) + 1:])

    try:
        return json.loads(text)
    except ValueError:
        pass

    try:
        return ast.literal_eval(text)
    except (ValueError, SyntaxError, TypeError):
        logger.warning(f"Expression evaluation failed: {expression}")
        return expression
