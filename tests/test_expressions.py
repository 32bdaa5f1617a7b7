"""
Tests for template interpolation, path lookup and condition evaluation
"""
import pytest

from src.core.execution.node_base import ExecutionState
from src.core.execution.expressions import (
    get_nested_value,
    evaluate_condition,
    interpolate_variables,
    resolve_template,
    evaluate_expression,
    to_text,
)


@pytest.fixture
def state():
    return ExecutionState(
        variables={'name': 'Ada', 'count': 3, 'user': {'email': 'ada@example.com'}, 'tags': ['x', 'y']},
        previous_output={'order': {'id': 42, 'lines': [{'sku': 'A1'}]}, 'data': [1, 2]},
        all_outputs={'fetch': {'status': 200, 'body': {'ok': True}}},
    )


class TestNestedValue:

    def test_dotted_path(self):
        assert get_nested_value({'a': {'b': {'c': 1}}}, 'a.b.c') == 1

    def test_list_index(self):
        assert get_nested_value({'items': [{'id': 'x'}, {'id': 'y'}]}, 'items.1.id') == 'y'

    def test_missing_segment(self):
        assert get_nested_value({'a': {}}, 'a.b.c') is None
        assert get_nested_value({'items': []}, 'items.3') is None

    def test_non_container_root(self):
        assert get_nested_value('text', 'length') is None
        assert get_nested_value(None, 'a') is None

    def test_empty_path_returns_object(self):
        data = {'a': 1}
        assert get_nested_value(data, '') is data


class TestConditions:

    def test_equals_coerces_to_text(self):
        assert evaluate_condition(5, 'equals', '5')
        assert evaluate_condition(True, 'equals', 'true')
        assert not evaluate_condition('active', 'equals', 'Active')

    def test_not_equals(self):
        assert evaluate_condition('a', 'not_equals', 'b')
        assert not evaluate_condition(1, 'not_equals', '1')

    def test_contains(self):
        assert evaluate_condition('hello world', 'contains', 'world')
        assert not evaluate_condition(None, 'contains', 'x')

    def test_missing_field_never_equals_empty_text(self):
        assert not evaluate_condition(None, 'equals', '')
        assert evaluate_condition(None, 'not_equals', '')
        assert evaluate_condition(None, 'equals', 'undefined')
        assert evaluate_condition(None, 'is_empty', '')

    def test_numeric_comparisons(self):
        assert evaluate_condition('10', 'greater_than', 9)
        assert evaluate_condition(2.5, 'less_than', '3')
        assert not evaluate_condition('abc', 'greater_than', 1)
        assert not evaluate_condition('abc', 'less_than', 1)

    def test_emptiness(self):
        assert evaluate_condition(None, 'is_empty', None)
        assert evaluate_condition('', 'is_empty', None)
        assert evaluate_condition(0, 'is_not_empty', None)

    def test_unknown_operator_is_false(self):
        assert not evaluate_condition('a', 'matches', 'a')


class TestTemplates:

    def test_interpolate_variables(self, state):
        text = interpolate_variables('Hi {{name}}, you have {{count}} items', state)
        assert text == 'Hi Ada, you have 3 items'

    def test_interpolate_paths(self, state):
        assert interpolate_variables('{{user.email}}', state) == 'ada@example.com'
        assert interpolate_variables('#{{$input.order.id}}', state) == '#42'
        assert interpolate_variables('{{$node.fetch.body.ok}}', state) == 'true'

    def test_unresolved_template_left_as_is(self, state):
        assert interpolate_variables('{{missing}} and {{$node.nope.x}}', state) == '{{missing}} and {{$node.nope.x}}'

    def test_containers_render_as_json(self, state):
        assert interpolate_variables('{{tags}}', state) == '["x", "y"]'

    def test_lone_template_keeps_type(self, state):
        assert resolve_template('{{count}}', state) == 3
        assert resolve_template('{{$input.order.lines}}', state) == [{'sku': 'A1'}]
        assert resolve_template(' {{tags}} ', state) == ['x', 'y']

    def test_resolve_non_string(self, state):
        assert resolve_template(7, state) == 7

    def test_to_text(self):
        assert to_text(None) == ''
        assert to_text(3.0) == '3'
        assert to_text(False) == 'false'


class TestExpressions:

    def test_input_root(self, state):
        assert evaluate_expression('$input.data', state) == [1, 2]
        assert evaluate_expression('$input', state) is state.previous_output

    def test_vars_and_nodes_roots(self, state):
        assert evaluate_expression('$vars.tags', state) == ['x', 'y']
        assert evaluate_expression('$nodes.fetch.status', state) == 200

    def test_literals(self, state):
        assert evaluate_expression('[1, 2, 3]', state) == [1, 2, 3]
        assert evaluate_expression('{"a": 1}', state) == {'a': 1}
        assert evaluate_expression("['a', 'b']", state) == ['a', 'b']

    def test_template_expression(self, state):
        assert evaluate_expression('{{tags}}', state) == ['x', 'y']

    def test_unparseable_returns_expression(self, state):
        assert evaluate_expression('not valid', state) == 'not valid'

    def test_non_string_passthrough(self, state):
        items = [1, 2]
        assert evaluate_expression(items, state) is items
