"""
Tests for the flowline-core CLI
"""
import json

import pytest
from click.testing import CliRunner

from helpers import node, edge, workflow

from config import Config
from src.cli.main import cli
from src.core.bootstrap import clear_cache
from src.storage import LocalJSONStorage


@pytest.fixture
def storage_path(tmp_path, monkeypatch):
    path = tmp_path / 'data'
    monkeypatch.setattr(Config, 'STORAGE_PATH', str(path))
    monkeypatch.setattr(Config, 'MODE', 'solo')
    clear_cache()
    yield path
    clear_cache()


def _write(tmp_path, graph):
    path = tmp_path / 'workflow.json'
    path.write_text(json.dumps(graph))
    return str(path)


def _graph():
    return workflow(
        nodes=[
            node('trigger', 'manual-trigger'),
            node('vars', 'set-variable', variables=[{'key': 'total', 'value': '{{$input.amount}}', 'type': 'expression'}]),
        ],
        edges=[edge('trigger', 'vars')],
        workflow_id='wf-cli',
    )


def test_node_types_lists_builtins():
    result = CliRunner().invoke(cli, ['node-types'])
    assert result.exit_code == 0
    assert 'manual-trigger' in result.output
    assert 'http-request' in result.output


def test_run_records_execution(tmp_path, storage_path):
    result = CliRunner().invoke(
        cli,
        ['run', _write(tmp_path, _graph()), '--trigger-data', '{"amount": 42}', '--save'],
    )

    assert result.exit_code == 0, result.output
    storage = LocalJSONStorage(str(storage_path))
    records = storage.list_executions(workflow_id='wf-cli')
    assert len(records) == 1
    assert records[0]['status'] == 'success'
    assert records[0]['node_results'][-1]['output']['variables'] == {'total': 42}
    assert storage.get_workflow('wf-cli')['id'] == 'wf-cli'


def test_run_failed_execution_exits_nonzero(tmp_path, storage_path):
    graph = workflow([node('a', 'test-emit')], [], workflow_id='wf-broken')
    result = CliRunner().invoke(cli, ['run', _write(tmp_path, graph)])

    assert result.exit_code == 1
    records = LocalJSONStorage(str(storage_path)).list_executions()
    assert [r['status'] for r in records] == ['failed']


def test_run_rejects_bad_trigger_data(tmp_path, storage_path):
    result = CliRunner().invoke(cli, ['run', _write(tmp_path, _graph()), '--trigger-data', '{oops'])
    assert result.exit_code == 1
    assert 'not valid JSON' in result.output


def test_schedule_runs_count_times(tmp_path, storage_path):
    result = CliRunner().invoke(cli, ['schedule', _write(tmp_path, _graph()), '--interval', '0', '--count', '2'])

    assert result.exit_code == 0, result.output
    records = LocalJSONStorage(str(storage_path)).list_executions()
    assert [r['triggered_by'] for r in records] == ['schedule', 'schedule']


def test_executions_empty(storage_path):
    result = CliRunner().invoke(cli, ['executions'])
    assert result.exit_code == 0
    assert 'No executions found' in result.output
