"""
Tests for WorkflowRunner: execution records around engine runs
"""
import asyncio

import pytest

from helpers import node, edge, workflow

from src.core.execution.engine import ExecutionEngine
from src.core.execution.runner import WorkflowRunner


def _loop_workflow():
    return workflow(
        nodes=[
            node('trigger', 'manual-trigger'),
            node('loop', 'loop', items=[1, 2, 3]),
            node('body', 'set-variable', variables=[{'key': 'y', 'value': '{{item}}', 'type': 'expression'}]),
        ],
        edges=[edge('trigger', 'loop'), edge('loop', 'body')],
        workflow_id='wf-loop',
    )


class TestWorkflowRunner:

    def test_success_record(self, temp_storage):
        runner = WorkflowRunner(temp_storage)
        execution = asyncio.run(runner.execute_workflow(_loop_workflow()))

        assert execution['status'] == 'success'
        assert execution['workflow_id'] == 'wf-loop'
        assert execution['workflow_name'] == 'Test Workflow'
        assert execution['triggered_by'] == 'manual'
        assert execution['duration'] >= 0
        assert 'error' not in execution
        assert [r['node_id'] for r in execution['node_results']].count('body') == 3

        stored = temp_storage.get_execution(execution['id'])
        assert stored['status'] == 'success'
        assert len(stored['node_results']) == 5

    def test_failed_record_keeps_results_up_to_failure(self, temp_storage):
        graph = workflow(
            nodes=[
                node('trigger', 'manual-trigger'),
                node('fetch', 'test-emit', value={'rows': []}),
                node('bad', 'sort'),
                node('never', 'test-emit'),
            ],
            edges=[edge('trigger', 'fetch'), edge('fetch', 'bad'), edge('bad', 'never')],
        )
        runner = WorkflowRunner(temp_storage)
        execution = asyncio.run(runner.execute_workflow(graph, triggered_by='webhook', trigger_data={'id': 1}))

        assert execution['status'] == 'failed'
        assert execution['error'] == 'Sort node requires a field'
        assert execution['triggered_by'] == 'webhook'
        assert [r['node_id'] for r in execution['node_results']] == ['trigger', 'fetch', 'bad']
        assert execution['node_results'][0]['output'] == {'id': 1}
        assert execution['node_results'][-1]['status'] == 'failed'

        assert temp_storage.get_execution(execution['id'])['status'] == 'failed'

    def test_missing_trigger_is_a_failed_run(self, temp_storage):
        runner = WorkflowRunner(temp_storage)
        execution = asyncio.run(runner.execute_workflow(workflow([node('a', 'test-emit')], [])))

        assert execution['status'] == 'failed'
        assert execution['error'] == 'No trigger node found in workflow'
        assert execution['node_results'] == []

    def test_unknown_trigger_reason(self, temp_storage):
        runner = WorkflowRunner(temp_storage)
        with pytest.raises(ValueError, match='Unknown trigger reason'):
            asyncio.run(runner.execute_workflow(_loop_workflow(), triggered_by='email'))
        assert temp_storage.list_executions() == []

    def test_record_is_running_while_nodes_execute(self, temp_storage):
        seen = {}

        class SpyEngine(ExecutionEngine):
            async def run(self, workflow, state=None, results=None):
                seen['record'] = temp_storage.get_execution(state.execution_id)
                return await super().run(workflow, state=state, results=results)

        runner = WorkflowRunner(temp_storage, engine=SpyEngine())
        execution = asyncio.run(runner.execute_workflow(_loop_workflow()))

        assert seen['record']['status'] == 'running'
        assert seen['record']['id'] == execution['id']
        assert seen['record']['node_results'] == []

    def test_run_sync_with_storage_nodes(self, temp_storage, container):
        graph = workflow(
            nodes=[
                node('trigger', 'schedule-trigger'),
                node('store', 'store-data', key='last_run'),
            ],
            edges=[edge('trigger', 'store')],
        )
        runner = WorkflowRunner(temp_storage, container=container)
        execution = runner.run_sync(graph, triggered_by='schedule', trigger_data={'tick': 1})

        assert execution['status'] == 'success'
        assert temp_storage.get_data_value('last_run') == '{"tick": 1}'

    def test_executions_listed_per_workflow(self, temp_storage):
        runner = WorkflowRunner(temp_storage)
        runner.run_sync(_loop_workflow())
        runner.run_sync(_loop_workflow())
        runner.run_sync(workflow([node('t', 'manual-trigger')], [], workflow_id='other'))

        assert len(temp_storage.list_executions(workflow_id='wf-loop')) == 2
        assert len(temp_storage.list_executions()) == 3
