"""
Tests for storage backends
"""
import os
import stat
from unittest.mock import MagicMock

import pytest

from helpers import node, edge, workflow

from src.storage import LocalJSONStorage, SupabaseStorage


def _record(execution_id, workflow_id='wf-1', start_time='2024-01-01T00:00:00+00:00'):
    return {
        'id': execution_id,
        'workflow_id': workflow_id,
        'workflow_name': 'Workflow',
        'status': 'running',
        'triggered_by': 'manual',
        'start_time': start_time,
        'node_results': [],
    }


class TestLocalJSONStorage:

    def test_workflow_crud(self, temp_storage):
        graph = workflow([node('t', 'manual-trigger'), node('a', 'test-emit')], [edge('t', 'a')], workflow_id='wf-1')

        temp_storage.save_workflow(graph)
        assert temp_storage.get_workflow('wf-1') == graph
        assert [w['id'] for w in temp_storage.list_workflows()] == ['wf-1']

        graph['name'] = 'Renamed'
        temp_storage.save_workflow(graph)
        assert temp_storage.get_workflow('wf-1')['name'] == 'Renamed'

        assert temp_storage.delete_workflow('wf-1') is True
        assert temp_storage.get_workflow('wf-1') is None
        assert temp_storage.delete_workflow('wf-1') is False

    def test_save_requires_id(self, temp_storage):
        with pytest.raises(ValueError):
            temp_storage.save_workflow({'name': 'no id', 'nodes': [], 'edges': []})

    def test_ids_cannot_escape_storage_dirs(self, temp_storage):
        with pytest.raises(ValueError):
            temp_storage.save_workflow({'id': '../escaped', 'name': 'x', 'nodes': [], 'edges': []})
        with pytest.raises(ValueError):
            temp_storage.create_execution(_record('../../escaped'))

        assert not (temp_storage.base_path / 'escaped.json').exists()
        assert not (temp_storage.base_path.parent / 'escaped.json').exists()
        assert temp_storage.get_workflow('../escaped') is None
        assert temp_storage.get_execution('../escaped') is None
        assert temp_storage.delete_workflow('../data_store') is False

    def test_execution_lifecycle(self, temp_storage):
        temp_storage.create_execution(_record('e1'))
        updated = temp_storage.update_execution('e1', {'status': 'success', 'duration': 12})

        assert updated['status'] == 'success'
        assert updated['workflow_id'] == 'wf-1'
        assert temp_storage.get_execution('e1')['duration'] == 12

    def test_update_missing_execution(self, temp_storage):
        assert temp_storage.update_execution('nope', {'status': 'failed'}) is None
        assert temp_storage.get_execution('nope') is None

    def test_list_executions_newest_first(self, temp_storage):
        temp_storage.create_execution(_record('old', start_time='2024-01-01T00:00:00+00:00'))
        temp_storage.create_execution(_record('new', start_time='2024-03-01T00:00:00+00:00'))
        temp_storage.create_execution(_record('other', workflow_id='wf-2', start_time='2024-02-01T00:00:00+00:00'))

        assert [e['id'] for e in temp_storage.list_executions()] == ['new', 'other', 'old']
        assert [e['id'] for e in temp_storage.list_executions(workflow_id='wf-1')] == ['new', 'old']
        assert [e['id'] for e in temp_storage.list_executions(limit=1)] == ['new']

    def test_data_store(self, temp_storage):
        assert temp_storage.get_data_value('k') is None
        temp_storage.set_data_value('k', 'v1')
        temp_storage.set_data_value('k', 'v2')
        temp_storage.set_data_value('other', '1')
        assert temp_storage.get_data_value('k') == 'v2'
        assert temp_storage.get_data_value('other') == '1'

    def test_files_are_user_only(self, temp_storage):
        temp_storage.create_execution(_record('e1'))
        path = temp_storage.executions_path / 'e1.json'
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600
        assert stat.S_IMODE(os.stat(temp_storage.base_path).st_mode) == 0o700

    def test_corrupt_file_is_skipped(self, temp_storage):
        temp_storage.create_execution(_record('good'))
        (temp_storage.executions_path / 'bad.json').write_text('{not json')
        assert [e['id'] for e in temp_storage.list_executions()] == ['good']


@pytest.fixture
def client():
    return MagicMock()


class TestSupabaseStorage:

    def test_create_execution(self, client):
        record = _record('e1')
        client.table.return_value.insert.return_value.execute.return_value.data = [record]
        storage = SupabaseStorage('https://db.example.com', 'key', client=client)

        assert storage.create_execution(record) == record
        client.table.assert_called_with('executions')
        client.table.return_value.insert.assert_called_once_with(record)

    def test_update_execution(self, client):
        query = client.table.return_value.update.return_value.eq.return_value
        query.execute.return_value.data = [{'id': 'e1', 'status': 'success'}]
        storage = SupabaseStorage('https://db.example.com', 'key', client=client)

        updated = storage.update_execution('e1', {'status': 'success'})
        assert updated == {'id': 'e1', 'status': 'success'}
        client.table.return_value.update.assert_called_once_with({'status': 'success'})
        client.table.return_value.update.return_value.eq.assert_called_once_with('id', 'e1')

    def test_update_missing_execution(self, client):
        client.table.return_value.update.return_value.eq.return_value.execute.return_value.data = []
        storage = SupabaseStorage('https://db.example.com', 'key', client=client)
        assert storage.update_execution('e1', {'status': 'failed'}) is None

    def test_list_executions_filters_by_workflow(self, client):
        select = client.table.return_value.select.return_value
        select.eq.return_value.order.return_value.limit.return_value.execute.return_value.data = [{'id': 'e1'}]
        storage = SupabaseStorage('https://db.example.com', 'key', client=client)

        assert storage.list_executions(workflow_id='wf-1', limit=5) == [{'id': 'e1'}]
        select.eq.assert_called_once_with('workflow_id', 'wf-1')
        select.eq.return_value.order.assert_called_once_with('start_time', desc=True)
        select.eq.return_value.order.return_value.limit.assert_called_once_with(5)

    def test_read_errors_are_logged_not_raised(self, client):
        client.table.side_effect = RuntimeError('connection lost')
        storage = SupabaseStorage('https://db.example.com', 'key', client=client)

        assert storage.get_execution('e1') is None
        assert storage.list_workflows() == []
        assert storage.get_data_value('k') is None

    def test_write_errors_propagate(self, client):
        client.table.side_effect = RuntimeError('connection lost')
        storage = SupabaseStorage('https://db.example.com', 'key', client=client)

        with pytest.raises(RuntimeError):
            storage.create_execution(_record('e1'))

    def test_workflows_stored_as_definition(self, client):
        storage = SupabaseStorage('https://db.example.com', 'key', client=client)
        graph = workflow([node('t', 'manual-trigger')], [], workflow_id='wf-1')

        storage.save_workflow(graph)
        client.table.assert_called_with('workflows')
        client.table.return_value.upsert.assert_called_once_with(
            {'id': 'wf-1', 'name': 'Test Workflow', 'definition': graph}
        )

        query = client.table.return_value.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value.data = [{'definition': graph}]
        assert storage.get_workflow('wf-1') == graph

    def test_data_store_upsert(self, client):
        storage = SupabaseStorage('https://db.example.com', 'key', client=client)
        storage.set_data_value('k', 'v')

        client.table.assert_called_with('data_store')
        client.table.return_value.upsert.assert_called_once_with({'key': 'k', 'value': 'v'})
