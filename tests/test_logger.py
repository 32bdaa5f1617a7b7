"""
Tests for run-context logging
"""
import asyncio
import logging

import pytest

from helpers import node, edge, workflow

from src.core.execution.runner import WorkflowRunner
from src.utils.logger import DEFAULT_FORMAT, get_logger, log_context


class _Collect(logging.Handler):

    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def engine_records():
    handler = _Collect()
    logger = get_logger('src.core.execution.engine')
    logger.addHandler(handler)
    yield handler.records
    logger.removeHandler(handler)


def test_module_loggers_share_prefix():
    assert get_logger('src.core.execution.engine').name == 'flowline_core.engine'
    assert get_logger('src.core.execution.engine') is get_logger('engine')


def test_log_context_tags_and_restores(engine_records):
    logger = get_logger('src.core.execution.engine')
    with log_context(execution_id='0123456789abcdef'):
        with log_context(node_id='cond'):
            logger.info('inner')
        logger.info('outer')
    logger.info('after')

    inner, outer, after = engine_records
    assert (inner.execution_id, inner.node_id) == ('0123456789abcdef', 'cond')
    assert (outer.execution_id, outer.node_id) == ('0123456789abcdef', None)
    assert (after.execution_id, after.node_id) == (None, None)

    formatter = logging.Formatter(DEFAULT_FORMAT)
    assert formatter.format(inner) == '[INFO] flowline_core.engine [run=01234567 node=cond]: inner'
    assert formatter.format(after) == '[INFO] flowline_core.engine: after'


def test_engine_records_carry_run_and_node(engine_records, temp_storage):
    graph = workflow(
        nodes=[node('trigger', 'manual-trigger'), node('emit', 'test-emit', value=1)],
        edges=[edge('trigger', 'emit')],
    )
    execution = asyncio.run(WorkflowRunner(temp_storage).execute_workflow(graph))

    node_records = [r for r in engine_records if r.getMessage().startswith('Executing node')]
    assert [r.node_id for r in node_records] == ['trigger', 'emit']
    assert all(r.execution_id == execution['id'] for r in node_records)
