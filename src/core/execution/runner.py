"""
Workflow Runner for Flowline Core
Owns the execution record of a run: creates it, drives the engine, and
writes the terminal status
"""
import asyncio
import uuid
from typing import Any, Dict, List, Optional

from .engine import ExecutionEngine, elapsed_ms, utc_now
from .serialization import make_serializable
from ..types import ExecutionRecord, NodeGraph, NodeResult, TRIGGER_REASONS
from ...utils.logger import get_logger, log_context

logger = get_logger(__name__)


class WorkflowRunner:
    """
    Runs one workflow per call and persists its execution record

    Features:
    - Record created as "running" before the first node executes
    - Trigger data seeds the trigger node's input
    - Any failure becomes a "failed" record carrying the error message and
      every NodeResult up to and including the failing node
    """

    def __init__(self, storage: Any, engine: Optional[ExecutionEngine] = None, container: Any = None):
        """
        Initialize workflow runner

        Args:
            storage: StorageInterface receiving execution records
            engine: ExecutionEngine to use (one is built if omitted)
            container: Optional ServiceContainer handed to the engine
        """
        self.storage = storage
        self.container = container
        self.engine = engine or ExecutionEngine(container)

    def _new_record(self, workflow: NodeGraph, triggered_by: str) -> ExecutionRecord:
        return ExecutionRecord(
            id=str(uuid.uuid4()),
            workflow_id=workflow.get('id', 'unknown'),
            workflow_name=workflow.get('name', workflow.get('id', 'unknown')),
            status='running',
            triggered_by=triggered_by,
            start_time=utc_now().isoformat(),
            node_results=[],
        )

    async def execute_workflow(
        self,
        workflow: NodeGraph,
        triggered_by: str = 'manual',
        trigger_data: Any = None,
    ) -> ExecutionRecord:
        """
        Execute a workflow and return its terminal execution record

        Args:
            workflow: NodeGraph definition
            triggered_by: "manual", "webhook" or "schedule"
            trigger_data: Payload handed to the trigger node

        Returns:
            The execution record with status "success" or "failed"

        Raises:
            ValueError: if triggered_by is not a known trigger reason
        """
        if triggered_by not in TRIGGER_REASONS:
            raise ValueError(
                f"Unknown trigger reason '{triggered_by}' (expected one of {', '.join(TRIGGER_REASONS)})"
            )

        record = self.storage.create_execution(self._new_record(workflow, triggered_by))
        started = utc_now()
        logger.info(f"Starting execution {record['id']} of workflow {record['workflow_name']}")

        state = self.engine.create_state(trigger_data=trigger_data, execution_id=record['id'])
        results: List[NodeResult] = []
        updates: Dict[str, Any]

        with log_context(execution_id=record['id']):
            try:
                await self.engine.run(workflow, state=state, results=results)
                updates = {'status': 'success'}
            except Exception as e:
                error_msg = str(e) or type(e).__name__
                logger.error(f"Execution {record['id']} failed: {error_msg}")
                updates = {'status': 'failed', 'error': error_msg}

        ended = utc_now()
        updates.update({
            'end_time': ended.isoformat(),
            'duration': elapsed_ms(started, ended),
            'node_results': make_serializable(results),
        })

        updated = self.storage.update_execution(record['id'], updates)
        if updated is None:
            # Storage lost the record; still hand back the terminal view
            updated = {**record, **updates}

        logger.info(
            f"Execution {record['id']} finished with status {updates['status']} in {updates['duration']}ms"
        )
        return updated

    def run_sync(
        self,
        workflow: NodeGraph,
        triggered_by: str = 'manual',
        trigger_data: Any = None,
    ) -> ExecutionRecord:
        """Blocking wrapper around execute_workflow for CLI callers"""
        return asyncio.run(self.execute_workflow(workflow, triggered_by, trigger_data))
