"""
Local JSON storage for solo mode
Stores data in ~/.flowline-core/data/ as JSON files
Only accessible to the local user
"""
import os
import json
from pathlib import Path
from typing import Dict, Any, List, Optional

from .base import StorageInterface
from ..core.types import ExecutionRecord, NodeGraph
from ..core.workflow import is_safe_id
from ..utils.logger import get_logger

logger = get_logger(__name__)


class LocalJSONStorage(StorageInterface):
    """Local JSON file storage for solo mode"""

    def __init__(self, storage_path: Optional[str] = None):
        """
        Initialize local JSON storage

        Args:
            storage_path: Base path for storage (default: ~/.flowline-core/data/)
        """
        if storage_path is None:
            home = Path.home()
            self.base_path = home / ".flowline-core" / "data"
        else:
            self.base_path = Path(storage_path)

        # Create directory structure
        self.workflows_path = self.base_path / "workflows"
        self.executions_path = self.base_path / "executions"
        self.data_store_file = self.base_path / "data_store.json"

        for path in [self.base_path, self.workflows_path, self.executions_path]:
            path.mkdir(parents=True, exist_ok=True)
            # Set file permissions (user only)
            os.chmod(path, 0o700)

    def _record_file(self, directory: Path, record_id: str) -> Path:
        """
        File path for a record id inside directory

        Raises:
            ValueError: if the id would resolve outside directory
        """
        if not is_safe_id(record_id):
            raise ValueError(f"Invalid record id: {record_id!r}")
        path = directory / f"{record_id}.json"
        if path.resolve().parent != directory.resolve():
            raise ValueError(f"Invalid record id: {record_id!r}")
        return path

    def _get_workflow_file(self, workflow_id: str) -> Path:
        """Get file path for a workflow definition"""
        return self._record_file(self.workflows_path, workflow_id)

    def _get_execution_file(self, execution_id: str) -> Path:
        """Get file path for an execution record"""
        return self._record_file(self.executions_path, execution_id)

    def _read_json(self, path: Path) -> Optional[Any]:
        if not path.exists():
            return None
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading {path}: {e}")
            return None

    def _write_json(self, path: Path, data: Any) -> None:
        with open(path, 'w') as f:
            json.dump(data, f, indent=2, default=str)
        os.chmod(path, 0o600)  # User read/write only

    # ------------------------------------------------------------------
    # Execution records
    # ------------------------------------------------------------------

    def create_execution(self, execution: ExecutionRecord) -> ExecutionRecord:
        self._write_json(self._get_execution_file(execution['id']), execution)
        logger.debug(f"Created execution {execution['id']}")
        return execution

    def update_execution(self, execution_id: str, updates: Dict[str, Any]) -> Optional[ExecutionRecord]:
        if not is_safe_id(execution_id):
            return None
        execution = self.get_execution(execution_id)
        if execution is None:
            logger.warning(f"Execution {execution_id} not found for update")
            return None

        execution.update(updates)
        self._write_json(self._get_execution_file(execution_id), execution)
        return execution

    def get_execution(self, execution_id: str) -> Optional[ExecutionRecord]:
        if not is_safe_id(execution_id):
            return None
        return self._read_json(self._get_execution_file(execution_id))

    def list_executions(self, workflow_id: Optional[str] = None, limit: int = 50) -> List[ExecutionRecord]:
        executions = []
        for path in self.executions_path.glob("*.json"):
            execution = self._read_json(path)
            if execution is None:
                continue
            if workflow_id and execution.get('workflow_id') != workflow_id:
                continue
            executions.append(execution)

        executions.sort(key=lambda e: e.get('start_time', ''), reverse=True)
        return executions[:limit] if limit else executions

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    def save_workflow(self, workflow: NodeGraph) -> NodeGraph:
        if not workflow.get('id'):
            raise ValueError("Workflow requires an id")
        self._write_json(self._get_workflow_file(workflow['id']), workflow)
        logger.debug(f"Saved workflow {workflow['id']}")
        return workflow

    def get_workflow(self, workflow_id: str) -> Optional[NodeGraph]:
        if not is_safe_id(workflow_id):
            return None
        return self._read_json(self._get_workflow_file(workflow_id))

    def list_workflows(self) -> List[NodeGraph]:
        workflows = []
        for path in sorted(self.workflows_path.glob("*.json")):
            workflow = self._read_json(path)
            if workflow is not None:
                workflows.append(workflow)
        return workflows

    def delete_workflow(self, workflow_id: str) -> bool:
        if not is_safe_id(workflow_id):
            return False
        workflow_file = self._get_workflow_file(workflow_id)
        if not workflow_file.exists():
            return False
        workflow_file.unlink()
        logger.debug(f"Deleted workflow {workflow_id}")
        return True

    # ------------------------------------------------------------------
    # Key/value data store
    # ------------------------------------------------------------------

    def _load_data_store(self) -> Dict[str, str]:
        return self._read_json(self.data_store_file) or {}

    def set_data_value(self, key: str, value: str) -> None:
        data = self._load_data_store()
        data[key] = value
        self._write_json(self.data_store_file, data)

    def get_data_value(self, key: str) -> Optional[str]:
        return self._load_data_store().get(key)
