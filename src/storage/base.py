"""
Abstract storage interface for Flowline Core
Supports both solo mode (local JSON) and prod mode (Supabase)
"""
from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional

from ..core.types import ExecutionRecord, NodeGraph


class StorageInterface(ABC):
    """Abstract interface for storage backends"""

    # ------------------------------------------------------------------
    # Execution records
    # ------------------------------------------------------------------

    @abstractmethod
    def create_execution(self, execution: ExecutionRecord) -> ExecutionRecord:
        """Persist a new execution record (status "running") and return it"""
        pass

    @abstractmethod
    def update_execution(self, execution_id: str, updates: Dict[str, Any]) -> Optional[ExecutionRecord]:
        """
        Apply updates to an execution record

        Args:
            execution_id: Record to update
            updates: Fields to overwrite (status, end_time, duration, node_results, error)

        Returns:
            The updated record, or None if it does not exist
        """
        pass

    @abstractmethod
    def get_execution(self, execution_id: str) -> Optional[ExecutionRecord]:
        """Get a single execution record"""
        pass

    @abstractmethod
    def list_executions(self, workflow_id: Optional[str] = None, limit: int = 50) -> List[ExecutionRecord]:
        """List execution records, newest first, optionally for one workflow"""
        pass

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    @abstractmethod
    def save_workflow(self, workflow: NodeGraph) -> NodeGraph:
        """Create or replace a workflow definition (keyed by its id)"""
        pass

    @abstractmethod
    def get_workflow(self, workflow_id: str) -> Optional[NodeGraph]:
        """Get a workflow definition"""
        pass

    @abstractmethod
    def list_workflows(self) -> List[NodeGraph]:
        """List all workflow definitions"""
        pass

    @abstractmethod
    def delete_workflow(self, workflow_id: str) -> bool:
        """
        Delete a workflow definition

        Returns:
            True if a workflow was deleted, False if it did not exist
        """
        pass

    # ------------------------------------------------------------------
    # Key/value data store (written by store-data nodes)
    # ------------------------------------------------------------------

    @abstractmethod
    def set_data_value(self, key: str, value: str) -> None:
        """Store a string value under a key"""
        pass

    @abstractmethod
    def get_data_value(self, key: str) -> Optional[str]:
        """Get the string value stored under a key"""
        pass
