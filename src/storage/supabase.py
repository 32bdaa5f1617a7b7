"""
Supabase storage for prod mode
Direct Supabase connection to the workflows, executions and data_store tables
"""
from typing import Dict, Any, List, Optional

from supabase import create_client, Client

from .base import StorageInterface
from ..core.types import ExecutionRecord, NodeGraph
from ..utils.logger import get_logger

logger = get_logger(__name__)


class SupabaseStorage(StorageInterface):
    """Supabase storage for prod mode"""

    def __init__(self, supabase_url: str, supabase_key: str, client: Optional[Client] = None):
        """
        Initialize Supabase storage

        Args:
            supabase_url: Supabase project URL
            supabase_key: Supabase service role key
            client: Pre-built client (skips create_client)
        """
        self.client: Client = client if client is not None else create_client(supabase_url, supabase_key)

    # ------------------------------------------------------------------
    # Execution records
    # ------------------------------------------------------------------

    def create_execution(self, execution: ExecutionRecord) -> ExecutionRecord:
        try:
            result = self.client.table('executions').insert(dict(execution)).execute()
        except Exception as e:
            logger.error(f"Error creating execution {execution['id']}: {e}")
            raise
        return result.data[0] if result.data else execution

    def update_execution(self, execution_id: str, updates: Dict[str, Any]) -> Optional[ExecutionRecord]:
        try:
            result = self.client.table('executions').update(updates).eq('id', execution_id).execute()
        except Exception as e:
            logger.error(f"Error updating execution {execution_id}: {e}")
            raise
        return result.data[0] if result.data else None

    def get_execution(self, execution_id: str) -> Optional[ExecutionRecord]:
        try:
            result = self.client.table('executions').select('*').eq('id', execution_id).limit(1).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"Error getting execution {execution_id}: {e}")
            return None

    def list_executions(self, workflow_id: Optional[str] = None, limit: int = 50) -> List[ExecutionRecord]:
        try:
            query = self.client.table('executions').select('*')
            if workflow_id:
                query = query.eq('workflow_id', workflow_id)
            result = query.order('start_time', desc=True).limit(limit).execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Error listing executions: {e}")
            return []

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    def save_workflow(self, workflow: NodeGraph) -> NodeGraph:
        if not workflow.get('id'):
            raise ValueError("Workflow requires an id")
        row = {
            'id': workflow['id'],
            'name': workflow.get('name', workflow['id']),
            'definition': dict(workflow),
        }
        try:
            self.client.table('workflows').upsert(row).execute()
        except Exception as e:
            logger.error(f"Error saving workflow {workflow['id']}: {e}")
            raise
        return workflow

    def get_workflow(self, workflow_id: str) -> Optional[NodeGraph]:
        try:
            result = self.client.table('workflows').select('definition').eq('id', workflow_id).limit(1).execute()
            return result.data[0]['definition'] if result.data else None
        except Exception as e:
            logger.error(f"Error getting workflow {workflow_id}: {e}")
            return None

    def list_workflows(self) -> List[NodeGraph]:
        try:
            result = self.client.table('workflows').select('definition').order('name').execute()
            return [row['definition'] for row in result.data or []]
        except Exception as e:
            logger.error(f"Error listing workflows: {e}")
            return []

    def delete_workflow(self, workflow_id: str) -> bool:
        try:
            result = self.client.table('workflows').delete().eq('id', workflow_id).execute()
            return bool(result.data)
        except Exception as e:
            logger.error(f"Error deleting workflow {workflow_id}: {e}")
            return False

    # ------------------------------------------------------------------
    # Key/value data store
    # ------------------------------------------------------------------

    def set_data_value(self, key: str, value: str) -> None:
        self.client.table('data_store').upsert({'key': key, 'value': value}).execute()

    def get_data_value(self, key: str) -> Optional[str]:
        try:
            result = self.client.table('data_store').select('value').eq('key', key).limit(1).execute()
            return result.data[0]['value'] if result.data else None
        except Exception as e:
            logger.error(f"Error getting data value {key}: {e}")
            return None
