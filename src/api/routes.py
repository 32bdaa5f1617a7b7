"""
API routes for Flowline Core
"""
from fastapi import APIRouter, HTTPException, Depends, Request
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List, Literal

from config import Config
from ..core.container import ServiceContainer
from ..core.execution.node_registry import list_node_types
from ..core.execution.runner import WorkflowRunner
from ..core.workflow import WorkflowFormatError, parse_workflow

router = APIRouter()


# Request/Response models
class WorkflowModel(BaseModel):
    """Workflow definition as sent by the editor"""
    id: str = Field(..., description="Workflow identifier")
    name: str = Field(default="", description="Display name")
    nodes: List[Dict[str, Any]] = Field(default_factory=list, description="Node definitions")
    edges: List[Dict[str, Any]] = Field(default_factory=list, description="Edge definitions")
    description: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    def to_graph(self) -> Dict[str, Any]:
        """Validate and normalize into a NodeGraph"""
        return parse_workflow(self.model_dump(exclude_none=True))


class ExecuteRequest(BaseModel):
    """Request model for executing a saved workflow"""
    triggered_by: Literal["manual", "webhook", "schedule"] = Field(
        default="manual",
        description="Why the run was started"
    )
    trigger_data: Optional[Any] = Field(
        default=None,
        description="Payload handed to the trigger node"
    )


class ExecuteWorkflowRequest(ExecuteRequest):
    """Request model for executing an inline workflow"""
    workflow: WorkflowModel


def get_container(request: Request) -> ServiceContainer:
    """Get ServiceContainer from app state (injected by FastAPI)"""
    return request.app.state.container


def get_runner(container: ServiceContainer = Depends(get_container)) -> WorkflowRunner:
    return WorkflowRunner(container.storage, container=container)


def _to_graph(workflow: WorkflowModel) -> Dict[str, Any]:
    try:
        return workflow.to_graph()
    except WorkflowFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/health")
async def health(container: ServiceContainer = Depends(get_container)):
    """Health check"""
    return {
        "status": "healthy",
        "mode": container.mode,
        "storage": type(container.storage).__name__,
    }


@router.get("/node-types")
async def node_types():
    """List registered node types"""
    return {"node_types": list_node_types()}


# Workflow Endpoints
@router.get("/workflows")
async def list_workflows(container: ServiceContainer = Depends(get_container)):
    return {"workflows": container.storage.list_workflows()}


@router.post("/workflows")
async def save_workflow(workflow: WorkflowModel, container: ServiceContainer = Depends(get_container)):
    """Create or replace a workflow definition"""
    return container.storage.save_workflow(_to_graph(workflow))


@router.get("/workflows/{workflow_id}")
async def get_workflow(workflow_id: str, container: ServiceContainer = Depends(get_container)):
    workflow = container.storage.get_workflow(workflow_id)
    if workflow is None:
        raise HTTPException(status_code=404, detail=f"Workflow {workflow_id} not found")
    return workflow


@router.delete("/workflows/{workflow_id}")
async def delete_workflow(workflow_id: str, container: ServiceContainer = Depends(get_container)):
    if not container.storage.delete_workflow(workflow_id):
        raise HTTPException(status_code=404, detail=f"Workflow {workflow_id} not found")
    return {"deleted": True, "id": workflow_id}


# Execution Endpoints
@router.post("/workflows/{workflow_id}/execute")
async def execute_saved_workflow(
    workflow_id: str,
    request: Optional[ExecuteRequest] = None,
    container: ServiceContainer = Depends(get_container),
    runner: WorkflowRunner = Depends(get_runner),
):
    """Execute a saved workflow and return its execution record"""
    workflow = container.storage.get_workflow(workflow_id)
    if workflow is None:
        raise HTTPException(status_code=404, detail=f"Workflow {workflow_id} not found")

    request = request or ExecuteRequest()
    return await runner.execute_workflow(
        workflow,
        triggered_by=request.triggered_by,
        trigger_data=request.trigger_data,
    )


@router.post("/execute")
async def execute_workflow(request: ExecuteWorkflowRequest, runner: WorkflowRunner = Depends(get_runner)):
    """Execute an inline workflow without saving it"""
    return await runner.execute_workflow(
        _to_graph(request.workflow),
        triggered_by=request.triggered_by,
        trigger_data=request.trigger_data,
    )


@router.get("/executions")
async def list_executions(
    workflow_id: Optional[str] = None,
    limit: int = 50,
    container: ServiceContainer = Depends(get_container),
):
    return {"executions": container.storage.list_executions(workflow_id=workflow_id, limit=limit)}


@router.get("/executions/{execution_id}")
async def get_execution(execution_id: str, container: ServiceContainer = Depends(get_container)):
    execution = container.storage.get_execution(execution_id)
    if execution is None:
        raise HTTPException(status_code=404, detail=f"Execution {execution_id} not found")
    return execution


@router.get("/config")
async def config_summary():
    """Non-secret runtime settings"""
    return {
        "mode": Config.MODE,
        "wait_max_seconds": Config.WAIT_MAX_SECONDS,
        "max_node_visits": Config.MAX_NODE_VISITS,
        "http_timeout": Config.HTTP_TIMEOUT,
    }
