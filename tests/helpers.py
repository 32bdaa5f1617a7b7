"""
Workflow builders shared by the engine, runner and API tests
"""
import asyncio
from typing import Any, Dict, List, Optional, Tuple

from src.core.execution.engine import ExecutionEngine
from src.core.execution.node_base import ExecutionState
from src.core.execution.node_registry import register_executor


def node(node_id: str, node_type: str, **config) -> Dict[str, Any]:
    return {
        'id': node_id,
        'type': node_type,
        'position': {'x': 0, 'y': 0},
        'data': {'label': node_id, 'config': config},
    }


def edge(source: str, target: str, handle: Optional[str] = None) -> Dict[str, Any]:
    data = {'id': f'{source}->{target}', 'source': source, 'target': target}
    if handle is not None:
        data['sourceHandle'] = handle
    return data


def workflow(nodes: List[Dict[str, Any]], edges: List[Dict[str, Any]], workflow_id: str = 'wf-test') -> Dict[str, Any]:
    return {'id': workflow_id, 'name': 'Test Workflow', 'nodes': nodes, 'edges': edges}


def run_workflow(
    graph: Dict[str, Any],
    trigger_data: Any = None,
    engine: Optional[ExecutionEngine] = None,
) -> Tuple[List[Dict[str, Any]], ExecutionState]:
    """Run a workflow to completion, returning (node results, final state)"""
    engine = engine or ExecutionEngine()
    state = engine.create_state(trigger_data=trigger_data)
    results = asyncio.run(engine.run(graph, state=state))
    return results, state


def executed(results: List[Dict[str, Any]]) -> List[str]:
    return [result['node_id'] for result in results]


def output_of(results: List[Dict[str, Any]], node_id: str) -> Any:
    matches = [result['output'] for result in results if result['node_id'] == node_id]
    assert len(matches) == 1, f"{node_id} ran {len(matches)} times"
    return matches[0]


# Test-only node types: emit a configured value, or fail at runtime
def _emit(config, state):
    """Emit the configured value"""
    return config.get('value')


def _explode(config, state):
    """Raise a runtime error"""
    raise RuntimeError(config.get('message', 'boom'))


async def _emit_later(config, state):
    """Emit the configured value after yielding to the event loop"""
    await asyncio.sleep(0)
    return config.get('value')


def _route(config, state):
    """Route to the configured branch"""
    return {'output': state.previous_output, 'branch': config['branch']}


register_executor('test-emit', _emit)
register_executor('test-explode', _explode)
register_executor('test-emit-async', _emit_later)
register_executor('test-route', _route, branching=True)
