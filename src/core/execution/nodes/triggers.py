"""
Trigger Nodes
Entry points of a run; they hand the trigger payload to the rest of the graph
"""
from datetime import datetime, timezone
from typing import Any, Dict, Type

from ..node_base import BaseNode, ExecutionState


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TriggerNode(BaseNode):
    """
    Starts a workflow run

    Outputs the trigger data the run was started with (webhook body,
    scheduler payload, manual input). Without trigger data it emits a
    `{triggered, timestamp}` marker, extended by payload() for trigger types
    that describe their event.
    """

    is_trigger = True
    description = "Starts a workflow run with the trigger payload"

    def payload(self, state: ExecutionState) -> Dict[str, Any]:
        """Type-specific fields of the default payload"""
        return {}

    def execute(self, state: ExecutionState) -> Any:
        if state.previous_output is not None:
            return state.previous_output

        output = {'triggered': True, 'timestamp': _now()}
        output.update(self.payload(state))
        return output


class EntitySignupTriggerNode(TriggerNode):
    """Fires when a customer or vendor registers"""

    description = "Starts a run when a new customer or vendor registers"

    def payload(self, state: ExecutionState) -> Dict[str, Any]:
        entity_type = self.config.get('entityType')
        return {
            'entityType': entity_type or 'both',
            'entity': {
                'id': state.execution_id or 'unknown',
                'type': entity_type or 'customer',
                'registeredAt': _now(),
            },
        }


class ExternalAlertTriggerNode(TriggerNode):
    """Fires on a threat or intelligence feed update"""

    description = "Starts a run when an external alert feed updates"

    def payload(self, state: ExecutionState) -> Dict[str, Any]:
        return {
            'alert': {
                'id': state.execution_id or 'unknown',
                'source': self.config.get('alertSource') or 'external-feed',
                'severity': self.config.get('severity') or 'medium',
                'title': 'External Alert Received',
                'description': 'Threat or intelligence feed update detected',
                'data': {},
            },
        }


class PeriodicDataPullTriggerNode(TriggerNode):
    """Fires on a refresh schedule for existing entities"""

    description = "Starts a periodic refresh of entity data"

    def payload(self, state: ExecutionState) -> Dict[str, Any]:
        entity_ids = self.config.get('entityIds') or []
        refreshed = _now()
        return {
            'pullConfig': {
                'cronExpression': self.config.get('cronExpression') or '0 */6 * * *',
                'entityIds': entity_ids,
                'dataSources': self.config.get('dataSources') or ['all'],
                # Minutes; 6 hours
                'pullInterval': self.config.get('pullInterval') or 360,
            },
            'entities': [{'id': entity_id, 'lastRefreshed': refreshed} for entity_id in entity_ids],
        }


TRIGGER_NODE_CLASSES: Dict[str, Type[TriggerNode]] = {
    "manual-trigger": TriggerNode,
    "webhook-trigger": TriggerNode,
    "schedule-trigger": TriggerNode,
    "entity-signup-trigger": EntitySignupTriggerNode,
    "external-alert-trigger": ExternalAlertTriggerNode,
    "periodic-data-pull-trigger": PeriodicDataPullTriggerNode,
}

TRIGGER_NODE_TYPES = tuple(TRIGGER_NODE_CLASSES)
