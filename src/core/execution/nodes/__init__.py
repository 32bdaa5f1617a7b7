"""
Node implementations for execution engine
"""
from .triggers import (
    TriggerNode,
    EntitySignupTriggerNode,
    ExternalAlertTriggerNode,
    PeriodicDataPullTriggerNode,
    TRIGGER_NODE_CLASSES,
    TRIGGER_NODE_TYPES,
)
from .condition import ConditionNode
from .switch import SwitchNode
from .loop import LoopNode
from .merge import MergeNode
from .set_variable import SetVariableNode
from .wait import WaitNode
from .filter import FilterNode
from .sort import SortNode
from .http_request import HttpRequestNode
from .store_data import StoreDataNode
from .webhook_response import WebhookResponseNode

__all__ = [
    'TriggerNode',
    'EntitySignupTriggerNode',
    'ExternalAlertTriggerNode',
    'PeriodicDataPullTriggerNode',
    'TRIGGER_NODE_CLASSES',
    'TRIGGER_NODE_TYPES',
    'ConditionNode',
    'SwitchNode',
    'LoopNode',
    'MergeNode',
    'SetVariableNode',
    'WaitNode',
    'FilterNode',
    'SortNode',
    'HttpRequestNode',
    'StoreDataNode',
    'WebhookResponseNode',
]
