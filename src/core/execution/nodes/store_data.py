"""
Store Data Node
Persists a value in the storage backend's key/value data store
"""
import json
from typing import Any, Dict

from ..node_base import BaseNode, ExecutionState
from ..expressions import interpolate_variables


class StoreDataNode(BaseNode):
    """
    Config:
        key: Data store key, templates allowed (required)
        value: Value to store; interpolated and parsed as JSON when possible.
            Defaults to the previous output.
    """

    description = "Save a value to the data store"

    def validate(self) -> None:
        self.require('key', 'Store Data node requires a key')

    def execute(self, state: ExecutionState) -> Dict[str, Any]:
        storage = getattr(state.container, 'storage', None)
        if storage is None:
            raise RuntimeError('Store Data node requires a storage backend')

        key = interpolate_variables(str(self.config['key']), state)

        raw = self.config.get('value')
        if raw:
            value: Any = interpolate_variables(raw, state) if isinstance(raw, str) else raw
            if isinstance(value, str):
                try:
                    value = json.loads(value)
                except ValueError:
                    pass
        else:
            value = state.previous_output

        stored = value if isinstance(value, str) else json.dumps(value, default=str)
        storage.set_data_value(key, stored)

        return {
            'stored': True,
            'key': key,
            'value': value,
            'previousData': state.previous_output,
        }
