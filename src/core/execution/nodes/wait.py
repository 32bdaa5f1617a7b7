"""
Wait Node
Pauses the run for a bounded duration
"""
import asyncio
from datetime import datetime, timezone
from typing import Any, Dict

from config import Config
from ..node_base import BaseNode, ConfigurationError, ExecutionState
from ..expressions import to_number
from ....utils.logger import get_logger

logger = get_logger(__name__)

UNIT_MILLISECONDS = {
    'milliseconds': 1,
    'ms': 1,
    'seconds': 1000,
    'minutes': 60 * 1000,
    'hours': 60 * 60 * 1000,
}


class WaitNode(BaseNode):
    """
    Sleeps without blocking the event loop

    Config:
        duration: Amount of time to wait
        unit: milliseconds (default), seconds, minutes or hours
    """

    description = "Delay the run"

    def milliseconds(self) -> float:
        duration = to_number(self.config.get('duration') or 0)
        unit = self.config.get('unit') or 'milliseconds'
        if unit not in UNIT_MILLISECONDS:
            raise ConfigurationError(f"Wait node has unsupported unit '{unit}'")
        if duration != duration or duration < 0:
            raise ConfigurationError('Wait duration must be a non-negative number')
        return duration * UNIT_MILLISECONDS[unit]

    def validate(self) -> None:
        if self.milliseconds() > Config.WAIT_MAX_SECONDS * 1000:
            raise ConfigurationError('Wait duration cannot exceed 1 hour')

    async def execute(self, state: ExecutionState) -> Dict[str, Any]:
        milliseconds = self.milliseconds()
        logger.info(f"Waiting {milliseconds:g}ms")

        await asyncio.sleep(milliseconds / 1000)

        previous = state.previous_output if isinstance(state.previous_output, dict) else {}
        waited = int(milliseconds) if float(milliseconds).is_integer() else milliseconds
        return {
            **previous,
            'waited': waited,
            'resumed': datetime.now(timezone.utc).isoformat(),
        }
