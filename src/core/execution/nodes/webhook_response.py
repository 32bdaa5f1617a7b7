"""
Webhook Response Node
Describes the HTTP response returned to a webhook caller
"""
from typing import Any, Dict

from ..node_base import BaseNode, ConfigurationError, ExecutionState
from ..expressions import interpolate_variables


class WebhookResponseNode(BaseNode):
    """
    Config:
        statusCode: HTTP status code (required)
        headers: Response headers
        body: Response body, templates allowed
    """

    description = "Respond to the webhook caller"

    def validate(self) -> None:
        if self.config.get('statusCode') is None:
            raise ConfigurationError('Webhook Response node requires a status code')

    def execute(self, state: ExecutionState) -> Dict[str, Any]:
        body = self.config.get('body') or ''
        return {
            'statusCode': self.config['statusCode'] or 200,
            'headers': self.config.get('headers') or {},
            'body': interpolate_variables(body, state) if isinstance(body, str) else body,
            'responded': True,
        }
