"""
HTTP Request Node
Calls an external HTTP API
"""
import asyncio
import json
from typing import Any, Dict

import requests

from config import Config
from ..node_base import BaseNode, ExecutionState
from ..expressions import interpolate_variables
from ....utils.logger import get_logger

logger = get_logger(__name__)

BODY_METHODS = ('POST', 'PUT', 'PATCH')


class HttpRequestNode(BaseNode):
    """
    Makes an HTTP request and outputs the response

    Config:
        url: Request URL, templates allowed (required)
        method: HTTP method (default GET)
        headers: Extra request headers
        body: Request body for POST/PUT/PATCH; sent as JSON when it parses
        auth: {"type": "basic", "username", "password"} or
            {"type": "bearer", "token"}

    Output:
        {status, statusText, headers, data}; non-2xx responses add
        "error": True instead of failing the node. Network errors fail it.
    """

    description = "Call an HTTP endpoint"

    def validate(self) -> None:
        self.require('url', 'HTTP Request node requires a URL')

    def build_request(self, state: ExecutionState) -> Dict[str, Any]:
        method = (self.config.get('method') or 'GET').upper()
        request: Dict[str, Any] = {
            'method': method,
            'url': interpolate_variables(self.config['url'], state),
            'headers': dict(self.config.get('headers') or {}),
            'timeout': Config.HTTP_TIMEOUT,
        }

        body = self.config.get('body')
        if body and method in BODY_METHODS:
            if isinstance(body, str):
                text = interpolate_variables(body, state)
                try:
                    request['json'] = json.loads(text)
                except ValueError:
                    request['data'] = text
            else:
                request['json'] = body

        auth = self.config.get('auth') or {}
        if auth.get('type') == 'basic' and auth.get('username') and auth.get('password'):
            request['auth'] = (auth['username'], auth['password'])
        elif auth.get('type') == 'bearer' and auth.get('token'):
            request['headers']['Authorization'] = f"Bearer {auth['token']}"

        return request

    async def execute(self, state: ExecutionState) -> Dict[str, Any]:
        request = self.build_request(state)
        logger.info(f"{request['method']} {request['url']}")

        # requests is blocking; keep the event loop free while it runs
        response = await asyncio.to_thread(requests.request, **request)

        try:
            data = response.json()
        except ValueError:
            data = response.text

        output = {
            'status': response.status_code,
            'statusText': response.reason,
            'headers': dict(response.headers),
            'data': data,
        }
        if not response.ok:
            logger.warning(f"HTTP request returned {response.status_code} for {request['url']}")
            output['error'] = True
        return output
