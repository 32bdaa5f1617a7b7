"""
Logging for Flowline Core
Module loggers share one stdout handler; records carry the execution and
node they were emitted under
"""
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from config import Config

ROOT_LOGGER = "flowline_core"
DEFAULT_FORMAT = "[%(levelname)s] %(name)s%(run_context)s: %(message)s"

_execution_id: ContextVar[Optional[str]] = ContextVar("flowline_execution_id", default=None)
_node_id: ContextVar[Optional[str]] = ContextVar("flowline_node_id", default=None)


class RunContextFilter(logging.Filter):
    """Stamps records with the current execution and node ids"""

    def filter(self, record: logging.LogRecord) -> bool:
        execution_id = _execution_id.get()
        node_id = _node_id.get()
        record.execution_id = execution_id
        record.node_id = node_id

        parts = []
        if execution_id:
            parts.append(f"run={execution_id[:8]}")
        if node_id:
            parts.append(f"node={node_id}")
        record.run_context = f" [{' '.join(parts)}]" if parts else ""
        return True


@contextmanager
def log_context(execution_id: Optional[str] = None, node_id: Optional[str] = None) -> Iterator[None]:
    """
    Tag every record logged inside the block with a run and/or node

    Values not given keep whatever the enclosing block set.
    """
    tokens = []
    if execution_id is not None:
        tokens.append((_execution_id, _execution_id.set(execution_id)))
    if node_id is not None:
        tokens.append((_node_id, _node_id.set(node_id)))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def setup_logger(
    name: str = ROOT_LOGGER,
    level: Optional[int] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Set up a logger with the run-context format

    Args:
        name: Logger name (default: "flowline_core")
        level: Log level (default: INFO, or DEBUG if Config.DEBUG is True)
        format_string: Custom format string (optional)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    if level is None:
        level = logging.DEBUG if Config.DEBUG else logging.INFO
    logger.setLevel(level)
    logger.addFilter(RunContextFilter())

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    logger.addHandler(handler)

    # Keep engine output off the root logger (uvicorn configures its own)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, named flowline_core.<last component of name>"""
    return setup_logger(f"{ROOT_LOGGER}.{name.rsplit('.', 1)[-1]}")
