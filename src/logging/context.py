# src/logging/context.py - v2
"""Contextual logging support: attach workspace, path and operation to records."""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

_workspace: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "workspace", default=None
)
_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "path", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    workspace: str | None = None
    path: str | None = None
    operation: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        workspace=_workspace.get(),
        path=_path.get(),
        operation=_operation.get(),
    )


def set_workspace_context(workspace: str | None) -> None:
    """Set the workspace root (called once by the composition root)."""
    _workspace.set(workspace)


@contextmanager
def operation_context(operation: str, path: str | None = None) -> Iterator[None]:
    """Scope an operation (and optionally the file it concerns) to a block."""
    op_token = _operation.set(operation)
    path_token = _path.set(path)
    try:
        yield
    finally:
        _path.reset(path_token)
        _operation.reset(op_token)


def clear_context() -> None:
    """Reset all context variables."""
    _workspace.set(None)
    _path.set(None)
    _operation.set(None)
