"""Execution context helpers (current project, operation tracing)."""

from .operation_context import OperationContext, OperationHandler, operation
from .project_context import ProjectContext, project_aware, project_context

__all__ = [
    "OperationContext",
    "OperationHandler",
    "operation",
    "ProjectContext",
    "project_aware",
    "project_context",
]
