"""
Project context management for plugin invocations.

The host sets the project external id for the duration of one plugin
invocation; the resolution client reads it back when the plugin does not pass
one explicitly.
"""

import threading
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Generator, Optional, Union

from ..exceptions import ErrorCode, ValidationError
from ..utils.logger import get_logger


class ProjectContext:
    """
    Manages the current project identity using thread-local storage.
    """

    _thread_local = threading.local()

    @classmethod
    def set_current_project(cls, project_external_id: str) -> None:
        """
        Set the current project external id for the execution context.

        Raises:
            ValidationError: If project_external_id is empty
        """
        if (
            not project_external_id
            or not isinstance(project_external_id, str)
            or not project_external_id.strip()
        ):
            raise ValidationError(
                "project_external_id must be a non-empty string",
                error_code=ErrorCode.MISSING_REQUIRED,
                field="project_external_id",
                value=project_external_id,
            )

        cls._thread_local.project_external_id = project_external_id.strip()
        get_logger().debug(f"Current project set to: {project_external_id}")

    @classmethod
    def get_current_project_external_id(cls) -> Optional[str]:
        """Current project external id or None if not set."""
        return getattr(cls._thread_local, "project_external_id", None)

    @classmethod
    def clear_current_project(cls) -> None:
        if hasattr(cls._thread_local, "project_external_id"):
            delattr(cls._thread_local, "project_external_id")
        get_logger().debug("Current project cleared")


@contextmanager
def project_context(project_external_id: str) -> Generator[None, None, None]:
    """
    Context manager binding a project to the current thread.

    Restores the previous project (or clears it) on exit.
    """
    previous_project = ProjectContext.get_current_project_external_id()
    ProjectContext.set_current_project(project_external_id)
    try:
        yield
    finally:
        if previous_project:
            ProjectContext.set_current_project(previous_project)
        else:
            ProjectContext.clear_current_project()


def project_aware(project_external_id: Union[Optional[str], Callable] = None):
    """
    Parameterized decorator that runs a function inside a project context.

    Uses the id passed to the decorator, else the one already in context.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            effective_id = project_external_id or ProjectContext.get_current_project_external_id()

            if effective_id and isinstance(effective_id, str):
                with project_context(effective_id):
                    return func(*args, **kwargs)

            raise ValidationError(
                "No project external id provided for project-aware function",
                error_code=ErrorCode.MISSING_REQUIRED,
                field="project_external_id",
            )

        return wrapper

    # Handle usage as @project_aware (without args)
    if callable(project_external_id):
        func = project_external_id
        project_external_id = None
        return decorator(func)

    return decorator
