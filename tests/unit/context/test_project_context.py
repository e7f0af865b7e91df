"""
Tests for thread-local project context.
"""

import threading

import pytest

from global_connection_core.context.project_context import (
    ProjectContext,
    project_aware,
    project_context,
)
from global_connection_core.exceptions import ValidationError
from global_connection_core.runtime.connections import ProjectIdentity


class TestProjectContext:
    def test_set_and_clear(self):
        ProjectContext.set_current_project(" org_1 ")
        assert ProjectContext.get_current_project_external_id() == "org_1"

        ProjectContext.clear_current_project()
        assert ProjectContext.get_current_project_external_id() is None

    @pytest.mark.parametrize("value", ["", "   ", None, 42])
    def test_invalid_values_are_rejected(self, value):
        with pytest.raises(ValidationError):
            ProjectContext.set_current_project(value)

    def test_context_manager_restores_previous(self):
        with project_context("org_outer"):
            with project_context("org_inner"):
                assert ProjectContext.get_current_project_external_id() == "org_inner"
            assert ProjectContext.get_current_project_external_id() == "org_outer"
        assert ProjectContext.get_current_project_external_id() is None

    def test_context_is_thread_local(self):
        seen = []

        def worker():
            seen.append(ProjectContext.get_current_project_external_id())

        with project_context("org_main"):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()

        assert seen == [None]

    def test_project_identity_from_context(self):
        assert ProjectIdentity.from_context().external_id() is None
        with project_context("org_1"):
            assert ProjectIdentity.from_context().external_id() == "org_1"


class TestProjectAware:
    def test_decorator_with_explicit_project(self):
        @project_aware("org_fixed")
        def current():
            return ProjectContext.get_current_project_external_id()

        assert current() == "org_fixed"
        assert ProjectContext.get_current_project_external_id() is None

    def test_decorator_without_project_requires_context(self):
        @project_aware
        def current():
            return ProjectContext.get_current_project_external_id()

        with pytest.raises(ValidationError):
            current()
        with project_context("org_ctx"):
            assert current() == "org_ctx"
