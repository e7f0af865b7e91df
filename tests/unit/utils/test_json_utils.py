"""
Tests for JSON utilities.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from global_connection_core.constants import AuthType
from global_connection_core.schemas.project_schemas import ProjectRead
from global_connection_core.utils.json_utils import dumps


class TestDumps:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (Decimal("10.5"), 10.5),
            (datetime(2024, 1, 2, 3, 4, 5), "2024-01-02T03:04:05"),
            (AuthType.SECRET_TEXT, "SECRET_TEXT"),
            ({"b", "a"}, ["a", "b"]),
        ],
    )
    def test_extended_types(self, value, expected):
        assert json.loads(dumps({"v": value})) == {"v": expected}

    def test_pydantic_models_use_wire_aliases(self):
        now = datetime.now(UTC)
        project = ProjectRead(
            id="p-1",
            platform_id="default",
            external_id="org_1",
            display_name="Org",
            created_at=now,
            updated_at=now,
        )

        data = json.loads(dumps(project))

        assert data["externalId"] == "org_1"

    def test_unknown_objects_still_fail(self):
        with pytest.raises(TypeError):
            dumps(object())
