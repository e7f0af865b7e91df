"""
Tests for the connection naming convention.
"""

import pytest

from global_connection_core.config import NamingConfig
from global_connection_core.exceptions import ValidationError
from global_connection_core.runtime.naming import NamingConvention, build_connection_external_id


class TestBuildConnectionExternalId:
    @pytest.mark.parametrize(
        "prefix,project_external_id,expected",
        [
            ("gelato", "org_1234", "gelato_org_1234"),
            ("slack", "acme", "slack_acme"),
            (" gelato ", " org_1 ", "gelato_org_1"),
        ],
    )
    def test_joins_with_underscore(self, prefix, project_external_id, expected):
        assert build_connection_external_id(prefix, project_external_id) == expected

    @pytest.mark.parametrize("prefix,project_external_id", [("", "org_1"), ("gelato", ""), ("  ", "x")])
    def test_empty_parts_are_rejected(self, prefix, project_external_id):
        with pytest.raises(ValidationError):
            build_connection_external_id(prefix, project_external_id)


class TestNamingConvention:
    def test_prefix_lookup(self, naming, gelato_piece):
        assert naming.prefix_for(gelato_piece) == "gelato"
        assert naming.external_id_for(gelato_piece, "org_1234") == "gelato_org_1234"

    def test_unknown_piece_is_rejected(self, naming):
        with pytest.raises(ValidationError) as exc_info:
            naming.prefix_for("@activepieces/piece-unknown")

        assert exc_info.value.context["piece_name"] == "@activepieces/piece-unknown"

    def test_defaults_to_shared_configuration(self, app_config, gelato_piece):
        app_config.naming = NamingConfig(piece_prefixes={gelato_piece: "gelato"})

        assert NamingConvention().external_id_for(gelato_piece, "org_1") == "gelato_org_1"

    def test_prefixes_parsed_from_environment(self, monkeypatch, gelato_piece):
        monkeypatch.setenv(
            "PIECE_CONNECTION_PREFIXES", f"{gelato_piece}=gelato, @activepieces/piece-slack=slack"
        )

        config = NamingConfig()

        assert config.piece_prefixes == {
            gelato_piece: "gelato",
            "@activepieces/piece-slack": "slack",
        }
