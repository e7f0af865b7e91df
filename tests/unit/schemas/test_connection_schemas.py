"""
Tests for the tagged credential value schemas.
"""

import pytest

from global_connection_core.constants import AuthType
from global_connection_core.exceptions import ErrorCode, ValidationError
from global_connection_core.schemas.connection_schemas import (
    BasicAuthValue,
    CustomAuthValue,
    PieceAuth,
    PlatformOAuth2Value,
    SecretTextValue,
    deserialize_value,
    parse_credential_value,
    serialize_value,
)


class TestParseCredentialValue:
    @pytest.mark.parametrize(
        "data,expected_class",
        [
            ({"type": "SECRET_TEXT", "secret_text": "sk_1"}, SecretTextValue),
            ({"type": "BASIC_AUTH", "username": "u", "password": "p"}, BasicAuthValue),
            ({"type": "CUSTOM_AUTH", "props": {"apiKey": "x"}}, CustomAuthValue),
            (
                {"type": "PLATFORM_OAUTH2", "access_token": "at", "client_id": "cid"},
                PlatformOAuth2Value,
            ),
        ],
    )
    def test_dispatches_on_type(self, data, expected_class):
        assert isinstance(parse_credential_value(data), expected_class)

    def test_type_is_taken_from_auth_type_when_missing(self):
        value = parse_credential_value({"secret_text": "sk_1"}, AuthType.SECRET_TEXT)

        assert value.type == "SECRET_TEXT"

    def test_tag_mismatch_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_credential_value({"type": "SECRET_TEXT", "secret_text": "sk"}, AuthType.BASIC_AUTH)

        assert exc_info.value.error_code == ErrorCode.TYPE_MISMATCH

    @pytest.mark.parametrize(
        "data",
        [
            {"type": "UNKNOWN", "x": 1},
            {"type": "CUSTOM_AUTH", "props": {}},
            {"type": "SECRET_TEXT", "secret_text": " padded "},
            {"type": "BASIC_AUTH", "username": "u"},
            {"type": "BASIC_AUTH", "username": "u", "password": "p", "extra": True},
            {"type": "PLATFORM_OAUTH2", "access_token": "at", "client_id": "c", "token_type": "MAC"},
        ],
    )
    def test_malformed_values_are_rejected(self, data):
        with pytest.raises(ValidationError) as exc_info:
            parse_credential_value(data)

        assert exc_info.value.error_code == ErrorCode.INVALID_FORMAT

    def test_validation_error_does_not_echo_secret(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_credential_value({"type": "SECRET_TEXT", "secret_text": " leaked-secret "})

        assert "leaked-secret" not in str(exc_info.value.to_dict())


class TestSecretRedaction:
    @pytest.mark.parametrize(
        "value,secret",
        [
            (SecretTextValue(secret_text="sk_live_abc"), "sk_live_abc"),
            (BasicAuthValue(username="u", password="hunter2"), "hunter2"),
            (CustomAuthValue(props={"apiKey": "key-123"}), "key-123"),
            (PlatformOAuth2Value(access_token="tok-456", client_id="cid"), "tok-456"),
        ],
    )
    def test_repr_hides_secret(self, value, secret):
        assert secret not in repr(value)


class TestStoredValues:
    def test_deserialize_checks_auth_type(self):
        stored = serialize_value(SecretTextValue(secret_text="sk"))

        assert deserialize_value(stored, AuthType.SECRET_TEXT).secret_text == "sk"
        with pytest.raises(ValidationError) as exc_info:
            deserialize_value(stored, AuthType.CUSTOM_AUTH)
        assert exc_info.value.error_code == ErrorCode.TYPE_MISMATCH

    def test_deserialize_rejects_unparseable_payload(self):
        with pytest.raises(ValidationError) as exc_info:
            deserialize_value("not json", AuthType.SECRET_TEXT)

        assert exc_info.value.error_code == ErrorCode.TYPE_MISMATCH


class TestPieceAuth:
    def test_check_passes_for_matching_shape(self):
        auth = PieceAuth(auth_type=AuthType.CUSTOM_AUTH, required_props=["apiKey"])
        value = CustomAuthValue(props={"apiKey": "x"})

        assert auth.check(value) is value

    def test_check_rejects_missing_prop(self):
        auth = PieceAuth(auth_type=AuthType.CUSTOM_AUTH, required_props=["apiKey", "storeId"])

        with pytest.raises(ValidationError) as exc_info:
            auth.check(CustomAuthValue(props={"apiKey": "x"}))

        assert exc_info.value.context["missing_props"] == ["storeId"]

    def test_check_rejects_wrong_tag(self):
        auth = PieceAuth(auth_type=AuthType.BASIC_AUTH)

        with pytest.raises(ValidationError) as exc_info:
            auth.check(SecretTextValue(secret_text="sk"))

        assert exc_info.value.error_code == ErrorCode.TYPE_MISMATCH

    def test_check_fields_of_non_custom_values(self):
        auth = PieceAuth(auth_type=AuthType.PLATFORM_OAUTH2, required_props=["refresh_token"])

        with pytest.raises(ValidationError):
            auth.check(PlatformOAuth2Value(access_token="at", client_id="cid"))
