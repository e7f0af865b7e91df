"""
Tests for the exception hierarchy.
"""

import pytest

from global_connection_core.exceptions import (
    AuthenticationError,
    BaseError,
    ConflictError,
    ConnectionNotFoundError,
    ErrorCode,
    MissingTenantIdentityError,
    NotFoundError,
    RepositoryError,
    ServiceError,
    TransportError,
    ValidationError,
    clear_correlation_id,
    duplicate,
    get_correlation_id,
    not_found,
    set_correlation_id,
)


class TestErrorTaxonomy:
    @pytest.mark.parametrize(
        "error,status_code,error_code",
        [
            (ValidationError("bad"), 400, ErrorCode.VALIDATION_FAILED),
            (ConflictError(), 409, ErrorCode.DUPLICATE),
            (NotFoundError(), 404, ErrorCode.NOT_FOUND),
            (ConnectionNotFoundError(external_id="gelato_org_1"), 404, ErrorCode.NOT_FOUND),
            (MissingTenantIdentityError(), 500, ErrorCode.CONFIGURATION_ERROR),
            (TransportError(), 503, ErrorCode.CONNECTION_ERROR),
            (AuthenticationError(), 401, ErrorCode.UNAUTHENTICATED),
            (ServiceError("oops"), 500, ErrorCode.INTERNAL_ERROR),
        ],
    )
    def test_status_and_error_codes(self, error, status_code, error_code):
        assert isinstance(error, BaseError)
        assert error.status_code == status_code
        assert error.error_code == error_code

    def test_store_errors_share_repository_base(self):
        for error in (ConflictError(), NotFoundError(), TransportError()):
            assert isinstance(error, RepositoryError)

    def test_connection_not_found_names_external_id(self):
        error = ConnectionNotFoundError(external_id="gelato_org_9999")

        assert error.external_id == "gelato_org_9999"
        assert "gelato_org_9999" in str(error)
        assert error.context["connection_external_id"] == "gelato_org_9999"
        assert isinstance(error, NotFoundError)

    def test_transport_error_accepts_timeout_code(self):
        error = TransportError("timed out", error_code=ErrorCode.TIMEOUT_ERROR)

        assert error.error_code == ErrorCode.TIMEOUT_ERROR
        assert error.status_code == 503


class TestErrorSerialization:
    def test_to_dict(self):
        error = ValidationError("bad input", field="external_id")

        data = error.to_dict()

        assert data["error"]["code"] == ErrorCode.VALIDATION_FAILED.value
        assert data["error"]["message"] == "bad input"
        assert data["error"]["context"]["field"] == "external_id"
        assert "cause" not in data["error"]

    def test_cause_is_included_on_request(self):
        cause = RuntimeError("driver exploded")
        error = ServiceError("wrapped", cause=cause)

        assert error.to_dict(include_cause=True)["error"]["cause"]["type"] == "RuntimeError"
        assert error.cause is cause

    def test_add_context_is_fluent(self):
        error = NotFoundError("missing").add_context(operation_name="lookup")

        assert error.context["operation_name"] == "lookup"


class TestFactories:
    def test_not_found(self):
        error = not_found("Connection", external_id="gelato_org_1")

        assert error.message == "Connection not found: external_id=gelato_org_1"
        assert error.context["resource_type"] == "Connection"

    def test_duplicate(self):
        error = duplicate("Connection", external_id="gelato_org_1")

        assert isinstance(error, ConflictError)
        assert "gelato_org_1" in error.message


class TestCorrelationId:
    def test_correlation_id_is_attached(self):
        set_correlation_id("corr-123")
        try:
            error = NotFoundError("missing")
        finally:
            clear_correlation_id()

        assert error.to_dict()["error"]["correlation_id"] == "corr-123"
        assert get_correlation_id() is None
