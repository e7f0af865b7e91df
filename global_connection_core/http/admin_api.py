"""
Administrative HTTP surface for the embedding host.

Handlers take an ``azure.functions.HttpRequest`` and return an
``azure.functions.HttpResponse``; ``function_app.py`` binds them to routes.
Bodies and responses are camelCase JSON. Connection values are accepted but
never returned.

Routes:
    GET    /projects?externalId=<id>
    POST   /projects
    POST   /global-connections
    GET    /global-connections?externalId=<id>
    DELETE /global-connections/{externalId}
"""

import hmac
from typing import Any, Callable, Dict, Optional

import azure.functions as func
from sqlalchemy.orm import Session

from ..config import get_config
from ..constants import AuthType
from ..exceptions import (
    AuthenticationError,
    BaseError,
    ErrorCode,
    ValidationError,
    clear_correlation_id,
    not_found,
    set_correlation_id,
)
from ..services.connection_service import ConnectionService, validate_connection_create
from ..services.project_service import ProjectService
from ..utils.json_utils import dumps
from ..utils.logger import get_logger

BEARER_PREFIX = "bearer "
CORRELATION_HEADER = "x-correlation-id"


def json_response(body: Any, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(dumps(body), status_code=status_code, mimetype="application/json")


def error_response(error: BaseError) -> func.HttpResponse:
    debug = get_config().debug
    return json_response(error.to_dict(include_cause=debug), status_code=error.status_code)


def authenticate(req: func.HttpRequest) -> None:
    """
    Require ``Authorization: Bearer <key>``.

    When ``SecurityConfig.admin_api_keys`` is set the key must be one of them;
    otherwise any non-empty bearer key is accepted (issuance happens upstream).

    Raises:
        AuthenticationError: Missing, malformed or unknown key
    """
    header = req.headers.get("Authorization") or ""
    if not header.lower().startswith(BEARER_PREFIX):
        raise AuthenticationError("Missing bearer credential")
    key = header[len(BEARER_PREFIX):].strip()
    if not key:
        raise AuthenticationError("Missing bearer credential")

    allowed = get_config().security.admin_api_keys
    if allowed and not any(hmac.compare_digest(key, candidate) for candidate in allowed):
        raise AuthenticationError("Invalid bearer credential")


def read_json_body(req: func.HttpRequest) -> Dict[str, Any]:
    try:
        body = req.get_json()
    except ValueError as e:
        raise ValidationError(
            "Request body must be valid JSON", error_code=ErrorCode.INVALID_FORMAT, cause=e
        ) from e
    if not isinstance(body, dict):
        raise ValidationError(
            "Request body must be a JSON object", error_code=ErrorCode.INVALID_FORMAT
        )
    return body


def connection_value_from_body(auth_type: Any, value: Any) -> Dict[str, Any]:
    """
    Map the wire ``{type, props}`` shape onto the tagged credential value.

    CUSTOM_AUTH keeps ``props`` as-is; other tags take their fields from ``props``.
    """
    if not isinstance(value, dict):
        raise ValidationError(
            "Connection value must be an object", field="value", error_code=ErrorCode.INVALID_FORMAT
        )
    value_type = value.get("type") or auth_type
    props = value.get("props")
    if props is None:
        # Already in the tagged shape
        return {**value, "type": value_type}
    if not isinstance(props, dict):
        raise ValidationError(
            "Connection value props must be an object",
            field="value.props",
            error_code=ErrorCode.INVALID_FORMAT,
        )
    if value_type == AuthType.CUSTOM_AUTH.value:
        return {"type": value_type, "props": props}
    return {**props, "type": value_type}


class AdminApi:
    """
    Request handlers. Each request gets its own unit of work unless a
    session is injected.
    """

    def __init__(self, session: Optional[Session] = None):
        self.session = session

    def _handle(
        self, req: func.HttpRequest, handler: Callable[[func.HttpRequest], func.HttpResponse]
    ) -> func.HttpResponse:
        correlation_id = req.headers.get(CORRELATION_HEADER)
        if correlation_id:
            set_correlation_id(correlation_id)
        try:
            authenticate(req)
            return handler(req)
        except BaseError as e:
            return error_response(e)
        except Exception as e:
            get_logger().error(
                f"Unhandled error in admin API: {e}",
                extra={"method": req.method, "url": req.url},
                exc_info=True,
            )
            return json_response(
                {"error": {"code": ErrorCode.INTERNAL_ERROR.value, "message": "Internal error"}},
                status_code=500,
            )
        finally:
            if correlation_id:
                clear_correlation_id()

    # ==================== PROJECTS ====================

    def get_projects(self, req: func.HttpRequest) -> func.HttpResponse:
        return self._handle(req, self._get_projects)

    def _get_projects(self, req: func.HttpRequest) -> func.HttpResponse:
        external_id = req.params.get("externalId")
        with ProjectService(session=self.session) as service:
            if external_id is not None:
                project = service.find_by_external_id(external_id)
                projects = [project] if project else []
            else:
                projects = service.list_projects()
            data = [project.model_dump(mode="json", by_alias=True) for project in projects]
        return json_response({"data": data})

    def create_project(self, req: func.HttpRequest) -> func.HttpResponse:
        return self._handle(req, self._create_project)

    def _create_project(self, req: func.HttpRequest) -> func.HttpResponse:
        body = read_json_body(req)
        with ProjectService(session=self.session) as service:
            project, created = service.get_or_create_with_status(
                body.get("externalId"),
                display_name=body.get("displayName"),
                metadata=body.get("metadata"),
            )
        return json_response(
            project.model_dump(mode="json", by_alias=True), status_code=201 if created else 200
        )

    # ==================== GLOBAL CONNECTIONS ====================

    def create_global_connection(self, req: func.HttpRequest) -> func.HttpResponse:
        return self._handle(req, self._create_global_connection)

    def _create_global_connection(self, req: func.HttpRequest) -> func.HttpResponse:
        body = read_json_body(req)
        auth_type = body.get("type")
        connection_data = validate_connection_create(
            {
                "display_name": body.get("displayName"),
                "piece_name": body.get("pieceName"),
                "auth_type": auth_type,
                "value": connection_value_from_body(auth_type, body.get("value")),
                "scope": body.get("scope") or "PLATFORM",
                "project_ids": body.get("projectIds") or [],
                "external_id": body.get("externalId"),
                "metadata": body.get("metadata"),
            }
        )
        with ConnectionService(session=self.session) as service:
            connection = service.create(connection_data)
        return json_response(connection.model_dump(mode="json", by_alias=True), status_code=201)

    def get_global_connections(self, req: func.HttpRequest) -> func.HttpResponse:
        return self._handle(req, self._get_global_connections)

    def _get_global_connections(self, req: func.HttpRequest) -> func.HttpResponse:
        external_id = req.params.get("externalId")
        with ConnectionService(session=self.session) as service:
            if external_id is not None:
                connection = service.find_by_external_id(external_id)
                found = [connection] if connection else []
            else:
                found = service.list_connections(
                    project_id=req.params.get("projectId"),
                    piece_name=req.params.get("pieceName"),
                )
            data = [connection.model_dump(mode="json", by_alias=True) for connection in found]
        return json_response({"data": data})

    def delete_global_connection(self, req: func.HttpRequest) -> func.HttpResponse:
        return self._handle(req, self._delete_global_connection)

    def _delete_global_connection(self, req: func.HttpRequest) -> func.HttpResponse:
        external_id = req.route_params.get("externalId")
        with ConnectionService(session=self.session) as service:
            deleted = service.delete(external_id) if external_id else False
        if not deleted:
            raise not_found("Connection", external_id=external_id)
        return func.HttpResponse(status_code=204)
