"""
Global Connection Core administrative API as an Azure Functions app.

Routes (under /api):
    GET    /projects?externalId=<id>
    POST   /projects
    POST   /global-connections
    GET    /global-connections?externalId=<id>
    DELETE /global-connections/{externalId}

Run with: func start
"""

import os

import azure.functions as func

from global_connection_core.config import AppConfig, set_config
from global_connection_core.db.db_config import (
    get_app_database_config,
    get_production_config,
    initialize_db,
)
from global_connection_core.http.admin_api import AdminApi
from global_connection_core.utils.logger import configure_logging

# Load .env and environment once per worker
config = AppConfig.from_env()
set_config(config)

configure_logging(
    "global-connection-admin",
    log_level=config.logging.level,
    enable_queue=config.features.enable_logs_queue,
)

# DB_HOST/DB_NAME/DB_USER/DB_PASSWORD take precedence over DATABASE_URL
initialize_db(get_production_config() if os.getenv("DB_HOST") else get_app_database_config(config))

app = func.FunctionApp()
admin_api = AdminApi()


@app.function_name(name="GetProjects")
@app.route(route="projects", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_projects(req: func.HttpRequest) -> func.HttpResponse:
    return admin_api.get_projects(req)


@app.function_name(name="CreateProject")
@app.route(route="projects", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def create_project(req: func.HttpRequest) -> func.HttpResponse:
    return admin_api.create_project(req)


@app.function_name(name="CreateGlobalConnection")
@app.route(route="global-connections", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def create_global_connection(req: func.HttpRequest) -> func.HttpResponse:
    return admin_api.create_global_connection(req)


@app.function_name(name="GetGlobalConnections")
@app.route(route="global-connections", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_global_connections(req: func.HttpRequest) -> func.HttpResponse:
    return admin_api.get_global_connections(req)


@app.function_name(name="DeleteGlobalConnection")
@app.route(
    route="global-connections/{externalId}",
    methods=["DELETE"],
    auth_level=func.AuthLevel.ANONYMOUS,
)
def delete_global_connection(req: func.HttpRequest) -> func.HttpResponse:
    return admin_api.delete_global_connection(req)
