from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clientdesk.api.http_setup import register_exception_handlers, register_http_middleware
from clientdesk.api.system_routes import create_system_router
from clientdesk.assignments.router import create_assignments_router
from clientdesk.assignments.service import AssignmentsService
from clientdesk.assignments.store import LocalAssignmentStore, RemoteAssignmentStore
from clientdesk.auth.session import SessionResolver, create_session_dependencies
from clientdesk.clients.repository import ClientsRepository
from clientdesk.clients.router import create_clients_router
from clientdesk.clients.service import ClientsService
from clientdesk.core.config import AppConfig
from clientdesk.core.local_store import LocalKeyValueStore
from clientdesk.core.logging import setup_logging
from clientdesk.core.mongo import (
    ASSIGNMENTS_COLLECTION,
    CLIENTS_COLLECTION,
    connect_database,
)
from clientdesk.core.mongo_migrations import apply_mongo_migrations

load_dotenv()
APP_CONFIG = AppConfig.from_env()
setup_logging(APP_CONFIG.logging.level)
LOGGER = logging.getLogger(__name__)

APP_ROOT = Path(__file__).resolve().parent


def create_app(config: AppConfig = APP_CONFIG) -> FastAPI:
    app = FastAPI(title="Client Desk API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )
    register_http_middleware(app, config=config, logger=LOGGER)
    register_exception_handlers(app, logger=LOGGER)

    _, require_session = create_session_dependencies(SessionResolver(config.auth))

    local_store_dir = Path(config.store.local_store_dir)
    if not local_store_dir.is_absolute():
        local_store_dir = APP_ROOT / local_store_dir
    kv = LocalKeyValueStore(local_store_dir)

    db = connect_database(config.store)
    apply_mongo_migrations(db)
    remote = RemoteAssignmentStore(db[ASSIGNMENTS_COLLECTION]) if db is not None else None
    clients_collection = db[CLIENTS_COLLECTION] if db is not None else None

    assignments_service = AssignmentsService(
        local=LocalAssignmentStore(kv),
        remote=remote,
    )
    clients_service = ClientsService(
        repo=ClientsRepository(clients_collection, kv),
        logger=LOGGER,
    )

    app.include_router(create_system_router(require_session))
    app.include_router(create_clients_router(clients_service, require_session))
    app.include_router(create_assignments_router(assignments_service, require_session))
    return app


app = create_app()
