"""Composition root: one repository, service and controller per resource.

Everything is wired through constructors; ``main.lifespan`` calls
``build_resources`` once and stores the result on ``app.state``.
"""

from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from controllers import CrudController, DocumentsController
from core.config import Settings, get_settings
from core.logger import get_logger
from models import Client, Property, User
from repositories.client_repository import ClientRepository
from repositories.document_repository import DocumentRepository
from repositories.property_repository import PropertyRepository
from repositories.user_repository import UserRepository
from schemas import (
    ClientCreate,
    ClientFilters,
    ClientResponse,
    ClientUpdate,
    PropertyCreate,
    PropertyFilters,
    PropertyResponse,
    PropertyUpdate,
    UserCreate,
    UserFilters,
    UserResponse,
    UserUpdate,
)
from services.clients_service import create_clients_service
from services.documents_service import DocumentsService
from services.properties_service import create_properties_service
from services.users_service import create_users_service


@dataclass
class Resources:
    """Controllers for every CRUD resource exposed under /api."""

    properties: CrudController[Property]
    clients: CrudController[Client]
    documents: DocumentsController
    users: CrudController[User]


def build_resources(
    session_maker: async_sessionmaker[AsyncSession],
    logger: Any = None,
    settings: Settings | None = None,
) -> Resources:
    settings = settings or get_settings()
    logger = logger or get_logger("resources")

    repo_kwargs = {
        "logger": logger,
        "slow_query_threshold_ms": settings.slow_query_threshold_ms,
    }
    service_kwargs = {"logger": logger, "max_limit": settings.max_page_limit}
    controller_kwargs = {
        "logger": logger,
        "default_limit": settings.default_page_limit,
    }

    properties_service = create_properties_service(
        PropertyRepository(session_maker, **repo_kwargs), **service_kwargs
    )
    clients_service = create_clients_service(
        ClientRepository(session_maker, **repo_kwargs), **service_kwargs
    )
    documents_service = DocumentsService(
        DocumentRepository(session_maker, **repo_kwargs),
        token_bytes=settings.document_token_bytes,
        **service_kwargs,
    )
    users_service = create_users_service(
        UserRepository(session_maker, **repo_kwargs),
        hash_iterations=settings.password_hash_iterations,
        **service_kwargs,
    )

    return Resources(
        properties=CrudController(
            properties_service,
            create_schema=PropertyCreate,
            update_schema=PropertyUpdate,
            filters_schema=PropertyFilters,
            response_schema=PropertyResponse,
            **controller_kwargs,
        ),
        clients=CrudController(
            clients_service,
            create_schema=ClientCreate,
            update_schema=ClientUpdate,
            filters_schema=ClientFilters,
            response_schema=ClientResponse,
            **controller_kwargs,
        ),
        documents=DocumentsController(documents_service, **controller_kwargs),
        users=CrudController(
            users_service,
            create_schema=UserCreate,
            update_schema=UserUpdate,
            filters_schema=UserFilters,
            response_schema=UserResponse,
            **controller_kwargs,
        ),
    )
