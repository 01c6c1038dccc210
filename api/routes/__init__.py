"""API route modules."""

from routes.crud_routes import (
    clients_router,
    documents_crud_router,
    properties_router,
    users_router,
)
from routes.documents_routes import router as documents_router
from routes.health_routes import router as health_router

__all__ = [
    "clients_router",
    "documents_crud_router",
    "documents_router",
    "health_router",
    "properties_router",
    "users_router",
]
