"""Client business rules: email must be unique among visible clients."""

from typing import Any

from core.errors import ConflictError
from models import Client
from repositories.client_repository import ClientRepository
from services.base import CrudService, ServiceHooks


def client_hooks(repository: ClientRepository) -> ServiceHooks[Client]:
    async def ensure_email_free(email: str, current_id: int | None = None) -> None:
        other = await repository.find_by_email(email)
        if other is not None and other.id != current_id:
            raise ConflictError("Client", "email", email)

    async def process_create(data: dict[str, Any]) -> dict[str, Any]:
        if data.get("email"):
            await ensure_email_free(data["email"])
        return data

    async def process_update(data: dict[str, Any], existing: Client) -> dict[str, Any]:
        email = data.get("email")
        if email and email.lower() != (existing.email or "").lower():
            await ensure_email_free(email, existing.id)
        return data

    return ServiceHooks(
        process_create_input=process_create,
        process_update_input=process_update,
    )


def create_clients_service(
    repository: ClientRepository, **kwargs: Any
) -> CrudService[Client]:
    return CrudService(
        repository,
        resource_name="Client",
        hooks=client_hooks(repository),
        **kwargs,
    )
