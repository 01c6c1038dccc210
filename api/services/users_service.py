"""User business rules: unique email and write-only passwords."""

import asyncio
from typing import Any

from core.errors import ConflictError
from core.security import hash_password
from models import User
from repositories.user_repository import UserRepository
from services.base import CrudService, ServiceHooks

DEFAULT_HASH_ITERATIONS = 390_000


def user_hooks(
    repository: UserRepository, *, hash_iterations: int = DEFAULT_HASH_ITERATIONS
) -> ServiceHooks[User]:
    """Hooks that swap ``password`` for ``password_hash``.

    PBKDF2 is CPU-bound, so hashing runs in a worker thread.
    """

    async def ensure_email_free(email: str, current_id: int | None = None) -> None:
        # The unique index also covers soft-deleted users
        other = await repository.find_by_email(email, include_deleted=True)
        if other is not None and other.id != current_id:
            raise ConflictError("User", "email", email)

    async def replace_password(data: dict[str, Any]) -> None:
        password = data.pop("password", None)
        if password is not None:
            data["password_hash"] = await asyncio.to_thread(
                hash_password, password, hash_iterations
            )

    async def process_create(data: dict[str, Any]) -> dict[str, Any]:
        await ensure_email_free(data["email"])
        await replace_password(data)
        return data

    async def process_update(data: dict[str, Any], existing: User) -> dict[str, Any]:
        email = data.get("email")
        if email and email.lower() != existing.email.lower():
            await ensure_email_free(email, existing.id)
        await replace_password(data)
        return data

    return ServiceHooks(
        process_create_input=process_create,
        process_update_input=process_update,
    )


def create_users_service(
    repository: UserRepository,
    *,
    hash_iterations: int = DEFAULT_HASH_ITERATIONS,
    **kwargs: Any,
) -> CrudService[User]:
    return CrudService(
        repository,
        resource_name="User",
        hooks=user_hooks(repository, hash_iterations=hash_iterations),
        **kwargs,
    )
