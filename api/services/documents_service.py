"""Document service: CRUD plus access-token share links."""

from typing import Any

from core.errors import ForbiddenError, NotFoundError
from core.security import generate_secure_token
from models import Document, utcnow
from repositories.document_repository import DocumentRepository
from services.base import CrudService, ServiceHooks

DEFAULT_TOKEN_BYTES = 32


def document_hooks(token_bytes: int = DEFAULT_TOKEN_BYTES) -> ServiceHooks[Document]:
    async def process_create(data: dict[str, Any]) -> dict[str, Any]:
        if not data.get("access_token"):
            data["access_token"] = generate_secure_token(token_bytes)
        return data

    return ServiceHooks(process_create_input=process_create)


class DocumentsService(CrudService[Document]):
    """Generic CRUD for documents, plus token download and rotation."""

    repository: DocumentRepository

    def __init__(
        self,
        repository: DocumentRepository,
        *,
        token_bytes: int = DEFAULT_TOKEN_BYTES,
        **kwargs: Any,
    ):
        super().__init__(
            repository,
            resource_name="Document",
            hooks=document_hooks(token_bytes),
            **kwargs,
        )
        self.token_bytes = token_bytes

    async def download_document(self, token: str) -> Document:
        """Resolve a share token and count the download.

        Raises:
            NotFoundError: unknown token or soft-deleted document.
            ForbiddenError: the link has expired.
        """
        document = await self.repository.find_by_access_token(token)
        if document is None:
            raise NotFoundError("Document")

        if document.expires_at is not None and document.expires_at <= utcnow():
            self.logger.info("document.link_expired", id=document.id)
            raise ForbiddenError("Document link has expired")

        return await self.repository.increment_download_count(document.id)

    async def regenerate_access_token(self, id: int) -> Document:
        await self.find_by_id_or_fail(id)
        document = await self.repository.update(
            id, {"access_token": generate_secure_token(self.token_bytes)}
        )
        self.logger.info("document.token_regenerated", id=id)
        return document
