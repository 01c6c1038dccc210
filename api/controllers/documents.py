"""Document controller: generic CRUD plus share-link endpoints."""

from typing import Any

from controllers.base import ControllerResponse, CrudController, RequestContext, parse_id
from core.responses import api_response
from models import Document
from schemas import DocumentCreate, DocumentFilters, DocumentResponse, DocumentUpdate
from services.documents_service import DocumentsService


class DocumentsController(CrudController[Document]):
    service: DocumentsService

    def __init__(self, service: DocumentsService, **kwargs: Any):
        super().__init__(
            service,
            create_schema=DocumentCreate,
            update_schema=DocumentUpdate,
            filters_schema=DocumentFilters,
            response_schema=DocumentResponse,
            **kwargs,
        )

    async def download(self, ctx: RequestContext) -> ControllerResponse:
        """Resolve ``token`` to the document metadata the client downloads from."""
        token = ctx.path_params.get("token") or ""
        try:
            document = await self.service.download_document(token)
            return ControllerResponse(
                200,
                api_response(
                    {
                        "id": document.id,
                        "filename": document.original_filename,
                        "filePath": document.file_path,
                        "mimeType": document.mime_type,
                        "fileSize": document.file_size,
                        "downloadCount": document.download_count,
                    },
                    {"requestId": ctx.request_id},
                ),
            )
        except Exception as e:
            return self.handle_error(e, ctx, "Failed to download document")

    async def regenerate_token(self, ctx: RequestContext) -> ControllerResponse:
        id = parse_id(ctx.path_params.get("id"))
        if id is None:
            return self.invalid_id()

        try:
            document = await self.service.regenerate_access_token(id)
            return self.ok(document, ctx)
        except Exception as e:
            return self.handle_error(e, ctx, "Failed to regenerate access token")
