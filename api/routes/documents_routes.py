"""Document share-link endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from controllers import DocumentsController
from routes.crud_routes import build_context, to_response

router = APIRouter(prefix="/api/documents", tags=["documents"])


def _controller(request: Request) -> DocumentsController:
    return request.app.state.resources.documents


@router.get("/download/{token}", response_model=None)
async def download_document(request: Request, token: str) -> JSONResponse:
    """Resolve a share token; 404 unknown, 403 expired."""
    ctx = await build_context(request)
    return to_response(await _controller(request).download(ctx))


@router.post("/{id}/regenerate-token", response_model=None)
async def regenerate_token(request: Request, id: str) -> JSONResponse:
    ctx = await build_context(request)
    return to_response(await _controller(request).regenerate_token(ctx))
