"""HTTP binding for the CRUD controllers.

Routes only translate between FastAPI and the controller contract: the
request becomes a ``RequestContext`` and the ``ControllerResponse`` a
``JSONResponse``. Controllers come from ``app.state.resources``.
"""

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from controllers import ControllerResponse, CrudController, RequestContext


async def build_context(request: Request, *, with_body: bool = False) -> RequestContext:
    """Controller view of a request.

    An unparseable JSON body is passed on as ``None`` so it fails schema
    validation like any other bad input.
    """
    body: Any = None
    if with_body:
        try:
            body = await request.json()
        except ValueError:
            body = None

    return RequestContext(
        path_params={key: str(value) for key, value in request.path_params.items()},
        query_params=dict(request.query_params),
        body=body,
        request_id=getattr(request.state, "request_id", None),
    )


def to_response(result: ControllerResponse) -> JSONResponse:
    return JSONResponse(status_code=result.status, content=result.body)


def get_controller(request: Request, resource: str) -> CrudController:
    return getattr(request.app.state.resources, resource)


def create_crud_router(resource: str, *, tag: str | None = None) -> APIRouter:
    """Router exposing list/get/create/update/delete under ``/api/<resource>``."""
    router = APIRouter(prefix=f"/api/{resource}", tags=[tag or resource])

    @router.get("", response_model=None, summary=f"List {resource}")
    async def list_items(request: Request) -> JSONResponse:
        ctx = await build_context(request)
        return to_response(await get_controller(request, resource).find_all(ctx))

    @router.get("/{id}", response_model=None, summary=f"Get one of {resource}")
    async def get_item(request: Request, id: str) -> JSONResponse:
        ctx = await build_context(request)
        return to_response(await get_controller(request, resource).find_by_id(ctx))

    @router.post("", response_model=None, status_code=201, summary=f"Create {resource}")
    async def create_item(request: Request) -> JSONResponse:
        ctx = await build_context(request, with_body=True)
        return to_response(await get_controller(request, resource).create(ctx))

    @router.put("/{id}", response_model=None, summary=f"Update one of {resource}")
    async def update_item(request: Request, id: str) -> JSONResponse:
        ctx = await build_context(request, with_body=True)
        return to_response(await get_controller(request, resource).update(ctx))

    @router.delete("/{id}", response_model=None, summary=f"Delete one of {resource}")
    async def delete_item(request: Request, id: str) -> JSONResponse:
        ctx = await build_context(request)
        return to_response(await get_controller(request, resource).delete(ctx))

    return router


properties_router = create_crud_router("properties")
clients_router = create_crud_router("clients")
documents_crud_router = create_crud_router("documents")
users_router = create_crud_router("users")
