"""
Route table for one entity.

Static routes are registered before the key routes so that e.g.
``/health`` is never read as a key. A key takes one path segment per key
column, in key order.

Usage:
    router = build_entity_router(service)
    app.include_router(router, prefix="/api")
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from shared.config.constants import KeyKind

from qc_api.generic.dependencies import OPTION_PARAMS, get_actor_id, get_query_options
from qc_api.generic.options import QueryOptions
from qc_api.generic.service import CompositeEntityService, EntityService, ServiceResult


def respond(result: ServiceResult) -> JSONResponse:
    """Render an envelope with the status its service reported."""
    return JSONResponse(status_code=result.status_code, content=jsonable_encoder(result.to_dict()))


def build_entity_router(service: EntityService) -> APIRouter:
    config = service.config
    router = APIRouter(prefix=config.api_path, tags=[config.display_name])
    key_path = "/" + "/".join("{" + name + "}" for name in config.key_fields)

    def key_from(request: Request) -> Any:
        if config.key_kind != KeyKind.COMPOSITE:
            return request.path_params[config.key_fields[0]]
        return {name: request.path_params.get(name) for name in config.key_fields}

    # =========================================================================
    # Static routes
    # =========================================================================

    @router.get("/health")
    async def entity_health():
        return respond(await service.get_health())

    @router.get("/statistics")
    async def entity_statistics():
        return respond(await service.get_statistics())

    if config.name_field:
        @router.get("/search/name")
        async def search_by_name(
            name: str | None = Query(default=None),
            options: QueryOptions = Depends(get_query_options),
        ):
            return respond(await service.get_by_name(name, options))

    @router.get("/search/pattern")
    async def search_by_pattern(
        pattern: str | None = Query(default=None),
        options: QueryOptions = Depends(get_query_options),
    ):
        return respond(await service.search(pattern, options))

    @router.get("/filter/status")
    async def filter_by_status(
        status: str | None = Query(default=None),
        options: QueryOptions = Depends(get_query_options),
    ):
        return respond(await service.filter_status(status, options))

    if isinstance(service, CompositeEntityService):
        @router.get("/filter")
        async def filter_records(request: Request, options: QueryOptions = Depends(get_query_options)):
            predicates = {k: v for k, v in request.query_params.items() if k not in OPTION_PARAMS}
            return respond(await service.filter_records(predicates, options))

        @router.get("/summary")
        async def summary(group_by: str | None = Query(default=None, alias="groupBy")):
            return respond(await service.get_summary(group_by))

    # =========================================================================
    # Collection routes
    # =========================================================================

    @router.post("")
    async def create_entity(data: Any = Body(...), actor_id: int = Depends(get_actor_id)):
        return respond(await service.create(data, actor_id))

    @router.get("")
    async def list_entities(options: QueryOptions = Depends(get_query_options)):
        return respond(await service.get_all(options))

    # =========================================================================
    # Key routes
    # =========================================================================

    @router.get(key_path)
    async def get_entity(request: Request):
        return respond(await service.get_by_key(key_from(request)))

    @router.put(key_path)
    async def update_entity(request: Request, data: Any = Body(...), actor_id: int = Depends(get_actor_id)):
        return respond(await service.update(key_from(request), data, actor_id))

    @router.patch(key_path + "/status")
    async def change_entity_status(request: Request, actor_id: int = Depends(get_actor_id)):
        return respond(await service.change_status(key_from(request), actor_id))

    @router.delete(key_path)
    async def delete_entity(request: Request, actor_id: int = Depends(get_actor_id)):
        return respond(await service.delete(key_from(request), actor_id))

    return router
