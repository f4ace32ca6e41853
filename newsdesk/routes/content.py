"""
Content Routes

One router per content kind, built from the same factory so blogs and
editions expose the identical publication workflow:

    GET    /                      list (refreshes status first)
    GET    /published             public listing of live items
    GET    /mine                  the caller's own items
    POST   /refresh-status        promote due approved items now
    POST   /                      create
    GET    /{item_id}             fetch
    PUT    /{item_id}             edit content fields
    POST   /{item_id}/submit      submit for approval
    POST   /{item_id}/approve     schedule for publication
    POST   /{item_id}/publish     publish immediately
    POST   /{item_id}/take-down   owner take-down
    POST   /{item_id}/admin-take-down
    DELETE /{item_id}
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.auth import get_current_user
from newsdesk.database import get_db
from newsdesk.models.user import User
from newsdesk.permissions_config.permission_dependencies import permission_required
from newsdesk.schemas.content import ApproveRequest, SweepResponse, TakeDownRequest
from newsdesk.services.asset_service import AssetStore, get_asset_store
from newsdesk.services.content_kinds import ContentKind
from newsdesk.services.notification_service import NotificationDispatcher, get_notification_dispatcher
from newsdesk.services.publication_service import PublicationService


def build_content_router(
    kind: ContentKind,
    create_schema: type[BaseModel],
    update_schema: type[BaseModel],
    response_schema: type[BaseModel],
) -> APIRouter:
    router = APIRouter()

    def get_service(
        db: AsyncSession = Depends(get_db),
        dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
        assets: AssetStore = Depends(get_asset_store),
    ) -> PublicationService:
        return PublicationService(db, kind, dispatcher, assets)

    # Static paths are registered before /{item_id} so they are matched first

    @router.get("/", response_model=list[response_schema])
    async def list_items(
        skip: int = Query(0, ge=0),
        limit: int = Query(10, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        service: PublicationService = Depends(get_service),
    ):
        return await service.list_all(current_user, skip=skip, limit=limit)

    @router.get("/published", response_model=list[response_schema])
    async def list_published(
        skip: int = Query(0, ge=0),
        limit: int = Query(10, ge=1, le=100),
        service: PublicationService = Depends(get_service),
    ):
        return await service.list_published(skip=skip, limit=limit)

    @router.get("/mine", response_model=list[response_schema])
    async def list_mine(
        skip: int = Query(0, ge=0),
        limit: int = Query(10, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        service: PublicationService = Depends(get_service),
    ):
        return await service.list_owned(current_user, skip=skip, limit=limit)

    @router.post("/refresh-status", response_model=SweepResponse)
    async def refresh_status(
        current_user: User = Depends(permission_required(kind.publish)),
        service: PublicationService = Depends(get_service),
    ):
        result = await service.refresh_status()
        return result.to_dict()

    @router.post("/", response_model=response_schema, status_code=status.HTTP_201_CREATED)
    async def create_item(
        payload: create_schema,
        current_user: User = Depends(get_current_user),
        service: PublicationService = Depends(get_service),
    ):
        fields = payload.model_dump(exclude={"status"})
        return await service.create_item(current_user, fields, requested_status=payload.status)

    @router.get("/{item_id}", response_model=response_schema)
    async def get_item(
        item_id: int,
        current_user: User = Depends(get_current_user),
        service: PublicationService = Depends(get_service),
    ):
        return await service.get_for_actor(item_id, current_user)

    @router.put("/{item_id}", response_model=response_schema)
    async def update_item(
        item_id: int,
        payload: update_schema,
        current_user: User = Depends(get_current_user),
        service: PublicationService = Depends(get_service),
    ):
        fields = payload.model_dump(exclude_unset=True, exclude_none=True)
        return await service.update_content(item_id, current_user, fields)

    @router.post("/{item_id}/submit", response_model=response_schema)
    async def submit_item(
        item_id: int,
        current_user: User = Depends(get_current_user),
        service: PublicationService = Depends(get_service),
    ):
        return await service.submit_for_approval(item_id, current_user)

    @router.post("/{item_id}/approve", response_model=response_schema)
    async def approve_item(
        item_id: int,
        payload: ApproveRequest,
        current_user: User = Depends(permission_required(kind.publish)),
        service: PublicationService = Depends(get_service),
    ):
        return await service.approve(item_id, payload.publish_at)

    @router.post("/{item_id}/publish", response_model=response_schema)
    async def publish_item(
        item_id: int,
        current_user: User = Depends(permission_required(kind.publish)),
        service: PublicationService = Depends(get_service),
    ):
        return await service.publish(item_id)

    @router.post("/{item_id}/take-down", response_model=response_schema)
    async def take_down_item(
        item_id: int,
        payload: Optional[TakeDownRequest] = Body(None),
        current_user: User = Depends(get_current_user),
        service: PublicationService = Depends(get_service),
    ):
        to_pending = payload.to_pending if payload else False
        return await service.take_down(item_id, current_user, to_pending=to_pending)

    @router.post("/{item_id}/admin-take-down", response_model=response_schema)
    async def admin_take_down_item(
        item_id: int,
        payload: Optional[TakeDownRequest] = Body(None),
        current_user: User = Depends(permission_required(kind.delete)),
        service: PublicationService = Depends(get_service),
    ):
        to_pending = payload.to_pending if payload else False
        return await service.admin_take_down(item_id, to_pending=to_pending)

    @router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_item(
        item_id: int,
        current_user: User = Depends(get_current_user),
        service: PublicationService = Depends(get_service),
    ):
        await service.delete_item(item_id, current_user)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
