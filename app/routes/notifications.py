"""
Notification Routes
Mounted at /api/notifications and /api/admin/notifications
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.auth import get_current_user
from app.schemas.notification import BulkDeleteRequest
from app.services.notification_service import notification_service
from app.utils.helpers import get_pagination_params

router = APIRouter()


@router.get("")
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False),
    current_user: dict = Depends(get_current_user)
):
    paging = get_pagination_params(page, limit)
    return await notification_service.list_notifications(
        current_user["id"], current_user["role"], paging["page"], paging["limit"], paging["offset"], unread_only
    )


@router.get("/count")
async def unread_count(current_user: dict = Depends(get_current_user)):
    return {"unread_count": await notification_service.unread_count(current_user["id"])}


@router.patch("/mark-all-read")
async def mark_all_read(current_user: dict = Depends(get_current_user)):
    updated = await notification_service.mark_all_read(current_user["id"])
    return {"message": "All notifications marked as read", "updated": updated}


@router.delete("/bulk-delete")
async def bulk_delete(request: BulkDeleteRequest, current_user: dict = Depends(get_current_user)):
    deleted = await notification_service.bulk_delete(current_user["id"], [str(i) for i in request.notification_ids])
    return {"message": f"{deleted} notifications deleted", "deleted": deleted}


@router.patch("/{notification_id}/read")
async def mark_read(notification_id: UUID, current_user: dict = Depends(get_current_user)):
    notification = await notification_service.mark_read(current_user["id"], current_user["role"], str(notification_id))
    return {"message": "Notification marked as read", "notification": notification}


@router.delete("/{notification_id}")
async def delete_notification(notification_id: UUID, current_user: dict = Depends(get_current_user)):
    await notification_service.delete_notification(current_user["id"], str(notification_id))
    return {"message": "Notification deleted"}
