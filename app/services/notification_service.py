"""
Notification Service
In-app notifications and the type -> screen routing used by clients
"""

import json
import logging
import uuid
from typing import List, Optional

from fastapi import HTTPException, status

from app.database import database
from app.utils.datetime_ist import utc_now
from app.utils.helpers import get_pagination_meta
from app.utils.serializers import serialize_row

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = {
    "GENERAL",
    "EVENT_APPROVED", "EVENT_REJECTED", "EVENT_SUSPENDED", "EVENT_RESTARTED",
    "ORDER_CONFIRMED", "ORDER_IN_PROGRESS", "ORDER_COMPLETED", "ORDER_CANCELLED",
    "PAYMENT_RECEIVED", "PAYMENT_FAILED",
    "CONNECTION_REQUEST", "CONNECTION_ACCEPTED", "CONNECTION_REJECTED",
    "CERTIFICATE_ISSUED", "ACCOUNT_APPROVED", "ACCOUNT_REJECTED", "EVENT_ASSIGNED",
}

# Order status -> notification type sent to the coach
ORDER_STATUS_NOTIFICATION_TYPES = {
    "PENDING": "ORDER_CONFIRMED",
    "CONFIRMED": "ORDER_CONFIRMED",
    "QUOTED": "ORDER_CONFIRMED",
    "PAYMENT_PENDING": "ORDER_CONFIRMED",
    "PAID": "ORDER_CONFIRMED",
    "IN_PROGRESS": "ORDER_IN_PROGRESS",
    "COMPLETED": "ORDER_COMPLETED",
    "CANCELLED": "ORDER_CANCELLED",
}

# Notification type -> (client route template, data key it needs)
_ACTION_ROUTES = {
    "EVENT_APPROVED": ("/events/{}", "eventId"),
    "EVENT_REJECTED": ("/events/{}", "eventId"),
    "EVENT_SUSPENDED": ("/events/{}", "eventId"),
    "EVENT_RESTARTED": ("/events/{}", "eventId"),
    "EVENT_ASSIGNED": ("/events/{}", "eventId"),
    "ORDER_CONFIRMED": ("/admin/orders/{}", "orderId"),
    "ORDER_IN_PROGRESS": ("/admin/orders/{}", "orderId"),
    "ORDER_COMPLETED": ("/admin/orders/{}", "orderId"),
    "ORDER_CANCELLED": ("/admin/orders/{}", "orderId"),
    "PAYMENT_RECEIVED": ("/admin/payments/{}", "paymentId"),
    "PAYMENT_FAILED": ("/admin/payments/{}", "paymentId"),
}


def _snake(key: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in key)


def resolve_action_url(notification_type: str, data: Optional[dict], role: Optional[str]) -> str:
    """
    Where a client should navigate when a notification is opened

    Unknown types, or types whose id is missing from `data`, fall back to
    the role dashboard.
    """
    data = data or {}
    route = _ACTION_ROUTES.get(notification_type)
    if route:
        template, key = route
        target = data.get(key) or data.get(_snake(key))
        if target:
            return template.format(target)
    return f"/dashboard/{(role or 'student').lower()}"


def order_status_notification_type(order_status: str) -> str:
    return ORDER_STATUS_NOTIFICATION_TYPES.get(order_status, "GENERAL")


class NotificationService:
    """Service for notification operations"""

    @staticmethod
    def _present(row, role: Optional[str]) -> dict:
        notification = serialize_row(row)
        raw = notification.get("data")
        try:
            notification["data"] = json.loads(raw) if raw else None
        except (TypeError, ValueError):
            notification["data"] = None
        notification["action_url"] = resolve_action_url(notification["type"], notification["data"], role)
        return notification

    @staticmethod
    async def create_notification(
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        data: Optional[dict] = None
    ) -> dict:
        """Insert a notification for a user"""
        notification_id = str(uuid.uuid4())
        await database.execute(
            """
            INSERT INTO notifications (id, user_id, type, title, message, data, is_read, created_at)
            VALUES (:id, :user_id, :type, :title, :message, :data, FALSE, :created_at)
            """,
            {
                "id": notification_id,
                "user_id": str(user_id),
                "type": notification_type if notification_type in NOTIFICATION_TYPES else "GENERAL",
                "title": title,
                "message": message,
                "data": json.dumps(data, default=str) if data else None,
                "created_at": utc_now(),
            }
        )
        return {"id": notification_id, "type": notification_type, "title": title}

    @staticmethod
    async def notify(
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        data: Optional[dict] = None
    ) -> Optional[dict]:
        """Create a notification as a side effect; failures are logged, never raised"""
        try:
            return await NotificationService.create_notification(user_id, notification_type, title, message, data)
        except Exception as e:
            logger.warning("Notification '%s' for user %s failed: %s", notification_type, user_id, e)
            return None

    @staticmethod
    async def list_notifications(
        user_id: str,
        role: str,
        page: int,
        limit: int,
        offset: int,
        unread_only: bool = False
    ) -> dict:
        where_clause = "user_id = :user_id"
        if unread_only:
            where_clause += " AND is_read = FALSE"
        params = {"user_id": str(user_id)}

        total = await database.fetch_val(f"SELECT COUNT(*) FROM notifications WHERE {where_clause}", params)
        rows = await database.fetch_all(
            f"""
            SELECT * FROM notifications
            WHERE {where_clause}
            ORDER BY created_at DESC
            LIMIT :limit OFFSET :offset
            """,
            {**params, "limit": limit, "offset": offset}
        )

        return {
            "notifications": [NotificationService._present(row, role) for row in rows],
            "unread_count": await NotificationService.unread_count(user_id),
            "pagination": get_pagination_meta(int(total or 0), page, limit),
        }

    @staticmethod
    async def unread_count(user_id: str) -> int:
        count = await database.fetch_val(
            "SELECT COUNT(*) FROM notifications WHERE user_id = :user_id AND is_read = FALSE",
            {"user_id": str(user_id)}
        )
        return int(count or 0)

    @staticmethod
    async def _get_owned(user_id: str, notification_id: str) -> dict:
        row = await database.fetch_one(
            "SELECT * FROM notifications WHERE id = :id AND user_id = :user_id",
            {"id": notification_id, "user_id": str(user_id)}
        )
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Notification not found"
            )
        return row

    @staticmethod
    async def mark_read(user_id: str, role: str, notification_id: str) -> dict:
        await NotificationService._get_owned(user_id, notification_id)
        await database.execute(
            "UPDATE notifications SET is_read = TRUE, read_at = :now WHERE id = :id",
            {"id": notification_id, "now": utc_now()}
        )
        row = await NotificationService._get_owned(user_id, notification_id)
        return NotificationService._present(row, role)

    @staticmethod
    async def mark_all_read(user_id: str) -> int:
        unread = await NotificationService.unread_count(user_id)
        await database.execute(
            """
            UPDATE notifications SET is_read = TRUE, read_at = :now
            WHERE user_id = :user_id AND is_read = FALSE
            """,
            {"user_id": str(user_id), "now": utc_now()}
        )
        return unread

    @staticmethod
    async def delete_notification(user_id: str, notification_id: str) -> None:
        await NotificationService._get_owned(user_id, notification_id)
        await database.execute("DELETE FROM notifications WHERE id = :id", {"id": notification_id})

    @staticmethod
    async def bulk_delete(user_id: str, notification_ids: List[str]) -> int:
        if not notification_ids:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="notification_ids must not be empty"
            )

        placeholders = ", ".join(f":nid_{i}" for i in range(len(notification_ids)))
        params = {"user_id": str(user_id)}
        for i, nid in enumerate(notification_ids):
            params[f"nid_{i}"] = str(nid)

        count = await database.fetch_val(
            f"SELECT COUNT(*) FROM notifications WHERE user_id = :user_id AND id IN ({placeholders})",
            params
        )
        await database.execute(
            f"DELETE FROM notifications WHERE user_id = :user_id AND id IN ({placeholders})",
            params
        )
        return int(count or 0)


# Create singleton instance
notification_service = NotificationService()
