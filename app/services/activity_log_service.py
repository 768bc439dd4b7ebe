"""
Activity Logging Service
Audit trail of account, moderation and order actions
"""

import json
import logging
import uuid
from typing import List, Optional

from app.database import database
from app.utils.datetime_ist import utc_now

logger = logging.getLogger(__name__)


class ActivityLogService:
    """Service for activity logging operations"""

    @staticmethod
    async def log_activity(
        actor_id: Optional[str],
        action: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None,
        ip_address: Optional[str] = None
    ) -> Optional[dict]:
        """
        Log an activity

        Args:
            actor_id: User who performed the action
            action: Action type (e.g. 'user_status_changed', 'event_moderated')
            resource_type: Type of resource affected (e.g. 'user', 'event', 'order')
            resource_id: ID of the resource
            details: Additional JSON details
            ip_address: IP address of the request

        Returns:
            Created activity log entry, or None if the write failed
        """
        log_id = str(uuid.uuid4())
        params = {
            "id": log_id,
            "user_id": str(actor_id) if actor_id else None,
            "action": action,
            "resource_type": resource_type,
            "resource_id": str(resource_id) if resource_id else None,
            "details": json.dumps(details, default=str) if details else None,
            "ip_address": ip_address,
            "created_at": utc_now(),
        }

        try:
            await database.execute(
                """
                INSERT INTO activity_logs (id, user_id, action, resource_type, resource_id, details, ip_address, created_at)
                VALUES (:id, :user_id, :action, :resource_type, :resource_id, :details, :ip_address, :created_at)
                """,
                params
            )
        except Exception as e:
            # Audit writes never fail the request that triggered them
            logger.warning("Activity log write failed for %s: %s", action, e)
            return None

        return params

    @staticmethod
    async def get_user_activity(
        user_id: str,
        limit: int = 50,
        offset: int = 0
    ) -> tuple[List[dict], int]:
        """
        Activity performed by a user, or on the user's account

        Returns:
            Tuple of (activity logs list, total count)
        """
        where_clause = "(user_id = :user_id OR (resource_type = 'user' AND resource_id = :user_id))"
        params = {"user_id": str(user_id)}

        total = await database.fetch_val(
            f"SELECT COUNT(*) FROM activity_logs WHERE {where_clause}", params
        )

        logs = await database.fetch_all(
            f"""
            SELECT id, user_id, action, resource_type, resource_id, details, ip_address, created_at
            FROM activity_logs
            WHERE {where_clause}
            ORDER BY created_at DESC
            LIMIT :limit OFFSET :offset
            """,
            {**params, "limit": limit, "offset": offset}
        )

        result = []
        for log in logs:
            entry = dict(log)
            entry["id"] = str(entry["id"])
            if entry.get("user_id"):
                entry["user_id"] = str(entry["user_id"])
            if entry.get("details"):
                try:
                    entry["details"] = json.loads(entry["details"])
                except (TypeError, ValueError):
                    pass
            result.append(entry)

        return result, int(total or 0)


# Create singleton instance
activity_log_service = ActivityLogService()
