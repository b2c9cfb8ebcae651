"""
Best-effort creation of in-app notifications.

A failed insert is logged and dropped: it never fails or rolls back the
task mutation that triggered it, and it is not retried.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from logging_config import get_logger
from models.notification import NotificationModel

logger = get_logger("notifications")


class NotificationDispatcher:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def notify(
        self,
        type: str,
        sender: Optional[str],
        recipient: Optional[str],
        message: str,
        related_task: Optional[str] = None,
    ) -> Optional[dict]:
        """Persist one notification. Returns the stored document, or None if skipped or failed."""
        if not recipient:
            return None
        if sender is not None and sender == recipient:
            # Actors never notify themselves
            return None

        notification = NotificationModel(
            recipient=recipient,
            sender=sender,
            type=type,
            message=message,
            related_task=related_task,
        )
        doc = notification.model_dump()
        try:
            await self.db.notifications.insert_one(doc)
        except PyMongoError as e:
            logger.error(
                f"Notification dropped: {e}",
                extra={"data": {"type": type, "recipient": recipient, "task_id": related_task}},
            )
            return None

        logger.info(
            "Notification sent",
            extra={"data": {"type": type, "recipient": recipient, "task_id": related_task}},
        )
        return doc
