from datetime import datetime, timedelta
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from constants import NotificationTypes, TaskStatus
from logging_config import get_logger
from services.notifications import NotificationDispatcher
from utils.dates import utcnow

logger = get_logger("reminders")


async def send_due_reminders(
    db: AsyncIOMotorDatabase,
    dispatcher: NotificationDispatcher,
    now: Optional[datetime] = None,
    window: timedelta = timedelta(hours=24),
) -> int:
    """
    Send one task-reminder to the assignee of every open task due within ``window``.
    Each task gets at most one attempt per due date (reminder_sent is reset when due_date changes).
    Returns the number of reminders sent.
    """
    now = now or utcnow()
    query = {
        "assigned_to": {"$ne": None},
        "status": {"$ne": TaskStatus.COMPLETED},
        "reminder_sent": {"$ne": True},
        "due_date": {"$gte": now, "$lte": now + window},
    }

    sent = 0
    tasks = await db.tasks.find(query).to_list(None)
    for task in tasks:
        due_str = task["due_date"].strftime("%b %d %H:%M")
        notification = await dispatcher.notify(
            NotificationTypes.TASK_REMINDER,
            None,
            task["assigned_to"],
            f'Reminder: "{task["title"]}" is due {due_str}',
            task["id"],
        )
        # Marked even when the insert failed: reminders are never retried
        await db.tasks.update_one({"id": task["id"]}, {"$set": {"reminder_sent": True}})
        if notification is not None:
            sent += 1

    logger.info("Due-date reminders sent", extra={"data": {"count": sent, "window_hours": window.total_seconds() / 3600}})
    return sent
