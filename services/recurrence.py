"""
Spawning the next occurrence of a recurring task once it is completed.
"""

from datetime import datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from constants import RecurringType, TaskStatus
from logging_config import get_logger
from models.task import TaskModel

logger = get_logger("recurrence")

INTERVALS = {
    RecurringType.DAILY: timedelta(days=1),
    RecurringType.WEEKLY: timedelta(days=7),
    RecurringType.MONTHLY: relativedelta(months=1),  # Jan 31 -> Feb 28/29
}

# Copied onto the next occurrence; everything else starts fresh
CARRIED_FIELDS = (
    "title",
    "description",
    "priority",
    "created_by",
    "assigned_to",
    "tags",
    "is_recurring",
    "recurring_type",
    "recurring_end_date",
)


def next_due_date(due_date: Optional[datetime], recurring_type: str) -> Optional[datetime]:
    if due_date is None:
        return None
    interval = INTERVALS.get(recurring_type)
    if interval is None:
        return None
    return due_date + interval


def should_spawn(previous_status: str, task: dict) -> bool:
    """True when an update moved a recurring task into completed."""
    return (
        previous_status != TaskStatus.COMPLETED
        and task.get("status") == TaskStatus.COMPLETED
        and bool(task.get("is_recurring"))
        and task.get("recurring_type", RecurringType.NONE) != RecurringType.NONE
    )


class RecurrenceEngine:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def maybe_spawn_next(self, task: dict) -> Optional[dict]:
        """Persist the next occurrence of ``task``.

        Returns None when the series has ended or the insert failed (logged, not raised).
        """
        new_due = next_due_date(task.get("due_date"), task.get("recurring_type", RecurringType.NONE))
        if new_due is None:
            logger.info("Recurring task has no due date, no next occurrence", extra={"data": {"task_id": task.get("id")}})
            return None

        end_date = task.get("recurring_end_date")
        if end_date is not None and new_due > end_date:
            logger.info("Recurrence series ended", extra={"data": {"task_id": task.get("id"), "end_date": end_date}})
            return None

        fields = {name: task.get(name) for name in CARRIED_FIELDS if task.get(name) is not None}
        next_task = TaskModel(**fields, due_date=new_due, status=TaskStatus.TODO)
        doc = next_task.model_dump()
        try:
            await self.db.tasks.insert_one(doc)
        except PyMongoError as e:
            # The completion is already saved; the series just stops here
            logger.error(
                f"Next recurring occurrence not created: {e}",
                extra={"data": {"source_task_id": task.get("id"), "due_date": new_due}},
            )
            return None

        logger.info(
            "Next recurring occurrence created",
            extra={"data": {"source_task_id": task.get("id"), "task_id": next_task.id, "due_date": new_due}},
        )
        return doc
