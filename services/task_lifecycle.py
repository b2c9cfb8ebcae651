"""
Task lifecycle coordinator: the only writer of task documents.

Order inside every mutation is fixed: authorize, persist the task, then fire
notifications, then (on completion of a recurring task) spawn the next
occurrence. Any status may move to any other status.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError as PydanticValidationError

from constants import BATCH_UPDATE_FIELDS, NotificationTypes, TaskActions
from errors import AuthorizationError, NotFoundError, ValidationError
from logging_config import get_logger
from models.task import BatchTaskUpdate, TaskCreate, TaskFilters, TaskModel, TaskUpdate, check_task_invariants
from services.authorization import can_access, can_batch_update
from services.notifications import NotificationDispatcher
from services.recurrence import RecurrenceEngine, should_spawn
from services.references import attach_task_people
from services.task_query import build_task_query, fetch_task_page
from utils.dates import utcnow
from utils.mongo import parse_mongo_data

logger = get_logger("tasks")

DENIED_MESSAGES = {
    TaskActions.READ: "You do not have permission to view this task",
    TaskActions.UPDATE: "Access denied. You are not authorized to modify this task.",
    TaskActions.DELETE: "Access denied. You are not authorized to delete this task.",
}


class TaskLifecycleCoordinator:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        dispatcher: Optional[NotificationDispatcher] = None,
        recurrence: Optional[RecurrenceEngine] = None,
    ):
        self.db = db
        self.dispatcher = dispatcher or NotificationDispatcher(db)
        self.recurrence = recurrence or RecurrenceEngine(db)

    # --- HELPERS ---

    async def _load(self, task_id: str) -> dict:
        task = await self.db.tasks.find_one({"id": task_id})
        if not task:
            raise NotFoundError("Task not found")
        return task

    async def _load_authorized(self, principal, task_id: str, action: str) -> dict:
        task = await self._load(task_id)
        if not can_access(principal, task, action):
            logger.warning(
                f"Task {action} denied",
                extra={"data": {"task_id": task_id, "role": principal.role}},
            )
            raise AuthorizationError(DENIED_MESSAGES[action])
        return task

    # --- READS ---

    async def get_task(self, principal, task_id: str) -> dict:
        task = await self._load_authorized(principal, task_id, TaskActions.READ)
        await attach_task_people(self.db, [task])
        return parse_mongo_data(task)

    async def list_tasks(self, principal, filters: TaskFilters, now: Optional[datetime] = None) -> dict:
        query = build_task_query(principal, filters, now)
        return await fetch_task_page(self.db, query)

    # --- MUTATIONS ---

    async def create_task(self, principal, payload: TaskCreate) -> dict:
        task = TaskModel(**payload.model_dump(), created_by=principal.id)
        doc = task.model_dump()
        await self.db.tasks.insert_one(doc)
        logger.info("Task created", extra={"data": {"task_id": task.id, "title": task.title, "assigned_to": task.assigned_to}})

        if task.assigned_to and task.assigned_to != principal.id:
            await self.dispatcher.notify(
                NotificationTypes.TASK_ASSIGNED,
                principal.id,
                task.assigned_to,
                f"{principal.name} assigned you a new task: {task.title}",
                task.id,
            )

        return parse_mongo_data(doc)

    async def update_task(self, principal, task_id: str, payload: TaskUpdate) -> dict:
        existing = await self._load_authorized(principal, task_id, TaskActions.UPDATE)

        requested = payload.changes()
        changes = {
            key: (existing.get(key), new_val)
            for key, new_val in requested.items()
            if existing.get(key) != new_val
        }
        if not changes:
            return parse_mongo_data(existing)

        merged = {**existing, **requested}
        try:
            check_task_invariants(merged)
        except ValueError as e:
            raise ValidationError(str(e))

        update_fields: Dict[str, Any] = {key: new_val for key, (_, new_val) in changes.items()}
        if "due_date" in changes:
            update_fields["reminder_sent"] = False
        update_fields["updated_at"] = utcnow()

        await self.db.tasks.update_one({"id": task_id}, {"$set": update_fields})
        logger.info("Task updated", extra={"data": {"task_id": task_id, "fields_changed": list(changes.keys())}})

        updated = await self.db.tasks.find_one({"id": task_id}) or {**existing, **update_fields}
        previous_assignee = existing.get("assigned_to")
        title = updated.get("title")

        # --- NOTIFICATION LOGIC (UPDATE) ---
        if "assigned_to" in changes:
            new_assignee = changes["assigned_to"][1]
            if new_assignee and new_assignee != principal.id:
                await self.dispatcher.notify(
                    NotificationTypes.TASK_ASSIGNED,
                    principal.id,
                    new_assignee,
                    f"{principal.name} assigned you a task: {title}",
                    task_id,
                )

        if "status" in changes and previous_assignee and previous_assignee != principal.id:
            await self.dispatcher.notify(
                NotificationTypes.TASK_UPDATED,
                principal.id,
                previous_assignee,
                f'{principal.name} updated the status of task "{title}" to {updated.get("status")}',
                task_id,
            )

        # --- RECURRENCE ---
        if should_spawn(existing.get("status"), updated):
            next_task = await self.recurrence.maybe_spawn_next(updated)
            if next_task and next_task.get("assigned_to"):
                await self.dispatcher.notify(
                    NotificationTypes.TASK_ASSIGNED,
                    principal.id,
                    next_task["assigned_to"],
                    f"A recurring task has been created: {next_task['title']}",
                    next_task["id"],
                )

        return parse_mongo_data(updated)

    async def delete_task(self, principal, task_id: str) -> None:
        task = await self._load_authorized(principal, task_id, TaskActions.DELETE)

        # Notify first, the assignee is unreachable once the document is gone
        assignee = task.get("assigned_to")
        if assignee and assignee != principal.id:
            await self.dispatcher.notify(
                NotificationTypes.TASK_DELETED,
                principal.id,
                assignee,
                f"{principal.name} deleted a task that was assigned to you: {task.get('title')}",
                task_id,
            )

        await self.db.tasks.delete_one({"id": task_id})
        logger.info("Task deleted", extra={"data": {"task_id": task_id}})

    async def batch_update(self, principal, task_ids: Any, updates: Any) -> dict:
        """Apply one restricted update to many tasks.

        Privileged roles only. Per-task ``can_access`` is not
        consulted here: an admin or manager may batch-edit any task id.
        """
        if not can_batch_update(principal):
            logger.warning("Batch update denied: insufficient role", extra={"data": {"role": principal.role}})
            raise AuthorizationError("Access denied. You do not have permission to perform this action.")

        if not isinstance(task_ids, list) or not task_ids or not all(isinstance(i, str) for i in task_ids):
            raise ValidationError("Task IDs array is required")
        if not isinstance(updates, dict) or not updates:
            raise ValidationError("Updates object is required")

        invalid = sorted(set(updates) - set(BATCH_UPDATE_FIELDS))
        if invalid:
            raise ValidationError(
                "Invalid updates. Only status, priority, and assigned_to can be batch updated.",
                details={"invalid_fields": invalid},
            )
        try:
            values = BatchTaskUpdate(**updates).model_dump(exclude_unset=True)
        except PydanticValidationError as e:
            raise ValidationError("Invalid batch update values", details=[err["msg"] for err in e.errors()])

        result = await self.db.tasks.update_many(
            {"id": {"$in": task_ids}},
            {"$set": {**values, "updated_at": utcnow()}},
        )
        logger.info(
            "Tasks batch updated",
            extra={"data": {"task_ids": task_ids, "fields": list(values), "modified": result.modified_count}},
        )

        assignee = values.get("assigned_to")
        if assignee:
            tasks: List[dict] = await self.db.tasks.find(
                {"id": {"$in": task_ids}}, {"_id": 0, "id": 1, "title": 1}
            ).to_list(len(task_ids))
            for task in tasks:
                await self.dispatcher.notify(
                    NotificationTypes.TASK_ASSIGNED,
                    principal.id,
                    assignee,
                    f"{principal.name} assigned you a task: {task['title']}",
                    task["id"],
                )

        return {"matched_count": result.matched_count, "modified_count": result.modified_count}
