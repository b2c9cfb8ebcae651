"""
Translate GET /api/tasks filters plus the caller's visibility into a Mongo query.
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from constants import Roles, TaskStatus, TASK_SORT_FIELDS
from logging_config import get_logger
from models.task import TaskFilters
from services.references import attach_task_people
from utils.dates import day_bounds, utcnow
from utils.mongo import parse_mongo_data

logger = get_logger("task_query")

ME = "me"


@dataclass(frozen=True)
class PageInfo:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def pages(self, total: int) -> int:
        return math.ceil(total / self.limit)


@dataclass(frozen=True)
class TaskQuery:
    predicate: Dict[str, Any]
    sort: List[Tuple[str, int]]
    page: PageInfo


def _resolve_user_ref(value: str, principal) -> str:
    return principal.id if value == ME else value


def visibility_clause(principal) -> Optional[Dict[str, Any]]:
    """Non-admins only ever see tasks they created or are assigned to."""
    if principal.role == Roles.ADMIN:
        return None
    return {"$or": [{"created_by": principal.id}, {"assigned_to": principal.id}]}


def build_task_query(principal, filters: TaskFilters, now: Optional[datetime] = None) -> TaskQuery:
    now = now or utcnow()
    clauses: List[Dict[str, Any]] = []

    if filters.status:
        clauses.append({"status": filters.status})
    if filters.priority:
        clauses.append({"priority": filters.priority})

    if filters.search:
        pattern = re.escape(filters.search)
        clauses.append({"$or": [
            {"title": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]})

    if filters.assigned_to:
        clauses.append({"assigned_to": _resolve_user_ref(filters.assigned_to, principal)})
    if filters.created_by:
        # Combined with the visibility clause below this can match nothing for non-admins
        clauses.append({"created_by": _resolve_user_ref(filters.created_by, principal)})

    if filters.due_date:
        start, end = day_bounds(filters.due_date)
        clauses.append({"due_date": {"$gte": start, "$lte": end}})

    if filters.overdue:
        clauses.append({"due_date": {"$lt": now}})
        clauses.append({"status": {"$ne": TaskStatus.COMPLETED}})

    visibility = visibility_clause(principal)
    if visibility:
        clauses.append(visibility)

    predicate = {"$and": clauses} if clauses else {}

    sort_field = filters.sort_by if filters.sort_by in TASK_SORT_FIELDS else "created_at"
    direction = 1 if filters.order == "asc" else -1
    sort = [(sort_field, direction), ("_id", direction)]

    return TaskQuery(predicate=predicate, sort=sort, page=PageInfo(page=filters.page, limit=filters.limit))


async def fetch_task_page(db: AsyncIOMotorDatabase, query: TaskQuery) -> dict:
    """Run a built query; returns {items, pagination}."""
    cursor = db.tasks.find(query.predicate).sort(query.sort).skip(query.page.skip).limit(query.page.limit)
    tasks = await cursor.to_list(query.page.limit)
    total = await db.tasks.count_documents(query.predicate)

    await attach_task_people(db, tasks)
    logger.debug("Task page fetched", extra={"data": {"total": total, "page": query.page.page, "returned": len(tasks)}})

    return {
        "items": parse_mongo_data(tasks),
        "pagination": {
            "total": total,
            "page": query.page.page,
            "pages": query.page.pages(total),
            "limit": query.page.limit,
        },
    }
