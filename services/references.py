"""
Resolution of weak references (user ids, task ids) stored on documents.

A reference whose target no longer exists resolves to ``None``.
"""

from typing import Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

USER_SUMMARY_FIELDS = {"_id": 0, "id": 1, "name": 1, "email": 1}
TASK_SUMMARY_FIELDS = {"_id": 0, "id": 1, "title": 1, "status": 1}


def _distinct(ids: Iterable[Optional[str]]) -> List[str]:
    return list({i for i in ids if i})


async def resolve_users(db: AsyncIOMotorDatabase, ids: Iterable[Optional[str]]) -> Dict[str, dict]:
    wanted = _distinct(ids)
    if not wanted:
        return {}
    docs = await db.users.find({"id": {"$in": wanted}}, USER_SUMMARY_FIELDS).to_list(len(wanted))
    return {doc["id"]: doc for doc in docs}


async def resolve_tasks(db: AsyncIOMotorDatabase, ids: Iterable[Optional[str]]) -> Dict[str, dict]:
    wanted = _distinct(ids)
    if not wanted:
        return {}
    docs = await db.tasks.find({"id": {"$in": wanted}}, TASK_SUMMARY_FIELDS).to_list(len(wanted))
    return {doc["id"]: doc for doc in docs}


async def attach_task_people(db: AsyncIOMotorDatabase, tasks: List[dict]) -> List[dict]:
    """Add created_by_user / assigned_to_user summaries to each task document."""
    users = await resolve_users(
        db, [t.get("created_by") for t in tasks] + [t.get("assigned_to") for t in tasks]
    )
    for task in tasks:
        task["created_by_user"] = users.get(task.get("created_by"))
        task["assigned_to_user"] = users.get(task.get("assigned_to"))
    return tasks


async def attach_notification_refs(db: AsyncIOMotorDatabase, notifications: List[dict]) -> List[dict]:
    """Add sender_user / related_task_info; a deleted task resolves to None."""
    users = await resolve_users(db, [n.get("sender") for n in notifications])
    tasks = await resolve_tasks(db, [n.get("related_task") for n in notifications])
    for notification in notifications:
        notification["sender_user"] = users.get(notification.get("sender"))
        notification["related_task_info"] = tasks.get(notification.get("related_task"))
    return notifications
