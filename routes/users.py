import re
from fastapi import APIRouter, Body, Depends, Query
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from models.user import UserModel, RoleUpdate, StatusUpdate, RoleValue
from routes.deps import get_current_user, get_db
from errors import AuthorizationError, NotFoundError, ValidationError
from services.authorization import can_list_users, can_view_user, can_manage_accounts
from services.task_query import PageInfo
from constants import Roles, TaskStatus, TaskPriority
from logging_config import get_logger
from utils.dates import utcnow
from utils.mongo import parse_mongo_data
from config import config

router = APIRouter(prefix="/api/users", tags=["Users"])
logger = get_logger("users")

PUBLIC_FIELDS = {"_id": 0, "id": 1, "name": 1, "email": 1, "role": 1, "active": 1, "created_at": 1, "last_login": 1}


async def _load_visible_user(db: AsyncIOMotorDatabase, current_user: UserModel, user_id: str) -> dict:
    if not can_list_users(current_user):
        raise AuthorizationError("Access denied. You do not have permission to perform this action.")
    user = await db.users.find_one({"id": user_id}, PUBLIC_FIELDS)
    if not user:
        raise NotFoundError("User not found")
    if not can_view_user(current_user, user):
        raise AuthorizationError("Access denied")
    return user


async def _load_account_for_change(db: AsyncIOMotorDatabase, current_user: UserModel, user_id: str, what: str) -> dict:
    if not can_manage_accounts(current_user):
        logger.warning(f"Account {what} change denied", extra={"data": {"target": user_id, "role": current_user.role}})
        raise AuthorizationError("Access denied. You do not have permission to perform this action.")
    user = await db.users.find_one({"id": user_id}, PUBLIC_FIELDS)
    if not user:
        raise NotFoundError("User not found")
    if user["id"] == current_user.id:
        raise ValidationError(f"You cannot change your own {what}")
    return user


@router.get("")
async def list_users(
    search: Optional[str] = None,
    role: Optional[RoleValue] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    current_user: UserModel = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """List users (Admin/Manager). Managers only see regular users."""
    if not can_list_users(current_user):
        raise AuthorizationError("Access denied. You do not have permission to perform this action.")

    query = {}
    if search:
        pattern = re.escape(search)
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"email": {"$regex": pattern, "$options": "i"}},
        ]
    if role:
        query["role"] = role
    if current_user.role == Roles.MANAGER:
        query["role"] = Roles.USER

    page_info = PageInfo(page=page, limit=limit)
    users = await db.users.find(query, PUBLIC_FIELDS).sort(
        [("created_at", -1), ("id", 1)]
    ).skip(page_info.skip).limit(limit).to_list(limit)
    total = await db.users.count_documents(query)

    return {
        "items": parse_mongo_data(users),
        "pagination": {"total": total, "page": page, "pages": page_info.pages(total), "limit": limit},
    }


@router.get("/options/assignment")
async def assignment_options(
    current_user: UserModel = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Active users for assignment dropdowns"""
    users = await db.users.find(
        {"active": True}, {"_id": 0, "id": 1, "name": 1, "email": 1, "role": 1}
    ).sort("name", 1).to_list(1000)
    return {"items": users}


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    current_user: UserModel = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return parse_mongo_data(await _load_visible_user(db, current_user, user_id))


@router.get("/{user_id}/stats")
async def get_user_stats(
    user_id: str,
    current_user: UserModel = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Task counters for one user (Admin/Manager)"""
    user = await _load_visible_user(db, current_user, user_id)
    uid = user["id"]
    not_completed = {"$ne": TaskStatus.COMPLETED}

    created = await db.tasks.count_documents({"created_by": uid})
    assigned = await db.tasks.count_documents({"assigned_to": uid})
    completed = await db.tasks.count_documents({"assigned_to": uid, "status": TaskStatus.COMPLETED})
    in_progress = await db.tasks.count_documents({"assigned_to": uid, "status": TaskStatus.IN_PROGRESS})
    pending = await db.tasks.count_documents({"assigned_to": uid, "status": TaskStatus.TODO})
    overdue = await db.tasks.count_documents({
        "assigned_to": uid,
        "due_date": {"$lt": utcnow()},
        "status": not_completed,
    })
    high_priority = await db.tasks.count_documents({
        "assigned_to": uid,
        "priority": {"$in": [TaskPriority.HIGH, TaskPriority.URGENT]},
        "status": not_completed,
    })

    return {
        "user": parse_mongo_data(user),
        "stats": {
            "total_tasks_created": created,
            "total_tasks_assigned": assigned,
            "tasks_completed": completed,
            "tasks_in_progress": in_progress,
            "tasks_pending": pending,
            "tasks_overdue": overdue,
            "high_priority_tasks": high_priority,
            "completion_rate": round(completed / assigned * 100, 2) if assigned else 0,
        },
    }


@router.put("/{user_id}/role")
async def update_user_role(
    user_id: str,
    payload: RoleUpdate = Body(...),
    current_user: UserModel = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Change a user's role (Admin only, never your own)"""
    user = await _load_account_for_change(db, current_user, user_id, "role")
    await db.users.update_one({"id": user_id}, {"$set": {"role": payload.role}})
    user["role"] = payload.role
    logger.info("User role updated", extra={"data": {"target": user_id, "role": payload.role}})
    return {"message": f"User role updated to {payload.role} successfully", "user": parse_mongo_data(user)}


@router.put("/{user_id}/status")
async def update_user_status(
    user_id: str,
    payload: StatusUpdate = Body(...),
    current_user: UserModel = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Activate or deactivate an account (Admin only, never your own)"""
    user = await _load_account_for_change(db, current_user, user_id, "account status")
    await db.users.update_one({"id": user_id}, {"$set": {"active": payload.active}})
    user["active"] = payload.active
    logger.info("User status updated", extra={"data": {"target": user_id, "active": payload.active}})
    return {
        "message": f"User {'activated' if payload.active else 'deactivated'} successfully",
        "user": parse_mongo_data(user),
    }
