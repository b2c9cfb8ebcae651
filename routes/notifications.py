from fastapi import APIRouter, Depends, Query
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from models.user import UserModel
from routes.deps import get_current_user, get_db
from errors import NotFoundError
from services.references import attach_notification_refs
from services.task_query import PageInfo
from logging_config import get_logger
from utils.mongo import parse_mongo_data
from config import config

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])
logger = get_logger("notifications")

# Every query below is pinned to recipient == caller


@router.get("")
async def get_notifications(
    read: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    current_user: UserModel = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Get the current user's notifications, newest first."""
    query = {"recipient": current_user.id}
    if read is not None:
        query["is_read"] = read

    page_info = PageInfo(page=page, limit=limit)
    notifications = await db.notifications.find(query).sort(
        [("created_at", -1), ("_id", -1)]
    ).skip(page_info.skip).limit(page_info.limit).to_list(page_info.limit)
    total = await db.notifications.count_documents(query)
    unread_count = await db.notifications.count_documents({"recipient": current_user.id, "is_read": False})

    await attach_notification_refs(db, notifications)
    return {
        "items": parse_mongo_data(notifications),
        "unread_count": unread_count,
        "pagination": {
            "total": total,
            "page": page,
            "pages": page_info.pages(total),
            "limit": limit,
        },
    }


@router.get("/unread-count")
async def get_unread_count(
    current_user: UserModel = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Get count of unread notifications."""
    count = await db.notifications.count_documents({
        "recipient": current_user.id,
        "is_read": False
    })
    return {"count": count}


@router.put("/mark-all-read")
async def mark_all_read(
    current_user: UserModel = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Mark all notifications as read for the current user."""
    result = await db.notifications.update_many(
        {"recipient": current_user.id, "is_read": False},
        {"$set": {"is_read": True}}
    )
    return {"message": "All notifications marked as read", "modified_count": result.modified_count}


@router.put("/{notification_id}/read")
async def mark_as_read(
    notification_id: str,
    current_user: UserModel = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Mark a notification as read."""
    result = await db.notifications.update_one(
        {"id": notification_id, "recipient": current_user.id},
        {"$set": {"is_read": True}}
    )
    if result.matched_count == 0:
        logger.warning(f"Notification not found for mark-as-read", extra={"data": {"notification_id": notification_id}})
        raise NotFoundError("Notification not found")

    notification = await db.notifications.find_one({"id": notification_id})
    return {"message": "Notification marked as read", "notification": parse_mongo_data(notification)}


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    current_user: UserModel = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    result = await db.notifications.delete_one({"id": notification_id, "recipient": current_user.id})
    if result.deleted_count == 0:
        logger.warning(f"Notification not found for delete", extra={"data": {"notification_id": notification_id}})
        raise NotFoundError("Notification not found")
    return {"message": "Notification deleted"}
