from fastapi import APIRouter, Body, Depends, Query
from typing import Optional, Dict, Any, Literal
from datetime import date
from models.task import TaskCreate, TaskUpdate, TaskFilters, TaskStatusValue, TaskPriorityValue
from models.user import UserModel
from routes.deps import get_current_user, get_coordinator
from services.task_lifecycle import TaskLifecycleCoordinator
from config import config

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])

# --- ENDPOINTS ---

@router.post("", status_code=201)
async def create_task(
    task: TaskCreate = Body(...),
    current_user: UserModel = Depends(get_current_user),
    tasks: TaskLifecycleCoordinator = Depends(get_coordinator)
):
    """Create a new task; the caller becomes its creator."""
    return await tasks.create_task(current_user, task)

@router.get("")
async def list_tasks(
    status: Optional[TaskStatusValue] = None,
    priority: Optional[TaskPriorityValue] = None,
    due_date: Optional[date] = Query(None, description="Tasks due on this calendar day"),
    search: Optional[str] = Query(None, description="Case-insensitive match on title or description"),
    assigned_to: Optional[str] = Query(None, description="User id or 'me'"),
    created_by: Optional[str] = Query(None, description="User id or 'me'"),
    overdue: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    sort_by: str = Query("created_at", description="created_at, updated_at, due_date, priority, status or title"),
    order: Literal["asc", "desc"] = "desc",
    current_user: UserModel = Depends(get_current_user),
    tasks: TaskLifecycleCoordinator = Depends(get_coordinator)
):
    """List the tasks visible to the caller with filtering, sorting and pagination"""
    filters = TaskFilters(
        status=status,
        priority=priority,
        due_date=due_date,
        search=search,
        assigned_to=assigned_to,
        created_by=created_by,
        overdue=overdue,
        page=page,
        limit=limit,
        sort_by=sort_by,
        order=order,
    )
    return await tasks.list_tasks(current_user, filters)

@router.post("/batch-update")
async def batch_update_tasks(
    payload: Dict[str, Any] = Body(...),
    current_user: UserModel = Depends(get_current_user),
    tasks: TaskLifecycleCoordinator = Depends(get_coordinator)
):
    """Set status, priority or assignee on many tasks at once (Admin/Manager only)"""
    result = await tasks.batch_update(current_user, payload.get("task_ids"), payload.get("updates"))
    return {"message": "Tasks updated successfully", **result}

@router.get("/{task_id}")
async def get_task(
    task_id: str,
    current_user: UserModel = Depends(get_current_user),
    tasks: TaskLifecycleCoordinator = Depends(get_coordinator)
):
    return await tasks.get_task(current_user, task_id)

@router.put("/{task_id}")
async def update_task(
    task_id: str,
    update_data: TaskUpdate = Body(...),
    current_user: UserModel = Depends(get_current_user),
    tasks: TaskLifecycleCoordinator = Depends(get_coordinator)
):
    """Partial update (Creator, assigned Manager, or Admin)"""
    return await tasks.update_task(current_user, task_id, update_data)

@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    current_user: UserModel = Depends(get_current_user),
    tasks: TaskLifecycleCoordinator = Depends(get_coordinator)
):
    """Hard delete task (Creator, assigned Manager, or Admin)"""
    await tasks.delete_task(current_user, task_id)
    return {"message": "Task deleted successfully"}
