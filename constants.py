# Global Constants

class Roles:
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class TaskStatus:
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    COMPLETED = "completed"


class TaskPriority:
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class RecurringType:
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    NONE = "none"


class NotificationTypes:
    TASK_ASSIGNED = "task-assigned"
    TASK_UPDATED = "task-updated"
    TASK_COMPLETED = "task-completed"
    TASK_DELETED = "task-deleted"
    TASK_REMINDER = "task-reminder"


class TaskActions:
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


# Only these fields may be changed through POST /api/tasks/batch-update
BATCH_UPDATE_FIELDS = ("status", "priority", "assigned_to")

# GET /api/tasks sort_by values; anything else falls back to created_at
TASK_SORT_FIELDS = ("created_at", "updated_at", "due_date", "priority", "status", "title")
