"""
Authorization policy: the single place that decides who may do what.

Every check returns a bool and never raises; callers decide whether a
``False`` means 403 or, for list queries, silent filtering.
"""

from typing import Any, Mapping

from constants import Roles, TaskActions


def _is_admin(principal) -> bool:
    return principal.role == Roles.ADMIN


def can_access(principal, task: Mapping[str, Any], action: str) -> bool:
    """Decide whether ``principal`` may ``action`` (read/update/delete) ``task``.

    Rules, first match wins:
      * admin: always
      * read: creator or assignee
      * update/delete: creator, or a manager who is the assignee
    """
    if _is_admin(principal):
        return True

    is_creator = task.get("created_by") == principal.id
    is_assignee = task.get("assigned_to") is not None and task.get("assigned_to") == principal.id

    if action == TaskActions.READ:
        return is_creator or is_assignee

    if action in (TaskActions.UPDATE, TaskActions.DELETE):
        return is_creator or (principal.role == Roles.MANAGER and is_assignee)

    return False


def can_batch_update(principal) -> bool:
    # Batch updates skip the per-task check above; only privileged roles get them
    return principal.role in (Roles.ADMIN, Roles.MANAGER)


def can_list_users(principal) -> bool:
    return principal.role in (Roles.ADMIN, Roles.MANAGER)


def can_view_user(principal, user: Mapping[str, Any]) -> bool:
    """Admins see everyone, managers only regular users."""
    if _is_admin(principal):
        return True
    if principal.role == Roles.MANAGER:
        return user.get("role") == Roles.USER
    return False


def can_manage_accounts(principal) -> bool:
    """Role and active-flag changes. Callers still refuse changes to the caller's own account."""
    return _is_admin(principal)
