import pytest

from models.user import UserModel
from services.authorization import (
    can_access,
    can_batch_update,
    can_list_users,
    can_manage_accounts,
    can_view_user,
)


def principal(uid: str, role: str) -> UserModel:
    return UserModel(id=uid, email=f"{uid}@test.com", name=uid.title(), role=role)


TASK = {"id": "t1", "created_by": "creator", "assigned_to": "assignee"}
UNASSIGNED = {"id": "t2", "created_by": "creator", "assigned_to": None}


@pytest.mark.parametrize("action", ["read", "update", "delete"])
def test_admin_can_do_anything(action):
    assert can_access(principal("root", "admin"), TASK, action)
    assert can_access(principal("root", "admin"), UNASSIGNED, action)


@pytest.mark.parametrize("role", ["user", "manager"])
@pytest.mark.parametrize("uid,expected", [("creator", True), ("assignee", True), ("bystander", False)])
def test_read_requires_creator_or_assignee(role, uid, expected):
    assert can_access(principal(uid, role), TASK, "read") is expected


@pytest.mark.parametrize("action", ["update", "delete"])
def test_creator_can_mutate(action):
    assert can_access(principal("creator", "user"), TASK, action)


@pytest.mark.parametrize("action", ["update", "delete"])
def test_assigned_manager_can_mutate(action):
    assert can_access(principal("assignee", "manager"), TASK, action)


@pytest.mark.parametrize("action", ["update", "delete"])
def test_assigned_plain_user_cannot_mutate(action):
    assert not can_access(principal("assignee", "user"), TASK, action)


@pytest.mark.parametrize("action", ["update", "delete"])
def test_bystander_manager_cannot_mutate(action):
    assert not can_access(principal("bystander", "manager"), TASK, action)


def test_unassigned_task_is_not_readable_by_principal_without_id_match():
    assert not can_access(principal("someone", "user"), UNASSIGNED, "read")


def test_unknown_action_is_denied():
    assert not can_access(principal("creator", "user"), TASK, "archive")


def test_batch_update_roles():
    assert can_batch_update(principal("a", "admin"))
    assert can_batch_update(principal("m", "manager"))
    assert not can_batch_update(principal("u", "user"))


def test_user_visibility_rules():
    admin, manager, user = principal("a", "admin"), principal("m", "manager"), principal("u", "user")
    assert can_list_users(admin) and can_list_users(manager) and not can_list_users(user)
    assert can_view_user(admin, {"id": "x", "role": "manager"})
    assert can_view_user(manager, {"id": "x", "role": "user"})
    assert not can_view_user(manager, {"id": "x", "role": "admin"})
    assert not can_view_user(user, {"id": "x", "role": "user"})


def test_only_admin_manages_accounts():
    assert can_manage_accounts(principal("a", "admin"))
    assert not can_manage_accounts(principal("m", "manager"))
