import re
from datetime import date, datetime, timedelta

from models.task import TaskFilters
from models.user import UserModel
from services.task_query import build_task_query, fetch_task_page, PageInfo

NOW = datetime(2024, 1, 15, 12, 0)


def principal(uid: str, role: str) -> UserModel:
    return UserModel(id=uid, email=f"{uid}@test.com", name=uid.title(), role=role)


def clauses(query) -> list:
    return query.predicate.get("$and", [])


def test_admin_without_filters_matches_everything():
    query = build_task_query(principal("a", "admin"), TaskFilters(), NOW)
    assert query.predicate == {}


def test_non_admin_always_gets_visibility_clause():
    query = build_task_query(principal("u", "user"), TaskFilters(status="todo"), NOW)
    assert {"status": "todo"} in clauses(query)
    assert {"$or": [{"created_by": "u"}, {"assigned_to": "u"}]} in clauses(query)


def test_me_sentinel_resolves_to_principal():
    query = build_task_query(principal("u", "user"), TaskFilters(assigned_to="me", created_by="me"), NOW)
    assert {"assigned_to": "u"} in clauses(query)
    assert {"created_by": "u"} in clauses(query)


def test_search_is_escaped_or_over_title_and_description():
    query = build_task_query(principal("a", "admin"), TaskFilters(search="fix (urgent)"), NOW)
    (search,) = clauses(query)
    assert search == {"$or": [
        {"title": {"$regex": re.escape("fix (urgent)"), "$options": "i"}},
        {"description": {"$regex": re.escape("fix (urgent)"), "$options": "i"}},
    ]}


def test_search_and_visibility_are_both_kept():
    query = build_task_query(principal("u", "user"), TaskFilters(search="report"), NOW)
    ors = [c for c in clauses(query) if "$or" in c]
    assert len(ors) == 2


def test_due_date_covers_whole_day():
    query = build_task_query(principal("a", "admin"), TaskFilters(due_date=date(2024, 1, 10)), NOW)
    (clause,) = clauses(query)
    assert clause["due_date"]["$gte"] == datetime(2024, 1, 10, 0, 0, 0)
    assert clause["due_date"]["$lte"] == datetime(2024, 1, 10, 23, 59, 59, 999999)


def test_overdue_means_past_due_and_not_completed():
    query = build_task_query(principal("a", "admin"), TaskFilters(overdue=True), NOW)
    assert {"due_date": {"$lt": NOW}} in clauses(query)
    assert {"status": {"$ne": "completed"}} in clauses(query)


def test_sort_defaults_and_fallback():
    default = build_task_query(principal("a", "admin"), TaskFilters(), NOW)
    assert default.sort[0] == ("created_at", -1)

    unknown = build_task_query(principal("a", "admin"), TaskFilters(sort_by="password", order="asc"), NOW)
    assert unknown.sort[0] == ("created_at", 1)

    due = build_task_query(principal("a", "admin"), TaskFilters(sort_by="due_date", order="asc"), NOW)
    assert due.sort[0] == ("due_date", 1)


def test_page_info_math():
    info = PageInfo(page=3, limit=10)
    assert info.skip == 20
    assert info.pages(25) == 3
    assert info.pages(0) == 0
    assert info.pages(30) == 3


async def test_pagination_last_page(db, insert_task):
    for i in range(25):
        await insert_task(title=f"Task {i}", created_by="admin_id")

    query = build_task_query(principal("admin_id", "admin"), TaskFilters(page=3, limit=10), NOW)
    result = await fetch_task_page(db, query)

    assert len(result["items"]) == 5
    assert result["pagination"] == {"total": 25, "page": 3, "pages": 3, "limit": 10}


async def test_non_admin_never_sees_unrelated_tasks(db, insert_task):
    await insert_task(title="Mine", created_by="u")
    await insert_task(title="Assigned to me", created_by="x", assigned_to="u")
    await insert_task(title="Not mine", created_by="x", assigned_to="y")

    query = build_task_query(principal("u", "user"), TaskFilters(search="mine"), NOW)
    result = await fetch_task_page(db, query)
    titles = {t["title"] for t in result["items"]}
    assert titles == {"Mine"}

    everything = await fetch_task_page(db, build_task_query(principal("u", "user"), TaskFilters(), NOW))
    assert {t["title"] for t in everything["items"]} == {"Mine", "Assigned to me"}


async def test_created_by_other_user_is_intersected_with_visibility(db, insert_task):
    await insert_task(title="X private", created_by="x")
    await insert_task(title="X gave me", created_by="x", assigned_to="u")

    query = build_task_query(principal("u", "user"), TaskFilters(created_by="x"), NOW)
    result = await fetch_task_page(db, query)
    assert [t["title"] for t in result["items"]] == ["X gave me"]

    nobody = build_task_query(principal("u", "user"), TaskFilters(created_by="z"), NOW)
    assert (await fetch_task_page(db, nobody))["pagination"]["total"] == 0


async def test_overdue_filter_against_store(db, insert_task):
    await insert_task(title="late", created_by="a", due_date=NOW - timedelta(days=1))
    await insert_task(title="late but done", created_by="a", due_date=NOW - timedelta(days=1), status="completed")
    await insert_task(title="future", created_by="a", due_date=NOW + timedelta(days=1))
    await insert_task(title="no date", created_by="a")

    query = build_task_query(principal("a", "admin"), TaskFilters(overdue=True), NOW)
    result = await fetch_task_page(db, query)
    assert [t["title"] for t in result["items"]] == ["late"]


async def test_items_carry_user_summaries(db, insert_task, test_user):
    await insert_task(title="Summarized", created_by=test_user.id, assigned_to="ghost_id")

    query = build_task_query(principal(test_user.id, "user"), TaskFilters(), NOW)
    (item,) = (await fetch_task_page(db, query))["items"]
    assert item["created_by_user"] == {"id": test_user.id, "name": test_user.name, "email": test_user.email}
    assert item["assigned_to_user"] is None
