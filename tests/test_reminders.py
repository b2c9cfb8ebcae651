from datetime import datetime, timedelta

from pymongo.errors import PyMongoError

from services.notifications import NotificationDispatcher
from services.reminders import send_due_reminders

NOW = datetime(2024, 1, 10, 8, 0)


class CountingBrokenNotifications:
    def __init__(self):
        self.attempts = 0

    async def insert_one(self, document, *args, **kwargs):
        self.attempts += 1
        raise PyMongoError("connection refused")


class CountingBrokenStore:
    def __init__(self):
        self.notifications = CountingBrokenNotifications()


async def test_reminds_assignee_of_task_due_soon(db, insert_task):
    task = await insert_task(title="Ship it", created_by="boss", assigned_to="worker", due_date=NOW + timedelta(hours=3))

    sent = await send_due_reminders(db, NotificationDispatcher(db), now=NOW)

    assert sent == 1
    (note,) = await db.notifications.find({}).to_list(10)
    assert note["type"] == "task-reminder"
    assert note["recipient"] == "worker"
    assert note["sender"] is None
    assert note["related_task"] == task["id"]
    assert "Ship it" in note["message"]
    assert (await db.tasks.find_one({"id": task["id"]}))["reminder_sent"] is True


async def test_each_task_is_reminded_once(db, insert_task):
    await insert_task(title="Once", created_by="boss", assigned_to="worker", due_date=NOW + timedelta(hours=1))
    dispatcher = NotificationDispatcher(db)

    assert await send_due_reminders(db, dispatcher, now=NOW) == 1
    assert await send_due_reminders(db, dispatcher, now=NOW + timedelta(minutes=15)) == 0
    assert await db.notifications.count_documents({}) == 1


async def test_skips_tasks_outside_window_or_not_actionable(db, insert_task):
    await insert_task(title="Next week", created_by="boss", assigned_to="worker", due_date=NOW + timedelta(days=7))
    await insert_task(title="Already late", created_by="boss", assigned_to="worker", due_date=NOW - timedelta(hours=1))
    await insert_task(title="Done", created_by="boss", assigned_to="worker", due_date=NOW + timedelta(hours=1), status="completed")
    await insert_task(title="Nobody", created_by="boss", due_date=NOW + timedelta(hours=1))
    await insert_task(title="No date", created_by="boss", assigned_to="worker")

    assert await send_due_reminders(db, NotificationDispatcher(db), now=NOW) == 0
    assert await db.notifications.count_documents({}) == 0


async def test_custom_window(db, insert_task):
    await insert_task(title="In two days", created_by="boss", assigned_to="worker", due_date=NOW + timedelta(hours=40))

    assert await send_due_reminders(db, NotificationDispatcher(db), now=NOW) == 0
    assert await send_due_reminders(db, NotificationDispatcher(db), now=NOW, window=timedelta(hours=48)) == 1


async def test_failed_reminder_is_not_retried(db, insert_task):
    task = await insert_task(title="Flaky", created_by="boss", assigned_to="worker", due_date=NOW + timedelta(hours=2))
    store = CountingBrokenStore()
    dispatcher = NotificationDispatcher(store)

    assert await send_due_reminders(db, dispatcher, now=NOW) == 0
    assert await send_due_reminders(db, dispatcher, now=NOW + timedelta(minutes=15)) == 0

    assert store.notifications.attempts == 1
    assert (await db.tasks.find_one({"id": task["id"]}))["reminder_sent"] is True
