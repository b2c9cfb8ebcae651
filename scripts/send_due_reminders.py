"""
Cron entry point: send task-reminder notifications for tasks due soon.

    */15 * * * * cd /srv/taskhub && python scripts/send_due_reminders.py
"""
import sys
import os
import asyncio
from datetime import timedelta

# Add parent directory to path to import database
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import config
from database import create_client, get_database
from logging_config import get_logger, setup_logging
from services.notifications import NotificationDispatcher
from services.reminders import send_due_reminders

logger = get_logger("reminder_job")

async def main(window_hours: int):
    client = create_client(config)
    try:
        db = get_database(client, config)
        sent = await send_due_reminders(db, NotificationDispatcher(db), window=timedelta(hours=window_hours))
        print(f"✅ Sent {sent} reminder(s)")
    finally:
        client.close()

if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description='Send due-date reminders')
    parser.add_argument('--window-hours', type=int, default=config.REMINDER_WINDOW_HOURS, help='Look-ahead window in hours')

    args = parser.parse_args()
    setup_logging()
    asyncio.run(main(args.window_hours))
