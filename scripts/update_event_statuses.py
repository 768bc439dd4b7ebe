"""
Mark finished events as COMPLETED

Meant for cron, e.g. every 15 minutes:
  python scripts/update_event_statuses.py
"""

import sys
import asyncio
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.database import connect_db, disconnect_db
from app.logging_config import setup_logging
from app.services.event_service import event_service


async def main():
    setup_logging()
    await connect_db()
    try:
        completed = await event_service.complete_finished_events()
        print(f"[OK] {completed} events marked as COMPLETED")
    finally:
        await disconnect_db()


if __name__ == "__main__":
    asyncio.run(main())
