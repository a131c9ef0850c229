"""
Reminder Deduplicator
Keeps at most one reminder per obligation key.
"""
from collections import defaultdict
from typing import Dict, List
import logging

from opsboard.models.reminders import Reminder
from opsboard.services.stores import ReminderStore

logger = logging.getLogger(__name__)


def pick_survivor_order(reminders: List[Reminder]) -> List[Reminder]:
    """Latest due date first; ties broken by the larger id."""
    return sorted(reminders, key=lambda r: (r.due_date, r.id), reverse=True)


class ReminderDeduplicator:
    def __init__(self, store: ReminderStore):
        self.store = store

    async def remove_duplicates(self, reminder_type: str = "payment") -> int:
        """
        Delete every reminder that shares a related id with a more relevant one.

        Returns the number of reminders actually deleted. Deletes that find
        nothing (already removed elsewhere) or fail are logged and skipped, so
        the pass is safe to repeat.
        """
        try:
            reminders = await self.store.list_reminders(type_filter=reminder_type)
        except Exception:
            logger.exception("Could not list %s reminders for deduplication", reminder_type)
            return 0

        groups: Dict[str, List[Reminder]] = defaultdict(list)
        for reminder in reminders:
            if reminder.type != reminder_type:
                continue
            groups[reminder.related_id].append(reminder)

        removed = 0
        for related_id, group in groups.items():
            if len(group) < 2:
                continue
            keep, *extras = pick_survivor_order(group)
            for duplicate in extras:
                try:
                    deleted = await self.store.delete_reminder(duplicate.id)
                except Exception:
                    logger.exception("Failed to delete duplicate reminder %s", duplicate.id)
                    continue
                if deleted:
                    removed += 1
                else:
                    logger.debug("Duplicate reminder %s was already gone", duplicate.id)
            logger.info("Kept reminder %s for %s, dropped %d duplicate(s)", keep.id, related_id, len(extras))

        return removed
