"""
Timesheet entry creation, update and deletion with index bookkeeping.
"""
import logging
from typing import Any, Dict, Optional

from ..database.repositories import Record, Repositories
from ..utils import generate_id, minutes_between, utc_now_iso

logger = logging.getLogger(__name__)


class InvalidDuration(ValueError):
    """End time is not after start time."""

    def __init__(self):
        super().__init__("End time must be after start time")


def compute_duration(start_time: str, end_time: str) -> int:
    """
    Whole minutes between two ISO timestamps.

    Raises:
        InvalidDuration: If the result is zero or negative
    """
    duration = minutes_between(start_time, end_time)
    if duration <= 0:
        raise InvalidDuration()
    return duration


# PUBLIC_INTERFACE
def create_timesheet(repos: Repositories, user_id: str, data: Dict[str, Any]) -> Record:
    """
    Store a new entry for ``user_id`` and append it to their index.

    The caller's ``duration`` is kept as sent; it is only computed when
    omitted.

    Raises:
        InvalidDuration: If ``endTime`` is not after ``startTime``
    """
    computed = compute_duration(data["startTime"], data["endTime"])
    duration = data.get("duration")
    if duration is None:
        duration = computed
    elif duration <= 0:
        raise InvalidDuration()

    timesheet_id = generate_id("timesheet")
    record = {
        "id": timesheet_id,
        "userId": user_id,
        "projectId": data["projectId"],
        "taskName": data["taskName"],
        "startTime": data["startTime"],
        "endTime": data["endTime"],
        "duration": duration,
        "notes": data.get("notes"),
        "beforePhotoUrl": data.get("beforePhotoUrl") or None,
        "afterPhotoUrl": data.get("afterPhotoUrl") or None,
        "createdAt": utc_now_iso(),
    }
    repos.timesheets.set(timesheet_id, record)
    repos.user_timesheets.append(user_id, timesheet_id)
    return record


# PUBLIC_INTERFACE
def update_timesheet(repos: Repositories, record: Record, changes: Dict[str, Any]) -> Record:
    """
    Merge ``changes`` into ``record`` and recompute the duration.

    ``id`` and ``userId`` never change.

    Raises:
        InvalidDuration: If the merged times give a duration of zero or less
    """
    updated = {**record, **changes, "id": record["id"], "userId": record["userId"]}
    updated["duration"] = compute_duration(updated["startTime"], updated["endTime"])
    repos.timesheets.set(record["id"], updated)
    return updated


# PUBLIC_INTERFACE
def delete_timesheet(repos: Repositories, record: Record, owner_id: Optional[str] = None) -> None:
    """Remove the entry and its id from the owner's index."""
    owner_id = owner_id or record["userId"]
    repos.timesheets.delete(record["id"])
    repos.user_timesheets.remove(owner_id, record["id"])
    logger.info(f"Timesheet {record['id']} deleted for user {owner_id}")
