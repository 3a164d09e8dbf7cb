"""
Timesheet queries and reporting.

There is no query engine: organization reports walk ``org-users``, then each
user's ``user-timesheets`` index, batch-fetch the entries and filter them in
memory. Totals are recomputed from raw entries on every call.
"""
import csv
import io
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ..database.repositories import Record, Repositories
from ..utils import parse_optional_timestamp, parse_timestamp

UNKNOWN = "Unknown"
CSV_HEADERS = ["Date", "User", "Project", "Task", "Start Time", "End Time", "Duration (hours)", "Notes"]


@dataclass
class TimesheetFilters:
    """In-memory filters applied to timesheet listings."""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    user_id: Optional[str] = None
    project_id: Optional[str] = None

    @classmethod
    def from_query(cls, start_date: Optional[str] = None, end_date: Optional[str] = None,
                   user_id: Optional[str] = None, project_id: Optional[str] = None) -> "TimesheetFilters":
        """
        Build filters from raw query parameters.

        A date-only ``end_date`` covers the whole day.

        Raises:
            ValueError: If a date cannot be parsed
        """
        return cls(
            start_date=parse_optional_timestamp(start_date),
            end_date=parse_optional_timestamp(end_date, end_of_day=True),
            user_id=user_id or None,
            project_id=project_id or None,
        )

    def matches(self, entry: Record) -> bool:
        if self.start_date or self.end_date:
            started = parse_timestamp(entry["startTime"])
            if self.start_date and started < self.start_date:
                return False
            if self.end_date and started > self.end_date:
                return False
        if self.user_id and entry.get("userId") != self.user_id:
            return False
        if self.project_id and entry.get("projectId") != self.project_id:
            return False
        return True


def apply_filters(entries: Iterable[Record], filters: TimesheetFilters) -> List[Record]:
    return [entry for entry in entries if filters.matches(entry)]


# PUBLIC_INTERFACE
def user_timesheets(repos: Repositories, user_id: str) -> List[Record]:
    """Every timesheet entry in the user's index, in insertion order."""
    return repos.timesheets.batch_get(repos.user_timesheets.list(user_id))


# PUBLIC_INTERFACE
def organization_timesheets(repos: Repositories, org_id: str,
                            filters: Optional[TimesheetFilters] = None) -> List[Record]:
    """
    Entries of every user in the organization, optionally filtered.

    Args:
        repos: Repositories for the request
        org_id: Organization id
        filters: Optional in-memory filters

    Returns:
        List of timesheet records grouped by user in ``org-users`` order
    """
    entries: List[Record] = []
    for user_id in repos.org_users.list(org_id):
        entries.extend(user_timesheets(repos, user_id))
    if filters is not None:
        entries = apply_filters(entries, filters)
    return entries


def _names(records: Iterable[Record]) -> Dict[str, str]:
    return {record["id"]: record.get("name") or UNKNOWN for record in records}


def _hours(minutes: float) -> float:
    return round(minutes / 60, 2)


def _breakdown(entries: List[Record], field: str, names: Dict[str, str], id_label: str) -> List[dict]:
    totals: Dict[str, float] = {}
    for entry in entries:
        key = entry.get(field)
        totals[key] = totals.get(key, 0) + (entry.get("duration") or 0)
    rows = [
        {id_label: key, "name": names.get(key, UNKNOWN), "minutes": minutes, "hours": _hours(minutes)}
        for key, minutes in totals.items()
    ]
    return sorted(rows, key=lambda row: row["minutes"], reverse=True)


# PUBLIC_INTERFACE
def summarize(repos: Repositories, org_id: str, entries: List[Record]) -> dict:
    """
    Totals and per-user / per-project breakdowns for ``entries``.

    Returns:
        dict with totalMinutes, totalHours, entryCount, byUser, byProject
    """
    user_names = _names(repos.users.batch_get(repos.org_users.list(org_id)))
    project_names = _names(repos.projects.batch_get(repos.org_projects.list(org_id)))
    total = sum(entry.get("duration") or 0 for entry in entries)
    return {
        "totalMinutes": total,
        "totalHours": _hours(total),
        "entryCount": len(entries),
        "byUser": _breakdown(entries, "userId", user_names, "userId"),
        "byProject": _breakdown(entries, "projectId", project_names, "projectId"),
    }


# PUBLIC_INTERFACE
def export_csv(repos: Repositories, org_id: str, entries: List[Record]) -> str:
    """
    Render entries as CSV, a bare header row followed by quoted cells.

    Columns: Date, User, Project, Task, Start Time, End Time,
    Duration (hours), Notes.
    """
    user_names = _names(repos.users.batch_get(repos.org_users.list(org_id)))
    project_names = _names(repos.projects.batch_get(repos.org_projects.list(org_id)))

    buffer = io.StringIO()
    buffer.write(",".join(CSV_HEADERS) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for entry in entries:
        started = parse_timestamp(entry["startTime"])
        ended = parse_timestamp(entry["endTime"]) if entry.get("endTime") else None
        writer.writerow([
            started.date().isoformat(),
            user_names.get(entry.get("userId"), UNKNOWN),
            project_names.get(entry.get("projectId"), UNKNOWN),
            entry.get("taskName") or "",
            started.strftime("%H:%M:%S"),
            ended.strftime("%H:%M:%S") if ended else "",
            f"{(entry.get('duration') or 0) / 60:.2f}",
            entry.get("notes") or "",
        ])
    return buffer.getvalue()
