from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional

from django.utils import timezone

from .engine import Checkpoint


def _minutes(value: str) -> int:
    hours, minutes = value.split(":", 1)
    return int(hours) * 60 + int(minutes)


def adjusted_time(scheduled: str, base_scheduled: str, actual_start: Optional[datetime]) -> str:
    """
    Shift a "HH:mm" schedule entry by how late (or early) the drive really started.

    The offset of ``scheduled`` from the first stop's ``base_scheduled`` time is added
    to ``actual_start`` and formatted back as local "HH:mm". Entries stay as authored
    until the real start is known. Schedules that run past midnight wrap forward.
    """
    if actual_start is None or not scheduled or not base_scheduled:
        return scheduled
    offset = (_minutes(scheduled) - _minutes(base_scheduled)) % (24 * 60)
    adjusted = timezone.localtime(actual_start) + timedelta(minutes=offset)
    return adjusted.strftime("%H:%M")


def adjusted_schedule(checkpoints: List[Checkpoint]) -> List[str]:
    if not checkpoints:
        return []
    first = checkpoints[0]
    return [
        adjusted_time(cp.scheduled_time, first.scheduled_time, first.arrival_time)
        for cp in checkpoints
    ]
