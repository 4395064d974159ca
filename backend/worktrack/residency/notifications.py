"""
Residency expiry notifications — which alerts are due today, and for whom.

Residence permits are tracked per staff member. As the expiry date approaches,
alerts are raised at four escalating stages:

    3_months   30 < days <= 90   low
    1_month     7 < days <= 30   medium
    1_week      1 < days <= 7    high
    daily       0 <= days <= 7   high   (repeats every day of the last week)

Each due stage produces one alert for the resident and one for every manager
(HR manager, general manager, admin). Planning is pure: the caller supplies
the residents, the staff directory and "today", and delivers the drafts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from worktrack.auth.roles import Role

logger = logging.getLogger(__name__)

RESIDENT_NOTIFICATION_TYPE = "residence_expiry"
MANAGER_NOTIFICATION_TYPE = "residence_expiry_manager"

MANAGER_ROLES: frozenset[Role] = frozenset({Role.HR_MANAGER, Role.GENERAL_MANAGER, Role.ADMIN})


@dataclass(frozen=True)
class NotificationSchedule:
    kind: str
    days_before_expiry: int   # upper bound of the window (days <= this), not a trigger day
    title: str
    priority: str
    min_days_exclusive: int   # lower bound of the window (days > this)


NOTIFICATION_SCHEDULE: tuple[NotificationSchedule, ...] = (
    NotificationSchedule("3_months", 90, "Notice: residence permit expires within 3 months", "low", 30),
    NotificationSchedule("1_month", 30, "Warning: residence permit expires within one month", "medium", 7),
    NotificationSchedule("1_week", 7, "Urgent: residence permit expires within one week", "high", 1),
    # daily covers the whole last week, overlapping 1_week on days 2..7
    NotificationSchedule("daily", 7, "Immediate: residence permit is about to expire", "high", -1),
)


@dataclass(frozen=True)
class StaffMember:
    id: int
    full_name: str
    role: Role
    residence_number: str | None = None
    residence_expiry_date: date | None = None


@dataclass(frozen=True)
class NotificationDraft:
    recipient_id: int
    type: str
    title: str
    message: str
    priority: str
    schedule: str
    subject_id: int
    expiry_date: date


def days_until_expiry(expiry_date: date, today: date) -> int:
    return (expiry_date - today).days


def due_schedules(days: int) -> list[NotificationSchedule]:
    """Stages whose window contains `days`; nothing once the permit has expired."""
    if days < 0:
        return []
    return [s for s in NOTIFICATION_SCHEDULE if s.min_days_exclusive < days <= s.days_before_expiry]


def managers_for(staff: Iterable[StaffMember]) -> list[StaffMember]:
    return [m for m in staff if m.role in MANAGER_ROLES]


def _message(schedule: NotificationSchedule, resident: StaffMember, expiry: date) -> str:
    return (
        f"{schedule.title}\n"
        f"Employee: {resident.full_name}\n"
        f"Residence number: {resident.residence_number or '-'}\n"
        f"Expiry date: {expiry.isoformat()}"
    )


def plan_notifications(
    residents: Iterable[StaffMember],
    staff: Iterable[StaffMember],
    today: date,
) -> list[NotificationDraft]:
    """Build every alert due on `today` for the given residents."""
    managers = managers_for(staff)
    drafts: list[NotificationDraft] = []

    for resident in residents:
        expiry = resident.residence_expiry_date
        if expiry is None:
            continue
        days = days_until_expiry(expiry, today)
        for schedule in due_schedules(days):
            message = _message(schedule, resident, expiry)
            drafts.append(NotificationDraft(
                recipient_id=resident.id,
                type=RESIDENT_NOTIFICATION_TYPE,
                title=schedule.title,
                message=message,
                priority=schedule.priority,
                schedule=schedule.kind,
                subject_id=resident.id,
                expiry_date=expiry,
            ))
            for manager in managers:
                drafts.append(NotificationDraft(
                    recipient_id=manager.id,
                    type=MANAGER_NOTIFICATION_TYPE,
                    title=f"{schedule.title} - {resident.full_name}",
                    message=message,
                    priority=schedule.priority,
                    schedule=schedule.kind,
                    subject_id=resident.id,
                    expiry_date=expiry,
                ))
            logger.debug("Residency %s alert due for user %s (%d days left)", schedule.kind, resident.id, days)

    logger.info("Planned %d residency notification(s) for %s", len(drafts), today.isoformat())
    return drafts
