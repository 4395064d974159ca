from worktrack.residency.notifications import (
    NOTIFICATION_SCHEDULE, NotificationDraft, NotificationSchedule, StaffMember,
    days_until_expiry, due_schedules, managers_for, plan_notifications,
)

__all__ = [
    "NOTIFICATION_SCHEDULE", "NotificationDraft", "NotificationSchedule", "StaffMember",
    "days_until_expiry", "due_schedules", "managers_for", "plan_notifications",
]
