"""Residency API — plan the residence-expiry alerts due on a given day."""

import logging
from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from worktrack.api.deps import require_capability
from worktrack.auth.capabilities import Capability
from worktrack.auth.context import RequestContext
from worktrack.auth.roles import Role
from worktrack.residency.notifications import StaffMember, plan_notifications

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/residency", tags=["residency"])


class StaffIn(BaseModel):
    id: int
    full_name: str
    role: Role
    residence_number: str | None = None
    residence_expiry_date: date | None = None

    def to_member(self) -> StaffMember:
        return StaffMember(**self.model_dump())


class PlanRequest(BaseModel):
    residents: list[StaffIn]
    staff: list[StaffIn] = Field(default_factory=list)
    today: date | None = None


@router.post("/notifications/plan")
async def plan(
    body: PlanRequest,
    ctx: RequestContext = Depends(require_capability(Capability.RESIDENCY_NOTIFICATIONS)),
):
    """Return the notification drafts due for the given residents."""
    today = body.today or date.today()
    drafts = plan_notifications(
        [r.to_member() for r in body.residents],
        [s.to_member() for s in body.staff],
        today,
    )
    logger.info("Residency plan requested by %s: %d draft(s)", ctx.actor, len(drafts))
    return {
        "today": today.isoformat(),
        "count": len(drafts),
        "notifications": [
            {
                "recipient_id": d.recipient_id,
                "type": d.type,
                "title": d.title,
                "message": d.message,
                "priority": d.priority,
                "schedule": d.schedule,
                "subject_id": d.subject_id,
                "expiry_date": d.expiry_date.isoformat(),
            }
            for d in drafts
        ],
    }
