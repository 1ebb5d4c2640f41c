from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator


# ── Events ────────────────────────────────────────────────────────────────────

class EventIn(BaseModel):
    """Body of POST /events and PUT /events/{id}. PUT replaces all five fields."""

    title: str
    description: Optional[str] = None
    date: datetime     # "2026-11-02" or "2026-11-02T18:30:00Z"; naive means UTC
    time: Optional[str] = None   # display time e.g. "18:30"
    venue: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _date_only_is_midnight(cls, value):
        if isinstance(value, str) and len(value) == 10:
            return f"{value}T00:00:00+00:00"
        return value


# ── Users ─────────────────────────────────────────────────────────────────────

class RoleUpdate(BaseModel):
    # Checked against ROLES in the route so a bad value gets the 400 envelope.
    role: Optional[Any] = None


# Fields of a user exposed when expanding event registrations.
REGISTRANT_FIELDS = [
    "id",
    "name",
    "email",
    "registration_no",
    "branch",
    "semester",
    "mobile",
    "role",
]


# ── Responses ─────────────────────────────────────────────────────────────────

class StatsResponse(BaseModel):
    totalMembers: int
    totalEvents: int
    upcomingEvents: int
