"""Admin routes for events: listing, CRUD and registration views under /api/admin/events.

DynamoDB key design:
  Event:  PK=EVENT#<id>  SK=METADATA

Registrations live on the event item as a list of {user, registeredAt}, where
`user` is a user id. Read routes that show registrants swap that id for a
projected copy of the user.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional
from uuid import uuid4

from boto3.dynamodb.conditions import Key
from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool

from portal.auth import require_admin
from portal.db import (
    EVENT_SK,
    USER_SK,
    as_utc,
    batch_get,
    build_update_expression,
    event_pk,
    get_events_table,
    get_users_table,
    now_iso,
    query_all,
    to_iso,
    user_pk,
    utcnow,
)
from portal.errors import (
    STORE_ERRORS,
    envelope_error,
    is_condition_failure,
    not_found,
    server_error,
)
from portal.models import REGISTRANT_FIELDS, EventIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", dependencies=[Depends(require_admin)])

# Everything but the registrations list, for the lightweight listing.
_LISTING_FIELDS = [
    "id",
    "title",
    "description",
    "date",
    "time",
    "venue",
    "status",
    "createdAt",
    "updatedAt",
]


# ── Helpers ────────────────────────────────────────────────────────────────────

def derive_status(date: datetime, now: Optional[datetime] = None) -> str:
    """Return upcoming when the event starts strictly after `now`, else past."""
    now = as_utc(now) if now is not None else utcnow()
    return "upcoming" if as_utc(date) > now else "past"


def _event_fields(event: EventIn) -> dict:
    return {
        "title": event.title,
        "description": event.description,
        "date": to_iso(event.date),
        "time": event.time,
        "venue": event.venue,
        "status": derive_status(event.date),
    }


def _public_event(item: dict) -> dict:
    return {k: v for k, v in item.items() if k not in ("PK", "SK")}


def _events_by_date(table, fields: Optional[list[str]] = None) -> list[dict]:
    """All events, latest date first, via the date-index GSI."""
    kwargs: dict = {
        "IndexName": "date-index",
        "KeyConditionExpression": Key("SK").eq(EVENT_SK),
        "ScanIndexForward": False,
    }
    if fields:
        names = {f"#f{i}": name for i, name in enumerate(fields)}
        kwargs["ProjectionExpression"] = ", ".join(names)
        kwargs["ExpressionAttributeNames"] = names
    return query_all(table, **kwargs)


def _registration_count(client, table_name: str, event_id: str) -> int:
    item = client.get_item(
        TableName=table_name,
        Key={"PK": event_pk(event_id), "SK": EVENT_SK},
        ProjectionExpression="#r",
        ExpressionAttributeNames={"#r": "registrations"},
    ).get("Item") or {}
    return len(item.get("registrations") or [])


def _populate_registrations(users_table, events: list[dict]) -> None:
    """
    Replace each registration's user id with the whitelisted user fields, in place.

    A registration whose user no longer exists keeps its slot with user=None.
    """
    user_ids = {
        reg["user"]
        for event in events
        for reg in event.get("registrations") or []
        if reg.get("user")
    }
    if not user_ids:
        return

    keys = [{"PK": user_pk(uid), "SK": USER_SK} for uid in sorted(user_ids)]
    found = {u["id"]: u for u in batch_get(users_table, keys, REGISTRANT_FIELDS)}

    for event in events:
        for reg in event.get("registrations") or []:
            reg["user"] = found.get(reg.get("user"))


# ── Routes ─────────────────────────────────────────────────────────────────────

@router.get("/events")
async def list_events(table=Depends(get_events_table)):
    """
    Every event, latest date first, with `registrations` set to the number of
    registrants. Counts are read concurrently, one per event; a single failed
    read fails the whole request.
    """
    # Workers share the low-level client, not the Table resource.
    client = table.meta.client
    try:
        events = await run_in_threadpool(_events_by_date, table, _LISTING_FIELDS)
        counts = await asyncio.gather(
            *(
                run_in_threadpool(_registration_count, client, table.name, e["id"])
                for e in events
            )
        )
    except STORE_ERRORS as exc:
        raise server_error("Error fetching events", exc) from exc

    return [
        {**_public_event(event), "registrations": count}
        for event, count in zip(events, counts)
    ]


@router.post("/events", status_code=status.HTTP_201_CREATED)
def create_event(event: EventIn, table=Depends(get_events_table)):
    event_id = str(uuid4())
    ts = now_iso()
    item = {
        "PK": event_pk(event_id),
        "SK": EVENT_SK,
        "id": event_id,
        **_event_fields(event),
        "registrations": [],
        "createdAt": ts,
        "updatedAt": ts,
    }

    try:
        table.put_item(Item=item, ConditionExpression="attribute_not_exists(PK)")
    except STORE_ERRORS as exc:
        raise server_error("Error creating event", exc) from exc

    logger.info("Event created", extra={"event_id": event_id, "status": item["status"]})
    return _public_event(item)


@router.put("/events/{event_id}")
def update_event(event_id: str, event: EventIn, table=Depends(get_events_table)):
    data = _event_fields(event)
    data["updatedAt"] = now_iso()

    expr, names, values = build_update_expression(data)
    try:
        updated = table.update_item(
            Key={"PK": event_pk(event_id), "SK": EVENT_SK},
            UpdateExpression=expr,
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=values,
            ConditionExpression="attribute_exists(PK)",
            ReturnValues="ALL_NEW",
        )["Attributes"]
    except STORE_ERRORS as exc:
        if is_condition_failure(exc):
            raise not_found("Event not found")
        raise server_error("Error updating event", exc) from exc

    logger.info("Event updated", extra={"event_id": event_id, "status": data["status"]})
    return _public_event(updated)


@router.delete("/events/{event_id}")
def delete_event(event_id: str, table=Depends(get_events_table)):
    try:
        table.delete_item(
            Key={"PK": event_pk(event_id), "SK": EVENT_SK},
            ConditionExpression="attribute_exists(PK)",
        )
    except STORE_ERRORS as exc:
        if is_condition_failure(exc):
            raise not_found("Event not found")
        raise server_error("Error deleting event", exc) from exc

    logger.info("Event deleted", extra={"event_id": event_id})
    return {"message": "Event deleted successfully"}


@router.get("/events/all")
def list_events_with_registrations(
    events_table=Depends(get_events_table),
    users_table=Depends(get_users_table),
):
    try:
        events = _events_by_date(events_table)
        _populate_registrations(users_table, events)
    except Exception as exc:
        raise envelope_error("Error fetching events", exc) from exc

    data = [
        {**_public_event(event), "registrationCount": len(event.get("registrations") or [])}
        for event in events
    ]
    return {"success": True, "count": len(events), "data": data}


@router.get("/events/{event_id}/registrations")
def get_event_registrations(
    event_id: str,
    events_table=Depends(get_events_table),
    users_table=Depends(get_users_table),
):
    try:
        event = events_table.get_item(
            Key={"PK": event_pk(event_id), "SK": EVENT_SK}
        ).get("Item")
        if event:
            _populate_registrations(users_table, [event])
    except Exception as exc:
        raise envelope_error("Error fetching event registrations", exc) from exc

    if not event:
        raise not_found("Event not found", envelope=True)

    registrations = event.get("registrations") or []
    return {"success": True, "count": len(registrations), "data": registrations}
