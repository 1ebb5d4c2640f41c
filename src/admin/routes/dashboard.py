"""Dashboard counters: GET /api/admin/stats."""

from boto3.dynamodb.conditions import Key
from fastapi import APIRouter, Depends

from portal.auth import require_admin
from portal.db import EVENT_SK, USER_SK, count_items, get_events_table, get_users_table, now_iso
from portal.errors import STORE_ERRORS, server_error
from portal.models import StatsResponse

router = APIRouter(prefix="/api/admin", dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    events_table=Depends(get_events_table),
    users_table=Depends(get_users_table),
):
    # Three independent counts; not a consistent snapshot.
    try:
        total_members = count_items(
            users_table,
            IndexName="created-index",
            KeyConditionExpression=Key("SK").eq(USER_SK),
        )
        upcoming_events = count_items(
            events_table,
            IndexName="date-index",
            KeyConditionExpression=Key("SK").eq(EVENT_SK) & Key("date").gt(now_iso()),
        )
        total_events = count_items(
            events_table,
            IndexName="date-index",
            KeyConditionExpression=Key("SK").eq(EVENT_SK),
        )
    except STORE_ERRORS as exc:
        raise server_error("Error fetching stats", exc) from exc

    return StatsResponse(
        totalMembers=total_members,
        totalEvents=total_events,
        upcomingEvents=upcoming_events,
    )
