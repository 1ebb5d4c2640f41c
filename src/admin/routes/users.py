"""Admin routes for members: searchable listing and role changes under /api/admin/users.

DynamoDB key design:
  User:  PK=USER#<id>  SK=PROFILE

Users are written by the member portal; this API only reads them and changes roles.
"""

import logging
import math
from typing import Optional

from boto3.dynamodb.conditions import Key
from fastapi import APIRouter, Depends, HTTPException, Query, status

from portal.auth import require_admin
from portal.config import ROLES
from portal.db import USER_SK, get_users_table, query_all, user_pk
from portal.errors import STORE_ERRORS, envelope_error, is_condition_failure, not_found, server_error
from portal.models import RoleUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", dependencies=[Depends(require_admin)])

_SEARCH_FIELDS = ("name", "email", "registration_no")


# ── Helpers ────────────────────────────────────────────────────────────────────

def _public_user(item: dict) -> dict:
    return {k: v for k, v in item.items() if k not in ("PK", "SK", "password")}


def matches_search(user: dict, search: str) -> bool:
    """Case-insensitive substring match on any of name, email or registration_no."""
    needle = search.lower()
    return any(needle in str(user.get(field) or "").lower() for field in _SEARCH_FIELDS)


def paginate(items: list, page: int, limit: int) -> list:
    start = (page - 1) * limit
    return items[start:start + limit]


# ── Routes ─────────────────────────────────────────────────────────────────────

@router.get("/users")
def list_users(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    table=Depends(get_users_table),
):
    """
    Newest members first, optionally filtered by `search`. `total` counts the
    filtered set before paging.
    """
    try:
        users = query_all(
            table,
            IndexName="created-index",
            KeyConditionExpression=Key("SK").eq(USER_SK),
            ScanIndexForward=False,
        )
    except STORE_ERRORS as exc:
        raise server_error("Error fetching users", exc) from exc

    if search:
        users = [u for u in users if matches_search(u, search)]

    total = len(users)
    return {
        "users": [_public_user(u) for u in paginate(users, page, limit)],
        "total": total,
        "page": page,
        "totalPages": math.ceil(total / limit),
    }


@router.put("/users/{user_id}/role")
def update_user_role(
    user_id: str,
    body: Optional[RoleUpdate] = None,
    table=Depends(get_users_table),
):
    role = body.role if body else None
    if role not in ROLES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"success": False, "message": "Invalid role specified"},
        )

    try:
        user = table.update_item(
            Key={"PK": user_pk(user_id), "SK": USER_SK},
            UpdateExpression="SET #role = :role",
            ExpressionAttributeNames={"#role": "role"},
            ExpressionAttributeValues={":role": role},
            ConditionExpression="attribute_exists(PK)",
            ReturnValues="ALL_NEW",
        )["Attributes"]
    except Exception as exc:
        if is_condition_failure(exc):
            raise not_found("User not found", envelope=True)
        raise envelope_error("Error updating user role", exc) from exc

    logger.info("User role changed", extra={"user_id": user_id, "role": role})
    return {"success": True, "data": _public_user(user)}
