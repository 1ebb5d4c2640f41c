"""
Shared pytest fixtures.

Environment variables are set at module level, before any src/ imports,
so config.py reads the correct test values when fixtures are first evaluated.
"""

import os

# Must be set before any portal.* imports.
# Use setdefault so externally-passed env vars (integration tests) take precedence.
os.environ.setdefault("ENV", "test")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_SESSION_TOKEN", "testing")
os.environ.setdefault("AWS_REGION", "us-west-2")
os.environ.setdefault("DYNAMODB_EVENTS_TABLE", "events")
os.environ.setdefault("DYNAMODB_USERS_TABLE", "users")
os.environ.setdefault("JWT_SECRET", "test-secret-32-chars-exactly-ok!")

from datetime import datetime, timedelta, timezone

import boto3
import pytest
from fastapi.testclient import TestClient
from jose import jwt
from moto import mock_aws

ADMIN_ID = "admin-0001"


# ── Token helper ────────────────────────────────────────────────────────────────

def make_token(
    user_id: str = ADMIN_ID,
    secret: str = "test-secret-32-chars-exactly-ok!",
    expired: bool = False,
) -> str:
    exp = datetime.now(timezone.utc) + (
        timedelta(seconds=-1) if expired else timedelta(hours=1)
    )
    return jwt.encode({"id": user_id, "exp": exp}, secret, algorithm="HS256")


def auth_headers(user_id: str = ADMIN_ID) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


# ── Seed helpers ────────────────────────────────────────────────────────────────

def put_user(
    table,
    user_id: str,
    name: str,
    email: str,
    registration_no: str,
    role: str = "user",
    created_at: str = "2026-01-01T00:00:00+00:00",
    **extra,
) -> dict:
    item = {
        "PK": f"USER#{user_id}",
        "SK": "PROFILE",
        "id": user_id,
        "name": name,
        "email": email,
        "registration_no": registration_no,
        "role": role,
        "password": "$2a$10$hashedhashedhashedhashedhashed",
        "createdAt": created_at,
        **extra,
    }
    table.put_item(Item=item)
    return item


def put_event(
    table,
    event_id: str,
    title: str,
    date: str,
    registrations: list | None = None,
) -> dict:
    item = {
        "PK": f"EVENT#{event_id}",
        "SK": "METADATA",
        "id": event_id,
        "title": title,
        "description": f"{title} description",
        "date": date,
        "time": "18:00",
        "venue": "Main Hall",
        "status": "upcoming",
        "registrations": registrations or [],
        "createdAt": "2026-01-01T00:00:00+00:00",
        "updatedAt": "2026-01-01T00:00:00+00:00",
    }
    table.put_item(Item=item)
    return item


# ── AWS fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture()
def aws_env():
    """Start moto mock, create the events + users tables, yield, teardown."""
    with mock_aws():
        from portal.tables import create_tables  # noqa: PLC0415

        create_tables(boto3.client("dynamodb", region_name="us-west-2"))
        yield


@pytest.fixture()
def events_table(aws_env):
    return boto3.resource("dynamodb", region_name="us-west-2").Table("events")


@pytest.fixture()
def users_table(aws_env):
    return boto3.resource("dynamodb", region_name="us-west-2").Table("users")


@pytest.fixture()
def admin_user(users_table):
    """The caller for auth_headers(). Oldest account, so it sorts last in listings."""
    return put_user(
        users_table,
        ADMIN_ID,
        name="Site Admin",
        email="admin@club.org",
        registration_no="ADM001",
        role="admin",
        created_at="2020-01-01T00:00:00+00:00",
    )


@pytest.fixture()
def client(aws_env, admin_user):
    """FastAPI TestClient with mocked AWS. Import app inside fixture so boto3
    clients are always created inside the mock_aws context."""
    from admin.handler import app  # noqa: PLC0415

    yield TestClient(app, raise_server_exceptions=True)
    app.dependency_overrides.clear()
