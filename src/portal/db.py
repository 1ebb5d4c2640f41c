"""DynamoDB resource helpers, table dependencies and query utilities."""

from datetime import datetime, timezone

import boto3

from portal.config import AWS_REGION, DYNAMODB_KWARGS, EVENTS_TABLE, USERS_TABLE

EVENT_SK = "METADATA"
USER_SK = "PROFILE"


def _dynamodb():
    return boto3.resource("dynamodb", region_name=AWS_REGION, **DYNAMODB_KWARGS)


def get_events_table():
    """FastAPI dependency: the events table handle for the current request."""
    return _dynamodb().Table(EVENTS_TABLE)


def get_users_table():
    """FastAPI dependency: the users table handle for the current request."""
    return _dynamodb().Table(USERS_TABLE)


def event_pk(event_id: str) -> str:
    return f"EVENT#{event_id}"


def user_pk(user_id: str) -> str:
    return f"USER#{user_id}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso(value: datetime) -> str:
    """
    Normalise a datetime to the UTC, seconds-precision ISO string used for
    every stored timestamp. A fixed width keeps string order equal to time
    order, which the date-index GSI and the `date > now` filters rely on.
    """
    return as_utc(value).isoformat(timespec="seconds")


def now_iso() -> str:
    return to_iso(utcnow())


def build_update_expression(data: dict) -> tuple[str, dict, dict]:
    """
    Build a DynamoDB SET expression from a flat dict of {field: value}.

    Returns (UpdateExpression, ExpressionAttributeNames, ExpressionAttributeValues).

    All attribute names are aliased via ExpressionAttributeNames to avoid
    conflicts with DynamoDB reserved words (e.g. status, date, role, name).
    """
    parts: list[str] = []
    names: dict[str, str] = {}
    values: dict[str, object] = {}

    for i, (key, value) in enumerate(data.items()):
        name_ph = f"#k{i}"
        val_ph = f":v{i}"
        parts.append(f"{name_ph} = {val_ph}")
        names[name_ph] = key
        values[val_ph] = value

    return "SET " + ", ".join(parts), names, values


def query_all(table, **kwargs) -> list[dict]:
    """Run a Query, following LastEvaluatedKey until every page is read."""
    items: list[dict] = []
    while True:
        response = table.query(**kwargs)
        items.extend(response.get("Items", []))
        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return items
        kwargs["ExclusiveStartKey"] = last_key


def count_items(table, **kwargs) -> int:
    """Same as query_all but only sums the server-side Count."""
    total = 0
    while True:
        response = table.query(Select="COUNT", **kwargs)
        total += response.get("Count", 0)
        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return total
        kwargs["ExclusiveStartKey"] = last_key


def batch_get(table, keys: list[dict], projection: list[str]) -> list[dict]:
    """
    BatchGetItem against a single table with a projected attribute list.

    Uses the table's own client, so keys and results are plain Python values.

    Requests are chunked to the 100-key service limit and UnprocessedKeys are
    re-submitted until drained.
    """
    client = table.meta.client
    names = {f"#p{i}": attr for i, attr in enumerate(projection)}
    found: list[dict] = []

    for start in range(0, len(keys), 100):
        request = {
            table.name: {
                "Keys": keys[start:start + 100],
                "ProjectionExpression": ", ".join(names),
                "ExpressionAttributeNames": names,
            }
        }
        while request:
            response = client.batch_get_item(RequestItems=request)
            found.extend(response.get("Responses", {}).get(table.name, []))
            request = response.get("UnprocessedKeys") or None

    return found
