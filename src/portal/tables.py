"""
Table definitions for the events and users tables.

Used by the test suite (inside moto) and for local setup against DynamoDB Local:

    PYTHONPATH=src ENV=local DYNAMODB_ENDPOINT=http://localhost:8002 \
        python -m portal.tables
"""

import logging

import boto3

from portal.config import AWS_REGION, DYNAMODB_KWARGS, EVENTS_TABLE, USERS_TABLE

logger = logging.getLogger(__name__)


def _table_definition(name: str, index_name: str, range_attr: str) -> dict:
    return {
        "TableName": name,
        "KeySchema": [
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "PK", "AttributeType": "S"},
            {"AttributeName": "SK", "AttributeType": "S"},
            {"AttributeName": range_attr, "AttributeType": "S"},
        ],
        "GlobalSecondaryIndexes": [
            {
                "IndexName": index_name,
                "KeySchema": [
                    {"AttributeName": "SK", "KeyType": "HASH"},
                    {"AttributeName": range_attr, "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
        "BillingMode": "PAY_PER_REQUEST",
    }


TABLE_DEFINITIONS = [
    # events ordered by date
    _table_definition(EVENTS_TABLE, "date-index", "date"),
    # users newest first
    _table_definition(USERS_TABLE, "created-index", "createdAt"),
]


def create_tables(client=None) -> list[str]:
    """Create any missing tables. Returns the names that were created."""
    client = client or boto3.client("dynamodb", region_name=AWS_REGION, **DYNAMODB_KWARGS)
    existing = set(client.list_tables()["TableNames"])

    created: list[str] = []
    for definition in TABLE_DEFINITIONS:
        if definition["TableName"] in existing:
            continue
        client.create_table(**definition)
        client.get_waiter("table_exists").wait(TableName=definition["TableName"])
        logger.info("Created table", extra={"table": definition["TableName"]})
        created.append(definition["TableName"])
    return created


if __name__ == "__main__":
    from portal.logging import configure_logging

    configure_logging()
    create_tables()
