import os

ENV = os.getenv("ENV", "production")
AWS_REGION = os.getenv("AWS_REGION", "us-west-2")
SERVICE_NAME = os.getenv("SERVICE_NAME", "events-admin")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

EVENTS_TABLE = os.getenv("DYNAMODB_EVENTS_TABLE", "events")
USERS_TABLE = os.getenv("DYNAMODB_USERS_TABLE", "users")

DYNAMODB_ENDPOINT = os.getenv("DYNAMODB_ENDPOINT")  # local only (http://localhost:8002)

JWT_SECRET = os.getenv("JWT_SECRET", "")

ROLES = ("user", "admin", "superadmin")
ADMIN_ROLES = ("admin", "superadmin")

# Injected into boto3 calls when running locally
DYNAMODB_KWARGS: dict = {}
if ENV == "local" and DYNAMODB_ENDPOINT:
    DYNAMODB_KWARGS["endpoint_url"] = DYNAMODB_ENDPOINT
