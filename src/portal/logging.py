"""JSON logging to stdout (CloudWatch picks up one JSON object per line)."""

import logging

from pythonjsonlogger.json import JsonFormatter

from portal.config import LOG_LEVEL, SERVICE_NAME


class _ServiceFilter(logging.Filter):
    def filter(self, record):
        record.service = SERVICE_NAME
        return True


def configure_logging() -> None:
    """Attach the JSON stdout handler to the root logger. Safe to call twice."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    if any(getattr(h, "_portal_json", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter("%(asctime)s %(levelname)s %(service)s %(name)s %(message)s"))
    handler.addFilter(_ServiceFilter())
    handler._portal_json = True
    root.addHandler(handler)

    # boto noise
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
