import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.pymongo import PyMongoIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

UNTRACED_PATHS = ("/health", "/scalar", "/docs", "/openapi.json")
SENSITIVE_HEADERS = {"authorization", "cookie", "set-cookie", "x-amz-security-token"}
FILTERED = "[Filtered]"


def init_sentry(
    dsn: str,
    environment: str = "dev",
    release: str | None = None,
    traces_sample_rate: float = 0.2,
    send_default_pii: bool = False,
):
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        send_default_pii=send_default_pii,
        integrations=[
            FastApiIntegration(),
            PyMongoIntegration(),
            LoggingIntegration(level=None, event_level="ERROR"),
        ],
        traces_sample_rate=traces_sample_rate,
        max_breadcrumbs=100,
        before_send=scrub_event,
        before_send_transaction=drop_untraced_transactions,
    )


def scrub_event(event, hint):
    """Mask credentials and never ship uploaded file contents"""
    request = event.get("request") or {}
    headers = request.get("headers") or {}
    for name in list(headers):
        if name.lower() in SENSITIVE_HEADERS:
            headers[name] = FILTERED
    if request.get("data"):
        request["data"] = FILTERED
    return event


def drop_untraced_transactions(event, hint):
    name = str(event.get("transaction") or "")
    if name.startswith(UNTRACED_PATHS):
        return None
    return event
