from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from .config import IntakeConfig
from .models import IntakeResult

logger = logging.getLogger(__name__)

EVENT_TYPE = "netlify-form-submission"
_MAX_LOGGED_BODY = 500


def extract_form_data(body: Any) -> dict[str, Any]:
    """Return the form fields from either ``{payload: {data}}`` or ``{data}``."""
    if not isinstance(body, dict):
        return {}
    payload = body.get("payload")
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        return payload["data"]
    if isinstance(body.get("data"), dict):
        return body["data"]
    return {}


def _field(form: dict[str, Any], key: str, default: str) -> str:
    value = form.get(key)
    if value is None:
        return default
    return str(value).strip() or default


def build_dispatch_event(form: dict[str, Any]) -> dict[str, Any]:
    return {
        "event_type": EVENT_TYPE,
        "client_payload": {
            "request_type": _field(form, "request-type", "other"),
            "request_value": _field(form, "request-value", ""),
            "request_details": _field(form, "request-details", ""),
        },
    }


def _post_dispatch(
    client: httpx.Client, config: IntakeConfig, event: dict[str, Any]
) -> httpx.Response:
    return client.post(
        config.dispatch_url,
        headers={
            "Accept": "application/vnd.github.v3+json",
            "Authorization": f"token {config.github_token}",
            "Content-Type": "application/json",
        },
        json=event,
    )


def relay_submission(
    raw_body: bytes | str | dict[str, Any],
    config: IntakeConfig | None = None,
    client: httpx.Client | None = None,
) -> IntakeResult:
    """
    Forward one form submission to the repository-dispatch API.

    Never raises: every failure is reported as a 500 result. No retries;
    redelivery is up to the caller.
    """
    try:
        body = json.loads(raw_body) if isinstance(raw_body, (bytes, str)) else raw_body
        event = build_dispatch_event(extract_form_data(body))
        payload = event["client_payload"]

        if not payload["request_value"]:
            logger.info("No request value, skipping GitHub trigger")
            return IntakeResult(status_code=200, message="No request value provided")

        logger.info(
            "Processing request: %s - %s",
            payload["request_type"],
            payload["request_value"],
        )

        config = config or IntakeConfig.from_env()
        if not config.is_complete:
            logger.error("Missing GITHUB_TOKEN or GITHUB_REPO environment variables")
            return IntakeResult(status_code=500, message="Configuration error")

        if client is None:
            with httpx.Client(timeout=config.timeout) as owned:
                response = _post_dispatch(owned, config, event)
        else:
            response = _post_dispatch(client, config, event)

        if response.is_success:
            logger.info("Successfully triggered GitHub Action")
            return IntakeResult(status_code=200, message="GitHub Action triggered")

        logger.error(
            "GitHub API error: %s %s",
            response.status_code,
            response.text[:_MAX_LOGGED_BODY],
        )
        return IntakeResult(
            status_code=500, message=f"GitHub API error: {response.status_code}"
        )
    except Exception as exc:
        logger.exception("Intake relay failed")
        return IntakeResult(status_code=500, message=f"Error: {exc}")
