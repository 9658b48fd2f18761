from __future__ import annotations

import functools
import json
import logging
from datetime import date, datetime
from typing import Any, Optional

from django.http import JsonResponse
from django.utils.dateparse import parse_date, parse_datetime

from blood import exceptions as errors

logger = logging.getLogger(__name__)


def read_json(request) -> dict:
    """Decode a JSON object body; an empty body is an empty dict."""

    if not request.body:
        return {}
    try:
        payload = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise errors.ValidationError(f"Malformed JSON body: {exc}", code="MALFORMED_JSON") from exc
    if not isinstance(payload, dict):
        raise errors.ValidationError("JSON body must be an object.", code="MALFORMED_JSON")
    return payload


def optional_int(payload: dict, key: str) -> Optional[int]:
    value = payload.get(key)
    if value is None or value == "":
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise errors.ValidationError(f"'{key}' must be a whole number.", code="INVALID_NUMBER")


def optional_bool(payload: dict, key: str) -> bool:
    value = payload.get(key, False)
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on", "positive")
    return bool(value)


def optional_datetime(payload: dict, *keys: str) -> Optional[datetime]:
    for key in keys:
        value = payload.get(key)
        if not value:
            continue
        parsed = parse_datetime(str(value).strip().replace("Z", "+00:00"))
        if parsed is None:
            raise errors.ValidationError(f"'{key}' must be an ISO date-time.", code="INVALID_DATETIME")
        return parsed
    return None


def optional_date(payload: dict, key: str) -> Optional[date]:
    value = payload.get(key)
    if not value:
        return None
    try:
        parsed = parse_date(str(value).strip())
    except ValueError:
        parsed = None
    if parsed is None:
        raise errors.ValidationError(f"'{key}' must be an ISO date.", code="INVALID_DATE")
    return parsed


def json_api(view):
    """Render LifelineError rejections (and unexpected failures) as JSON bodies."""

    @functools.wraps(view)
    def wrapper(request, *args, **kwargs) -> Any:
        try:
            return view(request, *args, **kwargs)
        except errors.LifelineError as exc:
            logger.warning("%s rejected (%s): %s", view.__name__, exc.code, exc.message)
            return JsonResponse(exc.as_dict(), status=exc.status_code)
        except Exception:
            logger.exception("Unexpected error in %s", view.__name__)
            return JsonResponse(
                {"success": False, "error": "SERVER_ERROR", "message": "Something went wrong. Please try again."},
                status=500,
            )

    return wrapper
