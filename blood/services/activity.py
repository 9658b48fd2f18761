from __future__ import annotations

import logging
from typing import List

from django.conf import settings

from blood.models import ActivityLog

logger = logging.getLogger(__name__)


def record_activity(description: str, activity_type: str) -> ActivityLog:
    entry = ActivityLog.objects.create(description=description[:255], activity_type=activity_type)
    logger.debug("Activity %s: %s", activity_type, description)
    return entry


def recent_activity(limit: int = None) -> List[ActivityLog]:
    limit = limit or int(getattr(settings, "ACTIVITY_FEED_LIMIT", 20))
    return list(ActivityLog.objects.all()[: max(1, int(limit))])
