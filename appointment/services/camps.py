from __future__ import annotations

from typing import List, Optional

from appointment.models import Camp


def get_camp_schedule(camp_id) -> Optional[Camp]:
    """Read-only camp lookup used when booking a camp slot."""

    if camp_id is None:
        return None
    return Camp.objects.filter(pk=camp_id).first()


def list_camps() -> List[Camp]:
    return list(Camp.objects.all())
