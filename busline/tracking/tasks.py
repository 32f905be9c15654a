from datetime import datetime
from typing import Any, Dict, Optional

from celery import shared_task
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from .models import GpsLog
import logging

logger = logging.getLogger(__name__)


@shared_task
def record_gps_log(payload: Dict[str, Any], received_at: Optional[str] = None) -> int:
    """Store one raw client GPS report. Returns the new log id."""
    stamp: Optional[datetime] = parse_datetime(received_at) if received_at else None
    log = GpsLog.objects.create(payload=payload, received_at=stamp or timezone.now())
    logger.debug("GpsLog %s: stored %s keys", log.id, len(payload))
    return log.id
