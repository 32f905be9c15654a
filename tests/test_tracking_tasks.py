from datetime import datetime, timezone

import pytest

from tracking.models import GpsLog
from tracking.tasks import record_gps_log


@pytest.mark.django_db
def test_record_gps_log_stores_payload_and_receipt_time():
    received = datetime(2026, 3, 2, 6, 0, 5, tzinfo=timezone.utc)

    log_id = record_gps_log({"lat": 37.5, "lng": 127.0, "accuracy": 8}, received.isoformat())

    log = GpsLog.objects.get(pk=log_id)
    assert log.payload == {"lat": 37.5, "lng": 127.0, "accuracy": 8}
    assert log.received_at == received


@pytest.mark.django_db
def test_record_gps_log_defaults_receipt_time():
    log_id = record_gps_log({"lat": 37.5})

    assert GpsLog.objects.get(pk=log_id).received_at is not None
