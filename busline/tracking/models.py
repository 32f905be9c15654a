from typing import List, Optional, Tuple

from django.db import models
from django.utils import timezone

from routing.services import RouteSnapshot

from .engine import Checkpoint, DetectionParams


class DriveSession(models.Model):
    class Status(models.TextChoices):
        RUNNING = "running", "Running"
        COMPLETED = "completed", "Completed"

    route_ref = models.CharField(max_length=64)
    route_snapshot = models.JSONField(default=dict)
    status = models.CharField(
        max_length=16, choices=Status.choices, default=Status.RUNNING
    )
    approach_radius = models.FloatField(default=0.5)
    arrival_radius = models.FloatField(default=0.1)
    # [lon, lat] pairs
    current_location = models.JSONField(null=True, blank=True)
    previous_location = models.JSONField(null=True, blank=True)
    checkpoints = models.JSONField(default=list)
    start_time = models.DateTimeField(default=timezone.now)
    end_time = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=["status"], name="drive_session_status_idx")]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"DriveSession {self.id} ({self.status})"

    @property
    def is_running(self) -> bool:
        return self.status == self.Status.RUNNING

    @property
    def snapshot(self) -> RouteSnapshot:
        return RouteSnapshot.from_payload(self.route_snapshot)

    @property
    def detection_params(self) -> DetectionParams:
        return DetectionParams.for_session(self.approach_radius, self.arrival_radius)

    def load_checkpoints(self) -> List[Checkpoint]:
        return [Checkpoint.from_dict(item) for item in self.checkpoints]

    def store_checkpoints(self, checkpoints: List[Checkpoint]) -> None:
        self.checkpoints = [cp.to_dict() for cp in checkpoints]

    def location_pair(self, field: str) -> Optional[Tuple[float, float]]:
        value = getattr(self, field)
        return (float(value[0]), float(value[1])) if value else None

    def record_location(self, lon: float, lat: float) -> None:
        self.previous_location = self.current_location
        self.current_location = [lon, lat]

    def mark_completed(self) -> None:
        self.status = self.Status.COMPLETED
        self.end_time = timezone.now()
        self.save(update_fields=["status", "end_time", "updated_at"])


class GpsLog(models.Model):
    payload = models.JSONField(default=dict, blank=True)
    received_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [models.Index(fields=["received_at"], name="gps_log_received_idx")]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"GpsLog {self.id} @ {self.received_at:%Y-%m-%d %H:%M:%S}"
