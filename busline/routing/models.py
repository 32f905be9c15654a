from django.db import models


class Route(models.Model):
    class PointKind(models.TextChoices):
        ORIGIN = "origin", "출발지"
        WAYPOINT = "waypoint", "경유지"
        VIRTUAL_STOP = "virtual_stop", "가상정류소"
        DESTINATION = "destination", "도착지"

    route_name = models.CharField(max_length=255)
    # Ordered points in wire form: {name, location: {type, coordinates: [lon, lat]}, type, scheduledTime, useAnnouncement}
    points = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Route {self.id} ({self.route_name})"
