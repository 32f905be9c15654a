from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import requests
from django.conf import settings

from busline.errors import RouteNotFound, UpstreamUnavailable
from busline.geodesy import LonLat, validate_lon_lat

from .models import Route

logger = logging.getLogger(__name__)

SCHEDULE_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


@dataclass(frozen=True)
class RoutePoint:
    name: str
    lon: float
    lat: float
    kind: str
    scheduled_time: str = ""
    announce: bool = False

    @property
    def location(self) -> LonLat:
        return self.lon, self.lat

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "RoutePoint":
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValueError("Route point name is required")
        try:
            coords = data["location"]["coordinates"]
            lon, lat = validate_lon_lat((coords[0], coords[1]))
        except (KeyError, IndexError, TypeError) as exc:
            raise ValueError(f"Route point {name!r} needs location.coordinates [lon, lat]") from exc
        kind = data.get("type", Route.PointKind.WAYPOINT)
        if kind not in Route.PointKind.values:
            raise ValueError(f"Route point {name!r} has unknown type {kind!r}")
        scheduled = data.get("scheduledTime") or ""
        if scheduled and not SCHEDULE_PATTERN.match(scheduled):
            raise ValueError(f"Route point {name!r} scheduledTime must be HH:mm")
        return cls(
            name=name,
            lon=lon,
            lat=lat,
            kind=kind,
            scheduled_time=scheduled,
            announce=bool(data.get("useAnnouncement", False)),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "location": {"type": "Point", "coordinates": [self.lon, self.lat]},
            "type": self.kind,
            "scheduledTime": self.scheduled_time,
            "useAnnouncement": self.announce,
        }


@dataclass(frozen=True)
class RouteSnapshot:
    """Read-only copy of a route taken when a drive starts."""

    route_id: str
    route_name: str
    points: Tuple[RoutePoint, ...]

    def __len__(self) -> int:
        return len(self.points)

    def __getitem__(self, index: int) -> RoutePoint:
        return self.points[index]

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "RouteSnapshot":
        raw_points = data.get("points") or []
        if not raw_points:
            raise ValueError("Route has no points")
        return cls(
            route_id=str(data.get("id", data.get("_id", ""))),
            route_name=str(data.get("routeName", "")),
            points=tuple(RoutePoint.from_payload(p) for p in raw_points),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.route_id,
            "routeName": self.route_name,
            "points": [p.to_payload() for p in self.points],
        }


class RouteAuthoringClient:
    """Fetches routes from the remote route-authoring service."""

    def __init__(self, base_url: str | None = None) -> None:
        self.base_url = (base_url or settings.ROUTE_AUTHORING_URL).rstrip("/")

    def fetch(self, route_id: str) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}/{route_id}"
        for attempt in range(3):
            resp = requests.get(url, timeout=settings.HTTP_TIMEOUT_SECONDS)
            if resp.status_code == 404:
                return None
            if resp.ok:
                return resp.json()
            if resp.status_code < 500:
                break
            logger.warning("Route %s: authoring service answered %s (attempt %s)", route_id, resp.status_code, attempt + 1)
        resp.raise_for_status()
        return None


def snapshot_from_route(route: Route) -> RouteSnapshot:
    return RouteSnapshot.from_payload(
        {"id": route.id, "routeName": route.route_name, "points": route.points}
    )


def load_route_snapshot(route_id: str) -> RouteSnapshot:
    route_id = str(route_id)
    if settings.ROUTE_AUTHORING_URL:
        try:
            payload = RouteAuthoringClient().fetch(route_id)
        except requests.RequestException as exc:
            logger.warning("Route %s: authoring service unavailable: %s", route_id, exc)
            raise UpstreamUnavailable(
                f"Route source unavailable for route {route_id}", route_id=route_id
            ) from exc
        if payload is None:
            raise RouteNotFound(f"Route {route_id} not found", route_id=route_id)
        if not isinstance(payload, dict):
            raise ValueError("Route source returned a non-object body")
        return RouteSnapshot.from_payload({"id": route_id, **payload})

    route = Route.objects.filter(pk=int(route_id)).first() if route_id.isdigit() else None
    if route is None:
        raise RouteNotFound(f"Route {route_id} not found", route_id=route_id)
    return snapshot_from_route(route)


def validate_points(points: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Normalize authored points to wire form, raising ValueError on the first bad one."""
    return [RoutePoint.from_payload(p).to_payload() for p in points]
