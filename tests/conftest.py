import pytest

from routing.models import Route

# Kilometres per degree of longitude on the equator for the 6371 km sphere.
KM_PER_DEG = 111.19492664455873


def equator_point(east_km, north_km=0.0):
    return [east_km / KM_PER_DEG, north_km / KM_PER_DEG]


def route_points(offsets, announce=()):
    points = []
    for i, offset in enumerate(offsets):
        if i == 0:
            kind = Route.PointKind.ORIGIN
        elif i == len(offsets) - 1:
            kind = Route.PointKind.DESTINATION
        else:
            kind = Route.PointKind.WAYPOINT
        points.append(
            {
                "name": f"정류장{i}",
                "location": {"type": "Point", "coordinates": equator_point(*offset)},
                "type": kind,
                "scheduledTime": f"08:{i * 10:02d}",
                "useAnnouncement": i in announce,
            }
        )
    return points


@pytest.fixture
def make_route(db):
    def _make(*offsets, announce=(), name="1번 노선"):
        return Route.objects.create(route_name=name, points=route_points(offsets, announce))

    return _make
