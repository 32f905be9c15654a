import pytest
from rest_framework.test import APIClient

from routing.models import Route


def point(name, lon, lat, kind="waypoint", **extra):
    return {
        "name": name,
        "location": {"type": "Point", "coordinates": [lon, lat]},
        "type": kind,
        **extra,
    }


@pytest.mark.django_db
def test_create_route_persists_points():
    client = APIClient()
    response = client.post(
        "/api/routes/",
        {
            "routeName": "강남 순환",
            "points": [
                point("강남역", 127.0276, 37.4979, "origin", scheduledTime="07:00", useAnnouncement=True),
                point("역삼역", 127.0364, 37.5006, scheduledTime="07:05"),
                point("선릉역", 127.0490, 37.5045, "destination", scheduledTime="07:12"),
            ],
        },
        format="json",
    )

    assert response.status_code == 201
    body = response.json()
    assert body["routeName"] == "강남 순환"
    assert len(body["points"]) == 3
    route = Route.objects.get(pk=body["id"])
    assert route.points[0]["useAnnouncement"] is True
    assert route.points[1]["useAnnouncement"] is False
    assert route.points[2]["location"]["coordinates"] == [127.0490, 37.5045]


@pytest.mark.django_db
@pytest.mark.parametrize(
    "bad_point",
    [
        point("위도 초과", 127.0, 95.0),
        point("시간 형식", 127.0, 37.5, scheduledTime="7시"),
        point("종류", 127.0, 37.5, kind="airport"),
        {"name": "좌표 없음", "type": "waypoint"},
    ],
)
def test_create_route_rejects_bad_points(bad_point):
    client = APIClient()
    response = client.post(
        "/api/routes/", {"routeName": "잘못된 노선", "points": [bad_point]}, format="json"
    )

    assert response.status_code == 400
    assert "points" in response.json()
    assert Route.objects.count() == 0


@pytest.mark.django_db
def test_create_route_requires_points():
    client = APIClient()
    response = client.post("/api/routes/", {"routeName": "빈 노선", "points": []}, format="json")

    assert response.status_code == 400


@pytest.mark.django_db
def test_list_and_retrieve_routes(make_route):
    first = make_route((0, 0), (1, 0), name="A")
    make_route((0, 0), (2, 0), name="B")
    client = APIClient()

    listed = client.get("/api/routes/")
    detail = client.get(f"/api/routes/{first.id}/")

    assert [r["routeName"] for r in listed.json()] == ["A", "B"]
    assert detail.status_code == 200
    assert detail.json()["routeName"] == "A"


@pytest.mark.django_db
def test_retrieve_missing_route_returns_404():
    assert APIClient().get("/api/routes/404/").status_code == 404
