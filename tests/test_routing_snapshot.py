import dataclasses
from unittest.mock import Mock

import pytest
import requests

from busline.errors import RouteNotFound, UpstreamUnavailable
from routing.services import (
    RouteAuthoringClient,
    RoutePoint,
    RouteSnapshot,
    load_route_snapshot,
    snapshot_from_route,
)

PAYLOAD = {
    "_id": "65f0c0ffee",
    "routeName": "공항 셔틀",
    "points": [
        {
            "name": "터미널",
            "location": {"type": "Point", "coordinates": [126.4407, 37.4602]},
            "type": "origin",
            "scheduledTime": "05:00",
            "useAnnouncement": True,
        },
        {
            "name": "호텔",
            "location": {"type": "Point", "coordinates": [126.4520, 37.4470]},
            "type": "destination",
            "scheduledTime": "05:20",
        },
    ],
}


def test_snapshot_from_payload():
    snapshot = RouteSnapshot.from_payload(PAYLOAD)

    assert snapshot.route_id == "65f0c0ffee"
    assert len(snapshot) == 2
    assert snapshot[0].location == (126.4407, 37.4602)
    assert snapshot[0].announce is True
    assert snapshot[1].announce is False
    assert snapshot[1].kind == "destination"


def test_snapshot_is_immutable():
    snapshot = RouteSnapshot.from_payload(PAYLOAD)

    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.route_name = "다른 노선"
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot[0].lat = 0.0


def test_snapshot_payload_round_trip():
    snapshot = RouteSnapshot.from_payload(PAYLOAD)
    assert RouteSnapshot.from_payload(snapshot.to_payload()) == snapshot


def test_snapshot_rejects_empty_route():
    with pytest.raises(ValueError, match="no points"):
        RouteSnapshot.from_payload({"routeName": "빈 노선", "points": []})


def test_route_point_rejects_non_finite_coordinates():
    bad = dict(PAYLOAD["points"][0], location={"type": "Point", "coordinates": [float("nan"), 37.0]})
    with pytest.raises(ValueError):
        RoutePoint.from_payload(bad)


@pytest.mark.django_db
def test_load_local_route(make_route):
    route = make_route((0, 0), (1, 0), name="로컬")

    snapshot = load_route_snapshot(route.id)

    assert snapshot == snapshot_from_route(route)
    assert snapshot.route_id == str(route.id)
    assert snapshot.route_name == "로컬"


@pytest.mark.django_db
@pytest.mark.parametrize("route_id", ["9999", "not-a-number"])
def test_load_missing_local_route(route_id):
    with pytest.raises(RouteNotFound):
        load_route_snapshot(route_id)


def test_load_remote_route(settings, monkeypatch):
    settings.ROUTE_AUTHORING_URL = "https://routes.example.test/api/routes/"
    get_mock = Mock(return_value=Mock(status_code=200, ok=True, json=Mock(return_value=PAYLOAD)))
    monkeypatch.setattr("routing.services.requests.get", get_mock)

    snapshot = load_route_snapshot("65f0c0ffee")

    assert snapshot.route_name == "공항 셔틀"
    assert get_mock.call_args.args == ("https://routes.example.test/api/routes/65f0c0ffee",)


def test_load_remote_route_not_found(settings, monkeypatch):
    settings.ROUTE_AUTHORING_URL = "https://routes.example.test/api/routes"
    monkeypatch.setattr(
        "routing.services.requests.get",
        Mock(return_value=Mock(status_code=404, ok=False)),
    )

    with pytest.raises(RouteNotFound):
        load_route_snapshot("missing")


def test_remote_client_retries_server_errors_then_raises(monkeypatch):
    failing = Mock(status_code=502, ok=False)
    failing.raise_for_status.side_effect = requests.HTTPError("502 bad gateway")
    get_mock = Mock(return_value=failing)
    monkeypatch.setattr("routing.services.requests.get", get_mock)

    with pytest.raises(requests.HTTPError):
        RouteAuthoringClient("https://routes.example.test").fetch("1")

    assert get_mock.call_count == 3


def test_remote_client_does_not_retry_client_errors(monkeypatch):
    refused = Mock(status_code=401, ok=False)
    refused.raise_for_status.side_effect = requests.HTTPError("401 unauthorized")
    get_mock = Mock(return_value=refused)
    monkeypatch.setattr("routing.services.requests.get", get_mock)

    with pytest.raises(requests.HTTPError):
        RouteAuthoringClient("https://routes.example.test").fetch("1")

    assert get_mock.call_count == 1


@pytest.mark.parametrize(
    "failure",
    [
        requests.ConnectionError("down"),
        requests.Timeout("slow"),
    ],
)
def test_load_remote_route_source_unavailable(settings, monkeypatch, failure):
    settings.ROUTE_AUTHORING_URL = "https://routes.example.test/api/routes"
    monkeypatch.setattr("routing.services.requests.get", Mock(side_effect=failure))

    with pytest.raises(UpstreamUnavailable) as excinfo:
        load_route_snapshot("65f0c0ffee")

    assert excinfo.value.status_code == 503
    assert excinfo.value.route_id == "65f0c0ffee"


def test_load_remote_route_after_exhausted_retries(settings, monkeypatch):
    settings.ROUTE_AUTHORING_URL = "https://routes.example.test/api/routes"
    failing = Mock(status_code=503, ok=False)
    failing.raise_for_status.side_effect = requests.HTTPError("503 unavailable")
    monkeypatch.setattr("routing.services.requests.get", Mock(return_value=failing))

    with pytest.raises(UpstreamUnavailable):
        load_route_snapshot("7")
