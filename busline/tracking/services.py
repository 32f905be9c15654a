from __future__ import annotations

import contextlib
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterator, Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from busline.errors import CheckpointNotFound, InvalidInput, PersistenceFailure, SessionNotFound
from busline.geodesy import validate_lon_lat
from busline.locks import session_lock
from routing.services import load_route_snapshot

from .engine import Checkpoint, Transition, force_arrived, process_sample
from .models import DriveSession

logger = logging.getLogger(__name__)


@dataclass
class LocationUpdate:
    session: DriveSession
    message: str = ""
    play_announcement: bool = False
    transition: Optional[Transition] = None


def _radius(value: Any, default: float, name: str) -> float:
    if value is None:
        return float(default)
    try:
        radius = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"{name} must be a number") from exc
    if not math.isfinite(radius) or radius <= 0:
        raise InvalidInput(f"{name} must be a positive number of kilometers")
    return radius


@contextlib.contextmanager
def _persisting(session_id: Optional[int]) -> Iterator[None]:
    try:
        yield
    except DatabaseError as exc:
        logger.exception("Session %s: write failed, change discarded", session_id)
        raise PersistenceFailure(
            "Could not persist drive session; the update was dropped", session_id=session_id
        ) from exc


def _running_session_for_update(session_id: int) -> DriveSession:
    session = DriveSession.objects.select_for_update().filter(pk=session_id).first()
    if session is None or not session.is_running:
        raise SessionNotFound(f"No running drive session {session_id}", session_id=session_id)
    return session


def start_session(
    route_id: Any,
    approach_radius: Any = None,
    arrival_radius: Any = None,
) -> DriveSession:
    approach = _radius(approach_radius, settings.DEFAULT_APPROACH_RADIUS_KM, "approachRadius")
    arrival = _radius(arrival_radius, settings.DEFAULT_ARRIVAL_RADIUS_KM, "arrivalRadius")
    if arrival > approach:
        raise InvalidInput("arrivalRadius cannot exceed approachRadius")

    try:
        snapshot = load_route_snapshot(route_id)
    except ValueError as exc:
        raise InvalidInput(f"Route {route_id} cannot be driven: {exc}", route_id=str(route_id)) from exc

    session = DriveSession(
        route_ref=snapshot.route_id,
        route_snapshot=snapshot.to_payload(),
        approach_radius=approach,
        arrival_radius=arrival,
    )
    session.store_checkpoints([Checkpoint.for_point(point) for point in snapshot.points])
    with _persisting(None):
        session.save()
    logger.info(
        "Session %s: started on route %s with %s checkpoints (approach=%.3f km, arrival=%.3f km)",
        session.id, snapshot.route_id, len(snapshot), approach, arrival,
    )
    return session


def submit_location(
    session_id: int,
    latitude: Any,
    longitude: Any,
    now: Optional[datetime] = None,
) -> LocationUpdate:
    try:
        lon, lat = validate_lon_lat((longitude, latitude))
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"Invalid coordinates: {exc}", session_id=session_id) from exc
    now = now or timezone.now()

    with session_lock(session_id), transaction.atomic():
        session = _running_session_for_update(session_id)
        checkpoints = session.load_checkpoints()
        result = process_sample(
            checkpoints,
            session.snapshot,
            position=(lon, lat),
            previous=session.location_pair("current_location"),
            params=session.detection_params,
            now=now,
        )
        if result.transition is not None and result.transition.resync_start:
            session.start_time = now
        session.store_checkpoints(checkpoints)
        # Always shift the fix history so the pass-through check sees consecutive samples.
        session.record_location(lon, lat)
        with _persisting(session.id):
            session.save()

    if result.transition is not None:
        logger.info(
            "Session %s: checkpoint %s -> %s via %s",
            session.id, result.transition.index, result.transition.target, result.transition.rule,
        )
    return LocationUpdate(
        session=session,
        message=result.message,
        play_announcement=result.play_announcement,
        transition=result.transition,
    )


def complete_checkpoints(session_id: int, index: int, now: Optional[datetime] = None) -> DriveSession:
    """Operator override: mark every unresolved checkpoint up to ``index`` as arrived."""
    now = now or timezone.now()
    with session_lock(session_id), transaction.atomic():
        session = _running_session_for_update(session_id)
        checkpoints = session.load_checkpoints()
        if not 0 <= index < len(checkpoints):
            raise CheckpointNotFound(
                f"Drive session {session_id} has no checkpoint {index}",
                session_id=session_id,
                checkpoint_index=index,
            )
        changed = force_arrived(checkpoints, index, now)
        if changed:
            session.store_checkpoints(checkpoints)
            with _persisting(session.id):
                session.save()
            logger.info("Session %s: manually completed checkpoints %s", session.id, changed)
    return session


def end_session(session_id: int) -> DriveSession:
    with session_lock(session_id), transaction.atomic():
        session = _running_session_for_update(session_id)
        with _persisting(session.id):
            session.mark_completed()
    logger.info("Session %s: ended at %s", session.id, session.end_time)
    return session


def get_session(session_id: int) -> DriveSession:
    session = DriveSession.objects.filter(pk=session_id).first()
    if session is None:
        raise SessionNotFound(f"Drive session {session_id} not found", session_id=session_id)
    return session


def active_sessions() -> QuerySet:
    return DriveSession.objects.filter(status=DriveSession.Status.RUNNING).order_by("-start_time")
