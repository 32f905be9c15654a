"""
Checkpoint progression for a single drive session.

One GPS sample moves at most one checkpoint forward. Checkpoints are walked in
route order; for each one that has not departed, the transition rules below are
tried in priority order and the first rule that matches ends the walk.

The rules are pure functions of a ``RuleInput``; ``process_sample`` is the only
place that mutates checkpoints.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from django.conf import settings
from django.db.models import TextChoices
from django.utils.dateparse import parse_datetime

from busline.geodesy import LonLat, alignment, haversine_km
from routing.services import RoutePoint, RouteSnapshot

logger = logging.getLogger(__name__)

DistanceFn = Callable[[LonLat, LonLat], float]


class CheckpointStatus(TextChoices):
    PENDING = "pending", "Pending"
    APPROACHING = "approaching", "Approaching"
    ARRIVED = "arrived", "Arrived"
    DEPARTED = "departed", "Departed"


STATUS_ORDER = [
    CheckpointStatus.PENDING,
    CheckpointStatus.APPROACHING,
    CheckpointStatus.ARRIVED,
    CheckpointStatus.DEPARTED,
]


def status_rank(status: str) -> int:
    return STATUS_ORDER.index(CheckpointStatus(status))


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    return parse_datetime(value) if value else None


@dataclass
class Checkpoint:
    point_name: str
    scheduled_time: str = ""
    status: CheckpointStatus = CheckpointStatus.PENDING
    arrival_time: Optional[datetime] = None
    departure_time: Optional[datetime] = None
    min_distance: Optional[float] = None

    @property
    def resolved(self) -> bool:
        return self.status in (CheckpointStatus.ARRIVED, CheckpointStatus.DEPARTED)

    def observe_distance(self, distance: float) -> None:
        if self.min_distance is None or distance < self.min_distance:
            self.min_distance = distance

    @classmethod
    def for_point(cls, point: RoutePoint) -> "Checkpoint":
        return cls(point_name=point.name, scheduled_time=point.scheduled_time)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Checkpoint":
        return cls(
            point_name=data["point_name"],
            scheduled_time=data.get("scheduled_time") or "",
            status=CheckpointStatus(data.get("status", CheckpointStatus.PENDING)),
            arrival_time=_parse_time(data.get("arrival_time")),
            departure_time=_parse_time(data.get("departure_time")),
            min_distance=data.get("min_distance"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "point_name": self.point_name,
            "scheduled_time": self.scheduled_time,
            "status": CheckpointStatus(self.status).value,
            "arrival_time": self.arrival_time.isoformat() if self.arrival_time else None,
            "departure_time": self.departure_time.isoformat() if self.departure_time else None,
            "min_distance": self.min_distance,
        }


@dataclass(frozen=True)
class DetectionParams:
    approach_radius: float
    arrival_radius: float
    # Departure needs the vehicle beyond arrival_radius * factor so jitter at the edge cannot flap.
    hysteresis_factor: float = 1.2
    min_alignment: float = 0.5

    @property
    def departure_radius(self) -> float:
        return self.arrival_radius * self.hysteresis_factor

    @classmethod
    def for_session(cls, approach_radius: float, arrival_radius: float) -> "DetectionParams":
        return cls(
            approach_radius=approach_radius,
            arrival_radius=arrival_radius,
            hysteresis_factor=settings.DEPARTURE_HYSTERESIS_FACTOR,
            min_alignment=settings.PASS_THROUGH_MIN_ALIGNMENT,
        )


@dataclass(frozen=True)
class Transition:
    index: int
    target: CheckpointStatus
    message: str
    rule: str
    announce: bool = False
    stamp_arrival: bool = False
    stamp_departure: bool = False
    resync_start: bool = False


@dataclass(frozen=True)
class RuleInput:
    index: int
    checkpoint: Checkpoint
    point: RoutePoint
    distance: float
    position: LonLat
    previous: Optional[LonLat]
    snapshot: RouteSnapshot
    params: DetectionParams
    measure: DistanceFn = haversine_km


def approach_rule(ctx: RuleInput) -> Optional[Transition]:
    if ctx.checkpoint.status != CheckpointStatus.PENDING:
        return None
    if ctx.distance > ctx.params.approach_radius:
        return None
    return Transition(
        index=ctx.index,
        target=CheckpointStatus.APPROACHING,
        message=f"{ctx.checkpoint.point_name}에 접근 중입니다.",
        rule="approach",
        announce=ctx.point.announce,
    )


def arrival_rule(ctx: RuleInput) -> Optional[Transition]:
    if ctx.checkpoint.status != CheckpointStatus.APPROACHING:
        return None
    if ctx.distance > ctx.params.arrival_radius:
        return None
    return Transition(
        index=ctx.index,
        target=CheckpointStatus.ARRIVED,
        message=f"{ctx.checkpoint.point_name}에 도착했습니다.",
        rule="arrival",
        stamp_arrival=True,
        # Arrival at the first stop is the real start of the drive.
        resync_start=ctx.index == 0,
    )


def departure_rule(ctx: RuleInput) -> Optional[Transition]:
    if ctx.checkpoint.status != CheckpointStatus.ARRIVED:
        return None
    if ctx.distance <= ctx.params.departure_radius:
        return None
    return Transition(
        index=ctx.index,
        target=CheckpointStatus.DEPARTED,
        message=f"{ctx.checkpoint.point_name}에서 출발했습니다.",
        rule="departure",
        stamp_departure=True,
    )


def pass_through_rule(ctx: RuleInput) -> Optional[Transition]:
    """
    Infer that a pending stop was driven past between two sparse fixes.

    Fires only when the vehicle is receding from the stop, is already closer to
    the next stop, and is moving along the stop -> next stop direction. Any one of
    these alone also holds for parked vehicles, detours or GPS noise.
    """
    if ctx.checkpoint.status != CheckpointStatus.PENDING or ctx.previous is None:
        return None
    if ctx.index >= len(ctx.snapshot) - 1:
        return None

    stop = ctx.point.location
    next_stop = ctx.snapshot[ctx.index + 1].location
    dist_prev_to_stop = ctx.measure(ctx.previous, stop)
    dist_now_to_next = ctx.measure(ctx.position, next_stop)
    if ctx.distance <= dist_prev_to_stop:
        return None
    if dist_now_to_next >= ctx.distance:
        return None
    score = alignment(ctx.previous, ctx.position, stop, next_stop)
    if score <= ctx.params.min_alignment:
        return None

    logger.info(
        "Checkpoint %s (%s): inferred pass-through (prev=%.3f km, now=%.3f km, next=%.3f km, dir=%.2f)",
        ctx.index, ctx.checkpoint.point_name, dist_prev_to_stop, ctx.distance, dist_now_to_next, score,
    )
    return Transition(
        index=ctx.index,
        target=CheckpointStatus.DEPARTED,
        message=f"{ctx.checkpoint.point_name}을(를) 통과했습니다.",
        rule="pass_through",
        stamp_arrival=True,
        stamp_departure=True,
    )


TRANSITION_RULES = (approach_rule, arrival_rule, departure_rule, pass_through_rule)


def evaluate_checkpoint(ctx: RuleInput) -> Optional[Transition]:
    for rule in TRANSITION_RULES:
        transition = rule(ctx)
        if transition is not None:
            return transition
    return None


def apply_transition(checkpoint: Checkpoint, transition: Transition, now: datetime) -> None:
    if status_rank(transition.target) <= status_rank(checkpoint.status):
        raise ValueError(
            f"Refusing backward transition {checkpoint.status} -> {transition.target} "
            f"for checkpoint {transition.index}"
        )
    checkpoint.status = transition.target
    if transition.stamp_arrival and checkpoint.arrival_time is None:
        checkpoint.arrival_time = now
    if transition.stamp_departure and checkpoint.departure_time is None:
        checkpoint.departure_time = now


@dataclass
class SampleResult:
    transition: Optional[Transition] = None

    @property
    def message(self) -> str:
        return self.transition.message if self.transition else ""

    @property
    def play_announcement(self) -> bool:
        return bool(self.transition and self.transition.announce)


def process_sample(
    checkpoints: List[Checkpoint],
    snapshot: RouteSnapshot,
    position: LonLat,
    previous: Optional[LonLat],
    params: DetectionParams,
    now: datetime,
    measure: DistanceFn = haversine_km,
) -> SampleResult:
    if len(checkpoints) != len(snapshot):
        raise ValueError(
            f"Checkpoint list ({len(checkpoints)}) does not match route ({len(snapshot)})"
        )
    for index, checkpoint in enumerate(checkpoints):
        if checkpoint.status == CheckpointStatus.DEPARTED:
            continue
        point = snapshot[index]
        distance = measure(position, point.location)
        checkpoint.observe_distance(distance)
        transition = evaluate_checkpoint(
            RuleInput(
                index=index,
                checkpoint=checkpoint,
                point=point,
                distance=distance,
                position=position,
                previous=previous,
                snapshot=snapshot,
                params=params,
                measure=measure,
            )
        )
        if transition is not None:
            apply_transition(checkpoint, transition, now)
            return SampleResult(transition=transition)
    return SampleResult()


def force_arrived(checkpoints: Sequence[Checkpoint], upto: int, now: datetime) -> List[int]:
    """Mark checkpoints 0..upto arrived unless already arrived or departed; returns changed indices."""
    changed: List[int] = []
    for index, checkpoint in enumerate(checkpoints[: upto + 1]):
        if checkpoint.resolved:
            continue
        checkpoint.status = CheckpointStatus.ARRIVED
        if checkpoint.arrival_time is None:
            checkpoint.arrival_time = now
        changed.append(index)
    return changed
