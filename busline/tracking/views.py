from typing import Any

from django.http import HttpRequest
from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from busline.errors import TrackingError

from .serializers import (
    DriveSessionDetailSerializer,
    DriveSessionSerializer,
    DriveStartSerializer,
    LocationSampleSerializer,
)
from .services import (
    active_sessions,
    complete_checkpoints,
    end_session,
    get_session,
    start_session,
    submit_location,
)
from .tasks import record_gps_log
import logging
import time

logger = logging.getLogger(__name__)


def error_response(exc: TrackingError) -> Response:
    logger.warning("Rejected request: %s", exc.detail)
    return Response(exc.as_payload(), status=exc.status_code)


class DriveStartView(APIView):
    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> Response:
        serializer = DriveStartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            session = start_session(
                data["routeId"],
                approach_radius=data.get("approachRadius"),
                arrival_radius=data.get("arrivalRadius"),
            )
        except TrackingError as exc:
            return error_response(exc)
        return Response(DriveSessionSerializer(session).data, status=status.HTTP_201_CREATED)


class DriveLocationView(APIView):
    def post(self, request: HttpRequest, pk: int, *args: Any, **kwargs: Any) -> Response:
        t0 = time.perf_counter()
        serializer = LocationSampleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            update = submit_location(
                pk,
                latitude=serializer.validated_data["latitude"],
                longitude=serializer.validated_data["longitude"],
            )
        except TrackingError as exc:
            return error_response(exc)

        session = update.session
        payload = {
            "status": session.status,
            "checkpoints": DriveSessionSerializer(session).data["checkpoints"],
            "playAnnouncement": update.play_announcement,
            "message": update.message,
        }
        elapsed = (time.perf_counter() - t0) * 1000
        logger.info("Session %s: location processed in %.1f ms", pk, elapsed)
        return Response(payload)


class CheckpointCompleteView(APIView):
    def patch(self, request: HttpRequest, pk: int, index: int, *args: Any, **kwargs: Any) -> Response:
        try:
            session = complete_checkpoints(pk, index)
        except TrackingError as exc:
            return error_response(exc)
        return Response(DriveSessionSerializer(session).data)


class DriveEndView(APIView):
    def post(self, request: HttpRequest, pk: int, *args: Any, **kwargs: Any) -> Response:
        try:
            session = end_session(pk)
        except TrackingError as exc:
            return error_response(exc)
        return Response({"message": "운행 종료 성공", "session": DriveSessionSerializer(session).data})


class DriveDetailView(APIView):
    def get(self, request: HttpRequest, pk: int, *args: Any, **kwargs: Any) -> Response:
        try:
            session = get_session(pk)
        except TrackingError as exc:
            return error_response(exc)
        return Response(DriveSessionDetailSerializer(session).data)


class ActiveDrivesView(APIView):
    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> Response:
        return Response(DriveSessionDetailSerializer(active_sessions(), many=True).data)


class GpsLogView(APIView):
    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> Response:
        if not isinstance(request.data, dict):
            return Response({"detail": "JSON object body is required"}, status=status.HTTP_400_BAD_REQUEST)
        record_gps_log.delay(dict(request.data), timezone.now().isoformat())
        return Response({"message": "queued"}, status=status.HTTP_202_ACCEPTED)
