from __future__ import annotations

from typing import Any, Dict, Optional


class TrackingError(Exception):
    """Base for request-scoped failures; carries enough context to name the session or checkpoint."""

    status_code = 400

    def __init__(
        self,
        detail: str,
        *,
        session_id: Optional[int] = None,
        route_id: Optional[str] = None,
        checkpoint_index: Optional[int] = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.session_id = session_id
        self.route_id = route_id
        self.checkpoint_index = checkpoint_index

    def as_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"detail": self.detail}
        if self.session_id is not None:
            payload["sessionId"] = self.session_id
        if self.route_id is not None:
            payload["routeId"] = self.route_id
        if self.checkpoint_index is not None:
            payload["checkpointIndex"] = self.checkpoint_index
        return payload


class InvalidInput(TrackingError):
    status_code = 400


class SessionNotFound(TrackingError):
    status_code = 404


class RouteNotFound(TrackingError):
    status_code = 404


class PersistenceFailure(TrackingError):
    status_code = 503


class CheckpointNotFound(SessionNotFound):
    pass


class SessionBusy(TrackingError):
    status_code = 409


class UpstreamUnavailable(TrackingError):
    status_code = 503
