from __future__ import annotations

import contextlib
import logging
from typing import Iterator, Optional

import redis
from django.conf import settings
from redis.exceptions import LockError, RedisError

from busline.errors import SessionBusy, UpstreamUnavailable

logger = logging.getLogger(__name__)

_redis: Optional[redis.Redis] = (
    redis.Redis.from_url(settings.SESSION_LOCK_REDIS_URL)
    if settings.SESSION_LOCK_REDIS_URL
    else None
)


def _lock_name(session_id: int) -> str:
    return f"drive-session:{session_id}"


@contextlib.contextmanager
def session_lock(session_id: int) -> Iterator[None]:
    """
    Serialize writers of one drive session across processes.

    Without a lock server the caller's ``select_for_update`` row lock is the only
    guard, which is enough on a database that honours it. Failing to take the
    lock raises ``SessionBusy`` (held elsewhere) or ``UpstreamUnavailable``
    (lock server unreachable); errors from the guarded block pass through.
    """
    if _redis is None:
        yield
        return
    name = _lock_name(session_id)
    lock = _redis.lock(
        name,
        timeout=settings.SESSION_LOCK_TIMEOUT_SECONDS,
        blocking_timeout=settings.SESSION_LOCK_TIMEOUT_SECONDS,
    )
    try:
        acquired = lock.acquire()
    except LockError as exc:
        raise SessionBusy(f"Drive session {session_id} is busy", session_id=session_id) from exc
    except RedisError as exc:
        logger.warning("Session %s: lock server unavailable: %s", session_id, exc)
        raise UpstreamUnavailable(
            f"Lock server unavailable for drive session {session_id}", session_id=session_id
        ) from exc
    if not acquired:
        logger.warning("Session %s: gave up waiting for lock %s", session_id, name)
        raise SessionBusy(f"Drive session {session_id} is busy", session_id=session_id)

    logger.debug("Session %s: acquired lock %s", session_id, name)
    try:
        yield
    finally:
        try:
            lock.release()
        except RedisError:
            # The guarded block has finished; the lock will expire on its own.
            logger.warning("Session %s: could not release lock %s", session_id, name, exc_info=True)
