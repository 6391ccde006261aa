# core/session.py
"""
Short-lived, in-memory trip sessions.

The intake stage stores a TripContext under an opaque token; the display
stage reads it back with that token. Nothing survives a restart.
"""

import datetime as dt
import logging
import threading
import uuid
from typing import Dict, Optional, Tuple

from core import config
from core.models import TripContext

log = logging.getLogger(__name__)


class TripSessionStore:
    def __init__(self, ttl_seconds: int = config.SESSION_TTL_SECONDS):
        self.ttl = dt.timedelta(seconds=ttl_seconds)
        self._items: Dict[str, Tuple[dt.datetime, TripContext]] = {}
        self._lock = threading.Lock()

    def put(self, context: TripContext) -> str:
        token = uuid.uuid4().hex
        with self._lock:
            self._purge_expired()
            self._items[token] = (dt.datetime.now() + self.ttl, context)
        return token

    def get(self, token: str) -> Optional[TripContext]:
        with self._lock:
            entry = self._items.get(token)
            if entry is None:
                return None
            expires_at, context = entry
            if expires_at <= dt.datetime.now():
                del self._items[token]
                log.debug("Trip session %s expired", token[:8])
                return None
            return context

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def _purge_expired(self) -> None:
        now = dt.datetime.now()
        for token in [t for t, (exp, _) in self._items.items() if exp <= now]:
            del self._items[token]
