"""
Admin login, session checks and password changes.

Sessions live in the key-value store as ``admin_session_<token>`` with an
explicit ``expires_at`` timestamp. The marker is also written with a store
TTL so backends that support expiry can reclaim it, but validity is always
decided by ``expires_at``.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from feedback_server.errors import InvalidCredential, Unauthorized
from feedback_server.kv_store import KvStore

logger = logging.getLogger(__name__)

ADMIN_PASSWORD_KEY = "admin_password"
SESSION_KEY_PREFIX = "admin_session_"
DEFAULT_SESSION_TTL_SECONDS = 24 * 60 * 60


def session_key(token: str) -> str:
    return f"{SESSION_KEY_PREFIX}{token}"


@dataclass
class AdminAuth:
    store: KvStore
    default_password: str
    session_ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS

    def current_password(self) -> str:
        # An empty stored value counts as never set.
        return self.store.get(ADMIN_PASSWORD_KEY) or self.default_password

    def login(self, password: Any) -> str:
        """
        Check the password and open a new session.

        Returns the fresh admin token. Older sessions stay valid until their
        own expiry.
        """
        if not isinstance(password, str) or password != self.current_password():
            logger.warning("Rejected admin login attempt")
            raise InvalidCredential()

        token = str(uuid.uuid4())
        expires_at = time.time() + self.session_ttl_seconds
        self.store.set(
            session_key(token),
            {"expires_at": expires_at},
            ttl=self.session_ttl_seconds,
        )
        logger.info("Admin session opened, expires at %.0f", expires_at)
        return token

    def authenticate(self, token: Optional[str]) -> None:
        """Raise ``Unauthorized`` unless ``token`` names a live session."""
        if not token:
            raise Unauthorized("No token provided")

        marker = self.store.get(session_key(token))
        if not isinstance(marker, dict):
            raise Unauthorized("Invalid or expired session")
        expires_at = marker.get("expires_at")
        if not isinstance(expires_at, (int, float)) or expires_at <= time.time():
            raise Unauthorized("Invalid or expired session")

    def change_password(self, new_password: str) -> None:
        self.store.set(ADMIN_PASSWORD_KEY, new_password)
        logger.info("Admin password changed")
