"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Depends, Header, Request

from feedback_server.auth import AdminAuth
from feedback_server.config import Settings, get_settings
from feedback_server.errors import InvalidRequest, Unauthorized
from feedback_server.features import FeatureFlagStore
from feedback_server.feedback import FeedbackRepository
from feedback_server.kv_store import InMemoryKvStore, KvStore, RedisKvStore, SqlKvStore

logger = logging.getLogger(__name__)

_kv_store: KvStore | None = None


def build_kv_store(settings: Settings) -> KvStore:
    if settings.use_in_memory_backends or not (
        settings.database_url or settings.redis_url
    ):
        logger.info("Using in-memory key-value store")
        return InMemoryKvStore()
    if settings.database_url:
        logger.info("Using SQL key-value store")
        return SqlKvStore(settings.database_url)
    logger.info("Using Redis key-value store")
    return RedisKvStore(url=settings.redis_url, key_prefix=settings.redis_key_prefix)


def get_kv_store() -> KvStore:
    """
    Return a singleton store so state persists across requests.

    ``create_app(store=...)`` overrides this dependency with an explicit
    instance.
    """
    global _kv_store
    if _kv_store:
        return _kv_store
    _kv_store = build_kv_store(get_settings())
    return _kv_store


def get_admin_auth(
    store: KvStore = Depends(get_kv_store),
    settings: Settings = Depends(get_settings),
) -> AdminAuth:
    return AdminAuth(
        store=store,
        default_password=settings.default_admin_password,
        session_ttl_seconds=settings.session_ttl_seconds,
    )


def get_feedback_repository(
    store: KvStore = Depends(get_kv_store),
) -> FeedbackRepository:
    return FeedbackRepository(store)


def get_feature_flag_store(
    store: KvStore = Depends(get_kv_store),
) -> FeatureFlagStore:
    return FeatureFlagStore(store)


def require_public_key(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Check the shared ``Authorization: Bearer <key>`` credential."""
    if not settings.public_api_key:
        return
    scheme, _, credential = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or credential.strip() != settings.public_api_key:
        raise Unauthorized("Missing or invalid authorization header")


def require_admin(
    x_admin_token: Optional[str] = Header(None, alias="X-Admin-Token"),
    auth: AdminAuth = Depends(get_admin_auth),
) -> None:
    auth.authenticate(x_admin_token)


async def admin_json_body(
    request: Request, _: None = Depends(require_admin)
) -> Any:
    """
    JSON body of an admin request, decoded only once the token is accepted.

    Declaring the body as a model parameter would make FastAPI decode it
    before ``require_admin`` runs.
    """
    try:
        return await request.json()
    except ValueError:
        raise InvalidRequest()
