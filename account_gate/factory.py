"""Wiring of the account gate against Postgres and Redis."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import redis
from psycopg_pool import ConnectionPool

from .config import Settings, get_settings
from .domain.gate import AccountGate
from .notifications.redis_notifier import RedisNotifier
from .repository import AccountRepository


def build_gate(pool: ConnectionPool, client: redis.Redis, settings: Settings | None = None) -> AccountGate:
    """Assemble an :class:`AccountGate` from already-open shared resources."""
    settings = settings or get_settings()
    notifier = RedisNotifier(
        client,
        approval_recipient=settings.approval_recipient,
        confirmation_queue=settings.confirmation_queue,
        approval_queue=settings.approval_queue,
    )
    return AccountGate(
        AccountRepository(pool),
        notifier,
        confirm_within=settings.confirm_within,
    )


@contextmanager
def account_gate(settings: Settings | None = None) -> Iterator[AccountGate]:
    """Open the Postgres pool and Redis client for the lifetime of the block."""
    settings = settings or get_settings()
    pool = ConnectionPool(settings.database_url, open=False)
    pool.open()
    client = redis.from_url(settings.redis_url)
    try:
        yield build_gate(pool, client, settings)
    finally:
        client.close()
        pool.close()
