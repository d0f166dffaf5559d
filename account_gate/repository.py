"""Database repository for account gate state."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from psycopg import sql
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account
from .domain.contracts import LOOKUP_FIELDS
from .domain.errors import StaleAccountError, error_for

logger = logging.getLogger(__name__)

_COLUMNS = (
    "account_id",
    "email",
    "created_at",
    "disabled",
    "confirmation_token",
    "confirmed_at",
    "confirmation_sent_at",
    "approval_token",
    "is_approved",
    "approval_sent_at",
    "lock_version",
)

_MUTABLE_COLUMNS = _COLUMNS[1:-1]


class AccountRepository:
    """Postgres-backed account store with optimistic locking on updates."""

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def find_by_field(self, field_name: str, value: str | None) -> Account | None:
        """Fetch the account whose ``field_name`` equals ``value`` or return ``None``."""
        if field_name not in LOOKUP_FIELDS:
            raise ValueError(f"unsupported lookup field: {field_name}")
        if not value:
            return None
        if field_name == "email":
            value = value.lower()

        query = sql.SQL("SELECT {columns} FROM accounts WHERE {field} = %s").format(
            columns=sql.SQL(", ").join(map(sql.Identifier, _COLUMNS)),
            field=sql.Identifier(field_name),
        )
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(query, (value,))
                row = cur.fetchone()
                if not row:
                    return None
        return self._map_record(row)

    def find_or_initialize_with_error(
        self, field_name: str, value: str | None, error: str = "not_found"
    ) -> Account:
        """Return the matching account, or a new one carrying a field error.

        A blank ``value`` is reported as ``blank`` rather than ``error``.
        """
        account = self.find_by_field(field_name, value) if value else None
        if account is not None:
            return account

        account = Account(email="")
        if value:
            setattr(account, field_name, value)
        account.errors.add(error_for(error if value else "blank", field_name))
        return account

    def save(self, account: Account, validate: bool = True) -> bool:
        """Insert or update ``account``; return ``False`` when validation fails.

        Raises
        ------
        StaleAccountError
            When another writer updated the row since it was loaded.
        """
        if validate and not account.validate():
            return False

        account.email = account.email.lower()
        if account.persisted:
            self._update(account)
        else:
            self._insert(account)
        return True

    def _insert(self, account: Account) -> None:
        account.account_id = account.account_id or str(uuid.uuid4())
        account.created_at = account.created_at or datetime.now(timezone.utc)
        values = [getattr(account, column) for column in _COLUMNS]
        query = sql.SQL("INSERT INTO accounts ({columns}) VALUES ({placeholders})").format(
            columns=sql.SQL(", ").join(map(sql.Identifier, _COLUMNS)),
            placeholders=sql.SQL(", ").join(sql.Placeholder() * len(_COLUMNS)),
        )
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, values)
                conn.commit()
        account.persisted = True
        logger.debug("inserted account %s", account.account_id)

    def _update(self, account: Account) -> None:
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in _MUTABLE_COLUMNS
        )
        query = sql.SQL(
            "UPDATE accounts SET {assignments}, lock_version = lock_version + 1, updated_at = NOW() "
            "WHERE account_id = %s AND lock_version = %s"
        ).format(assignments=assignments)
        values = [getattr(account, column) for column in _MUTABLE_COLUMNS]
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, [*values, account.account_id, account.lock_version])
                if cur.rowcount == 0:
                    conn.rollback()
                    raise StaleAccountError(account.account_id, account.lock_version)
                conn.commit()
        account.lock_version += 1

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(**dict(zip(_COLUMNS, row)), persisted=True)
