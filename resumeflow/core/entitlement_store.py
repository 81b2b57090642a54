from __future__ import annotations

import json
import logging
import os
import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Protocol

from resumeflow.core.config import settings
from resumeflow.core.errors import StoreUnavailable

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class TopUpResult:
    balance: int
    applied: bool


@dataclass(frozen=True)
class PaymentOrder:
    order_id: str
    user_id: str
    plan_id: str
    credits: int
    amount: int
    currency: str
    status: str
    payment_id: str | None


class EntitlementStore(Protocol):
    def get_balance(self, user_id: str) -> int: ...

    def try_spend(self, user_id: str, amount: int = 1) -> bool: ...

    def refund(self, user_id: str, amount: int = 1) -> int: ...

    def top_up(
        self,
        user_id: str,
        amount: int,
        *,
        reference: str,
        meta: dict[str, Any] | None = None,
    ) -> TopUpResult: ...

    def record_order(self, order: PaymentOrder) -> None: ...

    def get_order(self, order_id: str) -> PaymentOrder | None: ...

    def mark_order_paid(self, order_id: str, payment_id: str) -> None: ...


class SqliteEntitlementStore:
    """Per-user credit balances, the credit ledger and pending payment orders.

    Every mutation runs inside ``BEGIN IMMEDIATE`` so the balance check and the
    decrement happen under one write lock, across threads and processes.
    """

    def __init__(self, db_path: str, default_credits: int | None = None):
        self._db_path = db_path
        self._default_credits = settings.default_credits if default_credits is None else max(0, int(default_credits))
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    @property
    def default_credits(self) -> int:
        return self._default_credits

    def _connect(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn

        directory = os.path.dirname(self._db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        conn = sqlite3.connect(
            self._db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA busy_timeout=5000;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS accounts (
                user_id TEXT PRIMARY KEY,
                credits INTEGER NOT NULL CHECK (credits >= 0),
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS credit_transactions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                action TEXT NOT NULL,
                delta INTEGER NOT NULL,
                balance_after INTEGER NOT NULL,
                reference TEXT UNIQUE,
                meta_json TEXT NOT NULL,
                created_at TEXT NOT NULL
            );
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_credit_transactions_user
            ON credit_transactions (user_id, created_at);
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS payment_orders (
                order_id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                plan_id TEXT NOT NULL,
                credits INTEGER NOT NULL,
                amount INTEGER NOT NULL,
                currency TEXT NOT NULL,
                status TEXT NOT NULL,
                payment_id TEXT,
                created_at TEXT NOT NULL,
                verified_at TEXT
            );
            """
        )
        self._conn = conn
        return conn

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def _write(self, operation: str, fn):
        """Run ``fn(cursor)`` in an immediate write transaction."""
        with self._lock:
            try:
                conn = self._connect()
                cursor = conn.cursor()
                cursor.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as exc:
                logger.error("entitlement_store_unavailable op=%s: %s", operation, exc)
                raise StoreUnavailable() from exc
            try:
                result = fn(cursor)
                conn.commit()
                return result
            except sqlite3.Error as exc:
                conn.rollback()
                logger.error("entitlement_store_write_failed op=%s: %s", operation, exc)
                raise StoreUnavailable() from exc
            except Exception:
                conn.rollback()
                raise

    def _read(self, operation: str, query: str, params: tuple[Any, ...]) -> sqlite3.Row | None:
        with self._lock:
            try:
                conn = self._connect()
                return conn.execute(query, params).fetchone()
            except sqlite3.Error as exc:
                logger.error("entitlement_store_read_failed op=%s: %s", operation, exc)
                raise StoreUnavailable() from exc

    def _ensure_account(self, cursor: sqlite3.Cursor, user_id: str) -> None:
        now = _utc_now()
        cursor.execute(
            """
            INSERT OR IGNORE INTO accounts (user_id, credits, created_at, updated_at)
            VALUES (?, ?, ?, ?)
            """,
            (user_id, self._default_credits, now, now),
        )
        if cursor.rowcount == 1:
            logger.info("account_created user=%s credits=%s", user_id, self._default_credits)

    @staticmethod
    def _current_credits(cursor: sqlite3.Cursor, user_id: str) -> int:
        row = cursor.execute("SELECT credits FROM accounts WHERE user_id = ?", (user_id,)).fetchone()
        return int(row[0]) if row else 0

    @staticmethod
    def _append_ledger(
        cursor: sqlite3.Cursor,
        *,
        user_id: str,
        action: str,
        delta: int,
        balance_after: int,
        reference: str | None = None,
        meta: dict[str, Any] | None = None,
    ) -> None:
        cursor.execute(
            """
            INSERT INTO credit_transactions (user_id, action, delta, balance_after, reference, meta_json, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                action,
                delta,
                balance_after,
                reference,
                json.dumps(meta or {}, separators=(",", ":"), sort_keys=True),
                _utc_now(),
            ),
        )

    def get_balance(self, user_id: str) -> int:
        def op(cursor: sqlite3.Cursor) -> int:
            self._ensure_account(cursor, user_id)
            return self._current_credits(cursor, user_id)

        return self._write("get_balance", op)

    def try_spend(self, user_id: str, amount: int = 1) -> bool:
        if amount < 1:
            raise ValueError("amount must be a positive integer")

        def op(cursor: sqlite3.Cursor) -> bool:
            self._ensure_account(cursor, user_id)
            cursor.execute(
                """
                UPDATE accounts
                SET credits = credits - ?, updated_at = ?
                WHERE user_id = ? AND credits >= ?
                """,
                (amount, _utc_now(), user_id, amount),
            )
            if cursor.rowcount != 1:
                return False
            balance = self._current_credits(cursor, user_id)
            self._append_ledger(cursor, user_id=user_id, action="spend", delta=-amount, balance_after=balance)
            return True

        spent = self._write("try_spend", op)
        if spent:
            logger.info("credit_spent user=%s amount=%s", user_id, amount)
        else:
            logger.info("credit_spend_rejected user=%s amount=%s", user_id, amount)
        return spent

    def refund(self, user_id: str, amount: int = 1) -> int:
        if amount < 1:
            raise ValueError("amount must be a positive integer")

        def op(cursor: sqlite3.Cursor) -> int:
            self._ensure_account(cursor, user_id)
            cursor.execute(
                "UPDATE accounts SET credits = credits + ?, updated_at = ? WHERE user_id = ?",
                (amount, _utc_now(), user_id),
            )
            balance = self._current_credits(cursor, user_id)
            self._append_ledger(cursor, user_id=user_id, action="refund", delta=amount, balance_after=balance)
            return balance

        return self._write("refund", op)

    def top_up(
        self,
        user_id: str,
        amount: int,
        *,
        reference: str,
        meta: dict[str, Any] | None = None,
    ) -> TopUpResult:
        if amount < 1:
            raise ValueError("amount must be a positive integer")
        if not reference:
            raise ValueError("top-ups require a reference")

        def op(cursor: sqlite3.Cursor) -> TopUpResult:
            existing = cursor.execute(
                "SELECT user_id FROM credit_transactions WHERE reference = ?",
                (reference,),
            ).fetchone()
            self._ensure_account(cursor, user_id)
            if existing is not None:
                return TopUpResult(balance=self._current_credits(cursor, user_id), applied=False)
            cursor.execute(
                "UPDATE accounts SET credits = credits + ?, updated_at = ? WHERE user_id = ?",
                (amount, _utc_now(), user_id),
            )
            balance = self._current_credits(cursor, user_id)
            self._append_ledger(
                cursor,
                user_id=user_id,
                action="top_up",
                delta=amount,
                balance_after=balance,
                reference=reference,
                meta=meta,
            )
            return TopUpResult(balance=balance, applied=True)

        result = self._write("top_up", op)
        if result.applied:
            logger.info("credits_topped_up user=%s amount=%s reference=%s", user_id, amount, reference)
        else:
            logger.info("credits_top_up_replayed user=%s reference=%s", user_id, reference)
        return result

    def record_order(self, order: PaymentOrder) -> None:
        def op(cursor: sqlite3.Cursor) -> None:
            cursor.execute(
                """
                INSERT INTO payment_orders (
                    order_id, user_id, plan_id, credits, amount, currency, status, payment_id, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    order.order_id,
                    order.user_id,
                    order.plan_id,
                    order.credits,
                    order.amount,
                    order.currency,
                    order.status,
                    order.payment_id,
                    _utc_now(),
                ),
            )

        self._write("record_order", op)

    def get_order(self, order_id: str) -> PaymentOrder | None:
        row = self._read(
            "get_order",
            """
            SELECT order_id, user_id, plan_id, credits, amount, currency, status, payment_id
            FROM payment_orders
            WHERE order_id = ?
            """,
            (order_id,),
        )
        if not row:
            return None
        return PaymentOrder(
            order_id=row["order_id"],
            user_id=row["user_id"],
            plan_id=row["plan_id"],
            credits=int(row["credits"]),
            amount=int(row["amount"]),
            currency=row["currency"],
            status=row["status"],
            payment_id=row["payment_id"],
        )

    def mark_order_paid(self, order_id: str, payment_id: str) -> None:
        def op(cursor: sqlite3.Cursor) -> None:
            cursor.execute(
                """
                UPDATE payment_orders
                SET status = 'paid', payment_id = ?, verified_at = ?
                WHERE order_id = ? AND status != 'paid'
                """,
                (payment_id, _utc_now(), order_id),
            )

        self._write("mark_order_paid", op)


@lru_cache(maxsize=1)
def get_entitlement_store() -> SqliteEntitlementStore:
    return SqliteEntitlementStore(settings.entitlement_db_path)
