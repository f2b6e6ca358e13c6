from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy import func, insert, select, update
from sqlalchemy.engine import Connection, Engine

from backoffice.common.errors import ValidationError
from backoffice.db import tables
from backoffice.db.core import get_engine, read_connection, transaction

logger = logging.getLogger(__name__)

PENDING = "Pending"
PROCESSING = "Processing"
SUCCESS = "Success"
FAILED = "Failed"
TERMINAL_STATUSES = (SUCCESS, FAILED)

# payments.status -> checkouts.payment_status
CHECKOUT_STATUS = {
    PROCESSING: "processing",
    SUCCESS: "completed",
    FAILED: "failed",
}


class PaymentTransactionRepository:
    """
    payments (Transaction Record) writes for gateway orders.

    Responsibilities:
      - lookup by order id / checkout existence
      - order-created upsert (+ checkout -> processing), one transaction
      - terminal status write (+ checkout -> completed / failed), one transaction

    A stored Success / Failed is never overwritten.
    """

    def __init__(self, *, engine: Optional[Engine] = None) -> None:
        self._engine = engine or get_engine()

    # ============================================================
    # Read
    # ============================================================

    def checkout_exists(self, checkout_id: int) -> bool:
        c = tables.checkouts
        with read_connection(self._engine) as conn:
            row = conn.execute(
                select(c.c.checkout_id).where(c.c.checkout_id == checkout_id)
            ).first()
        return row is not None

    def get_by_order_id(self, order_id: str) -> Optional[Dict[str, Any]]:
        p = tables.payments
        with read_connection(self._engine) as conn:
            row = conn.execute(select(p).where(p.c.order_id == order_id)).mappings().first()
        return dict(row) if row else None

    # ============================================================
    # Write
    # ============================================================

    def record_order_created(
        self,
        *,
        checkout_id: int,
        order_id: str,
        amount: float,
        currency: str,
        environment: str,
    ) -> int:
        """
        Upsert the Transaction Record for order_id with status Processing.

        1) a row with this order_id        -> updated in place
        2) the checkout's Pending row that has no order_id yet -> claimed
        3) otherwise                       -> inserted

        Returns payment_id.
        """
        p = tables.payments
        values = {
            "checkout_id": checkout_id,
            "order_id": order_id,
            "amount": amount,
            "currency": currency,
            "environment": environment,
            "status": PROCESSING,
        }

        with transaction(self._engine) as conn:
            existing = conn.execute(
                select(p.c.payment_id, p.c.status).where(p.c.order_id == order_id)
            ).first()

            if existing is not None:
                if existing.status in TERMINAL_STATUSES:
                    raise ValidationError(f"order {order_id} is already {existing.status}")
                payment_id = existing.payment_id
                self._update_payment(conn, payment_id, values)
            else:
                unassigned = conn.execute(
                    select(p.c.payment_id)
                    .where(
                        p.c.checkout_id == checkout_id,
                        p.c.order_id.is_(None),
                        p.c.status == PENDING,
                    )
                    .order_by(p.c.payment_id)
                    .limit(1)
                ).first()
                if unassigned is not None:
                    payment_id = unassigned.payment_id
                    self._update_payment(conn, payment_id, values)
                else:
                    result = conn.execute(insert(p).values(**values))
                    payment_id = int(result.inserted_primary_key[0])

            self._update_checkout(conn, checkout_id, PROCESSING, order_id=order_id)

        logger.info(
            "payment %s order_id=%s -> %s",
            payment_id,
            order_id,
            PROCESSING,
            extra={"order_id": order_id, "parent_id": checkout_id, "environment": environment},
        )
        return payment_id

    def record_terminal_status(self, order_id: str, status: str) -> bool:
        """
        Success / Failed onto the payment row and its checkout, atomically.

        Returns False when the row was already terminal (nothing written).
        """
        if status not in TERMINAL_STATUSES:
            raise ValueError(f"not a terminal status: {status}")

        p = tables.payments
        with transaction(self._engine) as conn:
            row = conn.execute(
                select(p.c.payment_id, p.c.checkout_id).where(p.c.order_id == order_id)
            ).first()
            if row is None:
                return False

            result = conn.execute(
                update(p)
                .where(
                    p.c.payment_id == row.payment_id,
                    p.c.status.notin_(TERMINAL_STATUSES),
                )
                .values(status=status, updated_at=func.now())
            )
            if not result.rowcount:
                return False

            if row.checkout_id is not None:
                self._update_checkout(conn, row.checkout_id, status)

        logger.info(
            "payment %s order_id=%s -> %s",
            row.payment_id,
            order_id,
            status,
            extra={"order_id": order_id, "parent_id": row.checkout_id},
        )
        return True

    # ============================================================
    # Internal
    # ============================================================

    @staticmethod
    def _update_payment(conn: Connection, payment_id: int, values: Dict[str, Any]) -> None:
        p = tables.payments
        conn.execute(
            update(p)
            .where(p.c.payment_id == payment_id)
            .values(**values, updated_at=func.now())
        )

    @staticmethod
    def _update_checkout(
        conn: Connection,
        checkout_id: int,
        payment_status: str,
        *,
        order_id: Optional[str] = None,
    ) -> None:
        c = tables.checkouts
        values: Dict[str, Any] = {
            "payment_status": CHECKOUT_STATUS[payment_status],
            "updated_at": func.now(),
        }
        if order_id is not None:
            values["phonepe_order_id"] = order_id

        # a completed checkout stays completed
        conn.execute(
            update(c)
            .where(c.c.checkout_id == checkout_id, c.c.payment_status != "completed")
            .values(**values)
        )
