from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.engine import Engine

from backoffice.checkout.dtos import CheckoutCreateDTO, CheckoutDTO
from backoffice.checkout.repository.checkout_repo import CheckoutRepository
from backoffice.common import settings
from backoffice.common.errors import ValidationError
from backoffice.composite.composite_writer import CompositePayload

logger = logging.getLogger(__name__)

PAYMENT_GATEWAY = "PhonePe"


class CheckoutService:
    """
    Tour checkout (advance payment) use cases.

    Responsibilities:
      - create: checkout row + its Pending payment row, atomically
      - contact PATCH through an allowlist
      - manual payment_status override (admin)

    Gateway order creation / reconciliation lives in
    integrations/payments/phonepe; this service never calls the gateway.
    """

    def __init__(
        self,
        *,
        engine: Optional[Engine] = None,
        repo: Optional[CheckoutRepository] = None,
    ) -> None:
        self._repo = repo or CheckoutRepository(engine=engine)

    def create_checkout(self, payload: CheckoutCreateDTO) -> CheckoutDTO:
        parent = payload.model_dump(exclude={"currency"})
        payment = {
            "amount": payload.advance_amount,
            "currency": payload.currency,
            "payment_gateway": PAYMENT_GATEWAY,
            "environment": settings.default_payment_env(),
            "status": "Pending",
        }
        result = self._repo.writer.create(
            CompositePayload(parent=parent, children={"payments": [payment]})
        )
        return self.get_checkout(result.parent_id)

    def get_checkout(self, checkout_id: int) -> CheckoutDTO:
        return CheckoutDTO(**self._repo.writer.fetch(checkout_id))

    def update_contact(self, checkout_id: int, fields: Mapping[str, Any]) -> CheckoutDTO:
        nulls = sorted(k for k, v in fields.items() if v is None)
        if nulls:
            raise ValidationError(f"field(s) cannot be null: {', '.join(nulls)}")
        self._repo.update_contact(checkout_id, fields)
        return self.get_checkout(checkout_id)

    def update_status(self, checkout_id: int, payment_status: str) -> CheckoutDTO:
        self._repo.update_status(checkout_id, payment_status)
        logger.info(
            "checkout %s payment_status -> %s (manual)",
            checkout_id,
            payment_status,
            extra={"entity": "checkout", "parent_id": checkout_id},
        )
        return self.get_checkout(checkout_id)

    def list_by_tour(self, tour_id: int) -> List[Dict[str, Any]]:
        return self._repo.list_by_tour(tour_id)
