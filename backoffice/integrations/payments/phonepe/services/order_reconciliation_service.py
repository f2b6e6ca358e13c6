from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Optional

from sqlalchemy.engine import Engine

from backoffice.common.errors import NotFound, ValidationError
from backoffice.integrations.payments.phonepe.gateway_config import GatewayConfig
from backoffice.integrations.payments.phonepe.repository.payment_transaction_repo import (
    FAILED,
    SUCCESS,
    TERMINAL_STATUSES,
    PaymentTransactionRepository,
)
from backoffice.integrations.payments.phonepe.services.phonepe_client import (
    PhonePeClient,
    shared_client,
)
from backoffice.integrations.payments.phonepe.utils.url_builder import payment_redirect_url

logger = logging.getLogger(__name__)

# ISO 4217 minor-unit exponents for the currencies we accept
MINOR_UNIT_EXPONENT = {
    "INR": 2,
    "USD": 2,
    "EUR": 2,
    "JPY": 0,
}

# largest major-unit amount the Numeric(12, 2) money columns can hold
MAX_AMOUNT = Decimal("9999999999.99")

_GATEWAY_SUCCESS_STATES = ("COMPLETED", "SUCCESS")
_GATEWAY_FAILED_STATES = ("FAILED",)

ClientFactory = Callable[[GatewayConfig], PhonePeClient]


@dataclass(frozen=True)
class OrderCreated:
    merchant_order_id: str
    checkout_page_url: str
    amount: Decimal
    currency: str
    environment: str


@dataclass(frozen=True)
class StatusChecked:
    merchant_order_id: str
    status: str
    gateway_state: Optional[str]
    environment: str


def to_minor_units(amount: Any, currency: str) -> int:
    """
    Major -> minor units, ROUND_HALF_UP (500.005 INR -> 50001 paise).
    """
    exponent = MINOR_UNIT_EXPONENT.get(currency)
    if exponent is None:
        raise ValidationError(f"unsupported currency: {currency}")

    value = _positive_amount(amount)
    if value > MAX_AMOUNT:
        raise ValidationError(f"amount must not exceed {MAX_AMOUNT}")
    try:
        scaled = (value * (Decimal(10) ** exponent)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError("amount has too many digits")
    if scaled <= 0:
        raise ValidationError("amount is below the currency's smallest unit")
    return int(scaled)


def map_gateway_state(state: Optional[str]) -> Optional[str]:
    """Gateway vocabulary -> Success / Failed, or None for non-terminal states."""
    normalized = (state or "").upper()
    if normalized in _GATEWAY_SUCCESS_STATES:
        return SUCCESS
    if normalized in _GATEWAY_FAILED_STATES:
        return FAILED
    return None


def _positive_amount(amount: Any) -> Decimal:
    if amount is None or amount == "":
        raise ValidationError("amount is required")
    if isinstance(amount, bool):
        raise ValidationError("amount must be a number")
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValidationError("amount must be a number")
    if not value.is_finite() or value <= 0:
        raise ValidationError("amount must be greater than 0")
    return value


class OrderReconciliationService:
    """
    Gateway order lifecycle for checkout payments.

    States: Pending -> Processing -> Success | Failed (terminal).

    Responsibilities:
      - CreateOrder : validate, call the gateway, then upsert the payment row
      - CheckStatus : ask the gateway, persist terminal outcomes

    The gateway call always happens before any local write, so a
    GatewayError leaves the database untouched. The GatewayConfig is passed
    in per call.
    """

    def __init__(
        self,
        *,
        engine: Optional[Engine] = None,
        repo: Optional[PaymentTransactionRepository] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self._repo = repo or PaymentTransactionRepository(engine=engine)
        self._client_factory = client_factory or shared_client

    # ============================================================
    # CreateOrder
    # ============================================================

    def create_order(
        self,
        config: GatewayConfig,
        parent_id: Optional[int],
        amount: Any,
        currency: Optional[str],
        return_target: Optional[str],
        merchant_order_id: Optional[str] = None,
    ) -> OrderCreated:
        currency = (currency or "INR").upper()
        amount_minor = to_minor_units(amount, currency)
        if parent_id is None:
            raise ValidationError("checkout_id is required")

        order_id = (merchant_order_id or "").strip() or str(uuid.uuid4())
        redirect_url = payment_redirect_url(
            return_target, order_id=order_id, environment=config.environment
        )

        if not self._repo.checkout_exists(parent_id):
            raise NotFound(f"checkout {parent_id} not found")

        existing = self._repo.get_by_order_id(order_id)
        if existing and existing["status"] in TERMINAL_STATUSES:
            raise ValidationError(f"order {order_id} is already {existing['status']}")

        client = self._client_factory(config)
        response = client.pay(order_id, amount_minor, redirect_url)

        amount_major = _positive_amount(amount)
        self._repo.record_order_created(
            checkout_id=parent_id,
            order_id=order_id,
            amount=float(amount_major),
            currency=currency,
            environment=config.environment,
        )

        return OrderCreated(
            merchant_order_id=order_id,
            checkout_page_url=response.redirect_url,
            amount=amount_major,
            currency=currency,
            environment=config.environment,
        )

    # ============================================================
    # CheckStatus
    # ============================================================

    def check_status(self, config: GatewayConfig, order_id: Optional[str]) -> StatusChecked:
        order_id = (order_id or "").strip()
        if not order_id:
            raise ValidationError("merchant_order_id is required")

        record = self._repo.get_by_order_id(order_id)
        if record is None:
            raise NotFound(f"no payment for order {order_id}")

        stored = record["status"]
        if stored in TERMINAL_STATUSES:
            return StatusChecked(
                merchant_order_id=order_id,
                status=stored,
                gateway_state=None,
                environment=config.environment,
            )

        client = self._client_factory(config)
        gateway = client.get_order_status(order_id)

        mapped = map_gateway_state(gateway.state)
        status = stored
        if mapped is not None:
            if self._repo.record_terminal_status(order_id, mapped):
                status = mapped
            else:
                # another request recorded the outcome first
                status = self._repo.get_by_order_id(order_id)["status"]
        else:
            logger.info(
                "order %s still %s at gateway (state=%s)",
                order_id,
                stored,
                gateway.state,
                extra={"order_id": order_id, "environment": config.environment},
            )

        return StatusChecked(
            merchant_order_id=order_id,
            status=status,
            gateway_state=gateway.state,
            environment=config.environment,
        )
