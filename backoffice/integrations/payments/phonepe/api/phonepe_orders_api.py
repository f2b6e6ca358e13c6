from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.engine import Engine

from backoffice.common.errors import BackofficeError, http_error
from backoffice.db.core import get_engine
from backoffice.integrations.payments.phonepe.dtos import (
    GatewayEnvironmentResponse,
    OrderCreatedResponse,
    PhonePeOrderRequest,
    StatusCheckedResponse,
)
from backoffice.integrations.payments.phonepe.gateway_config import load_gateway_config
from backoffice.integrations.payments.phonepe.services.order_reconciliation_service import (
    ClientFactory,
    OrderReconciliationService,
)
from backoffice.integrations.payments.phonepe.services.phonepe_client import shared_client

router = APIRouter(
    prefix="/api/phonepe",
    tags=["phonepe"],
)


def get_client_factory() -> ClientFactory:
    """Gateway client factory (tests override this dependency)."""
    return shared_client


# ============================================================
# POST /api/phonepe/orders
# ============================================================

@router.post("/orders")
def phonepe_orders(
    payload: PhonePeOrderRequest,
    engine: Engine = Depends(get_engine),
    client_factory: ClientFactory = Depends(get_client_factory),
) -> Dict[str, Any]:
    """
    Combined order endpoint.

    - action=create-order : gateway order + payment row -> Processing
    - action=check-status : gateway status -> Success / Failed when terminal
    """
    if payload.action not in ("create-order", "check-status"):
        raise HTTPException(
            status_code=400,
            detail="Invalid action. Use: create-order, check-status",
        )

    service = OrderReconciliationService(engine=engine, client_factory=client_factory)
    try:
        config = load_gateway_config(payload.environment)

        if payload.action == "create-order":
            created = service.create_order(
                config,
                payload.resolved_checkout_id(),
                payload.amount,
                payload.currency,
                payload.return_url,
                merchant_order_id=payload.merchant_order_id,
            )
            return OrderCreatedResponse(
                checkout_page_url=created.checkout_page_url,
                merchant_order_id=created.merchant_order_id,
                amount=str(created.amount),
                currency=created.currency,
                environment=created.environment,
            ).model_dump(by_alias=True)

        checked = service.check_status(config, payload.merchant_order_id)
        return StatusCheckedResponse(
            merchant_order_id=checked.merchant_order_id,
            status=checked.status,
            gateway_state=checked.gateway_state,
            environment=checked.environment,
        ).model_dump(by_alias=True)
    except BackofficeError as e:
        raise http_error(e)


# ============================================================
# GET /api/phonepe/environment
# ============================================================

@router.get("/environment")
def phonepe_environment(
    environment: Optional[str] = Query(default=None),
) -> Dict[str, Any]:
    """Resolved gateway config for `environment` (default PAYMENT_ENV), no secret."""
    try:
        config = load_gateway_config(environment)
        return GatewayEnvironmentResponse(**config.describe()).model_dump(by_alias=True)
    except BackofficeError as e:
        raise http_error(e)
