# tests/conftest.py
from __future__ import annotations

from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from backoffice.common.errors import GatewayError
from backoffice.db.core import create_db_engine, get_engine
from backoffice.db.tables import metadata
from backoffice.integrations.payments.phonepe.api.phonepe_orders_api import get_client_factory
from backoffice.integrations.payments.phonepe.gateway_config import GatewayConfig
from backoffice.integrations.payments.phonepe.services.phonepe_client import (
    OrderStatus,
    PayResponse,
)
from backoffice.main import app


@pytest.fixture
def engine(tmp_path):
    """
    File-based SQLite per test.

    A real QueuePool (not StaticPool / :memory:) so tests can assert that
    every connection went back to the pool.
    """
    eng = create_db_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        pool_size=5,
        max_overflow=0,
        pool_timeout=2,
    )
    metadata.create_all(eng)
    try:
        yield eng
    finally:
        eng.dispose()


class FakeGateway:
    """
    Stand-in for PhonePeClient.

    - pay() records the call and answers with a hosted checkout URL
    - get_order_status() answers with the next queued state
    - error: set to a GatewayError to make the next call fail
    """

    def __init__(self) -> None:
        self.pay_calls: List[Dict[str, object]] = []
        self.status_calls: List[str] = []
        self.states: List[str] = []
        self.error: Optional[GatewayError] = None
        self.configs: List[GatewayConfig] = []

    def factory(self, config: GatewayConfig) -> "FakeGateway":
        self.configs.append(config)
        return self

    def pay(self, merchant_order_id: str, amount_minor: int, redirect_url: str) -> PayResponse:
        if self.error is not None:
            raise self.error
        self.pay_calls.append(
            {
                "merchant_order_id": merchant_order_id,
                "amount_minor": amount_minor,
                "redirect_url": redirect_url,
            }
        )
        return PayResponse(
            order_id=f"OMO{len(self.pay_calls)}",
            state="PENDING",
            redirect_url=f"https://mercury.phonepe.test/checkout/{merchant_order_id}",
        )

    def get_order_status(self, merchant_order_id: str) -> OrderStatus:
        if self.error is not None:
            raise self.error
        self.status_calls.append(merchant_order_id)
        state = self.states.pop(0) if self.states else "PENDING"
        return OrderStatus(merchant_order_id=merchant_order_id, state=state, raw={"state": state})


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(engine, gateway):
    """
    TestClient with
    - get_engine           -> the per-test SQLite engine
    - get_client_factory   -> FakeGateway (no network)
    """
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_client_factory] = lambda: gateway.factory

    c = TestClient(app)
    c.engine = engine
    c.gateway = gateway
    try:
        yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def test_gateway_config() -> GatewayConfig:
    return GatewayConfig(
        environment="test",
        client_id="TEST-CLIENT",
        client_secret="s3cret",
        client_version=1,
        gateway_env="SANDBOX",
        token_url="https://api-preprod.phonepe.com/apis/pg-sandbox/v1/oauth/token",
        api_base_url="https://api-preprod.phonepe.com/apis/pg-sandbox",
        timeout=5.0,
    )
