from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

import requests

from backoffice.common.errors import GatewayError
from backoffice.integrations.payments.phonepe.gateway_config import GatewayConfig

logger = logging.getLogger(__name__)

PAY_PATH = "/checkout/v2/pay"
ORDER_STATUS_PATH = "/checkout/v2/order/{merchant_order_id}/status"

# refresh the token a little before PhonePe says it expires
_TOKEN_SKEW_SECONDS = 60


@dataclass(frozen=True)
class PayResponse:
    order_id: Optional[str]
    state: Optional[str]
    redirect_url: str


@dataclass(frozen=True)
class OrderStatus:
    merchant_order_id: str
    state: Optional[str]
    raw: Dict[str, Any]


class PhonePeClient:
    """
    PhonePe Standard Checkout v2 (HTTP, requests).

    - OAuth client-credentials token (Authorization: O-Bearer <token>)
    - pay            : create a checkout order, get the hosted page URL
    - get_order_status

    Every failure (transport, non-2xx, unparsable body, missing fields) is a
    GatewayError; nothing here touches the database.
    """

    def __init__(
        self,
        config: GatewayConfig,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self._session = session or requests.Session()
        self._token: Optional[str] = None
        self._token_expires_at: float = 0.0
        self._token_lock = threading.Lock()

    # ============================================================
    # Public
    # ============================================================

    def pay(self, merchant_order_id: str, amount_minor: int, redirect_url: str) -> PayResponse:
        body = {
            "merchantOrderId": merchant_order_id,
            "amount": amount_minor,
            "paymentFlow": {
                "type": "PG_CHECKOUT",
                "merchantUrls": {"redirectUrl": redirect_url},
            },
        }
        data = self._request("POST", PAY_PATH, json=body)

        checkout_url = data.get("redirectUrl")
        if not checkout_url:
            raise GatewayError("PhonePe pay response has no redirectUrl")

        logger.info(
            "phonepe pay ok order_id=%s state=%s",
            merchant_order_id,
            data.get("state"),
            extra={"order_id": merchant_order_id, "environment": self.config.environment},
        )
        return PayResponse(
            order_id=data.get("orderId"),
            state=data.get("state"),
            redirect_url=checkout_url,
        )

    def get_order_status(self, merchant_order_id: str) -> OrderStatus:
        path = ORDER_STATUS_PATH.format(merchant_order_id=merchant_order_id)
        data = self._request("GET", path)
        state = data.get("state") or data.get("status")

        logger.info(
            "phonepe status order_id=%s state=%s",
            merchant_order_id,
            state,
            extra={"order_id": merchant_order_id, "environment": self.config.environment},
        )
        return OrderStatus(merchant_order_id=merchant_order_id, state=state, raw=data)

    # ============================================================
    # Internal
    # ============================================================

    def _access_token(self) -> str:
        with self._token_lock:
            if self._token and time.time() < self._token_expires_at - _TOKEN_SKEW_SECONDS:
                return self._token
            return self._fetch_token()

    def _fetch_token(self) -> str:
        cfg = self.config
        if not cfg.client_id or not cfg.client_secret:
            raise GatewayError(f"PhonePe credentials are not configured for {cfg.environment}")

        try:
            resp = self._session.post(
                cfg.token_url,
                data={
                    "client_id": cfg.client_id,
                    "client_version": str(cfg.client_version),
                    "client_secret": cfg.client_secret,
                    "grant_type": "client_credentials",
                },
                timeout=cfg.timeout,
            )
        except requests.RequestException as e:
            raise GatewayError(f"PhonePe token request failed: {e}") from e

        data = self._json(resp, "token")
        token = data.get("access_token")
        if not token:
            raise GatewayError("PhonePe token response has no access_token")

        self._token = token
        self._token_expires_at = float(data.get("expires_at") or time.time() + 300)
        return token

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"O-Bearer {self._access_token()}",
        }
        url = self.config.api_base_url.rstrip("/") + path
        try:
            resp = self._session.request(
                method,
                url,
                headers=headers,
                timeout=self.config.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise GatewayError(f"PhonePe {method} {path} failed: {e}") from e
        return self._json(resp, path)

    @staticmethod
    def _json(resp: requests.Response, what: str) -> Dict[str, Any]:
        if not 200 <= resp.status_code < 300:
            # body may echo request fields; keep it out of the message
            logger.error("phonepe %s http=%s", what, resp.status_code)
            raise GatewayError(f"PhonePe {what} answered HTTP {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as e:
            raise GatewayError(f"PhonePe {what} returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise GatewayError(f"PhonePe {what} returned an unexpected body")
        return data


@lru_cache(maxsize=8)
def shared_client(config: GatewayConfig) -> PhonePeClient:
    """
    One PhonePeClient per GatewayConfig for the life of the process.

    Requests reuse its HTTP session and access token. Changed credentials
    give a different (frozen, hashable) config and so a fresh client.
    """
    return PhonePeClient(config)
