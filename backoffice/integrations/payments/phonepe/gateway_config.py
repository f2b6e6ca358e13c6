from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from backoffice.common import settings
from backoffice.common.errors import ValidationError

ENVIRONMENTS = ("test", "live")

SANDBOX = "SANDBOX"
PRODUCTION = "PRODUCTION"

# PhonePe Standard Checkout v2 hosts
_HOSTS: Dict[str, Dict[str, str]] = {
    SANDBOX: {
        "token_url": "https://api-preprod.phonepe.com/apis/pg-sandbox/v1/oauth/token",
        "api_base_url": "https://api-preprod.phonepe.com/apis/pg-sandbox",
    },
    PRODUCTION: {
        "token_url": "https://api.phonepe.com/apis/identity-manager/v1/oauth/token",
        "api_base_url": "https://api.phonepe.com/apis/pg",
    },
}


@dataclass(frozen=True)
class GatewayConfig:
    """
    Credentials + endpoints for one gateway environment.

    Built per request and passed explicitly into the reconciliation calls;
    there is no process-wide "current environment".
    """

    environment: str          # "test" / "live"
    client_id: str
    client_secret: str
    client_version: int
    gateway_env: str          # SANDBOX / PRODUCTION
    token_url: str
    api_base_url: str
    timeout: float = 10.0

    def describe(self) -> Dict[str, object]:
        """Read-only view for the admin UI (never includes the secret)."""
        return {
            "environment": self.environment,
            "client_id": self.client_id,
            "client_version": self.client_version,
            "gateway_env": self.gateway_env,
            "api_base_url": self.api_base_url,
            "configured": bool(self.client_id and self.client_secret),
        }


def resolve_environment(environment: Optional[str]) -> str:
    env = (environment or settings.default_payment_env()).strip().lower()
    if env not in ENVIRONMENTS:
        raise ValidationError(f"environment must be one of {', '.join(ENVIRONMENTS)}")
    return env


def load_gateway_config(environment: Optional[str] = None) -> GatewayConfig:
    """
    environment -> GatewayConfig

    env vars (suffix _TEST / _LIVE):
      PHONEPE_CLIENT_ID_*, PHONEPE_CLIENT_SECRET_*, PHONEPE_ENV_* (SANDBOX|PRODUCTION)
    shared:
      PHONEPE_CLIENT_VERSION (default 1), PHONEPE_TIMEOUT_SECONDS (default 10)
    """
    env = resolve_environment(environment)
    suffix = "_LIVE" if env == "live" else "_TEST"

    gateway_env = settings.env_str(f"PHONEPE_ENV{suffix}", SANDBOX).upper()
    if gateway_env not in _HOSTS:
        raise RuntimeError(f"PHONEPE_ENV{suffix} must be SANDBOX or PRODUCTION, got {gateway_env!r}")

    hosts = _HOSTS[gateway_env]
    return GatewayConfig(
        environment=env,
        client_id=settings.env_str(f"PHONEPE_CLIENT_ID{suffix}"),
        client_secret=settings.env_str(f"PHONEPE_CLIENT_SECRET{suffix}"),
        client_version=settings.env_int("PHONEPE_CLIENT_VERSION", 1),
        gateway_env=gateway_env,
        token_url=hosts["token_url"],
        api_base_url=hosts["api_base_url"],
        timeout=float(settings.env_int("PHONEPE_TIMEOUT_SECONDS", 10)),
    )
