# tests/test_gateway_config.py
import pytest

from backoffice.common.errors import ValidationError
from backoffice.integrations.payments.phonepe.gateway_config import load_gateway_config


@pytest.fixture(autouse=True)
def phonepe_env(monkeypatch):
    monkeypatch.setenv("PHONEPE_CLIENT_ID_TEST", "TEST-ID")
    monkeypatch.setenv("PHONEPE_CLIENT_SECRET_TEST", "test-secret")
    monkeypatch.setenv("PHONEPE_CLIENT_ID_LIVE", "LIVE-ID")
    monkeypatch.setenv("PHONEPE_CLIENT_SECRET_LIVE", "live-secret")
    monkeypatch.setenv("PHONEPE_ENV_LIVE", "PRODUCTION")
    monkeypatch.delenv("PHONEPE_ENV_TEST", raising=False)
    monkeypatch.delenv("PHONEPE_CLIENT_VERSION", raising=False)
    monkeypatch.delenv("PAYMENT_ENV", raising=False)


def test_default_is_test_sandbox():
    cfg = load_gateway_config()
    assert cfg.environment == "test"
    assert cfg.client_id == "TEST-ID"
    assert cfg.gateway_env == "SANDBOX"
    assert cfg.api_base_url == "https://api-preprod.phonepe.com/apis/pg-sandbox"
    assert cfg.client_version == 1


def test_live_production(monkeypatch):
    monkeypatch.setenv("PHONEPE_CLIENT_VERSION", "2")
    cfg = load_gateway_config("live")
    assert cfg.client_secret == "live-secret"
    assert cfg.token_url == "https://api.phonepe.com/apis/identity-manager/v1/oauth/token"
    assert cfg.api_base_url == "https://api.phonepe.com/apis/pg"
    assert cfg.client_version == 2


def test_payment_env_default(monkeypatch):
    monkeypatch.setenv("PAYMENT_ENV", "live")
    assert load_gateway_config().environment == "live"


def test_unknown_environment():
    with pytest.raises(ValidationError):
        load_gateway_config("staging")


def test_describe_hides_secret():
    view = load_gateway_config("live").describe()
    assert "client_secret" not in view
    assert "live-secret" not in view.values()
    assert view["configured"] is True
