from __future__ import annotations

from typing import List, Tuple
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from backoffice.common.errors import ValidationError

GATEWAY_NAME = "phonepe"

# query keys the payment-result page reads; always set by us
_REDIRECT_KEYS = ("orderId", "gateway", "environment")


def require_absolute_http_url(url: str | None, *, field: str = "return_target") -> str:
    """Reject missing, relative and non-http(s) URLs."""
    value = (url or "").strip()
    if not value:
        raise ValidationError(f"{field} is required")

    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"{field} must be an absolute http(s) URL")
    return value


def payment_redirect_url(return_target: str | None, *, order_id: str, environment: str) -> str:
    """
    URL the gateway sends the customer back to after paying.

    return_target keeps its own query string and fragment; orderId / gateway /
    environment are appended, replacing any value the caller put there.
    """
    parsed = urlparse(require_absolute_http_url(return_target))

    query: List[Tuple[str, str]] = [
        (k, v)
        for k, v in parse_qsl(parsed.query, keep_blank_values=True)
        if k not in _REDIRECT_KEYS
    ]
    query += list(zip(_REDIRECT_KEYS, (order_id, GATEWAY_NAME, environment)))

    return urlunparse(parsed._replace(query=urlencode(query)))
