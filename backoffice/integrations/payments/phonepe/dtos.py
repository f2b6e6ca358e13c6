from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CustomerDetailsInput(_CamelModel):
    checkout_id: Optional[int] = None


class PhonePeOrderRequest(_CamelModel):
    """
    POST /api/phonepe/orders body.

    action:
      create-order : amount, currency, checkout_id, return_url, [merchant_order_id]
      check-status : merchant_order_id
    """

    action: str
    environment: Optional[str] = None
    merchant_order_id: Optional[str] = None
    # float would lose the decimal text; the service parses it as Decimal
    amount: Optional[str] = None
    currency: Optional[str] = None
    checkout_id: Optional[int] = None
    customer_details: Optional[CustomerDetailsInput] = None
    return_url: Optional[str] = None

    model_config = ConfigDict(coerce_numbers_to_str=True)

    def resolved_checkout_id(self) -> Optional[int]:
        if self.checkout_id is not None:
            return self.checkout_id
        if self.customer_details is not None:
            return self.customer_details.checkout_id
        return None


class OrderCreatedResponse(_CamelModel):
    success: bool = True
    action: Literal["order-created"] = "order-created"
    checkout_page_url: str
    merchant_order_id: str
    amount: str
    currency: str
    environment: str


class StatusCheckedResponse(_CamelModel):
    success: bool = True
    action: Literal["status-checked"] = "status-checked"
    merchant_order_id: str
    status: str
    gateway_state: Optional[str] = None
    environment: str


class GatewayEnvironmentResponse(_CamelModel):
    environment: str
    client_id: str
    client_version: int
    gateway_env: str
    api_base_url: str
    configured: bool
