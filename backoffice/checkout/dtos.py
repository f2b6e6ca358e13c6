from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, confloat

PaymentStatus = Literal["pending", "processing", "completed", "failed"]


class CheckoutCreateDTO(BaseModel):
    tour_id: int
    tour_code: Optional[str] = None
    tour_title: Optional[str] = None
    tour_duration: Optional[str] = None
    tour_locations: Optional[str] = None
    tour_image_url: Optional[str] = None

    total_tour_cost: confloat(gt=0)
    advance_percentage: Optional[confloat(ge=0, le=100)] = None
    advance_amount: confloat(gt=0)
    emi_price: Optional[confloat(ge=0)] = None

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    country: Optional[str] = None

    payment_method: Optional[str] = None
    source_page: Optional[str] = None
    terms_accepted: bool = False
    notes: Optional[str] = None
    currency: str = "INR"


class CheckoutStatusUpdateDTO(BaseModel):
    payment_status: PaymentStatus


class PaymentDTO(BaseModel):
    payment_id: int
    checkout_id: Optional[int] = None
    order_id: Optional[str] = None
    amount: float
    currency: str
    payment_gateway: str
    environment: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CheckoutDTO(BaseModel):
    checkout_id: int
    tour_id: int
    tour_code: str
    tour_title: str
    tour_duration: str
    tour_locations: str
    tour_image_url: str
    total_tour_cost: float
    advance_percentage: float
    advance_amount: float
    emi_price: float
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str
    country: str
    payment_method: str
    source_page: str
    terms_accepted: bool
    notes: str
    payment_status: str
    phonepe_order_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    payments: List[PaymentDTO] = Field(default_factory=list)
