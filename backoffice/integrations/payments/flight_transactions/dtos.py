from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, confloat

TransactionStatus = Literal["Pending", "Processing", "Success", "Failed"]


class SaveFlightTransactionInput(BaseModel):
    order_id: str = Field(min_length=1)
    booking_id: Optional[int] = None
    user_id: Optional[int] = None
    payment_id: Optional[str] = None
    payment_amount: confloat(ge=0) = 0
    payment_method: str = "PhonePe"
    payment_status: TransactionStatus = "Pending"
    email: str = ""


class SaveFlightTransactionResult(BaseModel):
    transaction_id: int
    created: bool
    # stored status after the call; a retry on a Success / Failed row reports the kept value
    payment_status: str


class FlightTransactionStatusInput(BaseModel):
    status: TransactionStatus


class FlightTransactionDTO(BaseModel):
    id: int
    booking_id: Optional[int] = None
    user_id: Optional[int] = None
    order_id: str
    payment_id: Optional[str] = None
    payment_amount: float
    payment_method: str
    payment_status: str
    email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # joined from flight_bookings
    pnr: Optional[str] = None
    booking_status: Optional[str] = None
