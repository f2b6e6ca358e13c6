from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, conint, confloat

# ============================================================
# Create
# ============================================================

class PassengerInput(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    passenger_type: Literal["adult", "child", "infant"]
    passport_no: Optional[str] = None


class TourBookingCreateDTO(BaseModel):
    customer_id: int
    departure_id: int
    total_adult: conint(ge=1)
    total_child: conint(ge=0) = 0
    total_infant: conint(ge=0) = 0
    total_amount: confloat(ge=0)
    passengers: List[PassengerInput]


class TourBookingCreatedDTO(BaseModel):
    booking_id: int
    booking_ref: str       # e.g. "KES1718000000000123"
    passengers: int        # passenger rows written


# ============================================================
# Read
# ============================================================

class PassengerDTO(BaseModel):
    passenger_id: int
    first_name: str
    last_name: str
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    passenger_type: str
    passport_no: Optional[str] = None


class TourBookingDTO(BaseModel):
    booking_id: int
    booking_ref: str
    customer_id: int
    departure_id: int
    total_adult: int
    total_child: int
    total_infant: int
    total_amount: float
    status: str
    booking_date: datetime
    passengers: List[PassengerDTO] = []
