from typing import List, Optional

from pydantic import BaseModel, Field, confloat, conint


class GuestInput(BaseModel):
    name: str = Field(min_length=1)
    age: Optional[conint(ge=0, le=120)] = None
    cell_no: Optional[str] = None
    email_id: Optional[str] = None


# ============================================================
# Bungalow
# ============================================================

class BungalowBookingInput(BaseModel):
    bungalow_code: str
    city: str
    contact_person: str
    cell_no: str
    email_id: Optional[str] = None
    address: Optional[str] = None
    pin_code: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None          # DB default: India
    no_of_people: Optional[conint(ge=1)] = None
    guests: List[GuestInput] = []


# ============================================================
# Weekend gateway
# ============================================================

class WeekendBookingInput(BaseModel):
    property_name: str
    city: str
    person_name: str
    cell_no: str
    email_id: Optional[str] = None
    address: Optional[str] = None
    city_location: Optional[str] = None
    pin_code: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    no_of_adults: Optional[conint(ge=1)] = None
    no_of_rooms: Optional[conint(ge=1)] = None
    no_of_child: Optional[conint(ge=0)] = None
    children: List[GuestInput] = []


class StayBookingCreatedDTO(BaseModel):
    booking_id: int
    guests: int


# ============================================================
# Listings (bungalows / weekend gateways)
# ============================================================

class StayListingInput(BaseModel):
    # BUNG0001 / WG0001 style; the next free code is used when omitted
    code: Optional[str] = None
    name: str = Field(min_length=1)
    price: confloat(ge=0)
    per_pax_twin: Optional[confloat(ge=0)] = None
    per_pax_triple: Optional[confloat(ge=0)] = None
    child_with_bed: Optional[confloat(ge=0)] = None
    child_without_bed: Optional[confloat(ge=0)] = None
    infant: Optional[confloat(ge=0)] = None
    per_pax_single: Optional[confloat(ge=0)] = None
    overview: Optional[str] = None
    inclusive: Optional[str] = None
    exclusive: Optional[str] = None
    places_nearby: Optional[str] = None
    booking_policy: Optional[str] = None
    status: Optional[conint(ge=0, le=1)] = None
    # stored image paths; on PUT, None keeps the current images
    images: Optional[List[str]] = None


class StayImagesInput(BaseModel):
    images: List[str] = Field(min_length=1)


class StayListingCreatedDTO(BaseModel):
    id: int
    code: str
    images: int
