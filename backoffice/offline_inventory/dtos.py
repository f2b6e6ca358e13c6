from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, conint, confloat
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Admin UI sends camelCase keys; snake_case is accepted too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# Offline flight
# ============================================================

class FlightDetailsInput(_CamelModel):
    from_city: str = Field(min_length=1)
    from_airport: Optional[str] = None
    from_airport_code: Optional[str] = None
    to_city: str = Field(min_length=1)
    to_airport: Optional[str] = None
    to_airport_code: Optional[str] = None
    departure_date: str = Field(min_length=1)
    return_date: Optional[str] = None
    adults: conint(ge=0) = 1
    children: conint(ge=0) = 0
    infants: conint(ge=0) = 0
    traveller_class: Optional[str] = None
    flight_time: Optional[str] = None
    duration: Optional[str] = None
    arrival_time: Optional[str] = None
    flight_type: Optional[str] = None
    airline: Optional[str] = None
    flight_number: Optional[str] = None
    baggage_allowance: Optional[str] = None
    meals_seat_description: Optional[str] = None
    refundable_status_description: Optional[str] = None
    meals_included: bool = False
    price_per_adult: confloat(ge=0)


class _PricedOption(_CamelModel):
    price: Optional[float] = None
    selected: bool = False


class StopFilterInput(_PricedOption):
    type: str          # "Non Stop" / "1 Stop" / "2+ Stops"


class AirportFilterInput(_PricedOption):
    name: str
    code: str


class AirlineFilterInput(_PricedOption):
    name: str
    code: str


class AircraftSizeFilterInput(_PricedOption):
    size: str          # "Small Aircraft" ...


class TimeRangeFilterInput(_CamelModel):
    range: str         # "Before 6 AM" ...
    selected: bool = False


class FlightFiltersInput(_CamelModel):
    stops: List[StopFilterInput] = []
    hide_nearby_airports: bool = False
    refundable_fares: bool = False
    departure_airports: List[AirportFilterInput] = []
    departure_time_ranges: List[TimeRangeFilterInput] = []
    arrival_time_ranges: List[TimeRangeFilterInput] = []
    airlines: List[AirlineFilterInput] = []
    aircraft_sizes: List[AircraftSizeFilterInput] = []
    min_price: Optional[float] = None
    max_price: Optional[float] = None


class OfflineFlightInput(_CamelModel):
    booking_type: str = Field(min_length=1)   # "oneWay" / "roundTrip"
    flight_details: FlightDetailsInput
    filters: FlightFiltersInput = FlightFiltersInput()


# ============================================================
# Offline hotel
# ============================================================

class HotelSearchDetailsInput(_CamelModel):
    country: str = Field(min_length=1)
    city: str = Field(min_length=1)
    location: Optional[str] = None
    property_name: Optional[str] = None
    check_in_date: str = Field(min_length=1)
    check_out_date: str = Field(min_length=1)
    rooms: conint(ge=1) = 1
    adults: conint(ge=1) = 1
    children: conint(ge=0) = 0
    pets: bool = False


class HotelDetailsInput(_CamelModel):
    hotel_name: str = Field(min_length=1)
    location: Optional[str] = None
    star_rating: Optional[conint(ge=0, le=7)] = None
    # paths produced by the upload collaborator, stored as-is
    main_image: Optional[str] = None
    additional_images: List[str] = []
    rating: float = 0
    total_ratings: conint(ge=0) = 0
    price: confloat(ge=0)
    taxes: Optional[float] = None
    amenities: Optional[str] = None
    status: str = "Available"
    free_stay_for_kids: bool = False
    limited_time_sale: bool = False
    sale_price: Optional[float] = None
    original_price: Optional[float] = None
    login_to_book: bool = False
    pay_later: bool = False


class HotelDescriptionsInput(_CamelModel):
    overview: Optional[str] = None
    hotel_facilities: Optional[str] = None
    airport_transfers: Optional[str] = None
    meal_plan: Optional[str] = None
    taxes_description: Optional[str] = None


class HotelPriceRangeInput(_CamelModel):
    min: Optional[float] = None
    max: Optional[float] = None
    range: Optional[str] = None       # display label, e.g. "₹0 - ₹2000"
    count: conint(ge=0) = 0
    selected: bool = False


class HotelStarCategoryInput(_CamelModel):
    stars: conint(ge=0, le=7)
    count: conint(ge=0) = 0
    selected: bool = False


class HotelBudgetInput(_CamelModel):
    min: Optional[float] = None
    max: Optional[float] = None


class HotelFiltersInput(_CamelModel):
    price_ranges: List[HotelPriceRangeInput] = []
    star_categories: List[HotelStarCategoryInput] = []
    budget: Optional[HotelBudgetInput] = None
    search_locality: Optional[str] = None


class OfflineHotelInput(_CamelModel):
    search_details: HotelSearchDetailsInput
    children_ages: List[conint(ge=0, le=17)] = []
    hotel_details: HotelDetailsInput
    descriptions: HotelDescriptionsInput = HotelDescriptionsInput()
    filters: HotelFiltersInput = HotelFiltersInput()


class BulkDeleteInput(BaseModel):
    ids: List[int]


# ============================================================
# Results
# ============================================================

class OfflineWriteResultDTO(BaseModel):
    id: int
    child_counts: Dict[str, int]


class BulkDeleteResultDTO(BaseModel):
    deleted: int
    # image paths the upload collaborator may now remove
    released_images: List[str] = []
