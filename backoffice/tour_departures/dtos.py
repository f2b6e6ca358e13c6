from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, confloat, conint


class TierCostsInput(BaseModel):
    perPaxTwin: Optional[confloat(ge=0)] = None
    perPaxTriple: Optional[confloat(ge=0)] = None
    childWithBed: Optional[confloat(ge=0)] = None
    childWithoutBed: Optional[confloat(ge=0)] = None
    infant: Optional[confloat(ge=0)] = None
    perPaxSingle: Optional[confloat(ge=0)] = None


class TourCostsInput(BaseModel):
    threeStar: Optional[TierCostsInput] = None
    fourStar: Optional[TierCostsInput] = None
    fiveStar: Optional[TierCostsInput] = None


class DepartureInput(BaseModel):
    tour_type: Literal["Group", "Individual"] = "Group"
    # Group tours only
    description: Optional[str] = None
    # Individual tours only
    departure_text: Optional[str] = None

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    departure_date: Optional[date] = None
    return_date: Optional[date] = None

    status: Optional[str] = None
    # `price` is the older name of adult_price and wins when both are sent
    price: Optional[confloat(ge=0)] = None
    adult_price: Optional[confloat(ge=0)] = None
    child_price: Optional[confloat(ge=0)] = None
    infant_price: Optional[confloat(ge=0)] = None

    total_seats: conint(ge=0) = 0
    booked_seats: conint(ge=0) = 0

    tour_costs: Optional[TourCostsInput] = None


class DepartureBulkInput(BaseModel):
    tour_id: conint(gt=0)
    departures: List[DepartureInput] = Field(default_factory=list)


class DepartureBulkCreatedDTO(BaseModel):
    tour_id: int
    created: int
    departure_ids: List[int]
