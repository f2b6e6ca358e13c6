# backoffice/db/tables.py
"""
Core tables of the back-office.

Only the parent/child pairs written through the composite writer, tables
written in bulk inside one transaction, and the payment tables live here.
Single-table catalogue data (tours, destinations, leads, carousels ...) is
owned by other services.
"""
from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)

metadata = MetaData()


def _money(name: str, **kw) -> Column:
    return Column(name, Numeric(12, 2, asdecimal=False), **kw)


def _created_at() -> Column:
    return Column("created_at", DateTime, nullable=False, server_default=func.now())


def _updated_at() -> Column:
    return Column(
        "updated_at",
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


# -------------------------------
# tour bookings / passengers
# -------------------------------
tour_bookings = Table(
    "tour_bookings",
    metadata,
    Column("booking_id", Integer, primary_key=True, autoincrement=True),
    Column("booking_ref", String(32), nullable=False, unique=True),
    Column("customer_id", Integer, nullable=False, index=True),
    Column("departure_id", Integer, nullable=False),
    Column("total_adult", Integer, nullable=False),
    Column("total_child", Integer, nullable=False, server_default="0"),
    Column("total_infant", Integer, nullable=False, server_default="0"),
    _money("total_amount", nullable=False),
    Column("status", String(16), nullable=False, server_default="pending"),
    Column("booking_date", DateTime, nullable=False, server_default=func.now()),
)

booking_passengers = Table(
    "booking_passengers",
    metadata,
    Column("passenger_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "booking_id",
        Integer,
        ForeignKey("tour_bookings.booking_id"),
        nullable=False,
        index=True,
    ),
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("gender", String(16)),
    Column("date_of_birth", Date),
    Column("passenger_type", String(16), nullable=False),
    Column("passport_no", String(32)),
    UniqueConstraint("booking_id", "passport_no", name="uq_passenger_passport"),
)


# -------------------------------
# offline flights
# -------------------------------
offline_flights = Table(
    "offline_flights",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("booking_type", String(32), nullable=False),
    Column("from_city", String(100), nullable=False),
    Column("from_airport", String(150)),
    Column("from_airport_code", String(8)),
    Column("to_city", String(100), nullable=False),
    Column("to_airport", String(150)),
    Column("to_airport_code", String(8)),
    Column("departure_date", String(32), nullable=False),
    Column("return_date", String(32)),
    Column("adults", Integer, nullable=False, server_default="1"),
    Column("children", Integer, nullable=False, server_default="0"),
    Column("infants", Integer, nullable=False, server_default="0"),
    Column("traveller_class", String(32)),
    Column("flight_time", String(16)),
    Column("duration", String(32)),
    Column("arrival_time", String(16)),
    Column("flight_type", String(32)),
    Column("airline", String(100)),
    Column("flight_number", String(32)),
    Column("baggage_allowance", String(255)),
    Column("meals_seat_description", Text),
    Column("refundable_status_description", Text),
    Column("meals_included", Boolean, nullable=False, server_default="0"),
    _money("price_per_adult", nullable=False),
    Column("status", String(16), nullable=False, server_default="Available"),
    _created_at(),
    _updated_at(),
)

offline_flight_filters = Table(
    "offline_flight_filters",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "flight_id",
        Integer,
        ForeignKey("offline_flights.id"),
        nullable=False,
        index=True,
    ),
    Column("filter_category", String(32), nullable=False),
    Column("filter_type", String(32), nullable=False),
    Column("filter_name", String(150), nullable=False),
    Column("filter_value", String(150), nullable=False),
    _money("filter_price"),
    Column("is_selected", Boolean, nullable=False, server_default="0"),
    _created_at(),
)

offline_flight_price_ranges = Table(
    "offline_flight_price_ranges",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "flight_id",
        Integer,
        ForeignKey("offline_flights.id"),
        nullable=False,
        index=True,
    ),
    _money("min_price"),
    _money("max_price"),
    _created_at(),
)


# -------------------------------
# offline hotels
# -------------------------------
offline_hotels = Table(
    "offline_hotels",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    # search details
    Column("country", String(100), nullable=False),
    Column("city", String(100), nullable=False),
    Column("location", String(150)),
    Column("property_name", String(150)),
    Column("check_in_date", String(32), nullable=False),
    Column("check_out_date", String(32), nullable=False),
    Column("rooms", Integer, nullable=False, server_default="1"),
    Column("adults", Integer, nullable=False, server_default="1"),
    Column("children", Integer, nullable=False, server_default="0"),
    Column("pets", Boolean, nullable=False, server_default="0"),
    Column("children_ages", Text, nullable=False, server_default="[]"),
    # hotel details
    Column("hotel_name", String(200), nullable=False),
    Column("hotel_location", String(200)),
    Column("star_rating", Integer),
    Column("main_image", String(500)),
    Column("additional_images", Text, nullable=False, server_default="[]"),
    Column("rating", Numeric(3, 1, asdecimal=False), server_default="0"),
    Column("total_ratings", Integer, server_default="0"),
    _money("price", nullable=False),
    _money("taxes"),
    Column("amenities", Text),
    Column("status", String(32), nullable=False, server_default="Available"),
    Column("free_stay_for_kids", Boolean, nullable=False, server_default="0"),
    Column("limited_time_sale", Boolean, nullable=False, server_default="0"),
    _money("sale_price"),
    _money("original_price"),
    Column("login_to_book", Boolean, nullable=False, server_default="0"),
    Column("pay_later", Boolean, nullable=False, server_default="0"),
    # descriptions
    Column("overview_description", Text),
    Column("hotel_facilities_description", Text),
    Column("airport_transfers_description", Text),
    Column("meal_plan_description", Text),
    Column("taxes_description", Text),
    _created_at(),
    _updated_at(),
)

offline_hotel_price_ranges = Table(
    "offline_hotel_price_ranges",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("hotel_id", Integer, ForeignKey("offline_hotels.id"), nullable=False, index=True),
    _money("min_price"),
    _money("max_price"),
    Column("range_label", String(100)),
    Column("property_count", Integer, nullable=False, server_default="0"),
    Column("is_selected", Boolean, nullable=False, server_default="0"),
    _created_at(),
)

offline_hotel_star_categories = Table(
    "offline_hotel_star_categories",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("hotel_id", Integer, ForeignKey("offline_hotels.id"), nullable=False, index=True),
    Column("stars", Integer, nullable=False),
    Column("property_count", Integer, nullable=False, server_default="0"),
    Column("is_selected", Boolean, nullable=False, server_default="0"),
    _created_at(),
)

offline_hotel_budget = Table(
    "offline_hotel_budget",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("hotel_id", Integer, ForeignKey("offline_hotels.id"), nullable=False, index=True),
    _money("min_budget"),
    _money("max_budget"),
    _created_at(),
)

offline_hotel_search_localities = Table(
    "offline_hotel_search_localities",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("hotel_id", Integer, ForeignKey("offline_hotels.id"), nullable=False, index=True),
    Column("locality_name", String(150), nullable=False),
    _created_at(),
)


# -------------------------------
# bungalow / weekend gateway bookings
# -------------------------------
bungalow_bookings = Table(
    "bungalow_bookings",
    metadata,
    Column("booking_id", Integer, primary_key=True, autoincrement=True),
    Column("bungalow_code", String(32), nullable=False, index=True),
    Column("city", String(100), nullable=False),
    Column("contact_person", String(150), nullable=False),
    Column("cell_no", String(32), nullable=False),
    Column("email_id", String(150)),
    Column("address", Text),
    Column("pin_code", String(16)),
    Column("state", String(100)),
    Column("country", String(100), nullable=False, server_default="India"),
    Column("no_of_people", Integer, nullable=False, server_default="1"),
    _created_at(),
)

bungalow_booking_guests = Table(
    "bungalow_booking_guests",
    metadata,
    Column("guest_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "booking_id",
        Integer,
        ForeignKey("bungalow_bookings.booking_id"),
        nullable=False,
        index=True,
    ),
    Column("name", String(150), nullable=False),
    Column("age", Integer),
    Column("cell_no", String(32)),
    Column("email_id", String(150)),
)

weekend_bookings = Table(
    "weekend_bookings",
    metadata,
    Column("booking_id", Integer, primary_key=True, autoincrement=True),
    Column("property_name", String(200), nullable=False),
    Column("city", String(100), nullable=False),
    Column("person_name", String(150), nullable=False),
    Column("cell_no", String(32), nullable=False),
    Column("email_id", String(150)),
    Column("address", Text),
    Column("city_location", String(150)),
    Column("pin_code", String(16)),
    Column("state", String(100)),
    Column("country", String(100), nullable=False, server_default="India"),
    Column("no_of_adults", Integer, nullable=False, server_default="1"),
    Column("no_of_rooms", Integer, nullable=False, server_default="1"),
    Column("no_of_child", Integer, nullable=False, server_default="0"),
    _created_at(),
)

weekend_booking_children = Table(
    "weekend_booking_children",
    metadata,
    Column("child_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "booking_id",
        Integer,
        ForeignKey("weekend_bookings.booking_id"),
        nullable=False,
        index=True,
    ),
    Column("name", String(150), nullable=False),
    Column("age", Integer),
    Column("cell_no", String(32)),
    Column("email_id", String(150)),
)


# -------------------------------
# checkout / payments
# -------------------------------
checkouts = Table(
    "checkouts",
    metadata,
    Column("checkout_id", Integer, primary_key=True, autoincrement=True),
    Column("tour_id", Integer, nullable=False, index=True),
    Column("tour_code", String(32), nullable=False, server_default=""),
    Column("tour_title", String(255), nullable=False, server_default=""),
    Column("tour_duration", String(64), nullable=False, server_default=""),
    Column("tour_locations", Text, nullable=False, server_default=""),
    Column("tour_image_url", String(500), nullable=False, server_default=""),
    _money("total_tour_cost", nullable=False),
    Column("advance_percentage", Numeric(5, 2, asdecimal=False), nullable=False, server_default="20"),
    _money("advance_amount", nullable=False),
    _money("emi_price", nullable=False, server_default="0"),
    Column("first_name", String(100), nullable=False, server_default=""),
    Column("last_name", String(100), nullable=False, server_default=""),
    Column("email", String(150), nullable=False, server_default=""),
    Column("phone", String(32), nullable=False, server_default=""),
    Column("address", Text, nullable=False, server_default=""),
    Column("city", String(100), nullable=False, server_default=""),
    Column("state", String(100), nullable=False, server_default=""),
    Column("pincode", String(16), nullable=False, server_default=""),
    Column("country", String(100), nullable=False, server_default="India"),
    Column("payment_method", String(32), nullable=False, server_default="card"),
    Column("source_page", String(64), nullable=False, server_default="tour-packages"),
    Column("terms_accepted", Boolean, nullable=False, server_default="0"),
    Column("notes", Text, nullable=False, server_default=""),
    Column("payment_status", String(16), nullable=False, server_default="pending"),
    Column("phonepe_order_id", String(64)),
    _created_at(),
    _updated_at(),
)

payments = Table(
    "payments",
    metadata,
    Column("payment_id", Integer, primary_key=True, autoincrement=True),
    Column("checkout_id", Integer, ForeignKey("checkouts.checkout_id"), index=True),
    # merchant order id sent to the gateway; NULL until an order is created
    Column("order_id", String(64), unique=True),
    _money("amount", nullable=False),
    Column("currency", String(8), nullable=False, server_default="INR"),
    Column("payment_gateway", String(32), nullable=False, server_default="PhonePe"),
    Column("environment", String(8)),
    Column("status", String(16), nullable=False, server_default="Pending"),
    _created_at(),
    _updated_at(),
)


# -------------------------------
# online flight bookings / transactions
# -------------------------------
flight_bookings = Table(
    "flight_bookings",
    metadata,
    Column("booking_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, index=True),
    Column("pnr", String(16)),
    _money("total_amount", nullable=False, server_default="0"),
    Column("payment_status", String(16), nullable=False, server_default="Pending"),
    Column("booking_status", String(16), nullable=False, server_default="Pending"),
    _created_at(),
    _updated_at(),
)

flight_booking_transactions = Table(
    "flight_booking_transactions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("booking_id", Integer, ForeignKey("flight_bookings.booking_id"), index=True),
    Column("user_id", Integer),
    Column("order_id", String(64), nullable=False, unique=True),
    Column("payment_id", String(64)),
    _money("payment_amount", nullable=False, server_default="0"),
    Column("payment_method", String(32), nullable=False, server_default="PhonePe"),
    Column("payment_status", String(16), nullable=False, server_default="Pending"),
    Column("email", String(150), nullable=False, server_default=""),
    _created_at(),
    _updated_at(),
)


# -------------------------------
# stay listings (bungalows / weekend gateways) + images
# -------------------------------
def _stay_listing(name: str, key: str, code: str) -> Table:
    return Table(
        name,
        metadata,
        Column(key, Integer, primary_key=True, autoincrement=True),
        Column(code, String(16), nullable=False, unique=True),
        Column("name", String(200), nullable=False),
        _money("price", nullable=False),
        _money("per_pax_twin"),
        _money("per_pax_triple"),
        _money("child_with_bed"),
        _money("child_without_bed"),
        _money("infant"),
        _money("per_pax_single"),
        Column("overview", Text, nullable=False, server_default=""),
        Column("inclusive", Text, nullable=False, server_default=""),
        Column("exclusive", Text, nullable=False, server_default=""),
        Column("places_nearby", Text, nullable=False, server_default=""),
        Column("booking_policy", Text, nullable=False, server_default=""),
        # 1 = listed, 0 = soft-deleted
        Column("status", Integer, nullable=False, server_default="1"),
        _created_at(),
        _updated_at(),
    )


def _stay_listing_images(name: str, parent: str, key: str) -> Table:
    return Table(
        name,
        metadata,
        Column("image_id", Integer, primary_key=True, autoincrement=True),
        Column(key, Integer, ForeignKey(f"{parent}.{key}"), nullable=False, index=True),
        Column("image_url", String(500), nullable=False),
        Column("is_main", Boolean, nullable=False, server_default="0"),
        Column("sort_order", Integer, nullable=False, server_default="0"),
    )


bungalows = _stay_listing("bungalows", "bungalow_id", "bungalow_code")
bungalow_images = _stay_listing_images("bungalow_images", "bungalows", "bungalow_id")

weekend_gateways = _stay_listing("weekend_gateways", "gateway_id", "gateway_code")
weekend_gateway_images = _stay_listing_images(
    "weekend_gateway_images", "weekend_gateways", "gateway_id"
)


# -------------------------------
# tour departures (tours catalogue is owned elsewhere, no FK)
# -------------------------------
tour_departures = Table(
    "tour_departures",
    metadata,
    Column("departure_id", Integer, primary_key=True, autoincrement=True),
    Column("tour_id", Integer, nullable=False, index=True),
    Column("tour_type", String(16), nullable=False, server_default="Group"),
    Column("description", Text),
    Column("departure_text", Text),
    Column("start_date", Date),
    Column("end_date", Date),
    Column("departure_date", Date),
    Column("return_date", Date),
    Column("status", String(16), nullable=False, server_default="Available"),
    _money("adult_price"),
    _money("child_price"),
    _money("infant_price"),
    Column("total_seats", Integer, nullable=False, server_default="0"),
    Column("booked_seats", Integer, nullable=False, server_default="0"),
    *[
        _money(f"{tier}_{cost}")
        for tier in ("three_star", "four_star", "five_star")
        for cost in ("twin", "triple", "child_with_bed", "child_without_bed", "infant", "single")
    ],
    _created_at(),
    CheckConstraint(
        "booked_seats >= 0 AND booked_seats <= total_seats",
        name="ck_tour_departures_seats",
    ),
)


# -------------------------------
# MICE
# -------------------------------
mice_main = Table(
    "mice_main",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("banner_image", String(500), nullable=False),
    _created_at(),
    _updated_at(),
)

mice_questions = Table(
    "mice_questions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("mice_main_id", Integer, ForeignKey("mice_main.id"), nullable=False, index=True),
    Column("question", Text, nullable=False),
    Column("answer", Text, nullable=False),
    Column("display_order", Integer, nullable=False, server_default="0"),
)

mice_packages = Table(
    "mice_packages",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("days", String(64), nullable=False),
    _money("price", nullable=False),
    _created_at(),
    _updated_at(),
)

mice_package_images = Table(
    "mice_package_images",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("package_id", Integer, ForeignKey("mice_packages.id"), nullable=False, index=True),
    Column("image_path", String(500), nullable=False),
    _created_at(),
)


# -------------------------------
# exhibitions
# -------------------------------
about_exhibition = Table(
    "about_exhibition",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("banner_image", String(500), nullable=False),
    _created_at(),
    _updated_at(),
)

about_exhibition_qa = Table(
    "about_exhibition_qa",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "about_exhibition_id",
        Integer,
        ForeignKey("about_exhibition.id"),
        nullable=False,
        index=True,
    ),
    Column("question", Text, nullable=False),
    Column("answer", Text, nullable=False),
    Column("display_order", Integer, nullable=False, server_default="0"),
)
