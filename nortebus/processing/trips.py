"""Flatten the booking API search payload into CanonicalTrip records.

Only the conventional service class is reported. Each kept trip carries its general
fare plus the discount tiers that matter to us:

* free pass (seniors / disabled), kept only when it really is free (total == 0.0)
* low-income youth 100% and 50% discounts, kept whenever the tier is offered

The free pass zero-price rule has no counterpart for the youth tiers. The asymmetry
is deliberate until confirmed otherwise with the operator.
"""
import logging
from collections.abc import Iterable
from typing import Any

import dacite

from ..models import CanonicalTrip, FareTierInfo, RawPassengerType, RawTrip

CONVENTIONAL_SERVICE = "CONVENCIONAL"

GENERAL_TYPE = "general"
FREE_PASS_TYPE = "free_pass"
YOUTH_TYPE = "disadvantaged_youth"
YOUTH_HALF_TYPE = "disadvantaged_youth_half"
REPORTED_TYPES = frozenset({GENERAL_TYPE, FREE_PASS_TYPE, YOUTH_TYPE, YOUTH_HALF_TYPE})

FREE_PASS_LABEL = "Gratuidade (Idoso/PCD)"
YOUTH_LABEL = "Jovem Baixa Renda 100%"
YOUTH_HALF_LABEL = "Jovem Baixa Renda 50%"


def _to_float(value: Any) -> Any:
    # API sends passenger totals as numeric strings ("75.00") and pricing totals as numbers
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return float(value)
    return value


_DACITE_CONFIG = dacite.Config(type_hooks={float: _to_float})


def _find_tier(passenger_types: Iterable[RawPassengerType], tier_type: str) -> RawPassengerType | None:
    return next((pt for pt in passenger_types if pt.type == tier_type), None)


def _free_pass_info(passenger_types: list[RawPassengerType]) -> FareTierInfo | None:
    free_pass = next(
        (pt for pt in passenger_types if pt.type == FREE_PASS_TYPE and pt.total == 0.0), None
    )
    if free_pass is None:
        return None
    return FareTierInfo(price=0.0, availability=free_pass.availability, label=FREE_PASS_LABEL)


def _tier_info(passenger_types: list[RawPassengerType], tier_type: str, label: str) -> FareTierInfo | None:
    tier = _find_tier(passenger_types, tier_type)
    if tier is None:
        return None
    return FareTierInfo(price=tier.total, availability=tier.availability, label=label)


def _general_price(trip: RawTrip) -> float | None:
    general = _find_tier(trip.passenger_types, GENERAL_TYPE)
    if general is not None and general.total is not None:
        return general.total
    return trip.pricing.total if trip.pricing else None


def _reported_tiers(raw_types: Any) -> list[dict]:
    # other tiers (elderly, student, ...) are never read, their shape does not matter
    if not isinstance(raw_types, list):
        return []
    return [pt for pt in raw_types if isinstance(pt, dict) and pt.get("type") in REPORTED_TYPES]


def _read_trip(raw: dict) -> RawTrip | None:
    data = {**raw, "passenger_types": _reported_tiers(raw.get("passenger_types"))}
    try:
        return dacite.from_dict(data_class=RawTrip, data=data, config=_DACITE_CONFIG)
    except (dacite.DaciteError, ValueError, TypeError) as e:
        logging.warning("Skipping unreadable trip (service=%s): %s", raw.get("service"), e)
        return None


def to_canonical_trip(trip: RawTrip, trip_date: str | None) -> CanonicalTrip | None:
    price = _general_price(trip)
    if price is None:
        logging.warning("Skipping %s trip departing %s: no price available", trip.service, trip.departure)
        return None
    return CanonicalTrip(
        date=trip_date,
        service_type=trip.service,
        departure_timestamp=trip.departure,
        arrival_timestamp=trip.arrival,
        price=price,
        free_pass_info=_free_pass_info(trip.passenger_types),
        disadvantaged_youth_info=_tier_info(trip.passenger_types, YOUTH_TYPE, YOUTH_LABEL),
        disadvantaged_youth_half_info=_tier_info(trip.passenger_types, YOUTH_HALF_TYPE, YOUTH_HALF_LABEL),
    )


def normalize_trips(payload: Any, search_date: str | None = None) -> list[CanonicalTrip]:
    """Return conventional trips from `payload` in source order.

    A missing or malformed payload gives an empty list (logged as warning), never an error.
    """
    if not isinstance(payload, dict):
        logging.warning("normalize_trips: payload is missing or not an object.")
        return []
    raw_trips = payload.get("trips")
    if not isinstance(raw_trips, list):
        logging.warning(
            "normalize_trips: no trip data or malformed trips array for %s.",
            payload.get("departs") or search_date or "unknown date",
        )
        return []

    trip_date = payload.get("departs") or search_date
    conventional: list[CanonicalTrip] = []
    for raw in raw_trips:
        if not isinstance(raw, dict) or raw.get("service") != CONVENTIONAL_SERVICE:
            continue
        trip = _read_trip(raw)
        if trip is None:
            continue
        if (canonical := to_canonical_trip(trip, trip_date)) is not None:
            conventional.append(canonical)
    return conventional
