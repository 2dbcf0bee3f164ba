from dataclasses import dataclass, field
from datetime import date
from enum import Enum


@dataclass(frozen=True, slots=True)
class RouteConfig:
    """Static definition of a recurring bus route.

    name is the human-readable label and must end with the weekday the bus runs on,
    e.g. "São Paulo > Goiania (Quinta-feira)". origin / destination are the city slugs
    used by the booking site in its search URLs.
    """
    name: str
    origin: str
    destination: str


@dataclass(frozen=True, slots=True)
class ScheduledRoute:
    """Route plus the upcoming dates to search. dates is empty when no weekday could be parsed."""
    route: RouteConfig
    dates: tuple[date, ...] = ()

    @property
    def name(self) -> str:
        return self.route.name

    @property
    def origin(self) -> str:
        return self.route.origin

    @property
    def destination(self) -> str:
        return self.route.destination


# ---------------- Raw API shapes (read through dacite) -----------------
@dataclass(slots=True)
class RawPricing:
    total: float


@dataclass(slots=True)
class RawPassengerType:
    type: str
    total: float | None = None
    availability: int | float | None = None


@dataclass(slots=True)
class RawTrip:
    service: str
    pricing: RawPricing | None = None
    departure: str | None = None
    arrival: str | None = None
    passenger_types: list[RawPassengerType] = field(default_factory=list)


# ---------------- Normalized output -----------------
@dataclass(frozen=True, slots=True)
class FareTierInfo:
    price: float | None
    availability: int | float | None
    label: str


@dataclass(frozen=True, slots=True)
class CanonicalTrip:
    """Single conventional-service departure with the fare tiers we care about.

    price is the general (full fare) amount. The *_info fields are None when the trip
    has no seats of that discount tier.
    """
    date: str | None
    service_type: str
    departure_timestamp: str | None
    arrival_timestamp: str | None
    price: float
    free_pass_info: FareTierInfo | None = None
    disadvantaged_youth_info: FareTierInfo | None = None
    disadvantaged_youth_half_info: FareTierInfo | None = None


class DateStatus(Enum):
    OK = "ok"
    FETCH_FAILED = "fetch_failed"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class DateResult:
    date: date
    status: DateStatus
    trips: tuple[CanonicalTrip, ...] = ()
    error: str | None = None
