import logging
from collections.abc import Iterable
from datetime import date

from .models import RouteConfig, ScheduledRoute
from .processing.recurrence import next_dates, weekday_from_route_name

ROUTES: tuple[RouteConfig, ...] = (
    RouteConfig("São Paulo > Goiania (Quinta-feira)", "sao-paulo", "goiania"),
    RouteConfig("Goiania > Sao Luis (Sábado)", "goiania", "sao-luis"),
    RouteConfig("São Luis > Goiania (Sábado)", "sao-luis", "goiania"),
    RouteConfig("Goiania > São Paulo (Quinta-feira)", "goiania", "sao-paulo"),
)


def schedule_route(route: RouteConfig, count: int, today: date | None = None) -> ScheduledRoute:
    weekday = weekday_from_route_name(route.name)
    if weekday is None:
        logging.warning('Dates will not be generated for route "%s": day of week could not be determined.', route.name)
        return ScheduledRoute(route)
    return ScheduledRoute(route, tuple(next_dates(weekday, count, today=today)))


def build_schedule(routes: Iterable[RouteConfig] = ROUTES, count: int = 4,
                   today: date | None = None) -> list[ScheduledRoute]:
    return [schedule_route(route, count, today=today) for route in routes]
