"""Search upcoming departures for one of the configured bus routes.

Usage patterns:

1. Interactive, pick the route from the menu:
   nortebus

2. Non-interactive, search the second configured route for 6 weeks with a visible browser:
   nortebus --route 2 --count 6 --headed
"""
import argparse
import dataclasses
import logging
from collections.abc import Callable, Sequence
from datetime import date

from tqdm import tqdm

from nortebus.config import settings
from nortebus.logging_config import setup_logging
from nortebus.models import DateResult, DateStatus, ScheduledRoute
from nortebus.processing.trips import normalize_trips
from nortebus.report import format_trip_details
from nortebus.routes import ROUTES, build_schedule
from nortebus.scraping.trip_fetcher import TripFetcher


class InvalidSelectionError(Exception):
    """Route menu answer is not a number or not one of the listed options."""


def _resolve_choice(answer: str, routes: Sequence[ScheduledRoute]) -> ScheduledRoute | None:
    try:
        choice = int(answer.strip())
    except ValueError:
        raise InvalidSelectionError("Opção inválida. Por favor, digite um número.") from None
    if choice == 0:
        return None
    if not 0 < choice <= len(routes):
        raise InvalidSelectionError(f"Opção inválida. Escolha um número entre 0 e {len(routes)}.")
    return routes[choice - 1]


def prompt_route_selection(
        routes: Sequence[ScheduledRoute],
        input_fn: Callable[[str], str] = input,
) -> ScheduledRoute | None:
    """Show the route menu and return the chosen route, or None when the user picks 0 (exit)."""
    print("\nSelecione a viagem desejada:")
    for index, route in enumerate(routes, start=1):
        print(f"{index}. {route.name}")
    print("0. Sair")
    return _resolve_choice(input_fn("Digite o número da opção: "), routes)


def _search_date(route: ScheduledRoute, trip_date: date, fetcher: TripFetcher) -> DateResult:
    try:
        payload = fetcher.fetch_trips(trip_date, route.origin, route.destination)
        if payload is None:
            logging.info("Could not process route %s on %s.", route.name, trip_date)
            return DateResult(trip_date, DateStatus.FETCH_FAILED)
        trips = normalize_trips(payload, search_date=trip_date.isoformat())
        tqdm.write(format_trip_details(trips, trip_date, route.name))
        return DateResult(trip_date, DateStatus.OK, tuple(trips))
    except Exception as e:  # noqa: BLE001
        logging.exception("Critical error searching route %s on %s", route.name, trip_date)
        return DateResult(trip_date, DateStatus.ERROR, error=str(e))


def search_route(route: ScheduledRoute, fetcher: TripFetcher) -> list[DateResult]:
    """Search every date of `route` in order. A failing date never stops the remaining ones."""
    if not route.dates:
        logging.info("No dates computed for the selected route %s. Check the route name configuration.", route.name)
        return []

    logging.info("Dates to be searched: %s", ", ".join(d.isoformat() for d in route.dates))
    return [
        _search_date(route, trip_date, fetcher)
        for trip_date in tqdm(route.dates, desc=route.name, unit="dia")
    ]


def run(
        routes: Sequence[ScheduledRoute],
        fetcher: TripFetcher,
        selection: str | None = None,
        input_fn: Callable[[str], str] = input,
) -> list[DateResult]:
    route = _resolve_choice(selection, routes) if selection is not None else prompt_route_selection(routes, input_fn)
    if route is None:
        logging.info("No route selected. Exiting.")
        return []

    logging.info("Starting search for: %s", route.name)
    results = search_route(route, fetcher)
    failed = sum(1 for r in results if r.status is not DateStatus.OK)
    if failed:
        logging.warning("%d of %d dates could not be searched for %s", failed, len(results), route.name)
    return results


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Upcoming conventional bus departures for the configured routes")
    p.add_argument("--route", help="Menu number of the route to search (skips the interactive prompt, 0 exits)")
    p.add_argument("--count", type=int, default=settings.dates_per_route, help="Number of weekly dates to search")
    p.add_argument("--headed", action="store_true", help="Show the browser window")
    p.add_argument("--log-level", default=settings.log_level)
    return p


def main_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    config = dataclasses.replace(settings, dates_per_route=args.count, headless=settings.headless and not args.headed)
    exit_code = 0
    try:
        routes = build_schedule(ROUTES, count=config.dates_per_route)
        run(routes, TripFetcher(config), selection=args.route)
    except InvalidSelectionError as e:
        logging.error("%s", e)
        exit_code = 2
    except Exception:  # noqa: BLE001
        logging.exception("Fatal error, search aborted")
        exit_code = 1
    finally:
        logging.info("Search finished.")
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main_cli())
