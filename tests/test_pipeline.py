"""Tests for route scheduling, route selection and the per-date search loop."""

from __future__ import annotations

import logging
from datetime import date

import pytest
from playwright.sync_api import Error as PlaywrightError

from nortebus import pipeline
from nortebus.config import Settings
from nortebus.models import DateStatus, RouteConfig, ScheduledRoute
from nortebus.pipeline import InvalidSelectionError, prompt_route_selection, run, search_route
from nortebus.routes import ROUTES, build_schedule, schedule_route
from nortebus.scraping import base_driver
from nortebus.scraping.trip_fetcher import TripFetcher

from playwright_fakes import FakeBrowser, FakeClock, FakePage, FakePlaywright, FakeStealth, search_response

TUESDAY = date(2026, 10, 20)
ROUTE = RouteConfig("São Paulo > Goiania (Quinta-feira)", "sao-paulo", "goiania")
DATES = (date(2026, 10, 22), date(2026, 10, 29), date(2026, 11, 5))


def _payload(departs: str, *services: str) -> dict:
    return {
        "departs": departs,
        "trips": [
            {
                "service": service,
                "pricing": {"total": 80},
                "departure": f"{departs}T08:00:00",
                "arrival": f"{departs}T22:00:00",
                "passenger_types": [{"type": "general", "total": "75.00", "availability": 10}],
            }
            for service in services
        ],
    }


class FakeFetcher:
    def __init__(self, outcomes: dict | None = None) -> None:
        self.outcomes = outcomes or {}
        self.calls: list[tuple[date, str, str]] = []

    def fetch_trips(self, trip_date, origin, destination):
        self.calls.append((trip_date, origin, destination))
        outcome = self.outcomes.get(trip_date)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_build_schedule_for_configured_routes() -> None:
    schedule = build_schedule(ROUTES, count=4, today=TUESDAY)

    assert [s.route for s in schedule] == list(ROUTES)
    assert schedule[0].dates[0] == date(2026, 10, 22)
    assert schedule[1].dates[0] == date(2026, 10, 24)
    assert all(len(s.dates) == 4 for s in schedule)


def test_unparseable_route_gets_empty_schedule(caplog: pytest.LogCaptureFixture) -> None:
    route = RouteConfig("Goiania > Belém", "goiania", "belem")

    with caplog.at_level(logging.WARNING):
        scheduled = schedule_route(route, 4, today=TUESDAY)

    assert scheduled.dates == ()
    assert "Goiania > Belém" in caplog.text


def test_search_route_collects_results_in_order() -> None:
    fetcher = FakeFetcher({
        DATES[0]: _payload("2026-10-22", "CONVENCIONAL", "EXECUTIVO"),
        DATES[2]: _payload("2026-11-05", "CONVENCIONAL"),
    })

    results = search_route(ScheduledRoute(ROUTE, DATES), fetcher)

    assert [r.date for r in results] == list(DATES)
    assert [r.status for r in results] == [DateStatus.OK, DateStatus.FETCH_FAILED, DateStatus.OK]
    assert len(results[0].trips) == 1
    assert results[0].trips[0].price == 75.0
    assert fetcher.calls == [(d, "sao-paulo", "goiania") for d in DATES]


def test_failing_date_does_not_abort_batch(caplog: pytest.LogCaptureFixture) -> None:
    fetcher = FakeFetcher({
        DATES[0]: RuntimeError("browser crashed"),
        DATES[1]: _payload("2026-10-29", "CONVENCIONAL"),
    })

    with caplog.at_level(logging.ERROR):
        results = search_route(ScheduledRoute(ROUTE, DATES), fetcher)

    assert [r.status for r in results] == [DateStatus.ERROR, DateStatus.OK, DateStatus.FETCH_FAILED]
    assert results[0].error == "browser crashed"
    assert "2026-10-22" in caplog.text
    assert ROUTE.name in caplog.text
    assert len(fetcher.calls) == 3


def test_empty_schedule_performs_no_fetches(caplog: pytest.LogCaptureFixture) -> None:
    fetcher = FakeFetcher()

    with caplog.at_level(logging.INFO):
        assert search_route(ScheduledRoute(ROUTE), fetcher) == []

    assert fetcher.calls == []
    assert "No dates computed" in caplog.text


def test_dns_failure_is_isolated_to_its_date(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(base_driver, "Stealth", FakeStealth)
    monkeypatch.setattr(FakeStealth, "applied", [])
    clock = FakeClock()
    dns_page = FakePage(clock, goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED"))
    ok_page = FakePage(clock, on_goto=[search_response(_payload("2026-10-29", "CONVENCIONAL"))])
    dns_browser, ok_browser = FakeBrowser(dns_page), FakeBrowser(ok_page)
    fetcher = TripFetcher(Settings(capture_timeout_ms=1000), playwright_factory=FakePlaywright(dns_browser, ok_browser),
                          clock=clock)

    results = search_route(ScheduledRoute(ROUTE, DATES[:2]), fetcher)

    assert [r.status for r in results] == [DateStatus.FETCH_FAILED, DateStatus.OK]
    assert dns_browser.closed and ok_browser.closed


def test_prompt_lists_routes_and_exit_option(capsys: pytest.CaptureFixture) -> None:
    routes = build_schedule(ROUTES, today=TUESDAY)

    chosen = prompt_route_selection(routes, input_fn=lambda _: "2")

    assert chosen is routes[1]
    out = capsys.readouterr().out
    assert "1. São Paulo > Goiania (Quinta-feira)" in out
    assert "0. Sair" in out


@pytest.mark.parametrize("answer", ["abc", "", "5", "-1"])
def test_invalid_selection_is_rejected(answer: str) -> None:
    routes = build_schedule(ROUTES, today=TUESDAY)
    with pytest.raises(InvalidSelectionError):
        prompt_route_selection(routes, input_fn=lambda _: answer)


def test_choosing_zero_exits_without_fetching(caplog: pytest.LogCaptureFixture) -> None:
    fetcher = FakeFetcher()

    with caplog.at_level(logging.INFO):
        results = run(build_schedule(ROUTES, today=TUESDAY), fetcher, input_fn=lambda _: "0")

    assert results == []
    assert fetcher.calls == []
    assert "No route selected" in caplog.text


def test_run_with_preselected_route() -> None:
    fetcher = FakeFetcher()
    routes = build_schedule(ROUTES, count=2, today=TUESDAY)

    results = run(routes, fetcher, selection="3")

    assert [call[1:] for call in fetcher.calls] == [("sao-luis", "goiania")] * 2
    assert all(r.status is DateStatus.FETCH_FAILED for r in results)


@pytest.fixture
def quiet_cli(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(pipeline, "setup_logging", lambda level: None)


@pytest.mark.usefixtures("quiet_cli")
def test_cli_exit_codes(monkeypatch: pytest.MonkeyPatch) -> None:
    assert pipeline.main_cli(["--route", "0"]) == 0
    assert pipeline.main_cli(["--route", "abc"]) == 2
    assert pipeline.main_cli(["--route", "99"]) == 2

    def broken_schedule(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(pipeline, "build_schedule", broken_schedule)
    assert pipeline.main_cli(["--route", "1"]) == 1
