"""Human-readable (pt-BR) console summaries of normalized trips."""
from datetime import date, datetime

from .models import CanonicalTrip, FareTierInfo
from .processing.recurrence import format_date_br

SEPARATOR = "-" * 49


def _format_timestamp(value: str | None) -> str:
    if not value:
        return "Não disponível"
    try:
        moment = datetime.fromisoformat(value)
    except ValueError:
        return value
    return moment.strftime("%d/%m/%Y %H:%M")


def _format_money(value: float | None) -> str:
    return f"R${value:.2f}" if value is not None else "R$ -"


def _format_tier(tier: FareTierInfo) -> list[str]:
    availability = tier.availability if tier.availability is not None else "?"
    return [
        f"      {tier.label}: {availability} vagas",
        f"      Valor: {_format_money(tier.price)}",
    ]


def format_trip_details(trips: list[CanonicalTrip], searched_date: date, route_name: str) -> str:
    if not trips:
        return f"Não foram encontrados ônibus para {route_name} em {format_date_br(searched_date)}."

    lines = [f"\n--- Frota disponível para {route_name} no dia {format_date_br(searched_date)} ---"]
    for index, trip in enumerate(trips, start=1):
        lines += [
            f"\n  Ônibus {index}:",
            f"    Serviço: {trip.service_type}",
            f"    Embarque: {_format_timestamp(trip.departure_timestamp)}",
            f"    Chegada:  {_format_timestamp(trip.arrival_timestamp)}",
            f"    Valor (Geral): {_format_money(trip.price)}",
        ]
        for tier in (trip.free_pass_info, trip.disadvantaged_youth_info, trip.disadvantaged_youth_half_info):
            if tier is not None:
                lines += _format_tier(tier)
    lines.append(SEPARATOR)
    return "\n".join(lines)
