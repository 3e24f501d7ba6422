"""Слияние скалярных полей основного и вторичного клиента."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from database.models import Client, QuoteType


class QuoteConflictPolicy(str, Enum):
    """Что делать, если у обоих клиентов есть статус котировки одного типа."""

    PRIMARY_WINS = "primary_wins"
    REJECT = "reject"


QUOTE_STATUS_FIELDS = {
    QuoteType.PEO: "peo_quote_status",
    QuoteType.ACA: "aca_quote_status",
}


@dataclass(frozen=True)
class MergedFields:
    contact_email: str | None
    notes: str | None
    peo_quote_status: str | None
    aca_quote_status: str | None
    active_census_id: int | None

    def as_updates(self) -> dict[str, Any]:
        return asdict(self)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _prefer(primary_value: Any, secondary_value: Any) -> Any:
    return secondary_value if _is_blank(primary_value) else primary_value


def resolve(primary: Client, secondary: Client) -> MergedFields:
    """Значения полей основного клиента после объединения.

    Имя и состояние архива не участвуют: они всегда остаются от основного.
    """
    return MergedFields(
        contact_email=_prefer(primary.contact_email, secondary.contact_email),
        notes=_prefer(primary.notes, secondary.notes),
        peo_quote_status=_prefer(primary.peo_quote_status, secondary.peo_quote_status),
        aca_quote_status=_prefer(primary.aca_quote_status, secondary.aca_quote_status),
        active_census_id=_prefer(primary.active_census_id, secondary.active_census_id),
    )


def find_quote_conflicts(primary: Client, secondary: Client) -> list[QuoteType]:
    """Типы котировок, статус которых задан у обоих клиентов."""
    return [
        quote_type
        for quote_type, field in QUOTE_STATUS_FIELDS.items()
        if not _is_blank(getattr(primary, field))
        and not _is_blank(getattr(secondary, field))
    ]
