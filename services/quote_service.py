"""Работа с котировками PEO/ACA и историей их статусов."""

from __future__ import annotations

import logging

from database.db import write_atomic
from database.models import (
    Client,
    Quote,
    QuoteStatus,
    QuoteStatusChange,
    QuoteType,
)
from services.clients.conflict_resolver import QUOTE_STATUS_FIELDS
from services.clients.errors import ClientNotFoundError, InvalidArgumentError
from utils.time_utils import utcnow

logger = logging.getLogger(__name__)


def get_quotes_by_client(client_id: int) -> list[Quote]:
    return list(Quote.select().where(Quote.client == client_id).order_by(Quote.id))


def get_quote_history(quote_id: int) -> list[QuoteStatusChange]:
    return list(
        QuoteStatusChange.select()
        .where(QuoteStatusChange.quote == quote_id)
        .order_by(QuoteStatusChange.changed_at.desc(), QuoteStatusChange.id.desc())
    )


def update_quote_status(
    client_id: int,
    quote_type: QuoteType | str,
    status: QuoteStatus | str,
    *,
    is_blocked: bool = False,
    blocked_reason: str | None = None,
    notes: str | None = None,
    changed_by: str | None = None,
) -> Quote:
    """Создать или обновить котировку клиента указанного типа.

    При смене статуса пишется запись в историю, а сам статус дублируется в
    поле клиента ``peo_quote_status``/``aca_quote_status``.
    """
    try:
        quote_type = QuoteType(quote_type)
        status = QuoteStatus(status)
    except ValueError as exc:
        raise InvalidArgumentError(str(exc)) from None

    now = utcnow()
    with write_atomic():
        client = Client.get_or_none(Client.id == client_id)
        if client is None:
            raise ClientNotFoundError([client_id])

        # после объединения у клиента может оказаться две котировки одного типа
        quote = (
            Quote.select()
            .where(Quote.client == client_id, Quote.type == quote_type.value)
            .order_by(Quote.id)
            .first()
        )
        if quote is None:
            quote = Quote.create(
                client=client,
                type=quote_type.value,
                status=status.value,
                started_at=now if status is not QuoteStatus.NOT_STARTED else None,
            )
            logger.info(
                "📝 Котировка %s id=%s создана для клиента id=%s",
                quote_type.value,
                quote.id,
                client_id,
            )
        elif quote.status != status.value:
            QuoteStatusChange.create(
                quote=quote,
                client=client,
                previous_status=quote.status,
                new_status=status.value,
                changed_at=now,
                changed_by=changed_by,
                notes=notes,
            )
            logger.info(
                "🔁 Котировка id=%s: %s → %s", quote.id, quote.status, status.value
            )
            quote.status = status.value
            if quote.started_at is None and status is not QuoteStatus.NOT_STARTED:
                quote.started_at = now

        quote.is_blocked = is_blocked
        quote.blocked_reason = blocked_reason if is_blocked else None
        quote.notes = notes
        quote.completed_at = now if status.is_terminal else None
        quote.save()

        setattr(client, QUOTE_STATUS_FIELDS[quote_type], status.value)
        client.last_modified = now
        client.save()
    return quote
