"""Аренды на время объединения клиентов.

Запись в ``merge_lease`` фиксируется отдельной короткой транзакцией до
начала объединения, поэтому её видят все параллельные запросы: второе
объединение с тем же клиентом и архивирование/восстановление такого клиента
отклоняются, пока аренда жива. Аренда, оставшаяся после падения процесса,
истекает через ``MERGE_LEASE_SECONDS``.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import timedelta
from typing import Iterator, Sequence

from peewee import IntegrityError, PeeweeException

from config import get_settings
from database.db import write_atomic
from database.models import MergeLease
from utils.time_utils import utcnow

from .errors import ClientBusyError

logger = logging.getLogger(__name__)


def active_leases_query():
    """Выборка неистёкших аренд."""
    return MergeLease.select().where(MergeLease.expires_at > utcnow())


def list_active_leases() -> list[MergeLease]:
    return list(active_leases_query().order_by(MergeLease.acquired_at))


def is_client_locked(client_id: int) -> bool:
    return active_leases_query().where(MergeLease.client_id == client_id).exists()


def acquire_merge_leases(
    primary_id: int,
    secondary_id: int,
    *,
    ttl_seconds: int | None = None,
) -> str:
    """Захватить аренды на обоих участников объединения.

    Returns:
        str: Токен, по которому аренды освобождаются.

    Raises:
        ClientBusyError: Хотя бы один клиент уже арендован.
    """
    if ttl_seconds is None:
        ttl_seconds = get_settings().merge_lease_seconds
    token = uuid.uuid4().hex
    now = utcnow()
    expires_at = now + timedelta(seconds=ttl_seconds)
    pairs: Sequence[tuple[int, int]] = (
        (primary_id, secondary_id),
        (secondary_id, primary_id),
    )

    try:
        with write_atomic():
            purged = (
                MergeLease.delete()
                .where(
                    MergeLease.client_id.in_([primary_id, secondary_id]),
                    MergeLease.expires_at <= now,
                )
                .execute()
            )
            if purged:
                logger.warning("⌛ Удалено просроченных аренд: %s", purged)
            MergeLease.insert_many(
                [
                    {
                        "client_id": client_id,
                        "partner_id": partner_id,
                        "token": token,
                        "acquired_at": now,
                        "expires_at": expires_at,
                    }
                    for client_id, partner_id in pairs
                ]
            ).execute()
    except IntegrityError:
        busy = [
            lease.client_id
            for lease in MergeLease.select().where(
                MergeLease.client_id.in_([primary_id, secondary_id])
            )
        ]
        logger.warning("🔒 Клиенты %s уже участвуют в объединении", busy)
        raise ClientBusyError(busy or [primary_id, secondary_id]) from None

    logger.debug("🔒 Аренда %s на клиентов %s и %s", token, primary_id, secondary_id)
    return token


def release_merge_leases(token: str) -> int:
    with write_atomic():
        released = MergeLease.delete().where(MergeLease.token == token).execute()
    logger.debug("🔓 Аренда %s снята (%s записей)", token, released)
    return released


@contextmanager
def merge_leases(
    primary_id: int, secondary_id: int, *, ttl_seconds: int | None = None
) -> Iterator[str]:
    token = acquire_merge_leases(primary_id, secondary_id, ttl_seconds=ttl_seconds)
    try:
        yield token
    except BaseException:
        # ошибка снятия аренды не должна подменять исходную ошибку
        try:
            release_merge_leases(token)
        except PeeweeException:
            logger.exception(
                "❌ Не удалось снять аренду %s, она истечёт сама", token
            )
        raise
    release_merge_leases(token)
