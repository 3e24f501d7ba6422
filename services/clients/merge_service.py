"""Объединение двух дублирующихся клиентов.

Все дочерние записи вторичного клиента переводятся на основного, скалярные
поля сливаются по правилам :mod:`conflict_resolver`, после чего вторичный
клиент удаляется без возможности восстановления. Перенос, слияние полей и
удаление выполняются одной транзакцией; на время объединения оба клиента
удерживаются арендой из :mod:`leases`.
"""

from __future__ import annotations

import logging

from peewee import PeeweeException

from config import get_settings
from database.db import write_atomic
from database.models import Client
from utils.time_utils import utcnow

from .conflict_resolver import QuoteConflictPolicy, find_quote_conflicts, resolve
from .dto import ClientDetailsDTO, MergeResult
from .errors import (
    ClientNotFoundError,
    InvalidArgumentError,
    InvalidStateError,
    MergeFailedError,
)
from .leases import merge_leases
from .reparent import REPARENT_ORDER, reparent, reparent_bookmarks

logger = logging.getLogger(__name__)


def _load_operands(primary_id: int, secondary_id: int) -> tuple[Client, Client]:
    clients = Client.select().where(Client.id.in_([primary_id, secondary_id]))
    clients_by_id = {client.id: client for client in clients}
    missing_ids = [cid for cid in (primary_id, secondary_id) if cid not in clients_by_id]
    if missing_ids:
        raise ClientNotFoundError(missing_ids)

    archived = [
        cid for cid in (primary_id, secondary_id) if clients_by_id[cid].is_archived
    ]
    if archived:
        raise InvalidStateError(
            "Нельзя объединять архивных клиентов: "
            f"{', '.join(map(str, archived))}. Сначала восстановите их."
        )
    return clients_by_id[primary_id], clients_by_id[secondary_id]


def _check_quote_conflicts(
    primary: Client,
    secondary: Client,
    policy: QuoteConflictPolicy,
    *,
    warn: bool = True,
) -> None:
    conflicts = find_quote_conflicts(primary, secondary)
    if not conflicts:
        return
    kinds = ", ".join(quote_type.value for quote_type in conflicts)
    if policy is QuoteConflictPolicy.REJECT:
        raise InvalidStateError(
            f"У обоих клиентов есть котировка {kinds}; объединение отклонено"
        )
    if not warn:
        return
    logger.warning(
        "⚠️ У клиентов id=%s и id=%s есть котировка %s; остаётся статус основного",
        primary.id,
        secondary.id,
        kinds,
    )


def _run_step(step: str, func, *args, collection: str | None = None):
    try:
        return func(*args)
    except PeeweeException as exc:
        where = f"{step} ({collection})" if collection else step
        logger.error("❌ Сбой объединения на шаге %s: %s", where, exc)
        raise MergeFailedError(
            f"Сбой объединения на шаге {where}: {exc}",
            step=step,
            collection=collection,
        ) from exc


def _fold_fields(primary: Client, secondary: Client) -> dict:
    updates = resolve(primary, secondary).as_updates()
    changed = {
        key: value for key, value in updates.items() if getattr(primary, key) != value
    }
    if changed:
        logger.info(
            "🧩 Обновление полей клиента id=%s после объединения: %s",
            primary.id,
            changed,
        )
    for key, value in changed.items():
        setattr(primary, key, value)
    primary.last_modified = utcnow()
    # остальные колонки могли измениться после чтения основного клиента
    primary.save(only=[*(getattr(Client, key) for key in changed), Client.last_modified])
    return changed


def _delete_secondary(secondary_id: int) -> int:
    deleted = Client.delete().where(Client.id == secondary_id).execute()
    if not deleted:
        logger.info("ℹ️ Клиент id=%s уже удалён", secondary_id)
    return deleted


def _merge_in_transaction(
    primary_id: int,
    secondary_id: int,
    policy: QuoteConflictPolicy,
    reparented: dict[str, int],
) -> Client:
    with write_atomic():
        # Перечитываем внутри транзакции: до захвата аренды состояние могло смениться
        primary, secondary = _load_operands(primary_id, secondary_id)
        _check_quote_conflicts(primary, secondary, policy)

        for kind in REPARENT_ORDER:
            reparented[kind.value] = _run_step(
                "reparent",
                reparent,
                kind,
                secondary.id,
                primary.id,
                collection=kind.value,
            )
        reparented["bookmark"] = _run_step(
            "reparent",
            reparent_bookmarks,
            secondary.id,
            primary.id,
            collection="bookmark",
        )

        _run_step("fold_fields", _fold_fields, primary, secondary)
        _run_step("delete_secondary", _delete_secondary, secondary.id)
    return primary


def merge_clients(
    primary_id: int,
    secondary_id: int,
    *,
    policy: QuoteConflictPolicy | str | None = None,
    reparented: dict[str, int] | None = None,
) -> Client:
    """Объединить вторичного клиента с основным.

    Args:
        primary_id: Клиент, который остаётся.
        secondary_id: Клиент, который будет удалён.
        policy: Поведение при котировках одного типа у обоих клиентов;
            по умолчанию берётся из настроек.
        reparented: Если передан, заполняется количеством перенесённых
            записей по коллекциям.

    Raises:
        InvalidArgumentError: ``primary_id == secondary_id``.
        ClientNotFoundError: Одного из клиентов нет.
        InvalidStateError: Клиент в архиве, занят другим объединением или
            конфликт котировок при политике ``reject``.
        MergeFailedError: Сбой хранилища; изменения откатаны.
    """
    if primary_id == secondary_id:
        raise InvalidArgumentError("Нельзя объединить клиента с самим собой")

    try:
        policy = QuoteConflictPolicy(policy or get_settings().quote_conflict_policy)
    except ValueError:
        raise InvalidArgumentError(f"Неизвестная политика конфликтов: {policy!r}") from None
    if reparented is None:
        reparented = {}

    primary, secondary = _load_operands(primary_id, secondary_id)
    _check_quote_conflicts(primary, secondary, policy, warn=False)

    logger.info(
        "🔄 Начало объединения клиента id=%s с дубликатом id=%s",
        primary_id,
        secondary_id,
    )
    with merge_leases(primary_id, secondary_id):
        primary = _merge_in_transaction(primary_id, secondary_id, policy, reparented)

    logger.info(
        "✅ Завершено объединение клиента id=%s (удалён id=%s), перенесено: %s",
        primary_id,
        secondary_id,
        reparented,
    )
    return Client.get_by_id(primary.id)


def merge_clients_to_dto(
    primary_id: int,
    secondary_id: int,
    *,
    policy: QuoteConflictPolicy | str | None = None,
) -> MergeResult:
    """Объединить клиентов и вернуть результат в виде DTO."""

    reparented: dict[str, int] = {}
    client = merge_clients(
        primary_id, secondary_id, policy=policy, reparented=reparented
    )
    return MergeResult(
        client=ClientDetailsDTO.from_model(client),
        secondary_id=secondary_id,
        reparented=reparented,
    )
