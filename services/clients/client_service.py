"""Сервисный модуль для управления клиентами и их архивом."""

import logging
from typing import Sequence
from peewee import ModelSelect

from database.db import write_atomic
from database.models import Client, MergeLease
from utils.time_utils import utcnow
from .dto import ClientCreateCommand, ClientDetailsDTO, ClientDTO
from .errors import (
    ClientBusyError,
    ClientNotFoundError,
    InvalidArgumentError,
    InvalidStateError,
)
from .leases import is_client_locked

logger = logging.getLogger(__name__)

CLIENT_ALLOWED_FIELDS = {"name", "contact_email", "notes"}


# ──────────────────────────── Получение ─────────────────────────────


def get_active_clients() -> ModelSelect:
    """Вернуть выборку всех неархивных клиентов."""
    return Client.active().order_by(Client.name)


def get_archived_clients() -> ModelSelect:
    """Клиенты в архиве, последние архивированные первыми."""
    return Client.archived().order_by(Client.archived_at.desc())


def get_clients(include_archived: bool = False) -> ModelSelect:
    if include_archived:
        return Client.select().order_by(Client.name)
    return get_active_clients()


def get_client_by_id(client_id: int) -> Client | None:
    """Получить клиента по его идентификатору, в том числе архивного."""
    return Client.get_or_none(Client.id == client_id)


def get_client_detail_dto(client_id: int) -> ClientDetailsDTO | None:
    client = get_client_by_id(client_id)
    if not client:
        return None
    return ClientDetailsDTO.from_model(client)


# ──────────────────────────── Добавление ─────────────────────────────


def add_client(**kwargs) -> Client:
    """Создать клиента; пустые значения необязательных полей отбрасываются."""
    clean_data = {
        key: kwargs[key]
        for key in CLIENT_ALLOWED_FIELDS
        if key in kwargs and kwargs[key] not in ("", None)
    }

    name = (clean_data.get("name") or "").strip()
    if not name:
        logger.warning("❌ Попытка создать клиента без имени")
        raise InvalidArgumentError("Поле 'name' обязательно для клиента")
    clean_data["name"] = name

    with write_atomic():
        client = Client.create(last_modified=utcnow(), **clean_data)
    logger.info("✅ Клиент id=%s: %s создан", client.id, client.name)
    return client


def create_client_from_command(command: ClientCreateCommand) -> ClientDetailsDTO:
    client = add_client(**command.to_payload())
    return ClientDetailsDTO.from_model(client)


# ──────────────────────────── Архив ─────────────────────────────


def _locked_ids(now):
    return MergeLease.select(MergeLease.client_id).where(MergeLease.expires_at > now)


def _explain_unchanged(client_id: int, *, expect_archived: bool) -> None:
    """Поднять ошибку, объясняющую, почему условный UPDATE не сработал."""
    client = get_client_by_id(client_id)
    if client is None:
        raise ClientNotFoundError([client_id])
    if is_client_locked(client_id):
        raise ClientBusyError([client_id])
    if expect_archived and not client.is_archived:
        raise InvalidStateError(f"Клиент id={client_id} не находится в архиве")
    if not expect_archived and client.is_archived:
        raise InvalidStateError(f"Клиент id={client_id} уже в архиве")
    raise InvalidStateError(f"Клиент id={client_id} изменён параллельным запросом")


def archive_client(client_id: int) -> None:
    """Переводит клиента в архив.

    Клиент, который сейчас участвует в объединении, не архивируется.

    Raises:
        ClientNotFoundError: Клиента нет.
        InvalidStateError: Клиент уже в архиве или занят объединением.
    """
    now = utcnow()
    with write_atomic():
        changed = (
            Client.update(is_archived=True, archived_at=now, last_modified=now)
            .where(
                Client.id == client_id,
                Client.is_archived == False,  # noqa: E712
                Client.id.not_in(_locked_ids(now)),
            )
            .execute()
        )
    if not changed:
        _explain_unchanged(client_id, expect_archived=False)
    logger.info("🗄️ Клиент id=%s перемещён в архив", client_id)


def restore_client(client_id: int) -> Client:
    """Возвращает клиента из архива."""
    now = utcnow()
    with write_atomic():
        changed = (
            Client.update(is_archived=False, archived_at=None, last_modified=now)
            .where(
                Client.id == client_id,
                Client.is_archived == True,  # noqa: E712
                Client.id.not_in(_locked_ids(now)),
            )
            .execute()
        )
    if not changed:
        _explain_unchanged(client_id, expect_archived=True)
    logger.info("✅ Клиент id=%s восстановлен из архива", client_id)
    return Client.get_by_id(client_id)


def archive_clients(client_ids: Sequence[int]) -> int:
    """Массово архивирует клиентов, пропуская отсутствующих и уже архивных."""
    count = 0
    for cid in dict.fromkeys(client_ids):
        try:
            archive_client(cid)
        except (ClientNotFoundError, InvalidStateError) as exc:
            logger.warning("⚠️ Клиент id=%s не архивирован: %s", cid, exc)
            continue
        count += 1
    logger.info("🗄️ Архивировано клиентов: %s", count)
    return count


def to_dto_list(clients) -> list[ClientDTO]:
    return [ClientDTO.from_model(c) for c in clients]
