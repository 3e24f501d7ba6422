"""Перенос дочерних записей от одного клиента к другому."""

from __future__ import annotations

import logging
from enum import Enum

from peewee import Model

from database.models import (
    Bookmark,
    CensusUpload,
    Comment,
    File,
    InfoRequest,
    Quote,
    QuoteStatusChange,
)

from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)


class CollectionKind(str, Enum):
    FILE = "file"
    QUOTE = "quote"
    CENSUS_UPLOAD = "census_upload"
    COMMENT = "comment"
    INFO_REQUEST = "info_request"
    ACTIVITY = "activity"


COLLECTION_MODELS: dict[CollectionKind, type[Model]] = {
    CollectionKind.FILE: File,
    CollectionKind.QUOTE: Quote,
    CollectionKind.CENSUS_UPLOAD: CensusUpload,
    CollectionKind.COMMENT: Comment,
    CollectionKind.INFO_REQUEST: InfoRequest,
    CollectionKind.ACTIVITY: QuoteStatusChange,
}

# Порядок переноса при объединении
REPARENT_ORDER: tuple[CollectionKind, ...] = tuple(CollectionKind)


def _check_ids(from_client_id: int, to_client_id: int) -> None:
    if from_client_id == to_client_id:
        raise InvalidArgumentError(
            f"Нельзя переносить записи клиента id={from_client_id} на него же"
        )


def reparent(kind: CollectionKind | str, from_client_id: int, to_client_id: int) -> int:
    """Перевести все записи коллекции ``kind`` с одного клиента на другого.

    Повторный вызов ничего не меняет и возвращает 0.

    Returns:
        int: Количество изменённых записей.
    """
    _check_ids(from_client_id, to_client_id)
    try:
        kind = CollectionKind(kind)
    except ValueError:
        raise InvalidArgumentError(f"Неизвестная коллекция: {kind!r}") from None

    model = COLLECTION_MODELS[kind]
    changed = (
        model.update(client=to_client_id)
        .where(model.client == from_client_id)
        .execute()
    )
    if changed:
        logger.info(
            "📎 %s: перенесено %s записей id=%s → id=%s",
            kind.value,
            changed,
            from_client_id,
            to_client_id,
        )
    return changed


def reparent_bookmarks(from_client_id: int, to_client_id: int) -> int:
    """Перенести закладку; если она уже есть у получателя, лишняя удаляется."""
    _check_ids(from_client_id, to_client_id)
    if Bookmark.select().where(Bookmark.client == to_client_id).exists():
        dropped = Bookmark.delete().where(Bookmark.client == from_client_id).execute()
        if dropped:
            logger.info("🔖 Дублирующая закладка клиента id=%s удалена", from_client_id)
        return dropped
    return (
        Bookmark.update(client=to_client_id)
        .where(Bookmark.client == from_client_id)
        .execute()
    )


def count_references(client_id: int) -> dict[CollectionKind, int]:
    """Сколько записей каждой коллекции ссылается на клиента."""
    return {
        kind: COLLECTION_MODELS[kind].select().where(
            COLLECTION_MODELS[kind].client == client_id
        ).count()
        for kind in REPARENT_ORDER
    }


def reparent_all(from_client_id: int, to_client_id: int) -> dict[str, int]:
    """Перенести все коллекции в фиксированном порядке, затем закладку."""
    moved = {
        kind.value: reparent(kind, from_client_id, to_client_id)
        for kind in REPARENT_ORDER
    }
    moved["bookmark"] = reparent_bookmarks(from_client_id, to_client_id)
    return moved
