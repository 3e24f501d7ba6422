"""Иерархия ошибок операций над клиентами."""

from __future__ import annotations

from typing import Any, Iterable


class ClientError(Exception):
    """Базовая ошибка операций над клиентами."""

    def context(self) -> dict[str, Any]:
        """Доп. сведения для ответа API и логов."""
        return {}


class InvalidArgumentError(ClientError, ValueError):
    """Некорректные или самоссылающиеся аргументы."""


class ClientNotFoundError(ClientError, LookupError):
    """Ошибка отсутствия клиента по запрошенному идентификатору."""

    def __init__(self, client_ids: Iterable[int]):
        self.client_ids = list(client_ids)
        super().__init__(
            f"Не найдены клиенты с id: {', '.join(map(str, self.client_ids))}"
        )

    def context(self) -> dict[str, Any]:
        return {"client_ids": self.client_ids}


class InvalidStateError(ClientError, RuntimeError):
    """Нарушено предусловие операции (архив, повторное восстановление...)."""


class ClientBusyError(InvalidStateError):
    """Клиент участвует в объединении, которое ещё не завершено."""

    def __init__(self, client_ids: Iterable[int]):
        self.client_ids = list(client_ids)
        super().__init__(
            "Клиенты заняты другим объединением: "
            f"{', '.join(map(str, self.client_ids))}"
        )

    def context(self) -> dict[str, Any]:
        return {"client_ids": self.client_ids}


class MergeFailedError(ClientError, RuntimeError):
    """Сбой хранилища посреди объединения; изменения откатаны."""

    def __init__(self, message: str, *, step: str, collection: str | None = None):
        super().__init__(message)
        self.step = step
        self.collection = collection

    def context(self) -> dict[str, Any]:
        return {"step": self.step, "collection": self.collection}
