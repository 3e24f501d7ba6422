"""Прикладной сервис для работы с клиентами на уровне API."""

from __future__ import annotations

from typing import Sequence

from services.clients.client_service import (
    archive_client,
    archive_clients,
    create_client_from_command,
    get_client_detail_dto,
    get_clients,
    get_archived_clients,
    restore_client,
    to_dto_list,
)
from services.clients.conflict_resolver import QuoteConflictPolicy
from services.clients.errors import (
    ClientBusyError,
    ClientError,
    ClientNotFoundError,
    InvalidArgumentError,
    InvalidStateError,
    MergeFailedError,
)
from services.clients.merge_service import merge_clients_to_dto
from .dto import ClientCreateCommand, ClientDTO, ClientDetailsDTO, MergeResult


class ClientAppService:
    """Фасад между API и доменным уровнем сервисов клиентов."""

    def get_all(self, *, include_archived: bool = False) -> list[ClientDTO]:
        return to_dto_list(get_clients(include_archived))

    def list_archived(self) -> list[ClientDTO]:
        return to_dto_list(get_archived_clients())

    def get_detail(self, client_id: int) -> ClientDetailsDTO:
        detail = get_client_detail_dto(client_id)
        if detail is None:
            raise ClientNotFoundError([client_id])
        return detail

    def create(self, command: ClientCreateCommand) -> ClientDetailsDTO:
        return create_client_from_command(command)

    def merge(
        self,
        primary_id: int,
        secondary_id: int,
        policy: QuoteConflictPolicy | str | None = None,
    ) -> MergeResult:
        return merge_clients_to_dto(primary_id, secondary_id, policy=policy)

    def archive(self, client_id: int) -> None:
        archive_client(client_id)

    def restore(self, client_id: int) -> ClientDetailsDTO:
        return ClientDetailsDTO.from_model(restore_client(client_id))

    def archive_many(self, client_ids: Sequence[int]) -> int:
        return archive_clients(client_ids)


client_app_service = ClientAppService()

__all__ = [
    "ClientAppService",
    "ClientBusyError",
    "ClientError",
    "ClientNotFoundError",
    "InvalidArgumentError",
    "InvalidStateError",
    "MergeFailedError",
    "MergeResult",
    "client_app_service",
]
