"""Подмодуль сервисов, связанных с клиентами: архив и объединение дублей."""

from .client_app_service import ClientAppService, client_app_service
from .conflict_resolver import QuoteConflictPolicy
from .errors import (
    ClientBusyError,
    ClientError,
    ClientNotFoundError,
    InvalidArgumentError,
    InvalidStateError,
    MergeFailedError,
)
from .merge_service import merge_clients
from .reparent import CollectionKind, reparent, reparent_all

__all__ = [
    "ClientAppService",
    "client_app_service",
    "QuoteConflictPolicy",
    "ClientBusyError",
    "ClientError",
    "ClientNotFoundError",
    "InvalidArgumentError",
    "InvalidStateError",
    "MergeFailedError",
    "merge_clients",
    "CollectionKind",
    "reparent",
    "reparent_all",
]
