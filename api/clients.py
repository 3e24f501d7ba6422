from fastapi import APIRouter, status

from services.clients.client_app_service import client_app_service
from services.clients.dto import ClientCreateCommand

from .schemas import (
    ArchiveBatchRequest,
    ArchiveBatchResponse,
    ClientCreate,
    ClientDetailRead,
    ClientRead,
    MergeRequest,
    MergeResponse,
)

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("/", response_model=list[ClientRead])
def read_clients(include_archived: bool = False):
    return client_app_service.get_all(include_archived=include_archived)


@router.get("/archived", response_model=list[ClientRead])
def read_archived_clients():
    return client_app_service.list_archived()


@router.post("/", response_model=ClientDetailRead)
def add_client(client_in: ClientCreate):
    return client_app_service.create(ClientCreateCommand(**client_in.model_dump()))


@router.post("/merge", response_model=MergeResponse)
def merge_clients(merge_in: MergeRequest):
    return client_app_service.merge(
        merge_in.primary_client_id,
        merge_in.secondary_client_id,
        policy=merge_in.policy,
    )


@router.post("/archive", response_model=ArchiveBatchResponse)
def archive_clients(batch_in: ArchiveBatchRequest):
    return {"archived": client_app_service.archive_many(batch_in.client_ids)}


@router.get("/{client_id}", response_model=ClientDetailRead)
def read_client(client_id: int):
    return client_app_service.get_detail(client_id)


@router.post("/{client_id}/archive", status_code=status.HTTP_204_NO_CONTENT)
def archive_client(client_id: int):
    client_app_service.archive(client_id)


@router.post("/{client_id}/restore", response_model=ClientDetailRead)
def restore_client(client_id: int):
    return client_app_service.restore(client_id)
