from datetime import datetime

from pydantic import BaseModel, ConfigDict

from services.activity_service import ActivityKind


class ClientBase(BaseModel):
    name: str | None = None
    contact_email: str | None = None
    notes: str | None = None


class ClientCreate(ClientBase):
    name: str


class ClientRead(ClientBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    peo_quote_status: str | None = None
    aca_quote_status: str | None = None
    is_archived: bool
    archived_at: datetime | None = None


class ClientDetailRead(ClientRead):
    active_census_id: int | None = None
    last_modified: datetime | None = None
    files_count: int = 0
    quotes_count: int = 0
    census_uploads_count: int = 0
    comments_count: int = 0
    info_requests_count: int = 0


class MergeRequest(BaseModel):
    primary_client_id: int
    secondary_client_id: int
    policy: str | None = None


class MergeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    client: ClientDetailRead
    secondary_id: int
    reparented: dict[str, int]


class ActivityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    kind: ActivityKind
    client_id: int
    client_name: str
    occurred_at: datetime
    payload: dict


class ArchiveBatchRequest(BaseModel):
    client_ids: list[int]


class ArchiveBatchResponse(BaseModel):
    archived: int
