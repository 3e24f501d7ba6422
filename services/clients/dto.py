from __future__ import annotations

from dataclasses import dataclass, asdict, field
from datetime import datetime

from database.models import Client


@dataclass
class ClientDTO:
    id: int
    name: str
    contact_email: str | None = None
    notes: str | None = None
    peo_quote_status: str | None = None
    aca_quote_status: str | None = None
    is_archived: bool = False
    archived_at: datetime | None = None

    @classmethod
    def from_model(cls, client: Client) -> "ClientDTO":
        return cls(
            id=client.id,
            name=client.name,
            contact_email=client.contact_email,
            notes=client.notes,
            peo_quote_status=client.peo_quote_status,
            aca_quote_status=client.aca_quote_status,
            is_archived=client.is_archived,
            archived_at=client.archived_at,
        )


@dataclass
class ClientDetailsDTO(ClientDTO):
    active_census_id: int | None = None
    last_modified: datetime | None = None
    files_count: int = 0
    quotes_count: int = 0
    census_uploads_count: int = 0
    comments_count: int = 0
    info_requests_count: int = 0

    @classmethod
    def from_model(cls, client: Client) -> "ClientDetailsDTO":
        base = asdict(ClientDTO.from_model(client))
        return cls(
            **base,
            active_census_id=client.active_census_id,
            last_modified=client.last_modified,
            files_count=client.files.count(),
            quotes_count=client.quotes.count(),
            census_uploads_count=client.census_uploads.count(),
            comments_count=client.comments.count(),
            info_requests_count=client.info_requests.count(),
        )


@dataclass(frozen=True)
class ClientCreateCommand:
    name: str
    contact_email: str | None = None
    notes: str | None = None

    def to_payload(self) -> dict:
        payload: dict[str, object] = {}
        for key, value in asdict(self).items():
            if value in (None, ""):
                continue
            payload[key] = value
        return payload


@dataclass
class MergeResult:
    client: ClientDetailsDTO
    secondary_id: int
    reparented: dict[str, int] = field(default_factory=dict)
