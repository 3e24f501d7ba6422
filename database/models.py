from enum import Enum
from peewee import (
    Model,
    BooleanField,
    CharField,
    DateTimeField,
    ForeignKeyField,
    IntegerField,
    TextField,
)

from database.db import db
from utils.time_utils import utcnow


class BaseModel(Model):
    class Meta:
        database = db
        # merge_lease, census_upload, ... вместо mergelease, censusupload
        legacy_table_names = False


class QuoteType(str, Enum):
    PEO = "PEO"
    ACA = "ACA"


class QuoteStatus(str, Enum):
    NOT_STARTED = "not_started"
    INTAKE = "intake"
    UNDERWRITING = "underwriting"
    PROPOSAL_READY = "proposal_ready"
    PRESENTED = "presented"
    ACCEPTED = "accepted"
    DECLINED = "declined"

    @property
    def is_terminal(self) -> bool:
        return self in (QuoteStatus.ACCEPTED, QuoteStatus.DECLINED)


class Team(str, Enum):
    PEO = "PEO"
    ACA = "ACA"
    SALES = "Sales"


class CommentTarget(str, Enum):
    CLIENT = "client"
    FILE = "file"
    CENSUS = "census"


class InfoRequestStatus(str, Enum):
    PENDING = "pending"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class Client(BaseModel):
    """Identity record; every child collection points here."""

    name = CharField(index=True)
    contact_email = CharField(null=True)
    notes = TextField(null=True)
    peo_quote_status = CharField(null=True)
    aca_quote_status = CharField(null=True)
    # census_upload ссылается на client, поэтому здесь обычный id без FK
    active_census_id = IntegerField(null=True)
    is_archived = BooleanField(default=False)
    archived_at = DateTimeField(null=True)
    last_modified = DateTimeField(null=True)

    def __str__(self) -> str:
        return self.name

    @classmethod
    def active(cls):
        return cls.select().where(cls.is_archived == False)  # noqa: E712

    @classmethod
    def archived(cls):
        return cls.select().where(cls.is_archived == True)  # noqa: E712


class File(BaseModel):
    client = ForeignKeyField(Client, backref="files")
    storage_id = CharField()
    name = CharField()
    type = CharField(default="Other")
    category = CharField(null=True)
    uploaded_at = DateTimeField(default=utcnow)
    is_required = BooleanField(default=False)
    is_verified = BooleanField(default=False)
    description = TextField(null=True)
    mime_type = CharField(null=True)
    file_size = IntegerField(null=True)


class Quote(BaseModel):
    client = ForeignKeyField(Client, backref="quotes")
    type = CharField()
    status = CharField(default=QuoteStatus.NOT_STARTED.value)
    is_blocked = BooleanField(default=False)
    blocked_reason = TextField(null=True)
    assigned_to = CharField(null=True)
    started_at = DateTimeField(null=True)
    completed_at = DateTimeField(null=True)
    notes = TextField(null=True)

    def __str__(self) -> str:
        client_name = self.client.name if self.client_id else ""
        return f"{client_name} — {self.type}"


class QuoteStatusChange(BaseModel):
    """История смены статусов котировки; источник ленты активности."""

    quote = ForeignKeyField(Quote, backref="history")
    client = ForeignKeyField(Client, backref="quote_status_changes")
    previous_status = CharField()
    new_status = CharField()
    changed_at = DateTimeField(default=utcnow)
    changed_by = CharField(null=True)
    notes = TextField(null=True)


class CensusUpload(BaseModel):
    client = ForeignKeyField(Client, backref="census_uploads")
    file = ForeignKeyField(File, backref="census_uploads", null=True)
    file_name = CharField()
    uploaded_at = DateTimeField(default=utcnow)
    columns = TextField(default="[]")
    row_count = IntegerField(default=0)


class Comment(BaseModel):
    client = ForeignKeyField(Client, backref="comments")
    target_type = CharField(default=CommentTarget.CLIENT.value)
    target_id = CharField(null=True)
    content = TextField()
    author_name = CharField()
    author_team = CharField(default=Team.SALES.value)
    created_at = DateTimeField(default=utcnow)
    is_resolved = BooleanField(default=False)
    resolved_at = DateTimeField(null=True)
    resolved_by = CharField(null=True)


class InfoRequest(BaseModel):
    client = ForeignKeyField(Client, backref="info_requests")
    title = CharField(null=True)
    quote_type = CharField(null=True)
    status = CharField(default=InfoRequestStatus.PENDING.value)
    requested_at = DateTimeField(default=utcnow)
    requested_by = CharField(null=True)
    resolved_at = DateTimeField(null=True)
    notes = TextField(null=True)


class Bookmark(BaseModel):
    client = ForeignKeyField(Client, backref="bookmarks", unique=True)
    bookmarked_at = DateTimeField(default=utcnow)


class MergeLease(BaseModel):
    """Short-lived exclusivity marker held on a client during a merge."""

    # без FK: вторичный клиент удаляется, пока аренда ещё держится
    client_id = IntegerField(unique=True)
    partner_id = IntegerField(null=True)
    token = CharField(index=True)
    acquired_at = DateTimeField(default=utcnow)
    expires_at = DateTimeField()
