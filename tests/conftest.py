from datetime import datetime, timedelta

import pytest

from database.db import db
from database.init import ALL_MODELS, sqlite_database
from database.models import (
    Bookmark,
    CensusUpload,
    Client,
    Comment,
    File,
    InfoRequest,
    Quote,
    QuoteStatusChange,
)


@pytest.fixture
def file_db(tmp_path):
    """SQLite on disk, shared between threads (API worker threads, races)."""
    previous = getattr(db, "obj", None)
    database = sqlite_database(str(tmp_path / "pipeline.db"))
    db.initialize(database)
    database.create_tables(ALL_MODELS)
    try:
        yield database
    finally:
        database.close()
        db.initialize(previous)


@pytest.fixture
def make_client():
    def _make_client(name: str = "Acme", **kwargs) -> Client:
        return Client.create(name=name, **kwargs)

    return _make_client


@pytest.fixture
def make_children():
    """Create child records of every kind for a client.

    ``counts`` maps a kind (``file``, ``quote``, ``census_upload``,
    ``comment``, ``info_request``, ``activity``, ``bookmark``) to how many
    records to create.
    """

    def _make_children(client: Client, **counts) -> dict[str, list]:
        created: dict[str, list] = {kind: [] for kind in counts}
        base = datetime(2024, 1, 1, 9, 0)
        for i in range(counts.get("file", 0)):
            created["file"].append(
                File.create(client=client, storage_id=f"s-{client.id}-{i}", name=f"f{i}.pdf")
            )
        for i in range(counts.get("quote", 0)):
            created["quote"].append(
                Quote.create(client=client, type="PEO" if i % 2 == 0 else "ACA")
            )
        for i in range(counts.get("census_upload", 0)):
            created["census_upload"].append(
                CensusUpload.create(client=client, file_name=f"census{i}.csv", row_count=10)
            )
        for i in range(counts.get("comment", 0)):
            created["comment"].append(
                Comment.create(
                    client=client,
                    content=f"comment {i}",
                    author_name="Dana",
                    created_at=base + timedelta(minutes=i),
                )
            )
        for i in range(counts.get("info_request", 0)):
            created["info_request"].append(
                InfoRequest.create(client=client, title=f"request {i}")
            )
        for i in range(counts.get("activity", 0)):
            quote = Quote.create(client=client, type="ACA", status="intake")
            created["activity"].append(
                QuoteStatusChange.create(
                    quote=quote,
                    client=client,
                    previous_status="not_started",
                    new_status="intake",
                    changed_at=base + timedelta(hours=i),
                )
            )
        if counts.get("bookmark"):
            created["bookmark"].append(Bookmark.create(client=client))
        return created

    return _make_children
