import pytest

from database.models import Bookmark, File, Quote
from services.clients.errors import InvalidArgumentError
from services.clients.reparent import (
    REPARENT_ORDER,
    CollectionKind,
    count_references,
    reparent,
    reparent_all,
    reparent_bookmarks,
)

pytestmark = pytest.mark.usefixtures("in_memory_db")


def test_reparent_order_is_fixed():
    assert [kind.value for kind in REPARENT_ORDER] == [
        "file",
        "quote",
        "census_upload",
        "comment",
        "info_request",
        "activity",
    ]


def test_reparent_moves_only_source_rows(make_client, make_children):
    source = make_client("Source")
    target = make_client("Target")
    bystander = make_client("Bystander")
    make_children(source, file=3)
    make_children(target, file=1)
    make_children(bystander, file=2)

    changed = reparent(CollectionKind.FILE, source.id, target.id)

    assert changed == 3
    assert File.select().where(File.client == source.id).count() == 0
    assert File.select().where(File.client == target.id).count() == 4
    assert File.select().where(File.client == bystander.id).count() == 2


def test_reparent_second_call_changes_nothing(make_client, make_children):
    source = make_client("Source")
    target = make_client("Target")
    make_children(source, quote=2)

    assert reparent("quote", source.id, target.id) == 2
    before = sorted(q.client_id for q in Quote.select())

    assert reparent("quote", source.id, target.id) == 0
    assert sorted(q.client_id for q in Quote.select()) == before


def test_reparent_activity_moves_status_history(make_client, make_children):
    source = make_client("Source")
    target = make_client("Target")
    make_children(source, activity=2)

    assert reparent(CollectionKind.ACTIVITY, source.id, target.id) == 2
    assert count_references(source.id)[CollectionKind.ACTIVITY] == 0


def test_reparent_same_client_rejected(make_client):
    client = make_client()
    with pytest.raises(InvalidArgumentError):
        reparent(CollectionKind.FILE, client.id, client.id)


def test_reparent_unknown_collection_rejected(make_client):
    a = make_client("A")
    b = make_client("B")
    with pytest.raises(InvalidArgumentError, match="Неизвестная коллекция"):
        reparent("invoices", a.id, b.id)


def test_reparent_bookmarks_drops_duplicate(make_client):
    source = make_client("Source")
    target = make_client("Target")
    Bookmark.create(client=source)
    Bookmark.create(client=target)

    assert reparent_bookmarks(source.id, target.id) == 1
    assert [b.client_id for b in Bookmark.select()] == [target.id]


def test_reparent_bookmarks_moves_single(make_client):
    source = make_client("Source")
    target = make_client("Target")
    Bookmark.create(client=source)

    assert reparent_bookmarks(source.id, target.id) == 1
    assert Bookmark.get().client_id == target.id
    assert reparent_bookmarks(source.id, target.id) == 0


def test_count_references_covers_every_collection(make_client, make_children):
    client = make_client()
    make_children(
        client, file=1, quote=2, census_upload=1, comment=3, info_request=1, activity=1
    )

    counts = count_references(client.id)

    assert counts == {
        CollectionKind.FILE: 1,
        # make_children creates one extra quote per activity record
        CollectionKind.QUOTE: 3,
        CollectionKind.CENSUS_UPLOAD: 1,
        CollectionKind.COMMENT: 3,
        CollectionKind.INFO_REQUEST: 1,
        CollectionKind.ACTIVITY: 1,
    }


def test_reparent_all_moves_everything(make_client, make_children):
    source = make_client("Source")
    target = make_client("Target")
    make_children(source, file=2, comment=1, activity=1, bookmark=1)

    moved = reparent_all(source.id, target.id)

    assert moved == {
        "file": 2,
        "quote": 1,
        "census_upload": 0,
        "comment": 1,
        "info_request": 0,
        "activity": 1,
        "bookmark": 1,
    }
    assert all(n == 0 for n in count_references(source.id).values())
    assert reparent_all(source.id, target.id) == dict.fromkeys(moved, 0)
