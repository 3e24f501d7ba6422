import pytest

from database.models import Client, Quote, QuoteStatusChange, QuoteType
from services.clients.errors import ClientNotFoundError, InvalidArgumentError
from services.clients.merge_service import merge_clients
from services.quote_service import (
    get_quote_history,
    get_quotes_by_client,
    update_quote_status,
)

pytestmark = pytest.mark.usefixtures("in_memory_db")


def test_first_update_creates_quote_and_mirrors_status(make_client):
    client = make_client("Acme")

    quote = update_quote_status(client.id, "PEO", "intake")

    assert quote.type == "PEO"
    assert quote.status == "intake"
    assert quote.started_at is not None
    assert quote.completed_at is None
    assert Client.get_by_id(client.id).peo_quote_status == "intake"
    assert QuoteStatusChange.select().count() == 0


def test_status_change_is_recorded(make_client):
    client = make_client("Acme")
    quote = update_quote_status(client.id, QuoteType.ACA, "intake")

    update_quote_status(client.id, QuoteType.ACA, "underwriting", changed_by="Dana")
    update_quote_status(client.id, QuoteType.ACA, "accepted")

    history = get_quote_history(quote.id)
    assert [(h.previous_status, h.new_status) for h in history] == [
        ("underwriting", "accepted"),
        ("intake", "underwriting"),
    ]
    assert history[1].changed_by == "Dana"
    assert all(h.client_id == client.id for h in history)

    reloaded = Quote.get_by_id(quote.id)
    assert reloaded.completed_at is not None
    assert Client.get_by_id(client.id).aca_quote_status == "accepted"


def test_same_status_does_not_add_history(make_client):
    client = make_client("Acme")
    update_quote_status(client.id, "PEO", "intake")

    quote = update_quote_status(
        client.id, "PEO", "intake", is_blocked=True, blocked_reason="Ждём census"
    )

    assert quote.is_blocked is True
    assert quote.blocked_reason == "Ждём census"
    assert QuoteStatusChange.select().count() == 0


def test_blocked_reason_cleared_when_unblocked(make_client):
    client = make_client("Acme")
    update_quote_status(client.id, "PEO", "intake", is_blocked=True, blocked_reason="x")

    quote = update_quote_status(client.id, "PEO", "intake")

    assert quote.is_blocked is False
    assert quote.blocked_reason is None


@pytest.mark.parametrize(
    "quote_type, status",
    [("HMO", "intake"), ("PEO", "lost")],
)
def test_invalid_type_or_status_rejected(make_client, quote_type, status):
    client = make_client("Acme")
    with pytest.raises(InvalidArgumentError):
        update_quote_status(client.id, quote_type, status)
    assert Quote.select().count() == 0


def test_update_for_missing_client():
    with pytest.raises(ClientNotFoundError):
        update_quote_status(404, "PEO", "intake")


def test_after_merge_oldest_quote_is_updated(make_client):
    primary = make_client("Primary")
    secondary = make_client("Secondary")
    first = update_quote_status(primary.id, "PEO", "intake")
    update_quote_status(secondary.id, "PEO", "presented")

    merge_clients(primary.id, secondary.id)
    assert len(get_quotes_by_client(primary.id)) == 2

    updated = update_quote_status(primary.id, "PEO", "underwriting")

    assert updated.id == first.id
    assert Client.get_by_id(primary.id).peo_quote_status == "underwriting"
