"""Лента активности: комментарии и смены статусов котировок."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from database.models import Client, Comment, Quote, QuoteStatusChange


class ActivityKind(str, Enum):
    COMMENT = "comment"
    STATUS_CHANGE = "status_change"


@dataclass
class ActivityEvent:
    kind: ActivityKind
    client_id: int
    client_name: str
    occurred_at: datetime
    payload: dict[str, Any] = field(default_factory=dict)


def get_recent_activity(client_id: int | None = None, limit: int = 20) -> list[ActivityEvent]:
    """Последние события, новые первыми.

    События не хранятся отдельно, а собираются из ``comment`` и
    ``quote_status_change``; у каждого источника берётся не больше ``limit``.
    """
    comments = (
        Comment.select(Comment, Client)
        .join(Client)
        .order_by(Comment.created_at.desc())
        .limit(limit)
    )
    changes = (
        QuoteStatusChange.select(QuoteStatusChange, Quote, Client)
        .join(Quote)
        .switch(QuoteStatusChange)
        .join(Client)
        .order_by(QuoteStatusChange.changed_at.desc())
        .limit(limit)
    )
    if client_id is not None:
        comments = comments.where(Comment.client == client_id)
        changes = changes.where(QuoteStatusChange.client == client_id)

    events = [
        ActivityEvent(
            kind=ActivityKind.COMMENT,
            client_id=c.client_id,
            client_name=c.client.name,
            occurred_at=c.created_at,
            payload={
                "comment_id": c.id,
                "content": c.content,
                "author_name": c.author_name,
                "author_team": c.author_team,
            },
        )
        for c in comments
    ]
    events.extend(
        ActivityEvent(
            kind=ActivityKind.STATUS_CHANGE,
            client_id=h.client_id,
            client_name=h.client.name,
            occurred_at=h.changed_at,
            payload={
                "quote_id": h.quote_id,
                "quote_type": h.quote.type,
                "previous_status": h.previous_status,
                "new_status": h.new_status,
            },
        )
        for h in changes
    )
    events.sort(key=lambda e: e.occurred_at, reverse=True)
    return events[:limit]
