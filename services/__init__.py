"""Пакет прикладных сервисов.

Подмодули импортируйте напрямую, например:
    from services.clients import merge_clients
    from services.quote_service import update_quote_status
"""

__all__: list[str] = []
