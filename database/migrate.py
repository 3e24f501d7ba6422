"""Создать недостающие таблицы и докатить миграции архива.

Запуск: ``python -m database.migrate [DATABASE_URL]``.
"""
import logging
import sys

from config import get_settings
from utils.logging_config import setup_logging

from .init import ALL_MODELS, create_schema, init_from_env

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    settings = get_settings()
    setup_logging(settings)

    init_from_env(argv[0] if argv else settings.database_url or None)
    create_schema()
    logger.info("🛠️ Схема готова: %s таблиц", len(ALL_MODELS))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
