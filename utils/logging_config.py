"""Логирование сервиса воронки котировок.

Файл ``pipeline.log`` ротируется по 2 МБ; при ``LOG_JSON=1`` строки файла
пишутся в JSON для сборщиков логов, консоль остаётся человекочитаемой.
"""

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

from config import Settings, get_settings

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s │ %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Атрибуты LogRecord, которые не считаются пользовательским контекстом
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


class PeeweeFilter(logging.Filter):
    """Фильтрует SELECT-запросы peewee."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401 - short doc
        """True, если SQL-запрос не начинается с ``SELECT``."""
        if hasattr(record, "sql"):
            msg = record.sql
        else:
            msg = record.getMessage()
        return not str(msg).lstrip().startswith("SELECT")


class JsonFormatter(logging.Formatter):
    """Одна JSON-строка на запись; ``extra=`` попадает в поле ``context``."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS
        }
        if context:
            data["context"] = context
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, default=str)


def _build_handlers(settings: Settings, level: int) -> list[logging.Handler]:
    logs_dir = Path(settings.log_dir).expanduser()
    logs_dir.mkdir(parents=True, exist_ok=True)
    text_fmt = logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)

    file_h = RotatingFileHandler(
        logs_dir / "pipeline.log",
        maxBytes=2_000_000,  # 2 MB
        backupCount=3,
        encoding="utf-8",
    )
    file_h.setFormatter(JsonFormatter() if settings.log_json else text_fmt)

    console_h = logging.StreamHandler()
    console_h.setFormatter(text_fmt)

    for handler in (file_h, console_h):
        handler.setLevel(level)
    return [file_h, console_h]


def setup_logging(settings: Settings | None = None) -> None:
    """Настраивает вывод логов в консоль и файл ``pipeline.log``."""
    settings = settings or get_settings()
    if settings.detailed_logging:
        level = logging.DEBUG
    else:
        level = getattr(logging, settings.log_level, logging.INFO)

    logging.basicConfig(
        level=level,
        handlers=_build_handlers(settings, level),
        force=True,
    )

    # uvicorn пишет каждый запрос; оставляем только предупреждения
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    peewee_logger = logging.getLogger("peewee")
    if not settings.detailed_logging and not any(
        isinstance(f, PeeweeFilter) for f in peewee_logger.filters
    ):
        peewee_logger.addFilter(PeeweeFilter())
