"""Peewee-Proxy, к которому привязываются все модели.

Реальная база подставляется через :func:`database.init.init_from_env`.
"""

from peewee import Proxy, SqliteDatabase

db = Proxy()


def write_atomic():
    """``db.atomic()`` для транзакций, которые будут писать.

    В SQLite транзакция открывается как ``BEGIN IMMEDIATE``: блокировка на
    запись берётся сразу, иначе два читающих соединения не смогут её повысить
    и одно из них получит ``database is locked`` без ожидания.
    """
    if isinstance(db.obj, SqliteDatabase):
        return db.atomic(lock_type="IMMEDIATE")
    return db.atomic()
