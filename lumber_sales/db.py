from __future__ import annotations

from collections.abc import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from lumber_sales.config import settings


def build_engine(url: str, **kwargs) -> Engine:
    engine = create_engine(url, echo=settings.sql_echo, future=True, **kwargs)
    if engine.dialect.name == 'sqlite':
        # SQLite leaves FK enforcement off per connection; ticket items rely on ON DELETE CASCADE.
        @event.listens_for(engine, 'connect')
        def _enable_foreign_keys(dbapi_connection, _connection_record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute('PRAGMA foreign_keys=ON')
            cursor.close()

    return engine


engine = build_engine(settings.database_url_normalized, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db() -> Iterator[Session]:
    with SessionLocal() as db:
        yield db


def init_db(bind: Engine | None = None) -> None:
    from lumber_sales.models import Base
    from lumber_sales.services.invoice_sequence_service import ensure_invoice_sequence

    target = bind or engine
    Base.metadata.create_all(target)
    with Session(target) as db:
        ensure_invoice_sequence(db)
        db.commit()
