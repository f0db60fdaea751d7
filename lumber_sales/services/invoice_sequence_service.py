from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lumber_sales.config import settings
from lumber_sales.models import InvoiceSequence
from lumber_sales.services.errors import InvoiceSequenceError

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _locked_counter(db: Session, name: str) -> InvoiceSequence | None:
    return db.execute(
        select(InvoiceSequence).where(InvoiceSequence.name == name).with_for_update()
    ).scalar_one_or_none()


def ensure_invoice_sequence(db: Session, *, floor: int | None = None, name: str | None = None) -> InvoiceSequence:
    seq_name = name or settings.invoice_sequence_name
    counter = db.execute(select(InvoiceSequence).where(InvoiceSequence.name == seq_name)).scalar_one_or_none()
    if counter:
        return counter
    start = settings.invoice_number_floor if floor is None else floor
    counter = InvoiceSequence(name=seq_name, seq=start)
    db.add(counter)
    db.flush()
    logger.info('Initialized invoice sequence %s at %s; next invoice number is %s', seq_name, start, start + 1)
    return counter


def next_invoice_number(db: Session, *, floor: int | None = None, name: str | None = None) -> int:
    """Return the invoice number the next created ticket should carry.

    The counter row is locked for the rest of the caller's transaction, so a concurrent
    create waits until this one commits or rolls back. A missing counter is created at
    ``floor`` in the same transaction.
    """
    seq_name = name or settings.invoice_sequence_name
    try:
        counter = _locked_counter(db, seq_name)
        if counter is None:
            counter = ensure_invoice_sequence(db, floor=floor, name=seq_name)
        return counter.seq + 1
    except SQLAlchemyError as exc:
        raise InvoiceSequenceError(f'Invoice sequence {seq_name} is unavailable') from exc


def advance_invoice_sequence(db: Session, value: int, *, name: str | None = None) -> None:
    seq_name = name or settings.invoice_sequence_name
    try:
        counter = _locked_counter(db, seq_name)
        if counter is None:
            raise InvoiceSequenceError(f'Invoice sequence {seq_name} has not been initialized')
        if value <= counter.seq:
            raise InvoiceSequenceError(
                f'Invoice sequence {seq_name} cannot move from {counter.seq} back to {value}'
            )
        counter.seq = value
        counter.updated_at = _now()
        db.flush()
    except SQLAlchemyError as exc:
        raise InvoiceSequenceError(f'Invoice sequence {seq_name} could not be advanced') from exc
