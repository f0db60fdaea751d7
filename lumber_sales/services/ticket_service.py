from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from lumber_sales.models import (
    Address,
    Party,
    SalesTax,
    ShipVia,
    Species,
    Ticket,
    TicketItem,
    TicketStatus,
    TicketType,
)
from lumber_sales.services.distribution_service import (
    ZERO,
    NumberedTicketItem,
    TicketItemInput,
    load_species_numbers,
    sort_and_number_items,
)
from lumber_sales.services.errors import NotFoundError, TicketPersistenceError
from lumber_sales.services.invoice_sequence_service import advance_invoice_sequence, next_invoice_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TicketHeaderInput:
    customer_name: str
    ticket_date: date
    customer_phone: str = ''
    party_id: int | None = None
    billing_address_id: int | None = None
    shipping_address_id: int | None = None
    ship_via_id: int | None = None
    sales_tax_id: int | None = None
    due_date: date | None = None
    ticket_type: TicketType = TicketType.INVOICE
    purchase_order: str | None = None
    shipping_attention: str | None = None
    total_freight: Decimal = ZERO
    status: TicketStatus = TicketStatus.DRAFT
    total_bf: Decimal = ZERO
    total_tax: Decimal = ZERO
    total_amount: Decimal = ZERO


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


@contextmanager
def _ticket_transaction(db: Session, *, action: str, ticket_id: str) -> Iterator[None]:
    try:
        yield
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Ticket %s failed for %s; rolled back', action, ticket_id)
        raise TicketPersistenceError(f'Failed to {action} ticket {ticket_id}') from exc
    except Exception:
        db.rollback()
        raise


def _apply_header(ticket: Ticket, header: TicketHeaderInput, *, distribution_total: int) -> None:
    ticket.party_id = header.party_id
    ticket.billing_address_id = header.billing_address_id
    ticket.shipping_address_id = header.shipping_address_id
    ticket.ship_via_id = header.ship_via_id
    ticket.sales_tax_id = header.sales_tax_id
    ticket.customer_name = header.customer_name
    ticket.customer_phone = header.customer_phone or ''
    ticket.ticket_date = header.ticket_date
    ticket.due_date = header.due_date
    ticket.ticket_type = header.ticket_type
    ticket.purchase_order = header.purchase_order
    ticket.shipping_attention = header.shipping_attention
    ticket.total_freight = header.total_freight or ZERO
    ticket.status = header.status
    ticket.total_bf = header.total_bf or ZERO
    ticket.total_tax = header.total_tax or ZERO
    ticket.total_amount = header.total_amount or ZERO
    ticket.distribution_total = distribution_total


def _insert_items(db: Session, *, ticket_id: str, numbered_items: list[NumberedTicketItem]) -> None:
    for numbered in numbered_items:
        item = numbered.item
        db.add(
            TicketItem(
                ticket_id=ticket_id,
                species_id=item.species_id,
                quantity=item.quantity,
                thickness=item.thickness,
                width=item.width,
                length=item.length,
                price_per_mbf=item.price_per_mbf,
                total_bf=item.total_bf or ZERO,
                tax_amount=item.tax_amount or ZERO,
                total_tax=item.total_tax or ZERO,
                total_amount=item.total_amount or ZERO,
                distribution_number=numbered.distribution_number,
            )
        )


def create_ticket(db: Session, *, ticket_id: str, header: TicketHeaderInput, items: list[TicketItemInput]) -> dict:
    with _ticket_transaction(db, action='create', ticket_id=ticket_id):
        invoice_number = next_invoice_number(db)
        numbered_items = sort_and_number_items(items, load_species_numbers(db))

        ticket = Ticket(id=ticket_id, invoice_number=invoice_number)
        _apply_header(ticket, header, distribution_total=len(numbered_items))
        db.add(ticket)
        db.flush()

        advance_invoice_sequence(db, invoice_number)
        _insert_items(db, ticket_id=ticket_id, numbered_items=numbered_items)
        db.flush()

    logger.info('Created ticket %s as invoice %s with %s items', ticket_id, invoice_number, len(numbered_items))
    return get_ticket(db, ticket_id)


def update_ticket(db: Session, *, ticket_id: str, header: TicketHeaderInput, items: list[TicketItemInput]) -> dict:
    with _ticket_transaction(db, action='update', ticket_id=ticket_id):
        ticket = db.execute(select(Ticket).where(Ticket.id == ticket_id).with_for_update()).scalar_one_or_none()
        if not ticket:
            raise NotFoundError('Ticket not found')

        numbered_items = sort_and_number_items(items, load_species_numbers(db))
        _apply_header(ticket, header, distribution_total=len(numbered_items))
        ticket.updated_at = _now()
        db.flush()

        db.execute(delete(TicketItem).where(TicketItem.ticket_id == ticket_id))
        _insert_items(db, ticket_id=ticket_id, numbered_items=numbered_items)
        db.flush()

    logger.info('Updated ticket %s (invoice %s) with %s items', ticket_id, ticket.invoice_number, len(numbered_items))
    return get_ticket(db, ticket_id)


def delete_ticket(db: Session, *, ticket_id: str) -> bool:
    with _ticket_transaction(db, action='delete', ticket_id=ticket_id):
        # Item rows go through the ticket_items foreign key cascade.
        result = db.execute(delete(Ticket).where(Ticket.id == ticket_id))
    deleted = result.rowcount > 0
    if deleted:
        logger.info('Deleted ticket %s', ticket_id)
    return deleted


def ticket_exists(db: Session, ticket_id: str) -> bool:
    return db.execute(select(Ticket.id).where(Ticket.id == ticket_id)).scalar_one_or_none() is not None


def ensure_ticket_references(db: Session, *, header: TicketHeaderInput, items: list[TicketItemInput]) -> None:
    if header.party_id is not None and not db.get(Party, header.party_id):
        raise NotFoundError('Party not found')
    if header.billing_address_id is not None and not db.get(Address, header.billing_address_id):
        raise NotFoundError('Billing address not found')
    if header.shipping_address_id is not None and not db.get(Address, header.shipping_address_id):
        raise NotFoundError('Shipping address not found')
    if header.ship_via_id is not None and not db.get(ShipVia, header.ship_via_id):
        raise NotFoundError('Shipping method not found')
    if header.sales_tax_id is not None and not db.get(SalesTax, header.sales_tax_id):
        raise NotFoundError('Sales tax not found')

    species_ids = {item.species_id for item in items if item.species_id is not None}
    if species_ids:
        known = set(db.execute(select(Species.id).where(Species.id.in_(species_ids))).scalars().all())
        missing = sorted(species_ids - known)
        if missing:
            raise NotFoundError(f'Species with ID {missing[0]} not found')


def _header_dict(ticket: Ticket) -> dict:
    return {
        'id': ticket.id,
        'invoice_number': ticket.invoice_number,
        'party_id': ticket.party_id,
        'billing_address_id': ticket.billing_address_id,
        'shipping_address_id': ticket.shipping_address_id,
        'ship_via_id': ticket.ship_via_id,
        'sales_tax_id': ticket.sales_tax_id,
        'customer_name': ticket.customer_name,
        'customer_phone': ticket.customer_phone,
        'date': ticket.ticket_date,
        'due_date': ticket.due_date,
        'ticket_type': ticket.ticket_type,
        'purchase_order': ticket.purchase_order,
        'shipping_attention': ticket.shipping_attention,
        'total_freight': ticket.total_freight,
        'status': ticket.status,
        'total_bf': ticket.total_bf,
        'total_tax': ticket.total_tax,
        'total_amount': ticket.total_amount,
        'distribution_total': ticket.distribution_total,
        'created_at': ticket.created_at,
        'updated_at': ticket.updated_at,
    }


def get_ticket(db: Session, ticket_id: str) -> dict | None:
    billing = aliased(Address)
    shipping = aliased(Address)
    row = db.execute(
        select(
            Ticket,
            Party.name.label('party_name'),
            Party.phone.label('party_phone'),
            billing.address_line1.label('billing_address1'),
            billing.address_line2.label('billing_address2'),
            billing.city.label('billing_city'),
            billing.state.label('billing_state'),
            billing.county.label('billing_county'),
            billing.postal_code.label('billing_postal_code'),
            shipping.address_line1.label('shipping_address1'),
            shipping.address_line2.label('shipping_address2'),
            shipping.city.label('shipping_city'),
            shipping.state.label('shipping_state'),
            shipping.county.label('shipping_county'),
            shipping.postal_code.label('shipping_postal_code'),
            ShipVia.name.label('ship_via_name'),
            ShipVia.description.label('ship_via_description'),
            SalesTax.name.label('sales_tax_name'),
            SalesTax.tax_rate.label('sales_tax_rate'),
            SalesTax.county.label('sales_tax_county'),
            SalesTax.state.label('sales_tax_state'),
        )
        .outerjoin(Party, Party.id == Ticket.party_id)
        .outerjoin(billing, billing.id == Ticket.billing_address_id)
        .outerjoin(shipping, shipping.id == Ticket.shipping_address_id)
        .outerjoin(ShipVia, ShipVia.id == Ticket.ship_via_id)
        .outerjoin(SalesTax, SalesTax.id == Ticket.sales_tax_id)
        .where(Ticket.id == ticket_id)
    ).one_or_none()
    if not row:
        return None

    detail = _header_dict(row.Ticket)
    detail.update({key: value for key, value in row._mapping.items() if key != 'Ticket'})

    item_rows = db.execute(
        select(
            TicketItem,
            Species.name.label('species_name'),
            Species.list_name.label('species_list_name'),
            Species.species_number.label('species_number'),
        )
        .outerjoin(Species, Species.id == TicketItem.species_id)
        .where(TicketItem.ticket_id == ticket_id)
        .order_by(TicketItem.distribution_number.asc())
    ).all()
    detail['items'] = [
        {
            'id': item_row.TicketItem.id,
            'ticket_id': item_row.TicketItem.ticket_id,
            'species_id': item_row.TicketItem.species_id,
            'quantity': item_row.TicketItem.quantity,
            'thickness': item_row.TicketItem.thickness,
            'width': item_row.TicketItem.width,
            'length': item_row.TicketItem.length,
            'price_per_mbf': item_row.TicketItem.price_per_mbf,
            'total_bf': item_row.TicketItem.total_bf,
            'tax_amount': item_row.TicketItem.tax_amount,
            'total_tax': item_row.TicketItem.total_tax,
            'total_amount': item_row.TicketItem.total_amount,
            'distribution_number': item_row.TicketItem.distribution_number,
            'species_name': item_row.species_name,
            'species_list_name': item_row.species_list_name,
            'species_number': item_row.species_number,
        }
        for item_row in item_rows
    ]
    return detail


def list_tickets(db: Session) -> list[dict]:
    rows = db.execute(
        select(
            Ticket,
            Party.name.label('party_name'),
            Party.phone.label('party_phone'),
            ShipVia.name.label('ship_via_name'),
            SalesTax.name.label('sales_tax_name'),
            SalesTax.tax_rate.label('sales_tax_rate'),
        )
        .outerjoin(Party, Party.id == Ticket.party_id)
        .outerjoin(ShipVia, ShipVia.id == Ticket.ship_via_id)
        .outerjoin(SalesTax, SalesTax.id == Ticket.sales_tax_id)
        .order_by(Ticket.created_at.desc(), Ticket.invoice_number.desc())
    ).all()
    return [
        {
            **_header_dict(row.Ticket),
            'party_name': row.party_name,
            'party_phone': row.party_phone,
            'ship_via_name': row.ship_via_name,
            'sales_tax_name': row.sales_tax_name,
            'sales_tax_rate': row.sales_tax_rate,
        }
        for row in rows
    ]
