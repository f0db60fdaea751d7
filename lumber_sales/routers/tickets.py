from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from lumber_sales.db import get_db
from lumber_sales.dependencies import http_error
from lumber_sales.schemas import TicketDetail, TicketIn, TicketSummary
from lumber_sales.services.distribution_service import TicketItemInput
from lumber_sales.services.ticket_service import (
    TicketHeaderInput,
    create_ticket,
    delete_ticket,
    ensure_ticket_references,
    get_ticket,
    list_tickets,
    ticket_exists,
    update_ticket,
)

router = APIRouter(prefix='/tickets', tags=['tickets'])


def _to_inputs(payload: TicketIn) -> tuple[TicketHeaderInput, list[TicketItemInput]]:
    header = TicketHeaderInput(
        customer_name=payload.customer_name,
        ticket_date=payload.date,
        customer_phone=payload.customer_phone,
        party_id=payload.party_id,
        billing_address_id=payload.billing_address_id,
        shipping_address_id=payload.shipping_address_id,
        ship_via_id=payload.ship_via_id,
        sales_tax_id=payload.sales_tax_id,
        due_date=payload.due_date,
        ticket_type=payload.ticket_type,
        purchase_order=payload.purchase_order,
        shipping_attention=payload.shipping_attention,
        total_freight=payload.total_freight,
        status=payload.status,
        total_bf=payload.total_bf,
        total_tax=payload.total_tax,
        total_amount=payload.total_amount,
    )
    items = [
        TicketItemInput(
            species_id=item.species_id,
            quantity=item.quantity,
            thickness=item.thickness,
            width=item.width,
            length=item.length,
            price_per_mbf=item.price_per_mbf,
            total_bf=item.total_bf,
            tax_amount=item.tax_amount,
            total_tax=item.total_tax,
            total_amount=item.total_amount,
        )
        for item in payload.items
    ]
    return header, items


@router.get('', response_model=list[TicketSummary])
def tickets_list(db: Session = Depends(get_db)):
    return list_tickets(db)


@router.get('/{ticket_id}', response_model=TicketDetail)
def tickets_detail(ticket_id: str, db: Session = Depends(get_db)):
    ticket = get_ticket(db, ticket_id)
    if not ticket:
        raise HTTPException(status_code=404, detail='Ticket not found')
    return ticket


@router.post('', response_model=TicketDetail, status_code=201)
def tickets_create(payload: TicketIn, db: Session = Depends(get_db)):
    ticket_id = (payload.id or '').strip()
    if not ticket_id:
        raise HTTPException(status_code=400, detail='Ticket id is required')
    if ticket_exists(db, ticket_id):
        raise HTTPException(status_code=400, detail=f'Ticket {ticket_id} already exists')

    header, items = _to_inputs(payload)
    try:
        ensure_ticket_references(db, header=header, items=items)
    except ValueError as exc:
        raise http_error(exc) from exc
    return create_ticket(db, ticket_id=ticket_id, header=header, items=items)


@router.put('/{ticket_id}', response_model=TicketDetail)
def tickets_update(ticket_id: str, payload: TicketIn, db: Session = Depends(get_db)):
    header, items = _to_inputs(payload)
    try:
        ensure_ticket_references(db, header=header, items=items)
        return update_ticket(db, ticket_id=ticket_id, header=header, items=items)
    except ValueError as exc:
        raise http_error(exc) from exc


@router.delete('/{ticket_id}', status_code=204)
def tickets_delete(ticket_id: str, db: Session = Depends(get_db)):
    if not delete_ticket(db, ticket_id=ticket_id):
        raise HTTPException(status_code=404, detail='Ticket not found')
    return Response(status_code=204)
