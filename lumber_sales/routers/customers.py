from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lumber_sales.db import get_db
from lumber_sales.dependencies import http_error
from lumber_sales.schemas import CustomerDetail, CustomerIn, CustomerOut, CustomerUpdate
from lumber_sales.services.customer_service import (
    CustomerDefaults,
    create_customer,
    delete_customer,
    get_customer,
    get_customer_by_party,
    get_customer_with_addresses,
    list_customers,
    update_customer,
)

router = APIRouter(prefix='/customers', tags=['customers'])


@router.get('', response_model=list[CustomerOut])
def customers_list(db: Session = Depends(get_db)):
    return list_customers(db)


@router.get('/party/{party_id}', response_model=CustomerOut)
def customers_by_party(party_id: int, db: Session = Depends(get_db)):
    customer = get_customer_by_party(db, party_id)
    if not customer:
        raise HTTPException(status_code=404, detail='Customer not found')
    return customer


@router.get('/{customer_id}', response_model=CustomerOut)
def customers_detail(customer_id: int, db: Session = Depends(get_db)):
    try:
        return get_customer(db, customer_id)
    except ValueError as exc:
        raise http_error(exc) from exc


@router.get('/{customer_id}/addresses', response_model=CustomerDetail)
def customers_with_addresses(customer_id: int, db: Session = Depends(get_db)):
    try:
        return get_customer_with_addresses(db, customer_id)
    except ValueError as exc:
        raise http_error(exc) from exc


@router.post('', response_model=CustomerOut, status_code=201)
def customers_create(payload: CustomerIn, db: Session = Depends(get_db)):
    defaults = CustomerDefaults(**payload.model_dump(exclude={'party_id'}))
    try:
        customer = create_customer(db, party_id=payload.party_id, defaults=defaults)
    except ValueError as exc:
        raise http_error(exc) from exc
    db.commit()
    return customer


@router.put('/{customer_id}', response_model=CustomerOut)
def customers_update(customer_id: int, payload: CustomerUpdate, db: Session = Depends(get_db)):
    try:
        customer = update_customer(db, customer_id=customer_id, defaults=CustomerDefaults(**payload.model_dump()))
    except ValueError as exc:
        raise http_error(exc) from exc
    db.commit()
    return customer


@router.delete('/{customer_id}', status_code=204)
def customers_delete(customer_id: int, db: Session = Depends(get_db)):
    try:
        deleted = delete_customer(db, customer_id=customer_id)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail='Customer is in use') from exc
    if not deleted:
        raise HTTPException(status_code=404, detail='Customer not found')
    return Response(status_code=204)
