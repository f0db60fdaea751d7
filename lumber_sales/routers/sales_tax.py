from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lumber_sales.db import get_db
from lumber_sales.dependencies import http_error
from lumber_sales.schemas import SalesTaxIn, SalesTaxOut
from lumber_sales.services.sales_tax_service import (
    create_sales_tax,
    delete_sales_tax,
    get_sales_tax,
    get_sales_tax_by_location,
    list_sales_tax,
    update_sales_tax,
)

router = APIRouter(prefix='/sales-tax', tags=['sales-tax'])


@router.get('', response_model=list[SalesTaxOut])
def sales_tax_list(db: Session = Depends(get_db)):
    return list_sales_tax(db)


@router.get('/location/{county}/{state}', response_model=SalesTaxOut)
def sales_tax_by_location(county: str, state: str, db: Session = Depends(get_db)):
    try:
        return get_sales_tax_by_location(db, county=county, state=state.upper())
    except ValueError as exc:
        raise http_error(exc) from exc


@router.get('/{sales_tax_id}', response_model=SalesTaxOut)
def sales_tax_detail(sales_tax_id: int, db: Session = Depends(get_db)):
    try:
        return get_sales_tax(db, sales_tax_id)
    except ValueError as exc:
        raise http_error(exc) from exc


@router.post('', response_model=SalesTaxOut, status_code=201)
def sales_tax_create(payload: SalesTaxIn, db: Session = Depends(get_db)):
    try:
        sales_tax = create_sales_tax(db, **payload.model_dump())
    except ValueError as exc:
        raise http_error(exc) from exc
    db.commit()
    return sales_tax


@router.put('/{sales_tax_id}', response_model=SalesTaxOut)
def sales_tax_update(sales_tax_id: int, payload: SalesTaxIn, db: Session = Depends(get_db)):
    try:
        sales_tax = update_sales_tax(db, sales_tax_id=sales_tax_id, **payload.model_dump())
    except ValueError as exc:
        raise http_error(exc) from exc
    db.commit()
    return sales_tax


@router.delete('/{sales_tax_id}', status_code=204)
def sales_tax_delete(sales_tax_id: int, db: Session = Depends(get_db)):
    try:
        deleted = delete_sales_tax(db, sales_tax_id=sales_tax_id)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail='Sales tax is in use') from exc
    if not deleted:
        raise HTTPException(status_code=404, detail='Sales tax not found')
    return Response(status_code=204)
