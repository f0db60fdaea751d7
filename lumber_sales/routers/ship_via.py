from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lumber_sales.db import get_db
from lumber_sales.dependencies import http_error
from lumber_sales.schemas import ShipViaIn, ShipViaOut
from lumber_sales.services.ship_via_service import (
    create_ship_via,
    delete_ship_via,
    get_ship_via,
    list_ship_via,
    update_ship_via,
)

router = APIRouter(prefix='/ship-via', tags=['ship-via'])


@router.get('', response_model=list[ShipViaOut])
def ship_via_list(db: Session = Depends(get_db)):
    return list_ship_via(db)


@router.get('/{ship_via_id}', response_model=ShipViaOut)
def ship_via_detail(ship_via_id: int, db: Session = Depends(get_db)):
    try:
        return get_ship_via(db, ship_via_id)
    except ValueError as exc:
        raise http_error(exc) from exc


@router.post('', response_model=ShipViaOut, status_code=201)
def ship_via_create(payload: ShipViaIn, db: Session = Depends(get_db)):
    try:
        ship_via = create_ship_via(db, name=payload.name, description=payload.description)
    except ValueError as exc:
        raise http_error(exc) from exc
    db.commit()
    return ship_via


@router.put('/{ship_via_id}', response_model=ShipViaOut)
def ship_via_update(ship_via_id: int, payload: ShipViaIn, db: Session = Depends(get_db)):
    try:
        ship_via = update_ship_via(db, ship_via_id=ship_via_id, name=payload.name, description=payload.description)
    except ValueError as exc:
        raise http_error(exc) from exc
    db.commit()
    return ship_via


@router.delete('/{ship_via_id}', status_code=204)
def ship_via_delete(ship_via_id: int, db: Session = Depends(get_db)):
    try:
        deleted = delete_ship_via(db, ship_via_id=ship_via_id)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail='Shipping method is in use') from exc
    if not deleted:
        raise HTTPException(status_code=404, detail='Shipping method not found')
    return Response(status_code=204)
