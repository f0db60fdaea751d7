from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lumber_sales.db import get_db
from lumber_sales.dependencies import http_error
from lumber_sales.models import AddressType
from lumber_sales.schemas import AddressIn, AddressOut, PartyAddressLinkIn, PartyAddressOut
from lumber_sales.services.address_service import (
    AddressInput,
    associate_address,
    create_address,
    delete_address,
    get_address,
    get_default_party_address,
    list_addresses,
    list_party_addresses,
    remove_address_association,
    update_address,
)

router = APIRouter(prefix='/addresses', tags=['addresses'])

_LINK_FIELDS = {'party_id', 'address_type', 'is_default'}


@router.get('', response_model=list[AddressOut])
def addresses_list(db: Session = Depends(get_db)):
    return list_addresses(db)


@router.get('/party/{party_id}', response_model=list[PartyAddressOut])
def addresses_for_party(party_id: int, address_type: AddressType | None = None, db: Session = Depends(get_db)):
    return list_party_addresses(db, party_id=party_id, address_type=address_type)


@router.get('/party/{party_id}/default/{address_type}', response_model=AddressOut)
def addresses_default_for_party(party_id: int, address_type: AddressType, db: Session = Depends(get_db)):
    address = get_default_party_address(db, party_id=party_id, address_type=address_type)
    if not address:
        raise HTTPException(status_code=404, detail='Default address not found')
    return address


@router.post('/party/{party_id}/address/{address_id}', response_model=PartyAddressOut, status_code=201)
def addresses_associate(
    party_id: int,
    address_id: int,
    payload: PartyAddressLinkIn,
    db: Session = Depends(get_db),
):
    try:
        link = associate_address(
            db,
            party_id=party_id,
            address_id=address_id,
            address_type=payload.address_type,
            is_default=payload.is_default,
        )
        address = get_address(db, address_id)
    except ValueError as exc:
        raise http_error(exc) from exc
    db.commit()
    return {'address': address, 'address_type': link.address_type, 'is_default': link.is_default}


@router.delete('/party/{party_id}/address/{address_id}', status_code=204)
def addresses_remove_association(
    party_id: int,
    address_id: int,
    address_type: AddressType | None = None,
    db: Session = Depends(get_db),
):
    if not remove_address_association(db, party_id=party_id, address_id=address_id, address_type=address_type):
        raise HTTPException(status_code=404, detail='Address association not found')
    db.commit()
    return Response(status_code=204)


@router.get('/{address_id}', response_model=AddressOut)
def addresses_detail(address_id: int, db: Session = Depends(get_db)):
    try:
        return get_address(db, address_id)
    except ValueError as exc:
        raise http_error(exc) from exc


@router.post('', response_model=AddressOut, status_code=201)
def addresses_create(payload: AddressIn, db: Session = Depends(get_db)):
    data = AddressInput(**payload.model_dump(exclude=_LINK_FIELDS))
    try:
        address = create_address(
            db,
            data,
            party_id=payload.party_id,
            address_type=payload.address_type,
            is_default=payload.is_default,
        )
    except ValueError as exc:
        raise http_error(exc) from exc
    db.commit()
    return address


@router.put('/{address_id}', response_model=AddressOut)
def addresses_update(address_id: int, payload: AddressIn, db: Session = Depends(get_db)):
    data = AddressInput(**payload.model_dump(exclude=_LINK_FIELDS))
    try:
        address = update_address(db, address_id=address_id, data=data)
    except ValueError as exc:
        raise http_error(exc) from exc
    db.commit()
    return address


@router.delete('/{address_id}', status_code=204)
def addresses_delete(address_id: int, db: Session = Depends(get_db)):
    try:
        deleted = delete_address(db, address_id=address_id)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail='Address is in use') from exc
    if not deleted:
        raise HTTPException(status_code=404, detail='Address not found')
    return Response(status_code=204)
