from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lumber_sales.db import get_db
from lumber_sales.dependencies import http_error
from lumber_sales.schemas import PartyDetail, PartyIn, PartyOut
from lumber_sales.services.party_service import (
    create_party,
    delete_party,
    get_party,
    get_party_with_addresses,
    list_parties,
    list_parties_by_type,
    search_parties,
    update_party,
)

router = APIRouter(prefix='/parties', tags=['parties'])


@router.get('', response_model=list[PartyOut])
def parties_list(db: Session = Depends(get_db)):
    return list_parties(db)


@router.get('/search', response_model=list[PartyOut])
def parties_search(term: str = '', db: Session = Depends(get_db)):
    return search_parties(db, term)


@router.get('/type/{type_name}', response_model=list[PartyOut])
def parties_by_type(type_name: str, db: Session = Depends(get_db)):
    return list_parties_by_type(db, type_name)


@router.get('/{party_id}', response_model=PartyOut)
def parties_detail(party_id: int, db: Session = Depends(get_db)):
    try:
        return get_party(db, party_id)
    except ValueError as exc:
        raise http_error(exc) from exc


@router.get('/{party_id}/addresses', response_model=PartyDetail)
def parties_with_addresses(party_id: int, db: Session = Depends(get_db)):
    try:
        return get_party_with_addresses(db, party_id)
    except ValueError as exc:
        raise http_error(exc) from exc


@router.post('', response_model=PartyOut, status_code=201)
def parties_create(payload: PartyIn, db: Session = Depends(get_db)):
    try:
        party = create_party(db, **payload.model_dump())
    except ValueError as exc:
        raise http_error(exc) from exc
    db.commit()
    return party


@router.put('/{party_id}', response_model=PartyOut)
def parties_update(party_id: int, payload: PartyIn, db: Session = Depends(get_db)):
    try:
        party = update_party(db, party_id=party_id, **payload.model_dump())
    except ValueError as exc:
        raise http_error(exc) from exc
    db.commit()
    return party


@router.delete('/{party_id}', status_code=204)
def parties_delete(party_id: int, db: Session = Depends(get_db)):
    try:
        deleted = delete_party(db, party_id=party_id)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail='Party is in use') from exc
    if not deleted:
        raise HTTPException(status_code=404, detail='Party not found')
    return Response(status_code=204)
