from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lumber_sales.db import get_db
from lumber_sales.dependencies import http_error
from lumber_sales.schemas import SpeciesIn, SpeciesOut
from lumber_sales.services.species_service import (
    create_species,
    delete_species,
    get_species,
    get_species_by_number,
    list_species,
    search_species,
    update_species,
)

router = APIRouter(prefix='/species', tags=['species'])


@router.get('', response_model=list[SpeciesOut])
def species_list(db: Session = Depends(get_db)):
    return list_species(db)


@router.get('/search', response_model=list[SpeciesOut])
def species_search(term: str = '', db: Session = Depends(get_db)):
    return search_species(db, term)


@router.get('/number/{species_number}', response_model=SpeciesOut)
def species_by_number(species_number: str, db: Session = Depends(get_db)):
    species = get_species_by_number(db, species_number)
    if not species:
        raise HTTPException(status_code=404, detail='Species not found')
    return species


@router.get('/{species_id}', response_model=SpeciesOut)
def species_detail(species_id: int, db: Session = Depends(get_db)):
    try:
        return get_species(db, species_id)
    except ValueError as exc:
        raise http_error(exc) from exc


@router.post('', response_model=SpeciesOut, status_code=201)
def species_create(payload: SpeciesIn, db: Session = Depends(get_db)):
    try:
        species = create_species(db, **payload.model_dump())
    except ValueError as exc:
        raise http_error(exc) from exc
    db.commit()
    return species


@router.put('/{species_id}', response_model=SpeciesOut)
def species_update(species_id: int, payload: SpeciesIn, db: Session = Depends(get_db)):
    try:
        species = update_species(db, species_id=species_id, **payload.model_dump())
    except ValueError as exc:
        raise http_error(exc) from exc
    db.commit()
    return species


@router.delete('/{species_id}', status_code=204)
def species_delete(species_id: int, db: Session = Depends(get_db)):
    try:
        deleted = delete_species(db, species_id=species_id)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail='Species is in use') from exc
    if not deleted:
        raise HTTPException(status_code=404, detail='Species not found')
    return Response(status_code=204)
