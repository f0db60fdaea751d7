from __future__ import annotations

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from lumber_sales.models import Species
from lumber_sales.services.errors import DuplicateError, NotFoundError
from lumber_sales.services.party_service import MIN_SEARCH_LENGTH, SEARCH_LIMIT, build_list_name


def list_species(db: Session) -> list[Species]:
    return db.execute(select(Species).order_by(Species.list_name.asc())).scalars().all()


def get_species(db: Session, species_id: int) -> Species:
    species = db.get(Species, species_id)
    if not species:
        raise NotFoundError('Species not found')
    return species


def get_species_by_number(db: Session, species_number: str) -> Species | None:
    return db.execute(select(Species).where(Species.species_number == species_number)).scalar_one_or_none()


def search_species(db: Session, term: str | None) -> list[Species]:
    clean = (term or '').strip()
    if len(clean) < MIN_SEARCH_LENGTH:
        return []
    pattern = f'%{clean}%'
    return db.execute(
        select(Species)
        .where(or_(Species.list_name.ilike(pattern), Species.name.ilike(pattern)))
        .order_by(Species.list_name.asc())
        .limit(SEARCH_LIMIT)
    ).scalars().all()


def create_species(db: Session, *, species_number: str, name: str, description: str | None = None) -> Species:
    clean_number = species_number.strip()
    clean_name = name.strip()
    if not clean_number or not clean_name:
        raise ValueError('Species number and name are required')
    if get_species_by_number(db, clean_number):
        raise DuplicateError('Species number is already in use')

    species = Species(
        species_number=clean_number,
        name=clean_name,
        list_name=build_list_name(clean_number, clean_name),
        description=description or None,
    )
    db.add(species)
    db.flush()
    return species


def update_species(
    db: Session,
    *,
    species_id: int,
    species_number: str,
    name: str,
    description: str | None = None,
) -> Species:
    species = get_species(db, species_id)
    clean_number = species_number.strip()
    clean_name = name.strip()
    if not clean_number or not clean_name:
        raise ValueError('Species number and name are required')
    if clean_number != species.species_number:
        other = get_species_by_number(db, clean_number)
        if other and other.id != species.id:
            raise DuplicateError('Species number is already in use')

    species.species_number = clean_number
    species.name = clean_name
    species.list_name = build_list_name(clean_number, clean_name)
    species.description = description or None
    db.flush()
    return species


def delete_species(db: Session, *, species_id: int) -> bool:
    result = db.execute(delete(Species).where(Species.id == species_id))
    return result.rowcount > 0
