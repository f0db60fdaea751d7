from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from lumber_sales.models import Address, Party, PartyAddress, PartyType, PartyTypeMapping
from lumber_sales.services.errors import DuplicateError, NotFoundError

MIN_SEARCH_LENGTH = 2
SEARCH_LIMIT = 20


def build_list_name(number: str, name: str) -> str:
    return f'{number} - {name}'


def list_parties(db: Session) -> list[Party]:
    return db.execute(select(Party).order_by(Party.list_name.asc())).scalars().all()


def get_party(db: Session, party_id: int) -> Party:
    party = db.get(Party, party_id)
    if not party:
        raise NotFoundError('Party not found')
    return party


def get_party_by_number(db: Session, party_number: str) -> Party | None:
    return db.execute(select(Party).where(Party.party_number == party_number)).scalar_one_or_none()


def list_parties_by_type(db: Session, type_name: str) -> list[Party]:
    return db.execute(
        select(Party)
        .join(PartyTypeMapping, PartyTypeMapping.party_id == Party.id)
        .join(PartyType, PartyType.id == PartyTypeMapping.party_type_id)
        .where(PartyType.name == type_name)
        .order_by(Party.list_name.asc())
    ).scalars().all()


def search_parties(db: Session, term: str | None) -> list[Party]:
    clean = (term or '').strip()
    if len(clean) < MIN_SEARCH_LENGTH:
        return []
    return db.execute(
        select(Party)
        .where(Party.list_name.ilike(f'%{clean}%'))
        .order_by(Party.list_name.asc())
        .limit(SEARCH_LIMIT)
    ).scalars().all()


def _clean_required(party_number: str, name: str) -> tuple[str, str]:
    clean_number = party_number.strip()
    clean_name = name.strip()
    if not clean_number or not clean_name:
        raise ValueError('Party number and name are required')
    return clean_number, clean_name


def create_party(
    db: Session,
    *,
    party_number: str,
    name: str,
    phone: str | None = None,
    email: str | None = None,
    notes: str | None = None,
) -> Party:
    clean_number, clean_name = _clean_required(party_number, name)
    if get_party_by_number(db, clean_number):
        raise DuplicateError('Party number is already in use')

    party = Party(
        party_number=clean_number,
        name=clean_name,
        list_name=build_list_name(clean_number, clean_name),
        phone=phone or None,
        email=email or None,
        notes=notes or None,
    )
    db.add(party)
    db.flush()
    return party


def update_party(
    db: Session,
    *,
    party_id: int,
    party_number: str,
    name: str,
    phone: str | None = None,
    email: str | None = None,
    notes: str | None = None,
) -> Party:
    party = get_party(db, party_id)
    clean_number, clean_name = _clean_required(party_number, name)
    if clean_number != party.party_number:
        other = get_party_by_number(db, clean_number)
        if other and other.id != party.id:
            raise DuplicateError('Party number is already in use')

    party.party_number = clean_number
    party.name = clean_name
    party.list_name = build_list_name(clean_number, clean_name)
    party.phone = phone or None
    party.email = email or None
    party.notes = notes or None
    db.flush()
    return party


def delete_party(db: Session, *, party_id: int) -> bool:
    result = db.execute(delete(Party).where(Party.id == party_id))
    return result.rowcount > 0


def get_party_with_addresses(db: Session, party_id: int) -> dict:
    party = get_party(db, party_id)
    address_rows = db.execute(
        select(Address, PartyAddress.address_type, PartyAddress.is_default)
        .join(PartyAddress, PartyAddress.address_id == Address.id)
        .where(PartyAddress.party_id == party_id)
        .order_by(PartyAddress.is_default.desc(), Address.address_line1.asc())
    ).all()
    types = db.execute(
        select(PartyType)
        .join(PartyTypeMapping, PartyTypeMapping.party_type_id == PartyType.id)
        .where(PartyTypeMapping.party_id == party_id)
        .order_by(PartyType.name.asc())
    ).scalars().all()
    return {
        'party': party,
        'addresses': [
            {'address': row.Address, 'address_type': row.address_type, 'is_default': row.is_default}
            for row in address_rows
        ],
        'types': types,
    }


def get_or_create_party_type(db: Session, *, name: str, description: str | None = None) -> PartyType:
    party_type = db.execute(select(PartyType).where(PartyType.name == name)).scalar_one_or_none()
    if party_type:
        return party_type
    party_type = PartyType(name=name, description=description)
    db.add(party_type)
    db.flush()
    return party_type


def add_party_type(db: Session, *, party_id: int, type_name: str, description: str | None = None) -> None:
    party_type = get_or_create_party_type(db, name=type_name, description=description)
    existing = db.execute(
        select(PartyTypeMapping.id).where(
            PartyTypeMapping.party_id == party_id,
            PartyTypeMapping.party_type_id == party_type.id,
        )
    ).scalar_one_or_none()
    if existing:
        return
    db.add(PartyTypeMapping(party_id=party_id, party_type_id=party_type.id))
    db.flush()


def remove_party_type(db: Session, *, party_id: int, type_name: str) -> None:
    type_id = db.execute(select(PartyType.id).where(PartyType.name == type_name)).scalar_one_or_none()
    if type_id is None:
        return
    db.execute(
        delete(PartyTypeMapping).where(
            PartyTypeMapping.party_id == party_id,
            PartyTypeMapping.party_type_id == type_id,
        )
    )
