from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from lumber_sales.models import Address, AddressType, Party, PartyAddress
from lumber_sales.services.errors import NotFoundError


@dataclass(frozen=True)
class AddressInput:
    address_line1: str
    city: str
    state: str
    postal_code: str
    address_line2: str | None = None
    county: str | None = None
    country: str = 'USA'
    sales_tax_id: int | None = None


def _validate(data: AddressInput) -> None:
    if not data.address_line1.strip() or not data.city.strip() or not data.state.strip() or not data.postal_code.strip():
        raise ValueError('Address line 1, city, state, and postal code are required')


def _apply(address: Address, data: AddressInput) -> None:
    address.address_line1 = data.address_line1.strip()
    address.address_line2 = (data.address_line2 or '').strip() or None
    address.city = data.city.strip()
    address.state = data.state.strip().upper()
    address.county = (data.county or '').strip() or None
    address.postal_code = data.postal_code.strip()
    address.country = (data.country or '').strip() or 'USA'
    address.sales_tax_id = data.sales_tax_id


def list_addresses(db: Session) -> list[Address]:
    return db.execute(select(Address).order_by(Address.address_line1.asc(), Address.id.asc())).scalars().all()


def get_address(db: Session, address_id: int) -> Address:
    address = db.get(Address, address_id)
    if not address:
        raise NotFoundError('Address not found')
    return address


def create_address(
    db: Session,
    data: AddressInput,
    *,
    party_id: int | None = None,
    address_type: AddressType = AddressType.BOTH,
    is_default: bool = False,
) -> Address:
    _validate(data)
    address = Address()
    _apply(address, data)
    db.add(address)
    db.flush()
    if party_id is not None:
        associate_address(
            db, party_id=party_id, address_id=address.id, address_type=address_type, is_default=is_default
        )
    return address


def update_address(db: Session, *, address_id: int, data: AddressInput) -> Address:
    address = get_address(db, address_id)
    _validate(data)
    _apply(address, data)
    db.flush()
    return address


def delete_address(db: Session, *, address_id: int) -> bool:
    result = db.execute(delete(Address).where(Address.id == address_id))
    return result.rowcount > 0


def _matching_types(address_type: AddressType) -> list[AddressType]:
    # An address stored as "both" serves either role.
    if address_type == AddressType.BOTH:
        return [AddressType.BILLING, AddressType.SHIPPING, AddressType.BOTH]
    return [address_type, AddressType.BOTH]


def list_party_addresses(db: Session, *, party_id: int, address_type: AddressType | None = None) -> list[dict]:
    stmt = (
        select(Address, PartyAddress.address_type, PartyAddress.is_default)
        .join(PartyAddress, PartyAddress.address_id == Address.id)
        .where(PartyAddress.party_id == party_id)
        .order_by(PartyAddress.is_default.desc(), Address.address_line1.asc())
    )
    if address_type is not None:
        stmt = stmt.where(PartyAddress.address_type.in_(_matching_types(address_type)))
    return [
        {'address': row.Address, 'address_type': row.address_type, 'is_default': row.is_default}
        for row in db.execute(stmt).all()
    ]


def get_default_party_address(db: Session, *, party_id: int, address_type: AddressType) -> Address | None:
    return db.execute(
        select(Address)
        .join(PartyAddress, PartyAddress.address_id == Address.id)
        .where(
            PartyAddress.party_id == party_id,
            PartyAddress.is_default.is_(True),
            PartyAddress.address_type.in_(_matching_types(address_type)),
        )
        .limit(1)
    ).scalar_one_or_none()


def associate_address(
    db: Session,
    *,
    party_id: int,
    address_id: int,
    address_type: AddressType,
    is_default: bool = False,
) -> PartyAddress:
    """Link an address to a party, replacing any earlier default of the same type."""
    if not db.get(Party, party_id):
        raise NotFoundError('Party not found')
    get_address(db, address_id)

    if is_default:
        db.execute(
            update(PartyAddress)
            .where(PartyAddress.party_id == party_id, PartyAddress.address_type == address_type)
            .values(is_default=False)
        )

    link = db.execute(
        select(PartyAddress).where(
            PartyAddress.party_id == party_id,
            PartyAddress.address_id == address_id,
            PartyAddress.address_type == address_type,
        )
    ).scalar_one_or_none()
    if link:
        link.is_default = is_default
    else:
        link = PartyAddress(party_id=party_id, address_id=address_id, address_type=address_type, is_default=is_default)
        db.add(link)
    db.flush()
    return link


def remove_address_association(
    db: Session,
    *,
    party_id: int,
    address_id: int,
    address_type: AddressType | None = None,
) -> bool:
    stmt = delete(PartyAddress).where(PartyAddress.party_id == party_id, PartyAddress.address_id == address_id)
    if address_type is not None:
        stmt = stmt.where(PartyAddress.address_type == address_type)
    result = db.execute(stmt)
    return result.rowcount > 0


def format_single_line(address: Address | None) -> str:
    if not address:
        return ''
    parts = [address.address_line1, address.address_line2, address.city, f'{address.state} {address.postal_code}']
    return ', '.join(part for part in parts if part)


def format_multi_line(address: Address | None) -> str:
    if not address:
        return ''
    lines = [address.address_line1]
    if address.address_line2:
        lines.append(address.address_line2)
    lines.append(f'{address.city}, {address.state} {address.postal_code}')
    if address.country and address.country != 'USA':
        lines.append(address.country)
    return '\n'.join(lines)
