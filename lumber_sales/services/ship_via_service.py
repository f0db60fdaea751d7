from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from lumber_sales.models import ShipVia
from lumber_sales.services.errors import DuplicateError, NotFoundError


def list_ship_via(db: Session) -> list[ShipVia]:
    return db.execute(select(ShipVia).order_by(ShipVia.name.asc())).scalars().all()


def get_ship_via(db: Session, ship_via_id: int) -> ShipVia:
    ship_via = db.get(ShipVia, ship_via_id)
    if not ship_via:
        raise NotFoundError('Shipping method not found')
    return ship_via


def get_ship_via_by_name(db: Session, name: str) -> ShipVia | None:
    return db.execute(select(ShipVia).where(ShipVia.name == name)).scalars().first()


def create_ship_via(db: Session, *, name: str, description: str | None = None) -> ShipVia:
    clean_name = name.strip()
    if not clean_name:
        raise ValueError('Name is required')
    if get_ship_via_by_name(db, clean_name):
        raise DuplicateError('Shipping method with this name already exists')

    ship_via = ShipVia(name=clean_name, description=description or None)
    db.add(ship_via)
    db.flush()
    return ship_via


def update_ship_via(db: Session, *, ship_via_id: int, name: str, description: str | None = None) -> ShipVia:
    ship_via = get_ship_via(db, ship_via_id)
    clean_name = name.strip()
    if not clean_name:
        raise ValueError('Name is required')
    if clean_name != ship_via.name:
        other = get_ship_via_by_name(db, clean_name)
        if other and other.id != ship_via.id:
            raise DuplicateError('Another shipping method with this name already exists')

    ship_via.name = clean_name
    ship_via.description = description or None
    db.flush()
    return ship_via


def delete_ship_via(db: Session, *, ship_via_id: int) -> bool:
    result = db.execute(delete(ShipVia).where(ShipVia.id == ship_via_id))
    return result.rowcount > 0
