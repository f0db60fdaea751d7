from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from lumber_sales.models import Species
from lumber_sales.services.sort_utils import nulls_last, parse_species_number

ZERO = Decimal('0')


@dataclass(frozen=True)
class TicketItemInput:
    quantity: int
    thickness: Decimal
    width: Decimal
    length: Decimal
    price_per_mbf: Decimal
    species_id: int | None = None
    total_bf: Decimal = ZERO
    tax_amount: Decimal = ZERO
    total_tax: Decimal = ZERO
    total_amount: Decimal = ZERO


@dataclass(frozen=True)
class NumberedTicketItem:
    item: TicketItemInput
    distribution_number: int


def normalize_species_id(value: int | str | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    raw = value.strip()
    if raw == '':
        return None
    if not raw.isdigit():
        raise ValueError(f'Invalid species id: {value!r}')
    return int(raw)


def load_species_numbers(db: Session) -> dict[int, int | None]:
    rows = db.execute(select(Species.id, Species.species_number)).all()
    return {row.id: parse_species_number(row.species_number) for row in rows}


def distribution_sort_key(
    item: TicketItemInput,
    species_numbers: dict[int, int | None],
) -> tuple[tuple[int, int | Decimal], ...]:
    species_number = species_numbers.get(item.species_id) if item.species_id is not None else None
    return (
        nulls_last(species_number),
        nulls_last(item.thickness),
        nulls_last(item.width),
        nulls_last(item.length),
    )


def sort_and_number_items(
    items: list[TicketItemInput],
    species_numbers: dict[int, int | None],
) -> list[NumberedTicketItem]:
    """Order items by species number, thickness, width, then length and number them from 1.

    Missing or unresolvable species sort after every resolvable one. ``sorted`` is
    stable, so items with identical keys keep their submitted order.
    """
    ordered = sorted(items, key=lambda item: distribution_sort_key(item, species_numbers))
    return [NumberedTicketItem(item=item, distribution_number=index) for index, item in enumerate(ordered, start=1)]
