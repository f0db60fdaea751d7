from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# SQLite only autoincrements INTEGER primary keys.
IdType = BigInteger().with_variant(Integer(), 'sqlite')


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Base(DeclarativeBase):
    pass


class AddressType(str, Enum):
    BILLING = 'billing'
    SHIPPING = 'shipping'
    BOTH = 'both'


class TicketStatus(str, Enum):
    DRAFT = 'draft'
    INVOICE = 'invoice'
    VOID = 'void'


class TicketType(str, Enum):
    INVOICE = 'invoice'
    QUOTE = 'quote'
    PURCHASE_ORDER = 'purchase order'
    BILL_OF_LADING = 'bill of lading'


class PartyType(Base):
    __tablename__ = 'party_types'

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Party(Base):
    __tablename__ = 'parties'

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    party_number: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    list_name: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str | None] = mapped_column(Text)
    email: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PartyTypeMapping(Base):
    __tablename__ = 'party_type_mappings'
    __table_args__ = (UniqueConstraint('party_id', 'party_type_id', name='uq_party_type_mappings_party_type'),)

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    party_id: Mapped[int] = mapped_column(BigInteger, ForeignKey('parties.id', ondelete='CASCADE'), nullable=False)
    party_type_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey('party_types.id', ondelete='CASCADE'), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class SalesTax(Base):
    __tablename__ = 'sales_tax'

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    county: Mapped[str] = mapped_column(Text, nullable=False)
    state: Mapped[str] = mapped_column(String(2), nullable=False)
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(8, 5), nullable=False)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class ShipVia(Base):
    __tablename__ = 'ship_via'

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Address(Base):
    __tablename__ = 'addresses'

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    address_line1: Mapped[str] = mapped_column(Text, nullable=False)
    address_line2: Mapped[str | None] = mapped_column(Text)
    city: Mapped[str] = mapped_column(Text, nullable=False)
    state: Mapped[str] = mapped_column(Text, nullable=False)
    county: Mapped[str | None] = mapped_column(Text)
    postal_code: Mapped[str] = mapped_column(Text, nullable=False)
    country: Mapped[str] = mapped_column(Text, nullable=False, default='USA', server_default='USA')
    sales_tax_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey('sales_tax.id'))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PartyAddress(Base):
    __tablename__ = 'party_addresses'
    __table_args__ = (
        UniqueConstraint('party_id', 'address_id', 'address_type', name='uq_party_addresses_party_address_type'),
    )

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    party_id: Mapped[int] = mapped_column(BigInteger, ForeignKey('parties.id', ondelete='CASCADE'), nullable=False)
    address_id: Mapped[int] = mapped_column(BigInteger, ForeignKey('addresses.id', ondelete='CASCADE'), nullable=False)
    address_type: Mapped[AddressType] = mapped_column(
        SQLEnum(AddressType, name='address_type', values_callable=_enum_values), nullable=False
    )
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default='false')
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Customer(Base):
    __tablename__ = 'customers'

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    party_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey('parties.id', ondelete='CASCADE'), nullable=False, unique=True
    )
    default_billing_address_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey('addresses.id'))
    default_shipping_address_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey('addresses.id'))
    default_ship_via_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey('ship_via.id'))
    sales_tax_exempt: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default='false')
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Species(Base):
    __tablename__ = 'species'

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    species_number: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    list_name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class InvoiceSequence(Base):
    __tablename__ = 'invoice_sequences'

    name: Mapped[str] = mapped_column(Text, primary_key=True)
    seq: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Ticket(Base):
    __tablename__ = 'tickets'

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    invoice_number: Mapped[int] = mapped_column(BigInteger, nullable=False, unique=True)
    party_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey('parties.id'))
    billing_address_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey('addresses.id'))
    shipping_address_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey('addresses.id'))
    ship_via_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey('ship_via.id'))
    sales_tax_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey('sales_tax.id'))
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    customer_phone: Mapped[str] = mapped_column(Text, nullable=False, default='', server_default='')
    ticket_date: Mapped[date] = mapped_column('date', Date, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date)
    ticket_type: Mapped[TicketType] = mapped_column(
        SQLEnum(TicketType, name='ticket_type', values_callable=_enum_values),
        nullable=False,
        default=TicketType.INVOICE,
        server_default=TicketType.INVOICE.value,
    )
    purchase_order: Mapped[str | None] = mapped_column(Text)
    shipping_attention: Mapped[str | None] = mapped_column(Text)
    total_freight: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal('0'), server_default='0')
    status: Mapped[TicketStatus] = mapped_column(
        SQLEnum(TicketStatus, name='ticket_status', values_callable=_enum_values),
        nullable=False,
        default=TicketStatus.DRAFT,
        server_default=TicketStatus.DRAFT.value,
    )
    total_bf: Mapped[Decimal] = mapped_column(Numeric(14, 3), nullable=False, default=Decimal('0'), server_default='0')
    total_tax: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal('0'), server_default='0')
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal('0'), server_default='0')
    distribution_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default='0')
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class TicketItem(Base):
    __tablename__ = 'ticket_items'

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    ticket_id: Mapped[str] = mapped_column(Text, ForeignKey('tickets.id', ondelete='CASCADE'), nullable=False, index=True)
    species_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey('species.id'))
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    thickness: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False)
    width: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False)
    length: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False)
    price_per_mbf: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_bf: Mapped[Decimal] = mapped_column(Numeric(14, 3), nullable=False, default=Decimal('0'), server_default='0')
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal('0'), server_default='0')
    total_tax: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal('0'), server_default='0')
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal('0'), server_default='0')
    distribution_number: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
