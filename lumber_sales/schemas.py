from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lumber_sales.models import AddressType, TicketStatus, TicketType
from lumber_sales.services.distribution_service import normalize_species_id


class TicketItemIn(BaseModel):
    species_id: int | None = None
    quantity: int = Field(gt=0)
    thickness: Decimal = Field(gt=0)
    width: Decimal = Field(gt=0)
    length: Decimal = Field(gt=0)
    price_per_mbf: Decimal = Field(gt=0)
    total_bf: Decimal = Decimal('0')
    tax_amount: Decimal = Decimal('0')
    total_tax: Decimal = Decimal('0')
    total_amount: Decimal = Decimal('0')

    @field_validator('species_id', mode='before')
    @classmethod
    def _blank_species_is_none(cls, value):
        # The ticket form posts "" for an unselected species.
        if isinstance(value, (str, int)) or value is None:
            return normalize_species_id(value)
        return value


class TicketIn(BaseModel):
    id: str | None = None
    customer_name: str = Field(min_length=1)
    customer_phone: str = ''
    date: dt.date
    due_date: dt.date | None = None
    party_id: int | None = None
    billing_address_id: int | None = None
    shipping_address_id: int | None = None
    ship_via_id: int | None = None
    sales_tax_id: int | None = None
    ticket_type: TicketType = TicketType.INVOICE
    purchase_order: str | None = None
    shipping_attention: str | None = None
    total_freight: Decimal = Decimal('0')
    status: TicketStatus = TicketStatus.DRAFT
    total_bf: Decimal = Decimal('0')
    total_tax: Decimal = Decimal('0')
    total_amount: Decimal = Decimal('0')
    items: list[TicketItemIn] = Field(default_factory=list)


class TicketItemOut(BaseModel):
    id: int
    ticket_id: str
    species_id: int | None = None
    quantity: int
    thickness: Decimal
    width: Decimal
    length: Decimal
    price_per_mbf: Decimal
    total_bf: Decimal
    tax_amount: Decimal
    total_tax: Decimal
    total_amount: Decimal
    distribution_number: int
    species_name: str | None = None
    species_list_name: str | None = None
    species_number: str | None = None


class TicketSummary(BaseModel):
    id: str
    invoice_number: int
    party_id: int | None = None
    billing_address_id: int | None = None
    shipping_address_id: int | None = None
    ship_via_id: int | None = None
    sales_tax_id: int | None = None
    customer_name: str
    customer_phone: str
    date: dt.date
    due_date: dt.date | None = None
    ticket_type: TicketType
    purchase_order: str | None = None
    shipping_attention: str | None = None
    total_freight: Decimal
    status: TicketStatus
    total_bf: Decimal
    total_tax: Decimal
    total_amount: Decimal
    distribution_total: int
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None
    party_name: str | None = None
    party_phone: str | None = None
    ship_via_name: str | None = None
    sales_tax_name: str | None = None
    sales_tax_rate: Decimal | None = None


class TicketDetail(TicketSummary):
    billing_address1: str | None = None
    billing_address2: str | None = None
    billing_city: str | None = None
    billing_state: str | None = None
    billing_county: str | None = None
    billing_postal_code: str | None = None
    shipping_address1: str | None = None
    shipping_address2: str | None = None
    shipping_city: str | None = None
    shipping_state: str | None = None
    shipping_county: str | None = None
    shipping_postal_code: str | None = None
    ship_via_description: str | None = None
    sales_tax_county: str | None = None
    sales_tax_state: str | None = None
    items: list[TicketItemOut] = Field(default_factory=list)


class PartyIn(BaseModel):
    party_number: str = Field(min_length=1)
    name: str = Field(min_length=1)
    phone: str | None = None
    email: str | None = None
    notes: str | None = None


class PartyTypeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None


class PartyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    party_number: str
    name: str
    list_name: str
    phone: str | None = None
    email: str | None = None
    notes: str | None = None


class AddressIn(BaseModel):
    address_line1: str = Field(min_length=1)
    address_line2: str | None = None
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    county: str | None = None
    postal_code: str = Field(min_length=1)
    country: str = 'USA'
    sales_tax_id: int | None = None
    party_id: int | None = None
    address_type: AddressType = AddressType.BOTH
    is_default: bool = False


class AddressOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    county: str | None = None
    postal_code: str
    country: str
    sales_tax_id: int | None = None


class PartyAddressOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    address: AddressOut
    address_type: AddressType
    is_default: bool


class PartyAddressLinkIn(BaseModel):
    address_type: AddressType = AddressType.BOTH
    is_default: bool = False


class PartyDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    party: PartyOut
    addresses: list[PartyAddressOut]
    types: list[PartyTypeOut]


class CustomerIn(BaseModel):
    party_id: int
    default_billing_address_id: int | None = None
    default_shipping_address_id: int | None = None
    default_ship_via_id: int | None = None
    sales_tax_exempt: bool = False


class CustomerUpdate(BaseModel):
    default_billing_address_id: int | None = None
    default_shipping_address_id: int | None = None
    default_ship_via_id: int | None = None
    sales_tax_exempt: bool = False


class CustomerOut(BaseModel):
    id: int
    party_id: int
    party_number: str
    name: str
    list_name: str
    phone: str | None = None
    email: str | None = None
    default_billing_address_id: int | None = None
    default_shipping_address_id: int | None = None
    default_ship_via_id: int | None = None
    sales_tax_exempt: bool


class CustomerDetail(CustomerOut):
    model_config = ConfigDict(from_attributes=True)

    default_billing_address: AddressOut | None = None
    default_shipping_address: AddressOut | None = None
    addresses: list[PartyAddressOut] = Field(default_factory=list)


class SpeciesIn(BaseModel):
    species_number: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str | None = None


class SpeciesOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    species_number: str
    name: str
    list_name: str
    description: str | None = None


class ShipViaIn(BaseModel):
    name: str = Field(min_length=1)
    description: str | None = None


class ShipViaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None


class SalesTaxIn(BaseModel):
    name: str = Field(min_length=1)
    county: str = Field(min_length=1)
    state: str = Field(min_length=2, max_length=2)
    tax_rate: Decimal = Field(ge=0)
    effective_date: dt.date


class SalesTaxOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    county: str
    state: str
    tax_rate: Decimal
    effective_date: dt.date


class HealthOut(BaseModel):
    status: str
    message: str
    version: str
