"""Pydantic shapes for QBO entities.

The models only declare the fields the client itself relies on (identity,
sync token, timestamps) plus a handful of identifying fields per type.
Everything else the API sends is kept as extra attributes, so a decoded
entity can be posted back without losing data.

Wire names are PascalCase (`SyncToken`, `TotalAmt`); Python attributes are
snake_case. Either spelling is accepted when building a model.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal

from qbo.dates import QBODate


class QBOModel(BaseModel):
    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        alias_generator=to_pascal,
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize with wire names, dropping unset (None) fields."""

        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ReferenceType(QBOModel):
    """Reference to another object, e.g. `{"value": "18", "name": "Paulsen"}`."""

    model_config = ConfigDict(alias_generator=None)

    value: str | None = None
    name: str | None = None
    type: str | None = None


class MetaData(QBOModel):
    create_time: QBODate | None = None
    last_updated_time: QBODate | None = None


class Entity(QBOModel):
    id: str | None = None
    sync_token: str | None = None
    meta_data: MetaData | None = None


class Account(Entity):
    name: str | None = None
    fully_qualified_name: str | None = None
    classification: str | None = None
    account_type: str | None = None
    account_sub_type: str | None = None
    acct_num: str | None = None
    current_balance: float | None = None
    active: bool | None = None
    sub_account: bool | None = None
    parent_ref: ReferenceType | None = None


class Attachable(Entity):
    file_name: str | None = None
    content_type: str | None = None
    note: str | None = None


class Bill(Entity):
    vendor_ref: ReferenceType | None = None
    doc_number: str | None = None
    txn_date: str | None = None
    due_date: str | None = None
    total_amt: float | None = None
    balance: float | None = None


class BillPayment(Entity):
    vendor_ref: ReferenceType | None = None
    pay_type: str | None = None
    txn_date: str | None = None
    total_amt: float | None = None


class Budget(Entity):
    name: str | None = None
    budget_type: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    active: bool | None = None


class Class(Entity):
    name: str | None = None
    fully_qualified_name: str | None = None
    sub_class: bool | None = None
    active: bool | None = None


class CompanyInfo(Entity):
    company_name: str | None = None
    legal_name: str | None = None
    country: str | None = None


class CreditMemo(Entity):
    customer_ref: ReferenceType | None = None
    doc_number: str | None = None
    txn_date: str | None = None
    total_amt: float | None = None
    remaining_credit: float | None = None


class Customer(Entity):
    display_name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    company_name: str | None = None
    balance: float | None = None
    active: bool | None = None


class CustomerType(Entity):
    name: str | None = None
    active: bool | None = None


class Department(Entity):
    name: str | None = None
    sub_department: bool | None = None
    active: bool | None = None


class Deposit(Entity):
    deposit_to_account_ref: ReferenceType | None = None
    txn_date: str | None = None
    total_amt: float | None = None


class Employee(Entity):
    display_name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    active: bool | None = None


class Estimate(Entity):
    customer_ref: ReferenceType | None = None
    doc_number: str | None = None
    txn_date: str | None = None
    txn_status: str | None = None
    total_amt: float | None = None


class ExchangeRate(Entity):
    source_currency_code: str | None = None
    target_currency_code: str | None = None
    rate: float | None = None
    as_of_date: str | None = None


class Invoice(Entity):
    customer_ref: ReferenceType | None = None
    doc_number: str | None = None
    txn_date: str | None = None
    due_date: str | None = None
    total_amt: float | None = None
    balance: float | None = None


class Item(Entity):
    name: str | None = None
    type: str | None = None
    unit_price: float | None = None
    active: bool | None = None


class JournalEntry(Entity):
    doc_number: str | None = None
    txn_date: str | None = None
    adjustment: bool | None = None


class Payment(Entity):
    customer_ref: ReferenceType | None = None
    txn_date: str | None = None
    total_amt: float | None = None
    unapplied_amt: float | None = None


class PaymentMethod(Entity):
    name: str | None = None
    type: str | None = None
    active: bool | None = None


class Purchase(Entity):
    account_ref: ReferenceType | None = None
    payment_type: str | None = None
    txn_date: str | None = None
    total_amt: float | None = None


class PurchaseOrder(Entity):
    vendor_ref: ReferenceType | None = None
    po_status: str | None = Field(default=None, alias="POStatus")
    txn_date: str | None = None
    total_amt: float | None = None


class RefundReceipt(Entity):
    customer_ref: ReferenceType | None = None
    doc_number: str | None = None
    txn_date: str | None = None
    total_amt: float | None = None


class SalesReceipt(Entity):
    customer_ref: ReferenceType | None = None
    doc_number: str | None = None
    txn_date: str | None = None
    total_amt: float | None = None


class TaxAgency(Entity):
    display_name: str | None = None


class TaxCode(Entity):
    name: str | None = None
    taxable: bool | None = None
    active: bool | None = None


class TaxRate(Entity):
    name: str | None = None
    rate_value: float | None = None
    active: bool | None = None


class Term(Entity):
    name: str | None = None
    due_days: int | None = None
    active: bool | None = None


class TimeActivity(Entity):
    name_of: str | None = None
    txn_date: str | None = None
    hours: int | None = None
    minutes: int | None = None


class Transfer(Entity):
    from_account_ref: ReferenceType | None = None
    to_account_ref: ReferenceType | None = None
    txn_date: str | None = None
    amount: float | None = None


class Vendor(Entity):
    display_name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    company_name: str | None = None
    acct_num: str | None = None
    balance: float | None = None
    active: bool | None = None


class VendorCredit(Entity):
    vendor_ref: ReferenceType | None = None
    txn_date: str | None = None
    total_amt: float | None = None
