"""Catalog of QBO entity types the client knows how to address.

Each entry names the entity as the query language and JSON payloads spell it
(`PurchaseOrder`), the URL path segment (`purchaseorder`), the pydantic model
used to decode it, and which write operations the API accepts for it.
"""

from __future__ import annotations

from dataclasses import dataclass

from qbo import models
from qbo.models import Entity


@dataclass(frozen=True, slots=True)
class EntityType:
    name: str
    model: type[Entity]
    creatable: bool = True
    updatable: bool = True
    deletable: bool = False
    voidable: bool = False
    sendable: bool = False

    @property
    def path(self) -> str:
        return self.name.lower()


_CATALOG: tuple[EntityType, ...] = (
    EntityType("Account", models.Account),
    EntityType("Attachable", models.Attachable, deletable=True),
    EntityType("Bill", models.Bill, deletable=True),
    EntityType("BillPayment", models.BillPayment, deletable=True),
    EntityType("Budget", models.Budget, creatable=False, updatable=False),
    EntityType("Class", models.Class),
    EntityType("CompanyInfo", models.CompanyInfo, creatable=False),
    EntityType("CreditMemo", models.CreditMemo, deletable=True),
    EntityType("Customer", models.Customer),
    EntityType("CustomerType", models.CustomerType, creatable=False, updatable=False),
    EntityType("Department", models.Department, deletable=True),
    EntityType("Deposit", models.Deposit, deletable=True),
    EntityType("Employee", models.Employee, deletable=True),
    EntityType("Estimate", models.Estimate, deletable=True, sendable=True),
    EntityType("ExchangeRate", models.ExchangeRate, creatable=False, updatable=False),
    EntityType("Invoice", models.Invoice, deletable=True, voidable=True, sendable=True),
    EntityType("Item", models.Item, deletable=True),
    EntityType("JournalEntry", models.JournalEntry, deletable=True),
    EntityType("Payment", models.Payment, deletable=True, voidable=True),
    EntityType("PaymentMethod", models.PaymentMethod, deletable=True),
    EntityType("Purchase", models.Purchase, deletable=True),
    EntityType("PurchaseOrder", models.PurchaseOrder, deletable=True),
    EntityType("RefundReceipt", models.RefundReceipt, deletable=True, voidable=True),
    EntityType("SalesReceipt", models.SalesReceipt, deletable=True, voidable=True, sendable=True),
    EntityType("TaxAgency", models.TaxAgency, updatable=False),
    EntityType("TaxCode", models.TaxCode, creatable=False, updatable=False),
    EntityType("TaxRate", models.TaxRate, creatable=False, updatable=False),
    EntityType("Term", models.Term, deletable=True),
    EntityType("TimeActivity", models.TimeActivity, deletable=True),
    EntityType("Transfer", models.Transfer, deletable=True),
    EntityType("Vendor", models.Vendor, deletable=True),
    EntityType("VendorCredit", models.VendorCredit, deletable=True),
)

ENTITY_TYPES: dict[str, EntityType] = {et.name: et for et in _CATALOG}


def get_entity_type(name: str) -> EntityType:
    try:
        return ENTITY_TYPES[name]
    except KeyError:
        raise ValueError(f"Unknown QBO entity type: {name!r}") from None
