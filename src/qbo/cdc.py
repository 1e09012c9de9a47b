"""Change Data Capture (CDC) feed.

`GET cdc?entities=Estimate,Customer&changedSince=...` returns everything
created, updated or deleted since the watermark:

    {
      "CDCResponse": [
        {"QueryResponse": [
          {"Estimate": [...], "startPosition": 1, "maxResults": 3},
          {"Customer": [...], "startPosition": 1, "maxResults": 3}
        ]}
      ],
      "time": "2026-02-28T18:20:10.657-08:00"
    }

Each QueryResponse element carries one entity bucket next to paging metadata.
Buckets are routed by their key to the matching list on `ChangeFeedResult`;
records stay in server order and are not de-duplicated by Id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Iterable

from qbo import models
from qbo.dates import format_date, parse_date
from qbo.errors import DecodeError, ProtocolError
from qbo.maybe_deleted import MaybeDeleted, decode_maybe_deleted_list

logger = logging.getLogger(__name__)

# Non-entity keys that may sit next to the bucket in a QueryResponse element.
METADATA_KEYS = frozenset({"startPosition", "maxResults", "maxResult", "totalCount"})


@dataclass(slots=True)
class ChangeFeedResult:
    accounts: list[MaybeDeleted[models.Account]] = field(default_factory=list)
    attachables: list[MaybeDeleted[models.Attachable]] = field(default_factory=list)
    bills: list[MaybeDeleted[models.Bill]] = field(default_factory=list)
    classes: list[MaybeDeleted[models.Class]] = field(default_factory=list)
    company_infos: list[MaybeDeleted[models.CompanyInfo]] = field(default_factory=list)
    credit_memos: list[MaybeDeleted[models.CreditMemo]] = field(default_factory=list)
    customers: list[MaybeDeleted[models.Customer]] = field(default_factory=list)
    customer_types: list[MaybeDeleted[models.CustomerType]] = field(default_factory=list)
    deposits: list[MaybeDeleted[models.Deposit]] = field(default_factory=list)
    employees: list[MaybeDeleted[models.Employee]] = field(default_factory=list)
    estimates: list[MaybeDeleted[models.Estimate]] = field(default_factory=list)
    invoices: list[MaybeDeleted[models.Invoice]] = field(default_factory=list)
    items: list[MaybeDeleted[models.Item]] = field(default_factory=list)
    payments: list[MaybeDeleted[models.Payment]] = field(default_factory=list)
    vendors: list[MaybeDeleted[models.Vendor]] = field(default_factory=list)
    time: datetime | None = None

    def for_entity(self, entity_type: str) -> list[MaybeDeleted[Any]]:
        """Return the list holding `entity_type` records (e.g. "Estimate")."""

        try:
            attr, _ = CDC_ENTITY_TYPES[entity_type]
        except KeyError:
            raise ValueError(f"{entity_type!r} is not available from the CDC feed") from None
        return getattr(self, attr)


# entity name -> (ChangeFeedResult attribute, model)
CDC_ENTITY_TYPES: dict[str, tuple[str, type[models.Entity]]] = {
    "Account": ("accounts", models.Account),
    "Attachable": ("attachables", models.Attachable),
    "Bill": ("bills", models.Bill),
    "Class": ("classes", models.Class),
    "CompanyInfo": ("company_infos", models.CompanyInfo),
    "CreditMemo": ("credit_memos", models.CreditMemo),
    "Customer": ("customers", models.Customer),
    "CustomerType": ("customer_types", models.CustomerType),
    "Deposit": ("deposits", models.Deposit),
    "Employee": ("employees", models.Employee),
    "Estimate": ("estimates", models.Estimate),
    "Invoice": ("invoices", models.Invoice),
    "Item": ("items", models.Item),
    "Payment": ("payments", models.Payment),
    "Vendor": ("vendors", models.Vendor),
}


def _build_dispatch(result: ChangeFeedResult) -> dict[str, Callable[[Any], None]]:
    def appender(name: str, attr: str, model: type[models.Entity]) -> Callable[[Any], None]:
        def append(records: Any) -> None:
            getattr(result, attr).extend(decode_maybe_deleted_list(model, records, entity_type=name))

        return append

    return {name: appender(name, attr, model) for name, (attr, model) in CDC_ENTITY_TYPES.items()}


def _as_list(value: Any, what: str) -> list[Any]:
    if value is None:
        raise DecodeError(f"CDC response is missing {what}")
    if not isinstance(value, list):
        raise DecodeError(f"{what} must be a JSON array, got {type(value).__name__}")
    return value


def decode_change_feed(payload: Any) -> ChangeFeedResult:
    """Decode a raw CDC response body into a `ChangeFeedResult`."""

    if not isinstance(payload, dict):
        raise DecodeError("CDC response must be a JSON object")

    result = ChangeFeedResult()
    dispatch = _build_dispatch(result)

    for wrapper in _as_list(payload.get("CDCResponse"), "CDCResponse"):
        if not isinstance(wrapper, dict):
            raise DecodeError("CDCResponse entries must be JSON objects")

        for element in _as_list(wrapper.get("QueryResponse"), "CDCResponse[].QueryResponse"):
            if not isinstance(element, dict):
                raise DecodeError("CDC QueryResponse elements must be JSON objects")

            keys = [k for k in element if k not in METADATA_KEYS]
            for key in keys:
                if key not in dispatch:
                    raise ProtocolError(f"Unexpected entity type in CDC response: {key!r}", key=key)
            if len(keys) > 1:
                raise ProtocolError(
                    f"CDC QueryResponse element contained {len(keys)} entity types, expected 1: "
                    f"{', '.join(keys)}"
                )

            for key in keys:
                try:
                    dispatch[key](element[key])
                except DecodeError as exc:
                    raise DecodeError(f"Failed to decode CDC {key!r} bucket: {exc}", entity_type=key) from exc
                logger.debug("CDC bucket %s: %d records", key, len(element[key]))

    raw_time = payload.get("time")
    if raw_time is not None:
        try:
            result.time = parse_date(str(raw_time))
        except ValueError as exc:
            raise DecodeError(f"Invalid CDC response time: {raw_time!r}") from exc

    return result


def get_changed_entities(
    transport: Any,
    entities: Iterable[str],
    changed_since: datetime | date,
) -> ChangeFeedResult:
    """Fetch everything of `entities` that changed since `changed_since`.

    Every name must be a CDC-capable type (see CDC_ENTITY_TYPES). One request
    is made; result lists for types absent from the response stay empty.
    """

    names = list(entities)
    if not names:
        raise ValueError("entities must name at least one entity type")
    unsupported = [n for n in names if n not in CDC_ENTITY_TYPES]
    if unsupported:
        raise ValueError(f"Entity types not available from the CDC feed: {', '.join(unsupported)}")

    payload = transport.get(
        "cdc",
        {
            "entities": ",".join(names),
            "changedSince": format_date(changed_since),
        },
    )
    return decode_change_feed(payload)
