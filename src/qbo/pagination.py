"""Paginated reads over the QBO Query API.

QBO caps a query page at 1000 rows. `fetch_all` first asks for the total with
`SELECT COUNT(*)`, then walks `STARTPOSITION`/`MAXRESULTS` pages ordered by
Id until the counted total is covered. The count is taken once and not
re-checked while paging.

`transport` is anything with `get(path, params) -> dict` returning decoded
JSON, normally a `qbo.client.QBOClient`.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from qbo.entities import EntityType, get_entity_type
from qbo.errors import DecodeError, NotFoundError
from qbo.models import Entity

logger = logging.getLogger(__name__)

QUERY_PAGE_SIZE = 1000


def _where_clause(where: str | None) -> str:
    return f" WHERE {where}" if where else ""


def _run_query(transport: Any, statement: str) -> dict[str, Any]:
    resp = transport.get("query", {"query": statement})
    qr = resp.get("QueryResponse") if isinstance(resp, dict) else None
    if not isinstance(qr, dict):
        raise DecodeError(f"Query response has no QueryResponse object: {statement}")
    return qr


def _decode_collection(entity_type: EntityType, qr: dict[str, Any]) -> list[Entity]:
    records = qr.get(entity_type.name)
    if not records:
        raise NotFoundError(f"No {entity_type.name} records could be found")
    if not isinstance(records, list):
        raise DecodeError(
            f"QueryResponse.{entity_type.name} must be a JSON array",
            entity_type=entity_type.name,
        )
    try:
        return [entity_type.model.model_validate(r) for r in records]
    except ValidationError as exc:
        raise DecodeError(
            f"Invalid {entity_type.name} record: {exc}", entity_type=entity_type.name
        ) from exc


def count_entities(transport: Any, entity_type: str, *, where: str | None = None) -> int:
    """Return `totalCount` for `SELECT COUNT(*) FROM <entity_type> [WHERE ...]`."""

    et = get_entity_type(entity_type)
    qr = _run_query(transport, f"SELECT COUNT(*) FROM {et.name}{_where_clause(where)}")

    total = qr.get("totalCount", 0)
    if isinstance(total, bool) or not isinstance(total, int) or total < 0:
        raise DecodeError(f"Invalid totalCount for {et.name}: {total!r}", entity_type=et.name)

    logger.debug("Counted %d %s records", total, et.name)
    return total


def fetch_all(
    transport: Any,
    entity_type: str,
    *,
    where: str | None = None,
    page_size: int = QUERY_PAGE_SIZE,
) -> list[Entity]:
    """Fetch every record of `entity_type`, optionally filtered by `where`.

    `where` is passed through to the query language untouched, e.g.
    `"Active = true"`. Raises NotFoundError when the count is zero (no page
    is requested then) or when any page comes back empty.
    """

    if page_size <= 0:
        raise ValueError("page_size must be > 0")

    et = get_entity_type(entity_type)
    total = count_entities(transport, et.name, where=where)
    if total == 0:
        raise NotFoundError(f"No {et.name} records could be found")

    results: list[Entity] = []
    for offset in range(0, total, page_size):
        statement = (
            f"SELECT * FROM {et.name}{_where_clause(where)} ORDERBY Id "
            f"STARTPOSITION {offset + 1} MAXRESULTS {page_size}"
        )
        page = _decode_collection(et, _run_query(transport, statement))
        logger.debug("Fetched %s page at offset %d (%d records)", et.name, offset, len(page))
        results.extend(page)

    return results


def query_entities(transport: Any, entity_type: str, statement: str) -> list[Entity]:
    """Run a caller-written query and decode the single page it returns.

    No pagination happens here; bound the result with MAXRESULTS yourself.
    """

    et = get_entity_type(entity_type)
    return _decode_collection(et, _run_query(transport, statement))
