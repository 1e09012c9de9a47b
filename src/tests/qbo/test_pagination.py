from __future__ import annotations

import re

import pytest

from qbo.errors import DecodeError, NotFoundError, TransportError
from qbo.models import Account, Vendor
from qbo.pagination import QUERY_PAGE_SIZE, count_entities, fetch_all, query_entities

_PAGE_RE = re.compile(r"STARTPOSITION (\d+) MAXRESULTS (\d+)")


def _paged_accounts(total: int):
    """Serve COUNT(*) and ORDERBY Id pages over Accounts with Ids 1..total."""

    def handler(path, params):
        assert path == "query"
        statement = params["query"]
        if statement.startswith("SELECT COUNT(*)"):
            return {"QueryResponse": {"totalCount": total}}

        m = _PAGE_RE.search(statement)
        assert m is not None, statement
        start, size = int(m.group(1)), int(m.group(2))
        ids = range(start, min(start + size - 1, total) + 1)
        return {
            "QueryResponse": {
                "Account": [{"Id": str(i), "Name": f"Account {i}"} for i in ids],
                "startPosition": start,
                "maxResults": len(ids),
            }
        }

    return handler


def test_fetch_all_issues_count_then_ceil_pages(fake_transport) -> None:
    transport = fake_transport(_paged_accounts(2500))

    accounts = fetch_all(transport, "Account")

    assert len(transport.calls) == 1 + 3
    assert [a.id for a in accounts] == [str(i) for i in range(1, 2501)]
    assert all(isinstance(a, Account) for a in accounts)

    statements = [params["query"] for _, params in transport.calls]
    assert statements[0] == "SELECT COUNT(*) FROM Account"
    assert statements[1:] == [
        "SELECT * FROM Account ORDERBY Id STARTPOSITION 1 MAXRESULTS 1000",
        "SELECT * FROM Account ORDERBY Id STARTPOSITION 1001 MAXRESULTS 1000",
        "SELECT * FROM Account ORDERBY Id STARTPOSITION 2001 MAXRESULTS 1000",
    ]


def test_fetch_all_exact_multiple_of_page_size(fake_transport) -> None:
    transport = fake_transport(_paged_accounts(2 * QUERY_PAGE_SIZE))

    accounts = fetch_all(transport, "Account")

    assert len(accounts) == 2000
    assert len(transport.calls) == 3
    assert len({a.id for a in accounts}) == 2000


def test_fetch_all_small_page_size(fake_transport) -> None:
    transport = fake_transport(_paged_accounts(7))

    accounts = fetch_all(transport, "Account", page_size=3)

    assert [a.id for a in accounts] == ["1", "2", "3", "4", "5", "6", "7"]
    assert len(transport.calls) == 1 + 3


def test_fetch_all_zero_total_fails_before_paging(fake_transport) -> None:
    transport = fake_transport(_paged_accounts(0))

    with pytest.raises(NotFoundError):
        fetch_all(transport, "Account")

    assert len(transport.calls) == 1


def test_fetch_all_missing_total_count_is_zero(fake_transport) -> None:
    transport = fake_transport(lambda path, params: {"QueryResponse": {}})

    with pytest.raises(NotFoundError):
        fetch_all(transport, "Vendor")
    assert len(transport.calls) == 1


def test_fetch_all_passes_filter_through(fake_transport) -> None:
    def handler(path, params):
        if "COUNT(*)" in params["query"]:
            return {"QueryResponse": {"totalCount": 1}}
        return {"QueryResponse": {"Vendor": [{"Id": "30", "DisplayName": "Books by Bessie"}]}}

    transport = fake_transport(handler)

    vendors = fetch_all(transport, "Vendor", where="Active = true AND DisplayName LIKE 'B%'")

    assert isinstance(vendors[0], Vendor)
    assert vendors[0].display_name == "Books by Bessie"
    assert transport.calls[0][1]["query"] == (
        "SELECT COUNT(*) FROM Vendor WHERE Active = true AND DisplayName LIKE 'B%'"
    )
    assert transport.calls[1][1]["query"] == (
        "SELECT * FROM Vendor WHERE Active = true AND DisplayName LIKE 'B%' "
        "ORDERBY Id STARTPOSITION 1 MAXRESULTS 1000"
    )


def test_fetch_all_empty_page_mid_pagination_fails(fake_transport) -> None:
    def handler(path, params):
        statement = params["query"]
        if "COUNT(*)" in statement:
            return {"QueryResponse": {"totalCount": 5}}
        if "STARTPOSITION 1 " in statement:
            return {"QueryResponse": {"Account": [{"Id": "1"}, {"Id": "2"}]}}
        return {"QueryResponse": {"startPosition": 3, "maxResults": 0}}

    transport = fake_transport(handler)

    with pytest.raises(NotFoundError):
        fetch_all(transport, "Account", page_size=2)
    assert len(transport.calls) == 3


def test_fetch_all_propagates_transport_errors(fake_transport) -> None:
    def handler(path, params):
        raise TransportError("HTTP 500: boom", status_code=500, response_body="boom")

    with pytest.raises(TransportError) as exc_info:
        fetch_all(fake_transport(handler), "Account")
    assert exc_info.value.status_code == 500


def test_fetch_all_wraps_invalid_records(fake_transport) -> None:
    def handler(path, params):
        if "COUNT(*)" in params["query"]:
            return {"QueryResponse": {"totalCount": 1}}
        return {"QueryResponse": {"Account": [{"Id": "1", "MetaData": "not-an-object"}]}}

    with pytest.raises(DecodeError) as exc_info:
        fetch_all(fake_transport(handler), "Account")
    assert exc_info.value.entity_type == "Account"


def test_count_entities_rejects_missing_query_response(fake_transport) -> None:
    with pytest.raises(DecodeError):
        count_entities(fake_transport(lambda path, params: {"Fault": {}}), "Account")


def test_fetch_all_rejects_unknown_entity_type(fake_transport) -> None:
    transport = fake_transport(_paged_accounts(1))
    with pytest.raises(ValueError):
        fetch_all(transport, "Spaceship")
    assert transport.calls == []


def test_query_entities_single_request_no_paging(fake_transport) -> None:
    transport = fake_transport(
        lambda path, params: {"QueryResponse": {"Account": [{"Id": "7", "Name": "Petty Cash"}]}}
    )

    statement = "SELECT * FROM Account WHERE Name = 'Petty Cash' MAXRESULTS 5"
    accounts = query_entities(transport, "Account", statement)

    assert [a.name for a in accounts] == ["Petty Cash"]
    assert transport.calls == [("query", {"query": statement})]


def test_query_entities_empty_result_is_not_found(fake_transport) -> None:
    transport = fake_transport(lambda path, params: {"QueryResponse": {}})
    with pytest.raises(NotFoundError):
        query_entities(transport, "Invoice", "SELECT * FROM Invoice WHERE Id = '404'")
