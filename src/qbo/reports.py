"""Helpers for parsing QBO TrialBalance report payloads.

These functions are deterministic so they can be unit-tested without calling
QuickBooks.

QBO reports return nested JSON with rows in `Rows.Row[*]`. In a TrialBalance,
data rows carry `ColData` whose first cell is the account (`{"id", "value"}`)
and whose remaining cells are the debit/credit amounts; the grand total comes
as a `Summary` row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from qbo.dates import parse_date
from qbo.errors import DecodeError


@dataclass(frozen=True, slots=True)
class ReportOption:
    name: str
    value: str


@dataclass(frozen=True, slots=True)
class TrialBalanceHeader:
    report_name: str = ""
    report_basis: str = ""
    date_macro: str = ""
    start_period: str = ""
    end_period: str = ""
    currency: str = ""
    time: datetime | None = None
    options: tuple[ReportOption, ...] = ()


@dataclass(frozen=True, slots=True)
class ReportColumn:
    col_type: str
    col_title: str


@dataclass(frozen=True, slots=True)
class TrialBalanceRow:
    account_id: str
    account_name: str
    values: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class TrialBalanceTotal:
    group: str = ""
    type: str = ""
    values: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TrialBalance:
    header: TrialBalanceHeader
    columns: tuple[ReportColumn, ...] = ()
    rows: tuple[TrialBalanceRow, ...] = ()
    total: TrialBalanceTotal = field(default_factory=TrialBalanceTotal)


@dataclass(frozen=True, slots=True)
class TrialBalanceQueryParams:
    """Optional TrialBalance query parameters; unset ones use the API defaults."""

    accounting_method: str | None = None  # Cash or Accrual
    start_date: str | None = None
    end_date: str | None = None
    # e.g. "This Month"; ignored by QBO when start/end dates are set.
    date_macro: str | None = None
    sort_order: str | None = None  # ascend or descend
    summarize_column_by: str | None = None

    def to_params(self) -> dict[str, str]:
        params = {
            "accounting_method": self.accounting_method,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "date_macro": self.date_macro,
            "sort_order": self.sort_order,
            "summarize_column_by": self.summarize_column_by,
        }
        return {k: v for k, v in params.items() if v is not None}


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _nested_list(obj: dict[str, Any], outer: str, inner: str) -> list[Any]:
    container = obj.get(outer)
    if not isinstance(container, dict):
        return []
    items = container.get(inner)
    return items if isinstance(items, list) else []


def _cell_values(col_data: Iterable[Any]) -> tuple[str, ...]:
    return tuple(_str(c.get("value")) if isinstance(c, dict) else "" for c in col_data)


def _parse_header(raw: Any) -> TrialBalanceHeader:
    if not isinstance(raw, dict):
        return TrialBalanceHeader()

    options = tuple(
        ReportOption(
            name=_str(o.get("Name", o.get("name"))),
            value=_str(o.get("Value", o.get("value"))),
        )
        for o in (raw.get("Option") or [])
        if isinstance(o, dict)
    )
    raw_time = raw.get("Time")
    try:
        report_time = parse_date(str(raw_time)) if raw_time else None
    except ValueError as exc:
        raise DecodeError(f"Invalid report time: {raw_time!r}") from exc

    return TrialBalanceHeader(
        report_name=_str(raw.get("ReportName")),
        report_basis=_str(raw.get("ReportBasis")),
        date_macro=_str(raw.get("DateMacro")),
        start_period=_str(raw.get("StartPeriod")),
        end_period=_str(raw.get("EndPeriod")),
        currency=_str(raw.get("Currency")),
        time=report_time,
        options=options,
    )


def _parse_data_row(col_data: list[Any]) -> TrialBalanceRow:
    account_id = ""
    account_name = ""
    values: list[str] = []
    for cell in col_data:
        if not isinstance(cell, dict):
            raise DecodeError("TrialBalance ColData cells must be JSON objects")
        # The cell carrying "id" is the account header; the rest are amounts.
        if "id" in cell:
            account_id = _str(cell.get("id"))
            account_name = _str(cell.get("value"))
        else:
            values.append(_str(cell.get("value")))
    return TrialBalanceRow(account_id=account_id, account_name=account_name, values=tuple(values))


def parse_trial_balance(report: dict[str, Any]) -> TrialBalance:
    """Parse a TrialBalance report response."""

    if not isinstance(report, dict):
        raise DecodeError("TrialBalance report must be a JSON object")

    cols = _nested_list(report, "Columns", "Column")
    columns = tuple(
        ReportColumn(col_type=_str(c.get("ColType")), col_title=_str(c.get("ColTitle")))
        for c in cols
        if isinstance(c, dict)
    )

    rows: list[TrialBalanceRow] = []
    total = TrialBalanceTotal()
    for row in _nested_list(report, "Rows", "Row"):
        if not isinstance(row, dict):
            raise DecodeError("TrialBalance rows must be JSON objects")

        col_data = row.get("ColData")
        if isinstance(col_data, list):
            rows.append(_parse_data_row(col_data))
            continue

        summary = row.get("Summary")
        if isinstance(summary, dict):
            total = TrialBalanceTotal(
                group=_str(row.get("group")),
                type=_str(row.get("type")),
                values=_cell_values(summary.get("ColData") or []),
            )

    return TrialBalance(
        header=_parse_header(report.get("Header")),
        columns=columns,
        rows=tuple(rows),
        total=total,
    )


def find_row(trial_balance: TrialBalance, name_substring: str) -> TrialBalanceRow | None:
    """Return the first row whose account name contains `name_substring` (case-insensitive)."""

    needle = name_substring.lower()
    for row in trial_balance.rows:
        if needle in row.account_name.lower():
            return row
    return None
