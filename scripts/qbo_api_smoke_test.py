"""Smoke test: call a few QuickBooks Online APIs using saved OAuth tokens.

Prereqs:
- A token file from the QBO OAuth consent flow (default `.env_qbo_tokens.json`)

Env vars:
- QBO_CLIENT_ID
- QBO_CLIENT_SECRET
- QBO_ENVIRONMENT (sandbox|production) [default: sandbox]
- QBO_TOKENS_PATH (optional)           [default: .env_qbo_tokens.json]

Optional:
- QBO_CDC_SINCE=YYYY-MM-DD             change feed watermark [default: 7 days ago]
- QBO_REPORT_END_DATE=YYYY-MM-DD       TrialBalance period end

Run:
  python scripts/qbo_api_smoke_test.py
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone

from qbo.cdc import CDC_ENTITY_TYPES
from qbo.client import QBOClient
from qbo.dates import parse_date
from qbo.errors import NotFoundError
from qbo.reports import TrialBalanceQueryParams, find_row

logging.basicConfig(level=logging.DEBUG if os.environ.get("QBO_DEBUG") else logging.INFO)


def main() -> None:
    qbo = QBOClient.from_env()

    print("Calling CompanyInfo...")
    company = qbo.find_company_info()
    print("✅ Company:", company.company_name, "|", company.id)

    try:
        accounts = qbo.find_all("Account")
    except NotFoundError:
        accounts = []
    print(f"✅ Accounts: {len(accounts)}")

    since_raw = os.environ.get("QBO_CDC_SINCE")
    since = parse_date(since_raw) if since_raw else datetime.now(timezone.utc) - timedelta(days=7)
    print(f"\nCalling CDC since {since.isoformat()}...")
    changes = qbo.get_changed_entities(["Account", "Customer", "Invoice", "Vendor"], since)
    for name in ("Account", "Customer", "Invoice", "Vendor"):
        records = changes.for_entity(name)
        deleted = sum(1 for r in records if r.is_deleted)
        print(f"{name}: {len(records)} changed ({deleted} deleted)")

    end_date = os.environ.get("QBO_REPORT_END_DATE")
    if end_date:
        print(f"\nCalling TrialBalance report for end_date={end_date}...")
        tb = qbo.get_trial_balance(TrialBalanceQueryParams(end_date=end_date))
        print(f"✅ Parsed {len(tb.rows)} trial balance rows; total={tb.total.values}")

        for key in ["Undeposited Funds", "Petty Cash"]:
            row = find_row(tb, key)
            print(f"{key}: {row.values if row is not None else '[not found in report]'}")
    else:
        print("\nSkipped TrialBalance report (set QBO_REPORT_END_DATE=YYYY-MM-DD to enable).")

    print(f"\nCDC-capable entity types: {', '.join(CDC_ENTITY_TYPES)}")


if __name__ == "__main__":
    main()
