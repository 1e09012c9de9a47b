"""Typed client for the QuickBooks Online (QBO) accounting API.

Modules stay small and testable:
- `client`: authenticated transport + entity operations
- `pagination`: count-then-page reads over the Query API
- `cdc`: change feed decoding (live records and tombstones)
- `models` / `entities`: pydantic shapes and the entity catalog
"""
