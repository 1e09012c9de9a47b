"""QuickBooks Online (QBO) client.

Purpose
- Authenticated JSON transport (`get`/`post`/`query`) with a single token
  refresh when QBO rejects the access token.
- Entity operations on top of it: create, read by id, list all (paginated),
  raw query, sparse update, delete, void, send, change feed.
- Keep OAuth token handling (load/save/refresh) in one place.

Tokens live in a JSON file written by an external OAuth consent flow.
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable

import requests
from intuitlib.client import AuthClient
from intuitlib.exceptions import AuthClientError
from pydantic import ValidationError

from qbo import cdc, pagination
from qbo.config import QBOSettings, base_url
from qbo.entities import EntityType, get_entity_type
from qbo.errors import DecodeError, NotFoundError, TransportError
from qbo.models import CompanyInfo, Entity, ExchangeRate, QBOModel
from qbo.reports import TrialBalance, TrialBalanceQueryParams, parse_trial_balance

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class QBOAuthTokens:
    environment: str
    realm_id: str
    access_token: str
    refresh_token: str
    id_token: str | None = None
    saved_at_unix: int | None = None


class QBOClient:
    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        environment: str,
        tokens_path: str,
        timeout_seconds: int = 30,
        minorversion: str | None = None,
        debug: bool = False,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._environment = environment
        self._tokens_path = tokens_path
        self._timeout_seconds = timeout_seconds
        self._minorversion = minorversion
        self._debug = debug

    @classmethod
    def from_settings(cls, settings: QBOSettings) -> "QBOClient":
        return cls(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            redirect_uri=settings.redirect_uri,
            environment=settings.environment,
            tokens_path=settings.tokens_path,
            timeout_seconds=settings.timeout_seconds,
            minorversion=settings.minorversion,
            debug=settings.debug,
        )

    @classmethod
    def from_env(cls) -> "QBOClient":
        return cls.from_settings(QBOSettings.from_env())

    # -- tokens -------------------------------------------------------------

    def load_tokens(self) -> QBOAuthTokens:
        if not os.path.exists(self._tokens_path):
            raise FileNotFoundError(
                f"Token file not found: {self._tokens_path}. Complete the QBO OAuth flow first."
            )
        with open(self._tokens_path, "r", encoding="utf-8") as f:
            raw = json.load(f)

        return QBOAuthTokens(
            environment=raw.get("environment") or self._environment,
            realm_id=raw["realm_id"],
            access_token=raw["access_token"],
            refresh_token=raw["refresh_token"],
            id_token=raw.get("id_token"),
            saved_at_unix=raw.get("saved_at_unix"),
        )

    def save_tokens(self, tokens: QBOAuthTokens) -> None:
        payload: dict[str, Any] = {
            "environment": tokens.environment,
            "realm_id": tokens.realm_id,
            "access_token": tokens.access_token,
            "refresh_token": tokens.refresh_token,
            "id_token": tokens.id_token,
            "saved_at_unix": int(time.time()),
        }
        with open(self._tokens_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)

    def refresh_tokens(self, tokens: QBOAuthTokens) -> QBOAuthTokens:
        try:
            auth = AuthClient(
                client_id=self._client_id,
                client_secret=self._client_secret,
                redirect_uri=self._redirect_uri,
                environment=tokens.environment,
                access_token=tokens.access_token,
                refresh_token=tokens.refresh_token,
                realm_id=tokens.realm_id,
                id_token=tokens.id_token,
            )
            auth.refresh(refresh_token=auth.refresh_token)
        except (requests.RequestException, AuthClientError) as e:
            raise TransportError(
                f"QBO token refresh failed: {e}",
                status_code=getattr(e, "status_code", 0),
            ) from e

        if not auth.access_token or not auth.refresh_token:
            raise TransportError(
                "QBO token refresh failed (missing refreshed access_token/refresh_token)"
            )

        updated = QBOAuthTokens(
            environment=tokens.environment,
            realm_id=auth.realm_id or tokens.realm_id,
            access_token=auth.access_token,
            refresh_token=auth.refresh_token,
            id_token=auth.id_token,
            saved_at_unix=int(time.time()),
        )
        self.save_tokens(updated)
        logger.info("Refreshed QBO tokens for realm %s", updated.realm_id)
        return updated

    # -- transport ----------------------------------------------------------

    def _request_json(
        self,
        method: str,
        url: str,
        *,
        bearer_token: str,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {bearer_token}",
            "Accept": "application/json",
        }
        if payload is not None:
            headers["Content-Type"] = "application/json"

        # Safe to log: URL and params only, never tokens.
        if self._debug:
            logger.info("[QBO_DEBUG] %s %s params=%s", method, url, params)
        else:
            logger.debug("%s %s", method, url)

        try:
            resp = requests.request(
                method,
                url,
                headers=headers,
                params=params,
                json=payload,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        if resp.status_code >= 400:
            raise TransportError(
                f"HTTP {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
                response_body=resp.text,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise TransportError(
                f"{method} {url} returned a non-JSON body",
                status_code=resp.status_code,
                response_body=resp.text,
            ) from e

    def _call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        params = dict(params or {})
        if self._minorversion and "minorversion" not in params:
            params["minorversion"] = self._minorversion

        tokens = self.load_tokens()
        url = f"{base_url(tokens.environment)}/v3/company/{tokens.realm_id}/{path}"

        try:
            return self._request_json(
                method, url, bearer_token=tokens.access_token, params=params or None, payload=payload
            )
        except TransportError as e:
            # Common case: expired access token
            if not e.is_auth_error:
                raise
            tokens = self.refresh_tokens(tokens)
            return self._request_json(
                method, url, bearer_token=tokens.access_token, params=params or None, payload=payload
            )

    def get(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        return self._call("GET", path, params=params)

    def post(
        self,
        path: str,
        payload: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        return self._call("POST", path, params=params, payload=payload)

    def query(self, statement: str) -> dict[str, Any]:
        """Run a QBO Query API statement (SQL-like) against /query."""

        return self.get("query", {"query": statement})

    # -- entities -----------------------------------------------------------

    @staticmethod
    def _require(entity_type: str, capability: str | None = None) -> EntityType:
        et = get_entity_type(entity_type)
        if capability and not getattr(et, capability):
            raise ValueError(f"{et.name} is not {capability}")
        return et

    @staticmethod
    def _decode_entity(et: EntityType, resp: dict[str, Any]) -> Entity:
        body = resp.get(et.name) if isinstance(resp, dict) else None
        if body is None:
            raise NotFoundError(f"Response did not contain a {et.name}")
        try:
            return et.model.model_validate(body)
        except ValidationError as exc:
            raise DecodeError(f"Invalid {et.name} record: {exc}", entity_type=et.name) from exc

    @staticmethod
    def _coerce(et: EntityType, entity: Entity | dict[str, Any]) -> Entity:
        if isinstance(entity, et.model):
            return entity
        if isinstance(entity, QBOModel):
            raise ValueError(f"Expected a {et.name}, got {type(entity).__name__}")
        return et.model.model_validate(entity)

    def create(self, entity_type: str, payload: Entity | dict[str, Any]) -> Entity:
        et = self._require(entity_type, "creatable")
        body = self._coerce(et, payload).to_payload() if isinstance(payload, QBOModel) else dict(payload)
        return self._decode_entity(et, self.post(et.path, body))

    def find_by_id(self, entity_type: str, entity_id: str) -> Entity:
        et = self._require(entity_type)
        return self._decode_entity(et, self.get(f"{et.path}/{entity_id}"))

    def count(self, entity_type: str, *, where: str | None = None) -> int:
        return pagination.count_entities(self, entity_type, where=where)

    def find_all(self, entity_type: str, *, where: str | None = None) -> list[Entity]:
        """Every record of `entity_type` (optionally filtered), across all pages."""

        return pagination.fetch_all(self, entity_type, where=where)

    def query_entities(self, entity_type: str, statement: str) -> list[Entity]:
        return pagination.query_entities(self, entity_type, statement)

    def update(self, entity_type: str, entity: Entity | dict[str, Any]) -> Entity:
        """Sparse-update `entity`, using the SyncToken currently stored in QBO."""

        et = self._require(entity_type, "updatable")
        entity = self._coerce(et, entity)
        if not entity.id:
            raise ValueError(f"Missing {et.name} id")

        existing = self.find_by_id(et.name, entity.id)
        body = entity.to_payload()
        body["SyncToken"] = existing.sync_token
        body["sparse"] = True
        return self._decode_entity(et, self.post(et.path, body))

    def delete(self, entity_type: str, entity: Entity | dict[str, Any]) -> None:
        et = self._require(entity_type, "deletable")
        entity = self._coerce(et, entity)
        if not entity.id or not entity.sync_token:
            raise ValueError("Missing id/sync token")

        self.post(et.path, entity.to_payload(), {"operation": "delete"})

    def void(self, entity_type: str, entity: Entity | dict[str, Any]) -> None:
        et = self._require(entity_type, "voidable")
        entity = self._coerce(et, entity)
        if not entity.id:
            raise ValueError(f"Missing {et.name} id")

        existing = self.find_by_id(et.name, entity.id)
        body = entity.to_payload()
        body["SyncToken"] = existing.sync_token
        self.post(et.path, body, {"operation": "void"})

    def send(self, entity_type: str, entity_id: str, *, email: str | None = None) -> None:
        """Email a transaction; QBO uses its BillEmail when `email` is not given."""

        et = self._require(entity_type, "sendable")
        params = {"sendTo": email} if email else None
        self.post(f"{et.path}/{entity_id}/send", None, params)

    def get_changed_entities(
        self, entities: Iterable[str], changed_since: datetime | date
    ) -> cdc.ChangeFeedResult:
        return cdc.get_changed_entities(self, entities, changed_since)

    # -- singletons / reports ----------------------------------------------

    def find_company_info(self) -> CompanyInfo:
        realm_id = self.load_tokens().realm_id
        return self._decode_entity(get_entity_type("CompanyInfo"), self.get(f"companyinfo/{realm_id}"))

    def update_company_info(self, info: CompanyInfo | dict[str, Any]) -> CompanyInfo:
        et = get_entity_type("CompanyInfo")
        info = self._coerce(et, info)
        existing = self.find_company_info()

        body = info.to_payload()
        body["Id"] = existing.id
        body["SyncToken"] = existing.sync_token
        body["sparse"] = True
        return self._decode_entity(et, self.post(et.path, body))

    def find_exchange_rate(
        self, source_currency_code: str, *, as_of_date: str | None = None
    ) -> ExchangeRate:
        params = {"sourcecurrencycode": source_currency_code}
        if as_of_date:
            params["asofdate"] = as_of_date
        return self._decode_entity(get_entity_type("ExchangeRate"), self.get("exchangerate", params))

    def get_trial_balance(self, params: TrialBalanceQueryParams | None = None) -> TrialBalance:
        query = params.to_params() if params else None
        return parse_trial_balance(self.get("reports/TrialBalance", query))
