"""Environment-driven settings for the QBO client."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import dotenv_values, load_dotenv

PRODUCTION_BASE_URL = "https://quickbooks.api.intuit.com"
SANDBOX_BASE_URL = "https://sandbox-quickbooks.api.intuit.com"

_BASE_URLS = {
    "production": PRODUCTION_BASE_URL,
    "sandbox": SANDBOX_BASE_URL,
}

_TRUTHY = {"1", "true", "TRUE", "yes", "YES"}


def load_env(example_path: str = ".env.example") -> None:
    """Load `.env`, then fill gaps from `.env.example` when credentials are unset.

    `.env.example` holds blank placeholders for secrets; blanks never
    override real values.
    """

    load_dotenv(override=False)
    if os.environ.get("QBO_CLIENT_ID"):
        return

    path = os.path.abspath(example_path)
    if not os.path.exists(path):
        return
    for k, v in (dotenv_values(path) or {}).items():
        if not k or not v:
            continue
        if not os.environ.get(k):
            os.environ[k] = v


def base_url(environment: str) -> str:
    try:
        return _BASE_URLS[environment]
    except KeyError:
        raise ValueError(
            f"Unknown QBO environment {environment!r} (expected 'sandbox' or 'production')"
        ) from None


@dataclass(frozen=True, slots=True)
class QBOSettings:
    client_id: str
    client_secret: str
    redirect_uri: str = "http://localhost"
    environment: str = "sandbox"
    tokens_path: str = ".env_qbo_tokens.json"
    timeout_seconds: int = 30
    minorversion: str | None = None
    debug: bool = False

    @classmethod
    def from_env(cls) -> "QBOSettings":
        load_env()
        client_id = os.environ.get("QBO_CLIENT_ID")
        client_secret = os.environ.get("QBO_CLIENT_SECRET")
        if not client_id or not client_secret:
            raise ValueError("Missing QBO_CLIENT_ID or QBO_CLIENT_SECRET")

        environment = os.environ.get("QBO_ENVIRONMENT", "sandbox")
        base_url(environment)

        return cls(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=os.environ.get("QBO_REDIRECT_URI", "http://localhost"),
            environment=environment,
            tokens_path=os.environ.get(
                "QBO_TOKENS_PATH", os.path.abspath(".env_qbo_tokens.json")
            ),
            timeout_seconds=int(os.environ.get("QBO_HTTP_TIMEOUT_SECONDS", "30")),
            minorversion=os.environ.get("QBO_MINORVERSION") or None,
            debug=os.environ.get("QBO_DEBUG") in _TRUTHY,
        )
