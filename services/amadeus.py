"""
services/amadeus.py
-------------------
Thin Amadeus Self-Service client shared by the flight and hotel adapters.
- OAuth2 client-credentials token, cached in memory until 60 s before expiry
- Authenticated GET returning the decoded JSON
- Free text → IATA city/airport code
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Dict, Optional

import requests

from core import config
from core.errors import UpstreamError, VendorParseError

log = logging.getLogger(__name__)

_SERVICE = "Amadeus"
_IATA = re.compile(r"^[A-Z]{3}$")

# OAuth2 token cache. Concurrent refreshes are harmless: both tokens are valid.
_token: Optional[str] = None
_token_expires_at: float = 0.0  # epoch seconds


def _base() -> str:
    return config.AMADEUS_BASE_URL.rstrip("/")


def _vendor_error(r: requests.Response, what: str) -> UpstreamError:
    return UpstreamError(_SERVICE, r.status_code, f"{what}: {r.text}")


def get_access_token() -> str:
    """Return a cached bearer token, fetching a new one when near expiry."""
    global _token, _token_expires_at
    now = time.time()
    if _token and _token_expires_at > now + 60:
        return _token

    client_id, client_secret = config.amadeus_credentials()
    r = requests.post(
        f"{_base()}/v1/security/oauth2/token",
        data={
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
        },
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        timeout=config.HTTP_TIMEOUT,
    )
    if r.status_code >= 400:
        raise _vendor_error(r, "failed to obtain token")

    try:
        js = r.json()
        token = js["access_token"]
        expires_in = float(js.get("expires_in", 0))
    except (ValueError, KeyError, TypeError) as e:
        raise VendorParseError(_SERVICE, f"malformed token response: {e}") from e

    _token, _token_expires_at = token, now + expires_in
    log.debug("Amadeus token refreshed, valid for %.0f s", expires_in)
    return _token


def reset_token_cache() -> None:
    global _token, _token_expires_at
    _token, _token_expires_at = None, 0.0


def get(path: str, **params) -> Dict[str, Any]:
    """
    Authenticated GET on ``path``.
    - Parameters that are None or "" are dropped
    - Raises UpstreamError with the vendor body on 4xx/5xx
    """
    token = get_access_token()
    clean = {k: v for k, v in params.items() if v is not None and v != ""}
    r = requests.get(
        f"{_base()}{path}",
        params=clean,
        headers={"Authorization": f"Bearer {token}"},
        timeout=config.HTTP_TIMEOUT,
    )
    if r.status_code >= 400:
        raise _vendor_error(r, f"API error for {path}")
    try:
        return r.json()
    except ValueError as e:
        raise VendorParseError(_SERVICE, f"non-JSON body for {path}") from e


def as_iata(value: str) -> Optional[str]:
    """Upper-cased code when ``value`` already is a 3-letter code, else None."""
    candidate = (value or "").strip().upper()
    return candidate if _IATA.match(candidate) else None


def search_city_code(keyword: str) -> Optional[str]:
    """
    City IATA code for free text.
    A literal 3-letter code passes through without a lookup.
    """
    if not keyword or len(keyword.strip()) < 2:
        return None
    code = as_iata(keyword)
    if code:
        return code

    data = get("/v1/reference-data/locations", subType="CITY", keyword=keyword.strip())
    for item in data.get("data") or []:
        if item.get("subType") == "CITY" and item.get("iataCode"):
            log.debug("Resolved %r to %s", keyword, item["iataCode"])
            return item["iataCode"]
    return None
