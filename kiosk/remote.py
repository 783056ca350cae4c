#===============================================================================
#  Web Kiosk Shell | remote.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-12
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  Thin CRUD bridge over the hosted table store (Supabase / PostgREST REST API)
#  for cookie sets, app configs and admin accounts.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from .cookie_store import cookie_set_from_list
from .errors import CookieImportError, RemoteError
from .models import AdminAccount, AppConfig, CookieSet
from .passwords import hash_password, verify_password
from .settings import RemoteSettings

# NOTE:
# - Nothing here raises to callers. Transport/HTTP problems come back as
#   FetchResult.failed so the admin UI can tell "no data" from "fetch failed".
# - UI concerns (message boxes) live in the window layer.

log = logging.getLogger(__name__)

OK = "ok"
EMPTY = "empty"
FAILED = "failed"

ADMIN_PUBLIC_COLUMNS = "id,username,email,is_active,created_at"


@dataclass(frozen=True)
class FetchResult:
    status: str
    data: Any = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status == OK

    @property
    def failed(self) -> bool:
        return self.status == FAILED

    @staticmethod
    def of(data: Any) -> "FetchResult":
        if data is None or data == []:
            return FetchResult(EMPTY, data)
        return FetchResult(OK, data)

    @staticmethod
    def fail(error: str) -> "FetchResult":
        return FetchResult(FAILED, None, error)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class RemoteBridge:
    def __init__(self, settings: RemoteSettings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()
        self._headers = {
            "apikey": settings.anon_key,
            "Authorization": f"Bearer {settings.anon_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    # ----------------------------
    # Transport
    # ----------------------------
    def _table_url(self, table_key: str) -> str:
        table = self.settings.tables.get(table_key, table_key)
        return f"{self.settings.url.rstrip('/')}/rest/v1/{table}"

    def _request(
        self,
        method: str,
        table_key: str,
        params: Optional[Dict[str, str]] = None,
        body: Any = None,
    ) -> Any:
        headers = dict(self._headers)
        if method in ("POST", "PATCH", "DELETE"):
            headers["Prefer"] = "return=representation"
        try:
            r = self.session.request(
                method,
                self._table_url(table_key),
                params=params or {},
                json=body,
                headers=headers,
                timeout=self.settings.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise RemoteError(f"Network error: {e}") from e

        if r.status_code >= 400:
            detail = ""
            try:
                payload = r.json()
                if isinstance(payload, dict):
                    detail = payload.get("message") or payload.get("error") or ""
            except ValueError:
                detail = (r.text or "")[:200]
            raise RemoteError(f"HTTP {r.status_code} from {table_key}: {detail}".rstrip(": "))

        if r.status_code == 204 or not (r.text or "").strip():
            return []
        try:
            return r.json()
        except ValueError as e:
            raise RemoteError(f"Invalid JSON from {table_key}: {e}") from e

    def _rows(self, table_key: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        data = self._request("GET", table_key, params=params)
        if not isinstance(data, list):
            raise RemoteError(f"Unexpected payload from {table_key}")
        return data

    def _latest(self, table_key: str, **filters: str) -> Optional[Dict[str, Any]]:
        params = {"select": "*", "order": "created_at.desc", "limit": "1"}
        params.update(filters)
        rows = self._rows(table_key, params)
        return rows[0] if rows else None

    def _all(self, table_key: str, select: str = "*") -> List[Dict[str, Any]]:
        return self._rows(table_key, {"select": select, "order": "created_at.desc"})

    def _insert(self, table_key: str, row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        data = self._request("POST", table_key, body=row)
        return data[0] if isinstance(data, list) and data else None

    def _update(self, table_key: str, record_id: Any, changes: Dict[str, Any]) -> List[Dict[str, Any]]:
        data = self._request("PATCH", table_key, params={"id": f"eq.{record_id}"}, body=changes)
        return data if isinstance(data, list) else []

    def _delete(self, table_key: str, record_id: Any) -> List[Any]:
        """Ids of the deleted rows."""
        data = self._request("DELETE", table_key, params={"id": f"eq.{record_id}"})
        return [r.get("id") for r in data if isinstance(r, dict)] if isinstance(data, list) else []

    def _guard(self, what: str, fn, *args) -> FetchResult:
        try:
            return fn(*args)
        except RemoteError as e:
            log.error("Failed to %s: %s", what, e)
            return FetchResult.fail(str(e))
        except (AttributeError, TypeError) as e:
            # rows that are not JSON objects
            log.error("Failed to %s: unexpected row shape (%s)", what, e)
            return FetchResult.fail(f"Unexpected data from remote store: {e}")

    # ----------------------------
    # Cookies
    # ----------------------------
    def fetch_latest_cookie_set(self) -> FetchResult:
        """Most recent stored cookie set as a CookieSet."""
        def run() -> FetchResult:
            row = self._latest("cookies")
            if not row or not row.get("cookies_data"):
                return FetchResult.of(None)
            raw = row["cookies_data"]
            try:
                items = json.loads(raw) if isinstance(raw, str) else raw
                return FetchResult.of(cookie_set_from_list(items, name=row.get("name") or ""))
            except (ValueError, TypeError, CookieImportError) as e:
                raise RemoteError(f"Stored cookie set #{row.get('id')} is invalid: {e}") from e
        return self._guard("fetch cookies", run)

    def list_cookie_sets(self) -> FetchResult:
        return self._guard("list cookie sets", lambda: FetchResult.of(self._all("cookies")))

    def save_cookie_set(self, cookie_set: CookieSet, name: str = "") -> FetchResult:
        expires_at = cookie_set.expires_at
        row = {
            "name": name or cookie_set.name or f"Cookies {datetime.now():%Y-%m-%d %H:%M:%S}",
            "cookies_data": cookie_set.to_list(),
            "expires_at": expires_at.isoformat() if expires_at else None,
            "created_at": _now_iso(),
        }

        def run() -> FetchResult:
            saved = self._insert("cookies", row)
            log.info("Cookie set '%s' (%d cookies) saved to remote store", row["name"], len(cookie_set))
            return FetchResult(OK, saved)
        return self._guard("save cookies", run)

    def delete_cookie_set(self, record_id: Any) -> FetchResult:
        return self._guard("delete cookies", lambda: FetchResult.of(self._delete("cookies", record_id)))

    # ----------------------------
    # App config
    # ----------------------------
    def fetch_active_app_config(self) -> FetchResult:
        def run() -> FetchResult:
            row = self._latest("app_config", is_active="eq.true")
            return FetchResult.of(AppConfig.from_row(row) if row else None)
        return self._guard("fetch app config", run)

    def list_app_configs(self) -> FetchResult:
        def run() -> FetchResult:
            return FetchResult.of([AppConfig.from_row(r) for r in self._all("app_config")])
        return self._guard("list app configs", run)

    def save_app_config(self, data: Dict[str, Any]) -> FetchResult:
        row = {
            "app_name": data.get("app_name") or "Web App",
            "app_url": data.get("app_url"),
            "is_active": data.get("is_active") is not False,
            "created_at": _now_iso(),
        }

        def run() -> FetchResult:
            saved = self._insert("app_config", row)
            return FetchResult(OK, AppConfig.from_row(saved) if saved else None)
        return self._guard("save app config", run)

    def update_app_config(self, record_id: Any, data: Dict[str, Any]) -> FetchResult:
        changes = {k: data[k] for k in ("app_name", "app_url", "is_active") if k in data}
        if not changes:
            return FetchResult.of(None)
        return self._guard(
            "update app config",
            lambda: FetchResult.of([AppConfig.from_row(r) for r in self._update("app_config", record_id, changes)]),
        )

    def delete_app_config(self, record_id: Any) -> FetchResult:
        return self._guard("delete app config", lambda: FetchResult.of(self._delete("app_config", record_id)))

    # ----------------------------
    # Admin accounts
    # ----------------------------
    def verify_admin(self, username: str, password: str) -> FetchResult:
        if not username or not password:
            return FetchResult.of(None)

        def run() -> FetchResult:
            row = self._latest("superusers", username=f"eq.{username}", is_active="eq.true")
            if not row or not verify_password(password, row.get("password") or ""):
                log.warning("Admin verification failed for '%s'", username)
                return FetchResult.of(None)
            return FetchResult(OK, AdminAccount.from_row(row))
        return self._guard("verify admin", run)

    def list_admins(self) -> FetchResult:
        def run() -> FetchResult:
            rows = self._all("superusers", select=ADMIN_PUBLIC_COLUMNS)
            return FetchResult.of([AdminAccount.from_row(r) for r in rows])
        return self._guard("list admins", run)

    def create_admin(self, data: Dict[str, Any]) -> FetchResult:
        username = (data.get("username") or "").strip()
        password = data.get("password") or ""
        if not username or not password:
            return FetchResult.fail("Username and password are required")
        row = {
            "username": username,
            "password": hash_password(password),
            "email": data.get("email") or None,
            "is_active": True,
            "created_at": _now_iso(),
        }

        def run() -> FetchResult:
            saved = self._insert("superusers", row)
            log.info("Admin account '%s' created", username)
            return FetchResult(OK, AdminAccount.from_row(saved) if saved else None)
        return self._guard("create admin", run)

    def update_admin(self, record_id: Any, data: Dict[str, Any]) -> FetchResult:
        changes: Dict[str, Any] = {}
        if data.get("username"):
            changes["username"] = data["username"]
        if data.get("password"):
            changes["password"] = hash_password(data["password"])
        if "email" in data:
            changes["email"] = data["email"]
        if "is_active" in data:
            changes["is_active"] = bool(data["is_active"])
        if not changes:
            return FetchResult.of(None)
        return self._guard(
            "update admin",
            lambda: FetchResult.of([AdminAccount.from_row(r) for r in self._update("superusers", record_id, changes)]),
        )

    def delete_admin(self, record_id: Any) -> FetchResult:
        return self._guard("delete admin", lambda: FetchResult.of(self._delete("superusers", record_id)))
