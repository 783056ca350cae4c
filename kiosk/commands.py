#===============================================================================
#  Web Kiosk Shell | commands.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-12
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  The command surface shared by the hosted page, the welcome page and the admin
#  panel. Every command answers with a {"success": bool, ...} envelope and never
#  raises across the boundary.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from .cookie_store import CookieStore, parse_cookie_text
from .errors import KioskError
from .expiration import format_expiration
from .models import AdminAccount, CookieSet
from .remote import RemoteBridge, FetchResult
from .session import EntryPoint, SessionApplier
from .settings import ShellConfig

log = logging.getLogger(__name__)

SESSION = "session"
REMOTE = "remote"
LOCAL = "local"

Envelope = Dict[str, Any]
Handler = Callable[..., Envelope]

# Reachable from page script (window.kiosk). All of them take no arguments.
PAGE_COMMANDS = frozenset({
    "clear-session-and-reload",
    "import-cookies-and-reload",
    "paste-cookies-from-clipboard",
    "use-remote-cookies",
    "go-to-welcome-page",
    "go-to-target",
    "go-to-admin-page",
    "get-active-app-config",
})


def ok(**payload: Any) -> Envelope:
    out: Envelope = {"success": True}
    out.update(payload)
    return out


def fail(error: str, **payload: Any) -> Envelope:
    out: Envelope = {"success": False, "error": error}
    out.update(payload)
    return out


def _jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, CookieSet):
        return value.to_list()
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


class CommandRouter:
    """Routes named commands to the store, the session applier and the remote bridge.

    Commands are grouped into operation classes (session / remote / local). At
    most one command per class runs at a time; a concurrent call is rejected
    instead of queued.
    """

    def __init__(
        self,
        config: ShellConfig,
        store: CookieStore,
        applier: SessionApplier,
        remote: Optional[RemoteBridge] = None,
        read_clipboard: Optional[Callable[[], str]] = None,
        open_admin: Optional[Callable[[], None]] = None,
    ):
        self.config = config
        self.store = store
        self.applier = applier
        self.remote = remote
        self.read_clipboard = read_clipboard
        self.open_admin = open_admin
        self.admin_user: Optional[AdminAccount] = None

        self._locks: Dict[str, threading.Lock] = {
            SESSION: threading.Lock(),
            REMOTE: threading.Lock(),
            LOCAL: threading.Lock(),
        }
        self._handlers: Dict[str, Tuple[str, Handler]] = {}
        self._register_all()

    # ----------------------------
    # Registry / dispatch
    # ----------------------------
    def register(self, name: str, op_class: str, handler: Handler) -> None:
        self._handlers[name] = (op_class, handler)

    @property
    def command_names(self) -> List[str]:
        return sorted(self._handlers)

    def dispatch(self, name: str, *args: Any) -> Envelope:
        entry = self._handlers.get(name)
        if entry is None:
            return fail(f"Unknown command: {name}")
        op_class, handler = entry

        lock = self._locks[op_class]
        if not lock.acquire(blocking=False):
            log.warning("Rejected %s: another %s operation is in progress", name, op_class)
            return fail(f"Another {op_class} operation is in progress")
        try:
            return handler(*args)
        except KioskError as e:
            log.warning("%s failed: %s", name, e)
            return fail(str(e), kind=e.kind)
        except Exception as e:
            log.exception("%s failed", name)
            return fail(str(e) or e.__class__.__name__)
        finally:
            lock.release()

    def dispatch_json(self, name: str, args_json: str = "[]") -> str:
        """JSON-in / JSON-out variant used by the web channel."""
        try:
            args = json.loads(args_json) if args_json else []
        except json.JSONDecodeError as e:
            return json.dumps(fail(f"Invalid arguments: {e.msg}"))
        if not isinstance(args, list):
            args = [args]
        return json.dumps(self.dispatch(name, *args), default=str, ensure_ascii=False)

    def dispatch_page(self, name: str, args_json: str = "[]") -> str:
        """Page-script entry point: allow-listed commands, no arguments."""
        if name not in PAGE_COMMANDS:
            log.warning("Page tried to call non-page command %s", name)
            return json.dumps(fail(f"Command not allowed from page: {name}"))
        try:
            args = json.loads(args_json) if args_json else []
        except json.JSONDecodeError:
            args = None
        if args != []:
            log.warning("Page passed arguments to %s; rejected", name)
            return json.dumps(fail(f"Command takes no arguments: {name}"))
        return self.dispatch_json(name, "[]")

    def _register_all(self) -> None:
        r = self.register
        # user shell
        r("clear-session-and-reload", SESSION, self.clear_session_and_reload)
        r("import-cookies-and-reload", SESSION, self.import_cookies_and_reload)
        r("import-cookies-from-file", SESSION, self.import_cookies_from_file)
        r("paste-cookies-from-clipboard", SESSION, self.paste_cookies_from_clipboard)
        r("use-remote-cookies", SESSION, self.use_remote_cookies)
        r("go-to-welcome-page", LOCAL, self.go_to_welcome_page)
        r("go-to-target", LOCAL, self.go_to_target)
        r("go-to-admin-page", LOCAL, self.go_to_admin_page)
        r("get-active-app-config", REMOTE, self.get_active_app_config)
        # admin panel
        r("admin-verify", REMOTE, self.admin_verify)
        r("admin-logout", LOCAL, self.admin_logout)
        r("admin-format-expiration", LOCAL, self.admin_format_expiration)
        r("admin-get-all-cookies", REMOTE, self._admin(self.admin_get_all_cookies))
        r("admin-save-cookies", REMOTE, self._admin(self.admin_save_cookies))
        r("admin-upload-local-cookies", REMOTE, self._admin(self.admin_upload_local_cookies))
        r("admin-delete-cookies", REMOTE, self._admin(self.admin_delete_cookies))
        r("admin-get-all-configs", REMOTE, self._admin(self.admin_get_all_configs))
        r("admin-save-config", REMOTE, self._admin(self.admin_save_config))
        r("admin-update-config", REMOTE, self._admin(self.admin_update_config))
        r("admin-delete-config", REMOTE, self._admin(self.admin_delete_config))
        r("admin-get-all-users", REMOTE, self._admin(self.admin_get_all_users))
        r("admin-create-user", REMOTE, self._admin(self.admin_create_user))
        r("admin-update-user", REMOTE, self._admin(self.admin_update_user))
        r("admin-delete-user", REMOTE, self._admin(self.admin_delete_user))

    def _admin(self, handler: Handler) -> Handler:
        def guarded(*args: Any) -> Envelope:
            if self.admin_user is None:
                return fail("Not authenticated")
            if self.remote is None:
                return fail("Remote store is not configured")
            return handler(*args)
        return guarded

    @staticmethod
    def _from_result(result: FetchResult, key: str, empty: Any = None) -> Envelope:
        if result.failed:
            return fail(result.error or "Remote request failed", kind="remote")
        if not result.ok:
            return ok(**{key: empty})
        return ok(**{key: _jsonable(result.data)})

    # ----------------------------
    # Session commands
    # ----------------------------
    def _apply_and_open_target(self, cookie_set: CookieSet) -> Envelope:
        report = self.applier.apply(cookie_set)
        self.applier.navigate(EntryPoint.TARGET)
        return ok(count=len(cookie_set), applied=report.succeeded, report=report.to_dict())

    def clear_session_and_reload(self) -> Envelope:
        report = self.applier.reset_and_navigate_to_entry()
        if report.ok:
            return ok()
        return fail("; ".join(f"{step}: {err}" for step, err in report.errors), navigated=report.navigated)

    def import_cookies_and_reload(self) -> Envelope:
        """Re-apply the persisted set and open the target."""
        cookie_set = self.store.load()
        if cookie_set is None:
            return ok(imported=False, count=0, applied=0)
        envelope = self._apply_and_open_target(cookie_set)
        envelope["imported"] = True
        return envelope

    def import_cookies_from_file(self, path: Optional[str] = None) -> Envelope:
        # window-only: the path comes from a file dialog, never from page script
        if not path:
            return fail("No file selected")
        cookie_set = self.store.import_from_file(Path(path))
        log.info("Imported %d cookies from %s", len(cookie_set), path)
        envelope = self._apply_and_open_target(cookie_set)
        envelope["imported"] = True
        return envelope

    def paste_cookies_from_clipboard(self) -> Envelope:
        if self.read_clipboard is None:
            return fail("Clipboard is not available")
        text = self.read_clipboard() or ""
        if not text.strip():
            return fail("Clipboard empty", kind="empty")
        cookie_set = self.store.import_from_source(text)
        log.info("Imported %d cookies from clipboard", len(cookie_set))
        return self._apply_and_open_target(cookie_set)

    def use_remote_cookies(self) -> Envelope:
        if self.remote is None:
            return fail("Remote store is not configured")
        result = self.remote.fetch_latest_cookie_set()
        if result.failed:
            return fail(result.error, kind="remote")
        if not result.ok:
            return fail("No cookie set stored remotely", kind="empty")
        cookie_set: CookieSet = result.data
        self.config.domain_policy.check(cookie_set.records)
        self.store.save(cookie_set)
        return self._apply_and_open_target(cookie_set)

    # ----------------------------
    # Navigation
    # ----------------------------
    def go_to_welcome_page(self) -> Envelope:
        self.applier.navigate(EntryPoint.WELCOME)
        return ok()

    def go_to_target(self) -> Envelope:
        self.applier.navigate(EntryPoint.TARGET)
        return ok()

    def go_to_admin_page(self) -> Envelope:
        if self.open_admin is None:
            return fail("Admin panel is not available")
        self.open_admin()
        return ok()

    def get_active_app_config(self) -> Envelope:
        if self.remote is None:
            return ok(config={"app_url": self.config.target_url, "app_name": None, "is_active": True})
        return self._from_result(self.remote.fetch_active_app_config(), "config")

    # ----------------------------
    # Admin: auth + helpers
    # ----------------------------
    def admin_verify(self, username: str = "", password: str = "") -> Envelope:
        if self.remote is None:
            return fail("Remote store is not configured")
        result = self.remote.verify_admin(username, password)
        if result.failed:
            return fail(result.error, kind="remote")
        if not result.ok:
            return fail("Invalid username or password")
        self.admin_user = result.data
        log.info("Admin '%s' signed in", self.admin_user.username)
        return ok(user=self.admin_user.to_dict())

    def admin_logout(self) -> Envelope:
        self.admin_user = None
        return ok()

    def admin_format_expiration(self, expires_at: Any = None) -> Envelope:
        return ok(**format_expiration(expires_at).to_dict())

    # ----------------------------
    # Admin: cookie sets
    # ----------------------------
    def admin_get_all_cookies(self) -> Envelope:
        return self._from_result(self.remote.list_cookie_sets(), "cookies", [])

    def admin_save_cookies(self, cookies: Any = None, name: str = "") -> Envelope:
        text = cookies if isinstance(cookies, (str, bytes)) else json.dumps(cookies)
        cookie_set = parse_cookie_text(text, self.config.domain_policy)
        return self._from_result(self.remote.save_cookie_set(cookie_set, name or ""), "record")

    def admin_upload_local_cookies(self, name: str = "") -> Envelope:
        cookie_set = self.store.load()
        if cookie_set is None:
            return fail("No local cookie set to upload", kind="empty")
        return self._from_result(self.remote.save_cookie_set(cookie_set, name or ""), "record")

    def admin_delete_cookies(self, record_id: Any) -> Envelope:
        return self._from_result(self.remote.delete_cookie_set(record_id), "deleted", [])

    # ----------------------------
    # Admin: app configs
    # ----------------------------
    def admin_get_all_configs(self) -> Envelope:
        return self._from_result(self.remote.list_app_configs(), "configs", [])

    def admin_save_config(self, data: Optional[Dict[str, Any]] = None) -> Envelope:
        data = data or {}
        if not (data.get("app_url") or "").strip():
            return fail("App URL is required")
        return self._from_result(self.remote.save_app_config(data), "config")

    def admin_update_config(self, record_id: Any, data: Optional[Dict[str, Any]] = None) -> Envelope:
        return self._from_result(self.remote.update_app_config(record_id, data or {}), "configs", [])

    def admin_delete_config(self, record_id: Any) -> Envelope:
        return self._from_result(self.remote.delete_app_config(record_id), "deleted", [])

    # ----------------------------
    # Admin: accounts
    # ----------------------------
    def admin_get_all_users(self) -> Envelope:
        return self._from_result(self.remote.list_admins(), "users", [])

    def admin_create_user(self, data: Optional[Dict[str, Any]] = None) -> Envelope:
        return self._from_result(self.remote.create_admin(data or {}), "user")

    def admin_update_user(self, record_id: Any, data: Optional[Dict[str, Any]] = None) -> Envelope:
        return self._from_result(self.remote.update_admin(record_id, data or {}), "users", [])

    def admin_delete_user(self, record_id: Any) -> Envelope:
        if self.admin_user is not None and self.admin_user.id == record_id:
            return fail("You cannot delete the account you are signed in with")
        return self._from_result(self.remote.delete_admin(record_id), "deleted", [])
