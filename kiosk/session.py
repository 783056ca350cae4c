#===============================================================================
#  Web Kiosk Shell | session.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-12
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  Mirrors the persisted cookie set into the embedded browser's live session,
#  wipes session state on "switch account", and decides which surface to show.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Protocol, Tuple

from .cookie_store import CookieStore
from .errors import ApplyError
from .models import CookieRecord, CookieSet

log = logging.getLogger(__name__)


class EntryPoint(str, Enum):
    WELCOME = "welcome"
    TARGET = "target"


class SessionBackend(Protocol):
    """What the applier needs from the browser engine's session store."""

    def set_cookie(self, record: CookieRecord, url: str) -> None:
        ...

    def clear_storage(self) -> None:
        """Cookies, local/session storage, IndexedDB and similar on-device caches."""
        ...

    def clear_http_cache(self) -> None:
        ...


@dataclass
class ApplyReport:
    attempted: int = 0
    succeeded: int = 0
    failed: List[Tuple[str, str]] = field(default_factory=list)  # (cookie name, error)

    def to_dict(self) -> dict:
        return {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": [{"name": n, "error": e} for n, e in self.failed],
        }


@dataclass
class ResetReport:
    errors: List[Tuple[str, str]] = field(default_factory=list)  # (step, error)
    navigated: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors and self.navigated


class SessionApplier:
    """Sole mutator of the live browser session. Reads the store, never writes it
    except to delete it during a reset."""

    def __init__(
        self,
        backend: SessionBackend,
        store: CookieStore,
        navigate: Callable[[EntryPoint], None],
        scheme: str = "https",
    ):
        self.backend = backend
        self.store = store
        self.navigate = navigate
        self.scheme = scheme

    def apply(self, cookie_set: CookieSet) -> ApplyReport:
        report = ApplyReport()
        for record in cookie_set:
            report.attempted += 1
            try:
                self.backend.set_cookie(record, record.target_url(self.scheme))
                report.succeeded += 1
            except Exception as e:
                err = ApplyError(record.name, f"Failed to set cookie {record.name}: {e}")
                log.warning("%s", err)
                report.failed.append((record.name, str(e)))
        log.info("Applied %d/%d cookies", report.succeeded, report.attempted)
        return report

    def apply_persisted(self) -> ApplyReport:
        cookie_set = self.store.load()
        if cookie_set is None:
            log.info("No persisted cookie set; skipping cookie import.")
            return ApplyReport()
        return self.apply(cookie_set)

    def reset_and_navigate_to_entry(self) -> ResetReport:
        report = ResetReport()
        steps = (
            ("clear_storage", self.backend.clear_storage),
            ("clear_http_cache", self.backend.clear_http_cache),
            ("delete_cookie_file", self._delete_cookie_file),
        )
        for name, step in steps:
            try:
                step()
            except Exception as e:
                log.error("Session reset step %s failed: %s", name, e)
                report.errors.append((name, str(e)))

        try:
            self.navigate(EntryPoint.WELCOME)
            report.navigated = True
        except Exception as e:
            log.error("Navigation to the welcome page failed: %s", e)
            report.errors.append(("navigate", str(e)))
        return report

    def _delete_cookie_file(self) -> None:
        # a file that cannot be removed (locked on Windows) must still stop
        # counting as a valid set
        try:
            self.store.clear()
        except Exception as e:
            log.warning("Could not delete %s (%s); emptying it instead", self.store.path, e)
            self.store.invalidate()

    def decide_entry_point(self) -> EntryPoint:
        return EntryPoint.TARGET if self.store.has_valid_cookie_set() else EntryPoint.WELCOME
