#===============================================================================
#  Web Kiosk Shell | web_session.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-12
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  Qt WebEngine profile setup and the session backend the SessionApplier
#  writes cookies through.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from PySide6.QtCore import QByteArray, QDateTime, QUrl
from PySide6.QtNetwork import QNetworkCookie
from PySide6.QtWebEngineCore import QWebEngineProfile

from .models import CookieRecord, SameSite
from .page_rules import CLEAR_STORAGE_SCRIPT
from .profile_storage import CACHE_DIR_NAME, PROFILE_DIR_NAME, purge_pending_wipe, schedule_wipe

log = logging.getLogger(__name__)

PROFILE_NAME = "kiosk"

_SAME_SITE = {
    SameSite.NO_RESTRICTION: QNetworkCookie.SameSite.None_,
    SameSite.LAX: QNetworkCookie.SameSite.Lax,
    SameSite.STRICT: QNetworkCookie.SameSite.Strict,
    SameSite.UNSPECIFIED: QNetworkCookie.SameSite.Default,
}


def build_profile(data_dir: Path, user_agent: str, parent=None) -> QWebEngineProfile:
    """Named, disk-backed profile with the Chrome user agent (no QtWebEngine token).

    A storage wipe scheduled by the last reset runs first, while nothing holds
    the files open.
    """
    storage_root = data_dir / PROFILE_DIR_NAME
    purge_pending_wipe(storage_root)

    profile = QWebEngineProfile(PROFILE_NAME, parent)
    profile.setPersistentStoragePath(str(storage_root))
    profile.setCachePath(str(data_dir / CACHE_DIR_NAME))
    profile.setHttpUserAgent(user_agent)
    return profile


def to_network_cookie(record: CookieRecord) -> QNetworkCookie:
    cookie = QNetworkCookie(QByteArray(record.name.encode("utf-8")), QByteArray(record.value.encode("utf-8")))
    cookie.setDomain(record.domain)
    cookie.setPath(record.path or "/")
    cookie.setSecure(record.secure)
    cookie.setHttpOnly(record.http_only)
    cookie.setSameSitePolicy(_SAME_SITE[record.same_site])
    if record.expiration_date is not None:
        cookie.setExpirationDate(QDateTime.fromSecsSinceEpoch(int(record.expiration_date)))
    return cookie


class QtSessionBackend:
    """SessionBackend over a QWebEngineProfile.

    run_script evaluates JavaScript in the page currently shown; it is how
    storage of the live origin gets cleared while the renderer holds the files.
    """

    def __init__(self, profile: QWebEngineProfile, run_script: Optional[Callable[[str], None]] = None):
        self.profile = profile
        self.run_script = run_script

    def set_cookie(self, record: CookieRecord, url: str) -> None:
        origin = QUrl(url)
        if not origin.isValid() or not origin.host():
            raise ValueError(f"invalid cookie URL {url!r}")
        self.profile.cookieStore().setCookie(to_network_cookie(record), origin)

    def clear_storage(self) -> None:
        if self.run_script is not None:
            self.run_script(CLEAR_STORAGE_SCRIPT)

        store = self.profile.cookieStore()
        store.deleteAllCookies()
        store.deleteSessionCookies()
        self.profile.clearAllVisitedLinks()

        schedule_wipe(Path(self.profile.persistentStoragePath()))
        log.info("Cleared cookies and page storage; on-disk storage removal scheduled")

    def clear_http_cache(self) -> None:
        self.profile.clearHttpCache()
