#===============================================================================
#  Web Kiosk Shell | app.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  Startup wiring:
#    1) settings + logging
#    2) remote bridge (optional), browser profile, cookie store
#    3) target URL (remote active config wins)
#    4) persisted cookies into the live session
#    5) main window at the welcome page or the target app
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import pyperclip
from dotenv import load_dotenv
from PySide6.QtWidgets import QApplication

from .commands import CommandRouter
from .constants import APP_TITLE, COOKIES_FILE_NAME, DATA_DIR_NAME
from .cookie_store import CookieStore
from .log_setup import setup_logging
from .main_window import ShellWindow
from .remote import RemoteBridge
from .session import SessionApplier
from .settings import ShellConfig, load_remote_settings, load_shell_config
from .web_session import QtSessionBackend, build_profile

log = logging.getLogger(__name__)


def resolve_base_dir() -> Path:
    """KIOSK_HOME, else the folder holding the kiosk package."""
    home = os.getenv("KIOSK_HOME")
    if home:
        return Path(home).expanduser().resolve()
    return Path(__file__).resolve().parent.parent


def resolve_target(config: ShellConfig, remote: Optional[RemoteBridge]) -> ShellConfig:
    if remote is None:
        return config
    result = remote.fetch_active_app_config()
    if result.ok and result.data.app_url:
        log.info("Using active app config '%s': %s", result.data.app_name, result.data.app_url)
        return config.with_target_url(result.data.app_url)
    if result.failed:
        log.warning("Could not read active app config, using %s", config.target_url)
    return config


def read_clipboard() -> str:
    try:
        return pyperclip.paste() or ""
    except pyperclip.PyperclipException as e:
        log.warning("Clipboard read failed: %s", e)
        return ""


def main(argv: Optional[List[str]] = None) -> int:
    base_dir = resolve_base_dir()
    data_dir = base_dir / DATA_DIR_NAME
    data_dir.mkdir(parents=True, exist_ok=True)

    load_dotenv(base_dir / ".env")
    log_file = setup_logging(data_dir / "logs", os.getenv("KIOSK_LOG_LEVEL", "INFO"))
    log.info("%s starting (base: %s, log: %s)", APP_TITLE, base_dir, log_file)

    config = load_shell_config(base_dir, load_env=False)
    remote_settings = load_remote_settings(base_dir, load_env=False)
    remote = RemoteBridge(remote_settings) if remote_settings else None
    if remote is None:
        log.info("SUPABASE_URL / SUPABASE_ANON_KEY not set; remote features disabled")
    config = resolve_target(config, remote)

    app = QApplication(argv if argv is not None else sys.argv)
    app.setApplicationName(APP_TITLE)

    profile = build_profile(data_dir, config.user_agent, parent=app)
    store = CookieStore(data_dir / COOKIES_FILE_NAME, config.domain_policy)

    window = ShellWindow(config, profile, base_dir)
    backend = QtSessionBackend(profile, run_script=window.page.runJavaScript)
    applier = SessionApplier(backend, store, window.navigate_to)
    router = CommandRouter(
        config,
        store,
        applier,
        remote=remote,
        read_clipboard=read_clipboard,
        open_admin=window.open_admin,
    )
    window.attach_router(router)

    applier.apply_persisted()
    window.navigate_to(applier.decide_entry_point())
    window.show()
    return app.exec()
