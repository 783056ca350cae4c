#===============================================================================
#  Web Kiosk Shell | main_window.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Created     : 2026-02-10
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  Main shell window:
#    - Embedded browser view hosting the target web application
#    - Welcome page when no session cookies are stored
#    - Overlay rules (hidden controls + floating buttons) on the hosted page
#    - window.kiosk command channel for the welcome page and overlay buttons
#    - Shortcuts: Ctrl+O import cookie file, Ctrl+Shift+A admin panel, F5 reload
#===============================================================================

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QTimer, QUrl
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWebChannel import QWebChannel
from PySide6.QtWebEngineCore import QWebEnginePage, QWebEngineProfile, QWebEngineScript
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import QFileDialog, QMainWindow, QMessageBox

from .admin_window import AdminWindow
from .channel import CHANNEL_OBJECT_NAME, CommandChannel, channel_bootstrap_script
from .commands import CommandRouter
from .constants import APP_TITLE, SETTINGS_FILE_NAME, WELCOME_RESOURCE
from .page_rules import build_overlay_script
from .session import EntryPoint
from .settings import ShellConfig, load_settings, save_settings

log = logging.getLogger(__name__)

RESOURCES_DIR = Path(__file__).resolve().parent / "resources"


class ShellWindow(QMainWindow):
    def __init__(self, config: ShellConfig, profile: QWebEngineProfile, base_dir: Path):
        super().__init__()
        self.setWindowTitle(APP_TITLE)
        self.config = config
        self.base_dir = base_dir
        self.router: Optional[CommandRouter] = None
        self.admin_window: Optional[AdminWindow] = None
        self.welcome_url = QUrl.fromLocalFile(str(RESOURCES_DIR / WELCOME_RESOURCE))

        self.view = QWebEngineView(self)
        self.page = QWebEnginePage(profile, self.view)
        self.view.setPage(self.page)
        self.setCentralWidget(self.view)

        self.command_channel = CommandChannel(parent=self)
        self.command_channel.commandFailed.connect(self._on_command_failed)
        self.web_channel = QWebChannel(self.page)
        self.web_channel.registerObject(CHANNEL_OBJECT_NAME, self.command_channel)
        self.page.setWebChannel(self.web_channel)
        self._install_channel_script()

        self.view.loadFinished.connect(self._on_load_finished)
        self._overlay_script = build_overlay_script(config.ui_rules, config.target_url)

        self._add_shortcuts()
        self.resize(*config.window_size)

    def attach_router(self, router: CommandRouter) -> None:
        self.router = router
        self.command_channel.router = router

    # ----------------------------
    # Setup helpers
    # ----------------------------
    def _install_channel_script(self) -> None:
        script = QWebEngineScript()
        script.setName("kiosk-channel")
        script.setSourceCode(channel_bootstrap_script())
        script.setInjectionPoint(QWebEngineScript.DocumentReady)
        script.setWorldId(QWebEngineScript.MainWorld)
        script.setRunsOnSubFrames(False)
        self.page.scripts().insert(script)

    def _add_shortcuts(self) -> None:
        act_import = QAction("Import cookie file…", self)
        act_import.setShortcut(QKeySequence("Ctrl+O"))
        act_import.triggered.connect(self.import_cookie_file)
        self.addAction(act_import)

        act_admin = QAction("Admin panel", self)
        act_admin.setShortcut(QKeySequence("Ctrl+Shift+A"))
        act_admin.triggered.connect(self.open_admin)
        self.addAction(act_admin)

        act_reload = QAction("Reload", self)
        act_reload.setShortcut(QKeySequence("F5"))
        act_reload.triggered.connect(self.view.reload)
        self.addAction(act_reload)

    # ----------------------------
    # Navigation
    # ----------------------------
    def navigate_to(self, entry: EntryPoint) -> None:
        # Deferred so a page-initiated command can return before its page unloads
        url = self.welcome_url if entry == EntryPoint.WELCOME else QUrl(self.config.target_url)
        log.info("Navigating to %s", entry.value)
        QTimer.singleShot(0, lambda: self.view.load(url))

    def _is_welcome(self, url: QUrl) -> bool:
        return url.isLocalFile() and Path(url.toLocalFile()).name == WELCOME_RESOURCE

    def _on_load_finished(self, ok: bool) -> None:
        url = self.view.url()
        if not ok:
            log.warning("Page failed to load: %s", url.toString())
            return
        if not self._is_welcome(url):
            self.page.runJavaScript(self._overlay_script)

    # ----------------------------
    # Commands from the window itself
    # ----------------------------
    def import_cookie_file(self) -> None:
        if self.router is None:
            return
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "Choose exported cookies",
            str(self.base_dir),
            "Cookie export (*.json *.txt);;All files (*)",
        )
        if not file_path:
            return
        result = self.router.dispatch("import-cookies-from-file", file_path)
        if not result.get("success"):
            QMessageBox.warning(self, "Import failed", str(result.get("error", "")))

    def open_admin(self) -> None:
        if self.router is None:
            return
        if self.admin_window is None:
            self.admin_window = AdminWindow(self.router)
        self.admin_window.show()
        self.admin_window.raise_()
        self.admin_window.activateWindow()

    def _on_command_failed(self, command: str, error: str) -> None:
        # the welcome page renders its own errors
        if self._is_welcome(self.view.url()):
            return
        titles = {
            "paste-cookies-from-clipboard": "Paste cookies failed",
            "clear-session-and-reload": "Switch account",
            "use-remote-cookies": "Remote cookies",
        }
        title = titles.get(command, "Command failed")
        QTimer.singleShot(0, lambda: QMessageBox.warning(self, title, error or "Unknown error"))

    def closeEvent(self, event):
        settings_path = self.base_dir / SETTINGS_FILE_NAME
        try:
            settings = load_settings(settings_path)
            settings["window_size"] = [self.width(), self.height()]
            save_settings(settings_path, settings)
        except OSError as e:
            log.warning("Could not save window size: %s", e)
        if self.admin_window is not None:
            self.admin_window.close()
        super().closeEvent(event)
