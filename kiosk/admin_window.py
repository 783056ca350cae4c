#===============================================================================
#  Web Kiosk Shell | admin_window.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Created     : 2026-02-13
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  Admin panel:
#    - Sign-in against the remote admin accounts table
#    - Cookie sets: list with expiration badge, save from clipboard/file,
#      upload the local set, delete
#    - App configs: add, edit, toggle active, delete
#    - Admin accounts: add, edit, toggle active, delete
#  All remote work goes through the CommandRouter.
#===============================================================================

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QGuiApplication
from PySide6.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QDialog,
    QDialogButtonBox,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QStackedWidget,
    QTableWidget,
    QTableWidgetItem,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from .commands import CommandRouter, Envelope
from .constants import ADMIN_BG, ADMIN_TITLE

ADMIN_STYLE = f"""
QWidget {{ background: {ADMIN_BG}; color: white; font-family: "Segoe UI"; }}
QLineEdit, QTableWidget {{ background: #1a1a1a; border: 1px solid #2a2a2a; padding: 4px; }}
QHeaderView::section {{ background: #1a1a1a; color: white; border: 1px solid #2a2a2a; padding: 4px; }}
QTabBar::tab {{ background: #1a1a1a; border: 1px solid #2a2a2a; padding: 6px 14px; }}
QTabBar::tab:selected {{ background: #2a2a2a; }}
QPushButton {{
    color: white;
    background: #1a1a1a;
    border: 1px solid #2a2a2a;
    padding: 6px 10px;
}}
QPushButton:hover {{ background: #222; }}
QPushButton:pressed {{ background: #2a2a2a; }}
"""


def _item(value: Any) -> QTableWidgetItem:
    it = QTableWidgetItem("" if value is None else str(value))
    it.setFlags(it.flags() & ~Qt.ItemIsEditable)
    return it


class RecordDialog(QDialog):
    """Small form dialog: text fields plus optional 'active' checkbox."""

    def __init__(self, title: str, fields: List[tuple], values: Optional[Dict[str, Any]] = None,
                 with_active: bool = True, parent=None):
        super().__init__(parent)
        self.setWindowTitle(title)
        values = values or {}
        self.edits: Dict[str, QLineEdit] = {}

        form = QFormLayout(self)
        for key, label, secret in fields:
            edit = QLineEdit(str(values.get(key) or ""))
            if secret:
                edit.setEchoMode(QLineEdit.Password)
            self.edits[key] = edit
            form.addRow(label, edit)

        self.active: Optional[QCheckBox] = None
        if with_active:
            self.active = QCheckBox("Active")
            self.active.setChecked(bool(values.get("is_active", True)))
            form.addRow("", self.active)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        form.addRow(buttons)

    def data(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {k: e.text().strip() for k, e in self.edits.items()}
        if self.active is not None:
            out["is_active"] = self.active.isChecked()
        return out


class AdminWindow(QWidget):
    def __init__(self, router: CommandRouter, parent=None):
        super().__init__(parent)
        self.router = router
        self.setWindowTitle(ADMIN_TITLE)
        self.setStyleSheet(ADMIN_STYLE)
        self.resize(980, 620)

        self.stack = QStackedWidget()
        self.stack.addWidget(self._build_login())
        self.stack.addWidget(self._build_panel())

        layout = QVBoxLayout(self)
        layout.setContentsMargins(14, 14, 14, 14)
        layout.addWidget(self.stack)

    # ----------------------------
    # Plumbing
    # ----------------------------
    def _call(self, command: str, *args: Any, title: str = "Admin") -> Optional[Envelope]:
        result = self.router.dispatch(command, *args)
        if not result.get("success"):
            QMessageBox.critical(self, title, str(result.get("error", "Unknown error")))
            return None
        return result

    @staticmethod
    def _table(headers: List[str]) -> QTableWidget:
        t = QTableWidget(0, len(headers))
        t.setHorizontalHeaderLabels(headers)
        t.setSelectionBehavior(QAbstractItemView.SelectRows)
        t.setSelectionMode(QAbstractItemView.SingleSelection)
        t.horizontalHeader().setStretchLastSection(True)
        t.verticalHeader().setVisible(False)
        return t

    @staticmethod
    def _selected_row(table: QTableWidget, rows: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        idx = table.currentRow()
        if idx < 0 or idx >= len(rows):
            return None
        return rows[idx]

    def _confirm(self, text: str) -> bool:
        res = QMessageBox.question(self, "Confirm", text, QMessageBox.Yes | QMessageBox.No)
        return res == QMessageBox.Yes

    # ----------------------------
    # Login
    # ----------------------------
    def _build_login(self) -> QWidget:
        page = QWidget()
        outer = QVBoxLayout(page)
        outer.addStretch(1)

        form = QFormLayout()
        self.username_edit = QLineEdit()
        self.password_edit = QLineEdit()
        self.password_edit.setEchoMode(QLineEdit.Password)
        self.password_edit.returnPressed.connect(self.login)
        form.addRow("Username", self.username_edit)
        form.addRow("Password", self.password_edit)
        outer.addLayout(form)

        btn = QPushButton("Sign in")
        btn.clicked.connect(self.login)
        outer.addWidget(btn)
        outer.addStretch(2)
        return page

    def login(self):
        result = self._call(
            "admin-verify",
            self.username_edit.text().strip(),
            self.password_edit.text(),
            title="Sign in failed",
        )
        self.password_edit.clear()
        if result is None:
            return
        self.user_label.setText(f"Signed in as <b>{result['user']['username']}</b>")
        self.stack.setCurrentIndex(1)
        self.refresh_all()

    def logout(self):
        self.router.dispatch("admin-logout")
        self.stack.setCurrentIndex(0)

    # ----------------------------
    # Panel
    # ----------------------------
    def _build_panel(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)

        header = QHBoxLayout()
        self.user_label = QLabel("")
        header.addWidget(self.user_label)
        header.addStretch(1)
        btn_refresh = QPushButton("Refresh")
        btn_refresh.clicked.connect(self.refresh_all)
        header.addWidget(btn_refresh)
        btn_logout = QPushButton("Sign out")
        btn_logout.clicked.connect(self.logout)
        header.addWidget(btn_logout)
        layout.addLayout(header)

        tabs = QTabWidget()
        tabs.addTab(self._build_cookies_tab(), "Cookies")
        tabs.addTab(self._build_configs_tab(), "App Config")
        tabs.addTab(self._build_users_tab(), "Admins")
        layout.addWidget(tabs)
        return page

    def _button_row(self, *buttons: tuple) -> QHBoxLayout:
        row = QHBoxLayout()
        for label, slot in buttons:
            b = QPushButton(label)
            b.clicked.connect(slot)
            row.addWidget(b)
        row.addStretch(1)
        return row

    def refresh_all(self):
        self.refresh_cookies()
        self.refresh_configs()
        self.refresh_users()

    # ----------------------------
    # Cookies tab
    # ----------------------------
    def _build_cookies_tab(self) -> QWidget:
        w = QWidget()
        lay = QVBoxLayout(w)
        self.cookie_rows: List[Dict[str, Any]] = []
        self.cookie_table = self._table(["ID", "Name", "Cookies", "Expiration", "Created"])
        lay.addWidget(self.cookie_table)
        lay.addLayout(self._button_row(
            ("Save from clipboard", self.save_cookies_from_clipboard),
            ("Save from file…", self.save_cookies_from_file),
            ("Upload local cookies", self.upload_local_cookies),
            ("Delete", self.delete_cookies),
        ))
        return w

    def refresh_cookies(self):
        result = self._call("admin-get-all-cookies", title="Cookies")
        self.cookie_rows = (result or {}).get("cookies") or []
        t = self.cookie_table
        t.setRowCount(len(self.cookie_rows))
        for i, row in enumerate(self.cookie_rows):
            data = row.get("cookies_data")
            count = len(data) if isinstance(data, list) else "?"
            badge = self.router.dispatch("admin-format-expiration", row.get("expires_at"))
            exp_item = _item(badge.get("text"))
            exp_item.setForeground(QColor(badge.get("color", "#888888")))
            t.setItem(i, 0, _item(row.get("id")))
            t.setItem(i, 1, _item(row.get("name")))
            t.setItem(i, 2, _item(count))
            t.setItem(i, 3, exp_item)
            t.setItem(i, 4, _item(row.get("created_at")))
        t.resizeColumnsToContents()

    def _ask_set_name(self) -> Optional[str]:
        name, ok = QInputDialog.getText(self, "Cookie set name", "Name (optional):")
        return name.strip() if ok else None

    def _save_cookie_text(self, text: str):
        name = self._ask_set_name()
        if name is None:
            return
        if self._call("admin-save-cookies", text, name, title="Save cookies") is not None:
            self.refresh_cookies()

    def save_cookies_from_clipboard(self):
        text = QGuiApplication.clipboard().text()
        if not text.strip():
            QMessageBox.warning(self, "Save cookies", "Clipboard empty")
            return
        self._save_cookie_text(text)

    def save_cookies_from_file(self):
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Choose exported cookies", "", "Cookie export (*.json *.txt);;All files (*)"
        )
        if not file_path:
            return
        try:
            text = Path(file_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            QMessageBox.critical(self, "Save cookies", str(e))
            return
        self._save_cookie_text(text)

    def upload_local_cookies(self):
        name = self._ask_set_name()
        if name is None:
            return
        if self._call("admin-upload-local-cookies", name, title="Upload cookies") is not None:
            self.refresh_cookies()

    def delete_cookies(self):
        row = self._selected_row(self.cookie_table, self.cookie_rows)
        if not row or not self._confirm(f"Delete cookie set '{row.get('name')}'?"):
            return
        if self._call("admin-delete-cookies", row.get("id"), title="Delete cookies") is not None:
            self.refresh_cookies()

    # ----------------------------
    # App config tab
    # ----------------------------
    CONFIG_FIELDS = [("app_name", "App name", False), ("app_url", "App URL", False)]

    def _build_configs_tab(self) -> QWidget:
        w = QWidget()
        lay = QVBoxLayout(w)
        self.config_rows: List[Dict[str, Any]] = []
        self.config_table = self._table(["ID", "Name", "URL", "Active", "Created"])
        lay.addWidget(self.config_table)
        lay.addLayout(self._button_row(
            ("Add…", self.add_config),
            ("Edit…", self.edit_config),
            ("Toggle active", self.toggle_config),
            ("Delete", self.delete_config),
        ))
        return w

    def refresh_configs(self):
        result = self._call("admin-get-all-configs", title="App config")
        self.config_rows = (result or {}).get("configs") or []
        t = self.config_table
        t.setRowCount(len(self.config_rows))
        for i, row in enumerate(self.config_rows):
            t.setItem(i, 0, _item(row.get("id")))
            t.setItem(i, 1, _item(row.get("app_name")))
            t.setItem(i, 2, _item(row.get("app_url")))
            t.setItem(i, 3, _item("Yes" if row.get("is_active") else "No"))
            t.setItem(i, 4, _item(row.get("created_at")))
        t.resizeColumnsToContents()

    def add_config(self):
        dlg = RecordDialog("Add app config", self.CONFIG_FIELDS, parent=self)
        if dlg.exec() != QDialog.Accepted:
            return
        if self._call("admin-save-config", dlg.data(), title="Save config") is not None:
            self.refresh_configs()

    def edit_config(self):
        row = self._selected_row(self.config_table, self.config_rows)
        if not row:
            return
        dlg = RecordDialog("Edit app config", self.CONFIG_FIELDS, row, parent=self)
        if dlg.exec() != QDialog.Accepted:
            return
        if self._call("admin-update-config", row.get("id"), dlg.data(), title="Update config") is not None:
            self.refresh_configs()

    def toggle_config(self):
        row = self._selected_row(self.config_table, self.config_rows)
        if not row:
            return
        changes = {"is_active": not row.get("is_active")}
        if self._call("admin-update-config", row.get("id"), changes, title="Update config") is not None:
            self.refresh_configs()

    def delete_config(self):
        row = self._selected_row(self.config_table, self.config_rows)
        if not row or not self._confirm(f"Delete config '{row.get('app_name')}'?"):
            return
        if self._call("admin-delete-config", row.get("id"), title="Delete config") is not None:
            self.refresh_configs()

    # ----------------------------
    # Admin accounts tab
    # ----------------------------
    USER_FIELDS = [
        ("username", "Username", False),
        ("email", "Email", False),
        ("password", "Password", True),
    ]

    def _build_users_tab(self) -> QWidget:
        w = QWidget()
        lay = QVBoxLayout(w)
        self.user_rows: List[Dict[str, Any]] = []
        self.user_table = self._table(["ID", "Username", "Email", "Active", "Created"])
        lay.addWidget(self.user_table)
        lay.addLayout(self._button_row(
            ("Add…", self.add_user),
            ("Edit…", self.edit_user),
            ("Toggle active", self.toggle_user),
            ("Delete", self.delete_user),
        ))
        return w

    def refresh_users(self):
        result = self._call("admin-get-all-users", title="Admins")
        self.user_rows = (result or {}).get("users") or []
        t = self.user_table
        t.setRowCount(len(self.user_rows))
        for i, row in enumerate(self.user_rows):
            t.setItem(i, 0, _item(row.get("id")))
            t.setItem(i, 1, _item(row.get("username")))
            t.setItem(i, 2, _item(row.get("email")))
            t.setItem(i, 3, _item("Yes" if row.get("is_active") else "No"))
            t.setItem(i, 4, _item(row.get("created_at")))
        t.resizeColumnsToContents()

    def add_user(self):
        dlg = RecordDialog("Add admin", self.USER_FIELDS, with_active=False, parent=self)
        if dlg.exec() != QDialog.Accepted:
            return
        if self._call("admin-create-user", dlg.data(), title="Create admin") is not None:
            self.refresh_users()

    def edit_user(self):
        row = self._selected_row(self.user_table, self.user_rows)
        if not row:
            return
        dlg = RecordDialog("Edit admin (leave password empty to keep it)", self.USER_FIELDS, row, parent=self)
        if dlg.exec() != QDialog.Accepted:
            return
        data = dlg.data()
        data["email"] = data.get("email") or None
        if self._call("admin-update-user", row.get("id"), data, title="Update admin") is not None:
            self.refresh_users()

    def toggle_user(self):
        row = self._selected_row(self.user_table, self.user_rows)
        if not row:
            return
        changes = {"is_active": not row.get("is_active")}
        if self._call("admin-update-user", row.get("id"), changes, title="Update admin") is not None:
            self.refresh_users()

    def delete_user(self):
        row = self._selected_row(self.user_table, self.user_rows)
        if not row or not self._confirm(f"Delete admin '{row.get('username')}'?"):
            return
        if self._call("admin-delete-user", row.get("id"), title="Delete admin") is not None:
            self.refresh_users()
