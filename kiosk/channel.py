#===============================================================================
#  Web Kiosk Shell | channel.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-13
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  QWebChannel object exposed to web pages as window.kiosk. Calls go through
#  CommandRouter.dispatch_page: allow-listed user commands, no arguments.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import json
from typing import Optional

from PySide6.QtCore import QFile, QIODevice, QObject, Signal, Slot

from .commands import CommandRouter, fail

CHANNEL_OBJECT_NAME = "kiosk"

_GLUE = """
(function() {
    if (typeof QWebChannel === "undefined" || !window.qt || !qt.webChannelTransport) return;
    new QWebChannel(qt.webChannelTransport, function(channel) {
        const bridge = channel.objects.%(name)s;
        window.kiosk = {
            invoke: function(command) {
                const args = Array.prototype.slice.call(arguments, 1);
                return new Promise(function(resolve) {
                    bridge.invoke(command, JSON.stringify(args), function(result) {
                        try { resolve(JSON.parse(result)); }
                        catch (e) { resolve({ success: false, error: String(e) }); }
                    });
                });
            }
        };
        window.dispatchEvent(new Event("kiosk-ready"));
    });
})();
"""


def qwebchannel_js() -> str:
    f = QFile(":/qtwebchannel/qwebchannel.js")
    if not f.open(QIODevice.ReadOnly):
        raise RuntimeError("qwebchannel.js resource is missing from this Qt build")
    try:
        return bytes(f.readAll()).decode("utf-8")
    finally:
        f.close()


def channel_bootstrap_script() -> str:
    return qwebchannel_js() + "\n" + _GLUE % {"name": CHANNEL_OBJECT_NAME}


class CommandChannel(QObject):
    """Page-facing end of the command boundary."""

    commandFailed = Signal(str, str)  # command, error

    def __init__(self, router: Optional[CommandRouter] = None, parent=None):
        super().__init__(parent)
        self.router = router

    @Slot(str, str, result=str)
    def invoke(self, command: str, args_json: str) -> str:
        if self.router is None:
            return json.dumps(fail("Shell is still starting"))

        out = self.router.dispatch_page(command, args_json)
        try:
            envelope = json.loads(out)
        except ValueError:
            envelope = {}
        if not envelope.get("success", False):
            self.commandFailed.emit(command, str(envelope.get("error", "")))
        return out
