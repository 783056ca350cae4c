#===============================================================================
#  Web Kiosk Shell | page_rules.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-13
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  Declarative overlay rules for the hosted page: selectors to hide/remove and
#  floating buttons wired to shell commands. Rendered into one injected script.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import List, Optional, Tuple

from .constants import BUTTON_BLUE, BUTTON_GREEN, BUTTON_RED

HIDE = "hide"
REMOVE = "remove"

# Pseudo-command handled in the page itself: go back to the target URL.
RELOAD = "reload"


@dataclass(frozen=True)
class PageRule:
    selector: str
    action: str = HIDE                  # "hide" | "remove"
    text_match: Optional[str] = None    # only elements whose trimmed text equals this
    closest: Optional[str] = None       # act on el.closest(closest) instead of el

    def __post_init__(self):
        if self.action not in (HIDE, REMOVE):
            raise ValueError(f"Unknown page rule action: {self.action}")


@dataclass(frozen=True)
class FloatingButton:
    element_id: str
    label: str
    title: str
    command: str
    color: str = BUTTON_BLUE[0]
    hover_color: str = BUTTON_BLUE[1]
    bottom: int = 20
    font_size: int = 20


@dataclass(frozen=True)
class UiRuleSet:
    rules: Tuple[PageRule, ...] = ()
    buttons: Tuple[FloatingButton, ...] = ()
    style_id: str = "kiosk-overlay-css"
    interval_ms: int = 500


def default_rule_set() -> UiRuleSet:
    """Hide the hosted app's "leave fullscreen" controls; add reload / switch account / paste buttons."""
    leave = ('[aria-label="Leave fullscreen"]', '[mattooltip="Leave fullscreen"]')
    rules: List[PageRule] = [
        PageRule('button[aria-label="Leave fullscreen"]'),
        PageRule('button[iconname="fullscreen_exit"]'),
        PageRule('button[mattooltip="Leave fullscreen"]'),
    ]
    rules += [PageRule(sel, REMOVE) for sel in leave]
    rules.append(PageRule(".material-symbols-outlined", REMOVE, text_match="fullscreen_exit", closest="button"))

    buttons = (
        FloatingButton("kiosk-reload-btn", "↻", "Reload App", RELOAD,
                       *BUTTON_BLUE, bottom=20, font_size=24),
        FloatingButton("kiosk-logout-btn", "⏻", "Switch Account (Clear Cache & Logout)",
                       "clear-session-and-reload", *BUTTON_RED, bottom=80),
        FloatingButton("kiosk-import-btn", "\U0001f4cb", "Paste Cookies (copy from browser first)",
                       "paste-cookies-from-clipboard", *BUTTON_GREEN, bottom=140),
    )
    return UiRuleSet(rules=tuple(rules), buttons=buttons)


def build_hide_css(rule_set: UiRuleSet) -> str:
    selectors = [r.selector for r in rule_set.rules if r.action == HIDE]
    if not selectors:
        return ""
    return ",\n".join(selectors) + " { display: none !important; visibility: hidden !important; }"


_SCRIPT_TEMPLATE = """
(function() {
    if (window.__kioskOverlay) { window.__kioskOverlay.apply(); return; }
    const TARGET_URL = %(target_url)s;
    const CSS = %(css)s;
    const STYLE_ID = %(style_id)s;
    const RULES = %(rules)s;
    const BUTTONS = %(buttons)s;

    function invoke(command) {
        if (command === "reload") { window.location.href = TARGET_URL; return; }
        if (window.kiosk && window.kiosk.invoke) { window.kiosk.invoke(command); }
    }

    function injectCSS() {
        if (!CSS || document.getElementById(STYLE_ID)) return;
        const style = document.createElement("style");
        style.id = STYLE_ID;
        style.textContent = CSS;
        (document.head || document.documentElement).appendChild(style);
    }

    function applyRules() {
        RULES.forEach(rule => {
            document.querySelectorAll(rule.selector).forEach(el => {
                if (rule.text_match !== null && (el.textContent || "").trim() !== rule.text_match) return;
                const target = rule.closest ? el.closest(rule.closest) : el;
                if (!target) return;
                if (rule.action === "remove") {
                    target.remove();
                } else {
                    target.style.setProperty("display", "none", "important");
                }
            });
        });
    }

    function createButtons() {
        if (!document.body) return;
        BUTTONS.forEach(b => {
            if (document.getElementById(b.element_id)) return;
            const btn = document.createElement("button");
            btn.id = b.element_id;
            btn.textContent = b.label;
            btn.title = b.title;
            btn.setAttribute("style",
                "position: fixed !important; right: 20px !important;" +
                "bottom: " + b.bottom + "px !important;" +
                "width: 50px !important; height: 50px !important; border-radius: 50%% !important;" +
                "background: " + b.color + " !important; color: white !important; border: none !important;" +
                "font-size: " + b.font_size + "px !important; cursor: pointer !important;" +
                "z-index: 2147483647 !important; box-shadow: 0 2px 10px rgba(0,0,0,0.3) !important;" +
                "display: flex !important; align-items: center !important; justify-content: center !important;");
            btn.onclick = function() { invoke(b.command); };
            btn.onmouseover = function() { btn.style.setProperty("background", b.hover_color, "important"); };
            btn.onmouseout = function() { btn.style.setProperty("background", b.color, "important"); };
            document.body.appendChild(btn);
        });
    }

    function apply() { injectCSS(); applyRules(); createButtons(); }

    window.__kioskOverlay = { apply: apply };
    apply();
    setInterval(apply, %(interval_ms)d);
    if (document.body) {
        new MutationObserver(applyRules).observe(document.body, { childList: true, subtree: true });
    }
})();
"""


def build_overlay_script(rule_set: UiRuleSet, target_url: str) -> str:
    """Render the rule set into a single idempotent, self-invoking script."""
    return _SCRIPT_TEMPLATE % {
        "target_url": json.dumps(target_url),
        "css": json.dumps(build_hide_css(rule_set)),
        "style_id": json.dumps(rule_set.style_id),
        "rules": json.dumps([asdict(r) for r in rule_set.rules]),
        "buttons": json.dumps([asdict(b) for b in rule_set.buttons], ensure_ascii=False),
        "interval_ms": int(rule_set.interval_ms),
    }


# Clears web storage of the origin currently shown. IndexedDB and Cache
# Storage deletions are async and may still be running when the page unloads;
# the on-disk wipe at next startup covers what they miss.
CLEAR_STORAGE_SCRIPT = """
(function() {
    try { window.localStorage.clear(); } catch (e) {}
    try { window.sessionStorage.clear(); } catch (e) {}
    try {
        if (window.indexedDB && indexedDB.databases) {
            indexedDB.databases().then(function(dbs) {
                dbs.forEach(function(db) { if (db.name) indexedDB.deleteDatabase(db.name); });
            });
        }
    } catch (e) {}
    try {
        if (window.caches && caches.keys) {
            caches.keys().then(function(keys) { keys.forEach(function(k) { caches.delete(k); }); });
        }
    } catch (e) {}
})();
"""
