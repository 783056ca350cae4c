import json

import pytest

from kiosk.page_rules import (
    CLEAR_STORAGE_SCRIPT,
    HIDE,
    RELOAD,
    REMOVE,
    FloatingButton,
    PageRule,
    UiRuleSet,
    build_hide_css,
    build_overlay_script,
    default_rule_set,
)


def test_rule_rejects_unknown_action():
    with pytest.raises(ValueError):
        PageRule("div", action="explode")


def test_default_rule_set():
    rs = default_rule_set()
    selectors = [r.selector for r in rs.rules]
    assert 'button[aria-label="Leave fullscreen"]' in selectors
    assert any(r.action == REMOVE and r.text_match == "fullscreen_exit" for r in rs.rules)

    by_id = {b.element_id: b for b in rs.buttons}
    assert by_id["kiosk-reload-btn"].command == RELOAD
    assert by_id["kiosk-logout-btn"].command == "clear-session-and-reload"
    assert by_id["kiosk-import-btn"].command == "paste-cookies-from-clipboard"
    assert [b.bottom for b in rs.buttons] == [20, 80, 140]


def test_hide_css_only_uses_hide_rules():
    rs = UiRuleSet(rules=(PageRule(".a"), PageRule(".b", REMOVE), PageRule(".c", HIDE)))
    css = build_hide_css(rs)
    assert ".a" in css and ".c" in css
    assert ".b" not in css
    assert "display: none !important" in css
    assert build_hide_css(UiRuleSet()) == ""


def test_overlay_script_embeds_rules_and_buttons():
    rs = UiRuleSet(
        rules=(PageRule('[data-x="1"]', REMOVE),),
        buttons=(FloatingButton("b1", "X", "Do it", "go-to-target", bottom=33),),
        interval_ms=250,
    )
    script = build_overlay_script(rs, "https://app.example.com/?a=1&b=2")

    assert json.dumps("https://app.example.com/?a=1&b=2") in script
    assert json.dumps('[data-x="1"]') in script
    assert '"element_id": "b1"' in script
    assert '"bottom": 33' in script
    assert "setInterval(apply, 250)" in script
    assert "border-radius: 50% !important" in script
    assert "window.kiosk.invoke(command)" in script
    assert "%(" not in script


def test_default_overlay_script_renders():
    script = build_overlay_script(default_rule_set(), "https://example.com/")
    assert script.strip().startswith("(function() {")
    assert script.strip().endswith("})();")
    assert "window.__kioskOverlay" in script
    assert "MutationObserver" in script
    assert "kiosk-logout-btn" in script


def test_clear_storage_script_covers_web_storage():
    for call in ("localStorage.clear()", "sessionStorage.clear()", "indexedDB.deleteDatabase", "caches.delete"):
        assert call in CLEAR_STORAGE_SCRIPT
