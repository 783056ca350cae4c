"""Tests for the remote table-store bridge against a scripted HTTP session."""
import json

import pytest
import requests

from kiosk.cookie_store import parse_cookie_text
from kiosk.models import AdminAccount, AppConfig, CookieSet
from kiosk.passwords import hash_password, verify_password
from kiosk.remote import ADMIN_PUBLIC_COLUMNS, FetchResult, RemoteBridge
from kiosk.settings import RemoteSettings

from conftest import SAMPLE_COOKIES, FakeHttpSession, FakeResponse


def make_bridge(*responses):
    http = FakeHttpSession(*responses)
    settings = RemoteSettings(url="https://proj.supabase.co/", anon_key="anon-key", timeout=5)
    return RemoteBridge(settings, session=http), http


def test_fetch_result_helpers():
    assert FetchResult.of(None).status == "empty"
    assert FetchResult.of([]).status == "empty"
    assert FetchResult.of([1]).ok
    failed = FetchResult.fail("boom")
    assert failed.failed and not failed.ok and failed.error == "boom"


def test_request_shape():
    bridge, http = make_bridge(FakeResponse(200, []))
    bridge.list_cookie_sets()
    call = http.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://proj.supabase.co/rest/v1/cookies"
    assert call["params"] == {"select": "*", "order": "created_at.desc"}
    assert call["headers"]["apikey"] == "anon-key"
    assert call["headers"]["Authorization"] == "Bearer anon-key"
    assert "Prefer" not in call["headers"]
    assert call["timeout"] == 5


def test_custom_table_names():
    http = FakeHttpSession(FakeResponse(200, []))
    settings = RemoteSettings(url="https://proj.supabase.co", anon_key="k",
                              tables={"cookies": "kiosk_cookies"})
    RemoteBridge(settings, session=http).list_cookie_sets()
    assert http.calls[0]["url"].endswith("/rest/v1/kiosk_cookies")


def test_fetch_latest_cookie_set_from_array():
    row = {"id": 7, "name": "team", "cookies_data": SAMPLE_COOKIES}
    bridge, http = make_bridge(FakeResponse(200, [row]))
    result = bridge.fetch_latest_cookie_set()
    assert result.ok
    assert isinstance(result.data, CookieSet)
    assert len(result.data) == 3
    assert result.data.name == "team"
    assert http.calls[0]["params"]["limit"] == "1"
    assert http.calls[0]["params"]["order"] == "created_at.desc"


def test_fetch_latest_cookie_set_from_string():
    row = {"id": 7, "name": "team", "cookies_data": json.dumps(SAMPLE_COOKIES)}
    bridge, _ = make_bridge(FakeResponse(200, [row]))
    assert len(bridge.fetch_latest_cookie_set().data) == 3


def test_fetch_latest_cookie_set_empty_vs_failed():
    bridge, _ = make_bridge(FakeResponse(200, []))
    assert bridge.fetch_latest_cookie_set().status == "empty"

    bridge, _ = make_bridge(FakeResponse(500, {"message": "db down"}))
    result = bridge.fetch_latest_cookie_set()
    assert result.failed
    assert "db down" in result.error

    bridge, _ = make_bridge(requests.exceptions.ConnectionError("offline"))
    result = bridge.fetch_latest_cookie_set()
    assert result.failed
    assert "offline" in result.error


def test_fetch_latest_cookie_set_invalid_payload_fails():
    bridge, _ = make_bridge(FakeResponse(200, [{"id": 3, "cookies_data": "not json"}]))
    result = bridge.fetch_latest_cookie_set()
    assert result.failed
    assert "#3" in result.error


def test_invalid_json_body_fails():
    bridge, _ = make_bridge(FakeResponse(200, text="<html>oops</html>"))
    assert bridge.list_cookie_sets().failed


def test_save_cookie_set():
    cs = parse_cookie_text(json.dumps(SAMPLE_COOKIES))
    saved_row = {"id": 1, "name": "mine"}
    bridge, http = make_bridge(FakeResponse(201, [saved_row]))

    result = bridge.save_cookie_set(cs, "mine")

    assert result.ok and result.data == saved_row
    call = http.calls[0]
    assert call["method"] == "POST"
    assert call["headers"]["Prefer"] == "return=representation"
    assert call["json"]["name"] == "mine"
    assert call["json"]["cookies_data"] == cs.to_list()
    assert call["json"]["expires_at"].startswith("2029-01-01")


def test_save_cookie_set_default_name():
    cs = parse_cookie_text('[{"domain": "example.com", "name": "a", "value": "b"}]')
    bridge, http = make_bridge(FakeResponse(201, [{"id": 1}]))
    bridge.save_cookie_set(cs)
    assert http.calls[0]["json"]["name"].startswith("Cookies ")
    assert http.calls[0]["json"]["expires_at"] is None


def test_delete_returns_ids_only():
    bridge, http = make_bridge(FakeResponse(200, [{"id": 4, "password": "$2b$..."}]))
    result = bridge.delete_admin(4)
    assert result.data == [4]
    assert http.calls[0]["method"] == "DELETE"
    assert http.calls[0]["params"] == {"id": "eq.4"}


def test_delete_missing_row_is_empty():
    bridge, _ = make_bridge(FakeResponse(200, []))
    assert bridge.delete_cookie_set(99).status == "empty"


def test_fetch_active_app_config():
    row = {"id": 2, "app_name": "Sheets", "app_url": "https://docs.example.com/x", "is_active": True}
    bridge, http = make_bridge(FakeResponse(200, [row]))
    result = bridge.fetch_active_app_config()
    assert isinstance(result.data, AppConfig)
    assert result.data.app_url == "https://docs.example.com/x"
    assert http.calls[0]["params"]["is_active"] == "eq.true"


def test_save_app_config_defaults():
    bridge, http = make_bridge(FakeResponse(201, [{"id": 1, "app_url": "https://a.example.com"}]))
    result = bridge.save_app_config({"app_url": "https://a.example.com"})
    body = http.calls[0]["json"]
    assert body["app_name"] == "Web App"
    assert body["is_active"] is True
    assert result.data.app_url == "https://a.example.com"


def test_update_app_config_sends_only_known_fields():
    bridge, http = make_bridge(FakeResponse(200, [{"id": 1, "app_url": "u", "is_active": False}]))
    result = bridge.update_app_config(1, {"is_active": False, "junk": 1})
    assert http.calls[0]["method"] == "PATCH"
    assert http.calls[0]["json"] == {"is_active": False}
    assert result.data[0].is_active is False


def test_update_with_no_changes_skips_request():
    bridge, http = make_bridge()
    assert bridge.update_app_config(1, {}).status == "empty"
    assert bridge.update_admin(1, {"password": ""}).status == "empty"
    assert http.calls == []


def test_verify_admin():
    row = {"id": 1, "username": "root", "password": hash_password("pw", rounds=4), "is_active": True}
    bridge, http = make_bridge(FakeResponse(200, [row]))
    result = bridge.verify_admin("root", "pw")
    assert result.ok
    assert isinstance(result.data, AdminAccount)
    assert result.data.username == "root"
    assert "password" not in result.data.to_dict()
    assert http.calls[0]["params"]["username"] == "eq.root"
    assert http.calls[0]["params"]["is_active"] == "eq.true"


def test_verify_admin_wrong_password_or_plaintext_row():
    row = {"id": 1, "username": "root", "password": hash_password("pw", rounds=4)}
    bridge, _ = make_bridge(FakeResponse(200, [row]))
    assert bridge.verify_admin("root", "nope").status == "empty"

    bridge, _ = make_bridge(FakeResponse(200, [{"id": 1, "username": "root", "password": "pw"}]))
    assert bridge.verify_admin("root", "pw").status == "empty"


def test_verify_admin_blank_input_makes_no_request():
    bridge, http = make_bridge()
    assert bridge.verify_admin("", "pw").status == "empty"
    assert http.calls == []


def test_verify_admin_remote_failure_is_distinguishable():
    bridge, _ = make_bridge(FakeResponse(401, {"message": "Invalid API key"}))
    result = bridge.verify_admin("root", "pw")
    assert result.failed
    assert "Invalid API key" in result.error


def test_list_admins_never_selects_password():
    bridge, http = make_bridge(FakeResponse(200, [{"id": 1, "username": "root"}]))
    result = bridge.list_admins()
    assert http.calls[0]["params"]["select"] == ADMIN_PUBLIC_COLUMNS
    assert "password" not in ADMIN_PUBLIC_COLUMNS
    assert result.data[0].username == "root"


def test_create_admin_hashes_password():
    bridge, http = make_bridge(FakeResponse(201, [{"id": 5, "username": "ops"}]))
    result = bridge.create_admin({"username": " ops ", "password": "pw", "email": ""})
    body = http.calls[0]["json"]
    assert body["username"] == "ops"
    assert body["password"] != "pw"
    assert verify_password("pw", body["password"])
    assert body["email"] is None
    assert result.data.id == 5


def test_create_admin_requires_credentials():
    bridge, http = make_bridge()
    result = bridge.create_admin({"username": "ops"})
    assert result.failed
    assert http.calls == []


def test_update_admin_rehashes_password():
    bridge, http = make_bridge(FakeResponse(200, [{"id": 5, "username": "ops"}]))
    bridge.update_admin(5, {"password": "new", "is_active": 0})
    body = http.calls[0]["json"]
    assert verify_password("new", body["password"])
    assert body["is_active"] is False


@pytest.mark.parametrize("status", [204, 200])
def test_empty_body_is_empty_list(status):
    bridge, _ = make_bridge(FakeResponse(status, text=""))
    assert bridge.list_cookie_sets().status == "empty"


def test_rows_that_are_not_objects_fail_cleanly():
    bridge, _ = make_bridge(*(FakeResponse(200, ["x", 1]) for _ in range(3)))
    for call in (bridge.list_app_configs, bridge.list_admins, bridge.fetch_active_app_config):
        result = call()
        assert result.failed
        assert result.error.startswith("Unexpected data from remote store")
