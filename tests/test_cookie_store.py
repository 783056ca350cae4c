"""Tests for cookie parsing, validation and the on-disk cookie store."""
import json
from datetime import datetime, timezone

import pytest

from kiosk.cookie_store import (
    LENIENT,
    CookieStore,
    DomainPolicy,
    compute_earliest_expiration,
    parse_cookie_text,
    record_expiration,
)
from kiosk.errors import (
    CookieImportError,
    DomainPolicyError,
    EmptyError,
    ParseError,
    SchemaError,
    ShapeError,
)
from kiosk.models import CookieRecord, SameSite

from conftest import SAMPLE_COOKIES


def test_parse_valid_set():
    cs = parse_cookie_text(json.dumps(SAMPLE_COOKIES))
    assert len(cs) == 3
    assert [r.name for r in cs] == ["SID", "LSID", "pref"]
    assert cs.records[0].http_only is True
    assert cs.records[1].same_site == SameSite.LAX
    assert cs.records[2].path == "/"


def test_parse_accepts_bytes_with_bom():
    raw = b"\xef\xbb\xbf" + json.dumps(SAMPLE_COOKIES).encode("utf-8")
    assert len(parse_cookie_text(raw)) == 3


def test_parse_rejects_non_utf8_bytes():
    with pytest.raises(ParseError):
        parse_cookie_text(b"\xff\xfe\x00garbage")


def test_parse_errors_by_kind():
    with pytest.raises(ParseError):
        parse_cookie_text("not json")
    with pytest.raises(ShapeError):
        parse_cookie_text('{"domain": "example.com"}')
    with pytest.raises(EmptyError):
        parse_cookie_text("[]")
    with pytest.raises(EmptyError):
        parse_cookie_text("   ")
    with pytest.raises(SchemaError):
        parse_cookie_text('[{"domain": "example.com", "name": "a"}]')
    with pytest.raises(SchemaError):
        parse_cookie_text('["just a string"]')
    with pytest.raises(SchemaError):
        parse_cookie_text('[{"domain": "example.com", "name": "a", "value": 5}]')


def test_import_errors_share_base_class():
    for exc in (ParseError, ShapeError, EmptyError, SchemaError, DomainPolicyError):
        assert issubclass(exc, CookieImportError)


def test_target_url_strips_leading_dot():
    rec = CookieRecord(domain=".example.com", name="a", value="b")
    assert rec.target_url() == "https://example.com/"
    rec = CookieRecord(domain="example.com", name="a", value="b", path="/app")
    assert rec.target_url("http") == "http://example.com/app"


def test_samesite_parse():
    assert SameSite.parse("none") == SameSite.NO_RESTRICTION
    assert SameSite.parse(None) == SameSite.NO_RESTRICTION
    assert SameSite.parse("Strict") == SameSite.STRICT
    assert SameSite.parse("weird") == SameSite.UNSPECIFIED


def test_domain_policy_strict_vs_lenient():
    other = json.dumps([{"domain": "other.org", "name": "a", "value": "b"}])
    strict = DomainPolicy(allowed_suffixes=("example.com",), strict=True)

    with pytest.raises(DomainPolicyError):
        parse_cookie_text(other, strict)
    assert len(parse_cookie_text(other, LENIENT)) == 1
    assert len(parse_cookie_text(json.dumps(SAMPLE_COOKIES), strict)) == 3


def test_domain_policy_matches_suffix_not_substring():
    policy = DomainPolicy(allowed_suffixes=(".google.com",), strict=True)
    assert policy.matches("accounts.google.com")
    assert policy.matches(".google.com")
    assert not policy.matches("notgoogle.com")


def test_earliest_expiration():
    cs = parse_cookie_text(json.dumps(SAMPLE_COOKIES))
    assert cs.expires_at == datetime(2029, 1, 1, tzinfo=timezone.utc)
    assert compute_earliest_expiration(cs.records) == cs.expires_at


def test_earliest_expiration_none_when_session_cookies_only():
    cs = parse_cookie_text('[{"domain": "example.com", "name": "a", "value": "b"}]')
    assert cs.expires_at is None


def test_expiration_from_date_string():
    rec = CookieRecord(domain="example.com", name="a", value="b",
                       expires="Wed, 01 Jan 2031 00:00:00 GMT")
    assert record_expiration(rec) == datetime(2031, 1, 1, tzinfo=timezone.utc)
    rec = CookieRecord(domain="example.com", name="a", value="b", expires="2031-01-01T00:00:00Z")
    assert record_expiration(rec) == datetime(2031, 1, 1, tzinfo=timezone.utc)
    rec = CookieRecord(domain="example.com", name="a", value="b", expires="someday")
    assert record_expiration(rec) is None


def test_store_import_persists_and_validates(store, cookie_text):
    assert not store.has_valid_cookie_set()
    cs = store.import_from_source(cookie_text)
    assert store.has_valid_cookie_set()
    assert store.load().to_list() == cs.to_list()


def test_store_import_is_idempotent(store, cookie_text):
    store.import_from_source(cookie_text)
    first = store.path.read_text(encoding="utf-8")
    store.import_from_source(cookie_text)
    assert store.path.read_text(encoding="utf-8") == first


def test_store_import_overwrites_previous_set(store, cookie_text):
    store.import_from_source(cookie_text)
    store.import_from_source('[{"domain": "example.com", "name": "only", "value": "1"}]')
    assert [r.name for r in store.load()] == ["only"]


def test_failed_import_writes_nothing(store):
    with pytest.raises(ParseError):
        store.import_from_source("not json")
    assert not store.path.exists()
    with pytest.raises(EmptyError):
        store.import_from_source("[]")
    assert not store.path.exists()


def test_failed_import_keeps_previous_set(store, cookie_text):
    store.import_from_source(cookie_text)
    with pytest.raises(SchemaError):
        store.import_from_source('[{"name": "x"}]')
    assert len(store.load()) == 3


def test_store_strict_policy(tmp_path):
    store = CookieStore(tmp_path / "cookies.json", DomainPolicy(("example.com",), strict=True))
    with pytest.raises(DomainPolicyError):
        store.import_from_source('[{"domain": "other.org", "name": "a", "value": "b"}]')
    assert not store.path.exists()


def test_import_from_file(store, tmp_path, cookie_text):
    src = tmp_path / "export.json"
    src.write_text(cookie_text, encoding="utf-8")
    assert len(store.import_from_file(src)) == 3

    with pytest.raises(ParseError):
        store.import_from_file(tmp_path / "missing.json")


def test_has_valid_cookie_set_rejects_bad_files(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text("{broken", encoding="utf-8")
    assert not store.has_valid_cookie_set()
    store.path.write_text("[]", encoding="utf-8")
    assert not store.has_valid_cookie_set()
    store.path.write_text('{"a": 1}', encoding="utf-8")
    assert not store.has_valid_cookie_set()
    assert store.load() is None


def test_store_earliest_expiration(store, cookie_text):
    assert store.compute_earliest_expiration() is None
    store.import_from_source(cookie_text)
    assert store.compute_earliest_expiration() == datetime(2029, 1, 1, tzinfo=timezone.utc)


def test_clear_is_idempotent(store, cookie_text):
    store.clear()
    store.import_from_source(cookie_text)
    store.clear()
    store.clear()
    assert not store.has_valid_cookie_set()


def test_saved_file_uses_export_field_names(store, cookie_text):
    store.import_from_source(cookie_text)
    data = json.loads(store.path.read_text(encoding="utf-8"))
    assert data[0]["httpOnly"] is True
    assert data[0]["sameSite"] == "no_restriction"
    assert data[0]["expirationDate"] == 1893456000
    assert "expirationDate" not in data[2]


def test_invalidate_leaves_no_valid_set(store, cookie_text):
    store.import_from_source(cookie_text)
    store.invalidate()
    assert json.loads(store.path.read_text(encoding="utf-8")) == []
    assert not store.has_valid_cookie_set()
    assert store.load() is None
    assert not list(store.path.parent.glob(".cookies-*.tmp"))


def test_expiration_with_trimmed_fraction():
    rec = CookieRecord(domain="example.com", name="a", value="b",
                       expires="2031-01-01T00:00:00.12345+00:00")
    assert record_expiration(rec) == datetime(2031, 1, 1, 0, 0, 0, 123450, tzinfo=timezone.utc)
