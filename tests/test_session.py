"""Tests for applying cookie sets to the live session and resetting it."""
from kiosk.cookie_store import CookieStore, parse_cookie_text
from kiosk.session import EntryPoint, SessionApplier

from conftest import FakeBackend


def test_apply_writes_every_record(applier, backend, cookie_text):
    report = applier.apply(parse_cookie_text(cookie_text))
    assert (report.attempted, report.succeeded, report.failed) == (3, 3, [])
    urls = [c[2] for c in backend.calls]
    assert urls == [
        "https://example.com/",
        "https://accounts.example.com/",
        "https://example.com/",
    ]


def test_apply_is_best_effort(store, navigations, cookie_text):
    backend = FakeBackend(fail_names={"LSID"})
    applier = SessionApplier(backend, store, navigations.append)
    report = applier.apply(parse_cookie_text(cookie_text))
    assert report.attempted == 3
    assert report.succeeded == 2
    assert report.failed == [("LSID", "rejected by engine")]
    # the record after the failure was still attempted
    assert backend.calls[-1][1] == "pref"
    assert report.to_dict()["failed"] == [{"name": "LSID", "error": "rejected by engine"}]


def test_apply_persisted(applier, backend, store, cookie_text):
    assert applier.apply_persisted().attempted == 0
    store.import_from_source(cookie_text)
    assert applier.apply_persisted().succeeded == 3
    assert len(backend.cookies) == 3


def test_decide_entry_point(applier, store, cookie_text):
    assert applier.decide_entry_point() == EntryPoint.WELCOME
    store.import_from_source(cookie_text)
    assert applier.decide_entry_point() == EntryPoint.TARGET


def test_reset_clears_everything_and_navigates(applier, backend, store, navigations, cookie_text):
    store.import_from_source(cookie_text)
    applier.apply_persisted()

    report = applier.reset_and_navigate_to_entry()

    assert report.ok
    assert backend.cookies == {}
    assert ("clear_http_cache",) in backend.calls
    assert not store.has_valid_cookie_set()
    assert navigations == [EntryPoint.WELCOME]


def test_reset_runs_all_steps_when_one_fails(store, navigations, cookie_text):
    backend = FakeBackend(fail_steps={"clear_storage", "clear_http_cache"})
    applier = SessionApplier(backend, store, navigations.append)
    store.import_from_source(cookie_text)

    report = applier.reset_and_navigate_to_entry()

    assert not report.ok
    assert [step for step, _ in report.errors] == ["clear_storage", "clear_http_cache"]
    assert not store.has_valid_cookie_set()
    assert report.navigated
    assert navigations == [EntryPoint.WELCOME]


def test_reset_reports_navigation_failure(backend, store):
    def broken(entry):
        raise RuntimeError("no window")

    report = SessionApplier(backend, store, broken).reset_and_navigate_to_entry()
    assert not report.navigated
    assert report.errors == [("navigate", "no window")]


def test_reset_without_cookie_file(applier, store, navigations):
    report = applier.reset_and_navigate_to_entry()
    assert report.ok
    assert navigations == [EntryPoint.WELCOME]


class LockedStore(CookieStore):
    """Cookie file that the OS refuses to delete."""

    def clear(self):
        raise PermissionError("file is in use")


def test_reset_empties_cookie_file_it_cannot_delete(backend, tmp_path, navigations, cookie_text):
    store = LockedStore(tmp_path / "cookies.json")
    store.import_from_source(cookie_text)
    applier = SessionApplier(backend, store, navigations.append)

    report = applier.reset_and_navigate_to_entry()

    assert report.ok
    assert store.path.read_text(encoding="utf-8") == "[]"
    assert not store.has_valid_cookie_set()
    assert applier.decide_entry_point() == EntryPoint.WELCOME
    assert navigations == [EntryPoint.WELCOME]
