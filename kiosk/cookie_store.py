#===============================================================================
#  Web Kiosk Shell | cookie_store.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-12
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  Local persisted cookie set (cookies.json): validation, import from
#  clipboard/file text, earliest expiration and clear.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple, Union

from .errors import DomainPolicyError, EmptyError, ParseError, SchemaError, ShapeError
from .expiration import parse_iso_datetime
from .models import REQUIRED_COOKIE_FIELDS, CookieRecord, CookieSet

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainPolicy:
    """Allow-list of cookie domain suffixes.

    Lenient policies accept any set. Strict policies require at least one
    cookie whose domain belongs to one of the allowed suffixes.
    """
    allowed_suffixes: Tuple[str, ...] = ()
    strict: bool = False

    def matches(self, domain: str) -> bool:
        d = (domain or "").strip().lower().lstrip(".")
        for suffix in self.allowed_suffixes:
            s = suffix.strip().lower().lstrip(".")
            if s and (d == s or d.endswith("." + s)):
                return True
        return False

    def check(self, records: Iterable[CookieRecord]) -> None:
        if not self.strict:
            return
        if not any(self.matches(r.domain) for r in records):
            allowed = ", ".join(self.allowed_suffixes) or "(none)"
            raise DomainPolicyError(f"No cookie belongs to an allowed domain ({allowed})")


LENIENT = DomainPolicy()


# ----------------------------
# Expiration helpers
# ----------------------------
def _parse_date_string(text: str) -> Optional[datetime]:
    text = text.strip()
    if not text:
        return None
    dt = parse_iso_datetime(text)
    if dt is not None:
        return dt
    try:
        dt = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def record_expiration(record: CookieRecord) -> Optional[datetime]:
    """Absolute expiration of one cookie, or None for session cookies."""
    if record.expiration_date is not None:
        try:
            return datetime.fromtimestamp(record.expiration_date, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if record.expires:
        return _parse_date_string(record.expires)
    return None


def compute_earliest_expiration(records: Iterable[CookieRecord]) -> Optional[datetime]:
    """Minimum expiration across all records that carry one."""
    found = [e for e in (record_expiration(r) for r in records) if e is not None]
    return min(found) if found else None


# ----------------------------
# Parsing / validation
# ----------------------------
def parse_cookie_text(raw: Union[str, bytes], policy: DomainPolicy = LENIENT) -> CookieSet:
    """Validate exported cookie JSON and build a CookieSet. Fails fast."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(f"Input is not UTF-8 text: {e}") from e

    if not raw or not raw.strip():
        raise EmptyError("No cookie data provided")

    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})") from e

    if not isinstance(data, list):
        raise ShapeError(f"Expected a JSON array of cookies, got {type(data).__name__}")
    if not data:
        raise EmptyError("Cookie list is empty")

    records: List[CookieRecord] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise SchemaError(f"Cookie #{i} is not an object")
        for f in REQUIRED_COOKIE_FIELDS:
            if not isinstance(item.get(f), str):
                raise SchemaError(f"Cookie #{i} is missing string field '{f}'")
        records.append(CookieRecord.from_dict(item))

    policy.check(records)
    return CookieSet(records=tuple(records), expires_at=compute_earliest_expiration(records))


def cookie_set_from_list(items: List[dict], name: str = "") -> CookieSet:
    """Build a CookieSet from already-decoded rows (remote store payloads)."""
    cs = parse_cookie_text(json.dumps(items))
    return CookieSet(records=cs.records, name=name, expires_at=cs.expires_at)


# ----------------------------
# Persistence
# ----------------------------
class CookieStore:
    """Owns the on-disk cookie set. Every write is a full, atomic overwrite."""

    def __init__(self, path: Path, policy: DomainPolicy = LENIENT):
        self.path = Path(path)
        self.policy = policy

    def has_valid_cookie_set(self) -> bool:
        try:
            if not self.path.exists():
                return False
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return isinstance(data, list) and len(data) > 0
        except Exception:
            return False

    def load(self) -> Optional[CookieSet]:
        if not self.has_valid_cookie_set():
            return None
        try:
            return parse_cookie_text(self.path.read_text(encoding="utf-8"))
        except Exception as e:
            log.warning("Persisted cookie file %s is not usable: %s", self.path, e)
            return None

    def _write_atomic(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".cookies-", suffix=".tmp", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, self.path)
        except BaseException:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise

    def save(self, cookie_set: CookieSet) -> None:
        self._write_atomic(json.dumps(cookie_set.to_list(), indent=2, ensure_ascii=False))
        log.info("Saved %d cookies to %s", len(cookie_set), self.path)

    def import_from_source(self, raw: Union[str, bytes]) -> CookieSet:
        cookie_set = parse_cookie_text(raw, self.policy)
        self.save(cookie_set)
        return cookie_set

    def import_from_file(self, source: Path) -> CookieSet:
        try:
            raw = Path(source).read_bytes()
        except OSError as e:
            raise ParseError(f"Cannot read {source}: {e}") from e
        return self.import_from_source(raw)

    def compute_earliest_expiration(self, cookie_set: Optional[CookieSet] = None) -> Optional[datetime]:
        if cookie_set is None:
            cookie_set = self.load()
        if cookie_set is None:
            return None
        return compute_earliest_expiration(cookie_set.records)

    def clear(self) -> None:
        try:
            self.path.unlink()
            log.info("Deleted %s", self.path)
        except FileNotFoundError:
            pass

    def invalidate(self) -> None:
        """Overwrite the file with an empty set (for when it cannot be deleted)."""
        self._write_atomic("[]")
        log.info("Emptied %s", self.path)
