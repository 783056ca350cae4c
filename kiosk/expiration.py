#===============================================================================
#  Web Kiosk Shell | expiration.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-13
#  Last Update : 2026-02-13
#
#  Summary
#  -------
#  Human-readable expiration badge for stored cookie sets (admin panel).
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from .constants import COLOR_EXPIRED, COLOR_UNKNOWN, COLOR_VALID, COLOR_WARNING

WARNING_DAYS = 7
SECONDS_PER_DAY = 24 * 60 * 60

_FRACTION = re.compile(r"\.(\d+)")


@dataclass(frozen=True)
class ExpirationInfo:
    text: str
    status: str     # "unknown" | "expired" | "warning" | "valid"
    color: str

    def to_dict(self) -> dict:
        return asdict(self)


def parse_iso_datetime(text: str) -> Optional[datetime]:
    """ISO-8601 with a Z suffix or any number of fractional digits (PostgREST
    trims trailing zeros). Naive results are taken as UTC."""
    text = text.strip().replace("Z", "+00:00")
    # fromisoformat before 3.11 accepts exactly 3 or 6 fractional digits
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_datetime(value: Union[str, float, int, datetime, None]) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        dt = datetime.fromtimestamp(value, tz=timezone.utc)
    else:
        return parse_iso_datetime(str(value))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_expiration(
    expires_at: Union[str, float, int, datetime, None],
    now: Optional[datetime] = None,
) -> ExpirationInfo:
    exp = to_datetime(expires_at)
    if exp is None:
        return ExpirationInfo("Unknown", "unknown", COLOR_UNKNOWN)

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    if exp < now:
        return ExpirationInfo("Expired", "expired", COLOR_EXPIRED)

    days = math.ceil((exp - now).total_seconds() / SECONDS_PER_DAY)
    if days <= 1:
        return ExpirationInfo("Expires today", "warning", COLOR_WARNING)
    if days <= WARNING_DAYS:
        return ExpirationInfo(f"{days} days left", "warning", COLOR_WARNING)
    return ExpirationInfo(f"{days} days left", "valid", COLOR_VALID)
