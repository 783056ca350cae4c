#===============================================================================
#  Web Kiosk Shell | models.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  Shared data models: cookie records/sets, app configs and admin accounts.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class SameSite(str, Enum):
    NO_RESTRICTION = "no_restriction"
    LAX = "lax"
    STRICT = "strict"
    UNSPECIFIED = "unspecified"

    @classmethod
    def parse(cls, value: Any) -> "SameSite":
        if isinstance(value, SameSite):
            return value
        text = str(value or "").strip().lower()
        # Chrome's cookie API says "none", the extension exports say "no_restriction"
        if text in ("", "none"):
            return cls.NO_RESTRICTION
        try:
            return cls(text)
        except ValueError:
            return cls.UNSPECIFIED


REQUIRED_COOKIE_FIELDS = ("domain", "name", "value")


@dataclass(frozen=True)
class CookieRecord:
    """One HTTP cookie in browser-extension export shape."""
    domain: str
    name: str
    value: str
    path: str = "/"
    secure: bool = False
    http_only: bool = False
    same_site: SameSite = SameSite.NO_RESTRICTION
    expiration_date: Optional[float] = None   # epoch seconds
    expires: Optional[str] = None             # date string, some exporters use this instead

    @property
    def host(self) -> str:
        return self.domain[1:] if self.domain.startswith(".") else self.domain

    def target_url(self, scheme: str = "https") -> str:
        return f"{scheme}://{self.host}{self.path or '/'}"

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "domain": self.domain,
            "name": self.name,
            "value": self.value,
            "path": self.path,
            "secure": self.secure,
            "httpOnly": self.http_only,
            "sameSite": self.same_site.value,
        }
        if self.expiration_date is not None:
            d["expirationDate"] = self.expiration_date
        if self.expires:
            d["expires"] = self.expires
        return d

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "CookieRecord":
        exp = d.get("expirationDate")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            exp = None
        expires = d.get("expires")
        return CookieRecord(
            domain=d["domain"],
            name=d["name"],
            value=d["value"],
            path=d.get("path") or "/",
            secure=bool(d.get("secure", False)),
            http_only=bool(d.get("httpOnly", False)),
            same_site=SameSite.parse(d.get("sameSite")),
            expiration_date=float(exp) if exp is not None else None,
            expires=expires if isinstance(expires, str) and expires.strip() else None,
        )


@dataclass(frozen=True)
class CookieSet:
    """The complete, ordered collection of cookies persisted as one unit."""
    records: Tuple[CookieRecord, ...] = ()
    name: str = ""
    expires_at: Optional[datetime] = None

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def to_list(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self.records]


@dataclass
class AppConfig:
    app_url: str
    app_name: str = "Web App"
    is_active: bool = True
    id: Optional[int] = None
    created_at: Optional[str] = None

    @staticmethod
    def from_row(row: Dict[str, Any]) -> "AppConfig":
        return AppConfig(
            id=row.get("id"),
            app_name=row.get("app_name") or "Web App",
            app_url=row.get("app_url") or "",
            is_active=bool(row.get("is_active", True)),
            created_at=row.get("created_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "app_name": self.app_name,
            "app_url": self.app_url,
            "is_active": self.is_active,
            "created_at": self.created_at,
        }


@dataclass
class AdminAccount:
    """An admin panel user. The password hash never leaves the remote bridge."""
    username: str
    email: Optional[str] = None
    is_active: bool = True
    id: Optional[int] = None
    created_at: Optional[str] = None

    @staticmethod
    def from_row(row: Dict[str, Any]) -> "AdminAccount":
        return AdminAccount(
            id=row.get("id"),
            username=row.get("username") or "",
            email=row.get("email"),
            is_active=bool(row.get("is_active", True)),
            created_at=row.get("created_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "is_active": self.is_active,
            "created_at": self.created_at,
        }
