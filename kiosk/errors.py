#===============================================================================
#  Web Kiosk Shell | errors.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-12
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  Error taxonomy for cookie import, session application and the remote store.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations


class KioskError(Exception):
    """Base class for errors raised by the shell."""
    kind = "error"


class CookieImportError(KioskError):
    """Cookie import was rejected. Nothing was persisted or applied."""
    kind = "import"


class ParseError(CookieImportError):
    kind = "parse"


class ShapeError(CookieImportError):
    kind = "shape"


class EmptyError(CookieImportError):
    kind = "empty"


class SchemaError(CookieImportError):
    kind = "schema"


class DomainPolicyError(CookieImportError):
    kind = "domain_policy"


class ApplyError(KioskError):
    """A single cookie could not be written into the live session (non-fatal)."""
    kind = "apply"

    def __init__(self, cookie_name: str, message: str = ""):
        self.cookie_name = cookie_name
        super().__init__(message or f"Failed to set cookie {cookie_name}")


class RemoteError(KioskError):
    """Any failure talking to the hosted table store. The cause is opaque to callers."""
    kind = "remote"
