#===============================================================================
#  Web Kiosk Shell | profile_storage.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-15
#  Last Update : 2026-02-15
#
#  Summary
#  -------
#  On-disk web storage of the browser profile (Local Storage, IndexedDB, ...).
#  Chromium keeps those files open while the profile is live, so a reset only
#  schedules their removal; it happens at the next startup, before the profile
#  is created.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List

log = logging.getLogger(__name__)

PROFILE_DIR_NAME = "profile"
CACHE_DIR_NAME = "cache"
WIPE_MARKER = ".wipe-storage"

# Per-origin web storage kept by Chromium under the persistent storage path
STORAGE_SUBDIRS = (
    "Local Storage",
    "Session Storage",
    "IndexedDB",
    "Service Worker",
    "databases",
    "File System",
)


def remove_storage_dirs(root: Path) -> List[str]:
    """Best-effort removal. Returns "<name>: <error>" for each directory left behind."""
    failed = []
    for name in STORAGE_SUBDIRS:
        target = root / name
        if not target.exists():
            continue
        try:
            shutil.rmtree(target)
        except OSError as e:
            failed.append(f"{name}: {e}")
    return failed


def schedule_wipe(root: Path) -> None:
    root.mkdir(parents=True, exist_ok=True)
    (root / WIPE_MARKER).write_text("pending\n", encoding="utf-8")
    log.info("Web storage under %s will be removed at next startup", root)


def wipe_pending(root: Path) -> bool:
    return (root / WIPE_MARKER).exists()


def purge_pending_wipe(root: Path) -> bool:
    """Run a scheduled wipe. True when one ran and finished."""
    if not wipe_pending(root):
        return False
    failed = remove_storage_dirs(root)
    if failed:
        # marker stays, next startup tries again
        log.warning("Could not remove web storage (%s)", "; ".join(failed))
        return False
    (root / WIPE_MARKER).unlink()
    log.info("Removed web storage under %s", root)
    return True
