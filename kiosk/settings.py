#===============================================================================
#  Web Kiosk Shell | settings.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  Load/save of persistent shell settings (kiosk_settings.json) merged with
#  environment overrides (.env) into the shell and remote-store configs.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from dotenv import load_dotenv

from .constants import (
    CHROME_USER_AGENT,
    DEFAULT_REMOTE_TIMEOUT,
    DEFAULT_TABLES,
    DEFAULT_TARGET_URL,
    DEFAULT_WINDOW_SIZE,
    SETTINGS_FILE_NAME,
)
from .cookie_store import DomainPolicy
from .page_rules import UiRuleSet, default_rule_set

log = logging.getLogger(__name__)

TRUTHY = {"1", "true", "yes", "on"}


def default_settings() -> Dict[str, Any]:
    return {
        "target_url": DEFAULT_TARGET_URL,
        "domain_suffixes": [],          # e.g. ["google.com"]
        "strict_domains": False,        # require a cookie on one of domain_suffixes
        "user_agent": CHROME_USER_AGENT,
        "tables": dict(DEFAULT_TABLES),
        "window_size": list(DEFAULT_WINDOW_SIZE),
    }


def load_settings(settings_path: Path) -> Dict[str, Any]:
    """Load settings from disk (or create defaults)."""
    d = default_settings()
    if not settings_path.exists():
        return d
    try:
        data = json.loads(settings_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("settings root must be an object")
        for k in d:
            if k not in data:
                data[k] = d[k]
        return data
    except Exception as e:
        log.warning("Ignoring unreadable settings file %s: %s", settings_path, e)
        return d


def save_settings(settings_path: Path, settings: Dict[str, Any]) -> None:
    """Persist settings to disk."""
    settings_path.write_text(json.dumps(settings, indent=2), encoding="utf-8")


# ----------------------------
# Typed views
# ----------------------------
@dataclass(frozen=True)
class ShellConfig:
    """Everything that used to differ between the forked shell variants."""
    target_url: str = DEFAULT_TARGET_URL
    domain_policy: DomainPolicy = field(default_factory=DomainPolicy)
    ui_rules: UiRuleSet = field(default_factory=default_rule_set)
    user_agent: str = CHROME_USER_AGENT
    window_size: Tuple[int, int] = DEFAULT_WINDOW_SIZE

    def with_target_url(self, url: str) -> "ShellConfig":
        return ShellConfig(
            target_url=url,
            domain_policy=self.domain_policy,
            ui_rules=self.ui_rules,
            user_agent=self.user_agent,
            window_size=self.window_size,
        )


@dataclass(frozen=True)
class RemoteSettings:
    url: str
    anon_key: str
    tables: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TABLES))
    timeout: float = DEFAULT_REMOTE_TIMEOUT


def _env_flag(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() in TRUTHY


def _window_size(value: Any) -> Tuple[int, int]:
    try:
        w, h = int(value[0]), int(value[1])
        if w > 0 and h > 0:
            return w, h
    except (TypeError, ValueError, IndexError):
        pass
    return DEFAULT_WINDOW_SIZE


def load_shell_config(base_dir: Path, load_env: bool = True) -> ShellConfig:
    """Settings file, then environment. Environment wins."""
    if load_env:
        load_dotenv(base_dir / ".env")
    s = load_settings(base_dir / SETTINGS_FILE_NAME)

    target_url = os.getenv("KIOSK_TARGET_URL") or s.get("target_url") or DEFAULT_TARGET_URL

    suffixes = s.get("domain_suffixes") or []
    env_suffixes = os.getenv("KIOSK_DOMAIN_SUFFIXES")
    if env_suffixes:
        suffixes = [x.strip() for x in env_suffixes.split(",") if x.strip()]

    strict = _env_flag("KIOSK_STRICT_DOMAINS")
    if strict is None:
        strict = bool(s.get("strict_domains", False))

    return ShellConfig(
        target_url=target_url,
        domain_policy=DomainPolicy(allowed_suffixes=tuple(suffixes), strict=strict),
        user_agent=s.get("user_agent") or CHROME_USER_AGENT,
        window_size=_window_size(s.get("window_size")),
    )


def load_remote_settings(base_dir: Path, load_env: bool = True) -> Optional[RemoteSettings]:
    """None when SUPABASE_URL or SUPABASE_ANON_KEY is missing (remote features off)."""
    if load_env:
        load_dotenv(base_dir / ".env")
    url = (os.getenv("SUPABASE_URL") or "").strip()
    key = (os.getenv("SUPABASE_ANON_KEY") or "").strip()
    if not url or not key:
        return None

    s = load_settings(base_dir / SETTINGS_FILE_NAME)
    tables = dict(DEFAULT_TABLES)
    if isinstance(s.get("tables"), dict):
        tables.update({k: str(v) for k, v in s["tables"].items() if v})

    try:
        timeout = float(os.getenv("KIOSK_REMOTE_TIMEOUT") or DEFAULT_REMOTE_TIMEOUT)
    except ValueError:
        timeout = DEFAULT_REMOTE_TIMEOUT

    return RemoteSettings(url=url, anon_key=key, tables=tables, timeout=timeout)
