#===============================================================================
#  Web Kiosk Shell | constants.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  Central place for window sizing, theme colors, and file/table naming
#  conventions.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

APP_TITLE = "Web Kiosk"
ADMIN_TITLE = "Web Kiosk - Admin"

COOKIES_FILE_NAME = "cookies.json"
SETTINGS_FILE_NAME = "kiosk_settings.json"
DATA_DIR_NAME = ".kiosk"
LOG_FILE_NAME = "kiosk.log"
WELCOME_RESOURCE = "welcome.html"

DEFAULT_TARGET_URL = "https://example.com/"
DEFAULT_WINDOW_SIZE = (1280, 800)

# Clean Chrome User-Agent (no QtWebEngine or app token)
CHROME_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/144.0.0.0 Safari/537.36"
)

# --- Remote table store ---
DEFAULT_TABLES = {
    "cookies": "cookies",
    "app_config": "app_config",
    "superusers": "superusers",
}
DEFAULT_REMOTE_TIMEOUT = 15

# --- Theme ---
ADMIN_BG = "#101010"
COLOR_VALID = "#34a853"
COLOR_WARNING = "#fbbc05"
COLOR_EXPIRED = "#ea4335"
COLOR_UNKNOWN = "#888888"

BUTTON_BLUE = ("#4285f4", "#3367d6")
BUTTON_RED = ("#ea4335", "#c5221f")
BUTTON_GREEN = ("#34a853", "#2d8e47")
