#===============================================================================
#  Web Kiosk Shell  |  Desktop shell for a single hosted web application
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  Loads one third-party web application in an embedded browser and signs in
#  with session cookies exported from a regular browser.
#  Supports:
#    - Cookie import from clipboard (Paste button) or file (Ctrl+O)
#    - Persisted cookie set (.kiosk/cookies.json) re-applied on startup
#    - Switch account: wipes cookies, web storage, HTTP cache and the file
#    - Overlay on the hosted page (hidden controls + floating buttons)
#    - Admin panel (Ctrl+Shift+A) over a Supabase project: cookie sets,
#      app configs, admin accounts
#
#  Folder Conventions
#  ------------------
#    ./.env                    -> SUPABASE_URL / SUPABASE_ANON_KEY / KIOSK_*
#    ./kiosk_settings.json     -> target URL, domain allow-list, window size
#    ./.kiosk/                 -> cookies.json, browser profile, cache, logs
#
#  Copyright & License Notes
#  -------------------------
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#
#  This source code is provided "AS IS", without warranty of any kind, express
#  or implied, including but not limited to the warranties of merchantability,
#  fitness for a particular purpose, and noninfringement.
#
#  Third-Party Components
#  ----------------------
#  This project uses third-party libraries (e.g., PySide6, requests, bcrypt)
#  which are licensed separately by their respective authors. Ensure compliance
#  with their license terms when distributing this software.
#===============================================================================

import sys

from kiosk.app import main

if __name__ == "__main__":
    sys.exit(main())
