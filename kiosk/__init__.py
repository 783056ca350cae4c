#===============================================================================
#  Web Kiosk Shell | __init__.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-14
#
#  Summary
#  -------
#  Embedded web app shell with cookie-based sign-in and a remote admin panel.
#  Importing the package does not import Qt.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

__version__ = "1.0.0"
