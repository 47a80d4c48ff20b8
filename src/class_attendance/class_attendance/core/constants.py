"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Institution-local time is IST (+05:30).
DEFAULT_UTC_OFFSET_MINUTES = 330
DEFAULT_SWEEP_COOLDOWN_SECONDS = 3600
DEFAULT_GLOBAL_PIN = "1945"
DEFAULT_API_PREFIX = "/api"

# Ledger sentinel for admin overrides that match no staff row.
ADMIN_STAFF_ID = 0
NO_SCHEDULE_ID = 0

NOT_AVAILABLE = "N/A"
UNASSIGNED_YEAR = "Unassigned"

# Most senior first.
RANK_ORDER = ("SUO", "UO", "CSM", "CQMS", "SGT", "CPL", "L/CPL", "CDT")
