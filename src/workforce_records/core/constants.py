"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

HALF_DAY_THRESHOLD_HOURS = Decimal("4")
HOURS_QUANTUM = Decimal("0.01")
MONEY_QUANTUM = Decimal("0.01")

DEFAULT_SUMMARY_DAYS = 30

CALLER_ID_HEADER = "X-User-Id"
CALLER_ROLE_HEADER = "X-User-Role"
