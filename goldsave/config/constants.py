"""
Application constants.

Centralized constants for the commission and bonus engine.
"""

from decimal import Decimal

# ========================================================================
# REFERRAL COMMISSIONS
# ========================================================================

# Plans carry exactly this many per-level commission slots
MAX_REFERRAL_LEVELS = 10

# Payout precision (rupees, 2 decimal places)
MONEY_QUANTUM = Decimal("0.01")

# Gold weight precision for bonus payments (milligrams, 3 decimal places)
GOLD_MG_QUANTUM = Decimal("0.001")
MG_PER_GRAM = Decimal("1000")

# ========================================================================
# COMMISSION WORKER
# ========================================================================

COMMISSION_BATCH_LIMIT = 50  # Jobs fetched per cycle
STORE_TIMEOUT_SECONDS = 10.0  # Single store round-trip
TRANSACTION_TIMEOUT_SECONDS = 30.0  # Whole payout transaction
COMMISSION_CYCLE_TIME_LIMIT_MS = 600_000  # Dramatiq actor time limit (10 min)

# Truncate last_error to keep job rows small
LAST_ERROR_MAX_LENGTH = 2000
