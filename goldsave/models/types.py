"""
Standard type definitions for database models.

Provides consistent types for monetary and portable JSON fields across all models.
"""

from sqlalchemy import DECIMAL, JSON, Text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB

# Standard money type for rupee amounts, balances, commissions
# Precision: 18 digits total, 2 after decimal point
MoneyType = DECIMAL(18, 2)

# Gold rate per gram (rupees)
RateType = DECIMAL(18, 4)

# Gold weight in milligrams
GoldWeightType = DECIMAL(18, 3)

# JSON payloads: JSONB on PostgreSQL, plain JSON elsewhere
JsonType = JSON().with_variant(JSONB(), "postgresql")

# Text arrays (per-level commission tables): native ARRAY on PostgreSQL
TextListType = JSON().with_variant(ARRAY(Text()), "postgresql")
