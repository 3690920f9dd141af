"""
Engine configuration: single source of truth for numeric precision,
tolerances and the default degenerate-divisor policy.

Import from here in all services rather than hardcoding values.
"""
from __future__ import annotations

import os


# ── Decimal arithmetic ────────────────────────────────────────────────────────
# Precision of the local decimal context every calculator runs under.
# 34 digits = IEEE 754 decimal128, comfortably above any persisted Numeric column.
DECIMAL_PRECISION: int = 34


# ── Reconciliation ────────────────────────────────────────────────────────────
# Explosion grand total vs Σ BoQ summary totals (relative tolerance).
CONSISTENCY_REL_TOL: float = 1e-6


# ── Degenerate divisor ────────────────────────────────────────────────────────
# What to do when an equipment's depreciation_total is zero:
#   "zero"   depreciation per unit is 0 and a warning is attached to the result
#   "raise"  DegenerateDivisorError
DIVISOR_POLICIES: tuple[str, ...] = ("zero", "raise")

DEFAULT_DIVISOR_POLICY: str = os.getenv("UNITRATE_DIVISOR_POLICY", "zero").strip().lower()
if DEFAULT_DIVISOR_POLICY not in DIVISOR_POLICIES:
    DEFAULT_DIVISOR_POLICY = "zero"


# ── Logging ───────────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json").lower()
